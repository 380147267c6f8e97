"""Subsystem variant rule audit for CoreSEED-style annotation databases."""

__version__ = "0.1.0"
