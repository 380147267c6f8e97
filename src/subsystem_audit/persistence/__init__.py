"""Provenance tracking for audit runs."""

from subsystem_audit.persistence.provenance import ProvenanceTracker

__all__ = ["ProvenanceTracker"]
