"""Parsing of functional-assignment strings into role names.

A functional assignment may name several roles:
- "A / B" for a multi-domain protein
- "A @ B" for a protein with several functions
- "A; B" for an ambiguous assignment
Anything after a "#" or "!" is a curator comment and is ignored.
"""

import re

COMMENT_PATTERN = re.compile(r"\s*[#!].*$")
ROLE_SEPARATOR = re.compile(r"\s+[@/]\s+|\s*;\s+")
EC_NUMBER_PATTERN = re.compile(r"\(\s*(?:EC|TC)\s[^)]*\)", re.IGNORECASE)
NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def clean_role_text(text: str) -> str:
    """Strip the trailing comment and surrounding whitespace from a role name."""
    return COMMENT_PATTERN.sub("", text).strip()


def normalize_role_name(text: str) -> str:
    """
    Compute the synonym-dictionary key for a role name.

    Removes comments and EC/TC number parentheticals, lowercases, and
    collapses every run of punctuation or whitespace to a single space.

    Args:
        text: Raw role name

    Returns:
        Normalized key (empty string if nothing meaningful remains)

    Examples:
        >>> normalize_role_name("Ferric Uptake Protein (EC 3.6.3.30) # putative")
        'ferric uptake protein'
    """
    text = EC_NUMBER_PATTERN.sub(" ", clean_role_text(text))
    return NON_ALPHANUMERIC.sub(" ", text.lower()).strip()


def roles_of_function(function: str | None) -> list[str]:
    """
    Split a functional assignment into its constituent role names.

    Args:
        function: Functional-assignment text (may be None or empty)

    Returns:
        Role names in order of appearance, comment removed
    """
    if not function:
        return []
    cleaned = COMMENT_PATTERN.sub("", function)
    return [role.strip() for role in ROLE_SEPARATOR.split(cleaned) if role.strip()]
