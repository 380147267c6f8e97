"""Classification of predicted vs. expected variant codes."""

import re
from dataclasses import dataclass
from enum import Enum

from subsystem_audit.corpus import Subsystem
from subsystem_audit.validation.role_sets import RoleSets

# Codes for dormant subsystem states: negative, zero-prefixed, or "dirty"
INACTIVE_CODE = re.compile(r"-.*|0.*|dirty.*")
# Codes in the current curation vocabulary; anything else is an old-style code
NEW_STYLE_CODE = re.compile(r"0|-1|dirty.*|likely.*|lookat.*|active.*|inactive.*")


def is_inactive_code(code: str) -> bool:
    return INACTIVE_CODE.fullmatch(code) is not None


def is_new_style_code(code: str) -> bool:
    return NEW_STYLE_CODE.fullmatch(code) is not None


class Outcome(str, Enum):
    """Result of comparing the spreadsheet variant with the rule prediction."""
    NO_RULES = "no_rules"
    MATCH = "match"
    INVALID = "invalid"
    MISMATCH_NAMING = "mismatch_naming"
    MISMATCH_MINOR = "mismatch_minor"
    MISMATCH_SERIOUS = "mismatch_serious"

    @property
    def is_bad_variant(self) -> bool:
        """True when a ruled expected variant was not the one predicted."""
        return self in (
            Outcome.MISMATCH_NAMING,
            Outcome.MISMATCH_MINOR,
            Outcome.MISMATCH_SERIOUS,
        )


@dataclass(frozen=True)
class Classification:
    """Classification of one (subsystem, genome) pair.

    Attributes:
        outcome: Classification outcome
        expected: Variant code from the spreadsheet
        actual: Variant code predicted from the lenient role set
        strict_actual: Prediction from the strict role set (mismatches only)
        expected_roles: explain() of the expected variant (serious only)
        actual_roles: explain() of the predicted variant (serious only)
    """
    outcome: Outcome
    expected: str
    actual: str | None = None
    strict_actual: str | None = None
    expected_roles: str = ""
    actual_roles: str = ""

    @property
    def pair(self) -> tuple[str, str | None]:
        return (self.expected, self.actual)


def classify(subsystem: Subsystem, expected: str, role_sets: RoleSets) -> Classification:
    """
    Classify a genome's spreadsheet variant against the subsystem's rules.

    Steps:
    1. No rules: NO_RULES (reported as a missing-rules subsystem)
    2. Predict from the lenient role set ("-1" when nothing matches)
    3. Prediction equals expected: MATCH
    4. Expected code has no rule: INVALID
    5. Strict role set predicts expected: MISMATCH_NAMING
    6. Subsystem has bad rule ids, or both codes inactive: MISMATCH_MINOR
    7. Otherwise MISMATCH_SERIOUS, with role analyses for the detail report

    Args:
        subsystem: Subsystem whose rules are applied
        expected: Variant code recorded in the spreadsheet
        role_sets: Lenient and strict role sets for the genome

    Returns:
        Classification record
    """
    rules = subsystem.rules
    if not rules.has_rules():
        return Classification(Outcome.NO_RULES, expected)

    actual = rules.predict(role_sets.lenient)
    if actual == expected:
        return Classification(Outcome.MATCH, expected, actual)

    if not rules.is_ruled_code(expected):
        return Classification(Outcome.INVALID, expected, actual)

    strict_actual = rules.predict(role_sets.strict)
    if strict_actual == expected:
        return Classification(Outcome.MISMATCH_NAMING, expected, actual, strict_actual)

    if subsystem.bad_id_count > 0 or (is_inactive_code(expected) and is_inactive_code(actual)):
        return Classification(Outcome.MISMATCH_MINOR, expected, actual, strict_actual)

    return Classification(
        Outcome.MISMATCH_SERIOUS,
        expected,
        actual,
        strict_actual,
        expected_roles=rules.explain(expected, role_sets.lenient),
        actual_roles=rules.explain(actual, role_sets.lenient),
    )
