"""Variant rules: boolean predicates over role presence, one per variant code."""

from subsystem_audit.rules.expression import (
    And,
    AtLeast,
    Expression,
    Not,
    Or,
    RoleTerm,
    evaluate,
    role_terms,
)
from subsystem_audit.rules.parser import ExpressionParser, RuleParseError, tokenize
from subsystem_audit.rules.ruleset import NO_MATCH, VariantRuleSet

__all__ = [
    "And",
    "AtLeast",
    "Expression",
    "Not",
    "Or",
    "RoleTerm",
    "evaluate",
    "role_terms",
    "ExpressionParser",
    "RuleParseError",
    "tokenize",
    "NO_MATCH",
    "VariantRuleSet",
]
