"""Per-subsystem variant rule set.

Rules live in two files of a subsystem directory, each holding lines of the
form "<name> means <expression>":
- checkvariant_definitions: named sub-expressions usable by later lines
- checkvariant_rules: one predicate per variant code, in priority order

Prediction returns the first declared code whose predicate is satisfied.
"""

import re
from collections.abc import Iterator, Set

from subsystem_audit.rules.expression import Expression, RoleTerm, evaluate, role_terms
from subsystem_audit.rules.parser import ExpressionParser, RuleParseError

# Variant code reported when no rule matches
NO_MATCH = "-1"

STATEMENT_PATTERN = re.compile(r"^(\S+)\s+means\s+(.*)$", re.IGNORECASE)


def _statements(text: str, source: str) -> Iterator[tuple[str, str, str]]:
    """Yield (location, name, expression text) for each statement line."""
    for line_no, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        location = f"{source}, line {line_no}"
        match = STATEMENT_PATTERN.match(line)
        if match is None:
            raise RuleParseError(f"{location}: expected '<name> means <expression>'")
        yield location, match.group(1), match.group(2)


class VariantRuleSet:
    """Ordered mapping of variant codes to predicates."""

    def __init__(
        self,
        rules: dict[str, Expression] | None = None,
        bad_ids: Set[str] = frozenset(),
    ):
        self._rules: dict[str, Expression] = dict(rules or {})
        self.bad_ids: list[str] = sorted(bad_ids)

    @classmethod
    def compile(
        cls,
        abbreviations: dict[str, str | None],
        definitions_text: str = "",
        rules_text: str = "",
        source: str = "",
    ) -> "VariantRuleSet":
        """Compile rule text into a rule set.

        Args:
            abbreviations: Map of role abbreviation to role id (None when the
                role is not in the role dictionary)
            definitions_text: Contents of checkvariant_definitions
            rules_text: Contents of checkvariant_rules
            source: Subsystem name used in error messages

        Returns:
            Compiled VariantRuleSet

        Raises:
            RuleParseError: If any line is malformed or a name is declared twice

        Notes:
            - Identifiers resolve to definitions first, then abbreviations
            - Unknown identifiers are collected as bad ids and never match
        """
        definitions: dict[str, Expression] = {}
        bad_ids: set[str] = set()

        def resolve(identifier: str) -> Expression:
            if identifier in definitions:
                return definitions[identifier]
            if identifier in abbreviations:
                return RoleTerm(identifier, abbreviations[identifier])
            bad_ids.add(identifier)
            return RoleTerm(identifier, None)

        parser = ExpressionParser(resolve)

        def compile_block(text: str, block: str) -> dict[str, Expression]:
            compiled: dict[str, Expression] = {}
            for location, name, expression in _statements(text, f"{source} {block}".strip()):
                if name in compiled:
                    raise RuleParseError(f"{location}: '{name}' is defined twice")
                try:
                    compiled[name] = parser.parse(expression)
                except RuleParseError as e:
                    raise RuleParseError(f"{location}: {e}") from e
                if block == "definitions":
                    definitions[name] = compiled[name]
            return compiled

        compile_block(definitions_text, "definitions")
        rules = compile_block(rules_text, "rules")
        return cls(rules, bad_ids)

    @property
    def codes(self) -> list[str]:
        """Ruled variant codes in declaration order."""
        return list(self._rules)

    def has_rules(self) -> bool:
        return bool(self._rules)

    def is_ruled_code(self, code: str) -> bool:
        return code in self._rules

    def predict(self, role_ids: Set[str]) -> str:
        """Return the first variant code whose predicate holds, or NO_MATCH."""
        for code, expr in self._rules.items():
            if evaluate(expr, role_ids):
                return code
        return NO_MATCH

    def explain(self, code: str, role_ids: Set[str]) -> str:
        """Render the roles a variant's predicate tests as "found/missing".

        Both halves are comma-separated role labels in the order they first
        appear in the predicate. An unruled code explains to an empty string.
        """
        expr = self._rules.get(code)
        if expr is None:
            return ""
        found: list[str] = []
        missing: list[str] = []
        seen: set[str] = set()
        for term in role_terms(expr):
            if term.label in seen:
                continue
            seen.add(term.label)
            if term.role_id is not None and term.role_id in role_ids:
                found.append(term.label)
            else:
                missing.append(term.label)
        return ", ".join(found) + "/" + ", ".join(missing)
