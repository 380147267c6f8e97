"""Recursive-descent parser for variant rule expressions.

Grammar (keywords are case-insensitive, "not" binds tightest, then "and",
then "or"):

    expr   := term ("or" term)*
    term   := factor ("and" factor)*
    factor := "not" factor | atom
    atom   := "(" expr ")" | N "of" "{" expr ("," expr)* "}" | IDENTIFIER
"""

import re
from collections.abc import Callable

from subsystem_audit.rules.expression import And, AtLeast, Expression, Not, Or

TOKEN_PATTERN = re.compile(r"[(){},]|[^\s(){},]+")
KEYWORDS = {"and", "or", "not", "of"}
PUNCTUATION = {"(", ")", "{", "}", ","}


class RuleParseError(ValueError):
    """Raised when a subsystem's rule text cannot be parsed."""


def tokenize(text: str) -> list[str]:
    return TOKEN_PATTERN.findall(text)


class ExpressionParser:
    """Parses one rule expression into an Expression tree.

    Identifiers are handed to `resolve`, which returns the expression they
    stand for (a role term or a previously defined sub-expression).
    """

    def __init__(self, resolve: Callable[[str], Expression]):
        self.resolve = resolve
        self._tokens: list[str] = []
        self._pos = 0

    def parse(self, text: str) -> Expression:
        self._tokens = tokenize(text)
        self._pos = 0
        if not self._tokens:
            raise RuleParseError("empty expression")
        expr = self._parse_or()
        if self._pos < len(self._tokens):
            raise RuleParseError(f"unexpected '{self._tokens[self._pos]}'")
        return expr

    def _peek(self) -> str | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise RuleParseError("unexpected end of expression")
        self._pos += 1
        return token

    def _expect(self, expected: str) -> None:
        token = self._next()
        if token.lower() != expected:
            raise RuleParseError(f"expected '{expected}' but found '{token}'")

    def _at_keyword(self, keyword: str) -> bool:
        token = self._peek()
        return token is not None and token.lower() == keyword

    def _parse_or(self) -> Expression:
        operands = [self._parse_and()]
        while self._at_keyword("or"):
            self._pos += 1
            operands.append(self._parse_and())
        return operands[0] if len(operands) == 1 else Or(tuple(operands))

    def _parse_and(self) -> Expression:
        operands = [self._parse_not()]
        while self._at_keyword("and"):
            self._pos += 1
            operands.append(self._parse_not())
        return operands[0] if len(operands) == 1 else And(tuple(operands))

    def _parse_not(self) -> Expression:
        if self._at_keyword("not"):
            self._pos += 1
            return Not(self._parse_not())
        return self._parse_atom()

    def _parse_atom(self) -> Expression:
        token = self._next()
        if token == "(":
            expr = self._parse_or()
            self._expect(")")
            return expr
        if token.isdigit() and self._at_keyword("of"):
            self._pos += 1
            return self._parse_threshold(int(token))
        if token in PUNCTUATION or token.lower() in KEYWORDS:
            raise RuleParseError(f"unexpected '{token}'")
        return self.resolve(token)

    def _parse_threshold(self, count: int) -> Expression:
        self._expect("{")
        members = [self._parse_or()]
        while self._peek() == ",":
            self._pos += 1
            members.append(self._parse_or())
        self._expect("}")
        if count < 1 or count > len(members):
            raise RuleParseError(
                f"threshold {count} is outside 1..{len(members)}"
            )
        return AtLeast(count, tuple(members))
