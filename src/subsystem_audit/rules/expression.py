"""Expression tree for variant predicates.

Leaves test whether a role id is present in a role set; inner nodes combine
them with NOT, AND, OR and "at least N of". Evaluation is a pure function of
the expression and the role set.
"""

from collections.abc import Iterator, Set
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class RoleTerm:
    """Presence test for one subsystem role.

    Attributes:
        label: Identifier as written in the rule (role abbreviation)
        role_id: Role id tested; None when the identifier names no known
            role, in which case the term is never satisfied
    """
    label: str
    role_id: str | None = None


@dataclass(frozen=True)
class Not:
    operand: "Expression"


@dataclass(frozen=True)
class And:
    operands: tuple["Expression", ...]


@dataclass(frozen=True)
class Or:
    operands: tuple["Expression", ...]


@dataclass(frozen=True)
class AtLeast:
    """Satisfied when at least `count` of the operands are satisfied."""
    count: int
    operands: tuple["Expression", ...]


Expression = Union[RoleTerm, Not, And, Or, AtLeast]


def evaluate(expr: Expression, role_ids: Set[str]) -> bool:
    """Evaluate an expression against a set of present role ids."""
    if isinstance(expr, RoleTerm):
        return expr.role_id is not None and expr.role_id in role_ids
    if isinstance(expr, Not):
        return not evaluate(expr.operand, role_ids)
    if isinstance(expr, And):
        return all(evaluate(op, role_ids) for op in expr.operands)
    if isinstance(expr, Or):
        return any(evaluate(op, role_ids) for op in expr.operands)
    if isinstance(expr, AtLeast):
        satisfied = sum(1 for op in expr.operands if evaluate(op, role_ids))
        return satisfied >= expr.count
    raise TypeError(f"Unknown expression node: {expr!r}")


def role_terms(expr: Expression) -> Iterator[RoleTerm]:
    """Yield the leaves of an expression, left to right."""
    if isinstance(expr, RoleTerm):
        yield expr
    elif isinstance(expr, Not):
        yield from role_terms(expr.operand)
    else:
        for op in expr.operands:
            yield from role_terms(op)
