"""Expression tree for gettext plural rules.

Nodes are frozen dataclasses so a parsed rule can be shared freely
between compilers and threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Operator(Enum):
    """Operators of the plural-expression grammar, keyed by source symbol."""

    NOT = "!"
    OR = "||"
    AND = "&&"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_logical(self) -> bool:
        return self in (Operator.OR, Operator.AND, Operator.NOT)

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISONS


_COMPARISONS = frozenset({
    Operator.EQ,
    Operator.NE,
    Operator.LT,
    Operator.LE,
    Operator.GT,
    Operator.GE,
})


@dataclass(frozen=True)
class IntegerLiteral:
    """A decimal integer constant."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Variable:
    """The count ``n``, the only input of a plural expression."""

    name: str = "n"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnaryOp:
    """Prefix operator; logical-not is the only one in the grammar."""

    op: Operator
    operand: "Expression"

    def __str__(self) -> str:
        return f"{self.op.symbol}{self.operand}"


@dataclass(frozen=True)
class BinaryOp:
    """Infix operator application."""

    op: Operator
    left: "Expression"
    right: "Expression"

    def __str__(self) -> str:
        return f"({self.left} {self.op.symbol} {self.right})"


@dataclass(frozen=True)
class Conditional:
    """``cond ? then : else_``."""

    cond: "Expression"
    then: "Expression"
    else_: "Expression"

    def __str__(self) -> str:
        return f"({self.cond} ? {self.then} : {self.else_})"


Expression = Union[IntegerLiteral, Variable, UnaryOp, BinaryOp, Conditional]


def references_variable(expr: Expression) -> bool:
    """Return True if ``n`` occurs anywhere in ``expr``."""
    if isinstance(expr, Variable):
        return True
    if isinstance(expr, IntegerLiteral):
        return False
    if isinstance(expr, UnaryOp):
        return references_variable(expr.operand)
    if isinstance(expr, BinaryOp):
        return references_variable(expr.left) or references_variable(expr.right)
    return (
        references_variable(expr.cond)
        or references_variable(expr.then)
        or references_variable(expr.else_)
    )
