"""Compile plural-expression trees into Python closures.

Each node becomes a small closure taking the (already wrapped) count and
returning a 64-bit signed integer. The resulting tree of closures is
evaluated without re-inspecting the AST, which keeps ``plural_index``
cheap on hot lookup paths.

Semantics follow C on a 64-bit ``long``:
    - arithmetic wraps around on overflow
    - ``/`` and ``%`` truncate toward zero
    - ``&&`` and ``||`` short-circuit and yield 0 or 1
    - comparisons and ``!`` yield 0 or 1
"""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import Callable

from lingobundle.arith import div64, mod64, wrap64
from lingobundle.exceptions import CompileError
from lingobundle.plurals.ast import (
    BinaryOp,
    Conditional,
    Expression,
    IntegerLiteral,
    Operator,
    UnaryOp,
    Variable,
    references_variable,
)

Evaluator = Callable[[int], int]


_COMPARISONS: dict[Operator, Callable[[int, int], bool]] = {
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
    Operator.LT: operator.lt,
    Operator.LE: operator.le,
    Operator.GT: operator.gt,
    Operator.GE: operator.ge,
}

_ARITHMETIC: dict[Operator, Callable[[int, int], int]] = {
    Operator.ADD: lambda a, b: wrap64(a + b),
    Operator.SUB: lambda a, b: wrap64(a - b),
    Operator.MUL: lambda a, b: wrap64(a * b),
    Operator.DIV: div64,
    Operator.MOD: mod64,
}


@dataclass(frozen=True)
class CompiledExpression:
    """An executable plural expression.

    Attributes:
        function: Closure over a wrapped 64-bit count.
        max_stack_depth: Peak number of live temporaries while evaluating,
            for emitters that need to size an operand stack.
        expression: Source tree, None for constant evaluators.
    """

    function: Evaluator = field(repr=False)
    max_stack_depth: int
    expression: Expression | None = None

    def evaluate(self, n: int) -> int:
        """Evaluate for count ``n``; the input is wrapped to 64 bits first.

        Raises:
            DivideByZeroError: If a divisor evaluates to zero at run time.
        """
        return self.function(wrap64(n))

    __call__ = evaluate


def constant_evaluator(value: int = 0) -> CompiledExpression:
    """Evaluator returning ``value`` for every count."""
    value = wrap64(value)
    return CompiledExpression(function=lambda n: value, max_stack_depth=1)


def compile_expression(expr: Expression) -> CompiledExpression:
    """Compile an expression tree.

    Raises:
        CompileError: If a divisor is a constant subexpression equal to zero.
    """
    return CompiledExpression(
        function=_compile(expr),
        max_stack_depth=stack_depth(expr),
        expression=expr,
    )


def stack_depth(expr: Expression) -> int:
    """Peak count of simultaneously live intermediate values."""
    if isinstance(expr, (IntegerLiteral, Variable)):
        return 1
    if isinstance(expr, UnaryOp):
        return stack_depth(expr.operand)
    if isinstance(expr, BinaryOp):
        left = stack_depth(expr.left)
        right = stack_depth(expr.right)
        if expr.op in (Operator.OR, Operator.AND):
            # the left value is consumed by the branch before the right runs
            return max(left, right)
        return max(left, right + 1)
    return max(stack_depth(expr.cond), stack_depth(expr.then), stack_depth(expr.else_))


def check_divisor(divisor: Expression, evaluate: Evaluator) -> None:
    """Reject divisors that are constant and zero.

    Raises:
        CompileError: If ``divisor`` does not depend on ``n`` and is zero.
    """
    if references_variable(divisor):
        return
    if evaluate(0) == 0:
        raise CompileError(f"Division by constant zero: divisor '{divisor}' is always 0")


def _compile(expr: Expression) -> Evaluator:
    if isinstance(expr, IntegerLiteral):
        value = expr.value
        return lambda n: value

    if isinstance(expr, Variable):
        return lambda n: n

    if isinstance(expr, UnaryOp):
        operand = _compile(expr.operand)
        return lambda n: 1 if operand(n) == 0 else 0

    if isinstance(expr, BinaryOp):
        return _compile_binary(expr)

    if isinstance(expr, Conditional):
        cond = _compile(expr.cond)
        then = _compile(expr.then)
        else_ = _compile(expr.else_)
        return lambda n: then(n) if cond(n) != 0 else else_(n)

    raise CompileError(f"Unsupported expression node: {type(expr).__name__}")


def _compile_binary(expr: BinaryOp) -> Evaluator:
    left = _compile(expr.left)
    right = _compile(expr.right)
    op = expr.op

    if op is Operator.OR:
        return lambda n: 1 if left(n) != 0 or right(n) != 0 else 0

    if op is Operator.AND:
        return lambda n: 1 if left(n) != 0 and right(n) != 0 else 0

    if op in _COMPARISONS:
        compare = _COMPARISONS[op]
        return lambda n: 1 if compare(left(n), right(n)) else 0

    if op in (Operator.DIV, Operator.MOD):
        check_divisor(expr.right, right)

    arithmetic = _ARITHMETIC[op]
    return lambda n: arithmetic(left(n), right(n))
