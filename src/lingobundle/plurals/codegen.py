"""Render plural-expression trees as Python source.

Used when a bundle is emitted to disk: the generated module carries a
``plural_eval`` function whose body is produced here. The rendered code
calls the helpers in :mod:`lingobundle.arith`, so its results match
:func:`lingobundle.plurals.compiler.compile_expression` bit for bit.
"""

from __future__ import annotations

from lingobundle.plurals.ast import (
    BinaryOp,
    Conditional,
    Expression,
    IntegerLiteral,
    Operator,
    UnaryOp,
    Variable,
)
from lingobundle.plurals.compiler import compile_expression

# Names the generated code expects to find in its module namespace.
RUNTIME_HELPERS = ("wrap64", "div64", "mod64")

_ARITHMETIC_TEMPLATES = {
    Operator.ADD: "wrap64({left} + {right})",
    Operator.SUB: "wrap64({left} - {right})",
    Operator.MUL: "wrap64({left} * {right})",
    Operator.DIV: "div64({left}, {right})",
    Operator.MOD: "mod64({left}, {right})",
}


def generate_source(expr: Expression) -> str:
    """Return a Python expression over ``n`` equivalent to ``expr``.

    Raises:
        CompileError: If a divisor is a constant zero.
    """
    compile_expression(expr)
    return _render(expr)


def generate_function(expr: Expression | None, name: str = "plural_eval") -> str:
    """Return the source of a one-argument function evaluating ``expr``.

    A ``None`` expression yields a function returning 0.
    """
    if expr is None:
        return f"def {name}(n):\n    return 0\n"
    body = generate_source(expr)
    return f"def {name}(n):\n    n = wrap64(n)\n    return {body}\n"


def _render(expr: Expression) -> str:
    if isinstance(expr, IntegerLiteral):
        return str(expr.value)

    if isinstance(expr, Variable):
        return "n"

    if isinstance(expr, UnaryOp):
        return f"(1 if {_render(expr.operand)} == 0 else 0)"

    if isinstance(expr, Conditional):
        return (
            f"({_render(expr.then)} if {_render(expr.cond)} != 0 "
            f"else {_render(expr.else_)})"
        )

    if isinstance(expr, BinaryOp):
        left = _render(expr.left)
        right = _render(expr.right)
        if expr.op is Operator.OR:
            return f"(1 if {left} != 0 or {right} != 0 else 0)"
        if expr.op is Operator.AND:
            return f"(1 if {left} != 0 and {right} != 0 else 0)"
        if expr.op.is_comparison:
            return f"(1 if {left} {expr.op.symbol} {right} else 0)"
        return _ARITHMETIC_TEMPLATES[expr.op].format(left=left, right=right)

    raise TypeError(f"Unsupported expression node: {type(expr).__name__}")
