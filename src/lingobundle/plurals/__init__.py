"""gettext plural rules: parsing, compilation and source generation.

Usage:
    >>> from lingobundle.plurals import parse_plural_forms, compile_expression
    >>>
    >>> rule = parse_plural_forms("nplurals=2; plural=(n != 1);")
    >>> evaluator = compile_expression(rule.expression)
    >>> evaluator(1), evaluator(5)
    (0, 1)
"""

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
from lingobundle.plurals.parser import (
    ExpressionParser,
    PluralRule,
    Token,
    parse_expression,
    parse_plural_forms,
    tokenize,
)
from lingobundle.plurals.compiler import (
    CompiledExpression,
    compile_expression,
    constant_evaluator,
    stack_depth,
)
from lingobundle.plurals.codegen import (
    generate_function,
    generate_source,
)

__all__ = [
    # AST
    "BinaryOp",
    "Conditional",
    "Expression",
    "IntegerLiteral",
    "Operator",
    "UnaryOp",
    "Variable",
    "references_variable",
    # Parser
    "ExpressionParser",
    "PluralRule",
    "Token",
    "parse_expression",
    "parse_plural_forms",
    "tokenize",
    # Compiler
    "CompiledExpression",
    "compile_expression",
    "constant_evaluator",
    "stack_depth",
    # Source generation
    "generate_function",
    "generate_source",
]
