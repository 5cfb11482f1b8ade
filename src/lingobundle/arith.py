"""Fixed-width integer arithmetic used by plural evaluators.

Plural expressions are evaluated in a 64-bit two's-complement domain.
Python integers are unbounded, so every arithmetic result is folded back
into range with ``wrap64``. Generated bundle modules import these helpers
too, which keeps the in-memory and emitted evaluators bit-identical.
"""

from __future__ import annotations

from lingobundle.exceptions import DivideByZeroError

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1


def wrap64(value: int) -> int:
    """Fold an integer into the signed 64-bit range."""
    value &= _MASK64
    if value > INT64_MAX:
        value -= 1 << 64
    return value


def to_int32(value: int) -> int:
    """Keep the low 32 bits of ``value`` as a signed integer."""
    value &= _MASK32
    if value >= 1 << 31:
        value -= 1 << 32
    return value


def div64(left: int, right: int) -> int:
    """Divide, truncating toward zero.

    Raises:
        DivideByZeroError: If ``right`` is zero.
    """
    if right == 0:
        raise DivideByZeroError("division by zero in plural expression")
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return wrap64(quotient)


def mod64(left: int, right: int) -> int:
    """Remainder with the sign of the dividend.

    Raises:
        DivideByZeroError: If ``right`` is zero.
    """
    if right == 0:
        raise DivideByZeroError("modulo by zero in plural expression")
    remainder = abs(left) % abs(right)
    return -remainder if left < 0 else remainder
