"""Checked fixed-width integer arithmetic.

Amounts are unsigned 64-bit quantities. Ratios are computed in a 128-bit
intermediate and narrowed back with wrap-around semantics, the same way a
narrowing cast behaves, so that boundary behaviour is reproducible.
"""
from __future__ import annotations

from .errors import LendingError, NumericalOverflowError

U8_BITS = 8
U64_BITS = 64
U128_BITS = 128

U8_MAX = (1 << U8_BITS) - 1
U64_MAX = (1 << U64_BITS) - 1
U128_MAX = (1 << U128_BITS) - 1


def max_value(bits: int) -> int:
    return (1 << bits) - 1


def require_u64(amount: int) -> int:
    """Reject anything that is not an integer in ``[0, U64_MAX]``."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise NumericalOverflowError(f"amount must be an integer, got {amount!r}")
    if amount < 0 or amount > U64_MAX:
        raise NumericalOverflowError(f"amount {amount} is outside the u64 range")
    return amount


def checked_add(
    a: int,
    b: int,
    bits: int = U64_BITS,
    error: type[LendingError] = NumericalOverflowError,
) -> int:
    result = a + b
    if result > max_value(bits):
        raise error(f"{a} + {b} overflows u{bits}")
    return result


def checked_sub(
    a: int,
    b: int,
    bits: int = U64_BITS,
    error: type[LendingError] = NumericalOverflowError,
) -> int:
    result = a - b
    if result < 0:
        raise error(f"{a} - {b} underflows u{bits}")
    return result


def checked_mul(
    a: int,
    b: int,
    bits: int = U128_BITS,
    error: type[LendingError] = NumericalOverflowError,
) -> int:
    result = a * b
    if result > max_value(bits):
        raise error(f"{a} * {b} overflows u{bits}")
    return result


def checked_div(
    a: int,
    b: int,
    error: type[LendingError] = NumericalOverflowError,
) -> int:
    """Floor division; a zero divisor is reported as an overflow."""
    if b == 0:
        raise error(f"{a} / 0")
    return a // b


def truncate(value: int, bits: int) -> int:
    """Keep the low ``bits`` bits of ``value`` (wraps, never saturates)."""
    return value & max_value(bits)


def mul_div(a: int, b: int, c: int, out_bits: int = U64_BITS) -> int:
    """``floor(a * b / c)`` through a u128 intermediate, narrowed to ``out_bits``."""
    wide = checked_div(checked_mul(a, b, U128_BITS), c)
    return truncate(wide, out_bits)
