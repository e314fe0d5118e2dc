"""Checked fixed-width integer arithmetic.

Python integers never overflow, so the on-chain width limits are enforced here:
intermediates live in an unsigned 128-bit accumulator and results are narrowed
back to 64 bits. Every violation raises `VaultError` with the matching kind.
"""

from vault_quoter.constants import U16_MAX, U64_MAX, U128_MAX
from vault_quoter.errors import ErrorKind, VaultError


def _check(value: int, limit: int, what: str) -> int:
    if value < 0 or value > limit:
        raise VaultError(ErrorKind.MATH_OVERFLOW, f"{what} out of range: {value}")
    return value


def checked_add(a: int, b: int, *, limit: int = U128_MAX) -> int:
    return _check(a + b, limit, "addition")


def checked_sub(a: int, b: int, *, limit: int = U128_MAX) -> int:
    """Subtract; a negative result is an overflow (unsigned semantics)."""
    return _check(a - b, limit, "subtraction")


def checked_mul(a: int, b: int, *, limit: int = U128_MAX) -> int:
    return _check(a * b, limit, "multiplication")


def checked_pow10(exponent: int) -> int:
    if exponent < 0:
        raise VaultError(ErrorKind.MATH_OVERFLOW, f"negative exponent: {exponent}")
    return _check(10**exponent, U128_MAX, "power of ten")


def checked_sum(values, *, limit: int) -> int:
    """Sum left to right, failing as soon as a partial sum exceeds `limit`."""
    total = 0
    for v in values:
        total = checked_add(total, v, limit=limit)
    return total


def saturating_sub(a: int, b: int) -> int:
    return a - b if a > b else 0


def floor_div(numer: int, denom: int) -> int:
    if denom <= 0:
        raise VaultError(ErrorKind.DIVISION_BY_ZERO, f"denominator must be > 0, got {denom}")
    return numer // denom


def ceil_div(numer: int, denom: int) -> int:
    """Ceiling division as `(numer + denom - 1) // denom`, with the addition checked."""
    if denom <= 0:
        raise VaultError(ErrorKind.DIVISION_BY_ZERO, f"denominator must be > 0, got {denom}")
    return checked_add(numer, denom - 1) // denom


def mul_div_floor(value: int, mul: int, div: int) -> int:
    """floor(value * mul / div) without forming the full product.

    Splits `value` into quotient and remainder by `div` first:
    value * mul / div == q * mul + r * mul / div, where r < div.
    With 64-bit `mul` and `div` no intermediate exceeds 128 bits unless the
    result itself does.
    """
    if div <= 0:
        raise VaultError(ErrorKind.DIVISION_BY_ZERO, f"denominator must be > 0, got {div}")
    q, r = divmod(value, div)
    whole = checked_mul(q, mul)
    frac = checked_mul(r, mul) // div
    return checked_add(whole, frac)


def to_u64(value: int) -> int:
    """Narrow a wide result to u64."""
    if value < 0 or value > U64_MAX:
        raise VaultError(ErrorKind.RANGE_ERROR, f"value does not fit in u64: {value}")
    return value


def add_u64(*values: int) -> int:
    return checked_sum(values, limit=U64_MAX)


def add_u16(*values: int) -> int:
    return checked_sum(values, limit=U16_MAX)
