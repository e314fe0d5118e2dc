"""
Share/asset conversion math.

Each function mirrors the protocol's on-chain accounting: unsigned 128-bit
intermediates, truncation exactly where the ledger truncates, and a final
narrowing to u64. Failures raise `VaultError` (MATH_OVERFLOW, DIVISION_BY_ZERO,
RANGE_ERROR).
"""

from vault_quoter.arithmetic import (
    ceil_div,
    checked_add,
    checked_mul,
    checked_pow10,
    checked_sub,
    floor_div,
    mul_div_floor,
    to_u64,
)
from vault_quoter.constants import LP_DECIMALS, MAX_FEE_BPS, ONE_YEAR_SECONDS, Q_FRACTIONAL_BITS, U64_MAX
from vault_quoter.errors import ErrorKind, VaultError


def initial_share_mint(amount: int, from_decimals: int, to_decimals: int = LP_DECIMALS) -> int:
    """Shares minted by the first deposit: `amount` rescaled from asset to share decimals.

    Multiplies before dividing so no precision is lost when share decimals exceed asset decimals.
    """
    scaled = checked_mul(amount, checked_pow10(to_decimals))
    return to_u64(floor_div(scaled, checked_pow10(from_decimals)))


def deposit_share_mint(amount: int, total_shares_pre: int, total_asset_pre: int, issuance_fee_bps: int) -> int:
    """
    Shares minted by a deposit into a vault that already has shares.

    Solves shares / (total_shares + shares) = amount_after_fee / (total_asset + amount):

        shares = a * (10000 - i) * y / (10000 * (z + a) - a * (10000 - i))
    """
    total_asset_post = checked_add(total_asset_pre, amount, limit=U64_MAX)
    fee_adjusted = checked_sub(MAX_FEE_BPS, issuance_fee_bps)

    numerator = checked_mul(checked_mul(amount, total_shares_pre), fee_adjusted)
    denominator = checked_mul(total_asset_post, MAX_FEE_BPS) - checked_mul(amount, fee_adjusted)
    if denominator <= 0:
        raise VaultError(
            ErrorKind.DIVISION_BY_ZERO,
            f"deposit denominator is {denominator} (amount={amount}, total_asset={total_asset_pre})",
        )
    return to_u64(numerator // denominator)


def management_fee_in_asset(elapsed_seconds: int, total_asset_value: int, fee_bps: int) -> int:
    """Management fee owed for `elapsed_seconds`, in asset units, rounded up."""
    divisor = checked_mul(MAX_FEE_BPS, ONE_YEAR_SECONDS, limit=U64_MAX)
    numerator = checked_mul(checked_mul(total_asset_value, elapsed_seconds), fee_bps)
    return to_u64(ceil_div(numerator, divisor))


def redemption_asset_out(
    shares_to_burn: int, total_shares_pre: int, total_unlocked_asset: int, redemption_fee_bps: int
) -> int:
    """
    Assets paid out for burning `shares_to_burn`, after the redemption fee.

    Runs in Q48 fixed point, applying the share price and the fee as two separate
    truncating steps:

        bits = shares << 48
        bits = floor(bits * unlocked / total_shares)
        bits = floor(bits * (10000 - fee) / 10000)
        out  = bits >> 48

    floor(floor(x*a/b)*c/d) differs from floor(x*a*c/(b*d)) in general, and the
    ledger truncates after each step, so the steps must not be merged.
    """
    if total_shares_pre == 0:
        raise VaultError(ErrorKind.DIVISION_BY_ZERO, "total share supply is zero")

    bits = checked_mul(shares_to_burn, 1 << Q_FRACTIONAL_BITS)
    bits = mul_div_floor(bits, total_unlocked_asset, total_shares_pre)

    fee_adjusted = checked_sub(MAX_FEE_BPS, redemption_fee_bps)
    bits = mul_div_floor(bits, fee_adjusted, MAX_FEE_BPS)

    return to_u64(bits >> Q_FRACTIONAL_BITS)


def redemption_asset_out_single_ratio(
    shares_to_burn: int, total_shares_pre: int, total_unlocked_asset: int, redemption_fee_bps: int
) -> int:
    """Integer-only redemption estimate without the Q48 pipeline.

    Approximation only: it agrees with `redemption_asset_out` when every division is
    exact and may differ by a unit otherwise. Quotes never use it.
    """
    if total_shares_pre == 0:
        raise VaultError(ErrorKind.DIVISION_BY_ZERO, "total share supply is zero")
    pre_fee = checked_mul(shares_to_burn, total_unlocked_asset) // total_shares_pre
    fee_adjusted = checked_sub(MAX_FEE_BPS, redemption_fee_bps)
    return to_u64(checked_mul(pre_fee, fee_adjusted) // MAX_FEE_BPS)


def fee_to_share_mint(fee_asset_amount: int, total_shares_pre_fee: int, total_asset_post_fee: int) -> int:
    """Shares minted to fee recipients for `fee_asset_amount`, rounded up.

    `ceil(fee * shares / (asset - fee))`; a non-positive denominator is a division by zero.
    """
    denominator = total_asset_post_fee - fee_asset_amount
    if denominator <= 0:
        raise VaultError(
            ErrorKind.DIVISION_BY_ZERO,
            f"fee {fee_asset_amount} leaves no asset value (total={total_asset_post_fee})",
        )
    numerator = checked_mul(fee_asset_amount, total_shares_pre_fee)
    return to_u64(ceil_div(numerator, denominator))
