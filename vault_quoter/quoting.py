"""Deposit and redemption quoting."""

from enum import Enum

from solders.pubkey import Pubkey

from vault_quoter.arithmetic import add_u64
from vault_quoter.constants import DEAD_WEIGHT
from vault_quoter.conversions import deposit_share_mint, initial_share_mint, redemption_asset_out
from vault_quoter.errors import ErrorKind, VaultError
from vault_quoter.models import QuoteResult, VaultState
from vault_quoter.valuation import estimated_management_fee_shares, total_shares_incl_fees, unlocked_asset_value


class Direction(Enum):
    DEPOSIT = "deposit"  # asset -> share
    REDEEM = "redeem"  # share -> asset


def resolve_direction(state: VaultState, input_mint: Pubkey, output_mint: Pubkey) -> Direction:
    """Map an (input, output) mint pair onto a direction; any other pairing is an InvalidMint."""
    asset_mint = state.snapshot.asset.mint
    lp_mint = state.snapshot.lp.mint
    if input_mint == asset_mint and output_mint == lp_mint:
        return Direction.DEPOSIT
    if input_mint == lp_mint and output_mint == asset_mint:
        return Direction.REDEEM
    raise VaultError(ErrorKind.INVALID_MINT, f"unsupported mint pair {input_mint} -> {output_mint}")


def _result(input_mint: Pubkey, output_mint: Pubkey, amount: int, out: int, *, short: bool = False) -> QuoteResult:
    return QuoteResult(
        input_mint=input_mint,
        output_mint=output_mint,
        amount=amount,
        expected_output=0 if short else out,
        insufficient_liquidity=short,
    )


def quote(state: VaultState, input_mint: Pubkey, output_mint: Pubkey, amount: int, now: int) -> QuoteResult:
    """
    Quote a deposit (asset -> share) or redemption (share -> asset) of `amount` at time `now`.

    Capacity, idle-liquidity and minimum-mint shortfalls are reported through
    `insufficient_liquidity` with a zero output; they are not errors.
    """
    direction = resolve_direction(state, input_mint, output_mint)

    if amount == 0:
        return _result(input_mint, output_mint, 0, 0)

    snapshot = state.snapshot
    total_asset_value = snapshot.asset.total_value
    shares_incl_fees = total_shares_incl_fees(snapshot, state.lp_supply)
    mgmt_fee_shares = estimated_management_fee_shares(snapshot, now, total_asset_value, shares_incl_fees)
    # Current supply including management fees that are accrued but not yet minted.
    baseline_shares = add_u64(shares_incl_fees, mgmt_fee_shares)

    if direction is Direction.REDEEM:
        return _quote_redeem(state, input_mint, output_mint, amount, now, baseline_shares)
    return _quote_deposit(state, input_mint, output_mint, amount, baseline_shares)


def _quote_redeem(
    state: VaultState, input_mint: Pubkey, output_mint: Pubkey, amount: int, now: int, baseline_shares: int
) -> QuoteResult:
    snapshot = state.snapshot
    waiting_period = snapshot.configuration.withdrawal_waiting_period
    if waiting_period != 0:
        raise VaultError(
            ErrorKind.UNSUPPORTED_OPERATION,
            f"withdrawal waiting period is {waiting_period}s; only instant redemptions can be quoted",
        )

    unlocked = unlocked_asset_value(snapshot, now)
    out = redemption_asset_out(amount, baseline_shares, unlocked, snapshot.fee_configuration.redemption_fee)

    if state.asset_idle_balance < out:
        return _result(input_mint, output_mint, amount, out, short=True)
    return _result(input_mint, output_mint, amount, out)


def _quote_deposit(
    state: VaultState, input_mint: Pubkey, output_mint: Pubkey, amount: int, baseline_shares: int
) -> QuoteResult:
    snapshot = state.snapshot
    total_asset_value = snapshot.asset.total_value

    max_cap = snapshot.configuration.max_cap
    if max_cap > 0 and total_asset_value + amount > max_cap:
        return _result(input_mint, output_mint, amount, 0, short=True)

    if baseline_shares == 0:
        minted = initial_share_mint(amount, state.asset_decimals, state.lp_decimals)
    else:
        minted = deposit_share_mint(
            amount, baseline_shares, total_asset_value, snapshot.fee_configuration.issuance_fee
        )

    if snapshot.dead_weight != 0:
        return _result(input_mint, output_mint, amount, minted)

    # First issuance still owes the one-time burn.
    if minted < DEAD_WEIGHT:
        return _result(input_mint, output_mint, amount, 0, short=True)
    return _result(input_mint, output_mint, amount, minted - DEAD_WEIGHT)
