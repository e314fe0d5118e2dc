"""Unlocked asset value and management-fee estimation."""

from vault_quoter.arithmetic import add_u16, add_u64, checked_mul, checked_sub, saturating_sub, to_u64
from vault_quoter.conversions import fee_to_share_mint, management_fee_in_asset
from vault_quoter.models import VaultSnapshot


def locked_profit(snapshot: VaultSnapshot, now: int) -> int:
    """
    Profit still locked at `now`.

    Decays linearly from the last reported amount to zero over the degradation
    window; zero once the window has elapsed or when no window is configured.
    """
    state = snapshot.locked_profit_state
    window = snapshot.configuration.locked_profit_degradation_duration
    elapsed = saturating_sub(now, state.last_report)

    if elapsed > window or window == 0:
        return 0

    remaining = checked_mul(state.last_updated_locked_profit, window - elapsed)
    return to_u64(remaining // window)


def unlocked_asset_value(snapshot: VaultSnapshot, now: int) -> int:
    """Total asset value net of locked profit."""
    return checked_sub(snapshot.asset.total_value, locked_profit(snapshot, now))


def total_management_fee_bps(snapshot: VaultSnapshot) -> int:
    fees = snapshot.fee_configuration
    return add_u16(fees.admin_management_fee, fees.manager_management_fee, fees.protocol_management_fee)


def total_performance_fee_bps(snapshot: VaultSnapshot) -> int:
    fees = snapshot.fee_configuration
    return add_u16(fees.admin_performance_fee, fees.manager_performance_fee, fees.protocol_performance_fee)


def total_accumulated_fee_shares(snapshot: VaultSnapshot) -> int:
    s = snapshot.fee_state
    return add_u64(s.accumulated_lp_admin_fees, s.accumulated_lp_manager_fees, s.accumulated_lp_protocol_fees)


def total_shares_incl_fees(snapshot: VaultSnapshot, lp_supply: int) -> int:
    """Circulating shares plus unminted fee shares plus dead weight."""
    return add_u64(total_accumulated_fee_shares(snapshot), lp_supply, snapshot.dead_weight)


def estimated_management_fee_shares(
    snapshot: VaultSnapshot, now: int, total_asset_value: int, total_shares: int
) -> int:
    """
    Shares the protocol would mint for management fees accrued up to `now`.

    Both `total_asset_value` and `total_shares` are pre-settlement figures: the fee
    has not been taken out of either.
    """
    last_ts = snapshot.fee_update.last_management_fee_update_ts
    fee_bps = total_management_fee_bps(snapshot)
    if last_ts == 0 or total_asset_value == 0 or fee_bps == 0:
        return 0

    elapsed = saturating_sub(now, last_ts)
    if elapsed == 0:
        return 0

    fee = management_fee_in_asset(elapsed, total_asset_value, fee_bps)
    # fee >= total would make the share conversion divide by a non-positive value.
    if fee == 0 or fee >= total_asset_value:
        return 0

    return fee_to_share_mint(fee, total_shares, total_asset_value)
