"""Console output formatting."""

from collections.abc import Sequence

from vault_quoter.formatters import format_amount, format_bp, format_key, format_ts, share_price
from vault_quoter.models import QuoteResult, VaultState
from vault_quoter.quoting import Direction
from vault_quoter.valuation import (
    estimated_management_fee_shares,
    locked_profit,
    total_management_fee_bps,
    total_performance_fee_bps,
    total_shares_incl_fees,
    unlocked_asset_value,
)


def print_vault_summary(state: VaultState, now: int, issues: Sequence[str] = ()) -> None:
    """Print the decoded vault state as of `now`."""
    s = state.snapshot
    cfg = s.configuration
    fees = s.fee_configuration
    asset_dec = state.asset_decimals
    lp_dec = state.lp_decimals

    shares = total_shares_incl_fees(s, state.lp_supply)
    locked = locked_profit(s, now)
    unlocked = unlocked_asset_value(s, now)
    mgmt_shares = estimated_management_fee_shares(s, now, s.asset.total_value, shares)
    price = share_price(s.asset.total_value, shares + mgmt_shares, asset_dec, lp_dec)

    print("=" * 70)
    print(f"🏦 VAULT {state.vault_key}")
    print(f"   🕐 as of {format_ts(now)}  •  last update {format_ts(s.last_updated_ts)}")
    print("=" * 70)
    print(f"   Asset mint:  {s.asset.mint}  ({asset_dec} decimals)")
    print(f"   Share mint:  {s.lp.mint}  ({lp_dec} decimals)")
    print("   " + "─" * 50)
    print(f"   💰 Total value:      {format_amount(s.asset.total_value, asset_dec)}")
    print(f"   🔒 Locked profit:    {format_amount(locked, asset_dec)}")
    print(f"   🔓 Unlocked value:   {format_amount(unlocked, asset_dec)}")
    print(f"   💧 Idle balance:     {format_amount(state.asset_idle_balance, asset_dec)}")
    cap = "unlimited" if cfg.max_cap == 0 else format_amount(cfg.max_cap, asset_dec)
    print(f"   🧢 Max cap:          {cap}")
    print(f"   📊 Shares (incl. fees): {format_amount(shares, lp_dec)}")
    print(f"      • Circulating:    {format_amount(state.lp_supply, lp_dec)}")
    print(f"      • Dead weight:    {s.dead_weight}")
    print(f"      • Pending mgmt fee: {format_amount(mgmt_shares, lp_dec)}")
    print(f"   💱 Share price:      {'n/a' if price is None else f'{price:.9f}'}")
    print("   💸 Fees:")
    print(f"      • Issuance:       {format_bp(fees.issuance_fee)}")
    print(f"      • Redemption:     {format_bp(fees.redemption_fee)}")
    print(f"      • Management:     {format_bp(total_management_fee_bps(s))}  (last accrual {format_ts(s.fee_update.last_management_fee_update_ts)})")
    print(f"      • Performance:    {format_bp(total_performance_fee_bps(s))}")
    if cfg.withdrawal_waiting_period:
        print(f"   ⏳ Withdrawal waiting period: {cfg.withdrawal_waiting_period}s")
    if issues:
        print("   ⚠️  Validation warnings:")
        for issue in issues:
            print(f"      {issue}")


def print_quotes(state: VaultState, direction: Direction, results: Sequence[QuoteResult]) -> None:
    """Print a block of quotes for one direction."""
    if direction is Direction.DEPOSIT:
        in_dec, out_dec, title = state.asset_decimals, state.lp_decimals, "📥 DEPOSIT (asset → shares)"
    else:
        in_dec, out_dec, title = state.lp_decimals, state.asset_decimals, "📤 REDEEM (shares → asset)"

    print(f"\n   {title}")
    for r in results:
        marker = "🔴" if r.insufficient_liquidity else "🟢"
        out = "insufficient liquidity" if r.insufficient_liquidity else format_amount(r.expected_output, out_dec)
        print(f"   {marker} {format_amount(r.amount, in_dec):>20} → {out}  [{r.amount} → {r.expected_output}]")
    if results:
        print(f"      {format_key(results[0].input_mint)} → {format_key(results[0].output_mint)}")
