import pytest
from vault_builders import ASSET_MINT, LP_MINT, OTHER_MINT, VaultLayout, make_state

from vault_quoter.conversions import redemption_asset_out
from vault_quoter.errors import ErrorKind, VaultError
from vault_quoter.quoting import Direction, quote, resolve_direction
from vault_quoter.valuation import estimated_management_fee_shares, total_shares_incl_fees

NOW = 1_750_000_000


def _deposit(state, amount, now=NOW):
    return quote(state, ASSET_MINT, LP_MINT, amount, now)


def _redeem(state, amount, now=NOW):
    return quote(state, LP_MINT, ASSET_MINT, amount, now)


def _live_state(**overrides):
    """A vault with fee shares, pending management fee and some locked profit."""
    layout = dict(
        total_value=600_000_000_000,
        degradation=86_400,
        locked_profit=3_000_000_000,
        last_report=NOW - 3_600,
        fees={
            "manager_management_fee": 100,
            "admin_management_fee": 25,
            "protocol_management_fee": 25,
            "redemption_fee": 10,
            "issuance_fee": 5,
        },
        last_mgmt_ts=NOW - 7 * 86_400,
        manager_fee_shares=1_234_567,
        admin_fee_shares=345_678,
        protocol_fee_shares=56_789,
        dead_weight=1_000,
    )
    layout.update(overrides)
    return make_state(VaultLayout(**layout), lp_supply=500_000_000_000_000, asset_decimals=6, idle_balance=10**15)


def test_resolve_direction():
    state = _live_state()
    assert resolve_direction(state, ASSET_MINT, LP_MINT) is Direction.DEPOSIT
    assert resolve_direction(state, LP_MINT, ASSET_MINT) is Direction.REDEEM


@pytest.mark.parametrize(
    ("input_mint", "output_mint"),
    [(ASSET_MINT, ASSET_MINT), (LP_MINT, LP_MINT), (OTHER_MINT, LP_MINT), (ASSET_MINT, OTHER_MINT)],
)
def test_invalid_mint_pair(input_mint, output_mint):
    with pytest.raises(VaultError) as exc:
        quote(_live_state(), input_mint, output_mint, 1_000, NOW)
    assert exc.value.kind is ErrorKind.INVALID_MINT


@pytest.mark.parametrize("redeem", [False, True])
def test_zero_input_law(redeem):
    # Even a vault that cannot serve redemptions answers a zero-amount quote
    state = _live_state(waiting_period=3_600, max_cap=1)
    r = _redeem(state, 0) if redeem else _deposit(state, 0)
    assert (r.amount, r.expected_output, r.insufficient_liquidity) == (0, 0, False)


def test_redeem_exact_scenario():
    layout = VaultLayout(total_value=20_000_000, fees={"redemption_fee": 100}, dead_weight=1_000)
    state = make_state(layout, lp_supply=9_999_000, idle_balance=20_000_000)
    r = _redeem(state, 1_000_000)
    assert r.expected_output == 1_980_000
    assert r.insufficient_liquidity is False
    assert (r.input_mint, r.output_mint) == (LP_MINT, ASSET_MINT)


def test_deposit_scenario():
    layout = VaultLayout(total_value=600_000_000, fees={"issuance_fee": 50}, dead_weight=1_000)
    state = make_state(layout, lp_supply=499_999_000)
    r = _deposit(state, 1_000_000)
    assert r.expected_output == 829_159
    assert r.insufficient_liquidity is False


def test_capacity_gate():
    layout = VaultLayout(total_value=999_999, max_cap=1_000_000, dead_weight=1_000)
    state = make_state(layout, lp_supply=999_000)
    blocked = _deposit(state, 2)
    assert (blocked.expected_output, blocked.insufficient_liquidity) == (0, True)
    assert blocked.amount == 2
    assert _deposit(state, 1).insufficient_liquidity is False


def test_dead_weight_gate_on_first_deposit():
    state = make_state(VaultLayout(dead_weight=0), lp_supply=0, asset_decimals=9)
    short = _deposit(state, 999)
    assert (short.expected_output, short.insufficient_liquidity) == (0, True)

    exact = _deposit(state, 1_000)
    assert (exact.expected_output, exact.insufficient_liquidity) == (0, False)

    assert _deposit(state, 1_500).expected_output == 500


def test_first_deposit_rescales_decimals():
    state = make_state(VaultLayout(dead_weight=0), lp_supply=0, asset_decimals=6)
    assert _deposit(state, 1_000_000).expected_output == 1_000_000_000 - 1_000


def test_dead_weight_already_applied_is_not_subtracted():
    layout = VaultLayout(total_value=1_000_000, dead_weight=1_000)
    state = make_state(layout, lp_supply=999_000)
    assert _deposit(state, 500).expected_output == 500


def test_redeem_requires_instant_withdrawals():
    state = _live_state(waiting_period=86_400)
    with pytest.raises(VaultError) as exc:
        _redeem(state, 1_000)
    assert exc.value.kind is ErrorKind.UNSUPPORTED_OPERATION
    # deposits are unaffected
    assert _deposit(state, 1_000_000).expected_output > 0


def test_redeem_insufficient_idle_balance():
    layout = VaultLayout(total_value=20_000_000, dead_weight=1_000)
    state = make_state(layout, lp_supply=9_999_000, idle_balance=1_999_999)
    r = _redeem(state, 1_000_000)
    assert (r.expected_output, r.insufficient_liquidity) == (0, True)

    ok = _redeem(state, 999_999)
    assert ok.insufficient_liquidity is False
    assert ok.expected_output == 1_999_998


def test_redeem_uses_unlocked_value_and_pending_management_fee():
    state = _live_state()
    s = state.snapshot
    shares = total_shares_incl_fees(s, state.lp_supply)
    baseline = shares + estimated_management_fee_shares(s, NOW, s.asset.total_value, shares)
    assert baseline > shares

    unlocked = s.asset.total_value - 3_000_000_000 * (86_400 - 3_600) // 86_400
    expected = redemption_asset_out(10**12, baseline, unlocked, 10)
    assert _redeem(state, 10**12).expected_output == expected


def test_pending_management_fee_dilutes_deposits():
    accrued = _live_state()
    fresh = _live_state(last_mgmt_ts=NOW)
    assert _deposit(accrued, 10**9).expected_output > _deposit(fresh, 10**9).expected_output


def test_locked_profit_release_raises_redemption_value():
    state = _live_state()
    early = _redeem(state, 10**12, NOW).expected_output
    later = _redeem(state, 10**12, NOW + 86_400).expected_output
    assert later > early


AMOUNTS = [1, 2, 3, 10, 999, 1_000, 1_001, 123_457, 10**6, 10**9 + 7, 10**12, 3 * 10**13]


def test_deposit_monotone():
    state = _live_state()
    outs = [_deposit(state, a).expected_output for a in AMOUNTS]
    assert outs == sorted(outs)


def test_redeem_monotone():
    state = _live_state()
    outs = [_redeem(state, a).expected_output for a in AMOUNTS]
    assert outs == sorted(outs)


def test_first_deposit_monotone_across_burn_floor():
    state = make_state(VaultLayout(dead_weight=0), lp_supply=0, asset_decimals=9)
    outs = [_deposit(state, a).expected_output for a in range(990, 1_020)]
    assert outs == sorted(outs)


def test_quote_does_not_touch_state():
    state = _live_state()
    before = repr(state)
    _deposit(state, 10**9)
    _redeem(state, 10**9)
    assert repr(state) == before
