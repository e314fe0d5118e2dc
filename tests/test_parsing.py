import base64

import pytest
from vault_builders import ASSET_MINT, IDLE_ATA, LP_MINT, VAULT_KEY, VaultLayout, mint_bytes, token_account_bytes

from vault_quoter.errors import MALFORMED_FIELD, TRUNCATED_DATA, ErrorKind, VaultError
from vault_quoter.parsing import (
    decode_base64_account,
    decode_mint,
    decode_token_account,
    decode_vault,
    read_pubkey,
    read_uint,
)


def _full_layout() -> VaultLayout:
    return VaultLayout(
        total_value=123_456_789_012,
        max_cap=9_000_000_000_000,
        start_at_ts=1_700_000_000,
        degradation=86_400,
        waiting_period=0,
        disabled_operations=0b101,
        fees={
            "manager_performance_fee": 1_000,
            "admin_performance_fee": 500,
            "manager_management_fee": 100,
            "admin_management_fee": 50,
            "redemption_fee": 10,
            "issuance_fee": 20,
            "protocol_performance_fee": 250,
            "protocol_management_fee": 25,
        },
        last_perf_ts=1_700_000_100,
        last_mgmt_ts=1_700_000_200,
        manager_fee_shares=11,
        admin_fee_shares=22,
        protocol_fee_shares=33,
        dead_weight=1_000,
        hwm=2**100 + 7,
        hwm_ts=1_700_000_300,
        last_updated_ts=1_700_000_400,
        locked_profit=5_000,
        last_report=1_700_000_500,
    )


def test_decode_vault_reads_every_field():
    s = decode_vault(_full_layout().to_bytes())

    assert s.asset.mint == ASSET_MINT
    assert s.asset.idle_ata == IDLE_ATA
    assert s.asset.total_value == 123_456_789_012
    assert s.asset.idle_ata_auth_bump == 254

    assert s.lp.mint == LP_MINT
    assert s.lp.mint_bump == 253
    assert s.lp.mint_auth_bump == 252

    assert s.configuration.max_cap == 9_000_000_000_000
    assert s.configuration.start_at_ts == 1_700_000_000
    assert s.configuration.locked_profit_degradation_duration == 86_400
    assert s.configuration.withdrawal_waiting_period == 0
    assert s.configuration.disabled_operations == 0b101

    fc = s.fee_configuration
    assert (fc.manager_performance_fee, fc.admin_performance_fee) == (1_000, 500)
    assert (fc.manager_management_fee, fc.admin_management_fee) == (100, 50)
    assert (fc.redemption_fee, fc.issuance_fee) == (10, 20)
    assert (fc.protocol_performance_fee, fc.protocol_management_fee) == (250, 25)

    assert s.fee_update.last_performance_fee_update_ts == 1_700_000_100
    assert s.fee_update.last_management_fee_update_ts == 1_700_000_200
    assert s.fee_state.accumulated_lp_manager_fees == 11
    assert s.fee_state.accumulated_lp_admin_fees == 22
    assert s.fee_state.accumulated_lp_protocol_fees == 33
    assert s.dead_weight == 1_000
    assert s.high_water_mark.highest_asset_per_lp_decimal_bits == 2**100 + 7
    assert s.high_water_mark.last_updated_ts == 1_700_000_300
    assert s.last_updated_ts == 1_700_000_400
    assert s.locked_profit_state.last_updated_locked_profit == 5_000
    assert s.locked_profit_state.last_report == 1_700_000_500


def test_decode_vault_ignores_discriminator_and_trailing_bytes():
    raw = bytearray(_full_layout().to_bytes())
    raw[:8] = b"\xff" * 8
    s = decode_vault(bytes(raw) + b"\x00" * 64)
    assert s.asset.total_value == 123_456_789_012


def test_decode_vault_does_not_range_check_fees():
    s = decode_vault(VaultLayout(fees={"issuance_fee": 60_000}).to_bytes())
    assert s.fee_configuration.issuance_fee == 60_000


def test_decode_vault_truncated():
    data = _full_layout().to_bytes()[:-1]
    with pytest.raises(VaultError) as exc:
        decode_vault(data)
    assert exc.value.kind is ErrorKind.INVALID_ACCOUNT_LAYOUT
    assert exc.value.reason == TRUNCATED_DATA


def test_decode_vault_rejects_non_bytes():
    with pytest.raises(VaultError) as exc:
        decode_vault("not bytes")  # type: ignore[arg-type]
    assert exc.value.kind is ErrorKind.INVALID_ACCOUNT_LAYOUT
    assert exc.value.reason == MALFORMED_FIELD


def test_read_helpers_report_malformed_ranges():
    assert read_uint(b"\x01\x02", 0, 2) == 0x0201
    with pytest.raises(VaultError) as exc:
        read_uint(b"\x01\x02\x03", 2, 2)
    assert exc.value.reason == MALFORMED_FIELD
    with pytest.raises(VaultError) as exc:
        read_pubkey(bytes(40), 16)
    assert exc.value.reason == MALFORMED_FIELD
    assert read_pubkey(bytes(VAULT_KEY), 0) == VAULT_KEY


def test_decode_mint_and_token_account():
    mint = decode_mint(mint_bytes(5_000_000, 6))
    assert (mint.supply, mint.decimals, mint.is_initialized) == (5_000_000, 6, True)

    # Token-2022 mints carry extensions after the base layout
    ext = decode_mint(mint_bytes(1, 9) + bytes(100))
    assert ext.decimals == 9

    acct = decode_token_account(token_account_bytes(ASSET_MINT, VAULT_KEY, 42))
    assert (acct.mint, acct.owner, acct.amount) == (ASSET_MINT, VAULT_KEY, 42)


@pytest.mark.parametrize("decoder", [decode_mint, decode_token_account])
def test_token_decoders_truncated(decoder):
    with pytest.raises(VaultError) as exc:
        decoder(bytes(10))
    assert exc.value.reason == TRUNCATED_DATA


def test_decode_base64_account_variants():
    payload = base64.b64encode(b"hello").decode("ascii")
    assert decode_base64_account([payload, "base64"]) == b"hello"
    assert decode_base64_account(payload) == b"hello"
    with pytest.raises(ValueError):
        decode_base64_account([payload, "base58"])
    with pytest.raises(ValueError):
        decode_base64_account("!!not-base64!!")
    with pytest.raises(ValueError):
        decode_base64_account(None)


def test_uninitialized_token_accounts_are_rejected():
    with pytest.raises(VaultError) as exc:
        decode_mint(mint_bytes(9_999_000, 9, initialized=False))
    assert exc.value.kind is ErrorKind.INVALID_ACCOUNT_LAYOUT
    assert exc.value.reason == MALFORMED_FIELD

    with pytest.raises(VaultError) as exc:
        decode_token_account(bytes(165))
    assert exc.value.reason == MALFORMED_FIELD

    # frozen accounts still decode
    frozen = bytearray(token_account_bytes(ASSET_MINT, VAULT_KEY, 7))
    frozen[108] = 2
    assert decode_token_account(bytes(frozen)).amount == 7
