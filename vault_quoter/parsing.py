"""Account decoding: vault records and SPL token base layouts."""

import base64
import binascii
from typing import Any

from solders.pubkey import Pubkey

from vault_quoter.constants import (
    ASSET_OFFSET,
    CONFIGURATION_OFFSET,
    DEAD_WEIGHT_OFFSET,
    DISCRIMINATOR_SIZE,
    FEE_CONFIGURATION_OFFSET,
    FEE_STATE_OFFSET,
    FEE_UPDATE_OFFSET,
    HIGH_WATER_MARK_OFFSET,
    LAST_UPDATED_TS_OFFSET,
    LOCKED_PROFIT_STATE_OFFSET,
    LP_OFFSET,
    MINT_ACCOUNT_SIZE,
    MINT_DECIMALS_OFFSET,
    MINT_INITIALIZED_OFFSET,
    MINT_SUPPLY_OFFSET,
    TOKEN_ACCOUNT_AMOUNT_OFFSET,
    TOKEN_ACCOUNT_SIZE,
    TOKEN_ACCOUNT_STATE_OFFSET,
    VAULT_ACCOUNT_SIZE,
)
from vault_quoter.errors import MALFORMED_FIELD, TRUNCATED_DATA, ErrorKind, VaultError
from vault_quoter.models import (
    FeeConfiguration,
    FeeState,
    FeeUpdate,
    HighWaterMark,
    LockedProfitState,
    MintInfo,
    TokenAccountInfo,
    VaultAsset,
    VaultConfiguration,
    VaultLp,
    VaultSnapshot,
)


def _malformed(what: str, offset: int, width: int, have: int) -> VaultError:
    return VaultError(
        ErrorKind.INVALID_ACCOUNT_LAYOUT,
        f"cannot read {what} at [{offset}..{offset + width}) from {have} bytes",
        reason=MALFORMED_FIELD,
    )


def read_uint(data: bytes, offset: int, width: int) -> int:
    """Read an unsigned little-endian integer of `width` bytes."""
    chunk = data[offset : offset + width]
    if offset < 0 or len(chunk) != width:
        raise _malformed(f"u{width * 8}", offset, width, len(data))
    return int.from_bytes(chunk, "little", signed=False)


def read_pubkey(data: bytes, offset: int) -> Pubkey:
    chunk = data[offset : offset + 32]
    if offset < 0 or len(chunk) != 32:
        raise _malformed("pubkey", offset, 32, len(data))
    return Pubkey.from_bytes(bytes(chunk))


def _require_size(data: Any, size: int, what: str) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise VaultError(
            ErrorKind.INVALID_ACCOUNT_LAYOUT,
            f"{what} data must be bytes, got {type(data).__name__}",
            reason=MALFORMED_FIELD,
        )
    data = bytes(data)
    if len(data) < size:
        raise VaultError(
            ErrorKind.INVALID_ACCOUNT_LAYOUT,
            f"{what} account too short: {len(data)} < {size} bytes",
            reason=TRUNCATED_DATA,
        )
    return data


def decode_vault(data: bytes) -> VaultSnapshot:
    """
    Decode a vault account into a VaultSnapshot.

    The first 8 bytes are the account discriminator and are skipped. Every field
    sits at a fixed offset; values are not range-checked here (see validation).
    """
    raw = _require_size(data, VAULT_ACCOUNT_SIZE, "vault")
    d = raw[DISCRIMINATOR_SIZE:]

    a = ASSET_OFFSET
    asset = VaultAsset(
        mint=read_pubkey(d, a),
        idle_ata=read_pubkey(d, a + 32),
        total_value=read_uint(d, a + 64, 8),
        idle_ata_auth_bump=read_uint(d, a + 72, 1),
    )

    lp = VaultLp(
        mint=read_pubkey(d, LP_OFFSET),
        mint_bump=read_uint(d, LP_OFFSET + 32, 1),
        mint_auth_bump=read_uint(d, LP_OFFSET + 33, 1),
    )

    c = CONFIGURATION_OFFSET
    configuration = VaultConfiguration(
        max_cap=read_uint(d, c, 8),
        start_at_ts=read_uint(d, c + 8, 8),
        locked_profit_degradation_duration=read_uint(d, c + 16, 8),
        withdrawal_waiting_period=read_uint(d, c + 24, 8),
        disabled_operations=read_uint(d, c + 32, 2),
    )

    # Eight u16 rates, fixed order.
    rates = [read_uint(d, FEE_CONFIGURATION_OFFSET + 2 * i, 2) for i in range(8)]
    fee_configuration = FeeConfiguration(*rates)

    fee_update = FeeUpdate(
        last_performance_fee_update_ts=read_uint(d, FEE_UPDATE_OFFSET, 8),
        last_management_fee_update_ts=read_uint(d, FEE_UPDATE_OFFSET + 8, 8),
    )

    fee_state = FeeState(
        accumulated_lp_manager_fees=read_uint(d, FEE_STATE_OFFSET, 8),
        accumulated_lp_admin_fees=read_uint(d, FEE_STATE_OFFSET + 8, 8),
        accumulated_lp_protocol_fees=read_uint(d, FEE_STATE_OFFSET + 16, 8),
    )

    high_water_mark = HighWaterMark(
        highest_asset_per_lp_decimal_bits=read_uint(d, HIGH_WATER_MARK_OFFSET, 16),
        last_updated_ts=read_uint(d, HIGH_WATER_MARK_OFFSET + 16, 8),
    )

    locked_profit_state = LockedProfitState(
        last_updated_locked_profit=read_uint(d, LOCKED_PROFIT_STATE_OFFSET, 8),
        last_report=read_uint(d, LOCKED_PROFIT_STATE_OFFSET + 8, 8),
    )

    return VaultSnapshot(
        asset=asset,
        lp=lp,
        configuration=configuration,
        fee_configuration=fee_configuration,
        fee_update=fee_update,
        fee_state=fee_state,
        dead_weight=read_uint(d, DEAD_WEIGHT_OFFSET, 8),
        high_water_mark=high_water_mark,
        last_updated_ts=read_uint(d, LAST_UPDATED_TS_OFFSET, 8),
        locked_profit_state=locked_profit_state,
    )


def _uninitialized(what: str) -> VaultError:
    return VaultError(ErrorKind.INVALID_ACCOUNT_LAYOUT, f"{what} account is not initialized", reason=MALFORMED_FIELD)


def decode_mint(data: bytes) -> MintInfo:
    """Decode the base mint layout (Token-2022 extensions are ignored). Uninitialized mints are rejected."""
    raw = _require_size(data, MINT_ACCOUNT_SIZE, "mint")
    if not read_uint(raw, MINT_INITIALIZED_OFFSET, 1):
        raise _uninitialized("mint")
    return MintInfo(
        supply=read_uint(raw, MINT_SUPPLY_OFFSET, 8),
        decimals=read_uint(raw, MINT_DECIMALS_OFFSET, 1),
        is_initialized=True,
    )


def decode_token_account(data: bytes) -> TokenAccountInfo:
    """Decode the base token-account layout (Token-2022 extensions are ignored)."""
    raw = _require_size(data, TOKEN_ACCOUNT_SIZE, "token")
    # state: 0 uninitialized, 1 initialized, 2 frozen
    if read_uint(raw, TOKEN_ACCOUNT_STATE_OFFSET, 1) == 0:
        raise _uninitialized("token")
    return TokenAccountInfo(
        mint=read_pubkey(raw, 0),
        owner=read_pubkey(raw, 32),
        amount=read_uint(raw, TOKEN_ACCOUNT_AMOUNT_OFFSET, 8),
    )


def decode_base64_account(data: Any) -> bytes:
    """
    Decode account data as returned by JSON-RPC with `"encoding": "base64"`.

    Accepts either the `[payload, "base64"]` pair or the bare payload string.
    """
    if isinstance(data, (list, tuple)):
        if not data:
            raise ValueError("Empty account data entry")
        if len(data) > 1 and data[1] != "base64":
            raise ValueError(f"Unexpected account data encoding: {data[1]}")
        data = data[0]
    if not isinstance(data, str):
        raise ValueError(f"Unexpected account data type: {type(data).__name__}")
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as ex:
        raise ValueError(f"Invalid base64 account data: {ex}") from ex
