"""Data models for vault state and quotes."""

from dataclasses import dataclass

from solders.pubkey import Pubkey

from vault_quoter.constants import LP_DECIMALS


@dataclass(frozen=True)
class VaultAsset:
    """Underlying asset tracked by the vault."""

    mint: Pubkey
    idle_ata: Pubkey
    total_value: int
    idle_ata_auth_bump: int


@dataclass(frozen=True)
class VaultLp:
    """Share (LP) token of the vault."""

    mint: Pubkey
    mint_bump: int
    mint_auth_bump: int


@dataclass(frozen=True)
class VaultConfiguration:
    # 0 means no deposit ceiling.
    max_cap: int
    start_at_ts: int
    locked_profit_degradation_duration: int
    # Non-zero means redemptions are two-phase on-chain.
    withdrawal_waiting_period: int
    disabled_operations: int


@dataclass(frozen=True)
class FeeConfiguration:
    """Fee rates in basis points, in on-chain field order."""

    manager_performance_fee: int
    admin_performance_fee: int
    manager_management_fee: int
    admin_management_fee: int
    redemption_fee: int
    issuance_fee: int
    protocol_performance_fee: int
    protocol_management_fee: int


@dataclass(frozen=True)
class FeeUpdate:
    last_performance_fee_update_ts: int
    last_management_fee_update_ts: int


@dataclass(frozen=True)
class FeeState:
    """Fees accrued but not yet minted, in share units."""

    accumulated_lp_manager_fees: int
    accumulated_lp_admin_fees: int
    accumulated_lp_protocol_fees: int


@dataclass(frozen=True)
class HighWaterMark:
    # Decoded for completeness; quoting does not read it.
    highest_asset_per_lp_decimal_bits: int
    last_updated_ts: int


@dataclass(frozen=True)
class LockedProfitState:
    last_updated_locked_profit: int
    last_report: int


@dataclass(frozen=True)
class VaultSnapshot:
    """Immutable view of a decoded vault account."""

    asset: VaultAsset
    lp: VaultLp
    configuration: VaultConfiguration
    fee_configuration: FeeConfiguration
    fee_update: FeeUpdate
    fee_state: FeeState
    # 0 means the minimum-mint burn has not been applied on-chain yet.
    dead_weight: int
    high_water_mark: HighWaterMark
    last_updated_ts: int
    locked_profit_state: LockedProfitState


@dataclass(frozen=True)
class MintInfo:
    """Base fields of an SPL Token / Token-2022 mint."""

    supply: int
    decimals: int
    is_initialized: bool


@dataclass(frozen=True)
class TokenAccountInfo:
    """Base fields of an SPL Token / Token-2022 token account."""

    mint: Pubkey
    owner: Pubkey
    amount: int


@dataclass(frozen=True)
class VaultState:
    """Everything a quote needs: the vault snapshot plus the mint and idle-account facts.

    A new instance is built on every refresh; instances are never modified.
    """

    vault_key: Pubkey
    snapshot: VaultSnapshot
    lp_supply: int = 0
    lp_decimals: int = LP_DECIMALS
    asset_decimals: int = 0
    asset_idle_balance: int = 0
    initialized: bool = False


@dataclass(frozen=True)
class QuoteResult:
    """Outcome of a single amount conversion."""

    input_mint: Pubkey
    output_mint: Pubkey
    amount: int
    expected_output: int
    # True when the vault cannot currently serve this size (idle balance, cap or burn floor).
    insufficient_liquidity: bool
