"""Validation of decoded vault snapshots."""

from dataclasses import fields

from vault_quoter.constants import MAX_FEE_BPS, U16_MAX
from vault_quoter.models import VaultSnapshot


def validate_vault_snapshot(s: VaultSnapshot, *, vault_key: str, warn_only: bool = True) -> list[str]:
    """
    Validate vault snapshot invariants.

    Returns list of validation warnings/errors. If warn_only=False, raises ValueError on critical errors.
    The decoder never range-checks values, so this is where out-of-range fee rates surface.
    """
    issues: list[str] = []

    def flag(msg: str, *, critical: bool = True) -> None:
        issues.append(msg)
        if critical and not warn_only:
            raise ValueError(msg)

    # 1. Every fee rate is a basis-point value in [0, 10000]
    for f in fields(s.fee_configuration):
        bps = getattr(s.fee_configuration, f.name)
        if not 0 <= bps <= MAX_FEE_BPS:
            flag(f"Vault {vault_key}: {f.name}={bps} bps outside [0, {MAX_FEE_BPS}]")

    # 2. Combined management / performance rates (summed in u16 on-chain)
    fc = s.fee_configuration
    sums = {
        "management": fc.manager_management_fee + fc.admin_management_fee + fc.protocol_management_fee,
        "performance": fc.manager_performance_fee + fc.admin_performance_fee + fc.protocol_performance_fee,
    }
    for name, total in sums.items():
        if total > U16_MAX:
            flag(f"Vault {vault_key}: combined {name} fee {total} bps overflows u16")
        elif total > MAX_FEE_BPS:
            flag(f"Vault {vault_key}: combined {name} fee {total} bps exceeds {MAX_FEE_BPS}")

    # 3. Locked profit cannot exceed the tracked asset value
    locked = s.locked_profit_state.last_updated_locked_profit
    if locked > s.asset.total_value:
        flag(f"Vault {vault_key}: locked profit {locked} exceeds total asset value {s.asset.total_value}")

    # 4. Two-phase redemptions cannot be quoted (informational)
    if s.configuration.withdrawal_waiting_period != 0:
        flag(
            f"Vault {vault_key}: withdrawal waiting period is {s.configuration.withdrawal_waiting_period}s "
            "(redeem quotes are unsupported)",
            critical=False,
        )

    return issues
