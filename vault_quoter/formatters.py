"""Formatting and conversion utilities."""

from datetime import datetime, timezone
from decimal import Decimal


def as_int(value, *, default: int = 0) -> int:
    """Convert value to int, handling various types."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        v = value.strip().replace("_", "")
        if v.lower().startswith("0x"):
            return int(v, 16)
        return int(v)
    return int(value)


def format_bp(bp: int) -> str:
    """Format basis points as percentage."""
    return f"{(Decimal(bp) / Decimal(100)):.2f}%"


def format_amount(value: int, decimals: int, *, places: int | None = None) -> str:
    """Format a raw token amount in UI units, e.g. 1_500_000 with 6 decimals -> '1.5'."""
    ui = Decimal(value) / (Decimal(10) ** decimals)
    s = f"{ui:.{decimals if places is None else places}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def format_key(key, *, width: int = 6) -> str:
    """Shorten a base58 key for display: 'GqoypwVG...fxHgdK'."""
    s = str(key)
    if len(s) <= 2 * width + 3:
        return s
    return f"{s[:width + 2]}...{s[-width:]}"


def format_ts(ts: int) -> str:
    """Format a unix timestamp; 0 means unset."""
    if ts <= 0:
        return "never"
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def share_price(total_asset: int, total_shares: int, asset_decimals: int, lp_decimals: int) -> Decimal | None:
    """Asset per share in UI units, or None for an empty vault."""
    if total_shares == 0:
        return None
    return (Decimal(total_asset) / Decimal(10) ** asset_decimals) / (Decimal(total_shares) / Decimal(10) ** lp_decimals)