"""CLI and main logic."""

import argparse
import asyncio
import os
import sys
import time

from solders.pubkey import Pubkey
from tqdm import tqdm

from vault_quoter.cache import CachedAccountFetcher
from vault_quoter.console import print_quotes, print_vault_summary
from vault_quoter.constants import DEFAULT_CACHE_MAX_AGE_S, DEFAULT_COMMITMENT, RPC_URL_ENV
from vault_quoter.errors import VaultError
from vault_quoter.formatters import as_int
from vault_quoter.models import QuoteResult, VaultState
from vault_quoter.onchain import AccountFetcher, RpcAccountFetcher
from vault_quoter.quoting import Direction, quote
from vault_quoter.validation import validate_vault_snapshot
from vault_quoter.venue import VaultVenue

# Internal defaults (not exposed as CLI flags)
DEFAULT_TIMEOUT = 30
DEFAULT_BATCH_SIZE = 100


def _pubkey(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError as ex:
        raise argparse.ArgumentTypeError(f"invalid base58 pubkey: {value}") from ex


def _non_negative_int(value: str) -> int:
    try:
        v = as_int(value)
    except ValueError as ex:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from ex
    if v < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0: {value}")
    return v


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(description="Off-chain deposit/redeem quotes for share-token yield vaults.")
    p.add_argument("vaults", nargs="+", type=_pubkey, help="Vault account address(es).")
    p.add_argument(
        "--rpc-url",
        default=None,
        help=f"Solana RPC URL. Required if {RPC_URL_ENV} environment variable is not set.",
    )
    p.add_argument("--commitment", default=DEFAULT_COMMITMENT, help="RPC commitment level.")
    p.add_argument(
        "--amount",
        type=_non_negative_int,
        default=None,
        help="Raw input amount (base units). Default: one whole token of the input mint.",
    )
    p.add_argument(
        "--direction",
        choices=["deposit", "redeem", "both"],
        default="both",
        help="Which conversion to quote.",
    )
    p.add_argument(
        "--ladder",
        type=_non_negative_int,
        default=1,
        help="Quote K amounts: amount, 2*amount, 4*amount, ...",
    )
    p.add_argument(
        "--now",
        type=_non_negative_int,
        default=None,
        help="Unix timestamp to quote at. Default: wall clock.",
    )
    p.add_argument(
        "--no-cache",
        action="store_true",
        help="Disable caching for this run (fetch all data fresh from network).",
    )
    p.add_argument(
        "--cache-max-age",
        type=float,
        default=DEFAULT_CACHE_MAX_AGE_S,
        help="Seconds a cached account stays fresh.",
    )
    return p.parse_args(argv)


def resolve_now(state: VaultState, now: int | None = None) -> int:
    """Explicit `now`, else the wall clock, else the snapshot's own timestamp."""
    if now is not None:
        return now
    wall = int(time.time())
    return wall if wall > 0 else state.snapshot.last_updated_ts


def ladder_amounts(base: int, steps: int) -> list[int]:
    return [base * (1 << i) for i in range(max(1, steps))]


def quote_ladder(state: VaultState, direction: Direction, amounts: list[int], now: int) -> list[QuoteResult]:
    asset_mint, lp_mint = state.snapshot.asset.mint, state.snapshot.lp.mint
    pair = (asset_mint, lp_mint) if direction is Direction.DEPOSIT else (lp_mint, asset_mint)
    return [quote(state, pair[0], pair[1], amount, now) for amount in amounts]


async def load_venues(fetcher: AccountFetcher, vault_keys: list[Pubkey]) -> tuple[list[VaultVenue], list[str]]:
    """Load every vault, collecting failures instead of stopping at the first one."""
    venues: list[VaultVenue] = []
    failures: list[str] = []
    with tqdm(vault_keys, desc="🔗 Refreshing vaults", unit="vault", file=sys.stderr) as pbar:
        for key in pbar:
            pbar.set_postfix(vault=str(key)[:8])
            try:
                venues.append(await VaultVenue.load(key, fetcher))
            except (ValueError, RuntimeError, OSError) as ex:
                tqdm.write(f"⚠️  {key}: {ex}", file=sys.stderr)
                failures.append(str(key))
    return venues, failures


def main(argv: list[str]) -> int:
    """Main entry point."""
    args = parse_args(argv)

    rpc_url = args.rpc_url or os.getenv(RPC_URL_ENV)
    if not rpc_url:
        print(
            f"Error: RPC URL is required. Provide --rpc-url or set {RPC_URL_ENV} environment variable.",
            file=sys.stderr,
        )
        return 2

    fetcher: AccountFetcher = RpcAccountFetcher(
        rpc_url, commitment=args.commitment, timeout_s=DEFAULT_TIMEOUT, batch_size=DEFAULT_BATCH_SIZE
    )
    if not args.no_cache:
        fetcher = CachedAccountFetcher(fetcher, max_age_s=args.cache_max_age, namespace=rpc_url)

    venues, failures = asyncio.run(load_venues(fetcher, args.vaults))
    if not venues:
        print("No vault could be loaded.", file=sys.stderr)
        return 1

    directions = [Direction.DEPOSIT, Direction.REDEEM] if args.direction == "both" else [Direction(args.direction)]

    for venue in venues:
        state = venue.state
        now = resolve_now(state, args.now)
        issues = validate_vault_snapshot(state.snapshot, vault_key=str(state.vault_key), warn_only=True)
        try:
            print_vault_summary(state, now, issues)
        except VaultError as ex:
            print(f"⚠️  {state.vault_key}: summary failed: {ex}", file=sys.stderr)
            failures.append(str(state.vault_key))
            continue
        for direction in directions:
            in_decimals = state.asset_decimals if direction is Direction.DEPOSIT else state.lp_decimals
            base = args.amount if args.amount is not None else 10**in_decimals
            try:
                results = quote_ladder(state, direction, ladder_amounts(base, args.ladder), now)
            except VaultError as ex:
                print(f"⚠️  {state.vault_key}: {direction.value} quote failed: {ex}", file=sys.stderr)
                failures.append(str(state.vault_key))
                continue
            print_quotes(state, direction, results)
        print("")

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
