"""Account fetching and vault state refresh."""

import asyncio
import itertools
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from solders.pubkey import Pubkey

from vault_quoter.constants import DEFAULT_COMMITMENT, MAX_ACCOUNTS_PER_REQUEST
from vault_quoter.errors import ErrorKind, VaultError
from vault_quoter.models import VaultSnapshot, VaultState
from vault_quoter.parsing import decode_base64_account, decode_mint, decode_token_account, decode_vault


class AccountFetcher(Protocol):
    """Batch account source: one slot per requested key, None when the account does not exist."""

    async def fetch(self, keys: Sequence[Pubkey]) -> list[bytes | None]: ...  # pragma: no cover


def iter_key_batches(keys: Sequence[Pubkey], batch_size: int) -> Iterable[Sequence[Pubkey]]:
    """Iterate over keys in request-sized batches."""
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")
    for start in range(0, len(keys), batch_size):
        yield keys[start : start + batch_size]


class RpcAccountFetcher:
    """Fetch raw account data over Solana JSON-RPC (`getMultipleAccounts`, base64 encoding)."""

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = DEFAULT_COMMITMENT,
        timeout_s: int = 30,
        batch_size: int = MAX_ACCOUNTS_PER_REQUEST,
    ) -> None:
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.timeout_s = timeout_s
        self.batch_size = min(batch_size, MAX_ACCOUNTS_PER_REQUEST)
        self._request_ids = itertools.count(1)

    def _post(self, method: str, params: list[Any]) -> Any:
        import requests  # pylint: disable=import-outside-toplevel

        payload = {"jsonrpc": "2.0", "id": next(self._request_ids), "method": method, "params": params}
        resp = requests.post(self.rpc_url, json=payload, timeout=self.timeout_s)
        resp.raise_for_status()
        body = resp.json()
        if "error" in body:
            raise RuntimeError(f"RPC error: {body['error']}")
        return body.get("result")

    def fetch_sync(self, keys: Sequence[Pubkey]) -> list[bytes | None]:
        """Blocking variant of `fetch`."""
        out: list[bytes | None] = []
        for batch in iter_key_batches(list(keys), self.batch_size):
            result = self._post(
                "getMultipleAccounts",
                [[str(k) for k in batch], {"encoding": "base64", "commitment": self.commitment}],
            )
            values = (result or {}).get("value")
            if not isinstance(values, list) or len(values) != len(batch):
                raise RuntimeError(f"Unexpected getMultipleAccounts response for {len(batch)} keys: {result!r}")
            for value in values:
                out.append(None if value is None else decode_base64_account(value.get("data")))
        return out

    async def fetch(self, keys: Sequence[Pubkey]) -> list[bytes | None]:
        return await asyncio.to_thread(self.fetch_sync, keys)


def dependent_keys(vault_key: Pubkey, snapshot: VaultSnapshot) -> list[Pubkey]:
    """Accounts a refresh reads, in order: vault, share mint, asset mint, idle asset account."""
    return [vault_key, snapshot.lp.mint, snapshot.asset.mint, snapshot.asset.idle_ata]


def _require(data: bytes | None, key: Pubkey, what: str) -> bytes:
    if data is None:
        raise VaultError(ErrorKind.ACCOUNT_NOT_FOUND, f"{what} account {key} not found")
    return data


def build_vault_state(vault_key: Pubkey, accounts: Sequence[bytes | None], keys: Sequence[Pubkey]) -> VaultState:
    """
    Build a VaultState from the four dependent accounts.

    `accounts` and `keys` follow the order of `dependent_keys`. Any missing or
    undecodable account fails the whole build.
    """
    if len(accounts) != 4 or len(keys) != 4:
        raise ValueError(f"Expected 4 accounts, got {len(accounts)}")

    snapshot = decode_vault(_require(accounts[0], keys[0], "vault"))
    lp_mint = decode_mint(_require(accounts[1], keys[1], "share mint"))
    asset_mint = decode_mint(_require(accounts[2], keys[2], "asset mint"))
    idle = decode_token_account(_require(accounts[3], keys[3], "idle asset"))

    return VaultState(
        vault_key=vault_key,
        snapshot=snapshot,
        lp_supply=lp_mint.supply,
        lp_decimals=lp_mint.decimals,
        asset_decimals=asset_mint.decimals,
        asset_idle_balance=idle.amount,
        initialized=True,
    )


async def fetch_vault_state(
    fetcher: AccountFetcher, vault_key: Pubkey, snapshot: VaultSnapshot | None = None
) -> VaultState:
    """
    Fetch and decode everything a quote needs.

    Without a known snapshot the vault record is fetched first to learn the
    dependent keys; the four accounts are then read in a single batch.
    """
    if snapshot is None:
        (raw,) = await fetcher.fetch([vault_key])
        snapshot = decode_vault(_require(raw, vault_key, "vault"))

    keys = dependent_keys(vault_key, snapshot)
    accounts = await fetcher.fetch(keys)
    if len(accounts) != len(keys):
        raise RuntimeError(f"Fetcher returned {len(accounts)} accounts for {len(keys)} keys")
    return build_vault_state(vault_key, accounts, keys)
