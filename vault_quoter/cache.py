"""Caching functionality for account data."""

import base64
import hashlib
import json
import os
import shutil
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from solders.pubkey import Pubkey

from vault_quoter.constants import CACHE_DIR_NAME, CACHE_VERSION, DEFAULT_CACHE_MAX_AGE_S
from vault_quoter.onchain import AccountFetcher


def get_cache_dir() -> Path:
    """Get the cache directory path. Uses XDG_CACHE_HOME if available, otherwise ~/.cache."""
    cache_home = os.getenv("XDG_CACHE_HOME")
    if cache_home:
        base = Path(cache_home)
    else:
        base = Path.home() / ".cache"
    cache_dir = base / CACHE_DIR_NAME
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def clear_cache() -> None:
    """Clear all cached data."""
    cache_dir = get_cache_dir()
    if cache_dir.exists():
        shutil.rmtree(cache_dir)
        print("✅ Cache cleared successfully.", file=sys.stderr)
    else:
        print("ℹ️  Cache directory does not exist (nothing to clear).", file=sys.stderr)


def cache_key(prefix: str, *parts: Any) -> str:
    """Generate a deterministic cache key from prefix and parts."""
    key_str = f"{prefix}:{CACHE_VERSION}:" + ":".join(str(p) for p in parts)
    return hashlib.sha256(key_str.encode()).hexdigest()


def get_cached(key: str) -> Any | None:
    """Get cached data by key. Returns None if not found or invalid."""
    cache_file = get_cache_dir() / f"{key}.json"
    if not cache_file.exists():
        return None
    try:
        with cache_file.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        # Corrupted cache file: treat as a miss
        return None


def set_cached(key: str, data: Any) -> None:
    """Store data in cache."""
    cache_file = get_cache_dir() / f"{key}.json"
    try:
        with cache_file.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=None, separators=(",", ":"))
    except OSError as ex:
        print(f"⚠️  Failed to write cache entry {key[:12]}: {ex}", file=sys.stderr)


class CachedAccountFetcher:
    """
    Serve recently fetched accounts from the file cache and fetch the rest.

    Entries older than `max_age_s` are refetched. Missing accounts are never cached,
    so a vault that appears later is picked up on the next call.
    """

    def __init__(self, inner: AccountFetcher, *, max_age_s: float = DEFAULT_CACHE_MAX_AGE_S, namespace: str = "") -> None:
        self.inner = inner
        self.max_age_s = max_age_s
        self.namespace = namespace

    def _key(self, pubkey: Pubkey) -> str:
        return cache_key("account", self.namespace, str(pubkey))

    def _lookup(self, pubkey: Pubkey, now: float) -> bytes | None:
        cached = get_cached(self._key(pubkey))
        if not isinstance(cached, dict):
            return None
        try:
            if now - float(cached["fetched_at"]) > self.max_age_s:
                return None
            return base64.b64decode(cached["data"])
        except (KeyError, TypeError, ValueError):
            return None

    async def fetch(self, keys: Sequence[Pubkey]) -> list[bytes | None]:
        now = time.time()
        out: list[bytes | None] = [self._lookup(k, now) for k in keys]
        missing = [i for i, data in enumerate(out) if data is None]
        if not missing:
            return out

        fetched = await self.inner.fetch([keys[i] for i in missing])
        fetched_at = time.time()
        for i, data in zip(missing, fetched, strict=True):
            out[i] = data
            if data is not None:
                set_cached(
                    self._key(keys[i]),
                    {"fetched_at": fetched_at, "data": base64.b64encode(data).decode("ascii")},
                )
        return out
