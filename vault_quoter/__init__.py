"""Off-chain deposit/redeem quoting for share-token yield vaults."""

from typing import NoReturn

__version__ = "0.1.0"


def _entry_point() -> NoReturn:
    """Entry point for the vault-quoter script."""
    import sys

    from vault_quoter.cli import main

    raise SystemExit(main(sys.argv[1:]))


def _clear_cache_entry_point() -> NoReturn:
    """Entry point for clearing the cache."""
    from vault_quoter.cache import clear_cache

    clear_cache()
    raise SystemExit(0)
