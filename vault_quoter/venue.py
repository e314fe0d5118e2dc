"""Quoting venue for a single vault: holds the current state and refreshes it."""

from solders.pubkey import Pubkey

from vault_quoter.constants import TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID, VAULT_PROGRAM_ID
from vault_quoter.errors import ErrorKind, VaultError
from vault_quoter.models import QuoteResult, VaultState
from vault_quoter.onchain import AccountFetcher, dependent_keys, fetch_vault_state
from vault_quoter.parsing import decode_vault
from vault_quoter.quoting import quote


class VaultVenue:
    """
    A vault as a two-token venue (asset <-> share).

    The current `VaultState` lives in a single slot. `refresh` builds a complete new
    state before publishing it with one assignment, and `quote` reads the slot once,
    so concurrent quotes never see fields from two different refreshes.
    """

    def __init__(self, state: VaultState) -> None:
        self._state = state

    @classmethod
    def from_account(cls, vault_key: Pubkey, data: bytes) -> "VaultVenue":
        """Build an uninitialized venue from the vault account alone; call `refresh` before quoting."""
        return cls(VaultState(vault_key=vault_key, snapshot=decode_vault(data)))

    @classmethod
    async def load(cls, vault_key: Pubkey, fetcher: AccountFetcher) -> "VaultVenue":
        return cls(await fetch_vault_state(fetcher, vault_key))

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def vault_key(self) -> Pubkey:
        return self._state.vault_key

    @property
    def initialized(self) -> bool:
        return self._state.initialized

    def program_id(self) -> Pubkey:
        return Pubkey.from_string(VAULT_PROGRAM_ID)

    def program_dependencies(self) -> list[Pubkey]:
        return [Pubkey.from_string(p) for p in (VAULT_PROGRAM_ID, TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID)]

    def token_mints(self) -> tuple[Pubkey, Pubkey]:
        """(asset mint, share mint)."""
        snapshot = self._state.snapshot
        return snapshot.asset.mint, snapshot.lp.mint

    def required_keys(self) -> list[Pubkey]:
        state = self._state
        return dependent_keys(state.vault_key, state.snapshot)

    async def refresh(self, fetcher: AccountFetcher) -> None:
        """Rebuild the state from fresh account data. On failure the previous state is kept."""
        current = self._state
        new_state = await fetch_vault_state(fetcher, current.vault_key, current.snapshot)
        self._state = new_state

    def quote(self, input_mint: Pubkey, output_mint: Pubkey, amount: int, now: int) -> QuoteResult:
        """Quote against the current state. A venue that was never refreshed cannot quote."""
        state = self._state
        if not state.initialized:
            raise VaultError(
                ErrorKind.UNSUPPORTED_OPERATION,
                f"vault {state.vault_key} has not been refreshed; mint supply and balances are unknown",
            )
        return quote(state, input_mint, output_mint, amount, now)
