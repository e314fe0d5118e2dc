"""Constants and configuration for vault quoting."""

# Protocol program and SPL token programs (base58).
VAULT_PROGRAM_ID = "vVoLTRjQmtFpiYoegx285Ze4gsLJ8ZxgFKVcuvmG1a8"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

# Fixed-point / fee arithmetic
MAX_FEE_BPS = 10_000
ONE_YEAR_SECONDS = 365 * 24 * 60 * 60
DEAD_WEIGHT = 1_000  # share units burned once on the first issuance
LP_DECIMALS = 9  # vault share tokens always use 9 decimals
Q_FRACTIONAL_BITS = 48

U16_MAX = 2**16 - 1
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1

# Vault account layout. Offsets are relative to the end of the 8-byte discriminator.
DISCRIMINATOR_SIZE = 8
ASSET_OFFSET = 96
LP_OFFSET = 264
CONFIGURATION_OFFSET = 424
FEE_CONFIGURATION_OFFSET = 504
FEE_UPDATE_OFFSET = 552
FEE_STATE_OFFSET = 568
DEAD_WEIGHT_OFFSET = 608
HIGH_WATER_MARK_OFFSET = 616
LAST_UPDATED_TS_OFFSET = 648
LOCKED_PROFIT_STATE_OFFSET = 664
VAULT_RECORD_END = 680
VAULT_ACCOUNT_SIZE = DISCRIMINATOR_SIZE + VAULT_RECORD_END

# SPL Token base layouts (shared by Token and Token-2022).
MINT_ACCOUNT_SIZE = 82
MINT_SUPPLY_OFFSET = 36
MINT_DECIMALS_OFFSET = 44
MINT_INITIALIZED_OFFSET = 45
TOKEN_ACCOUNT_SIZE = 165
TOKEN_ACCOUNT_AMOUNT_OFFSET = 64
TOKEN_ACCOUNT_STATE_OFFSET = 108

# RPC
RPC_URL_ENV = "SOLANA_RPC_URL"
DEFAULT_COMMITMENT = "confirmed"
MAX_ACCOUNTS_PER_REQUEST = 100  # getMultipleAccounts hard limit

# Caching
CACHE_DIR_NAME = ".vault_quoter_cache"
CACHE_VERSION = "1"  # Increment to invalidate all caches
DEFAULT_CACHE_MAX_AGE_S = 10
