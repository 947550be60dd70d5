"""Constants used throughout the ticketfee package."""

# Currency unit conversions
ATOMS_PER_COIN = 100_000_000  # 1e8

# Fee estimation defaults
WINDOWS_TO_CONSIDER = 20  # Difficulty windows scanned by the window estimator
DEFAULT_BLOCKS_TO_AVG = 11
DEFAULT_FEE_SOURCE = "mean"
FEE_SOURCES = ("mean", "median")
DEFAULT_FEE_TARGET_SCALING = 1.0
DEFAULT_MIN_FEE_ATOMS = 0
DEFAULT_MAX_FEE_ATOMS = 0  # 0 disables the upper bound

# Log rotation defaults
DEFAULT_LOG_MAX_BYTES = 10_485_760  # 10MB
DEFAULT_LOG_BACKUP_COUNT = 30

# Network timeouts
DEFAULT_HTTP_TIMEOUT_SECS = 10

# Daemon RPC defaults
DEFAULT_RPC_URL = "http://127.0.0.1:14009"
DEFAULT_NETWORK = "mainnet"
