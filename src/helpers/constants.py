"""Common configuration constants used across the application."""

# Record store
DEFAULT_STORE_ADDRESS = "127.0.0.1:6379"
"""Default Redis address for the record store (host:port)"""

HEIGHT_RANGE_KEY = "etl:height_range"
"""Store key holding the height range of the last ingestion"""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

# Retry Configuration
MAX_RETRIES = 5
"""Default maximum number of retry attempts"""

RETRY_BASE_DELAY = 1.0
"""Base delay for exponential backoff in seconds"""

RETRY_MAX_DELAY = 60.0
"""Maximum delay between retries in seconds"""

# HTTP Connection Pooling
MAX_KEEPALIVE_CONNECTIONS = 5
"""Maximum number of keepalive connections in pool"""

MAX_CONNECTIONS = 10
"""Maximum total number of connections"""

# Units
WEI_PER_ETH = 10**18
"""Number of wei in one ether"""

FUND_UNIT_WEI = WEI_PER_ETH // 10
"""Funding amounts are counted in units of 0.1 ETH"""

TRANSFER_GAS = 21_000
"""Gas limit of a plain value transfer"""

# Funding
BLOCK_TIME = 16
"""Default block time of the network in seconds"""

DEFAULT_SOURCE_KEYS = "source_keys.001"
"""Default key file of the funding account"""

DEFAULT_FUND_KEYS = "fund_keys.001"
"""Default key file of the funded accounts"""


__all__ = [
    "BLOCK_TIME",
    "DEFAULT_FUND_KEYS",
    "DEFAULT_SOURCE_KEYS",
    "DEFAULT_STORE_ADDRESS",
    "DEFAULT_TIMEOUT",
    "FUND_UNIT_WEI",
    "HEIGHT_RANGE_KEY",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "MAX_RETRIES",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "TRANSFER_GAS",
    "WEI_PER_ETH",
]
