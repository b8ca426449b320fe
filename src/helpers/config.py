"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv

from src.helpers.constants import DEFAULT_STORE_ADDRESS


# Load environment variables from .env file
load_dotenv()


def get_required_env(key: str) -> str:
    """Get a required environment variable.

    Args:
        key: Environment variable name

    Returns:
        Environment variable value

    Raises:
        ValueError: If the environment variable is not set

    Example:
        ```python
        from src.helpers.config import get_required_env

        rpc_url = get_required_env("CHAIN_RPC_URL")
        ```
    """
    value = os.getenv(key)
    if not value:
        msg = f"{key} environment variable is not set"
        raise ValueError(msg)
    return value


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default

    Example:
        ```python
        from src.helpers.config import get_optional_env

        log_level = get_optional_env("LOG_LEVEL", "INFO")
        ```
    """
    return os.getenv(key, default)


def get_store_address(address: str | None = None) -> str:
    """Get the record store address from parameter, environment or default.

    Args:
        address: Optional address to use directly

    Returns:
        Store address: a socket path, ``host:port`` or a ``redis://`` URL

    Example:
        ```python
        from src.helpers.config import get_store_address

        # ETL_STORE_ADDRESS, or 127.0.0.1:6379 when unset
        address = get_store_address()
        ```
    """
    if address:
        return address

    return get_optional_env("ETL_STORE_ADDRESS") or DEFAULT_STORE_ADDRESS


def get_rpc_url(rpc_url: str | None = None) -> str:
    """Get the chain JSON-RPC URL from parameter or environment.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Chain JSON-RPC URL

    Raises:
        ValueError: If RPC URL is not provided and CHAIN_RPC_URL is not set

    Example:
        ```python
        from src.helpers.config import get_rpc_url

        rpc_url = get_rpc_url("http://node0:8545")
        ```
    """
    return rpc_url or get_required_env("CHAIN_RPC_URL")


def get_log_level(log_level: str | None = None) -> str:
    """Get the log level from parameter or environment.

    Args:
        log_level: Optional log level to use directly

    Returns:
        Upper-cased log level name, INFO when nothing is configured
    """
    return (log_level or get_optional_env("LOG_LEVEL") or "INFO").upper()


__all__ = [
    "get_log_level",
    "get_optional_env",
    "get_required_env",
    "get_rpc_url",
    "get_store_address",
]
