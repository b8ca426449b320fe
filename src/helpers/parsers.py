"""Parsing utilities for common data transformations."""

from datetime import UTC, datetime

from src.helpers.constants import WEI_PER_ETH


def parse_hex_int(hex_value: str | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string or None
        default: Default value if hex_value is None

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None:
        return default
    return int(hex_value, 16)


def parse_hex_timestamp(hex_timestamp: str) -> datetime:
    """Parse Unix timestamp from hex string to datetime.

    Args:
        hex_timestamp: Hex-encoded Unix timestamp string

    Returns:
        datetime: Timezone-aware UTC datetime

    Example:
        >>> parse_hex_timestamp("0x624e4b6b")
        datetime.datetime(2022, 4, 7, 2, 24, 43, tzinfo=datetime.timezone.utc)
    """
    return datetime.fromtimestamp(int(hex_timestamp, 16), tz=UTC)


def parse_uint(text: str) -> int:
    """Parse an unsigned decimal integer, rejecting signs and blanks.

    Raises:
        ValueError: If text is not made of ASCII digits only

    Example:
        >>> parse_uint("3368")
        3368
    """
    if not text.isascii() or not text.isdigit():
        msg = f"not an unsigned integer: {text!r}"
        raise ValueError(msg)
    return int(text)


def to_block_param(block_number: int | str) -> str:
    """Convert a block number to a JSON-RPC block parameter.

    Example:
        >>> to_block_param(255)
        '0xff'
        >>> to_block_param("latest")
        'latest'
    """
    return hex(block_number) if isinstance(block_number, int) else block_number


def wei_to_eth(wei: int | None) -> float | None:
    """Convert Wei to ETH (divide by 1e18).

    Args:
        wei: Amount in Wei, or None

    Returns:
        float | None: Amount in ETH, or None if input was None

    Example:
        >>> wei_to_eth(1000000000000000000)
        1.0
        >>> wei_to_eth(None)
        None
    """
    return wei / WEI_PER_ETH if wei is not None else None


__all__ = [
    "parse_hex_int",
    "parse_hex_timestamp",
    "parse_uint",
    "to_block_param",
    "wei_to_eth",
]
