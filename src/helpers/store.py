"""Record store connection helpers (Redis key-value store)."""

from contextlib import asynccontextmanager

from typing import TYPE_CHECKING, Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.helpers.config import get_store_address
from src.helpers.errors import StoreError
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import AsyncIterator


logger = get_logger(__name__)


def parse_store_address(address: str) -> dict[str, Any]:
    """Turn a store address into Redis connection keyword arguments.

    Three forms are accepted:

    - a filesystem socket, ``/var/run/redis.sock`` or ``unix:///var/run/redis.sock``
    - ``host:port``, e.g. ``127.0.0.1:6379``
    - a ``redis://`` or ``rediss://`` URL, returned as ``{"url": ...}``

    Args:
        address: Store address

    Returns:
        Keyword arguments for ``Redis(...)``, or ``{"url": ...}`` for
        ``Redis.from_url``

    Raises:
        ValueError: If the address is empty or the port is not a number

    Example:
        >>> parse_store_address("127.0.0.1:6379")
        {'host': '127.0.0.1', 'port': 6379}
        >>> parse_store_address("/tmp/redis.sock")
        {'unix_socket_path': '/tmp/redis.sock'}
    """
    address = address.strip()
    if not address:
        msg = "Store address cannot be empty"
        raise ValueError(msg)

    if address.startswith(("redis://", "rediss://")):
        return {"url": address}

    if address.startswith("unix://"):
        return {"unix_socket_path": address.removeprefix("unix://")}

    if "/" in address:
        return {"unix_socket_path": address}

    host, sep, port = address.rpartition(":")
    if not sep:
        return {"host": address, "port": 6379}
    if not port.isdigit():
        msg = f"Invalid store port in address: {address}"
        raise ValueError(msg)
    return {"host": host or "127.0.0.1", "port": int(port)}


def create_store_client(address: str | None = None) -> Redis:
    """Create a Redis client for the given (or configured) store address.

    No connection is made until the first command.
    """
    kwargs = parse_store_address(get_store_address(address))
    if "url" in kwargs:
        return Redis.from_url(kwargs["url"])
    return Redis(**kwargs)


class RecordStore:
    """Key-value store of serialized records, keyed by block height.

    Every Redis failure is raised as StoreError so callers can tell a bad
    backend apart from bad input.
    """

    def __init__(self, client: Redis) -> None:
        self.client = client

    async def get(self, height: int) -> bytes | None:
        """Return the value stored under ``height``, or None if absent."""
        return await self._get(height)

    async def put(self, height: int, value: bytes) -> None:
        """Store ``value`` under ``height``, overwriting any previous value."""
        await self._put(height, value)

    async def get_meta(self, key: str) -> bytes | None:
        """Return a metadata value stored next to the records."""
        return await self._get(key)

    async def put_meta(self, key: str, value: bytes) -> None:
        """Store a metadata value next to the records."""
        await self._put(key, value)

    async def ping(self) -> None:
        """Check that the store answers.

        Raises:
            StoreError: If the store cannot be reached
        """
        try:
            await self.client.ping()
        except RedisError as e:
            msg = f"Record store unreachable: {e}"
            raise StoreError(msg) from e

    async def close(self) -> None:
        """Release the underlying connection pool."""
        await self.client.aclose()

    async def _get(self, key: int | str) -> bytes | None:
        try:
            return await self.client.get(key)
        except RedisError as e:
            msg = f"Failed to read key {key}: {e}"
            raise StoreError(msg) from e

    async def _put(self, key: int | str, value: bytes) -> None:
        try:
            ok = await self.client.set(key, value)
        except RedisError as e:
            msg = f"Failed to write key {key}: {e}"
            raise StoreError(msg) from e
        if not ok:
            msg = f"Store rejected write of key {key}"
            raise StoreError(msg)


@asynccontextmanager
async def open_record_store(address: str | None = None) -> "AsyncIterator[RecordStore]":
    """Open a record store and close it on exit.

    Args:
        address: Store address, defaults to ETL_STORE_ADDRESS or 127.0.0.1:6379

    Yields:
        RecordStore: Connected store

    Raises:
        StoreError: If the store cannot be reached

    Example:
        ```python
        async with open_record_store("127.0.0.1:6379") as store:
            raw = await store.get(191)
        ```
    """
    store = RecordStore(create_store_client(address))
    try:
        await store.ping()
        logger.debug("Connected to record store at %s", get_store_address(address))
        yield store
    finally:
        await store.close()


__all__ = [
    "RecordStore",
    "create_store_client",
    "open_record_store",
    "parse_store_address",
]
