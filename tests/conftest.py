"""Pytest configuration and shared fixtures for the ETL tests."""

from io import StringIO
from pathlib import Path

import pytest
import pytest_asyncio

from typing import IO, TYPE_CHECKING, Any

from fakeredis import FakeAsyncRedis, FakeServer
from rich.console import Console

from src.etl.merge import MergeEngine
from src.helpers.store import RecordStore


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable


@pytest_asyncio.fixture
async def redis_client() -> "AsyncGenerator[FakeAsyncRedis]":
    """Provide an isolated in-process Redis.

    Yields:
        FakeAsyncRedis: Client bound to a fresh fake server
    """
    client = FakeAsyncRedis(server=FakeServer())
    yield client
    await client.aclose()


@pytest.fixture
def record_store(redis_client: FakeAsyncRedis) -> RecordStore:
    """Record store over the fake Redis."""
    return RecordStore(redis_client)


@pytest.fixture
def engine(record_store: RecordStore) -> MergeEngine:
    """Merge engine over the fake record store."""
    return MergeEngine(record_store)


@pytest.fixture
def console() -> Console:
    """Console that swallows progress output."""
    return Console(file=StringIO())


@pytest.fixture
def write_log(tmp_path: Path) -> "Callable[[str, list[str]], Path]":
    """Write log lines to a file under tmp_path.

    Returns:
        Function taking a file name and lines, returning the file path
    """

    def _write(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def opened_files(monkeypatch: pytest.MonkeyPatch) -> list[IO[Any]]:
    """Record every file object handed out by Path.open during the test."""
    opened: list[IO[Any]] = []
    real_open = Path.open

    def _open(self: Path, *args: Any, **kwargs: Any) -> IO[Any]:
        handle = real_open(self, *args, **kwargs)
        opened.append(handle)
        return handle

    monkeypatch.setattr(Path, "open", _open)
    return opened
