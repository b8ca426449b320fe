"""Tests for the tendermint (consensus) log pass."""

from datetime import UTC, datetime

import pytest

from typing import IO, TYPE_CHECKING, Any

from src.etl.models import BlockRecord
from src.etl.tendermint import (
    TendermintLogParser,
    parse_key_values,
    parse_timestamp,
)
from src.helpers.errors import IngestionError
from tests.log_lines import DEFAULT_TS, tendermint_line


if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from redis.asyncio import Redis
    from rich.console import Console

    from src.etl.merge import MergeEngine


EXPECTED_TS = int(datetime(2022, 4, 7, 2, 17, 7, tzinfo=UTC).timestamp())


class TestParseKeyValues:
    """Tests for parse_key_values function."""

    def test_collects_key_value_tokens(self) -> None:
        """Test that key=value tokens are collected."""
        pairs = parse_key_values("height=191 validTxs=3368 invalidTxs=666")

        assert pairs == {"height": "191", "validTxs": "3368", "invalidTxs": "666"}

    def test_ignores_tokens_without_single_equals(self) -> None:
        """Test that plain words and a=b=c tokens are ignored."""
        pairs = parse_key_values("Executed block a=b=c module=state")

        assert pairs == {"module": "state"}


class TestParseTimestamp:
    """Tests for parse_timestamp function."""

    def test_parses_header_as_utc_seconds(self) -> None:
        """Test that the fixed-width header is parsed as UTC."""
        assert parse_timestamp(tendermint_line(1)) == EXPECTED_TS

    def test_drops_milliseconds(self) -> None:
        """Test that sub-second precision is truncated."""
        line = tendermint_line(1, ts="2022-04-07|02:17:07.999")

        assert parse_timestamp(line) == EXPECTED_TS

    def test_rejects_malformed_header(self) -> None:
        """Test that a header with the wrong separator is rejected."""
        with pytest.raises(ValueError):
            parse_timestamp(tendermint_line(1, ts="2022-04-07 02:17:07.759"))


class TestParseLine:
    """Tests for TendermintLogParser.parse_line."""

    @pytest.fixture
    def parser(self, tmp_path: "Path", engine: "MergeEngine", console: "Console") -> TendermintLogParser:
        return TendermintLogParser(tmp_path / "tendermint.log", engine, console)

    def test_parses_executed_block_line(self, parser: TendermintLogParser) -> None:
        """Test parsing a well-formed executed-block line."""
        record = parser.parse_line(tendermint_line(191, valid=3368, invalid=666))

        assert record == BlockRecord(
            height=191,
            timestamp=EXPECTED_TS,
            tx_count=4034,
            valid_tx_count=3368,
        )

    def test_tx_count_is_valid_plus_invalid(self, parser: TendermintLogParser) -> None:
        """Test that tx_count adds valid and invalid transactions."""
        for valid, invalid in [(0, 0), (3, 1), (5, 0), (0, 7)]:
            record = parser.parse_line(tendermint_line(10, valid, invalid))

            assert record is not None
            assert record.tx_count == valid + invalid
            assert record.valid_tx_count == valid

    def test_new_record_has_no_timing(self, parser: TendermintLogParser) -> None:
        """Test that phases default to 0 and block_time is unset."""
        record = parser.parse_line(tendermint_line(10, 1, 1))

        assert record is not None
        assert record.block_time is None
        assert record.phase_begin == 0
        assert record.phase_commit_evm == 0

    def test_skips_lines_without_marker(self, parser: TendermintLogParser) -> None:
        """Test that unrelated lines are skipped."""
        line = f"I[{DEFAULT_TS}] Committed state module=state height=191 txs=4034"

        assert parser.parse_line(line) is None

    def test_ignores_unknown_keys(self, parser: TendermintLogParser) -> None:
        """Test that extra key=value tokens do not matter."""
        line = tendermint_line(12, 1, 2) + " appHash=ABCDEF extra=1"

        record = parser.parse_line(line)

        assert record is not None
        assert record.height == 12

    def test_missing_height_raises(self, parser: TendermintLogParser) -> None:
        """Test that an executed-block line without height= is fatal."""
        with pytest.raises(IngestionError, match="missing height="):
            parser.parse_line(tendermint_line(None, 3, 1), line_number=7)

    def test_non_numeric_count_raises(self, parser: TendermintLogParser) -> None:
        """Test that a non-numeric count is fatal."""
        line = tendermint_line(10, 3, 1).replace("validTxs=3", "validTxs=three")

        with pytest.raises(IngestionError, match="validTxs"):
            parser.parse_line(line)

    def test_negative_count_raises(self, parser: TendermintLogParser) -> None:
        """Test that a signed count is rejected."""
        line = tendermint_line(10, 3, 1).replace("invalidTxs=1", "invalidTxs=-1")

        with pytest.raises(IngestionError, match="invalidTxs"):
            parser.parse_line(line)

    def test_bad_timestamp_raises(self, parser: TendermintLogParser) -> None:
        """Test that an unparseable timestamp is fatal."""
        line = tendermint_line(10, 3, 1, ts="2022-13-07|02:17:07.759")

        with pytest.raises(IngestionError, match="bad timestamp"):
            parser.parse_line(line)

    def test_error_names_file_and_line(self, parser: TendermintLogParser) -> None:
        """Test that the ingestion error carries the file and line number."""
        with pytest.raises(IngestionError) as exc_info:
            parser.parse_line(tendermint_line(None), line_number=42)

        assert exc_info.value.path.name == "tendermint.log"
        assert exc_info.value.line_number == 42
        assert "tendermint.log:42" in str(exc_info.value)


class TestRun:
    """Tests for TendermintLogParser.run."""

    @pytest.mark.asyncio
    async def test_creates_records_and_tracks_range(
        self,
        write_log: "Callable[[str, list[str]], Path]",
        engine: "MergeEngine",
        console: "Console",
    ) -> None:
        """Test that every executed block is stored and the range tracked."""
        path = write_log(
            "tendermint.log",
            [
                tendermint_line(12, 1, 0),
                "I[2022-04-07|02:17:07.800] Committed state module=state height=12",
                tendermint_line(10, 3, 1),
                tendermint_line(11, 5, 0),
            ],
        )

        height_range = await TendermintLogParser(path, engine, console).run()

        assert height_range is not None
        assert (height_range.min_height, height_range.max_height) == (10, 12)
        for height in (10, 11, 12):
            assert await engine.get(height) is not None

    @pytest.mark.asyncio
    async def test_empty_log_returns_none(
        self,
        write_log: "Callable[[str, list[str]], Path]",
        engine: "MergeEngine",
        console: "Console",
    ) -> None:
        """Test that a log without executed blocks yields no range."""
        path = write_log("tendermint.log", ["I[2022-04-07|02:17:07.800] started"])

        assert await TendermintLogParser(path, engine, console).run() is None

    @pytest.mark.asyncio
    async def test_rerun_is_byte_identical(
        self,
        write_log: "Callable[[str, list[str]], Path]",
        engine: "MergeEngine",
        redis_client: "Redis",
        console: "Console",
    ) -> None:
        """Test that re-ingesting the same file overwrites with identical bytes."""
        path = write_log(
            "tendermint.log", [tendermint_line(10, 3, 1), tendermint_line(11, 5, 0)]
        )

        await TendermintLogParser(path, engine, console).run()
        first = [await redis_client.get(h) for h in (10, 11)]
        await TendermintLogParser(path, engine, console).run()
        second = [await redis_client.get(h) for h in (10, 11)]

        assert first == second
        assert all(value is not None for value in second)

    @pytest.mark.asyncio
    async def test_missing_height_aborts_pass(
        self,
        write_log: "Callable[[str, list[str]], Path]",
        engine: "MergeEngine",
        console: "Console",
    ) -> None:
        """Test that a malformed line aborts the pass with the tendermint file named."""
        path = write_log(
            "tendermint.log",
            [tendermint_line(10, 3, 1), tendermint_line(None, 5, 0), tendermint_line(12)],
        )

        with pytest.raises(IngestionError) as exc_info:
            await TendermintLogParser(path, engine, console).run()

        assert exc_info.value.path == path
        assert exc_info.value.line_number == 2
        # Lines after the failure are not ingested
        assert await engine.get(12) is None

    @pytest.mark.asyncio
    async def test_abort_closes_log(
        self,
        write_log: "Callable[[str, list[str]], Path]",
        engine: "MergeEngine",
        console: "Console",
        opened_files: list[IO[Any]],
    ) -> None:
        """Test that the log file is closed when a malformed line aborts the pass."""
        path = write_log(
            "tendermint.log",
            [tendermint_line(10, 3, 1), tendermint_line(None, 5, 0), tendermint_line(12)],
        )

        with pytest.raises(IngestionError):
            await TendermintLogParser(path, engine, console).run()

        handles = [handle for handle in opened_files if handle.mode == "r"]
        assert len(handles) == 1
        assert handles[0].closed

    @pytest.mark.asyncio
    async def test_invalid_utf8_aborts_pass(
        self,
        tmp_path: "Path",
        engine: "MergeEngine",
        console: "Console",
    ) -> None:
        """Test that undecodable bytes fail ingestion with the tendermint file named."""
        path = tmp_path / "tendermint.log"
        path.write_bytes(b"\xff\xfe\n")

        with pytest.raises(IngestionError) as exc_info:
            await TendermintLogParser(path, engine, console).run()

        assert exc_info.value.path == path
        assert engine.height_range is None
