"""Tendermint (consensus) log pass: one BlockRecord per executed block."""

from contextlib import closing
from datetime import UTC, datetime

from src.etl.constants import (
    EXECUTED_BLOCK_MARKER,
    HEIGHT_KEY,
    INVALID_TXS_KEY,
    TIMESTAMP_END,
    TIMESTAMP_FORMAT,
    TIMESTAMP_START,
    VALID_TXS_KEY,
)
from src.etl.models import BlockRecord, HeightRange
from src.helpers.errors import IngestionError
from src.helpers.ingest import IngestionBase
from src.helpers.parsers import parse_uint


REQUIRED_KEYS = (HEIGHT_KEY, VALID_TXS_KEY, INVALID_TXS_KEY)


def parse_key_values(line: str) -> dict[str, str]:
    """Collect whitespace-separated ``key=value`` tokens of a line.

    Tokens with no ``=`` or more than one are ignored.

    Example:
        >>> parse_key_values("Executed block module=state height=191 a=b=c")
        {'module': 'state', 'height': '191'}
    """
    pairs: dict[str, str] = {}
    for word in line.split():
        kv = word.split("=")
        if len(kv) == 2:
            pairs[kv[0]] = kv[1]
    return pairs


def parse_timestamp(line: str) -> int:
    """Parse the fixed-width ``YYYY-MM-DD|HH:MM:SS.mmm`` header as UTC seconds.

    Raises:
        ValueError: If the header does not match the format
    """
    stamp = datetime.strptime(line[TIMESTAMP_START:TIMESTAMP_END], TIMESTAMP_FORMAT)
    return int(stamp.replace(tzinfo=UTC).timestamp())


class TendermintLogParser(IngestionBase):
    """Create a record for every ``Executed block`` line of the tendermint log."""

    def parse_line(self, line: str, line_number: int = 0) -> BlockRecord | None:
        """Parse one tendermint log line.

        Returns:
            The block record, or None if the line is not an executed-block line

        Raises:
            IngestionError: If the line is an executed-block line but the
                timestamp, height or transaction counts cannot be parsed
        """
        if EXECUTED_BLOCK_MARKER not in line:
            return None

        try:
            timestamp = parse_timestamp(line)
        except ValueError as e:
            raise IngestionError(
                self.path, line_number, line, f"bad timestamp ({e})"
            ) from e

        pairs = parse_key_values(line)
        values: dict[str, int] = {}
        for key in REQUIRED_KEYS:
            if key not in pairs:
                raise IngestionError(self.path, line_number, line, f"missing {key}=")
            try:
                values[key] = parse_uint(pairs[key])
            except ValueError as e:
                raise IngestionError(
                    self.path, line_number, line, f"bad {key}= ({e})"
                ) from e

        return BlockRecord(
            height=values[HEIGHT_KEY],
            timestamp=timestamp,
            tx_count=values[VALID_TXS_KEY] + values[INVALID_TXS_KEY],
            valid_tx_count=values[VALID_TXS_KEY],
        )

    async def run(self) -> HeightRange | None:
        """Ingest the whole tendermint log.

        Returns:
            Height range of the created records, None if the log had none

        Raises:
            IngestionError: On the first malformed executed-block line
            StoreError: If a record cannot be written
        """
        created = 0
        with closing(self.read_lines()) as lines:
            for line_number, line in lines:
                record = self.parse_line(line, line_number)
                if record is None:
                    continue
                await self.engine.create(record)
                created += 1
                self.logger.debug(
                    "Created record %d (%d txs)", record.height, record.tx_count
                )

        self.logger.info("Created %d block records from %s", created, self.path)
        return self.engine.height_range


__all__ = [
    "TendermintLogParser",
    "parse_key_values",
    "parse_timestamp",
]
