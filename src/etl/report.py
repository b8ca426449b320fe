"""Report pass: one CSV line per stored record, ascending by height."""

import sys

from typing import TYPE_CHECKING, TextIO

from src.helpers.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from src.etl.merge import MergeEngine
    from src.etl.models import BlockRecord, HeightRange


logger = get_logger(__name__)

REPORT_FIELDS = (
    "height",
    "block_time",
    "tx_count",
    "phase_begin",
    "phase_snapshot",
    "phase_end",
    "phase_commit",
    "phase_commit_evm",
)


def format_report_line(record: "BlockRecord") -> str:
    """Render a record as ``height,block_time,tx_count,begin,snapshot,end,commit,commit_evm``.

    An unset block time is written as 0, so a fresh record at height 11
    with 5 transactions renders as ``11,0,5,0,0,0,0,0``.
    """
    values = record.model_dump(include=set(REPORT_FIELDS))
    values["block_time"] = values["block_time"] or 0
    return ",".join(str(values[field]) for field in REPORT_FIELDS)


async def iter_report_lines(
    engine: "MergeEngine", height_range: "HeightRange"
) -> "AsyncIterator[str]":
    """Yield report lines for the range, skipping heights with no record."""
    for height in height_range.heights():
        record = await engine.get(height)
        if record is None:
            continue
        yield format_report_line(record)


async def emit_report(
    engine: "MergeEngine",
    height_range: "HeightRange",
    out: TextIO | None = None,
) -> int:
    """Write the report, one line per stored record, no header.

    Args:
        engine: Merge engine over the record store
        height_range: Heights to report
        out: Destination stream, stdout by default

    Returns:
        Number of lines written
    """
    out = out or sys.stdout
    written = 0
    async for line in iter_report_lines(engine, height_range):
        out.write(line + "\n")
        written += 1
    out.flush()

    logger.info(
        "Reported %d records (%d heights missing)",
        written,
        height_range.size - written,
    )
    return written


__all__ = [
    "REPORT_FIELDS",
    "emit_report",
    "format_report_line",
    "iter_report_lines",
]
