"""Abcid (application) log pass: phase durations merged into existing records."""

from contextlib import closing
from pathlib import Path

from typing import TYPE_CHECKING

from src.etl.constants import PHASE_FIELDS, TD_HEIGHT_TOKEN, TPS_MARKER, Phase
from src.etl.models import PhaseUpdate
from src.helpers.errors import IngestionError
from src.helpers.ingest import IngestionBase
from src.helpers.parsers import parse_uint


if TYPE_CHECKING:
    from rich.console import Console

    from src.etl.merge import MergeEngine


class AbcidLogParser(IngestionBase):
    """Apply ``tps,`` timing lines of the abcid log to the stored records.

    Only the part of a line after its header is split on commas. By default
    the header ends where the ``tps,`` marker starts; ``prefix_width`` fixes
    the header width instead.
    """

    def __init__(
        self,
        path: Path | str,
        engine: "MergeEngine",
        console: "Console | None" = None,
        *,
        prefix_width: int | None = None,
    ) -> None:
        super().__init__(path, engine, console)
        self.prefix_width = prefix_width

    def _fields(self, line: str) -> list[str]:
        if self.prefix_width is not None:
            return line[self.prefix_width :].split(",")
        return line[line.index(TPS_MARKER) :].split(",")

    def parse_line(self, line: str, line_number: int = 0) -> PhaseUpdate | None:
        """Parse one abcid log line.

        Returns:
            The phase update, or None if the line is not a known timing line

        Raises:
            IngestionError: If a timing line has missing or non-numeric fields
                or a malformed ``td_height`` token
        """
        if TPS_MARKER not in line:
            return None

        words = self._fields(line)
        try:
            phase = Phase(words[-1])
        except ValueError:
            return None

        positions = PHASE_FIELDS[phase]
        # td_height sits right before the trailing marker, after every duration
        if len(words) - 2 <= max(positions.values()):
            raise IngestionError(
                self.path, line_number, line, f"too few fields for '{phase}'"
            )

        token = words[-2].split()
        if len(token) != 2 or token[0] != TD_HEIGHT_TOKEN:
            raise IngestionError(
                self.path, line_number, line, f"expected '{TD_HEIGHT_TOKEN} <N>'"
            )

        try:
            height = parse_uint(token[1])
            fields = {name: parse_uint(words[pos]) for name, pos in positions.items()}
        except ValueError as e:
            raise IngestionError(self.path, line_number, line, str(e)) from e

        return PhaseUpdate(height=height, phase=phase, fields=fields)

    async def run(self) -> int:
        """Ingest the whole abcid log.

        Returns:
            Number of updates applied to existing records

        Raises:
            IngestionError: On the first malformed timing line
            StoreError: If a record cannot be read or written
        """
        applied = 0
        dropped = 0
        with closing(self.read_lines()) as lines:
            for line_number, line in lines:
                update = self.parse_line(line, line_number)
                if update is None:
                    continue
                if await self.engine.apply(update):
                    applied += 1
                else:
                    dropped += 1

        self.logger.info(
            "Applied %d phase updates from %s (%d for unknown heights dropped)",
            applied,
            self.path,
            dropped,
        )
        return applied


__all__ = ["AbcidLogParser"]
