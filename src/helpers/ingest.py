"""Base classes and utilities for log ingestion passes."""

from abc import ABC, abstractmethod
from pathlib import Path

from typing import TYPE_CHECKING, Any

from rich.console import Console

from src.helpers.errors import IngestionError
from src.helpers.logging import get_logger
from src.helpers.progress import track_progress


if TYPE_CHECKING:
    from collections.abc import Iterator

    from src.etl.merge import MergeEngine


class IngestionBase(ABC):
    """Abstract base class for one linear pass over a log file.

    Provides common functionality for both log parsers:
    - Console initialization for progress display
    - Scoped, line-by-line reading of the log file
    - Access to the merge engine

    Subclasses must implement:
    - parse_line(): Turn one line into a record or update, or None to skip it
    - run(): Main pass logic
    """

    def __init__(
        self,
        path: Path | str,
        engine: "MergeEngine",
        console: Console | None = None,
    ) -> None:
        """Initialize ingestion pass.

        Args:
            path: Log file to read
            engine: Merge engine the pass writes through
            console: Console for progress display, stderr by default
        """
        self.path = Path(path)
        self.engine = engine
        self.console = console or Console(stderr=True)
        self.logger = get_logger(self.__class__.__module__)

    def read_lines(self) -> "Iterator[tuple[int, str]]":
        """Yield ``(line_number, line)`` pairs, 1-based, without newlines.

        The file is opened when iteration starts and closed when it ends,
        including when the consumer stops early on an exception.

        Raises:
            IngestionError: If the file cannot be read or is not valid UTF-8
        """
        line_number = 0
        try:
            with (
                self.path.open(encoding="utf-8") as log_file,
                track_progress(
                    f"Reading {self.path.name}", total=None, console=self.console
                ) as (progress, task_id),
            ):
                for line_number, line in enumerate(log_file, start=1):
                    progress.update(task_id, advance=1)
                    yield line_number, line.rstrip("\r\n")
        except UnicodeDecodeError as e:
            raise IngestionError(
                self.path, line_number + 1, "", f"not valid UTF-8 ({e.reason})"
            ) from e
        except OSError as e:
            raise IngestionError(
                self.path, line_number, "", f"cannot read log ({e.strerror or e})"
            ) from e

    @abstractmethod
    def parse_line(self, line: str, line_number: int = 0) -> Any:
        """Parse one line; return None when the line is not relevant."""
        ...

    @abstractmethod
    async def run(self) -> Any:
        """Run the pass to the end of the file."""
        ...


__all__ = ["IngestionBase"]
