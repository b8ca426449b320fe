"""Exceptions raised by the ETL pipeline."""

from pathlib import Path


class EtlError(Exception):
    """Base class for pipeline failures."""


class IngestionError(EtlError):
    """A log line matched a marker but does not follow the expected format.

    Attributes:
        path: Log file being ingested
        line_number: 1-based line number of the offending line
        line: The offending line, without trailing newline
    """

    def __init__(
        self,
        path: Path | str,
        line_number: int,
        line: str,
        reason: str,
    ) -> None:
        self.path = Path(path)
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"{self.path}:{line_number}: {reason}: {line!r}")


class StoreError(EtlError):
    """The record store failed or returned a value that is not a record."""


__all__ = [
    "EtlError",
    "IngestionError",
    "StoreError",
]
