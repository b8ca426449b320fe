"""Shared progress bar utilities for Rich console displays."""

from contextlib import contextmanager

from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)


if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console


def create_standard_progress(
    console: "Console | None" = None, *, expand: bool = False
) -> Progress:
    """Create a standard progress bar with time remaining estimation.

    Use this for passes with a known total, such as a scan over a height
    range.

    Args:
        console: Rich console instance (optional)
        expand: Whether to expand the progress bar to full width

    Returns:
        Configured Progress instance with:
        - Spinner
        - Task description
        - Progress bar
        - M of N counter
        - Time elapsed
        - Time remaining
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        console=console,
        expand=expand,
        transient=True,
    )


def create_line_progress(
    console: "Console | None" = None, *, expand: bool = False
) -> Progress:
    """Create a counter-only progress display for streams of unknown length.

    Log files are read lazily, so the total is unknown until the pass ends.

    Args:
        console: Rich console instance (optional)
        expand: Whether to expand the progress display to full width

    Returns:
        Configured Progress instance with:
        - Spinner
        - Task description
        - Lines read counter
        - Time elapsed
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed:,} lines"),
        TextColumn("•"),
        TimeElapsedColumn(),
        console=console,
        expand=expand,
        transient=True,
    )


@contextmanager
def track_progress(
    description: str,
    total: int | None,
    console: "Console | None" = None,
) -> "Iterator[tuple[Progress, TaskID]]":
    """Context manager for tracking progress with automatic cleanup.

    A known total gets the standard bar, an unknown one (None) gets the
    line counter.

    Args:
        description: Task description to display
        total: Total number of items to process, or None if unknown
        console: Rich console instance (optional)

    Yields:
        Tuple of (Progress instance, TaskID) for updating progress

    Example:
        ```python
        from src.helpers.progress import track_progress

        with track_progress("Reading tendermint log", total=None) as (progress, task):
            for line in lines:
                progress.update(task, advance=1)
        ```
    """
    if total is None:
        progress = create_line_progress(console)
    else:
        progress = create_standard_progress(console)

    with progress:
        task_id = progress.add_task(description, total=total)
        yield progress, task_id


__all__ = [
    "TaskID",
    "create_line_progress",
    "create_standard_progress",
    "track_progress",
]
