"""Block-time pass over the stored height range."""

from typing import TYPE_CHECKING

from src.helpers.logging import get_logger
from src.helpers.progress import track_progress


if TYPE_CHECKING:
    from rich.console import Console

    from src.etl.merge import MergeEngine
    from src.etl.models import BlockRecord, HeightRange


logger = get_logger(__name__)


def block_time_between(
    previous: "BlockRecord | None", current: "BlockRecord"
) -> int | None:
    """Seconds between two consecutive records.

    None when there is no previous record or its timestamp is later than the
    current one; a block time is never negative.
    """
    if previous is None or current.timestamp < previous.timestamp:
        return None
    return current.timestamp - previous.timestamp


async def derive_block_times(
    engine: "MergeEngine",
    height_range: "HeightRange",
    console: "Console | None" = None,
) -> int:
    """Set ``block_time`` on every stored record of the range, in place.

    Heights are walked in ascending order. ``min_height`` has no predecessor
    in the range and always ends up with ``block_time`` unset.

    Args:
        engine: Merge engine over the record store
        height_range: Heights to walk
        console: Console for progress display (optional)

    Returns:
        Number of records that got a block time
    """
    derived = 0
    previous: BlockRecord | None = None
    with track_progress(
        "Deriving block times", total=height_range.size, console=console
    ) as (progress, task_id):
        for height in height_range.heights():
            progress.update(task_id, advance=1)
            current = await engine.get(height)
            if current is None:
                previous = None
                continue

            # previous is the record at height - 1, or None across a gap
            block_time = block_time_between(previous, current)
            if block_time is None and previous is not None:
                logger.warning(
                    "Height %d timestamp %d is before height %d timestamp %d",
                    height,
                    current.timestamp,
                    previous.height,
                    previous.timestamp,
                )
            if block_time != current.block_time:
                current = current.model_copy(update={"block_time": block_time})
                await engine.put(current)
            if block_time is not None:
                derived += 1
            previous = current

    logger.info(
        "Derived block times for %d of %d heights (%d..%d)",
        derived,
        height_range.size,
        height_range.min_height,
        height_range.max_height,
    )
    return derived


__all__ = [
    "block_time_between",
    "derive_block_times",
]
