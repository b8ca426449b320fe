"""Merge engine: every record read and write of the ETL passes goes through here."""

from typing import TYPE_CHECKING

from pydantic import ValidationError

from src.etl.models import BlockRecord, HeightRange
from src.helpers.constants import HEIGHT_RANGE_KEY
from src.helpers.errors import StoreError
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    from src.etl.models import PhaseUpdate
    from src.helpers.store import RecordStore


logger = get_logger(__name__)


class MergeEngine:
    """Apply created records and partial phase updates against the store.

    Tracks the height range of the records created in this run. Phase
    updates never extend it, since they never create records.
    """

    def __init__(self, store: "RecordStore") -> None:
        self.store = store
        self.height_range: HeightRange | None = None

    async def get(self, height: int) -> BlockRecord | None:
        """Read the record at ``height``.

        Raises:
            StoreError: If the store fails or holds a value that is not a record
        """
        raw = await self.store.get(height)
        if raw is None:
            return None
        try:
            return BlockRecord.from_bytes(raw)
        except ValidationError as e:
            msg = f"Stored value at height {height} is not a block record: {e}"
            raise StoreError(msg) from e

    async def put(self, record: BlockRecord) -> None:
        """Write ``record`` under its height, overwriting any previous value."""
        await self.store.put(record.height, record.to_bytes())

    async def create(self, record: BlockRecord) -> None:
        """Store a freshly parsed record and extend the observed range."""
        await self.put(record)
        if self.height_range is None:
            self.height_range = HeightRange.of(record.height)
        else:
            self.height_range.extend(record.height)

    async def apply(self, update: "PhaseUpdate") -> bool:
        """Read-modify-write the phase fields of an existing record.

        Returns:
            True if the record existed and was updated, False if the height is
            unknown and the update was dropped
        """
        record = await self.get(update.height)
        if record is None:
            logger.debug(
                "Dropping %s update for unknown height %d", update.phase, update.height
            )
            return False

        await self.put(record.model_copy(update=update.fields))
        return True

    async def save_range(self) -> None:
        """Persist the observed height range for later ``load`` runs."""
        if self.height_range is None:
            return
        await self.store.put_meta(
            HEIGHT_RANGE_KEY, self.height_range.model_dump_json().encode()
        )

    async def load_range(self) -> HeightRange | None:
        """Restore the height range saved by a previous ingestion.

        Returns:
            The stored range, or None if nothing was ever ingested
        """
        raw = await self.store.get_meta(HEIGHT_RANGE_KEY)
        if raw is None:
            return None
        try:
            self.height_range = HeightRange.model_validate_json(raw)
        except ValidationError as e:
            msg = f"Stored height range is invalid: {e}"
            raise StoreError(msg) from e
        return self.height_range


__all__ = ["MergeEngine"]
