"""Pydantic models for per-block performance records."""

from typing import Self

from pydantic import BaseModel, Field, NonNegativeInt, model_validator

from src.etl.constants import Phase


class BlockRecord(BaseModel):
    """Performance record of one block, keyed by height.

    Created from the tendermint log, then filled in by up to three abcid
    timing lines and by the block-time pass.
    """

    height: NonNegativeInt = Field(..., frozen=True)
    timestamp: int = Field(..., description="Unix seconds (UTC) of block execution")
    tx_count: NonNegativeInt = Field(..., description="validTxs + invalidTxs")
    valid_tx_count: NonNegativeInt
    block_time: NonNegativeInt | None = Field(
        default=None, description="Seconds since the previous height"
    )
    phase_begin: NonNegativeInt = 0
    phase_snapshot: NonNegativeInt = 0
    phase_end: NonNegativeInt = 0
    phase_commit: NonNegativeInt = 0
    phase_commit_evm: NonNegativeInt = 0

    def to_bytes(self) -> bytes:
        """Serialize for the record store."""
        return self.model_dump_json().encode()

    @classmethod
    def from_bytes(cls, raw: bytes) -> Self:
        """Deserialize a value read from the record store."""
        return cls.model_validate_json(raw)


class PhaseUpdate(BaseModel):
    """Phase durations that one abcid line sets on the record at ``height``."""

    height: NonNegativeInt
    phase: Phase
    fields: dict[str, NonNegativeInt]


class HeightRange(BaseModel):
    """Inclusive range of heights created by the tendermint pass."""

    min_height: NonNegativeInt
    max_height: NonNegativeInt

    @model_validator(mode="after")
    def check_order(self) -> Self:
        if self.min_height > self.max_height:
            msg = f"min_height {self.min_height} > max_height {self.max_height}"
            raise ValueError(msg)
        return self

    @classmethod
    def of(cls, height: int) -> Self:
        """Range holding a single height."""
        return cls(min_height=height, max_height=height)

    def extend(self, height: int) -> None:
        """Grow the range to include ``height``."""
        self.min_height = min(self.min_height, height)
        self.max_height = max(self.max_height, height)

    def heights(self) -> range:
        """All heights in the range, ascending."""
        return range(self.min_height, self.max_height + 1)

    @property
    def size(self) -> int:
        return self.max_height - self.min_height + 1


__all__ = [
    "BlockRecord",
    "HeightRange",
    "PhaseUpdate",
]
