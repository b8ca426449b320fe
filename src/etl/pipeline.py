"""ETL pipeline: tendermint pass, abcid pass, block-time pass, report."""

from pathlib import Path

from typing import TYPE_CHECKING, Self, TextIO

from pydantic import BaseModel, Field, model_validator
from rich.console import Console

from src.etl.abcid import AbcidLogParser
from src.etl.derive import derive_block_times
from src.etl.merge import MergeEngine
from src.etl.report import emit_report
from src.etl.tendermint import TendermintLogParser
from src.helpers.config import get_store_address
from src.helpers.logging import get_logger
from src.helpers.store import open_record_store


if TYPE_CHECKING:
    from src.etl.models import HeightRange
    from src.helpers.store import RecordStore


class EtlConfig(BaseModel):
    """Options of one pipeline run.

    With ``load`` set, the logs are not read again: the block-time and
    report passes run over what a previous run stored.
    """

    abcid_log_path: Path | None = None
    tendermint_log_path: Path | None = None
    store_address: str = Field(default_factory=get_store_address)
    load: bool = False
    abcid_prefix_width: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_log_paths(self) -> Self:
        if self.load:
            return self
        if self.abcid_log_path is None or self.tendermint_log_path is None:
            msg = "abcid_log_path and tendermint_log_path are required unless load is set"
            raise ValueError(msg)
        for path in (self.tendermint_log_path, self.abcid_log_path):
            if not path.is_file():
                msg = f"log file {path} does not exist"
                raise ValueError(msg)
        return self


class EtlPipeline:
    """Correlate the tendermint and abcid logs into per-block records."""

    def __init__(
        self,
        config: EtlConfig,
        console: Console | None = None,
        out: TextIO | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            config: Run options
            console: Console for progress display, stderr by default
            out: Report destination, stdout by default
        """
        self.config = config
        self.console = console or Console(stderr=True)
        self.out = out
        self.logger = get_logger("etl_pipeline")

    async def ingest(self, engine: MergeEngine) -> "HeightRange | None":
        """Run both ingestion passes, tendermint first.

        Returns:
            Height range of the created records, None if no block was found

        Raises:
            IngestionError: If either log violates its format
            StoreError: If the store fails
        """
        tendermint_path = self.config.tendermint_log_path
        abcid_path = self.config.abcid_log_path
        if tendermint_path is None or abcid_path is None:
            msg = "Both log paths are needed to ingest"
            raise ValueError(msg)

        tendermint = TendermintLogParser(tendermint_path, engine, self.console)
        height_range = await tendermint.run()
        if height_range is None:
            return None
        await engine.save_range()

        abcid = AbcidLogParser(
            abcid_path,
            engine,
            self.console,
            prefix_width=self.config.abcid_prefix_width,
        )
        await abcid.run()
        return height_range

    async def run_with_store(self, store: "RecordStore") -> int:
        """Run every pass against an already opened store.

        Returns:
            Number of report lines written
        """
        engine = MergeEngine(store)

        if self.config.load:
            height_range = await engine.load_range()
            if height_range is None:
                self.logger.warning("No stored height range, nothing to report")
                return 0
            self.logger.info(
                "Loaded stored heights %d..%d",
                height_range.min_height,
                height_range.max_height,
            )
        else:
            height_range = await self.ingest(engine)
            if height_range is None:
                self.logger.warning(
                    "No executed blocks in %s, nothing to report",
                    self.config.tendermint_log_path,
                )
                return 0

        await derive_block_times(engine, height_range, self.console)
        return await emit_report(engine, height_range, self.out)

    async def run(self) -> int:
        """Open the configured store and run every pass.

        Returns:
            Number of report lines written

        Raises:
            IngestionError: If a log violates its format
            StoreError: If the store is unreachable or fails
        """
        async with open_record_store(self.config.store_address) as store:
            return await self.run_with_store(store)


__all__ = [
    "EtlConfig",
    "EtlPipeline",
]
