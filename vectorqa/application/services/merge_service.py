"""
Store merge service.

Copies every record from several source stores into one target store,
deduplicating on (source_id, chunk_index) with first-write-wins. Source
order therefore decides which duplicate survives. A failing source is
reported and the merge moves on.

Dependencies: vectorqa.boundary.vdb
System role: Offline index consolidation
"""

import logging

from vectorqa.boundary.vdb.vector_index_store import VectorIndexStore
from vectorqa.core.exceptions import ValidationError, VectorStoreError
from vectorqa.models.ingestion import MergeReport, SourceMergeReport
from vectorqa.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class MergeService:
    """Merge chunk indexes."""

    def __init__(self, batch_size: int = 500) -> None:
        self.batch_size = batch_size

    async def merge(
        self,
        sources: list[tuple[str, VectorIndexStore]],
        target: VectorIndexStore,
        allow_existing: bool = False,
    ) -> MergeReport:
        """
        Merge source stores into target.

        Args:
            sources: (name, store) pairs in priority order
            target: Store receiving the records
            allow_existing: Permit a non-empty target (its records win over sources)

        Returns:
            MergeReport: Per-source inserted/skipped counts and totals

        Raises:
            ValidationError: Target is not empty and allow_existing is False
        """
        if not allow_existing and await target.count() > 0:
            raise ValidationError("Merge target must be empty", field="target")

        report = MergeReport()
        for name, store in sources:
            source_report = SourceMergeReport(source=name)
            try:
                async for batch in store.iter_batches(self.batch_size):
                    imported = await target.import_records(batch)
                    source_report.inserted += imported.inserted
                    source_report.skipped += imported.skipped
            except VectorStoreError as e:
                log_exception_with_context(logger, f"{__name__}:merge - Source failed", e, source=name)
                source_report.error = e.message

            logger.info(
                f"{__name__}:merge - {name}: inserted={source_report.inserted}, skipped={source_report.skipped}"
            )
            report.sources.append(source_report)
            report.total_inserted += source_report.inserted
            report.total_skipped += source_report.skipped

        report.final_count = await target.count()
        return report
