"""Usage: credit report pipeline (layout -> summary totals + indicator rows)."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from credit_summary.schemas.summary import IndicatorRow
from credit_summary.services.layout.base import BaseLayoutClient
from credit_summary.services.rules.indicator_rows import IndicatorRowExtractor
from credit_summary.services.rules.summary_extractor import CreditSummaryExtractor, SummaryExtractionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditReportResult:
    summary: SummaryExtractionResult
    indicators: list[IndicatorRow] = field(default_factory=list)


class CreditReportPipeline:
    """Pipeline orchestrating layout extraction, summary recovery and indicator rows."""

    def __init__(
        self,
        layout_client: BaseLayoutClient,
        *,
        summary_extractor: CreditSummaryExtractor | None = None,
        indicator_extractor: IndicatorRowExtractor | None = None,
    ) -> None:
        self.layout_client = layout_client
        self.summary_extractor = summary_extractor or CreditSummaryExtractor()
        self.indicator_extractor = indicator_extractor or IndicatorRowExtractor(self.summary_extractor.dialect)

    async def run(
        self,
        source: str | bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> CreditReportResult:
        """Run layout extraction then the rules; layout errors propagate to the caller."""

        start_time = time.perf_counter()
        logger.info("[TIMER] Pipeline started for file: %s", filename)

        t0 = time.perf_counter()
        layout = await self.layout_client.extract(
            source,
            filename=filename,
            content_type=content_type,
        )
        layout_duration = time.perf_counter() - t0
        logger.info(
            "[TIMER] Step 1: Layout finished. Pages: %d Duration: %.4fs",
            len(layout.pages),
            layout_duration,
        )

        summary = self.summary_extractor.extract(layout)
        if not summary.complete:
            logger.warning("Summary extraction failed: file=%s errors=%s", filename, summary.errors)
        indicators = self.indicator_extractor.extract(layout)

        total_duration = time.perf_counter() - start_time
        logger.info(
            "[TIMER] Pipeline completed. Total: %.4fs (Layout: %.2fs) tier=%s indicators=%d",
            total_duration,
            layout_duration,
            summary.tier,
            len(indicators),
        )
        return CreditReportResult(summary=summary, indicators=indicators)
