"""Usage: rule-based credit summary extraction helpers."""

from credit_summary.services.rules.indicator_rows import IndicatorRowExtractor
from credit_summary.services.rules.summary_extractor import (
    CreditSummaryExtractor,
    FailureReason,
    SummaryExtractionResult,
    Tier,
)

__all__ = [
    "CreditSummaryExtractor",
    "FailureReason",
    "IndicatorRowExtractor",
    "SummaryExtractionResult",
    "Tier",
]
