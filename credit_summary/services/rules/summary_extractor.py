"""Usage: three-tier recovery of the credit summary totals from positioned text."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from credit_summary.schemas.layout import LayoutResult
from credit_summary.schemas.summary import ColumnKey, CreditSummary
from credit_summary.services.rules.dialect import SummaryDialect
from credit_summary.services.rules.dialect_loader import get_dialect
from credit_summary.services.rules.digit_recovery import find_totals_line, recover_totals_from_digits
from credit_summary.services.rules.header_resolver import resolve_header
from credit_summary.services.rules.label_fallback import extract_by_labels
from credit_summary.services.rules.reconcile import reconcile
from credit_summary.services.rules.row_mapper import extract_totals_by_coordinates
from credit_summary.services.rules.section_locator import PageRows, SectionHit, locate_section
from credit_summary.services.rules.text_normalize import group_rows, normalize_text, row_text, rows_text

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    NO_PAGES = "no_pages"
    SECTION_NOT_FOUND = "section_not_found"
    HEADER_UNRESOLVED = "header_unresolved"
    ROW_UNUSABLE = "row_unusable"
    RECOVERY_EXHAUSTED = "recovery_exhausted"
    LABEL_FALLBACK_INCOMPLETE = "label_fallback_incomplete"


class Tier(str, Enum):
    COORDINATES = "coordinates"
    DIGIT_RECOVERY = "digit_recovery"
    LABELS = "labels"


@dataclass(frozen=True)
class SummaryExtractionResult:
    complete: bool
    data: CreditSummary | None
    tier: str | None
    errors: list[str]
    details: dict[str, Any] = field(default_factory=dict)


class CreditSummaryExtractor:
    """Recover the 8-column summary table, trying each tier in order until one succeeds.

    1. coordinates: header anchors plus nearest-column mapping of the totals row;
    2. digit recovery: right-most eight numbers of the raw totals line;
    3. labels: each column label followed by its amount in the document text.

    Tiers fail locally; only when all three fail is ``complete`` False.
    """

    def __init__(self, dialect: SummaryDialect | None = None) -> None:
        self._dialect = dialect or get_dialect()

    @property
    def dialect(self) -> SummaryDialect:
        return self._dialect

    def extract(self, layout: LayoutResult) -> SummaryExtractionResult:
        if not layout.pages:
            logger.warning("Summary extraction failed: no_pages")
            return SummaryExtractionResult(
                complete=False,
                data=None,
                tier=None,
                errors=[FailureReason.NO_PAGES.value],
            )

        dialect = self._dialect
        pages = [
            PageRows(page=page.page, rows=group_rows(page.tokens, y_tol=dialect.tolerances.row_y_tol))
            for page in layout.pages
        ]
        errors: list[str] = []
        details: dict[str, Any] = {"dialect": dialect.name}

        section = None
        if any(page.has_coordinates() for page in layout.pages):
            section = locate_section(pages, dialect)
        else:
            logger.info("No positioned tokens in %d pages; only label fallback applies", len(layout.pages))
        if section is None:
            logger.warning("Summary section not found: section_not_found")
            errors.append(FailureReason.SECTION_NOT_FOUND.value)
        else:
            details["page"] = section.page
            result = self._run_coordinates(section, errors, details)
            if result is not None:
                return result
            result = self._run_digit_recovery(section, errors, details)
            if result is not None:
                return result

        result = self._run_labels(document_text(layout, pages), errors, details)
        if result is not None:
            return result

        logger.warning("Summary extraction failed: errors=%s", errors)
        return SummaryExtractionResult(
            complete=False,
            data=None,
            tier=None,
            errors=errors,
            details=details,
        )

    def _run_coordinates(
        self,
        section: SectionHit,
        errors: list[str],
        details: dict[str, Any],
    ) -> SummaryExtractionResult | None:
        header = resolve_header(section.rows, self._dialect)
        if header is None:
            errors.append(FailureReason.HEADER_UNRESOLVED.value)
            return None
        details["anchors"] = {key.value: x for key, x in header.anchors.items()}
        details["inferred_anchors"] = sorted(key.value for key in header.inferred)

        match = extract_totals_by_coordinates(section.rows, header, self._dialect)
        if match is None:
            errors.append(FailureReason.ROW_UNUSABLE.value)
            return None
        details["totals_row_y"] = match.row.y
        details["totals_row_merged"] = match.merged
        return self._success(Tier.COORDINATES, match.values, errors, details)

    def _run_digit_recovery(
        self,
        section: SectionHit,
        errors: list[str],
        details: dict[str, Any],
    ) -> SummaryExtractionResult | None:
        line = find_totals_line(section.rows, self._dialect)
        if line is None:
            logger.warning("Digit recovery failed: recovery_exhausted no totals line")
            errors.append(FailureReason.RECOVERY_EXHAUSTED.value)
            return None
        values = recover_totals_from_digits(row_text(line), self._dialect)
        if values is None:
            errors.append(FailureReason.RECOVERY_EXHAUSTED.value)
            return None
        details["totals_row_y"] = line.y
        return self._success(Tier.DIGIT_RECOVERY, values, errors, details)

    def _run_labels(
        self,
        text: str,
        errors: list[str],
        details: dict[str, Any],
    ) -> SummaryExtractionResult | None:
        values = extract_by_labels(text, self._dialect)
        if values is None:
            errors.append(FailureReason.LABEL_FALLBACK_INCOMPLETE.value)
            return None
        return self._success(Tier.LABELS, values, errors, details)

    def _success(
        self,
        tier: Tier,
        values: Mapping[ColumnKey, float],
        errors: list[str],
        details: dict[str, Any],
    ) -> SummaryExtractionResult:
        summary = reconcile(values)
        if errors:
            logger.info("Summary recovered by tier=%s after failures=%s", tier.value, errors)
        else:
            logger.debug("Summary recovered by tier=%s", tier.value)
        return SummaryExtractionResult(
            complete=True,
            data=summary,
            tier=tier.value,
            errors=list(errors),
            details=details,
        )


def document_text(layout: LayoutResult, pages: list[PageRows]) -> str:
    """Full normalized document text: provided page text, else the grouped row text."""

    chunks: list[str] = []
    for index, page in enumerate(layout.pages):
        if page.text:
            chunks.append(page.text)
        else:
            chunks.append(rows_text(pages[index].rows))
    return normalize_text("\n".join(chunks))
