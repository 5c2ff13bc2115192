"""Usage: find the page that holds the summary table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from credit_summary.services.rules.dialect import SummaryDialect
from credit_summary.services.rules.text_normalize import Row, rows_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageRows:
    page: int
    rows: list[Row]


@dataclass(frozen=True)
class SectionHit:
    page_index: int
    page: int
    rows: list[Row]
    by_marker: bool


def locate_section(pages: Sequence[PageRows], dialect: SummaryDialect) -> SectionHit | None:
    """Return the first page carrying a section marker or both ORIGINAL and CURRENT labels."""

    for index, page in enumerate(pages):
        joined = rows_text(page.rows)
        if dialect.has_section_marker(joined):
            logger.debug("Summary section located by marker page=%d", page.page)
            return SectionHit(page_index=index, page=page.page, rows=page.rows, by_marker=True)
        if dialect.has_header_labels(joined):
            logger.debug("Summary section located by header labels page=%d", page.page)
            return SectionHit(page_index=index, page=page.page, rows=page.rows, by_marker=False)
    return None
