"""Usage: rebuild the eight totals from a totals line whose digits were pasted together."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from credit_summary.schemas.summary import COLUMN_ORDER, ColumnKey
from credit_summary.services.rules.dialect import SummaryDialect
from credit_summary.services.rules.text_normalize import Row, row_text

logger = logging.getLogger(__name__)

_DIGIT_RUN_RE = re.compile(r"\d+")
_LEADING_ZEROS_RE = re.compile(r"^0+(?=\d)")
_THOUSANDS_GROUP_RE = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")
_DECIMAL_FRACTION_RE = re.compile(r"(?<=\d)\.\d+")


def explode_digit_runs(
    text: str,
    *,
    long_run_length: int = 10,
    max_pieces: int = 16,
) -> list[int]:
    """Split a line into numbers, slicing suspiciously long digit runs from the right.

    Leading zeros are dropped from every run. A run of ``long_run_length`` or
    more digits is cut into 5-digit pieces from its right end (6 when the
    remaining length is a multiple of 6 but not of 5); pieces are emitted in
    the order they are cut, at most ``max_pieces`` per run.
    """

    cleaned = _THOUSANDS_GROUP_RE.sub("", text)
    cleaned = _DECIMAL_FRACTION_RE.sub("", cleaned)

    numbers: list[int] = []
    for run in _DIGIT_RUN_RE.findall(cleaned):
        run = _LEADING_ZEROS_RE.sub("", run)
        if len(run) < long_run_length:
            numbers.append(int(run))
            continue
        pieces = 0
        remainder = run
        while remainder and pieces < max_pieces:
            width = 6 if len(remainder) % 6 == 0 and len(remainder) % 5 != 0 else 5
            numbers.append(int(remainder[-width:]))
            remainder = remainder[:-width]
            pieces += 1
    return numbers


def find_totals_line(rows: Sequence[Row], dialect: SummaryDialect) -> Row | None:
    """First row whose text carries the totals label; coordinates are not consulted."""

    for row in rows:
        if dialect.totals_label.search(row_text(row)):
            return row
    return None


def recover_totals_from_digits(text: str, dialect: SummaryDialect) -> dict[ColumnKey, float] | None:
    """Take the right-most eight numbers of the totals line in canonical column order."""

    tolerances = dialect.tolerances
    numbers = explode_digit_runs(
        text,
        long_run_length=tolerances.long_run_length,
        max_pieces=tolerances.max_run_pieces,
    )
    if len(numbers) < len(COLUMN_ORDER):
        logger.warning(
            "Digit recovery failed: recovery_exhausted numbers=%d text=%s",
            len(numbers),
            text,
        )
        return None
    tail = numbers[-len(COLUMN_ORDER):]
    logger.debug("Digit recovery numbers=%s tail=%s", numbers, tail)
    return {key: float(value) for key, value in zip(COLUMN_ORDER, tail)}
