"""Usage: last-resort extraction of the eight amounts from label proximity in plain text."""

from __future__ import annotations

import logging
import re

from credit_summary.schemas.summary import BUCKET_KEYS, COLUMN_ORDER, ColumnKey
from credit_summary.services.rules.dialect import SummaryDialect
from credit_summary.services.rules.numbers import parse_amount

logger = logging.getLogger(__name__)

# first value-like token after a label: an explicit "no value" marker or a number
_VALUE_RE = re.compile(
    r"(?P<none>(?<![\w-])(?:--+|n/?a)(?![\w-]))|(?P<number>\(?-?\$?\s?\d[\d,.]*\)?)",
    re.IGNORECASE,
)


def extract_by_labels(text: str, dialect: SummaryDialect) -> dict[ColumnKey, float] | None:
    """Scan ``text`` for each column label and read the first value that follows it.

    ORIGINAL and CURRENT must both resolve; unresolved buckets count as zero.
    """

    resolved: dict[ColumnKey, float | None] = {
        key: _value_after_label(text, key, dialect) for key in COLUMN_ORDER
    }
    if resolved[ColumnKey.ORIGINAL] is None or resolved[ColumnKey.CURRENT] is None:
        logger.warning(
            "Label fallback failed: label_fallback_incomplete original=%s current=%s",
            resolved[ColumnKey.ORIGINAL],
            resolved[ColumnKey.CURRENT],
        )
        return None

    values = {key: float(resolved[key] or 0.0) for key in COLUMN_ORDER}
    missing = [key.value for key in BUCKET_KEYS if resolved[key] is None]
    logger.debug("Label fallback resolved values=%s missing_buckets=%s", values, missing)
    return values


def _value_after_label(text: str, key: ColumnKey, dialect: SummaryDialect) -> float | None:
    """First label occurrence followed by an amount; an explicit no-value marker ends the search."""

    for match in dialect.column_pattern(key).finditer(text):
        tail = _limit_lines(text[match.end():], dialect.tolerances.label_lookahead_lines)
        tail = _cut_at_next_label(tail, key, dialect)

        value = _VALUE_RE.search(tail)
        if value is None:
            continue
        if value.group("none"):
            return None
        # sentence punctuation right after the amount
        raw = value.group("number").strip().rstrip(".,")
        number = parse_amount(raw, dialect.number_format)
        if number is not None:
            return number
    return None


def _limit_lines(tail: str, lookahead_lines: int) -> str:
    """Keep the rest of the label's line plus ``lookahead_lines`` following lines."""

    return "\n".join(tail.split("\n")[: lookahead_lines + 1])


def _cut_at_next_label(tail: str, key: ColumnKey, dialect: SummaryDialect) -> str:
    end = len(tail)
    for other in COLUMN_ORDER:
        if other is key:
            continue
        match = dialect.column_pattern(other).search(tail)
        if match is not None:
            end = min(end, match.start())
    return tail[:end]
