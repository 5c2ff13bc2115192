"""Usage: coordinate-based mapping of the totals row onto the column anchors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from credit_summary.schemas.summary import BUCKET_KEYS, COLUMN_ORDER, ColumnKey
from credit_summary.services.rules.dialect import SummaryDialect
from credit_summary.services.rules.header_resolver import HeaderConfig
from credit_summary.services.rules.numbers import parse_amount
from credit_summary.services.rules.text_normalize import Row, merge_rows, row_text

logger = logging.getLogger(__name__)

_SLOT_COUNT = len(COLUMN_ORDER)


@dataclass(frozen=True)
class RowMapping:
    values: Mapping[ColumnKey, float | None]
    is_totals: bool
    numeric_count: int
    ordered: tuple[float, ...]

    @property
    def usable(self) -> bool:
        return (
            self.values[ColumnKey.ORIGINAL] is not None
            and self.values[ColumnKey.CURRENT] is not None
        )


@dataclass(frozen=True)
class TotalsMatch:
    values: dict[ColumnKey, float]
    row: Row
    merged: bool


def is_totals_row(row: Row, dialect: SummaryDialect) -> bool:
    return any(dialect.totals_label.search(token.text) for token in row.tokens)


def map_row(row: Row, header: HeaderConfig, dialect: SummaryDialect) -> RowMapping:
    """Assign the numeric cells of one row to column anchors.

    Cells outside the header band are ignored entirely. ORIGINAL and CURRENT
    keep the largest-magnitude value assigned to them, buckets sum theirs.
    Null or zero columns then fall back to the left-to-right slot order.
    """

    assigned: dict[ColumnKey, list[float]] = {key: [] for key in COLUMN_ORDER}
    numeric_by_x: list[tuple[float, float]] = []

    for token in row.tokens:
        number = parse_amount(token.text, dialect.number_format)
        if number is None:
            continue
        if not header.within_band(token.x):
            continue
        numeric_by_x.append((token.x, number))
        key, distance = header.nearest(token.x)
        if distance <= header.max_match_distance:
            assigned[key].append(number)

    values: dict[ColumnKey, float | None] = {
        ColumnKey.ORIGINAL: _largest_magnitude(assigned[ColumnKey.ORIGINAL]),
        ColumnKey.CURRENT: _largest_magnitude(assigned[ColumnKey.CURRENT]),
    }
    for key in BUCKET_KEYS:
        values[key] = sum(assigned[key]) if assigned[key] else None

    ordered = tuple(number for _x, number in sorted(numeric_by_x, key=lambda entry: entry[0]))
    if len(ordered) >= 2:
        for slot, key in enumerate((ColumnKey.ORIGINAL, ColumnKey.CURRENT)):
            if not values[key]:
                values[key] = ordered[slot]
    if len(ordered) == _SLOT_COUNT:
        for slot, key in enumerate(BUCKET_KEYS, start=2):
            if not values[key]:
                values[key] = ordered[slot]

    return RowMapping(
        values=MappingProxyType(values),
        is_totals=is_totals_row(row, dialect),
        numeric_count=len(numeric_by_x),
        ordered=ordered,
    )


def extract_totals_by_coordinates(
    rows: Sequence[Row],
    header: HeaderConfig,
    dialect: SummaryDialect,
) -> TotalsMatch | None:
    """Scan the rows below the header for the totals row; the last usable one wins."""

    start = header.header_index + 1
    best: TotalsMatch | None = None
    idx = start
    while idx < len(rows):
        row = rows[idx]
        if dialect.is_terminator(row_text(row)):
            logger.debug("Totals scan stopped at terminator y=%.2f text=%s", row.y, row_text(row))
            break

        mapping = map_row(row, header, dialect)
        used_row = row
        consumed = idx
        merged = False
        if mapping.is_totals and mapping.numeric_count <= dialect.tolerances.split_totals_max_numbers:
            merge = _merge_split_totals(rows, idx, start, mapping, header, dialect)
            if merge is not None:
                mapping, used_row, consumed = merge
                merged = True

        if mapping.is_totals:
            if mapping.usable:
                best = TotalsMatch(values=_finalize(mapping), row=used_row, merged=merged)
                logger.debug(
                    "Totals row mapped y=%.2f merged=%s numbers=%d values=%s",
                    used_row.y,
                    merged,
                    mapping.numeric_count,
                    {key.value: value for key, value in best.values.items()},
                )
            else:
                logger.debug("Totals row unusable y=%.2f text=%s", row.y, row_text(row))
        idx = consumed + 1

    if best is None:
        logger.warning("Coordinate extraction failed: row_unusable")
    return best


def _merge_split_totals(
    rows: Sequence[Row],
    idx: int,
    start: int,
    mapping: RowMapping,
    header: HeaderConfig,
    dialect: SummaryDialect,
) -> tuple[RowMapping, Row, int] | None:
    row = rows[idx]
    tolerance = dialect.tolerances.row_merge_tol

    # label on this line, amounts on the next one
    if idx + 1 < len(rows):
        follower = rows[idx + 1]
        if abs(follower.y - row.y) <= tolerance and not dialect.is_terminator(row_text(follower)):
            merged_row = merge_rows(row, follower)
            candidate = map_row(merged_row, header, dialect)
            if candidate.numeric_count > mapping.numeric_count:
                logger.debug("Totals row merged forward y=%.2f+%.2f", row.y, follower.y)
                return candidate, merged_row, idx + 1

    # amounts on the previous line, label here
    if idx - 1 >= start:
        previous = rows[idx - 1]
        if abs(row.y - previous.y) <= tolerance and not is_totals_row(previous, dialect):
            merged_row = merge_rows(previous, row)
            candidate = map_row(merged_row, header, dialect)
            if candidate.numeric_count > mapping.numeric_count:
                logger.debug("Totals row merged backward y=%.2f+%.2f", previous.y, row.y)
                return candidate, merged_row, idx
    return None


def _finalize(mapping: RowMapping) -> dict[ColumnKey, float]:
    return {key: mapping.values[key] or 0.0 for key in COLUMN_ORDER}


def _largest_magnitude(values: list[float]) -> float | None:
    if not values:
        return None
    return max(values, key=abs)
