"""Usage: resolve the eight column anchors from the summary table header."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from statistics import median_high
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from credit_summary.schemas.summary import BUCKET_KEYS, COLUMN_ORDER, ColumnKey
from credit_summary.services.rules.dialect import SummaryDialect
from credit_summary.services.rules.text_normalize import Row, collapse_spaces, row_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnAnchor:
    key: ColumnKey
    x: float
    inferred: bool = False


@dataclass(frozen=True)
class HeaderConfig:
    anchors: Mapping[ColumnKey, float]
    max_match_distance: float
    band_min: float
    band_max: float
    median_gap: float
    header_index: int
    header_y: float
    inferred: frozenset[ColumnKey]

    def column_anchors(self) -> list[ColumnAnchor]:
        return [
            ColumnAnchor(key=key, x=self.anchors[key], inferred=key in self.inferred)
            for key in COLUMN_ORDER
        ]

    def within_band(self, x: float) -> bool:
        return self.band_min <= x <= self.band_max

    def nearest(self, x: float) -> tuple[ColumnKey, float]:
        """Return the closest anchor and its distance; ties go to the earlier column."""

        best_key = COLUMN_ORDER[0]
        best_distance = float("inf")
        for key in COLUMN_ORDER:
            distance = abs(x - self.anchors[key])
            if distance < best_distance:
                best_key = key
                best_distance = distance
        return best_key, best_distance


def resolve_header(rows: Sequence[Row], dialect: SummaryDialect) -> HeaderConfig | None:
    """Locate the header row and build column anchors, match tolerance and horizontal band.

    The first row containing both the ORIGINAL and CURRENT labels is merged with
    up to two following rows (headers wrap), labels are matched cell by cell and
    missing bucket anchors are synthesized from the median column spacing.
    Returns ``None`` when no row yields distinct ORIGINAL and CURRENT anchors.
    """

    tolerances = dialect.tolerances
    for index, row in enumerate(rows):
        if not dialect.has_header_labels(row_text(row)):
            continue

        cells = list(row.tokens)
        for offset, limit in enumerate(tolerances.header_merge_offsets, start=1):
            follower = index + offset
            if follower < len(rows) and rows[follower].y - row.y < limit:
                cells.extend(rows[follower].tokens)
        cells.sort(key=lambda token: token.x)

        observed: dict[ColumnKey, float] = {}
        for key in COLUMN_ORDER:
            pattern = dialect.column_pattern(key)
            for cell in cells:
                if pattern.search(collapse_spaces(cell.text)):
                    observed[key] = cell.x
                    break

        original_x = observed.get(ColumnKey.ORIGINAL)
        current_x = observed.get(ColumnKey.CURRENT)
        if original_x is None or current_x is None:
            logger.debug("Header candidate skipped y=%.2f observed=%s", row.y, _keys(observed))
            continue
        if original_x == current_x:
            logger.debug("Header candidate skipped y=%.2f original/current share x=%.2f", row.y, original_x)
            continue

        gap = _median_gap(observed.values(), tolerances.default_gap)
        anchors = dict(observed)
        inferred: set[ColumnKey] = set()
        for position, key in enumerate(BUCKET_KEYS, start=1):
            if key not in anchors:
                anchors[key] = current_x + gap * position
                inferred.add(key)

        full_gap = _median_gap(anchors.values(), tolerances.default_gap)
        margin = full_gap * tolerances.band_margin_ratio
        config = HeaderConfig(
            anchors=MappingProxyType({key: anchors[key] for key in COLUMN_ORDER}),
            max_match_distance=max(tolerances.min_match_distance, full_gap * tolerances.match_distance_ratio),
            band_min=min(original_x, current_x) - margin,
            band_max=max(anchors[key] for key in BUCKET_KEYS) + margin,
            median_gap=full_gap,
            header_index=index,
            header_y=row.y,
            inferred=frozenset(inferred),
        )
        logger.debug(
            "Header resolved y=%.2f gap=%.2f max_dist=%.2f band=[%.2f, %.2f] inferred=%s",
            row.y,
            full_gap,
            config.max_match_distance,
            config.band_min,
            config.band_max,
            _keys(inferred),
        )
        return config

    logger.warning("Header resolution failed: header_unresolved")
    return None


def _median_gap(xs: Iterable[float], default: float) -> float:
    ordered = sorted(xs)
    gaps = [right - left for left, right in zip(ordered, ordered[1:])]
    if not gaps:
        return default
    gap = median_high(gaps)
    return gap if gap > 0 else default


def _keys(keys: Iterable[ColumnKey]) -> list[str]:
    return sorted(key.value for key in keys)
