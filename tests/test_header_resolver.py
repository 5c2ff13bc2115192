from __future__ import annotations

import pytest

from credit_summary.schemas.layout import PositionedToken
from credit_summary.schemas.summary import COLUMN_ORDER, ColumnKey
from credit_summary.services.rules.dialect_loader import get_dialect
from credit_summary.services.rules.header_resolver import resolve_header
from credit_summary.services.rules.text_normalize import group_rows

HEADER_LABELS = ["Original", "Vigente", "1-29", "30-59", "60-89", "90-119", "120-179", "180+"]


def _token(text: str, x: float, y: float) -> PositionedToken:
    return PositionedToken(x=x, y=y, text=text)


def _header(xs: list[float], y: float = 0.0, labels: list[str] | None = None) -> list[PositionedToken]:
    return [_token(label, x, y) for label, x in zip(labels or HEADER_LABELS, xs)]


def test_resolve_header_reads_all_anchors() -> None:
    xs = [100, 160, 220, 260, 300, 340, 380, 420]
    rows = group_rows(_header(xs), y_tol=1.2)

    header = resolve_header(rows, get_dialect())

    assert header is not None
    assert [header.anchors[key] for key in COLUMN_ORDER] == xs
    assert header.inferred == frozenset()
    assert header.median_gap == 40
    assert header.max_match_distance == pytest.approx(24.0)
    assert header.band_min == pytest.approx(72.0)
    assert header.band_max == pytest.approx(448.0)


def test_resolve_header_synthesizes_missing_bucket() -> None:
    labels = [label for label in HEADER_LABELS if label != "120-179"]
    xs = [100, 140, 180, 220, 260, 300, 380]
    rows = group_rows(_header(xs, labels=labels), y_tol=1.2)

    header = resolve_header(rows, get_dialect())

    assert header is not None
    assert header.inferred == frozenset({ColumnKey.BUCKET_120_179})
    assert header.anchors[ColumnKey.BUCKET_120_179] == pytest.approx(340.0)
    anchors = header.column_anchors()
    assert [anchor.key for anchor in anchors] == list(COLUMN_ORDER)
    assert [anchor.inferred for anchor in anchors].count(True) == 1


def test_resolve_header_merges_wrapped_label_rows() -> None:
    tokens = [
        _token("Original", 100, 0.0),
        _token("Vigente", 160, 0.0),
        _token("Vencido", 220, 0.0),
        _token("1-29", 220, 1.3),
        _token("30-59", 260, 1.3),
        _token("60-89", 300, 1.3),
        _token("90-119", 340, 2.55),
        _token("120-179", 380, 2.55),
        _token("180+", 420, 2.55),
    ]
    rows = group_rows(tokens, y_tol=1.2)

    header = resolve_header(rows, get_dialect())

    assert header is not None
    assert header.inferred == frozenset()
    assert header.anchors[ColumnKey.BUCKET_180_PLUS] == 420


def test_resolve_header_infers_every_bucket_from_label_spacing() -> None:
    rows = group_rows([_token("Original", 10, 0), _token("Vigente", 20, 0)], y_tol=1.2)

    header = resolve_header(rows, get_dialect())

    assert header is not None
    assert header.anchors[ColumnKey.BUCKET_1_29] == 30
    assert header.anchors[ColumnKey.BUCKET_180_PLUS] == 80
    assert len(header.inferred) == 6


def test_resolve_header_missing_current_is_unresolved() -> None:
    labels = ["Original", "1-29", "30-59"]
    rows = group_rows(_header([100, 220, 260], labels=labels), y_tol=1.2)

    assert resolve_header(rows, get_dialect()) is None


def test_resolve_header_skips_candidate_with_shared_x() -> None:
    tokens = [
        _token("Original Vigente", 100, 0),
        *_header([100, 160, 220, 260, 300, 340, 380, 420], y=10),
    ]
    rows = group_rows(tokens, y_tol=1.2)

    header = resolve_header(rows, get_dialect())

    assert header is not None
    assert header.header_y == 10
    assert header.anchors[ColumnKey.ORIGINAL] != header.anchors[ColumnKey.CURRENT]


def test_nearest_breaks_ties_toward_earlier_column() -> None:
    rows = group_rows(_header([100, 160, 220, 260, 300, 340, 380, 420]), y_tol=1.2)
    header = resolve_header(rows, get_dialect())
    assert header is not None

    key, distance = header.nearest(240)

    assert key is ColumnKey.BUCKET_1_29
    assert distance == 20
