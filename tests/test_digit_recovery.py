from __future__ import annotations

from credit_summary.schemas.layout import PositionedToken
from credit_summary.schemas.summary import ColumnKey
from credit_summary.services.rules.digit_recovery import (
    explode_digit_runs,
    find_totals_line,
    recover_totals_from_digits,
)
from credit_summary.services.rules.dialect_loader import get_dialect
from credit_summary.services.rules.text_normalize import group_rows


def test_explode_slices_long_run_from_the_right() -> None:
    assert explode_digit_runs("0001234500067890") == [67890, 45000, 123]


def test_explode_keeps_short_runs_whole() -> None:
    assert explode_digit_runs("Totales 150000 120000 0 007") == [150000, 120000, 0, 7]


def test_explode_uses_six_digit_pieces_when_length_allows() -> None:
    # twelve digits: multiple of 6 and not of 5
    assert explode_digit_runs("150000120000") == [120000, 150000]


def test_explode_ignores_thousands_commas_and_cents() -> None:
    assert explode_digit_runs("1,500,000.00 2,000") == [1500000, 2000]


def test_explode_caps_pieces_per_run() -> None:
    run = "1" * 100

    assert len(explode_digit_runs(run, max_pieces=16)) == 16


def test_recover_takes_rightmost_eight_numbers() -> None:
    values = recover_totals_from_digits("Totales: 150000 120000 0 0 0 50000300002000", get_dialect())

    assert values is not None
    assert values[ColumnKey.ORIGINAL] == 150000
    assert values[ColumnKey.CURRENT] == 120000
    assert [
        values[ColumnKey.BUCKET_90_119],
        values[ColumnKey.BUCKET_120_179],
        values[ColumnKey.BUCKET_180_PLUS],
    ] == [2000, 3000, 5000]


def test_recover_discards_leading_extra_numbers() -> None:
    values = recover_totals_from_digits("Totales 3 cuentas 1 2 3 4 5 6 7 8", get_dialect())

    assert values is not None
    assert values[ColumnKey.ORIGINAL] == 1
    assert values[ColumnKey.BUCKET_180_PLUS] == 8


def test_recover_with_too_few_numbers_returns_none() -> None:
    assert recover_totals_from_digits("Totales 15000012000", get_dialect()) is None


def test_find_totals_line_returns_first_labelled_row() -> None:
    rows = group_rows(
        [
            PositionedToken(x=5, y=1, text="Resumen"),
            PositionedToken(x=5, y=5, text="Totales 1 2"),
            PositionedToken(x=5, y=9, text="Total 3 4"),
        ],
        y_tol=1.2,
    )

    line = find_totals_line(rows, get_dialect())

    assert line is not None
    assert line.y == 5
