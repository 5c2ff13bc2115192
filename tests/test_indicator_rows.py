from __future__ import annotations

from dataclasses import replace

from credit_summary.schemas.layout import LayoutPage, LayoutResult, PositionedToken
from credit_summary.services.rules.dialect_loader import get_dialect
from credit_summary.services.rules.indicator_rows import (
    IndicatorRowExtractor,
    extract_indicator_rows_from_text,
)


def _token(text: str, x: float, y: float) -> PositionedToken:
    return PositionedToken(x=x, y=y, text=text)


def _layout(tokens: list[PositionedToken], text: str | None = None) -> LayoutResult:
    return LayoutResult(pages=[LayoutPage(page=1, tokens=tokens, text=text)])


def test_extract_rows_by_header_bands() -> None:
    tokens = [
        _token("Identificador de la característica", 5, 10),
        _token("Código de la característica", 15, 10),
        _token("Valor de la característica", 35, 10),
        _token("1", 5, 12),
        _token("BK12_NUM_CRED", 14, 12),
        _token("3", 36, 12),
        _token("6", 5, 13),
        _token("NBK12_PCT_PROMT", 14, 13),
        _token("--", 36, 13),
        _token("99", 5, 14),
        _token("UNKNOWN_CODE", 14, 14),
        _token("5", 36, 14),
    ]

    rows = IndicatorRowExtractor().extract(_layout(tokens))

    assert [(row.id, row.code, row.raw_value) for row in rows] == [
        (1, "BK12_NUM_CRED", "3"),
        (6, "NBK12_PCT_PROMT", "Sin Información"),
    ]


def test_extract_rows_from_word_triplets() -> None:
    line = "4 BK12_NUM_EXP_PAIDONTIME 12 5 BK12_PCT_PROMT Sin Información 7 BK12_PCT_SAT 0.85"

    rows = IndicatorRowExtractor().extract(_layout([_token(line, 5, 5)]))

    assert [(row.id, row.raw_value) for row in rows] == [
        (4, "12"),
        (5, "Sin Información"),
        (7, "0.85"),
    ]


def test_extract_rows_from_page_text() -> None:
    text = "Portada\nCalificador\n1 BK12_NUM_CRED 3\n14 BK12_IND_QCRA --\n"

    rows = IndicatorRowExtractor().extract(_layout([], text=text))

    assert [(row.id, row.raw_value) for row in rows] == [(1, "3"), (14, "Sin Información")]


def test_text_rows_reject_mismatched_codes() -> None:
    config = get_dialect().indicators
    assert config is not None

    rows = extract_indicator_rows_from_text("Calificador\n1 BK12_PCT_SAT 3\n9 BK24_PCT_60PLUS 9\n", config)

    assert rows == []


def test_dialect_without_indicators_yields_nothing() -> None:
    dialect = replace(get_dialect(), indicators=None)

    assert IndicatorRowExtractor(dialect).extract(_layout([_token("1 BK12_NUM_CRED 3", 5, 5)])) == []
