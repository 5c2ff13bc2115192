from __future__ import annotations

from credit_summary.schemas.layout import PositionedToken
from credit_summary.services.rules.dialect_loader import get_dialect
from credit_summary.services.rules.section_locator import PageRows, locate_section
from credit_summary.services.rules.text_normalize import group_rows


def _token(text: str, x: float, y: float) -> PositionedToken:
    return PositionedToken(x=x, y=y, text=text)


def _page(number: int, tokens: list[PositionedToken]) -> PageRows:
    return PageRows(page=number, rows=group_rows(tokens, y_tol=1.2))


def test_locate_section_by_marker() -> None:
    pages = [
        _page(1, [_token("Datos generales", 5, 3)]),
        _page(2, [_token("Resumen Créditos Activos", 5, 3)]),
    ]

    hit = locate_section(pages, get_dialect())

    assert hit is not None
    assert hit.page == 2
    assert hit.page_index == 1
    assert hit.by_marker is True


def test_locate_section_by_header_labels() -> None:
    pages = [_page(1, [_token("Original", 100, 3), _token("Vigente", 160, 3)])]

    hit = locate_section(pages, get_dialect())

    assert hit is not None
    assert hit.by_marker is False


def test_locate_section_needs_both_labels() -> None:
    pages = [_page(1, [_token("Monto original", 100, 3)])]

    assert locate_section(pages, get_dialect()) is None


def test_locate_section_returns_first_matching_page() -> None:
    pages = [
        _page(3, [_token("Original", 100, 3), _token("Current", 160, 3)]),
        _page(4, [_token("Resumen de Créditos Activos", 5, 3)]),
    ]

    hit = locate_section(pages, get_dialect())

    assert hit is not None
    assert hit.page == 3
