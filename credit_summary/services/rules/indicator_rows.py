"""Usage: extract identifier/code/value indicator rows for the scoring engine."""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, Sequence

from credit_summary.schemas.layout import LayoutPage, LayoutResult, PositionedToken
from credit_summary.schemas.summary import IndicatorRow
from credit_summary.services.rules.dialect import IndicatorConfig, SummaryDialect
from credit_summary.services.rules.dialect_loader import get_dialect
from credit_summary.services.rules.text_normalize import Row, group_rows, normalize_text, rows_text

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"\d{1,3}")
_CODE_RE = re.compile(r"[A-Z0-9_]{2,}")
_NUMBER_LIKE_RE = re.compile(r"-?\d{1,3}(?:,\d{3})*(?:\.\d+)?|-?\d+(?:\.\d+)?")
_NO_INFO_RE = re.compile(r"--?|N\.?/?A\.?", re.IGNORECASE)
_PUNCTUATION_ONLY_RE = re.compile(r"\W+")
_TEXT_ROW_RE = re.compile(r"^\s*([0-9]{1,2})\s+([A-Z0-9_]{2,})\s+([^\n\r]+?)\s*$", re.MULTILINE)
_TEXT_SCOPE_CHARS = 20000
_HEADER_CLEARANCE = 0.5


class IndicatorRowExtractor:
    def __init__(self, dialect: SummaryDialect | None = None) -> None:
        self._dialect = dialect or get_dialect()

    def extract(self, layout: LayoutResult) -> list[IndicatorRow]:
        config = self._dialect.indicators
        if config is None:
            logger.debug("Indicator extraction skipped: dialect=%s has no indicators", self._dialect.name)
            return []
        return extract_indicator_rows(layout, config)


def extract_indicator_rows(layout: LayoutResult, config: IndicatorConfig) -> list[IndicatorRow]:
    """Read indicator rows by column bands, then top up from a plain-text scan if short."""

    found: list[IndicatorRow] = []
    for page in layout.pages:
        found.extend(_rows_from_page(page.tokens, config))
    rows = _dedupe(found)

    if len(rows) < config.min_rows_before_text_merge:
        seen = {row.id for row in rows}
        text = normalize_text("\n".join(_page_text(page, config) for page in layout.pages))
        for row in extract_indicator_rows_from_text(text, config):
            if row.id not in seen:
                rows.append(row)
                seen.add(row.id)
        logger.debug("Indicator rows topped up from text: total=%d", len(rows))

    logger.debug("Indicator rows extracted ids=%s", [row.id for row in rows])
    return rows


def extract_indicator_rows_from_text(text: str, config: IndicatorConfig) -> list[IndicatorRow]:
    scope = text
    marker = config.block_marker.search(text)
    if marker is not None:
        scope = text[marker.start(): marker.start() + _TEXT_SCOPE_CHARS]

    rows: list[IndicatorRow] = []
    for match in _TEXT_ROW_RE.finditer(scope):
        row = _build_row(int(match.group(1)), match.group(2).strip(), match.group(3).strip(), config)
        if row is not None:
            rows.append(row)
    return _dedupe(rows)


def _rows_from_page(tokens: Sequence[PositionedToken], config: IndicatorConfig) -> list[IndicatorRow]:
    raw = [
        token
        for token in tokens
        if token.text and not _PUNCTUATION_ONLY_RE.fullmatch(token.text)
    ]
    id_head = _first_match(raw, config.id_header)
    code_head = _first_match(raw, config.code_header)
    value_head = _first_match(raw, config.value_header)
    has_heads = id_head is not None and code_head is not None and value_head is not None

    kept = [token for token in raw if not any(pattern.search(token.text) for pattern in config.skip_patterns)]
    lines = group_rows(kept, y_tol=config.header_y_tol if has_heads else config.loose_y_tol)

    rows: list[IndicatorRow] = []
    for line in lines:
        if has_heads:
            assert id_head is not None and code_head is not None and value_head is not None
            if line.y < min(id_head.y, code_head.y, value_head.y) + _HEADER_CLEARANCE:
                continue
            row = _row_from_bands(line, id_head, code_head, value_head, config)
            if row is not None:
                rows.append(row)
                continue
        rows.extend(_rows_from_words(line, config))
    return rows


def _row_from_bands(
    line: Row,
    id_head: PositionedToken,
    code_head: PositionedToken,
    value_head: PositionedToken,
    config: IndicatorConfig,
) -> IndicatorRow | None:
    mid_id_code = (id_head.x + code_head.x) / 2
    mid_code_value = (code_head.x + value_head.x) / 2
    band_id = [cell for cell in line.tokens if cell.x < mid_id_code]
    band_code = [cell for cell in line.tokens if mid_id_code <= cell.x < mid_code_value]
    band_value = [cell for cell in line.tokens if cell.x >= mid_code_value]

    id_token = _pick_nearest(band_id, id_head.x, _is_id_token)
    code_token = _pick_nearest(band_code, code_head.x, _is_code_token)
    value_token = _pick_nearest(
        band_value,
        value_head.x,
        lambda text: _is_number_like(text) or _is_no_info(text) or text in config.no_info_words,
    )

    value: str | None
    if value_token is None:
        fallback = next(
            (cell for cell in reversed(band_value) if _is_number_like(cell.text) or _is_no_info(cell.text)),
            None,
        )
        value = fallback.text if fallback else None
    else:
        value = value_token.text

    if id_token is None or code_token is None or value is None:
        return None
    return _build_row(int(id_token.text), code_token.text, value, config)


def _rows_from_words(line: Row, config: IndicatorConfig) -> list[IndicatorRow]:
    """Scan ``ID CODE ... value`` triplets left to right; a line may hold several."""

    words = [word for cell in line.tokens for word in cell.text.split()]
    rows: list[IndicatorRow] = []
    k = 0
    while k < len(words) - 2:
        if not (_is_id_token(words[k]) and _is_code_token(words[k + 1])):
            k += 1
            continue
        indicator_id = int(words[k])
        code = words[k + 1]
        if config.codes_by_id.get(indicator_id) != code:
            k += 1
            continue

        value: str | None = None
        j = k + 2
        while j < len(words):
            word = words[j]
            if _is_no_info(word):
                value = config.no_info_label
                j += 1
                break
            if word.lower() == config.no_info_words[-1].lower() and j > k + 2:
                if words[j - 1].lower() == config.no_info_words[0].lower():
                    value = config.no_info_label
                    j += 1
                    break
            if _is_id_token(word) and j + 1 < len(words) and _is_code_token(words[j + 1]):
                # next triplet starts before a value showed up
                break
            if _is_number_like(word) or _is_number_like(word.replace("$", "").replace("%", "")):
                value = word
                j += 1
                break
            j += 1

        if value is not None:
            row = _build_row(indicator_id, code, value, config)
            if row is not None:
                rows.append(row)
        k = max(j, k + 1)
    return rows


def _build_row(indicator_id: int, code: str, value: str, config: IndicatorConfig) -> IndicatorRow | None:
    if config.codes_by_id.get(indicator_id) != code:
        return None
    value = value.strip()
    if _is_no_info(value) or value in config.no_info_words:
        value = config.no_info_label
    if value == str(indicator_id):
        return None
    return IndicatorRow(id=indicator_id, code=code, raw_value=value)


def _dedupe(rows: Iterable[IndicatorRow]) -> list[IndicatorRow]:
    seen: set[int] = set()
    unique: list[IndicatorRow] = []
    for row in rows:
        if row.id in seen:
            continue
        seen.add(row.id)
        unique.append(row)
    return unique


def _page_text(page: LayoutPage, config: IndicatorConfig) -> str:
    if page.text:
        return page.text
    return rows_text(group_rows(page.tokens, y_tol=config.loose_y_tol))


def _first_match(tokens: Sequence[PositionedToken], pattern: re.Pattern[str]) -> PositionedToken | None:
    return next((token for token in tokens if pattern.search(token.text)), None)


def _pick_nearest(
    tokens: Sequence[PositionedToken],
    x_ref: float,
    predicate: Callable[[str], bool],
) -> PositionedToken | None:
    best: PositionedToken | None = None
    best_dx = float("inf")
    for token in tokens:
        if not predicate(token.text):
            continue
        dx = abs(token.x - x_ref)
        if dx < best_dx:
            best = token
            best_dx = dx
    return best


def _is_id_token(text: str) -> bool:
    return bool(_ID_RE.fullmatch(text))


def _is_code_token(text: str) -> bool:
    return bool(_CODE_RE.fullmatch(text))


def _is_number_like(text: str) -> bool:
    return bool(_NUMBER_LIKE_RE.fullmatch(text))


def _is_no_info(text: str) -> bool:
    return bool(_NO_INFO_RE.fullmatch(text.strip()))
