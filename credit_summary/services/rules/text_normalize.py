"""Usage: shared text normalization and row grouping helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from credit_summary.schemas.layout import PositionedToken

_INLINE_SPACE_RE = re.compile(r"[ \t]+")
_ANY_SPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Row:
    y: float
    tokens: tuple[PositionedToken, ...]

    @property
    def texts(self) -> tuple[str, ...]:
        return tuple(token.text for token in self.tokens)


def group_rows(tokens: Iterable[PositionedToken], *, y_tol: float) -> list[Row]:
    """Cluster tokens into rows by vertical proximity.

    Tokens are visited in input order and join the first row whose reference
    ``y`` (the ``y`` of the token that opened it) lies within ``y_tol``.
    Rows come back sorted by ``y`` with their tokens sorted by ``x``.
    """

    buckets: list[tuple[float, list[PositionedToken]]] = []
    for token in tokens:
        target: list[PositionedToken] | None = None
        for ref_y, members in buckets:
            if abs(ref_y - token.y) <= y_tol:
                target = members
                break
        if target is None:
            buckets.append((token.y, [token]))
        else:
            target.append(token)

    rows = [
        Row(y=ref_y, tokens=tuple(sorted(members, key=lambda token: token.x)))
        for ref_y, members in buckets
    ]
    rows.sort(key=lambda row: row.y)
    return rows


def merge_rows(first: Row, second: Row) -> Row:
    """Combine two physical lines into one logical row keeping the first row's ``y``."""

    merged = sorted((*first.tokens, *second.tokens), key=lambda token: token.x)
    return Row(y=first.y, tokens=tuple(merged))


def row_text(row: Row) -> str:
    return _ANY_SPACE_RE.sub(" ", " ".join(row.texts)).strip()


def rows_text(rows: Iterable[Row]) -> str:
    return "\n".join(row_text(row) for row in rows)


def collapse_spaces(text: str) -> str:
    return _ANY_SPACE_RE.sub(" ", text).strip()


def normalize_text(text: str) -> str:
    """Normalize free document text: NBSP to space, no CR, single inline spaces."""

    value = (text or "").replace("\u00a0", " ").replace("\r", "")
    value = _INLINE_SPACE_RE.sub(" ", value)
    return value
