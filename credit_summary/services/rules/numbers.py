"""Usage: parse amount strings taken from statement cells."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

__all__ = ["NumberFormat", "parse_amount", "is_no_value"]

_CURRENCY_RE = re.compile(r"[$€£¥]|\b(?:MXN|MXP|USD)\b", re.IGNORECASE)
_PLAIN_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_NO_VALUE_MARKERS = frozenset({"", "-", "--", "---", "—", "–", "n/a", "na", "n.a.", "n.a", "n/d"})


@dataclass(frozen=True)
class NumberFormat:
    thousands_separator: str = ","
    decimal_separator: str = "."

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "NumberFormat":
        if not data:
            return cls()
        fmt = cls(
            thousands_separator=str(data.get("thousands_separator", ",")),
            decimal_separator=str(data.get("decimal_separator", ".")),
        )
        if fmt.thousands_separator == fmt.decimal_separator:
            raise ValueError("thousands_separator and decimal_separator must differ")
        return fmt


DEFAULT_NUMBER_FORMAT = NumberFormat()


def is_no_value(text: str | None) -> bool:
    """True for empty cells and explicit "no value" markers such as ``--`` or ``n/a``."""

    if text is None:
        return True
    return text.strip().lower() in _NO_VALUE_MARKERS


def parse_amount(text: str | None, number_format: NumberFormat = DEFAULT_NUMBER_FORMAT) -> float | None:
    """Parse a single cell into a signed number.

    Currency symbols, whitespace and thousands separators are stripped and a
    parenthesized value is negative. Empty cells, ``--`` and ``n/a`` yield
    ``None`` (no value, which is different from zero), as does anything that
    is not a clean number once cleaned.
    """

    if text is None:
        return None
    value = text.strip()
    if is_no_value(value):
        return None

    negative = False
    if value.startswith("(") and value.endswith(")"):
        negative = True
        value = value[1:-1]

    value = _CURRENCY_RE.sub("", value)
    value = "".join(value.split())
    if number_format.thousands_separator:
        value = value.replace(number_format.thousands_separator, "")
    if number_format.decimal_separator != ".":
        value = value.replace(number_format.decimal_separator, ".")

    if not _PLAIN_NUMBER_RE.fullmatch(value):
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return -abs(number) if negative else number
