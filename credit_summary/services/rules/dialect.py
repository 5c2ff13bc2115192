"""Usage: immutable document dialect (label patterns, markers and tolerances)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from credit_summary.schemas.summary import COLUMN_ORDER, ColumnKey
from credit_summary.services.rules.numbers import NumberFormat


@dataclass(frozen=True)
class Tolerances:
    row_y_tol: float = 1.2
    header_merge_offsets: tuple[float, ...] = (1.8, 2.6)
    row_merge_tol: float = 1.6
    default_gap: float = 5.0
    min_match_distance: float = 2.0
    match_distance_ratio: float = 0.6
    band_margin_ratio: float = 0.7
    split_totals_max_numbers: int = 2
    label_lookahead_lines: int = 1
    long_run_length: int = 10
    max_run_pieces: int = 16

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Tolerances":
        if not data:
            return cls()
        defaults = cls()
        offsets = data.get("header_merge_offsets", defaults.header_merge_offsets)
        return cls(
            row_y_tol=float(data.get("row_y_tol", defaults.row_y_tol)),
            header_merge_offsets=tuple(float(value) for value in offsets),
            row_merge_tol=float(data.get("row_merge_tol", defaults.row_merge_tol)),
            default_gap=float(data.get("default_gap", defaults.default_gap)),
            min_match_distance=float(data.get("min_match_distance", defaults.min_match_distance)),
            match_distance_ratio=float(data.get("match_distance_ratio", defaults.match_distance_ratio)),
            band_margin_ratio=float(data.get("band_margin_ratio", defaults.band_margin_ratio)),
            split_totals_max_numbers=int(
                data.get("split_totals_max_numbers", defaults.split_totals_max_numbers)
            ),
            label_lookahead_lines=int(data.get("label_lookahead_lines", defaults.label_lookahead_lines)),
            long_run_length=int(data.get("long_run_length", defaults.long_run_length)),
            max_run_pieces=int(data.get("max_run_pieces", defaults.max_run_pieces)),
        )


@dataclass(frozen=True)
class IndicatorConfig:
    block_marker: re.Pattern[str]
    id_header: re.Pattern[str]
    code_header: re.Pattern[str]
    value_header: re.Pattern[str]
    codes_by_id: Mapping[int, str]
    skip_patterns: tuple[re.Pattern[str], ...] = ()
    no_info_label: str = "Sin Información"
    no_info_words: tuple[str, ...] = ("Sin", "Información")
    header_y_tol: float = 0.7
    loose_y_tol: float = 1.8
    min_rows_before_text_merge: int = 8

    @property
    def known_codes(self) -> frozenset[str]:
        return frozenset(self.codes_by_id.values())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IndicatorConfig":
        codes = data.get("codes") or {}
        if not codes:
            raise ValueError("indicators.codes must list at least one id/code pair")
        no_info_words = tuple(data.get("no_info_words") or ("Sin", "Información"))
        return cls(
            block_marker=_compile(data.get("block_marker", r"calific(?:a|ador)\b")),
            id_header=_compile(data["id_header"]),
            code_header=_compile(data["code_header"]),
            value_header=_compile(data["value_header"]),
            codes_by_id=MappingProxyType({int(key): str(value) for key, value in codes.items()}),
            skip_patterns=tuple(_compile(pattern) for pattern in data.get("skip_patterns") or []),
            no_info_label=str(data.get("no_info_label", "Sin Información")),
            no_info_words=no_info_words,
            header_y_tol=float(data.get("header_y_tol", 0.7)),
            loose_y_tol=float(data.get("loose_y_tol", 1.8)),
            min_rows_before_text_merge=int(data.get("min_rows_before_text_merge", 8)),
        )


@dataclass(frozen=True)
class SummaryDialect:
    name: str
    section_markers: tuple[re.Pattern[str], ...]
    column_patterns: Mapping[ColumnKey, re.Pattern[str]]
    totals_label: re.Pattern[str]
    terminators: tuple[re.Pattern[str], ...]
    number_format: NumberFormat = field(default_factory=NumberFormat)
    tolerances: Tolerances = field(default_factory=Tolerances)
    indicators: IndicatorConfig | None = None

    def column_pattern(self, key: ColumnKey) -> re.Pattern[str]:
        return self.column_patterns[key]

    def has_section_marker(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self.section_markers)

    def has_header_labels(self, text: str) -> bool:
        return bool(
            self.column_pattern(ColumnKey.ORIGINAL).search(text)
            and self.column_pattern(ColumnKey.CURRENT).search(text)
        )

    def is_terminator(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self.terminators)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SummaryDialect":
        columns = data.get("columns") or {}
        missing = [key.value for key in COLUMN_ORDER if key.value not in columns]
        if missing:
            raise ValueError(f"Dialect {data.get('name')!r} missing column patterns: {missing}")
        indicators = data.get("indicators")
        return cls(
            name=str(data["name"]),
            section_markers=_compile_all(data.get("section_markers") or []),
            column_patterns=MappingProxyType(
                {key: _compile(columns[key.value]) for key in COLUMN_ORDER}
            ),
            totals_label=_compile(data["totals_label"]),
            terminators=_compile_all(data.get("terminators") or []),
            number_format=NumberFormat.from_dict(data.get("number_format")),
            tolerances=Tolerances.from_dict(data.get("tolerances")),
            indicators=IndicatorConfig.from_dict(indicators) if indicators else None,
        )


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise ValueError(f"Invalid pattern {pattern!r}: {exc}") from exc


def _compile_all(patterns: Sequence[str]) -> tuple[re.Pattern[str], ...]:
    return tuple(_compile(pattern) for pattern in patterns)
