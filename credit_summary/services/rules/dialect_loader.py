"""Usage: load summary dialect configurations from JSON files."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from credit_summary.core.config import settings
from credit_summary.services.rules.dialect import SummaryDialect

DIALECT_DIR = Path(__file__).resolve().parents[2] / "dialects"


@lru_cache(maxsize=4)
def load_dialects(dialect_dir: Path | None = None) -> Mapping[str, SummaryDialect]:
    """Read-only name -> dialect mapping; the cached result is shared by every caller."""

    target_dir = dialect_dir or settings.dialect_dir or DIALECT_DIR
    if not target_dir.exists():
        return MappingProxyType({})

    dialects: dict[str, SummaryDialect] = {}
    for path in sorted(target_dir.glob("*.json")):
        data = json.loads(path.read_text(encoding="utf-8"))
        _validate_dialect(data, source=path)
        try:
            dialect = SummaryDialect.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Dialect {path} is invalid: {exc}") from exc
        if dialect.name in dialects:
            raise ValueError(f"Duplicate dialect name {dialect.name!r} in {path}")
        dialects[dialect.name] = dialect
    return MappingProxyType(dialects)


def get_dialect(name: str | None = None, *, dialect_dir: Path | None = None) -> SummaryDialect:
    target = name or settings.default_dialect
    dialects = load_dialects(dialect_dir)
    if target not in dialects:
        raise KeyError(f"Unknown dialect {target!r}; available: {sorted(dialects)}")
    return dialects[target]


def _validate_dialect(data: dict[str, Any], *, source: Path) -> None:
    required_keys = ("name", "section_markers", "columns", "totals_label", "terminators")
    for key in required_keys:
        if key not in data:
            raise ValueError(f"Dialect {source} missing required key: {key}")
