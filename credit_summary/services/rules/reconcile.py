"""Usage: derive past-due and outstanding balance from the recovered amounts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from credit_summary.schemas.summary import BUCKET_KEYS, COLUMN_ORDER, ColumnKey, CreditSummary


def round_amount(value: float | None) -> int:
    """Round half away from zero to whole currency units; ``None`` counts as zero."""

    if value is None:
        return 0
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def reconcile(values: Mapping[ColumnKey, float | None]) -> CreditSummary:
    """Build the canonical record. The only place past-due and balance are computed."""

    amounts = {key: round_amount(values.get(key)) for key in COLUMN_ORDER}
    past_due = sum(amounts[key] for key in BUCKET_KEYS)
    return CreditSummary(
        original=amounts[ColumnKey.ORIGINAL],
        current=amounts[ColumnKey.CURRENT],
        past_due=past_due,
        outstanding_balance=amounts[ColumnKey.CURRENT] + past_due,
        **{key.value: amounts[key] for key in BUCKET_KEYS},
    )
