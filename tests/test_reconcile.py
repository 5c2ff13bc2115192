from __future__ import annotations

import pytest
from pydantic import ValidationError

from credit_summary.schemas.summary import BUCKET_KEYS, ColumnKey, CreditSummary
from credit_summary.services.rules.reconcile import reconcile, round_amount


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, 0), (0.5, 1), (1.49, 1), (2.5, 3), (-2.5, -3), (150000.0, 150000)],
)
def test_round_amount_half_away_from_zero(value: float | None, expected: int) -> None:
    assert round_amount(value) == expected


def test_reconcile_derives_past_due_and_balance() -> None:
    values = {
        ColumnKey.ORIGINAL: 150000.0,
        ColumnKey.CURRENT: 120000.0,
        ColumnKey.BUCKET_1_29: 5000.0,
        ColumnKey.BUCKET_30_59: 4000.0,
        ColumnKey.BUCKET_60_89: 3000.0,
        ColumnKey.BUCKET_90_119: 2000.0,
        ColumnKey.BUCKET_120_179: 1000.0,
        ColumnKey.BUCKET_180_PLUS: 500.0,
    }

    summary = reconcile(values)

    assert summary.past_due == 15500
    assert summary.outstanding_balance == 135500
    assert summary.amounts()[ColumnKey.BUCKET_180_PLUS] == 500


def test_reconcile_rounds_before_summing() -> None:
    values = {
        ColumnKey.ORIGINAL: 10.0,
        ColumnKey.CURRENT: 5.4,
        ColumnKey.BUCKET_1_29: 0.5,
        ColumnKey.BUCKET_30_59: 0.5,
    }

    summary = reconcile(values)

    assert summary.current == 5
    assert summary.past_due == 2
    assert summary.outstanding_balance == 7
    assert summary.past_due == sum(getattr(summary, key.value) for key in BUCKET_KEYS)


def test_reconcile_treats_missing_columns_as_zero() -> None:
    summary = reconcile({ColumnKey.ORIGINAL: 100.0, ColumnKey.CURRENT: 80.0})

    assert summary.past_due == 0
    assert summary.outstanding_balance == 80


def test_credit_summary_rejects_inconsistent_totals() -> None:
    with pytest.raises(ValidationError):
        CreditSummary(original=10, current=5, past_due=3, outstanding_balance=8, bucket_1_29=1)

    with pytest.raises(ValidationError):
        CreditSummary(original=10, current=5, past_due=1, outstanding_balance=9, bucket_1_29=1)


def test_credit_summary_serializes_camel_case_aliases() -> None:
    summary = reconcile({ColumnKey.ORIGINAL: 100.0, ColumnKey.CURRENT: 80.0, ColumnKey.BUCKET_1_29: 20.0})

    payload = summary.model_dump(by_alias=True)

    assert payload["outstandingBalance"] == 100
    assert payload["pastDue"] == 20
    assert payload["bucket_1_29"] == 20
