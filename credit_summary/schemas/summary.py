from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ColumnKey(str, Enum):
    """The eight canonical columns of the summary table, in table order."""

    ORIGINAL = "original"
    CURRENT = "current"
    BUCKET_1_29 = "bucket_1_29"
    BUCKET_30_59 = "bucket_30_59"
    BUCKET_60_89 = "bucket_60_89"
    BUCKET_90_119 = "bucket_90_119"
    BUCKET_120_179 = "bucket_120_179"
    BUCKET_180_PLUS = "bucket_180_plus"


COLUMN_ORDER: tuple[ColumnKey, ...] = tuple(ColumnKey)
BUCKET_KEYS: tuple[ColumnKey, ...] = COLUMN_ORDER[2:]


class CreditSummary(BaseModel):
    """Reconciled summary totals. Derived fields are never taken from the source."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    original: int = Field(..., description="Original amount")
    current: int = Field(..., description="Current (not past due) amount")
    outstanding_balance: int = Field(
        ...,
        alias="outstandingBalance",
        description="current + past_due",
    )
    past_due: int = Field(
        ...,
        alias="pastDue",
        description="Sum of the six delinquency buckets",
    )
    bucket_1_29: int = 0
    bucket_30_59: int = 0
    bucket_60_89: int = 0
    bucket_90_119: int = 0
    bucket_120_179: int = 0
    bucket_180_plus: int = 0

    @model_validator(mode="after")
    def _check_reconciled(self) -> "CreditSummary":
        buckets = sum(getattr(self, key.value) for key in BUCKET_KEYS)
        if self.past_due != buckets:
            raise ValueError(f"past_due {self.past_due} does not match bucket sum {buckets}")
        if self.outstanding_balance != self.current + self.past_due:
            raise ValueError(
                f"outstanding_balance {self.outstanding_balance} does not match "
                f"current + past_due ({self.current} + {self.past_due})"
            )
        return self

    def amounts(self) -> dict[ColumnKey, int]:
        """Return the eight canonical amounts keyed by column."""

        return {key: getattr(self, key.value) for key in COLUMN_ORDER}


class IndicatorRow(BaseModel):
    """One identifier/code/value row of the bureau indicator block."""

    id: int = Field(..., ge=0, le=99)
    code: str
    raw_value: str
