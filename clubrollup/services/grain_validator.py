"""Grain validation: the single gate in front of every summary-store write."""

import logging
from collections import Counter
from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Protocol

from clubrollup.core.errors import GrainViolation
from clubrollup.services.period_dates import first_day

logger = logging.getLogger(__name__)


class GrainRow(Protocol):
    NON_NEGATIVE_FIELDS: ClassVar[tuple[str, ...]]
    year: int
    month: int
    month_start_date: date

    @property
    def period_key(self) -> tuple[Any, int, int]: ...


@dataclass
class GrainValidationResult:
    accepted: list[Any] = field(default_factory=list)
    rejected: list[GrainViolation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected


class GrainValidator:
    """Checks that every candidate row is exactly one (entity, calendar month).

    A row is rejected when its month is outside 1..12, its month_start_date is
    not the first day of (year, month), its key occurs more than once in the
    batch, or any of its count/cost fields is negative. Rejections are
    returned, never raised, so the rest of the batch proceeds.
    """

    def validate(self, rows: Sequence[GrainRow]) -> GrainValidationResult:
        result = GrainValidationResult()
        key_counts: Counter[Hashable] = Counter(row.period_key for row in rows)

        for row in rows:
            try:
                self.check_row(row)
                if key_counts[row.period_key] > 1:
                    raise GrainViolation(
                        row.period_key,
                        f"period key occurs {key_counts[row.period_key]} times in batch",
                    )
            except GrainViolation as violation:
                logger.warning("Rejected aggregate row: %s", violation)
                result.rejected.append(violation)
            else:
                result.accepted.append(row)
        return result

    def check_row(self, row: GrainRow) -> None:
        """Raise GrainViolation if a single row breaks the grain contract."""
        if not 1 <= row.month <= 12:
            raise GrainViolation(row.period_key, f"month {row.month} outside 1..12")

        try:
            expected_start = first_day(row.year, row.month)
        except ValueError as exc:
            raise GrainViolation(row.period_key, f"year {row.year} is not a calendar year") from exc
        if row.month_start_date != expected_start:
            raise GrainViolation(
                row.period_key,
                f"month_start_date {row.month_start_date} is not {expected_start}",
            )

        for name in row.NON_NEGATIVE_FIELDS:
            value = getattr(row, name)
            if value is not None and Decimal(value) < 0:
                raise GrainViolation(row.period_key, f"{name} is negative ({value})")
