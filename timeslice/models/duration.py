"""Duration models."""

from dataclasses import dataclass
from enum import StrEnum


class DurationUnit(StrEnum):
    SECOND = "s"
    MINUTE = "m"
    HOUR = "H"
    DAY = "D"
    WEEK = "W"
    MONTH = "M"  # fixed 30 days, not a calendar month


UNIT_SECONDS: dict[DurationUnit, int] = {
    DurationUnit.SECOND: 1,
    DurationUnit.MINUTE: 60,
    DurationUnit.HOUR: 60 * 60,
    DurationUnit.DAY: 24 * 60 * 60,
    DurationUnit.WEEK: 7 * 24 * 60 * 60,
    DurationUnit.MONTH: 30 * 24 * 60 * 60,
}


@dataclass(frozen=True)
class DurationSpec:
    magnitude: int
    unit: DurationUnit

    @property
    def total_seconds(self) -> int:
        return self.magnitude * UNIT_SECONDS[self.unit]

    def __str__(self) -> str:
        return f"{self.magnitude}{self.unit.value}"
