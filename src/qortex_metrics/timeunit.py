"""Time units for timed observations."""

from __future__ import annotations

from enum import StrEnum


class TimeUnit(StrEnum):
    NANOSECONDS = "nanoseconds"
    MICROSECONDS = "microseconds"
    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    def from_seconds(self, seconds: float) -> float:
        """Express a duration given in seconds in this unit."""
        per_second, seconds_per = _SCALE[self]
        return seconds * per_second / seconds_per


# unit -> (units per second, seconds per unit); one side is always 1
_SCALE: dict[TimeUnit, tuple[int, int]] = {
    TimeUnit.NANOSECONDS: (1_000_000_000, 1),
    TimeUnit.MICROSECONDS: (1_000_000, 1),
    TimeUnit.MILLISECONDS: (1_000, 1),
    TimeUnit.SECONDS: (1, 1),
    TimeUnit.MINUTES: (1, 60),
    TimeUnit.HOURS: (1, 3_600),
    TimeUnit.DAYS: (1, 86_400),
}
