from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from .config import (
    SEASON_END_DAY,
    SEASON_END_MONTH,
    SEASON_START_DAY,
    SEASON_START_MONTH,
    SUMMER_WINDOW_MONTHS,
    WINTER_WINDOW_MONTHS,
)

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(slots=True)
class SeasonClock:
    """In-game calendar date, advanced one day at a time by the season flow."""

    year: int
    month: int = SEASON_START_MONTH
    day: int = SEASON_START_DAY

    def __post_init__(self) -> None:
        # Raises ValueError for impossible dates.
        date(self.year, self.month, self.day)

    @classmethod
    def season_start(cls, year: int) -> SeasonClock:
        return cls(year=year, month=SEASON_START_MONTH, day=SEASON_START_DAY)

    def as_date(self) -> date:
        return date(self.year, self.month, self.day)

    def set_date(self, value: date) -> None:
        self.year, self.month, self.day = value.year, value.month, value.day

    def advance_day(self) -> None:
        self.set_date(self.as_date() + timedelta(days=1))

    def advance_days(self, days: int) -> None:
        for _ in range(max(0, days)):
            self.advance_day()

    def advance_week(self) -> None:
        self.advance_days(7)

    def is_summer_transfer_window(self) -> bool:
        return self.month in SUMMER_WINDOW_MONTHS

    def is_winter_transfer_window(self) -> bool:
        return self.month in WINTER_WINDOW_MONTHS

    def is_transfer_window(self) -> bool:
        return self.is_summer_transfer_window() or self.is_winter_transfer_window()

    def is_season_end(self) -> bool:
        return self.month == SEASON_END_MONTH and self.day == SEASON_END_DAY

    def is_season_start(self) -> bool:
        return self.month == SEASON_START_MONTH and self.day == SEASON_START_DAY

    def weekday(self) -> int:
        """0=Monday ... 6=Sunday."""
        return self.as_date().weekday()

    def season_label(self) -> str:
        start = self.year if self.month >= SEASON_START_MONTH else self.year - 1
        return f"{start}-{(start + 1) % 100:02d}"

    def format(self, with_weekday: bool = False) -> str:
        text = f"{self.year}-{self.month:02d}-{self.day:02d}"
        if with_weekday:
            return f"{WEEKDAY_NAMES[self.weekday()]} {text}"
        return text

    def copy(self) -> SeasonClock:
        return SeasonClock(self.year, self.month, self.day)
