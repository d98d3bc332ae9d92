from datetime import date

import pytest

from football_sim.clock import SeasonClock


def test_season_start_and_label() -> None:
    clock = SeasonClock.season_start(2026)
    assert clock.as_date() == date(2026, 8, 1)
    assert clock.is_season_start()
    assert clock.season_label() == "2026-27"
    assert SeasonClock(2027, 3, 14).season_label() == "2026-27"
    assert SeasonClock(2099, 9, 1).season_label() == "2099-00"


def test_advance_day_rolls_months_and_years() -> None:
    clock = SeasonClock(2026, 12, 31)
    clock.advance_day()
    assert (clock.year, clock.month, clock.day) == (2027, 1, 1)

    leap = SeasonClock(2028, 2, 28)
    leap.advance_day()
    assert (leap.month, leap.day) == (2, 29)


def test_advance_week() -> None:
    clock = SeasonClock(2026, 8, 28)
    clock.advance_week()
    assert clock.as_date() == date(2026, 9, 4)
    clock.advance_days(0)
    assert clock.as_date() == date(2026, 9, 4)


def test_transfer_windows_and_season_end() -> None:
    assert SeasonClock(2026, 7, 10).is_summer_transfer_window()
    assert SeasonClock(2027, 1, 20).is_winter_transfer_window()
    assert not SeasonClock(2026, 10, 1).is_transfer_window()
    assert SeasonClock(2027, 5, 31).is_season_end()
    assert not SeasonClock(2027, 5, 30).is_season_end()


def test_format_and_weekday() -> None:
    clock = SeasonClock(2026, 8, 1)
    assert clock.weekday() == 5
    assert clock.format() == "2026-08-01"
    assert clock.format(with_weekday=True) == "Sat 2026-08-01"


def test_impossible_dates_are_rejected() -> None:
    with pytest.raises(ValueError):
        SeasonClock(2026, 2, 30)


def test_copy_is_independent() -> None:
    clock = SeasonClock.season_start(2026)
    other = clock.copy()
    other.advance_day()
    assert clock.day == 1
    assert other.day == 2
