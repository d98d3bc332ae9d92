from datetime import date
from itertools import combinations

import pytest

from football_sim.schedule import (
    League,
    assign_match_dates,
    fixtures_for_team,
    generate_schedule,
    total_rounds_for,
)


def _ids(count: int) -> list[str]:
    return [f"t{idx}" for idx in range(count)]


def test_double_round_robin_count() -> None:
    schedule = generate_schedule(_ids(4))
    assert len(schedule.rounds) == 6
    assert len(schedule.fixtures()) == 12
    assert [rnd.round_number for rnd in schedule.rounds] == [1, 2, 3, 4, 5, 6]


def test_every_pair_meets_once_at_each_venue() -> None:
    teams = _ids(6)
    schedule = generate_schedule(teams)
    pairings = [(f.home_team_id, f.away_team_id) for f in schedule.fixtures()]

    assert len(schedule.rounds) == 2 * (len(teams) - 1)
    assert len(pairings) == len(set(pairings)) == 30
    assert all(home != away for home, away in pairings)
    for a, b in combinations(teams, 2):
        assert (a, b) in pairings
        assert (b, a) in pairings


def test_each_team_plays_once_per_round() -> None:
    schedule = generate_schedule(_ids(8))
    for rnd in schedule.rounds:
        assert len(rnd.fixtures) == 4
        seen = [tid for f in rnd.fixtures for tid in (f.home_team_id, f.away_team_id)]
        assert len(seen) == len(set(seen))


def test_second_leg_mirrors_first_leg() -> None:
    schedule = generate_schedule(_ids(4))
    first_leg, second_leg = schedule.rounds[:3], schedule.rounds[3:]
    assert schedule.rounds[0].fixtures[0].fixture_id == "match_0_0"
    for first, second in zip(first_leg, second_leg):
        assert second.round_number == first.round_number + 3
        for original, mirrored in zip(first.fixtures, second.fixtures):
            assert mirrored.fixture_id == f"{original.fixture_id}_rev"
            assert mirrored.is_reverse and not original.is_reverse
            assert (mirrored.home_team_id, mirrored.away_team_id) == (original.away_team_id, original.home_team_id)
            assert mirrored.round_number == second.round_number


def test_odd_team_count_drops_bye_slots() -> None:
    teams = _ids(5)
    schedule = generate_schedule(teams)
    fixtures = schedule.fixtures()

    assert len(schedule.rounds) == total_rounds_for(5) == 10
    assert len(fixtures) == 5 * 4
    assert all(len(rnd.fixtures) <= 5 // 2 for rnd in schedule.rounds)
    assert all("BYE" not in (f.home_team_id, f.away_team_id) for f in fixtures)
    for team in teams:
        assert len(fixtures_for_team(schedule, team)) == 8


def test_fewer_than_two_teams_gives_empty_schedule() -> None:
    assert generate_schedule([]).rounds == []
    assert generate_schedule(["solo"]).rounds == []
    league = League(league_id="l", name="Tiny", teams=["solo"])
    league.generate_schedule()
    assert league.total_rounds == 0
    assert league.advance_round() is False
    assert league.is_complete() is False


def test_same_order_gives_identical_schedule() -> None:
    first = generate_schedule(_ids(6))
    second = generate_schedule(_ids(6))
    assert first == second


def test_new_season_resets_progress_and_reproduces_pairings() -> None:
    league = League(league_id="l", name="Test", teams=_ids(4))
    league.generate_schedule()
    before = [(f.fixture_id, f.home_team_id, f.away_team_id) for f in league.fixtures()]

    for fixture in league.fixtures():
        fixture.played = True
    league.advance_round()
    league.advance_round()
    assert league.is_complete()

    league.new_season()
    after = [(f.fixture_id, f.home_team_id, f.away_team_id) for f in league.fixtures()]
    assert league.current_round == 0
    assert not any(f.played for f in league.fixtures())
    assert after == before


def test_new_season_rejects_foreign_team_order() -> None:
    league = League(league_id="l", name="Test", teams=_ids(4))
    with pytest.raises(ValueError):
        league.new_season(["t0", "t1", "t2", "intruder"])


def test_advance_round_stops_at_total_rounds() -> None:
    league = League(league_id="l", name="Test", teams=_ids(4))
    league.generate_schedule()
    assert league.current_round_fixtures() is not None
    assert league.current_round_fixtures().round_number == 1
    assert all(league.advance_round() for _ in range(6))
    assert league.advance_round() is False
    assert league.current_round == 6
    assert league.current_round_fixtures() is None


def test_match_dates_step_a_week_per_round() -> None:
    schedule = generate_schedule(_ids(4))
    assign_match_dates(schedule, date(2026, 8, 8))
    assert {f.match_date for f in schedule.rounds[0].fixtures} == {date(2026, 8, 8)}
    assert {f.match_date for f in schedule.rounds[1].fixtures} == {date(2026, 8, 15)}
    assert schedule.rounds[-1].fixtures[0].match_date == date(2026, 9, 12)
