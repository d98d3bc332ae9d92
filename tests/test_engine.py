import random

import pytest

from football_sim.engine import (
    GoalEvent,
    MatchResult,
    MatchSimulator,
    OwnGoalEvent,
    PenaltyEvent,
    YellowCardEvent,
    counts_as_goal_for,
    expected_goals,
    goal_minutes,
    simulate_match,
    team_strength,
)
from football_sim.models import (
    GOALKEEPING_ATTRIBUTES,
    MENTAL_ATTRIBUTES,
    PHYSICAL_ATTRIBUTES,
    TECHNICAL_ATTRIBUTES,
    Player,
    Team,
)
from football_sim.tactics import FORMATIONS

ALL_ATTRIBUTES = TECHNICAL_ATTRIBUTES + MENTAL_ATTRIBUTES + PHYSICAL_ATTRIBUTES + GOALKEEPING_ATTRIBUTES


def _player(team_id: str, position: str, level: int, **overrides) -> Player:
    return Player(
        name=f"{team_id}-{position}-{overrides.pop('tag', 0)}",
        position=position,
        team_id=team_id,
        attributes={name: level for name in ALL_ATTRIBUTES},
        **overrides,
    )


def _side(team_id: str, level: int) -> tuple[Team, list[Player]]:
    squad = [_player(team_id, pos, level, tag=idx) for idx, pos in enumerate(FORMATIONS["4-4-2"])]
    team = Team(team_id=team_id, name=team_id.title(), league_id="lg")
    for player in squad:
        team.add_player(player.player_id)
    team.set_default_lineup(squad)
    return team, squad


def test_team_strength_uses_lineup_and_falls_back_to_default() -> None:
    team, squad = _side("home", 120)
    assert len(team.lineup) == 11
    assert team_strength(team, squad) == 120
    assert team_strength(Team(team_id="empty", name="Empty"), []) == 50
    # Lineup ids that resolve to nobody also fall back.
    assert team_strength(team, []) == 50


def test_expected_goals_formula() -> None:
    assert expected_goals(80, 80) == (1.0, 1.0)
    assert expected_goals(100, 50) == pytest.approx((3.0, 1.5))
    assert expected_goals(50, 100) == pytest.approx((1.5, 3.0))
    assert expected_goals(80, 80, tactical_modifier=0.25) == pytest.approx((1.25, 0.75))


def test_scores_events_and_ratings_stay_in_bounds() -> None:
    home, home_squad = _side("home", 140)
    away, away_squad = _side("away", 90)
    simulator = MatchSimulator(random.Random(5))
    for _ in range(200):
        result = simulator.simulate(home, away, home_squad, away_squad)
        assert 0 <= result.home_score <= 5
        assert 0 <= result.away_score <= 5
        assert result.score_matches_events()

        goals = [e for e in result.events if isinstance(e, GoalEvent)]
        assert len(goals) == result.home_score + result.away_score
        minutes = [e.minute for e in goals]
        assert minutes == sorted(minutes)
        assert len(set(minutes)) == len(minutes)
        assert all(1 <= m <= 90 for m in minutes)

        cards = [e for e in result.events if isinstance(e, YellowCardEvent)]
        assert len(cards) <= 3

        stats = result.statistics
        assert stats.home_possession + stats.away_possession == 100
        assert len(stats.home_player_ratings) == 11
        assert len(stats.away_player_ratings) == 11
        for rating in [*stats.home_player_ratings, *stats.away_player_ratings]:
            assert 6.0 <= rating.rating <= 10.0
            assert rating.minutes_played == 90


def test_goals_credit_attacking_slots() -> None:
    home, home_squad = _side("home", 150)
    away, away_squad = _side("away", 60)
    attackers = {slot.player_id for slot in home.lineup if slot.position in {"ST", "CF", "LW", "RW", "AM"}}
    simulator = MatchSimulator(random.Random(21))
    scored = 0
    for _ in range(50):
        result = simulator.simulate(home, away, home_squad, away_squad)
        for event in result.events:
            if isinstance(event, GoalEvent) and event.team_id == "home":
                assert event.player_id in attackers
                scored += 1
    assert scored > 0


def test_rating_rows_count_goals() -> None:
    home, home_squad = _side("home", 150)
    away, away_squad = _side("away", 60)
    result = MatchSimulator(random.Random(8)).simulate(home, away, home_squad, away_squad)
    assert sum(r.goals for r in result.statistics.home_player_ratings) == result.home_score
    assert sum(r.goals for r in result.statistics.away_player_ratings) == result.away_score


def test_stronger_side_scores_more_over_many_matches() -> None:
    strong, strong_squad = _side("strong", 170)
    weak, weak_squad = _side("weak", 60)
    simulator = MatchSimulator(random.Random(3))
    strong_goals = weak_goals = 0
    for _ in range(100):
        result = simulator.simulate(strong, weak, strong_squad, weak_squad)
        strong_goals += result.home_score
        weak_goals += result.away_score
    assert strong_goals > weak_goals


def test_same_seed_gives_same_match() -> None:
    home, home_squad = _side("home", 110)
    away, away_squad = _side("away", 100)
    first = simulate_match(home, away, home_squad, away_squad, rng=random.Random(99))
    second = simulate_match(home, away, home_squad, away_squad, rng=random.Random(99))
    assert (first.home_score, first.away_score) == (second.home_score, second.away_score)
    assert first.events == second.events
    assert first.statistics == second.statistics


def test_statistics_approximations() -> None:
    simulator = MatchSimulator(random.Random(1))
    stats = simulator.generate_statistics(75, 25, 2, 1)
    assert (stats.home_possession, stats.away_possession) == (75, 25)
    assert 80 <= stats.home_shots <= 89
    assert stats.home_shots_on_target == stats.home_shots // 3 + 2
    assert stats.away_shots_on_target == stats.away_shots // 3 + 1
    assert 150 <= stats.home_passes <= 249
    assert 32 <= stats.home_pass_accuracy <= 33
    assert 2 <= stats.home_corners <= 7
    assert 10 <= stats.away_fouls <= 19
    assert 1 <= stats.home_offsides <= 5
    assert simulator.generate_statistics(0, 0, 0, 0).home_possession == 50


def test_player_rating_formula() -> None:
    keeper = _player("home", "GK", 200)
    assert MatchSimulator.player_rating(keeper, goals_for=0, goals_against=4) == pytest.approx(8.0)
    striker = _player("home", "ST", 120)
    assert MatchSimulator.player_rating(striker, goals_for=3, goals_against=0) == pytest.approx(6.9)
    tired = _player("home", "ST", 180, fatigue=50, morale=100)
    assert MatchSimulator.player_rating(tired, goals_for=0, goals_against=0) == pytest.approx(8.5)
    poor = _player("home", "CB", 40)
    assert MatchSimulator.player_rating(poor, goals_for=0, goals_against=3) == 6.0
    star = _player("home", "ST", 200, morale=100)
    assert MatchSimulator.player_rating(star, goals_for=5, goals_against=0) == 10.0


def test_goal_minutes_are_distinct_and_sorted() -> None:
    minutes = goal_minutes(10, random.Random(4))
    assert len(minutes) == 10
    assert minutes == sorted(set(minutes))
    assert goal_minutes(0, random.Random(4)) == []


def test_own_goals_and_penalties_credit_the_right_side() -> None:
    assert counts_as_goal_for(OwnGoalEvent(team_id="a", player_id="p", minute=3), "a", "b") == "b"
    assert counts_as_goal_for(PenaltyEvent(team_id="a", player_id="p", minute=3, scored=True), "a", "b") == "a"
    assert counts_as_goal_for(PenaltyEvent(team_id="a", player_id="p", minute=3, scored=False), "a", "b") is None
    assert counts_as_goal_for(YellowCardEvent(team_id="a", player_id="p", minute=3), "a", "b") is None

    result = MatchResult(league_id="lg", home_team_id="a", away_team_id="b", home_score=0, away_score=1)
    result.events.append(OwnGoalEvent(team_id="a", player_id="p", minute=12))
    assert result.score_matches_events()
    assert result.winner() == "b"
    assert result.goals_for("b") == 1
    with pytest.raises(ValueError):
        result.goals_for("c")


def test_unknown_mode_is_rejected() -> None:
    home, home_squad = _side("home", 100)
    away, away_squad = _side("away", 100)
    with pytest.raises(ValueError):
        MatchSimulator(random.Random(0)).simulate(home, away, home_squad, away_squad, mode="penalties")


def test_shot_accuracy_and_man_of_the_match() -> None:
    home, home_squad = _side("home", 120)
    away, away_squad = _side("away", 80)
    stats = MatchSimulator(random.Random(6)).simulate(home, away, home_squad, away_squad).statistics
    assert stats.shot_accuracy(home=True) == pytest.approx(stats.home_shots_on_target / stats.home_shots * 100.0)
    best = stats.man_of_the_match()
    assert best is not None
    assert best.rating == max(r.rating for r in [*stats.home_player_ratings, *stats.away_player_ratings])
    assert MatchResult(league_id="lg", home_team_id="a", away_team_id="b").statistics.man_of_the_match() is None
