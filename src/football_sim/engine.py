from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Union
from uuid import uuid4

from .config import (
    ATTACKING_POSITIONS,
    CORNERS_RANGE,
    DEFAULT_TEAM_STRENGTH,
    FOULS_RANGE,
    MATCH_MINUTES,
    MAX_GOALS,
    MAX_YELLOW_CARDS,
    OFFSIDES_RANGE,
    PASSES_BASE,
    PASSES_BONUS_RANGE,
    RATING_ABILITY_DIVISOR,
    RATING_FATIGUE_WEIGHT,
    RATING_GK_PER_GOAL_CONCEDED,
    RATING_MAX,
    RATING_MIN,
    RATING_MORALE_WEIGHT,
    RATING_OUTFIELD_PER_TEAM_GOAL,
    SCORE_NOISE,
    SHOTS_BONUS_RANGE,
    STRONGER_SIDE_BASE_XG,
    STRONGER_SIDE_DIFF_DIVISOR,
    TACTICAL_GOAL_WEIGHT,
    WEAKER_SIDE_BASE_XG,
    WEAKER_SIDE_DIFF_DIVISOR,
)
from .models import Player, Team

_log = logging.getLogger("football_sim.engine")

MATCH_MODES = ("quick", "live")


@dataclass(frozen=True, slots=True)
class GoalEvent:
    team_id: str
    player_id: str
    minute: int
    kind: Literal["goal"] = "goal"


@dataclass(frozen=True, slots=True)
class OwnGoalEvent:
    # team_id is the side of the player who put it into their own net.
    team_id: str
    player_id: str
    minute: int
    kind: Literal["own_goal"] = "own_goal"


@dataclass(frozen=True, slots=True)
class PenaltyEvent:
    team_id: str
    player_id: str
    minute: int
    scored: bool
    kind: Literal["penalty"] = "penalty"


@dataclass(frozen=True, slots=True)
class YellowCardEvent:
    team_id: str
    player_id: str
    minute: int
    kind: Literal["yellow_card"] = "yellow_card"


@dataclass(frozen=True, slots=True)
class RedCardEvent:
    team_id: str
    player_id: str
    minute: int
    kind: Literal["red_card"] = "red_card"


@dataclass(frozen=True, slots=True)
class InjuryEvent:
    team_id: str
    player_id: str
    minute: int
    severity: int
    kind: Literal["injury"] = "injury"


@dataclass(frozen=True, slots=True)
class SubstitutionEvent:
    team_id: str
    player_out: str
    player_in: str
    minute: int
    kind: Literal["substitution"] = "substitution"


MatchEvent = Union[
    GoalEvent,
    OwnGoalEvent,
    PenaltyEvent,
    YellowCardEvent,
    RedCardEvent,
    InjuryEvent,
    SubstitutionEvent,
]


def counts_as_goal_for(event: MatchEvent, home_team_id: str, away_team_id: str) -> str | None:
    """Side that gets a goal from this event, or None when it is not a goal."""
    if isinstance(event, GoalEvent):
        return event.team_id
    if isinstance(event, PenaltyEvent):
        return event.team_id if event.scored else None
    if isinstance(event, OwnGoalEvent):
        return away_team_id if event.team_id == home_team_id else home_team_id
    return None


@dataclass(slots=True)
class PlayerMatchRating:
    player_id: str
    name: str
    position: str
    rating: float
    minutes_played: int = MATCH_MINUTES
    goals: int = 0
    assists: int = 0


@dataclass(slots=True)
class MatchStatistics:
    home_possession: int = 50
    away_possession: int = 50
    home_shots: int = 0
    away_shots: int = 0
    home_shots_on_target: int = 0
    away_shots_on_target: int = 0
    home_passes: int = 0
    away_passes: int = 0
    home_pass_accuracy: int = 0
    away_pass_accuracy: int = 0
    home_corners: int = 0
    away_corners: int = 0
    home_fouls: int = 0
    away_fouls: int = 0
    home_offsides: int = 0
    away_offsides: int = 0
    home_player_ratings: list[PlayerMatchRating] = field(default_factory=list)
    away_player_ratings: list[PlayerMatchRating] = field(default_factory=list)

    def shot_accuracy(self, home: bool) -> float:
        shots = self.home_shots if home else self.away_shots
        on_target = self.home_shots_on_target if home else self.away_shots_on_target
        if shots <= 0:
            return 0.0
        return on_target / shots * 100.0

    def man_of_the_match(self) -> PlayerMatchRating | None:
        ratings = [*self.home_player_ratings, *self.away_player_ratings]
        if not ratings:
            return None
        return max(ratings, key=lambda r: r.rating)


@dataclass(slots=True)
class MatchResult:
    league_id: str
    home_team_id: str
    away_team_id: str
    home_score: int = 0
    away_score: int = 0
    mode: str = "quick"
    events: list[MatchEvent] = field(default_factory=list)
    statistics: MatchStatistics = field(default_factory=MatchStatistics)
    round_number: int = 0
    fixture_id: str | None = None
    match_id: str = field(default_factory=lambda: uuid4().hex)
    played_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def home_won(self) -> bool:
        return self.home_score > self.away_score

    @property
    def away_won(self) -> bool:
        return self.away_score > self.home_score

    @property
    def is_draw(self) -> bool:
        return self.home_score == self.away_score

    def winner(self) -> str | None:
        if self.home_won:
            return self.home_team_id
        if self.away_won:
            return self.away_team_id
        return None

    def goals_for(self, team_id: str) -> int:
        if team_id == self.home_team_id:
            return self.home_score
        if team_id == self.away_team_id:
            return self.away_score
        raise ValueError(f"{team_id} did not play in match {self.match_id}.")

    def goals_against(self, team_id: str) -> int:
        if team_id == self.home_team_id:
            return self.away_score
        if team_id == self.away_team_id:
            return self.home_score
        raise ValueError(f"{team_id} did not play in match {self.match_id}.")

    def add_goal(self, team_id: str, player_id: str, minute: int) -> None:
        if team_id == self.home_team_id:
            self.home_score += 1
        elif team_id == self.away_team_id:
            self.away_score += 1
        else:
            raise ValueError(f"{team_id} did not play in match {self.match_id}.")
        self.events.append(GoalEvent(team_id=team_id, player_id=player_id, minute=minute))

    def score_matches_events(self) -> bool:
        home = away = 0
        for event in self.events:
            side = counts_as_goal_for(event, self.home_team_id, self.away_team_id)
            if side == self.home_team_id:
                home += 1
            elif side == self.away_team_id:
                away += 1
        return (home, away) == (self.home_score, self.away_score)


def _players_by_id(players: list[Player]) -> dict[str, Player]:
    return {p.player_id: p for p in players}


def team_strength(team: Team, players: list[Player]) -> int:
    """Mean position rating of the lineup; neutral default when there is no usable lineup."""
    if not team.lineup:
        return DEFAULT_TEAM_STRENGTH
    lookup = _players_by_id(players)
    ratings = [lookup[slot.player_id].position_rating(slot.position) for slot in team.lineup if slot.player_id in lookup]
    if not ratings:
        return DEFAULT_TEAM_STRENGTH
    return sum(ratings) // len(ratings)


def expected_goals(home_strength: int, away_strength: int, tactical_modifier: float = 0.0) -> tuple[float, float]:
    diff = home_strength - away_strength
    if diff > 0:
        home_xg = STRONGER_SIDE_BASE_XG + diff / STRONGER_SIDE_DIFF_DIVISOR
        away_xg = WEAKER_SIDE_BASE_XG + diff / WEAKER_SIDE_DIFF_DIVISOR
    elif diff < 0:
        home_xg = WEAKER_SIDE_BASE_XG + abs(diff) / WEAKER_SIDE_DIFF_DIVISOR
        away_xg = STRONGER_SIDE_BASE_XG + abs(diff) / STRONGER_SIDE_DIFF_DIVISOR
    else:
        home_xg = away_xg = WEAKER_SIDE_BASE_XG
    shift = tactical_modifier * TACTICAL_GOAL_WEIGHT
    return (max(0.0, home_xg + shift), max(0.0, away_xg - shift))


def _goals_from_expectation(expected: float, rng: random.Random) -> int:
    noisy = expected + rng.uniform(-SCORE_NOISE, SCORE_NOISE)
    return int(max(0, min(MAX_GOALS, math.floor(noisy))))


def goal_minutes(total_goals: int, rng: random.Random) -> list[int]:
    """Distinct, sorted minutes in [1, 90]."""
    count = max(0, min(total_goals, MATCH_MINUTES))
    return sorted(rng.sample(range(1, MATCH_MINUTES + 1), count))


def _clamp_rating(value: float) -> float:
    return max(RATING_MIN, min(RATING_MAX, value))


class MatchSimulator:
    """Turns two lineups into a score, timeline, statistics and player ratings."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def simulate(
        self,
        home_team: Team,
        away_team: Team,
        home_players: list[Player],
        away_players: list[Player],
        mode: str = "quick",
        tactical_modifier: float = 0.0,
        round_number: int = 0,
        fixture_id: str | None = None,
    ) -> MatchResult:
        if mode not in MATCH_MODES:
            raise ValueError(f"Unknown match mode {mode!r}.")
        home_strength = team_strength(home_team, home_players)
        away_strength = team_strength(away_team, away_players)
        home_goals, away_goals = self.calculate_score(home_strength, away_strength, tactical_modifier)

        result = MatchResult(
            league_id=home_team.league_id,
            home_team_id=home_team.team_id,
            away_team_id=away_team.team_id,
            mode=mode,
            round_number=round_number,
            fixture_id=fixture_id,
        )
        self._add_goal_events(result, home_team, away_team, home_players, away_players, home_goals, away_goals)
        self._add_bookings(result, home_team, away_team, home_players, away_players)
        result.statistics = self.generate_statistics(home_strength, away_strength, home_goals, away_goals)
        scorers = self._goals_by_player(result)
        result.statistics.home_player_ratings = self.rate_players(home_players, goals_for=home_goals, goals_against=away_goals, scorers=scorers)
        result.statistics.away_player_ratings = self.rate_players(away_players, goals_for=away_goals, goals_against=home_goals, scorers=scorers)

        _log.debug(
            "Simulated %s %d-%d %s (strength %d vs %d, modifier %+.2f)",
            home_team.name,
            result.home_score,
            result.away_score,
            away_team.name,
            home_strength,
            away_strength,
            tactical_modifier,
        )
        return result

    def calculate_score(self, home_strength: int, away_strength: int, tactical_modifier: float = 0.0) -> tuple[int, int]:
        home_xg, away_xg = expected_goals(home_strength, away_strength, tactical_modifier)
        return (_goals_from_expectation(home_xg, self._rng), _goals_from_expectation(away_xg, self._rng))

    def select_scorer(self, team: Team, players: list[Player]) -> str:
        if not team.lineup:
            return players[0].player_id if players else ""
        lookup = _players_by_id(players)
        attacking = [slot for slot in team.lineup if slot.position in ATTACKING_POSITIONS]
        if attacking:
            slot = self._rng.choice(attacking)
            if slot.player_id in lookup:
                return slot.player_id
        if team.lineup:
            return team.lineup[0].player_id
        return players[0].player_id if players else ""

    def _add_goal_events(
        self,
        result: MatchResult,
        home_team: Team,
        away_team: Team,
        home_players: list[Player],
        away_players: list[Player],
        home_goals: int,
        away_goals: int,
    ) -> None:
        home_left = home_goals
        away_left = away_goals
        for minute in goal_minutes(home_goals + away_goals, self._rng):
            if home_left > 0 and (away_left == 0 or self._rng.random() < 0.5):
                result.add_goal(home_team.team_id, self.select_scorer(home_team, home_players), minute)
                home_left -= 1
            elif away_left > 0:
                result.add_goal(away_team.team_id, self.select_scorer(away_team, away_players), minute)
                away_left -= 1

    def _add_bookings(
        self,
        result: MatchResult,
        home_team: Team,
        away_team: Team,
        home_players: list[Player],
        away_players: list[Player],
    ) -> None:
        for _ in range(self._rng.randint(0, MAX_YELLOW_CARDS)):
            minute = self._rng.randint(1, MATCH_MINUTES)
            if self._rng.random() < 0.5:
                team, players = home_team, home_players
            else:
                team, players = away_team, away_players
            player_id = self.select_scorer(team, players)
            if not player_id:
                continue
            result.events.append(YellowCardEvent(team_id=team.team_id, player_id=player_id, minute=minute))
        result.events.sort(key=lambda e: e.minute)

    @staticmethod
    def _goals_by_player(result: MatchResult) -> dict[str, int]:
        counts: dict[str, int] = {}
        for event in result.events:
            if isinstance(event, GoalEvent) or (isinstance(event, PenaltyEvent) and event.scored):
                counts[event.player_id] = counts.get(event.player_id, 0) + 1
        return counts

    def generate_statistics(self, home_strength: int, away_strength: int, home_goals: int, away_goals: int) -> MatchStatistics:
        total = home_strength + away_strength
        home_possession = (home_strength * 100) // total if total > 0 else 50
        away_possession = 100 - home_possession

        home_shots = home_possession + self._rng.randint(*SHOTS_BONUS_RANGE)
        away_shots = away_possession + self._rng.randint(*SHOTS_BONUS_RANGE)
        home_passes = PASSES_BASE + self._rng.randint(*PASSES_BONUS_RANGE)
        away_passes = PASSES_BASE + self._rng.randint(*PASSES_BONUS_RANGE)

        return MatchStatistics(
            home_possession=home_possession,
            away_possession=away_possession,
            home_shots=home_shots,
            away_shots=away_shots,
            home_shots_on_target=home_shots // 3 + home_goals,
            away_shots_on_target=away_shots // 3 + away_goals,
            home_passes=home_passes,
            away_passes=away_passes,
            home_pass_accuracy=(home_passes // 3) * 100 // home_passes,
            away_pass_accuracy=(away_passes // 3) * 100 // away_passes,
            home_corners=self._rng.randint(*CORNERS_RANGE),
            away_corners=self._rng.randint(*CORNERS_RANGE),
            home_fouls=self._rng.randint(*FOULS_RANGE),
            away_fouls=self._rng.randint(*FOULS_RANGE),
            home_offsides=self._rng.randint(*OFFSIDES_RANGE),
            away_offsides=self._rng.randint(*OFFSIDES_RANGE),
        )

    @staticmethod
    def player_rating(player: Player, goals_for: int, goals_against: int) -> float:
        rating = player.overall_ability() / RATING_ABILITY_DIVISOR
        if player.is_gk:
            rating -= goals_against * RATING_GK_PER_GOAL_CONCEDED
        else:
            rating += goals_for * RATING_OUTFIELD_PER_TEAM_GOAL
        rating -= player.fatigue * RATING_FATIGUE_WEIGHT
        rating += (player.morale - 50) * RATING_MORALE_WEIGHT
        return round(_clamp_rating(rating), 2)

    def rate_players(
        self,
        players: list[Player],
        goals_for: int,
        goals_against: int,
        scorers: dict[str, int] | None = None,
    ) -> list[PlayerMatchRating]:
        scorers = scorers or {}
        return [
            PlayerMatchRating(
                player_id=p.player_id,
                name=p.name,
                position=p.position,
                rating=self.player_rating(p, goals_for, goals_against),
                goals=scorers.get(p.player_id, 0),
            )
            for p in players
        ]


def simulate_match(
    home_team: Team,
    away_team: Team,
    home_players: list[Player],
    away_players: list[Player],
    mode: str = "quick",
    tactical_modifier: float = 0.0,
    rng: random.Random | None = None,
) -> MatchResult:
    return MatchSimulator(rng).simulate(
        home_team,
        away_team,
        home_players,
        away_players,
        mode=mode,
        tactical_modifier=tactical_modifier,
    )
