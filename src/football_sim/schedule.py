from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable

from .config import BYE_TEAM_ID, DAYS_BETWEEN_ROUNDS, REVERSE_FIXTURE_SUFFIX


@dataclass(slots=True)
class FixtureSlot:
    fixture_id: str
    home_team_id: str
    away_team_id: str
    round_number: int = 0
    played: bool = False
    match_date: date | None = None

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    @property
    def is_reverse(self) -> bool:
        return self.fixture_id.endswith(REVERSE_FIXTURE_SUFFIX)


@dataclass(slots=True)
class Round:
    round_number: int
    fixtures: list[FixtureSlot] = field(default_factory=list)

    def is_complete(self) -> bool:
        return all(f.played for f in self.fixtures)


@dataclass(slots=True)
class Schedule:
    rounds: list[Round] = field(default_factory=list)

    def fixtures(self) -> list[FixtureSlot]:
        return [f for rnd in self.rounds for f in rnd.fixtures]

    def round(self, round_number: int) -> Round | None:
        for rnd in self.rounds:
            if rnd.round_number == round_number:
                return rnd
        return None

    def find(self, fixture_id: str) -> FixtureSlot | None:
        for fixture in self.fixtures():
            if fixture.fixture_id == fixture_id:
                return fixture
        return None


def _first_leg_rounds(team_ids: list[str]) -> list[Round]:
    """One full round-robin by the circle method."""
    rotating = list(team_ids)
    if len(rotating) % 2 == 1:
        rotating.append(BYE_TEAM_ID)

    n = len(rotating)
    half = n // 2
    rounds: list[Round] = []
    for round_idx in range(n - 1):
        number = round_idx + 1
        fixtures: list[FixtureSlot] = []
        for idx in range(half):
            home = rotating[idx]
            away = rotating[n - 1 - idx]
            if BYE_TEAM_ID in (home, away):
                continue
            fixtures.append(
                FixtureSlot(
                    fixture_id=f"match_{round_idx}_{idx}",
                    home_team_id=home,
                    away_team_id=away,
                    round_number=number,
                )
            )
        rounds.append(Round(round_number=number, fixtures=fixtures))

        # Keep first fixed, rotate the rest.
        rotating = [rotating[0], rotating[-1], *rotating[1:-1]]
    return rounds


def _second_leg_rounds(first_leg: list[Round]) -> list[Round]:
    offset = len(first_leg)
    second_leg = copy.deepcopy(first_leg)
    for rnd in second_leg:
        rnd.round_number += offset
        for fixture in rnd.fixtures:
            fixture.home_team_id, fixture.away_team_id = fixture.away_team_id, fixture.home_team_id
            fixture.fixture_id = f"{fixture.fixture_id}{REVERSE_FIXTURE_SUFFIX}"
            fixture.round_number = rnd.round_number
            fixture.played = False
    return second_leg


def generate_schedule(team_ids: Iterable[str]) -> Schedule:
    """Double round-robin for an ordered team list; identical output for identical order."""
    teams = list(team_ids)
    if len(teams) < 2:
        return Schedule()
    first_leg = _first_leg_rounds(teams)
    return Schedule(rounds=first_leg + _second_leg_rounds(first_leg))


def assign_match_dates(schedule: Schedule, start: date, days_between_rounds: int = DAYS_BETWEEN_ROUNDS) -> None:
    for idx, rnd in enumerate(schedule.rounds):
        match_day = start + timedelta(days=idx * max(1, days_between_rounds))
        for fixture in rnd.fixtures:
            fixture.match_date = match_day


def fixtures_for_team(schedule: Schedule, team_id: str) -> list[FixtureSlot]:
    return [f for f in schedule.fixtures() if f.involves(team_id)]


def total_rounds_for(team_count: int) -> int:
    """Twice the single round-robin length; odd counts gain a bye round per leg."""
    # Odd counts give 2N rather than 2(N-1): each bye-padded leg has N rounds.
    if team_count < 2:
        return 0
    padded = team_count + team_count % 2
    return 2 * (padded - 1)


@dataclass(slots=True)
class League:
    league_id: str
    name: str
    teams: list[str] = field(default_factory=list)
    current_round: int = 0
    total_rounds: int = 0
    schedule: Schedule = field(default_factory=Schedule)

    def __post_init__(self) -> None:
        self.total_rounds = total_rounds_for(len(self.teams))

    def generate_schedule(self) -> Schedule:
        self.schedule = generate_schedule(self.teams)
        self.total_rounds = total_rounds_for(len(self.teams))
        return self.schedule

    def fixtures(self) -> list[FixtureSlot]:
        return self.schedule.fixtures()

    def find_fixture(self, fixture_id: str) -> FixtureSlot | None:
        return self.schedule.find(fixture_id)

    def round_fixtures(self, round_number: int) -> Round | None:
        return self.schedule.round(round_number)

    def current_round_fixtures(self) -> Round | None:
        # The cursor counts completed rounds, so the open round is cursor + 1.
        return self.schedule.round(self.current_round + 1)

    def advance_round(self) -> bool:
        if self.current_round < self.total_rounds:
            self.current_round += 1
            return True
        return False

    def is_complete(self) -> bool:
        fixtures = self.fixtures()
        return bool(fixtures) and all(f.played for f in fixtures)

    def new_season(self, team_order: list[str] | None = None) -> Schedule:
        """Reset progress and regenerate pairings; `team_order` must be a permutation of the teams."""
        if team_order is not None:
            if sorted(team_order) != sorted(self.teams):
                raise ValueError("team_order must contain exactly the league's teams.")
            self.teams = list(team_order)
        self.current_round = 0
        for fixture in self.fixtures():
            fixture.played = False
        return self.generate_schedule()
