from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Protocol

from .engine import MatchResult
from .errors import StorageError
from .models import Player, Team, TeamRecord
from .schedule import FixtureSlot

_log = logging.getLogger("football_sim.storage")


class FixtureRepository(Protocol):
    def create(self, league_id: str, fixture: FixtureSlot) -> None: ...

    def get(self, fixture_id: str) -> FixtureSlot: ...

    def get_by_league(self, league_id: str) -> list[FixtureSlot]: ...

    def get_by_round(self, league_id: str, round_number: int) -> list[FixtureSlot]: ...

    def mark_played(self, fixture_id: str) -> None: ...

    def delete_by_league(self, league_id: str) -> int: ...


class StandingsRepository(Protocol):
    def create_default(self, team_id: str, league_id: str) -> TeamRecord: ...

    def get_by_team(self, team_id: str) -> TeamRecord: ...

    def update(self, record: TeamRecord) -> None: ...

    def get_league_standings(self, league_id: str) -> list[TeamRecord]: ...


class MatchRepository(Protocol):
    def save(self, result: MatchResult) -> None: ...

    def get(self, match_id: str) -> MatchResult: ...

    def get_by_team(self, team_id: str) -> list[MatchResult]: ...

    def get_by_league_and_round(self, league_id: str, round_number: int) -> list[MatchResult]: ...


class PlayerRepository(Protocol):
    def get_by_team(self, team_id: str) -> list[Player]: ...

    def get(self, player_id: str) -> Player: ...

    def update(self, player: Player) -> None: ...


class TeamRepository(Protocol):
    def get(self, team_id: str) -> Team: ...

    def get_all(self) -> list[Team]: ...


class Storage(Protocol):
    fixtures: FixtureRepository
    standings: StandingsRepository
    matches: MatchRepository
    players: PlayerRepository
    teams: TeamRepository


class FixtureTable:
    def __init__(self) -> None:
        # fixture_id -> (league_id, fixture)
        self._rows: dict[str, tuple[str, FixtureSlot]] = {}

    def create(self, league_id: str, fixture: FixtureSlot) -> None:
        self._rows[fixture.fixture_id] = (league_id, replace(fixture))

    def get(self, fixture_id: str) -> FixtureSlot:
        try:
            return replace(self._rows[fixture_id][1])
        except KeyError as exc:
            raise StorageError(f"Fixture {fixture_id} is not stored.") from exc

    def get_by_league(self, league_id: str) -> list[FixtureSlot]:
        return [replace(f) for lid, f in self._rows.values() if lid == league_id]

    def get_by_round(self, league_id: str, round_number: int) -> list[FixtureSlot]:
        return [f for f in self.get_by_league(league_id) if f.round_number == round_number]

    def mark_played(self, fixture_id: str) -> None:
        if fixture_id not in self._rows:
            raise StorageError(f"Fixture {fixture_id} is not stored.")
        self._rows[fixture_id][1].played = True

    def delete_by_league(self, league_id: str) -> int:
        doomed = [fid for fid, (lid, _) in self._rows.items() if lid == league_id]
        for fid in doomed:
            del self._rows[fid]
        return len(doomed)


class StandingsTable:
    def __init__(self) -> None:
        self._rows: dict[str, tuple[str, TeamRecord]] = {}

    def create_default(self, team_id: str, league_id: str) -> TeamRecord:
        record = TeamRecord(team_id=team_id)
        self._rows[team_id] = (league_id, record)
        return replace(record, recent_results=list(record.recent_results))

    def get_by_team(self, team_id: str) -> TeamRecord:
        try:
            record = self._rows[team_id][1]
        except KeyError as exc:
            raise StorageError(f"No standing stored for team {team_id}.") from exc
        return replace(record, recent_results=list(record.recent_results))

    def update(self, record: TeamRecord) -> None:
        if record.team_id not in self._rows:
            raise StorageError(f"No standing stored for team {record.team_id}.")
        league_id = self._rows[record.team_id][0]
        self._rows[record.team_id] = (league_id, replace(record, recent_results=list(record.recent_results)))

    def get_league_standings(self, league_id: str) -> list[TeamRecord]:
        return [
            replace(record, recent_results=list(record.recent_results))
            for lid, record in self._rows.values()
            if lid == league_id
        ]


class MatchTable:
    def __init__(self) -> None:
        self._rows: dict[str, MatchResult] = {}

    def save(self, result: MatchResult) -> None:
        self._rows[result.match_id] = result

    def get(self, match_id: str) -> MatchResult:
        try:
            return self._rows[match_id]
        except KeyError as exc:
            raise StorageError(f"Match {match_id} is not stored.") from exc

    def get_by_team(self, team_id: str) -> list[MatchResult]:
        return [m for m in self._rows.values() if team_id in (m.home_team_id, m.away_team_id)]

    def get_by_league_and_round(self, league_id: str, round_number: int) -> list[MatchResult]:
        return [m for m in self._rows.values() if m.league_id == league_id and m.round_number == round_number]


class PlayerTable:
    def __init__(self) -> None:
        self._rows: dict[str, Player] = {}

    def add(self, player: Player) -> None:
        self._rows[player.player_id] = player

    def get_by_team(self, team_id: str) -> list[Player]:
        return [p for p in self._rows.values() if p.team_id == team_id]

    def get(self, player_id: str) -> Player:
        try:
            return self._rows[player_id]
        except KeyError as exc:
            raise StorageError(f"Player {player_id} is not stored.") from exc

    def update(self, player: Player) -> None:
        if player.player_id not in self._rows:
            raise StorageError(f"Player {player.player_id} is not stored.")
        self._rows[player.player_id] = player

    def all(self) -> list[Player]:
        return list(self._rows.values())


class TeamTable:
    def __init__(self) -> None:
        self._rows: dict[str, Team] = {}

    def add(self, team: Team) -> None:
        self._rows[team.team_id] = team

    def get(self, team_id: str) -> Team:
        try:
            return self._rows[team_id]
        except KeyError as exc:
            raise StorageError(f"Team {team_id} is not stored.") from exc

    def get_all(self) -> list[Team]:
        return list(self._rows.values())


class InMemoryStorage:
    """Dict-backed implementation of every repository the season flow talks to."""

    def __init__(self) -> None:
        self.fixtures = FixtureTable()
        self.standings = StandingsTable()
        self.matches = MatchTable()
        self.players = PlayerTable()
        self.teams = TeamTable()

    def seed(self, teams: Iterable[Team], players: Iterable[Player]) -> None:
        for team in teams:
            self.teams.add(team)
        for player in players:
            self.players.add(player)
        _log.debug("Seeded storage with %d teams and %d players", len(self.teams.get_all()), len(self.players.all()))
