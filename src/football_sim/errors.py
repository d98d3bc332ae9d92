from __future__ import annotations


class SimulationError(Exception):
    """Base class for failures raised by the season simulator."""


class NoMatchScheduled(SimulationError):
    def __init__(self, team_id: str) -> None:
        super().__init__(f"No unplayed fixture left for team {team_id}.")
        self.team_id = team_id


class InvalidState(SimulationError):
    pass


class TeamNotFound(SimulationError):
    def __init__(self, team_id: str) -> None:
        super().__init__(f"Unknown team: {team_id}")
        self.team_id = team_id


class PlayerNotFound(SimulationError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"Unknown player: {player_id}")
        self.player_id = player_id


class FixtureNotFound(SimulationError):
    def __init__(self, fixture_id: str) -> None:
        super().__init__(f"Unknown fixture: {fixture_id}")
        self.fixture_id = fixture_id


class StorageError(SimulationError):
    pass
