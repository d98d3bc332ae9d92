from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar
from uuid import uuid4

from .config import POINTS_FOR_DRAW, POINTS_FOR_WIN
from .tactics import TacticalProfile

GOALKEEPER = "GK"
DEFENDER_POSITIONS = {"CB", "LB", "RB", "WB"}
MIDFIELD_POSITIONS = {"DM", "CM", "AM"}
FORWARD_POSITIONS = {"LW", "RW", "ST", "CF"}
ALL_POSITIONS = ("GK", "CB", "LB", "RB", "WB", "DM", "CM", "AM", "LW", "RW", "ST", "CF")

TECHNICAL_ATTRIBUTES = ("passing", "dribbling", "finishing", "tackling", "heading", "technique")
MENTAL_ATTRIBUTES = ("decisions", "positioning", "off_the_ball", "teamwork", "work_rate", "vision")
PHYSICAL_ATTRIBUTES = ("pace", "strength", "stamina", "acceleration", "agility")
GOALKEEPING_ATTRIBUTES = (
    "handling",
    "reflexes",
    "gk_positioning",
    "aerial_reach",
    "command_of_area",
    "communication",
    "kicking",
    "throwing",
    "rushing_out",
)
DEFAULT_ATTRIBUTE = 100

# Natural position -> positions it can cover at a reduced level.
COMPATIBLE_POSITIONS: dict[str, set[str]] = {
    "CB": {"DM"},
    "LB": {"RB", "WB"},
    "RB": {"LB", "WB"},
    "WB": {"LB", "RB"},
    "CM": {"DM", "AM"},
    "DM": {"CM"},
    "AM": {"CM"},
    "LW": {"RW", "ST", "CF"},
    "RW": {"LW", "ST", "CF"},
    "ST": {"CF"},
    "CF": {"ST"},
}


def _group_mean(attributes: dict[str, int], names: tuple[str, ...]) -> int:
    return sum(attributes.get(name, DEFAULT_ATTRIBUTE) for name in names) // len(names)


@dataclass(slots=True)
class Player:
    name: str
    position: str
    team_id: str | None = None
    player_id: str = field(default_factory=lambda: uuid4().hex)
    second_positions: list[str] = field(default_factory=list)
    # Attribute scale is 0-200.
    attributes: dict[str, int] = field(default_factory=dict)
    age: int = 24
    fatigue: int = 0
    morale: int = 50
    injury_days: int = 0
    contract_months: int = 24
    wage: int = 0
    retired: bool = False

    @property
    def is_gk(self) -> bool:
        return self.position == GOALKEEPER

    @property
    def is_injured(self) -> bool:
        return self.injury_days > 0

    def overall_ability(self) -> int:
        if self.is_gk:
            return _group_mean(self.attributes, GOALKEEPING_ATTRIBUTES)
        technical = _group_mean(self.attributes, TECHNICAL_ATTRIBUTES)
        mental = _group_mean(self.attributes, MENTAL_ATTRIBUTES)
        physical = _group_mean(self.attributes, PHYSICAL_ATTRIBUTES)
        return (technical + mental + physical) // 3

    def position_rating(self, position: str) -> int:
        overall = self.overall_ability()
        if position == self.position:
            return overall
        if position in self.second_positions:
            return overall * 90 // 100
        if not self.is_gk and position in COMPATIBLE_POSITIONS.get(self.position, set()):
            return overall * 75 // 100
        return overall * 50 // 100


@dataclass(slots=True)
class LineupSlot:
    player_id: str
    position: str


@dataclass(slots=True)
class Team:
    team_id: str
    name: str
    league_id: str = ""
    player_ids: list[str] = field(default_factory=list)
    lineup: list[LineupSlot] = field(default_factory=list)
    tactic: TacticalProfile = field(default_factory=TacticalProfile)

    LINEUP_SIZE: ClassVar[int] = 11

    def add_player(self, player_id: str) -> None:
        if player_id not in self.player_ids:
            self.player_ids.append(player_id)

    def remove_player(self, player_id: str) -> None:
        self.player_ids = [pid for pid in self.player_ids if pid != player_id]
        self.lineup = [slot for slot in self.lineup if slot.player_id != player_id]

    def set_lineup(self, slots: list[LineupSlot]) -> bool:
        if len(slots) != self.LINEUP_SIZE:
            return False
        self.lineup = list(slots)
        return True

    def lineup_player_ids(self) -> list[str]:
        return [slot.player_id for slot in self.lineup]

    def set_default_lineup(self, players: list[Player]) -> None:
        """Fill the formation slots with the best available squad player for each."""
        available = [p for p in players if p.player_id in self.player_ids and not p.is_injured]
        slots: list[LineupSlot] = []
        for position in self.tactic.formation_positions():
            if not available:
                break
            best = max(available, key=lambda p: p.position_rating(position))
            available.remove(best)
            slots.append(LineupSlot(player_id=best.player_id, position=position))
        self.lineup = slots


@dataclass(slots=True)
class TeamRecord:
    team_id: str
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0
    league_position: int | None = None
    recent_results: list[str] = field(default_factory=list)

    @property
    def goal_diff(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def form(self) -> str:
        return "".join(self.recent_results[-5:]) or "-"

    def register_result(self, goals_for: int, goals_against: int) -> str:
        self.matches_played += 1
        self.goals_for += goals_for
        self.goals_against += goals_against
        if goals_for > goals_against:
            self.wins += 1
            self.points += POINTS_FOR_WIN
            outcome = "W"
        elif goals_for == goals_against:
            self.draws += 1
            self.points += POINTS_FOR_DRAW
            outcome = "D"
        else:
            self.losses += 1
            outcome = "L"
        self.recent_results.append(outcome)
        if len(self.recent_results) > 10:
            self.recent_results = self.recent_results[-10:]
        return outcome

    def reset(self) -> None:
        self.matches_played = 0
        self.wins = 0
        self.draws = 0
        self.losses = 0
        self.goals_for = 0
        self.goals_against = 0
        self.points = 0
        self.league_position = None
        self.recent_results = []


def standings_sort_key(record: TeamRecord) -> tuple[int, int]:
    return (record.points, record.goal_diff)
