from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

FORMATIONS: dict[str, tuple[str, ...]] = {
    "4-4-2": ("GK", "LB", "CB", "CB", "RB", "LW", "CM", "CM", "RW", "ST", "ST"),
    "4-3-3": ("GK", "LB", "CB", "CB", "RB", "CM", "CM", "CM", "LW", "ST", "RW"),
    "4-2-3-1": ("GK", "LB", "CB", "CB", "RB", "DM", "DM", "LW", "AM", "RW", "ST"),
    "4-1-4-1": ("GK", "LB", "CB", "CB", "RB", "DM", "LW", "CM", "CM", "RW", "ST"),
    "4-5-1": ("GK", "LB", "CB", "CB", "RB", "DM", "CM", "CM", "LW", "RW", "ST"),
    "3-5-2": ("GK", "CB", "CB", "CB", "WB", "DM", "CM", "DM", "WB", "ST", "ST"),
    "3-4-2-1": ("GK", "CB", "CB", "CB", "LW", "CM", "CM", "RW", "AM", "AM", "ST"),
    "5-3-2": ("GK", "WB", "CB", "CB", "CB", "WB", "DM", "CM", "DM", "ST", "ST"),
    "5-2-2-1": ("GK", "WB", "CB", "CB", "CB", "WB", "DM", "DM", "AM", "AM", "ST"),
}

DEFENSIVE_LINES = ("low", "medium", "high")
PASSING_STYLES = ("short", "mixed", "long")
TEMPOS = ("slow", "medium", "fast")

HIGH_PRESS_MENTALITY = 70
COUNTER_ADVANTAGE = 0.25


class StyleLabel(str, Enum):
    POSSESSION = "possession"
    COUNTER_ATTACK = "counter-attack"
    HIGH_PRESS = "high-press"
    DIRECT_PLAY = "direct-play"
    BALANCED = "balanced"


# (winner, loser): the first style gets the upper hand against the second.
COUNTER_RELATIONS: frozenset[tuple[StyleLabel, StyleLabel]] = frozenset(
    {
        (StyleLabel.HIGH_PRESS, StyleLabel.POSSESSION),
        (StyleLabel.POSSESSION, StyleLabel.COUNTER_ATTACK),
        (StyleLabel.COUNTER_ATTACK, StyleLabel.HIGH_PRESS),
        (StyleLabel.DIRECT_PLAY, StyleLabel.HIGH_PRESS),
        (StyleLabel.POSSESSION, StyleLabel.DIRECT_PLAY),
    }
)


@dataclass(slots=True)
class TacticalProfile:
    formation: str = "4-4-2"
    attacking_mentality: int = 50
    defensive_line: str = "medium"
    passing_style: str = "mixed"
    tempo: str = "medium"

    def __post_init__(self) -> None:
        if self.formation not in FORMATIONS:
            raise ValueError(f"Unknown formation {self.formation!r}.")
        if not 0 <= self.attacking_mentality <= 100:
            raise ValueError("attacking_mentality must be within 0-100.")
        if self.defensive_line not in DEFENSIVE_LINES:
            raise ValueError(f"Unknown defensive line {self.defensive_line!r}.")
        if self.passing_style not in PASSING_STYLES:
            raise ValueError(f"Unknown passing style {self.passing_style!r}.")
        if self.tempo not in TEMPOS:
            raise ValueError(f"Unknown tempo {self.tempo!r}.")

    def formation_positions(self) -> tuple[str, ...]:
        return FORMATIONS[self.formation]

    def intensity(self) -> int:
        press = {"high": 30, "medium": 20, "low": 10}[self.defensive_line]
        tempo = {"fast": 30, "medium": 20, "slow": 10}[self.tempo]
        return min(100, press + tempo + self.attacking_mentality // 3)

    def describe(self) -> str:
        return {
            StyleLabel.HIGH_PRESS: "High press",
            StyleLabel.COUNTER_ATTACK: "Counter attack",
            StyleLabel.POSSESSION: "Possession",
            StyleLabel.DIRECT_PLAY: "Direct play",
            StyleLabel.BALANCED: "Balanced",
        }[classify(self)]


def classify(profile: TacticalProfile) -> StyleLabel:
    """Derive the playing style; the first matching rule wins."""
    if profile.defensive_line == "high" and profile.attacking_mentality > HIGH_PRESS_MENTALITY:
        return StyleLabel.HIGH_PRESS
    if profile.defensive_line == "low" and profile.tempo == "fast":
        return StyleLabel.COUNTER_ATTACK
    if profile.passing_style == "short" and profile.tempo in {"slow", "medium"}:
        return StyleLabel.POSSESSION
    if profile.passing_style == "long":
        return StyleLabel.DIRECT_PLAY
    return StyleLabel.BALANCED


def counter(home: StyleLabel, away: StyleLabel) -> float:
    """Home-side style advantage in [-0.25, +0.25]; zero when neither style counters the other."""
    if (home, away) in COUNTER_RELATIONS:
        return COUNTER_ADVANTAGE
    if (away, home) in COUNTER_RELATIONS:
        return -COUNTER_ADVANTAGE
    return 0.0


def matchup_modifier(home: TacticalProfile, away: TacticalProfile) -> float:
    return counter(classify(home), classify(away))
