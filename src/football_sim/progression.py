"""Default player collaborators: post-match wear, yearly aging and the random starter injury."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Mapping

from .config import (
    BREAK_FATIGUE_RECOVERY_PER_DAY,
    FATIGUE_PER_FULL_MATCH,
    LOW_ABILITY_RETIREMENT_BONUS,
    LOW_ABILITY_THRESHOLD,
    MATCH_MINUTES,
    MORALE_SWING,
    MORALE_SWING_CHANCE,
    POST_MATCH_INJURY_CHANCE,
    POST_MATCH_INJURY_DAYS,
    RETIREMENT_AGE,
    RETIREMENT_CHANCES,
    STARTER_INJURY_CHANCE,
    STARTER_INJURY_TIERS,
)
from .models import Player

AGED = "aged"
DEVELOPED = "developed"
DECLINED = "declined"
FATIGUE_INCREASED = "fatigue_increased"
FATIGUE_RECOVERED = "fatigue_recovered"
INJURED = "injured"
INJURY_HEALED = "injury_healed"
MORALE_CHANGED = "morale_changed"
RETIRED = "retired"

KEY_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "GK": ("handling", "reflexes", "gk_positioning", "aerial_reach"),
    "CB": ("tackling", "heading", "positioning", "strength"),
    "WB": ("tackling", "heading", "positioning", "strength"),
    "LB": ("tackling", "pace", "stamina", "work_rate"),
    "RB": ("tackling", "pace", "stamina", "work_rate"),
    "DM": ("tackling", "passing", "positioning", "work_rate"),
    "CM": ("passing", "vision", "technique", "stamina"),
    "AM": ("passing", "vision", "dribbling", "technique"),
    "LW": ("pace", "dribbling", "technique", "finishing"),
    "RW": ("pace", "dribbling", "technique", "finishing"),
    "ST": ("finishing", "heading", "pace", "technique"),
    "CF": ("finishing", "heading", "pace", "technique"),
}


@dataclass(frozen=True, slots=True)
class PlayerUpdate:
    player_id: str
    kind: str
    value: int = 0


@dataclass(frozen=True, slots=True)
class InjuryReport:
    player_id: str
    player_name: str
    tier: str
    weeks: int


def _minutes_for(player: Player, minutes: Mapping[str, int] | int) -> int:
    if isinstance(minutes, int):
        return minutes
    return minutes.get(player.player_id, 0)


def apply_post_match(players: list[Player], minutes: Mapping[str, int] | int, rng: random.Random) -> list[PlayerUpdate]:
    """Fatigue, a small injury chance and the odd morale swing for everyone who played."""
    updates: list[PlayerUpdate] = []
    for player in players:
        played = _minutes_for(player, minutes)
        if played <= 0:
            continue

        fatigue_gain = int(played / MATCH_MINUTES * FATIGUE_PER_FULL_MATCH)
        player.fatigue = min(100, player.fatigue + fatigue_gain)
        updates.append(PlayerUpdate(player.player_id, FATIGUE_INCREASED, fatigue_gain))

        if not player.is_injured and rng.random() < played / MATCH_MINUTES * POST_MATCH_INJURY_CHANCE:
            player.injury_days = rng.randint(*POST_MATCH_INJURY_DAYS)
            updates.append(PlayerUpdate(player.player_id, INJURED, player.injury_days))

        if rng.random() < MORALE_SWING_CHANCE:
            swing = MORALE_SWING if rng.random() < 0.5 else -MORALE_SWING
            player.morale = max(0, min(100, player.morale + swing))
            updates.append(PlayerUpdate(player.player_id, MORALE_CHANGED, swing))
    return updates


def recover_during_break(players: list[Player], days: int) -> list[PlayerUpdate]:
    updates: list[PlayerUpdate] = []
    if days <= 0:
        return updates
    for player in players:
        if player.fatigue > 0:
            recovered = min(player.fatigue, min(days, 7) * BREAK_FATIGUE_RECOVERY_PER_DAY)
            player.fatigue -= recovered
            updates.append(PlayerUpdate(player.player_id, FATIGUE_RECOVERED, recovered))
        if player.injury_days > 0:
            healed = min(player.injury_days, days)
            player.injury_days -= healed
            updates.append(PlayerUpdate(player.player_id, INJURY_HEALED, healed))
    return updates


def _age_development(player: Player, rng: random.Random) -> int:
    if player.age <= 20:
        return rng.randint(1, 3) if rng.random() < 0.3 else 0
    if player.age <= 28:
        return -1 if rng.random() < 0.1 else 0
    if player.age <= 32:
        return rng.randint(-3, -1) if rng.random() < 0.3 else 0
    if player.age <= 36:
        return rng.randint(-5, -2)
    return rng.randint(-7, -3)


def _apply_development(player: Player, development: int) -> None:
    names = KEY_ATTRIBUTES.get(player.position, ())
    if not names or development == 0:
        return
    step = round(development / len(names))
    for name in names:
        current = player.attributes.get(name, 100)
        player.attributes[name] = max(0, min(200, current + step))


def should_retire(player: Player, rng: random.Random) -> bool:
    if player.age < RETIREMENT_AGE:
        return False
    chance = RETIREMENT_CHANCES[-1][1]
    for max_age, bound_chance in RETIREMENT_CHANCES:
        if player.age <= max_age:
            chance = bound_chance
            break
    if player.overall_ability() < LOW_ABILITY_THRESHOLD:
        chance += LOW_ABILITY_RETIREMENT_BONUS
    return rng.random() < chance


def age_all(players: list[Player], rng: random.Random) -> list[PlayerUpdate]:
    """Age every active player by a year; development, decline and retirement follow from age."""
    updates: list[PlayerUpdate] = []
    for player in players:
        if player.retired:
            continue
        player.age += 1
        updates.append(PlayerUpdate(player.player_id, AGED, player.age))

        development = _age_development(player, rng)
        _apply_development(player, development)
        if development > 0:
            updates.append(PlayerUpdate(player.player_id, DEVELOPED, development))
        elif development < 0:
            updates.append(PlayerUpdate(player.player_id, DECLINED, -development))

        if should_retire(player, rng):
            player.retired = True
            updates.append(PlayerUpdate(player.player_id, RETIRED))
    return updates


def maybe_injure(player: Player, rng: random.Random) -> InjuryReport | None:
    if player.is_injured or rng.random() >= STARTER_INJURY_CHANCE:
        return None
    roll = rng.randrange(100)
    for tier, bound, weeks_range in STARTER_INJURY_TIERS:
        if roll < bound:
            weeks = rng.randint(*weeks_range)
            player.injury_days = weeks * 7
            return InjuryReport(player.player_id, player.name, tier, weeks)
    return None


@dataclass(slots=True)
class Progression:
    """The player collaborators the season flow calls; swap any of them out in tests."""

    post_match: Callable[[list[Player], Mapping[str, int] | int, random.Random], list[PlayerUpdate]] = apply_post_match
    aging: Callable[[list[Player], random.Random], list[PlayerUpdate]] = age_all
    injury: Callable[[Player, random.Random], InjuryReport | None] = maybe_injure
