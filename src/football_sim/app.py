from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable

from .clock import SeasonClock
from .config import DEMO_LEAGUE_ID, DEMO_LEAGUE_NAME, DEMO_START_YEAR, DEMO_TEAMS
from .flow import RolloverOrder, SeasonFlowController, setup_league
from .models import (
    GOALKEEPING_ATTRIBUTES,
    MENTAL_ATTRIBUTES,
    PHYSICAL_ATTRIBUTES,
    TECHNICAL_ATTRIBUTES,
    Player,
    Team,
)
from .names import NameGenerator
from .notifications import Inbox
from .schedule import League
from .storage import InMemoryStorage
from .tactics import DEFENSIVE_LINES, FORMATIONS, PASSING_STYLES, TEMPOS, TacticalProfile

# Natural position and the extra positions the player is comfortable in.
SQUAD_TEMPLATE: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("GK", ()),
    ("GK", ()),
    ("CB", ()),
    ("CB", ()),
    ("CB", ("DM",)),
    ("LB", ("WB",)),
    ("RB", ("WB",)),
    ("WB", ("LB", "RB")),
    ("DM", ("CM",)),
    ("DM", ()),
    ("CM", ("DM",)),
    ("CM", ("AM",)),
    ("CM", ()),
    ("AM", ("CM",)),
    ("LW", ("AM",)),
    ("RW", ("AM",)),
    ("ST", ("CF",)),
    ("ST", ()),
    ("CF", ("ST",)),
)


def _clamp_attribute(value: float) -> int:
    return int(max(1, min(200, round(value))))


def _make_player(
    team_id: str,
    slot: int,
    position: str,
    second_positions: tuple[str, ...],
    quality: float,
    rng: random.Random,
    name_gen: NameGenerator,
) -> Player:
    # Quality 0..1 maps roughly onto a 60-170 attribute band.
    base = 60 + quality * 110
    attributes: dict[str, int] = {}
    outfield_groups = TECHNICAL_ATTRIBUTES + MENTAL_ATTRIBUTES + PHYSICAL_ATTRIBUTES
    if position == "GK":
        for name in GOALKEEPING_ATTRIBUTES:
            attributes[name] = _clamp_attribute(base + rng.uniform(-15, 15))
        for name in outfield_groups:
            attributes[name] = _clamp_attribute(base * 0.6 + rng.uniform(-10, 10))
    else:
        for name in outfield_groups:
            attributes[name] = _clamp_attribute(base + rng.uniform(-20, 20))
    return Player(
        player_id=f"{team_id}-{slot:02d}",
        name=name_gen.next_name(),
        position=position,
        team_id=team_id,
        second_positions=list(second_positions),
        attributes=attributes,
        age=rng.randint(18, 35),
        morale=rng.randint(40, 70),
        contract_months=rng.randint(1, 48),
        wage=int(2_000 + quality * 40_000 + rng.randint(0, 5_000)),
    )


def _make_tactic(rng: random.Random) -> TacticalProfile:
    return TacticalProfile(
        formation=rng.choice(sorted(FORMATIONS)),
        attacking_mentality=rng.randint(25, 85),
        defensive_line=rng.choice(DEFENSIVE_LINES),
        passing_style=rng.choice(PASSING_STYLES),
        tempo=rng.choice(TEMPOS),
    )


def build_default_teams(
    entries: Iterable[tuple[str, str, float]] = DEMO_TEAMS,
    league_id: str = DEMO_LEAGUE_ID,
) -> tuple[list[Team], list[Player]]:
    """Deterministic demo squads: the same entries always produce the same players."""
    name_gen = NameGenerator(seed=11)
    teams: list[Team] = []
    players: list[Player] = []
    for team_id, team_name, quality in entries:
        rng = random.Random(f"{team_id}:{quality:.3f}")
        team = Team(team_id=team_id, name=team_name, league_id=league_id, tactic=_make_tactic(rng))
        squad = [
            _make_player(team_id, slot, position, extra, quality, rng, name_gen)
            for slot, (position, extra) in enumerate(SQUAD_TEMPLATE)
        ]
        for player in squad:
            team.add_player(player.player_id)
        team.set_default_lineup(squad)
        teams.append(team)
        players.extend(squad)
    return teams, players


@dataclass(slots=True)
class Session:
    controller: SeasonFlowController
    inbox: Inbox
    storage: InMemoryStorage
    teams: dict[str, Team]


def build_demo_session(
    player_team_id: str | None = None,
    seed: int | None = None,
    entries: Iterable[tuple[str, str, float]] = DEMO_TEAMS,
    start_year: int = DEMO_START_YEAR,
    rollover_order: RolloverOrder = RolloverOrder.KEEP,
) -> Session:
    teams, players = build_default_teams(entries)
    storage = InMemoryStorage()
    storage.seed(teams, players)
    league = League(league_id=DEMO_LEAGUE_ID, name=DEMO_LEAGUE_NAME, teams=[t.team_id for t in teams])
    clock = SeasonClock.season_start(start_year)
    setup_league(league, storage, clock)
    inbox = Inbox()
    controller = SeasonFlowController(
        league=league,
        storage=storage,
        player_team_id=player_team_id or teams[0].team_id,
        clock=clock,
        notifications=inbox,
        rng=random.Random(seed) if seed is not None else None,
        rollover_order=rollover_order,
    )
    return Session(controller=controller, inbox=inbox, storage=storage, teams={t.team_id: t for t in teams})


def format_standings(controller: SeasonFlowController, team_names: dict[str, str] | None = None) -> str:
    names = team_names or {}
    lines = ["Pos Team                 P  W  D  L  GF  GA  GD Pts Form"]
    for idx, rec in enumerate(controller.standings(), start=1):
        pos = rec.league_position or idx
        lines.append(
            f"{pos:>3} {names.get(rec.team_id, rec.team_id):<19} {rec.matches_played:>2} {rec.wins:>2} {rec.draws:>2}"
            f" {rec.losses:>2} {rec.goals_for:>3} {rec.goals_against:>3} {rec.goal_diff:>3} {rec.points:>3} {rec.form}"
        )
    return "\n".join(lines)


def format_fixtures(league: League, round_number: int, team_names: dict[str, str] | None = None) -> str:
    names = team_names or {}
    rnd = league.round_fixtures(round_number)
    if rnd is None:
        return f"Round {round_number}: no fixtures"
    lines = [f"Round {round_number}"]
    for fixture in rnd.fixtures:
        home = names.get(fixture.home_team_id, fixture.home_team_id)
        away = names.get(fixture.away_team_id, fixture.away_team_id)
        status = "played" if fixture.played else (fixture.match_date.isoformat() if fixture.match_date else "tbd")
        lines.append(f"  {home:<19} v {away:<19} {status}")
    return "\n".join(lines)
