from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from .clock import SeasonClock
from .config import CONTRACT_WARNING_MONTHS, DAYS_BETWEEN_ROUNDS, MATCH_MINUTES, SEASON_START_MONTH
from .engine import MATCH_MODES, MatchResult, MatchSimulator
from .errors import FixtureNotFound, InvalidState, NoMatchScheduled, PlayerNotFound, StorageError, TeamNotFound
from .models import Player, Team, TeamRecord, standings_sort_key
from .notifications import Category, NotificationSink, Priority, contract_priority
from .progression import INJURED, RETIRED, Progression, recover_during_break
from .schedule import FixtureSlot, League, assign_match_dates
from .storage import Storage
from .tactics import matchup_modifier

_log = logging.getLogger("football_sim.flow")


class FlowState(str, Enum):
    AWAITING_MATCH = "awaiting_match"
    MODE_SELECTED = "mode_selected"
    MATCH_RESOLVED = "match_resolved"
    ROUND_ADVANCED = "round_advanced"
    SEASON_ENDED = "season_ended"


class FlowEvent(str, Enum):
    FIXTURE_FOUND = "fixture_found"
    MODE_CHOSEN = "mode_chosen"
    RESULT_RECORDED = "result_recorded"
    ROUND_CLOSED = "round_closed"
    SEASON_CLOSED = "season_closed"
    CONTINUE = "continue"


_TRANSITIONS: dict[tuple[FlowState, FlowEvent], FlowState] = {
    (FlowState.AWAITING_MATCH, FlowEvent.FIXTURE_FOUND): FlowState.MODE_SELECTED,
    (FlowState.AWAITING_MATCH, FlowEvent.ROUND_CLOSED): FlowState.ROUND_ADVANCED,
    (FlowState.AWAITING_MATCH, FlowEvent.SEASON_CLOSED): FlowState.SEASON_ENDED,
    (FlowState.MODE_SELECTED, FlowEvent.FIXTURE_FOUND): FlowState.MODE_SELECTED,
    (FlowState.MODE_SELECTED, FlowEvent.MODE_CHOSEN): FlowState.MODE_SELECTED,
    (FlowState.MODE_SELECTED, FlowEvent.RESULT_RECORDED): FlowState.MATCH_RESOLVED,
    (FlowState.MATCH_RESOLVED, FlowEvent.ROUND_CLOSED): FlowState.ROUND_ADVANCED,
    (FlowState.MATCH_RESOLVED, FlowEvent.SEASON_CLOSED): FlowState.SEASON_ENDED,
    (FlowState.MATCH_RESOLVED, FlowEvent.CONTINUE): FlowState.AWAITING_MATCH,
    (FlowState.ROUND_ADVANCED, FlowEvent.ROUND_CLOSED): FlowState.ROUND_ADVANCED,
    (FlowState.ROUND_ADVANCED, FlowEvent.SEASON_CLOSED): FlowState.SEASON_ENDED,
    (FlowState.ROUND_ADVANCED, FlowEvent.CONTINUE): FlowState.AWAITING_MATCH,
    (FlowState.SEASON_ENDED, FlowEvent.ROUND_CLOSED): FlowState.ROUND_ADVANCED,
    (FlowState.SEASON_ENDED, FlowEvent.SEASON_CLOSED): FlowState.SEASON_ENDED,
    (FlowState.SEASON_ENDED, FlowEvent.CONTINUE): FlowState.AWAITING_MATCH,
}


def transition(state: FlowState, event: FlowEvent) -> FlowState:
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidState(f"Cannot handle {event.value} while {state.value}.") from None


class RolloverOrder(str, Enum):
    KEEP = "keep"
    SHUFFLE = "shuffle"
    STANDINGS = "standings"


@dataclass(frozen=True, slots=True)
class Effect:
    title: str
    message: str
    category: Category
    priority: Priority


@dataclass(slots=True)
class MatchInfo:
    fixture_id: str
    home_team_id: str
    away_team_id: str
    home_team_name: str
    away_team_name: str
    is_home: bool
    round_number: int
    match_date: str
    effects: list[Effect] = field(default_factory=list)


@dataclass(slots=True)
class MatchUpdate:
    is_season_end: bool
    is_last_of_round: bool
    league_position: int | None
    state: FlowState
    result: MatchResult | None = None
    effects: list[Effect] = field(default_factory=list)


def _outcome_text(goals_for: int, goals_against: int) -> str:
    if goals_for > goals_against:
        return f"Won {goals_for}-{goals_against}"
    if goals_for == goals_against:
        return f"Drew {goals_for}-{goals_against}"
    return f"Lost {goals_for}-{goals_against}"


def rank_standings(records: list[TeamRecord]) -> list[TeamRecord]:
    """Order by points then goal difference, both descending, and stamp 1-based positions."""
    ordered = sorted(records, key=standings_sort_key, reverse=True)
    for position, record in enumerate(ordered, start=1):
        record.league_position = position
    return ordered


def setup_league(league: League, storage: Storage, clock: SeasonClock) -> None:
    """Generate and persist a fresh schedule and zeroed standings for every team."""
    league.new_season()
    assign_match_dates(league.schedule, clock.as_date() + timedelta(days=DAYS_BETWEEN_ROUNDS))
    storage.fixtures.delete_by_league(league.league_id)
    for fixture in league.fixtures():
        storage.fixtures.create(league.league_id, fixture)
    for team_id in league.teams:
        storage.standings.create_default(team_id, league.league_id)
    _log.info("League %s set up with %d teams over %d rounds", league.league_id, len(league.teams), league.total_rounds)


class SeasonFlowController:
    """Drives a season for one human-managed team: match days, standings, rounds and rollover."""

    def __init__(
        self,
        league: League,
        storage: Storage,
        player_team_id: str,
        clock: SeasonClock,
        notifications: NotificationSink,
        rng: random.Random | None = None,
        progression: Progression | None = None,
        rollover_order: RolloverOrder = RolloverOrder.KEEP,
        simulator: MatchSimulator | None = None,
    ) -> None:
        if player_team_id not in league.teams:
            raise TeamNotFound(player_team_id)
        self.league = league
        self.storage = storage
        self.player_team_id = player_team_id
        self.clock = clock
        self.rollover_order = rollover_order
        self.state = FlowState.AWAITING_MATCH
        self.mode = "quick"
        self.pending_fixture_id: str | None = None
        self.seasons_completed = 0
        self._sink = notifications
        self._rng = rng if rng is not None else random.Random()
        self._progression = progression if progression is not None else Progression()
        self._simulator = simulator if simulator is not None else MatchSimulator(self._rng)

    # ---- queries ----

    def is_last_match_of_round(self, fixture_id: str) -> bool:
        fixture = self.league.find_fixture(fixture_id)
        if fixture is None:
            return False
        rnd = self.league.round_fixtures(fixture.round_number)
        return rnd is not None and rnd.is_complete()

    def is_season_complete(self) -> bool:
        return self.league.is_complete()

    def league_position(self, team_id: str) -> int | None:
        if team_id not in self.league.teams:
            raise TeamNotFound(team_id)
        return self.storage.standings.get_by_team(team_id).league_position

    def standings(self) -> list[TeamRecord]:
        records = self.storage.standings.get_league_standings(self.league.league_id)
        return sorted(records, key=lambda r: (r.league_position is None, r.league_position or 0, -r.points))

    def next_fixture(self) -> FixtureSlot | None:
        for fixture in self.league.fixtures():
            if not fixture.played and fixture.involves(self.player_team_id):
                return fixture
        return None

    # ---- operations ----

    def advance_to_next_match(self) -> MatchInfo:
        if self.state in (FlowState.MATCH_RESOLVED, FlowState.ROUND_ADVANCED, FlowState.SEASON_ENDED):
            self.state = transition(self.state, FlowEvent.CONTINUE)
        fixture = self.next_fixture()
        if fixture is None:
            _log.warning("No fixture left for %s in %s", self.player_team_id, self.league.league_id)
            raise NoMatchScheduled(self.player_team_id)
        home = self._team(fixture.home_team_id)
        away = self._team(fixture.away_team_id)
        self.state = transition(self.state, FlowEvent.FIXTURE_FOUND)

        effects: list[Effect] = []
        if fixture.match_date is not None:
            while self.clock.as_date() < fixture.match_date:
                self._tick_day(effects)
        self.pending_fixture_id = fixture.fixture_id
        self._flush(effects)

        return MatchInfo(
            fixture_id=fixture.fixture_id,
            home_team_id=home.team_id,
            away_team_id=away.team_id,
            home_team_name=home.name,
            away_team_name=away.name,
            is_home=home.team_id == self.player_team_id,
            round_number=fixture.round_number,
            match_date=self.clock.format(),
            effects=effects,
        )

    def select_mode(self, mode: str) -> None:
        if mode not in MATCH_MODES:
            raise ValueError(f"Unknown match mode {mode!r}.")
        self.state = transition(self.state, FlowEvent.MODE_CHOSEN)
        self.mode = mode

    def play_match(self, fixture_id: str | None = None, mode: str | None = None) -> MatchUpdate:
        """Simulate the pending fixture, clearing any earlier unplayed fixtures of the round first."""
        if self.state is not FlowState.MODE_SELECTED:
            raise InvalidState(f"No match pending while {self.state.value}.")
        if mode is not None:
            self.select_mode(mode)
        fixture_id = fixture_id or self.pending_fixture_id
        fixture = self.league.find_fixture(fixture_id) if fixture_id else None
        if fixture is None:
            raise FixtureNotFound(fixture_id or "")
        if fixture.fixture_id != self.pending_fixture_id:
            raise InvalidState(f"Fixture {fixture.fixture_id} is not the pending match.")

        background_effects: list[Effect] = []
        for other in self.league.fixtures():
            if other.played or other.fixture_id == fixture.fixture_id:
                continue
            if other.round_number > fixture.round_number:
                break
            self._resolve(self._simulate(other, "quick"), background_effects)
        self._flush(background_effects)

        result = self._simulate(fixture, self.mode)
        update = self.resolve_match(result)
        update.effects[:0] = background_effects
        return update

    def simulate_remaining(self) -> MatchUpdate | None:
        """Play out the rest of the season once the managed team has no fixtures left.

        Odd-sized leagues can leave the managed team idle in the final round; this
        finishes those fixtures so the season closes and rolls over.
        """
        if self.next_fixture() is not None:
            raise InvalidState(f"{self.player_team_id} still has fixtures to play.")
        update: MatchUpdate | None = None
        for fixture in self.league.fixtures():
            if fixture.played:
                continue
            update = self.resolve_match(self._simulate(fixture, "quick"))
            if update.is_season_end:
                break
        return update

    def resolve_match(self, result: MatchResult) -> MatchUpdate:
        fixture = self._fixture_for(result)
        player_match = fixture.involves(self.player_team_id)
        if self.state is FlowState.MODE_SELECTED:
            if fixture.fixture_id != self.pending_fixture_id:
                raise InvalidState(f"Fixture {self.pending_fixture_id} is pending; cannot record {fixture.fixture_id}.")
        elif player_match:
            raise InvalidState("Advance to the match before recording its result.")

        effects: list[Effect] = []
        is_last, is_season_end, position = self._resolve(result, effects)

        if player_match:
            self.state = transition(self.state, FlowEvent.RESULT_RECORDED)
            self.pending_fixture_id = None
        if is_season_end:
            self.state = transition(self.state, FlowEvent.SEASON_CLOSED)
        elif is_last:
            self.state = transition(self.state, FlowEvent.ROUND_CLOSED)

        self._flush(effects)
        return MatchUpdate(
            is_season_end=is_season_end,
            is_last_of_round=is_last,
            league_position=position,
            state=self.state,
            result=result,
            effects=effects,
        )

    # ---- internals ----

    def _team(self, team_id: str) -> Team:
        if team_id not in self.league.teams:
            raise TeamNotFound(team_id)
        try:
            return self.storage.teams.get(team_id)
        except StorageError as exc:
            raise TeamNotFound(team_id) from exc

    def _fixture_for(self, result: MatchResult) -> FixtureSlot:
        for team_id in (result.home_team_id, result.away_team_id):
            if team_id not in self.league.teams:
                raise TeamNotFound(team_id)
        if result.fixture_id is not None:
            fixture = self.league.find_fixture(result.fixture_id)
            if fixture is None:
                raise FixtureNotFound(result.fixture_id)
            if (fixture.home_team_id, fixture.away_team_id) != (result.home_team_id, result.away_team_id):
                raise InvalidState(f"Result teams do not match fixture {fixture.fixture_id}.")
        else:
            fixture = next(
                (
                    f
                    for f in self.league.fixtures()
                    if not f.played and (f.home_team_id, f.away_team_id) == (result.home_team_id, result.away_team_id)
                ),
                None,
            )
            if fixture is None:
                raise FixtureNotFound(f"{result.home_team_id}-{result.away_team_id}")
        if fixture.played:
            raise InvalidState(f"Fixture {fixture.fixture_id} has already been played.")
        if result.home_score < 0 or result.away_score < 0:
            raise InvalidState("Scores cannot be negative.")
        return fixture

    def _lineup_players(self, team: Team) -> list[Player]:
        squad = self.storage.players.get_by_team(team.team_id)
        lookup = {p.player_id: p for p in squad}
        lineup_ids = team.lineup_player_ids()
        if len(lineup_ids) < Team.LINEUP_SIZE or any(pid not in lookup or lookup[pid].is_injured for pid in lineup_ids):
            team.set_default_lineup(squad)
            lineup_ids = team.lineup_player_ids()
        return [lookup[pid] for pid in lineup_ids if pid in lookup]

    def _simulate(self, fixture: FixtureSlot, mode: str) -> MatchResult:
        home = self._team(fixture.home_team_id)
        away = self._team(fixture.away_team_id)
        home_players = self._lineup_players(home)
        away_players = self._lineup_players(away)
        result = self._simulator.simulate(
            home,
            away,
            home_players,
            away_players,
            mode=mode,
            tactical_modifier=matchup_modifier(home.tactic, away.tactic),
            round_number=fixture.round_number,
            fixture_id=fixture.fixture_id,
        )
        result.league_id = self.league.league_id
        self.storage.matches.save(result)
        return result

    def _resolve(self, result: MatchResult, effects: list[Effect]) -> tuple[bool, bool, int | None]:
        """Commit one result; returns (last of its round, season complete, player team position).

        Every lookup happens before the first write so a missing team or player
        leaves the fixture and standings untouched.
        """
        fixture = self._fixture_for(result)
        home = self._team(result.home_team_id)
        away = self._team(result.away_team_id)
        home_record = self.storage.standings.get_by_team(result.home_team_id)
        away_record = self.storage.standings.get_by_team(result.away_team_id)
        starters = self._starters(home)
        result.fixture_id = fixture.fixture_id
        if not result.round_number:
            result.round_number = fixture.round_number

        fixture.played = True
        self.storage.fixtures.mark_played(fixture.fixture_id)
        home_record.register_result(result.home_score, result.away_score)
        away_record.register_result(result.away_score, result.home_score)
        self.storage.standings.update(home_record)
        self.storage.standings.update(away_record)
        self._recompute_positions()
        position = self.league_position(self.player_team_id)

        if fixture.involves(self.player_team_id):
            is_home = home.team_id == self.player_team_id
            opponent = away if is_home else home
            goals_for = result.home_score if is_home else result.away_score
            goals_against = result.away_score if is_home else result.home_score
            venue = "vs" if is_home else "at"
            effects.append(
                Effect(
                    "Match Result",
                    f"{venue} {opponent.name}: {_outcome_text(goals_for, goals_against)}",
                    Category.MATCH,
                    Priority.NORMAL,
                )
            )

        self._post_match_progression(result, (home, away), effects)
        self._starter_injuries(home, starters, effects)
        _log.debug("Recorded %s %d-%d %s", home.team_id, result.home_score, result.away_score, away.team_id)

        is_last = self.is_last_match_of_round(fixture.fixture_id)
        is_season_end = self.is_season_complete()
        if is_season_end:
            self._end_season(effects)
        elif is_last:
            self._advance_round(effects)
        return is_last, is_season_end, position

    def _recompute_positions(self) -> None:
        records = self.storage.standings.get_league_standings(self.league.league_id)
        for record in rank_standings(records):
            self.storage.standings.update(record)

    def _starters(self, team: Team) -> list[Player]:
        squad = {p.player_id: p for p in self.storage.players.get_by_team(team.team_id)}
        starters = []
        for player_id in team.lineup_player_ids():
            if player_id not in squad:
                raise PlayerNotFound(player_id)
            starters.append(squad[player_id])
        return starters

    def _post_match_progression(self, result: MatchResult, teams: tuple[Team, Team], effects: list[Effect]) -> None:
        minutes = {
            rating.player_id: rating.minutes_played
            for rating in (*result.statistics.home_player_ratings, *result.statistics.away_player_ratings)
        }
        if not minutes:
            # Externally simulated results may carry no ratings; assume the lineups played it out.
            for team in teams:
                minutes.update(dict.fromkeys(team.lineup_player_ids(), MATCH_MINUTES))
        for team in teams:
            squad = self.storage.players.get_by_team(team.team_id)
            updates = self._progression.post_match(squad, minutes, self._rng)
            by_id = {p.player_id: p for p in squad}
            for player in squad:
                self.storage.players.update(player)
            if team.team_id != self.player_team_id:
                continue
            for update in updates:
                if update.kind == INJURED:
                    name = by_id[update.player_id].name
                    effects.append(
                        Effect(
                            f"Injury: {name}",
                            f"{name} picked up a knock and is out for {update.value} days.",
                            Category.INJURY,
                            Priority.HIGH,
                        )
                    )

    def _starter_injuries(self, team: Team, starters: list[Player], effects: list[Effect]) -> None:
        for player in starters:
            report = self._progression.injury(player, self._rng)
            if report is None:
                continue
            self.storage.players.update(player)
            if team.team_id != self.player_team_id:
                continue
            effects.append(
                Effect(
                    f"Injury: {report.player_name}",
                    f"{report.player_name} suffered a {report.tier} injury and is expected out for {report.weeks} weeks.",
                    Category.INJURY,
                    Priority.HIGH,
                )
            )

    def _tick_day(self, effects: list[Effect]) -> None:
        self.clock.advance_day()
        if self.clock.day == 1:
            self._check_contracts(effects)

    def _check_contracts(self, effects: list[Effect]) -> None:
        for player in self.storage.players.get_by_team(self.player_team_id):
            player.contract_months = max(0, player.contract_months - 1)
            self.storage.players.update(player)
            if player.contract_months > CONTRACT_WARNING_MONTHS:
                continue
            if player.contract_months == 0:
                message = f"{player.name}'s contract has expired! Age: {player.age}, Ability: {player.overall_ability()}"
            else:
                message = (
                    f"{player.name}'s contract expires in {player.contract_months} month. "
                    f"Age: {player.age}, Ability: {player.overall_ability()}, Wage: {player.wage}"
                )
            effects.append(Effect("Contract Expiring", message, Category.CONTRACT, contract_priority(player.contract_months)))

    def _advance_round(self, effects: list[Effect]) -> None:
        # Never walk past the next unplayed match day; a late-closing bye round must not delay it.
        start = self.clock.as_date()
        target = start + timedelta(days=DAYS_BETWEEN_ROUNDS)
        upcoming = [f.match_date for f in self.league.fixtures() if not f.played and f.match_date is not None]
        if upcoming:
            target = min(target, max(start, min(upcoming)))
        while self.clock.as_date() < target:
            self._tick_day(effects)
        rest_days = (self.clock.as_date() - start).days
        for team_id in self.league.teams:
            squad = self.storage.players.get_by_team(team_id)
            recover_during_break(squad, rest_days)
            for player in squad:
                self.storage.players.update(player)
        self.league.advance_round()
        _log.info("League %s moved to round %d of %d", self.league.league_id, self.league.current_round + 1, self.league.total_rounds)
        effects.append(
            Effect(
                "Next Round",
                f"Round {self.league.current_round + 1} - {self.clock.format(with_weekday=True)}",
                Category.NEWS,
                Priority.LOW,
            )
        )

    def _next_team_order(self, final_standings: list[TeamRecord]) -> list[str]:
        if self.rollover_order is RolloverOrder.SHUFFLE:
            order = list(self.league.teams)
            self._rng.shuffle(order)
            return order
        if self.rollover_order is RolloverOrder.STANDINGS:
            return [r.team_id for r in final_standings]
        return list(self.league.teams)

    def _end_season(self, effects: list[Effect]) -> None:
        season = self.clock.season_label()
        final_standings = rank_standings(self.storage.standings.get_league_standings(self.league.league_id))
        position = self.league_position(self.player_team_id) or 0
        effects.append(
            Effect(
                "Season End",
                f"Season {season} completed! Final position: {position}",
                Category.ACHIEVEMENT,
                Priority.HIGH,
            )
        )

        for team_id in self.league.teams:
            team = self._team(team_id)
            squad = self.storage.players.get_by_team(team_id)
            updates = self._progression.aging(squad, self._rng)
            retired = {u.player_id for u in updates if u.kind == RETIRED}
            for player in squad:
                if player.player_id in retired:
                    team.remove_player(player.player_id)
                    player.team_id = None
                    if team_id == self.player_team_id:
                        effects.append(
                            Effect(
                                f"Retirement: {player.name}",
                                f"{player.name} has retired at the age of {player.age}.",
                                Category.NEWS,
                                Priority.NORMAL,
                            )
                        )
                self.storage.players.update(player)
            team.set_default_lineup(self.storage.players.get_by_team(team_id))

        self.storage.fixtures.delete_by_league(self.league.league_id)
        self.league.new_season(self._next_team_order(final_standings))
        next_year = self.clock.year + 1 if self.clock.month >= SEASON_START_MONTH else self.clock.year
        self.clock.set_date(SeasonClock.season_start(next_year).as_date())
        assign_match_dates(self.league.schedule, self.clock.as_date() + timedelta(days=DAYS_BETWEEN_ROUNDS))
        for fixture in self.league.fixtures():
            self.storage.fixtures.create(self.league.league_id, fixture)
        for team_id in self.league.teams:
            self.storage.standings.create_default(team_id, self.league.league_id)

        self.seasons_completed += 1
        _log.info("Season %s of %s finished; %s placed %d", season, self.league.league_id, self.player_team_id, position)

    def _flush(self, effects: list[Effect]) -> None:
        for effect in effects:
            self._sink.append(effect.title, effect.message, effect.category, effect.priority)
