from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .app import Session, build_demo_session
from .engine import MATCH_MODES, GoalEvent, MatchResult, YellowCardEvent
from .errors import (
    FixtureNotFound,
    InvalidState,
    NoMatchScheduled,
    PlayerNotFound,
    SimulationError,
    StorageError,
    TeamNotFound,
)
from .flow import MatchInfo, MatchUpdate
from .models import TeamRecord
from .tactics import classify

_log = logging.getLogger("football_sim.api")


class TeamSelection(BaseModel):
    team_id: str


class PlaySelection(BaseModel):
    mode: str = "quick"


class ResetSelection(BaseModel):
    seed: int | None = None
    team_id: str | None = None


def _http_error(exc: SimulationError) -> HTTPException:
    if isinstance(exc, (TeamNotFound, PlayerNotFound, FixtureNotFound)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (NoMatchScheduled, InvalidState)):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, StorageError):
        _log.error("Storage failure: %s", exc)
        return HTTPException(status_code=500, detail="Storage failure")
    return HTTPException(status_code=400, detail=str(exc))


class SimService:
    def __init__(self, seed: int | None = None) -> None:
        self._lock = Lock()
        self._init_fresh_state(seed=seed)

    def _init_fresh_state(self, seed: int | None = None, team_id: str | None = None) -> None:
        self.session: Session = build_demo_session(player_team_id=team_id, seed=seed)
        self.pending: MatchInfo | None = None

    @property
    def controller(self):
        return self.session.controller

    def _team_name(self, team_id: str) -> str:
        team = self.session.teams.get(team_id)
        return team.name if team is not None else team_id

    def _record_row(self, rec: TeamRecord) -> dict[str, Any]:
        return {
            "position": rec.league_position,
            "team_id": rec.team_id,
            "team": self._team_name(rec.team_id),
            "played": rec.matches_played,
            "wins": rec.wins,
            "draws": rec.draws,
            "losses": rec.losses,
            "goals_for": rec.goals_for,
            "goals_against": rec.goals_against,
            "goal_diff": rec.goal_diff,
            "points": rec.points,
            "form": rec.form,
        }

    def _result_row(self, result: MatchResult) -> dict[str, Any]:
        events: list[dict[str, Any]] = []
        for event in result.events:
            row: dict[str, Any] = {"kind": event.kind, "minute": event.minute, "team_id": event.team_id}
            if isinstance(event, (GoalEvent, YellowCardEvent)):
                row["player_id"] = event.player_id
            events.append(row)
        stats = result.statistics
        motm = stats.man_of_the_match()
        return {
            "match_id": result.match_id,
            "fixture_id": result.fixture_id,
            "round": result.round_number,
            "home": self._team_name(result.home_team_id),
            "away": self._team_name(result.away_team_id),
            "home_score": result.home_score,
            "away_score": result.away_score,
            "mode": result.mode,
            "events": events,
            "possession": [stats.home_possession, stats.away_possession],
            "shots": [stats.home_shots, stats.away_shots],
            "shots_on_target": [stats.home_shots_on_target, stats.away_shots_on_target],
            "man_of_the_match": motm.name if motm is not None else None,
        }

    def meta(self) -> dict[str, Any]:
        controller = self.controller
        league = controller.league
        user_team = self.session.teams[controller.player_team_id]
        return {
            "league": league.name,
            "teams": [{"team_id": tid, "name": self._team_name(tid)} for tid in league.teams],
            "user_team": user_team.team_id,
            "user_team_name": user_team.name,
            "user_style": classify(user_team.tactic).value,
            "season": controller.clock.season_label(),
            "date": controller.clock.format(with_weekday=True),
            "round": league.current_round + 1,
            "total_rounds": league.total_rounds,
            "state": controller.state.value,
            "match_modes": list(MATCH_MODES),
            "unread": self.session.inbox.unread_count(),
        }

    def standings(self) -> list[dict[str, Any]]:
        return [self._record_row(rec) for rec in self.controller.standings()]

    def fixtures(self, round_number: int | None) -> dict[str, Any]:
        league = self.controller.league
        number = round_number if round_number is not None else league.current_round + 1
        rnd = league.round_fixtures(number)
        if rnd is None:
            raise HTTPException(status_code=404, detail=f"Round {number} not found")
        return {
            "round": number,
            "fixtures": [
                {
                    "fixture_id": f.fixture_id,
                    "home": self._team_name(f.home_team_id),
                    "away": self._team_name(f.away_team_id),
                    "played": f.played,
                    "date": f.match_date.isoformat() if f.match_date else None,
                }
                for f in rnd.fixtures
            ],
        }

    def set_user_team(self, team_id: str) -> dict[str, Any]:
        controller = self.controller
        if team_id not in controller.league.teams:
            raise HTTPException(status_code=404, detail="Team not found")
        if self.pending is not None:
            raise HTTPException(status_code=409, detail="Finish the pending match first")
        controller.player_team_id = team_id
        return {"ok": True, "user_team": team_id}

    def advance(self) -> dict[str, Any]:
        controller = self.controller
        try:
            try:
                info = controller.advance_to_next_match()
            except NoMatchScheduled:
                if controller.is_season_complete():
                    raise
                # The user team sits out the rest of this season.
                controller.simulate_remaining()
                info = controller.advance_to_next_match()
        except SimulationError as exc:
            raise _http_error(exc) from exc
        self.pending = info
        return {
            "ok": True,
            "fixture_id": info.fixture_id,
            "home": info.home_team_name,
            "away": info.away_team_name,
            "is_home": info.is_home,
            "round": info.round_number,
            "date": info.match_date,
        }

    def play(self, mode: str) -> dict[str, Any]:
        normalized = mode.lower().strip()
        if normalized not in MATCH_MODES:
            raise HTTPException(status_code=400, detail=f"Unknown match mode '{mode}'")
        try:
            update: MatchUpdate = self.controller.play_match(mode=normalized)
        except SimulationError as exc:
            raise _http_error(exc) from exc
        self.pending = None
        return {
            "ok": True,
            "result": self._result_row(update.result) if update.result is not None else None,
            "is_last_of_round": update.is_last_of_round,
            "is_season_end": update.is_season_end,
            "league_position": update.league_position,
            "state": update.state.value,
            "notifications": [e.title for e in update.effects],
        }

    def notifications(self, unread_only: bool, limit: int) -> list[dict[str, Any]]:
        items = self.session.inbox.unread() if unread_only else self.session.inbox.all()
        rows = [
            {
                "id": n.notification_id,
                "title": n.title,
                "message": n.message,
                "category": n.category.value,
                "priority": n.priority.value,
                "read": n.read,
            }
            for n in reversed(items)
        ]
        return rows[: max(0, limit)]

    def reset(self, seed: int | None = None, team_id: str | None = None) -> dict[str, Any]:
        self._init_fresh_state(seed=seed, team_id=team_id)
        return self.meta()


service = SimService()
app = FastAPI(title="Football Sim API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/meta")
def meta() -> dict[str, Any]:
    with service._lock:
        return service.meta()


@app.get("/api/standings")
def standings() -> list[dict[str, Any]]:
    with service._lock:
        return service.standings()


@app.get("/api/fixtures")
def fixtures(round: int | None = None) -> dict[str, Any]:
    with service._lock:
        return service.fixtures(round_number=round)


@app.post("/api/user-team")
def set_user_team(payload: TeamSelection) -> dict[str, Any]:
    with service._lock:
        return service.set_user_team(payload.team_id)


@app.post("/api/advance")
def advance() -> dict[str, Any]:
    with service._lock:
        return service.advance()


@app.post("/api/play")
def play(payload: PlaySelection) -> dict[str, Any]:
    with service._lock:
        return service.play(mode=payload.mode)


@app.get("/api/notifications")
def notifications(unread: bool = False, limit: int = 50) -> list[dict[str, Any]]:
    with service._lock:
        return service.notifications(unread_only=unread, limit=limit)


@app.post("/api/reset")
def reset(payload: ResetSelection | None = None) -> dict[str, Any]:
    with service._lock:
        if payload is None:
            return service.reset()
        if payload.team_id is not None and payload.team_id not in service.controller.league.teams:
            raise HTTPException(status_code=404, detail="Team not found")
        return service.reset(seed=payload.seed, team_id=payload.team_id)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    uvicorn.run(app, host="127.0.0.1", port=8000)
