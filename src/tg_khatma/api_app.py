from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tg_khatma.achievements import CATALOG
from tg_khatma.config import load_settings
from tg_khatma.db import Database
from tg_khatma.errors import GOAL_NOT_FOUND, EntryConflictError, EntryValidationError, GoalStateError
from tg_khatma.logging_setup import setup_logging
from tg_khatma.quran_reference import MUSHAF_PAGES, QuranReference, default_reference, load_reference
from tg_khatma.service import (
    compute_analytics,
    goal_view,
    log_reading,
    pause_khatma,
    reconcile_goals,
    resume_khatma,
    start_khatma,
)
from tg_khatma.time_utils import DEFAULT_TZ, now_local


def _require_auth(request: Request, token: str | None) -> None:
    if not token:
        return
    header = request.headers.get("x-api-token")
    query = request.query_params.get("token")
    if header == token or query == token:
        return
    raise HTTPException(status_code=401, detail="Unauthorized")


class StartGoalRequest(BaseModel):
    name: str
    target_date: date
    start_date: date | None = None
    total_pages: int = MUSHAF_PAGES
    daily_target: int | None = None


class LogReadingRequest(BaseModel):
    surah_from: int
    ayah_from: int
    surah_to: int
    ayah_to: int
    pages_read: int
    duration_minutes: int
    read_at: datetime | None = None
    notes: str | None = None
    goal_id: str | None = None
    entry_id: str | None = Field(default=None, max_length=64)


def build_api_app(
    db: Database,
    api_token: str | None,
    tz: str = DEFAULT_TZ,
    reference: QuranReference | None = None,
) -> FastAPI:
    app = FastAPI(title="Khatma Tracker API", version="1.0.0")
    ref = reference or default_reference()
    zone = ZoneInfo(tz)

    def _local(dt: datetime | None) -> datetime | None:
        if dt is None:
            return None
        # naive timestamps are wall-clock time in the configured zone
        return dt.replace(tzinfo=zone) if dt.tzinfo is None else dt.astimezone(zone)

    @app.exception_handler(EntryValidationError)
    async def _validation_failed(request: Request, exc: EntryValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"field": exc.field, "reason": exc.reason})

    @app.exception_handler(GoalStateError)
    async def _goal_state_failed(request: Request, exc: GoalStateError) -> JSONResponse:
        status = 404 if exc.kind == GOAL_NOT_FOUND else 409
        return JSONResponse(status_code=status, content={"error": exc.kind, "goal_id": exc.goal_id})

    @app.exception_handler(EntryConflictError)
    async def _entry_conflict(request: Request, exc: EntryConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"error": exc.kind, "entry_id": exc.entry_id})

    @app.get("/api/reference/surahs")
    async def api_surahs(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"total_pages": ref.total_pages, "surahs": [asdict(s) for s in ref.surahs()]}

    @app.get("/api/achievements")
    async def api_catalog(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {
            "achievements": [
                {"key": a.key, "name": a.name, "icon": a.icon, "description": a.description} for a in CATALOG
            ]
        }

    @app.post("/api/users/{user_id}/goals", status_code=201)
    async def api_start_goal(user_id: int, request: Request, payload: StartGoalRequest) -> dict[str, Any]:
        _require_auth(request, api_token)
        now = now_local(tz)
        goal = start_khatma(
            db,
            user_id,
            name=payload.name,
            start_date=payload.start_date or now.date(),
            target_date=payload.target_date,
            now=now,
            total_pages=payload.total_pages,
            daily_target=payload.daily_target,
        )
        return {"goal": asdict(goal)}

    @app.get("/api/users/{user_id}/goals")
    async def api_list_goals(user_id: int, request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        goals = reconcile_goals(db, user_id, now_local(tz))
        return {"goals": [asdict(g) for g in goals]}

    @app.get("/api/users/{user_id}/goals/{goal_id}")
    async def api_goal(user_id: int, goal_id: str, request: Request, today: date | None = None) -> dict[str, Any]:
        _require_auth(request, api_token)
        view = goal_view(db, user_id, goal_id, today or now_local(tz).date())
        return asdict(view)

    @app.post("/api/users/{user_id}/goals/{goal_id}/pause")
    async def api_pause(user_id: int, goal_id: str, request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"goal": asdict(pause_khatma(db, user_id, goal_id))}

    @app.post("/api/users/{user_id}/goals/{goal_id}/resume")
    async def api_resume(user_id: int, goal_id: str, request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"goal": asdict(resume_khatma(db, user_id, goal_id))}

    @app.post("/api/users/{user_id}/entries", status_code=201)
    async def api_log_reading(user_id: int, request: Request, payload: LogReadingRequest) -> dict[str, Any]:
        _require_auth(request, api_token)
        outcome = log_reading(
            db,
            user_id,
            surah_from=payload.surah_from,
            ayah_from=payload.ayah_from,
            surah_to=payload.surah_to,
            ayah_to=payload.ayah_to,
            pages_read=payload.pages_read,
            duration_minutes=payload.duration_minutes,
            now=now_local(tz),
            read_at=_local(payload.read_at),
            notes=payload.notes,
            goal_id=payload.goal_id,
            entry_id=payload.entry_id,
            reference=ref,
        )
        return asdict(outcome)

    @app.get("/api/users/{user_id}/entries")
    async def api_entries(user_id: int, request: Request, goal_id: str | None = None) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"entries": [asdict(e) for e in db.load_entries(user_id, goal_id)]}

    @app.get("/api/users/{user_id}/analytics")
    async def api_analytics(user_id: int, request: Request, today: date | None = None) -> dict[str, Any]:
        _require_auth(request, api_token)
        return asdict(compute_analytics(db, user_id, today or now_local(tz).date()))

    return app


def run_api() -> None:
    setup_logging()
    settings = load_settings(require_bot_token=False)
    db = Database(settings.database_path)
    app = build_api_app(db, settings.api_token, settings.tz, load_reference(settings.quran_reference_path))
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
