"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the study planner backend.
Controllers are intentionally thin: they parse the request, call exactly
one repository method and return JSON. Errors are reported as
`{"message": ...}` bodies (plus `errors` for validation failures).

Endpoints implemented (all under /api):
- GET/POST /subjects, GET/PATCH/DELETE /subjects/{id}
- GET/POST /study-sessions, PATCH/DELETE /study-sessions/{id}
- GET/POST /notes, PATCH/DELETE /notes/{id}
- GET/POST /goals, PATCH/DELETE /goals/{id}
- GET/POST /study-stats
"""

import json
import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError
from sqlmodel import Session

from . import repositories, schemas
from .config import settings
from .database import create_db_and_tables, get_session

app = FastAPI(title="Study Planner API")
logger = logging.getLogger("study_planner.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# Wide-open CORS lets a locally served frontend talk to the API in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


class ApiError(Exception):
    """An error that maps directly onto an HTTP response.

    `errors` is only set for validation failures.
    """
    def __init__(self, status_code: int, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    body: Dict[str, Any] = {"message": exc.message}
    if exc.errors is not None:
        body["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies and query parameters as 400, like payload validation."""
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


def _request_log_entry(request: Request, req_id: str, started: float, **extra) -> str:
    entry = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        **extra,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }
    return json.dumps(entry, ensure_ascii=True)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    logged = request.url.path.startswith("/api")
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        if logged:
            logger.exception("request_failed %s", _request_log_entry(request, req_id, started))
        raise
    response.headers["X-Request-ID"] = req_id
    if logged:
        logger.info(
            "request_done %s",
            _request_log_entry(request, req_id, started, status_code=response.status_code),
        )
    return response


@contextmanager
def handler_failure(message: str):
    """Turn any unexpected exception inside the block into a generic 500."""
    try:
        yield
    except ApiError:
        raise
    except Exception:
        logger.exception(message)
        raise ApiError(500, message)


def _validate(schema: type[BaseModel], payload: Any, message: str) -> BaseModel:
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ApiError(400, message, json.loads(exc.json(include_url=False)))


def _row_id(raw: str, not_found: str) -> int:
    # a non-numeric id can never match a stored row
    try:
        return int(raw)
    except ValueError:
        raise ApiError(404, not_found)


def _out(schema: type[BaseModel], row) -> dict:
    return jsonable_encoder(schema.model_validate(row.model_dump()).model_dump(by_alias=True))


def _out_list(schema: type[BaseModel], rows) -> List[dict]:
    return [_out(schema, row) for row in rows]


api = APIRouter(prefix="/api")


# Subjects

@api.get('/subjects')
def list_subjects(db: Session = Depends(get_session)):
    """List every subject."""
    with handler_failure("Failed to fetch subjects"):
        subjects = repositories.SubjectRepository(db).list()
        return _out_list(schemas.SubjectOut, subjects)


@api.get('/subjects/{subject_id}')
def get_subject(subject_id: str, db: Session = Depends(get_session)):
    """Return one subject or 404."""
    row_id = _row_id(subject_id, "Subject not found")
    with handler_failure("Failed to fetch subject"):
        subject = repositories.SubjectRepository(db).get(row_id)
        if not subject:
            raise ApiError(404, "Subject not found")
        return _out(schemas.SubjectOut, subject)


@api.post('/subjects', status_code=201)
def create_subject(payload: Any = Body(default=None), db: Session = Depends(get_session)):
    """Create a subject.

    `name` is required; `color`, `icon`, `progress` and `totalHours` fall
    back to their defaults when omitted.
    """
    data = _validate(schemas.SubjectCreate, payload, "Invalid subject data")
    with handler_failure("Failed to create subject"):
        subject = repositories.SubjectRepository(db).create(data.model_dump())
        return _out(schemas.SubjectOut, subject)


@api.patch('/subjects/{subject_id}')
def update_subject(subject_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_session)):
    """Apply a partial update; the body is not validated."""
    row_id = _row_id(subject_id, "Subject not found")
    updates = schemas.update_columns(schemas.SubjectCreate, payload)
    with handler_failure("Failed to update subject"):
        subject = repositories.SubjectRepository(db).update(row_id, updates)
        if not subject:
            raise ApiError(404, "Subject not found")
        return _out(schemas.SubjectOut, subject)


@api.delete('/subjects/{subject_id}', status_code=204)
def delete_subject(subject_id: str, db: Session = Depends(get_session)):
    """Delete a subject. Its sessions and notes are left in place."""
    row_id = _row_id(subject_id, "Subject not found")
    with handler_failure("Failed to delete subject"):
        removed = repositories.SubjectRepository(db).delete(row_id)
    if not removed:
        raise ApiError(404, "Subject not found")
    return Response(status_code=204)


# Study sessions

@api.get('/study-sessions')
def list_study_sessions(date: Optional[str] = None, db: Session = Depends(get_session)):
    """List sessions, restricted to one calendar date when `date` is given."""
    with handler_failure("Failed to fetch study sessions"):
        repo = repositories.StudySessionRepository(db)
        sessions = repo.list_by_date(date) if date else repo.list()
        return _out_list(schemas.StudySessionOut, sessions)


@api.post('/study-sessions', status_code=201)
def create_study_session(payload: Any = Body(default=None), db: Session = Depends(get_session)):
    data = _validate(schemas.StudySessionCreate, payload, "Invalid session data")
    with handler_failure("Failed to create study session"):
        session = repositories.StudySessionRepository(db).create(data.model_dump())
        return _out(schemas.StudySessionOut, session)


@api.patch('/study-sessions/{session_id}')
def update_study_session(session_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_session)):
    row_id = _row_id(session_id, "Study session not found")
    updates = schemas.update_columns(schemas.StudySessionCreate, payload)
    with handler_failure("Failed to update study session"):
        session = repositories.StudySessionRepository(db).update(row_id, updates)
        if not session:
            raise ApiError(404, "Study session not found")
        return _out(schemas.StudySessionOut, session)


@api.delete('/study-sessions/{session_id}', status_code=204)
def delete_study_session(session_id: str, db: Session = Depends(get_session)):
    row_id = _row_id(session_id, "Study session not found")
    with handler_failure("Failed to delete study session"):
        removed = repositories.StudySessionRepository(db).delete(row_id)
    if not removed:
        raise ApiError(404, "Study session not found")
    return Response(status_code=204)


# Notes

@api.get('/notes')
def list_notes(subject_id: Optional[int] = Query(default=None, alias="subjectId"), db: Session = Depends(get_session)):
    """List notes oldest first, optionally only those of one subject."""
    with handler_failure("Failed to fetch notes"):
        repo = repositories.NoteRepository(db)
        notes = repo.list_by_subject(subject_id) if subject_id is not None else repo.list()
        return _out_list(schemas.NoteOut, notes)


@api.post('/notes', status_code=201)
def create_note(payload: Any = Body(default=None), db: Session = Depends(get_session)):
    data = _validate(schemas.NoteCreate, payload, "Invalid note data")
    with handler_failure("Failed to create note"):
        note = repositories.NoteRepository(db).create(data.model_dump())
        return _out(schemas.NoteOut, note)


@api.patch('/notes/{note_id}')
def update_note(note_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_session)):
    row_id = _row_id(note_id, "Note not found")
    updates = schemas.update_columns(schemas.NoteCreate, payload)
    with handler_failure("Failed to update note"):
        note = repositories.NoteRepository(db).update(row_id, updates)
        if not note:
            raise ApiError(404, "Note not found")
        return _out(schemas.NoteOut, note)


@api.delete('/notes/{note_id}', status_code=204)
def delete_note(note_id: str, db: Session = Depends(get_session)):
    row_id = _row_id(note_id, "Note not found")
    with handler_failure("Failed to delete note"):
        removed = repositories.NoteRepository(db).delete(row_id)
    if not removed:
        raise ApiError(404, "Note not found")
    return Response(status_code=204)


# Goals

@api.get('/goals')
def list_goals(db: Session = Depends(get_session)):
    with handler_failure("Failed to fetch goals"):
        goals = repositories.GoalRepository(db).list()
        return _out_list(schemas.GoalOut, goals)


@api.post('/goals', status_code=201)
def create_goal(payload: Any = Body(default=None), db: Session = Depends(get_session)):
    data = _validate(schemas.GoalCreate, payload, "Invalid goal data")
    with handler_failure("Failed to create goal"):
        goal = repositories.GoalRepository(db).create(data.model_dump())
        return _out(schemas.GoalOut, goal)


@api.patch('/goals/{goal_id}')
def update_goal(goal_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_session)):
    row_id = _row_id(goal_id, "Goal not found")
    updates = schemas.update_columns(schemas.GoalCreate, payload)
    with handler_failure("Failed to update goal"):
        goal = repositories.GoalRepository(db).update(row_id, updates)
        if not goal:
            raise ApiError(404, "Goal not found")
        return _out(schemas.GoalOut, goal)


@api.delete('/goals/{goal_id}', status_code=204)
def delete_goal(goal_id: str, db: Session = Depends(get_session)):
    row_id = _row_id(goal_id, "Goal not found")
    with handler_failure("Failed to delete goal"):
        removed = repositories.GoalRepository(db).delete(row_id)
    if not removed:
        raise ApiError(404, "Goal not found")
    return Response(status_code=204)


# Study stats

@api.get('/study-stats')
def get_study_stats(date: Optional[str] = None, db: Session = Depends(get_session)):
    """Return the stats row for `date` (or null), or every row without a date."""
    with handler_failure("Failed to fetch study stats"):
        repo = repositories.StudyStatsRepository(db)
        if date:
            stats = repo.get_by_date(date)
            return _out(schemas.StudyStatsOut, stats) if stats else None
        return _out_list(schemas.StudyStatsOut, repo.list())


@api.post('/study-stats')
def upsert_study_stats(payload: Any = Body(default=None), db: Session = Depends(get_session)):
    """Create the stats row for a date, or overwrite the existing one."""
    data = _validate(schemas.StudyStatsCreate, payload, "Invalid stats data")
    with handler_failure("Failed to update study stats"):
        stats = repositories.StudyStatsRepository(db).create_or_update(data.model_dump(exclude_unset=True))
        return _out(schemas.StudyStatsOut, stats)


app.include_router(api)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
