"""Pydantic request/response schemas used by the API.

The JSON API speaks camelCase (`subjectId`, `totalHours`, ...) while the
tables use snake_case columns; every schema here carries the camelCase
alias generator so both sides line up.

Creation payloads are validated strictly: JSON strings are not coerced
into numbers and booleans are not accepted as integers. Unknown keys are
dropped. Update payloads are deliberately not validated; see
`update_columns`.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


SessionStatus = Literal["upcoming", "in-progress", "completed"]


class CreateSchema(BaseModel):
    """Base for creation payloads (everything except the generated id)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, strict=True)


class OutSchema(BaseModel):
    """Base for stored rows serialised back to clients."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserCreate(CreateSchema):
    username: str
    password: str


class UserOut(OutSchema):
    id: int
    username: str


class SubjectCreate(CreateSchema):
    name: str
    color: str = "#4F46E5"
    icon: str = "fas fa-book"
    current_topic: Optional[str] = None
    progress: int = 0
    total_hours: int = 0


class SubjectOut(OutSchema):
    id: int
    name: str
    color: str
    icon: str
    current_topic: Optional[str] = None
    progress: int
    total_hours: int


class StudySessionCreate(CreateSchema):
    subject_id: int
    title: str
    description: Optional[str] = None
    start_time: str
    end_time: str
    date: str
    status: SessionStatus = "upcoming"
    actual_duration: Optional[int] = 0


class StudySessionOut(OutSchema):
    id: int
    subject_id: int
    title: str
    description: Optional[str] = None
    start_time: str
    end_time: str
    date: str
    status: str
    actual_duration: Optional[int] = None


class NoteCreate(CreateSchema):
    subject_id: int
    title: str
    content: str
    created_at: str


class NoteOut(OutSchema):
    id: int
    subject_id: int
    title: str
    content: str
    created_at: str


class GoalCreate(CreateSchema):
    title: str
    description: Optional[str] = None
    target_date: str
    progress: int = 0
    is_completed: bool = False


class GoalOut(OutSchema):
    id: int
    title: str
    description: Optional[str] = None
    target_date: str
    progress: int
    is_completed: bool


class StudyStatsCreate(CreateSchema):
    date: str
    total_minutes: int = 0
    sessions_completed: int = 0
    streak: int = 0


class StudyStatsOut(OutSchema):
    id: int
    date: str
    total_minutes: int
    sessions_completed: int
    streak: int


def update_columns(schema: type[CreateSchema], payload: dict) -> dict:
    """Map a raw partial-update body onto column names.

    Keys are matched against the creation schema's wire (camelCase) names
    only; anything else is dropped, which also keeps `id` out of the update
    set. Values are not validated here; the repository coerces them to the
    column types.
    """
    columns = {(field.alias or name): name for name, field in schema.model_fields.items()}
    return {columns[key]: value for key, value in payload.items() if key in columns}
