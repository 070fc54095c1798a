"""SQLModel data models.

This module defines the study planner's database tables using SQLModel.
Column names are snake_case; the camelCase names used on the wire live
in `schemas`. References between tables (`subject_id`) are plain
integers: there are no foreign key constraints and no cascades.
"""

from typing import Optional
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """A user account.

    The password is stored exactly as supplied.
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True)
    password: str


class Subject(SQLModel, table=True):
    """A subject being studied, with display settings and progress counters."""
    __tablename__ = "subjects"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    color: str = "#4F46E5"
    icon: str = "fas fa-book"
    current_topic: Optional[str] = None
    progress: int = 0
    total_hours: int = 0


class StudySession(SQLModel, table=True):
    """A scheduled block of study for one subject.

    `status` is one of `upcoming`, `in-progress` or `completed`.
    """
    __tablename__ = "study_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    subject_id: int
    title: str
    description: Optional[str] = None
    start_time: str
    end_time: str
    date: str = Field(index=True)
    status: str = "upcoming"
    actual_duration: Optional[int] = 0


class Note(SQLModel, table=True):
    """Free-form note attached to a subject."""
    __tablename__ = "notes"

    id: Optional[int] = Field(default=None, primary_key=True)
    subject_id: int = Field(index=True)
    title: str
    content: str
    created_at: str


class Goal(SQLModel, table=True):
    __tablename__ = "goals"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    target_date: str
    progress: int = 0
    is_completed: bool = False


class StudyStats(SQLModel, table=True):
    """Aggregate study figures for one calendar date.

    Only one row per `date` is expected, but the column is not unique;
    see `StudyStatsRepository.create_or_update`.
    """
    __tablename__ = "study_stats"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(index=True)
    total_minutes: int = 0
    sessions_completed: int = 0
    streak: int = 0
