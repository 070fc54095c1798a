"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table (users, subjects,
study sessions, notes, goals, study stats). Repositories return SQLModel
objects and perform commits/refreshes where appropriate. Absence is
reported with `None` (or `False` for deletes), never with an exception.
"""

from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter
from sqlmodel import Session, select

from . import models


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_username(self, username: str) -> Optional[models.User]:
        """Return a `User` by username or `None` if not found."""
        stmt = select(models.User).where(models.User.username == username)
        return self.session.exec(stmt).first()

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)


class _TableRepository:
    """Shared get/list/create/update/delete for one table model.

    Subclasses set `model` and add their filtered queries.
    """
    model: Any = None

    def __init__(self, session: Session):
        self.session = session

    def list(self) -> List[Any]:
        """Return every row of the table."""
        return self.session.exec(select(self.model)).all()

    def get(self, row_id: int) -> Optional[Any]:
        """Fetch a row by id, or `None`."""
        return self.session.get(self.model, row_id)

    def create(self, values: Dict[str, Any]) -> Any:
        """Insert one row and return it as stored, with id and defaults."""
        row = self.model(**values)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

    def update(self, row_id: int, updates: Dict[str, Any]) -> Optional[Any]:
        """Apply a partial column set to the row with `row_id`.

        Columns not present in `updates` keep their stored values. Returns
        the refreshed row, or `None` when no row has that id.
        """
        row = self.session.get(self.model, row_id)
        if row is None:
            return None
        if not updates:
            return row
        for column, value in self._typed(updates).items():
            setattr(row, column, value)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

    def delete(self, row_id: int) -> bool:
        """Delete the row with `row_id`; True only if a row was removed."""
        row = self.session.get(self.model, row_id)
        if row is None:
            return False
        self.session.delete(row)
        self.session.commit()
        return True

    def _typed(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Coerce update values to their column types before anything is written.

        A value the column cannot hold raises pydantic's `ValidationError`
        (a `ValueError`) and the row is left untouched.
        """
        fields = self.model.model_fields
        return {
            column: TypeAdapter(fields[column].annotation).validate_python(value)
            for column, value in updates.items()
        }


class SubjectRepository(_TableRepository):
    """CRUD operations for `Subject` rows."""
    model = models.Subject


class StudySessionRepository(_TableRepository):
    """CRUD operations for `StudySession` rows plus the by-date listing."""
    model = models.StudySession

    def list_by_date(self, date: str) -> List[models.StudySession]:
        """Return sessions scheduled on exactly `date`."""
        stmt = select(models.StudySession).where(models.StudySession.date == date)
        return self.session.exec(stmt).all()


class NoteRepository(_TableRepository):
    """CRUD operations for `Note` rows.

    Listings are ordered by `created_at`.
    """
    model = models.Note

    def list(self) -> List[models.Note]:
        stmt = select(models.Note).order_by(models.Note.created_at)
        return self.session.exec(stmt).all()

    def list_by_subject(self, subject_id: int) -> List[models.Note]:
        """Return the notes attached to `subject_id`."""
        stmt = (
            select(models.Note)
            .where(models.Note.subject_id == subject_id)
            .order_by(models.Note.created_at)
        )
        return self.session.exec(stmt).all()


class GoalRepository(_TableRepository):
    """CRUD operations for `Goal` rows."""
    model = models.Goal


class StudyStatsRepository:
    """Per-date study statistics with a look-up-then-write upsert."""
    def __init__(self, session: Session):
        self.session = session

    def list(self) -> List[models.StudyStats]:
        """Return all stats rows."""
        return self.session.exec(select(models.StudyStats)).all()

    def get_by_date(self, date: str) -> Optional[models.StudyStats]:
        """Return the stats row for `date` or `None`."""
        stmt = select(models.StudyStats).where(models.StudyStats.date == date)
        return self.session.exec(stmt).first()

    def create_or_update(self, values: Dict[str, Any]) -> models.StudyStats:
        """Upsert the stats for `values['date']`.

        The existence check and the write are separate statements with no
        lock between them, so two concurrent calls for a new date can both
        insert. When a row exists, every row carrying that date gets the
        columns present in `values`; the others keep their stored values.
        A new row takes the column defaults for anything not in `values`.
        """
        existing = self.get_by_date(values["date"])
        if existing:
            rows = self.session.exec(
                select(models.StudyStats).where(models.StudyStats.date == values["date"])
            ).all()
            for row in rows:
                for column, value in values.items():
                    setattr(row, column, value)
                self.session.add(row)
            self.session.commit()
            self.session.refresh(existing)
            return existing
        stats = models.StudyStats(**values)
        self.session.add(stats)
        self.session.commit()
        self.session.refresh(stats)
        return stats
