"""Repository classes encapsulating database operations.

Each repository is small and focused on a single entity (profiles,
students, lecturers, courses, departments). Repositories return SQLModel
objects and perform commits/refreshes where appropriate; they do not
catch database errors, the services wrap those.
"""

from typing import Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import func, or_
from sqlmodel import Session, SQLModel, select

from . import models

ModelT = TypeVar("ModelT", bound=SQLModel)


class BaseRepository(Generic[ModelT]):
    """Common CRUD operations shared by the entity repositories."""
    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def add(self, obj: ModelT) -> ModelT:
        """Persist a new row and return the managed instance."""
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def save(self, obj: ModelT) -> ModelT:
        """Flush pending changes on `obj` (including relation lists)."""
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def get(self, obj_id: int) -> Optional[ModelT]:
        """Get a row by primary key."""
        return self.session.get(self.model, obj_id)

    def get_many(self, ids: Iterable[int]) -> List[ModelT]:
        """Return the rows whose primary key is in `ids` (missing ids are skipped)."""
        ids = list(ids)
        if not ids:
            return []
        stmt = select(self.model).where(self.model.id.in_(ids))
        return list(self.session.exec(stmt).all())

    def delete(self, obj: ModelT) -> None:
        self.session.delete(obj)
        self.session.commit()


def _contains(column, text: str):
    return func.lower(column).contains(text.lower())


class ProfileRepository(BaseRepository[models.Profile]):
    """CRUD operations for `Profile` objects."""
    model = models.Profile

    def get_by_email(self, email: str) -> Optional[models.Profile]:
        """Return a `Profile` by email or `None` if not found."""
        stmt = select(models.Profile).where(models.Profile.email == email)
        return self.session.exec(stmt).first()

    def list(self, email: Optional[str] = None) -> List[models.Profile]:
        stmt = select(models.Profile).order_by(models.Profile.id)
        if email:
            stmt = stmt.where(models.Profile.email == email)
        return list(self.session.exec(stmt).all())


class StudentRepository(BaseRepository[models.Student]):
    model = models.Student

    def list(self, name: Optional[str] = None) -> List[models.Student]:
        """List students, optionally filtered by the profile's first/last name."""
        stmt = select(models.Student).order_by(models.Student.id)
        if name:
            stmt = stmt.join(models.Profile).where(
                or_(_contains(models.Profile.first_name, name), _contains(models.Profile.last_name, name))
            )
        return list(self.session.exec(stmt).all())

    def get_by_profile(self, profile_id: int) -> Optional[models.Student]:
        stmt = select(models.Student).where(models.Student.profile_id == profile_id)
        return self.session.exec(stmt).first()


class LecturerRepository(BaseRepository[models.Lecturer]):
    model = models.Lecturer

    def list(self, name: Optional[str] = None) -> List[models.Lecturer]:
        """List lecturers, optionally filtered by the profile's first/last name."""
        stmt = select(models.Lecturer).order_by(models.Lecturer.id)
        if name:
            stmt = stmt.join(models.Profile).where(
                or_(_contains(models.Profile.first_name, name), _contains(models.Profile.last_name, name))
            )
        return list(self.session.exec(stmt).all())

    def get_by_profile(self, profile_id: int) -> Optional[models.Lecturer]:
        stmt = select(models.Lecturer).where(models.Lecturer.profile_id == profile_id)
        return self.session.exec(stmt).first()


class CourseRepository(BaseRepository[models.Course]):
    model = models.Course

    def list(self, search: Optional[str] = None) -> List[models.Course]:
        """List courses whose title or description contains `search`."""
        stmt = select(models.Course).order_by(models.Course.id)
        if search:
            stmt = stmt.where(
                or_(_contains(models.Course.title, search), _contains(models.Course.description, search))
            )
        return list(self.session.exec(stmt).all())


class DepartmentRepository(BaseRepository[models.Department]):
    model = models.Department

    def list(self, name: Optional[str] = None) -> List[models.Department]:
        stmt = select(models.Department).order_by(models.Department.id)
        if name:
            stmt = stmt.where(_contains(models.Department.name, name))
        return list(self.session.exec(stmt).all())
