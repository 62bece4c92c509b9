"""SQLModel data models.

This module defines the campus tables using SQLModel. Each class maps to
a table; course assignments are stored in the two link tables so that a
(student, course) or (lecturer, course) pair can exist only once.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """Role attached to a `Profile`; drives the ability table."""
    ADMIN = "admin"
    FACULTY = "faculty"
    STUDENT = "student"
    GUEST = "guest"


class StudentCourseLink(SQLModel, table=True):
    student_id: Optional[int] = Field(default=None, foreign_key="student.id", primary_key=True, ondelete="CASCADE")
    course_id: Optional[int] = Field(default=None, foreign_key="course.id", primary_key=True, ondelete="CASCADE")


class LecturerCourseLink(SQLModel, table=True):
    lecturer_id: Optional[int] = Field(default=None, foreign_key="lecturer.id", primary_key=True, ondelete="CASCADE")
    course_id: Optional[int] = Field(default=None, foreign_key="course.id", primary_key=True, ondelete="CASCADE")


class Profile(SQLModel, table=True):
    """An identity record.

    Fields:
    - `email`: unique login name
    - `password`: hashed password string (never store plaintext, never serialize)
    - `hashed_refresh_token`: hash of the currently valid refresh token, if signed in
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str = Field(index=True, nullable=False, unique=True)
    password: str
    role: Role = Field(default=Role.GUEST)
    hashed_refresh_token: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs={"onupdate": _utcnow})
    student: Optional['Student'] = Relationship(
        back_populates='profile',
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},
    )
    lecturer: Optional['Lecturer'] = Relationship(
        back_populates='profile',
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},
    )


class Department(SQLModel, table=True):
    """An academic department owning a set of courses."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    head_of_department: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs={"onupdate": _utcnow})
    courses: List['Course'] = Relationship(back_populates='department')


class Course(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(index=True)
    description: Optional[str] = None
    credits: int = 0
    duration: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    department_id: Optional[int] = Field(default=None, foreign_key='department.id', ondelete="SET NULL")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs={"onupdate": _utcnow})
    department: Optional[Department] = Relationship(back_populates='courses')
    students: List['Student'] = Relationship(back_populates='courses', link_model=StudentCourseLink)
    lecturers: List['Lecturer'] = Relationship(back_populates='courses', link_model=LecturerCourseLink)


class Student(SQLModel, table=True):
    """Enrollment metadata extending a `Profile`.

    `profile_id` is the owning identity used by the ownership checks.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    enrollment_date: date
    degree_program: Optional[str] = None
    gpa: Optional[float] = None
    department_id: Optional[int] = Field(default=None, foreign_key='department.id', ondelete="SET NULL")
    profile_id: int = Field(foreign_key='profile.id', unique=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs={"onupdate": _utcnow})
    profile: Optional[Profile] = Relationship(back_populates='student')
    department: Optional[Department] = Relationship()
    courses: List[Course] = Relationship(back_populates='students', link_model=StudentCourseLink)


class Lecturer(SQLModel, table=True):
    """Employment metadata extending a `Profile`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: str = Field(index=True)
    specialization: str
    bio: Optional[str] = None
    office_location: Optional[str] = None
    phone_number: Optional[str] = None
    profile_id: int = Field(foreign_key='profile.id', unique=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs={"onupdate": _utcnow})
    profile: Optional[Profile] = Relationship(back_populates='lecturer')
    courses: List[Course] = Relationship(back_populates='lecturers', link_model=LecturerCourseLink)
