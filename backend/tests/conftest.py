from datetime import date
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from campus import models, tokens
from campus.database import build_engine, create_db_and_tables, get_session
from campus.main import app


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(session):
    """Factory creating a stored profile with a hashed password."""
    seq = count(1)

    def _make(role=models.Role.GUEST, email=None, password="secret"):
        n = next(seq)
        profile = models.Profile(
            first_name=f"First{n}",
            last_name=f"Last{n}",
            email=email or f"user{n}@example.com",
            password=tokens.hash_password(password),
            role=role,
        )
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    return _make


@pytest.fixture
def auth_headers():
    def _headers(profile):
        return {"Authorization": f"Bearer {tokens.create_access_token(profile)}"}

    return _headers


@pytest.fixture
def make_course(session):
    def _make(title="Database Systems", **kwargs):
        course = models.Course(title=title, credits=kwargs.pop("credits", 3), **kwargs)
        session.add(course)
        session.commit()
        session.refresh(course)
        return course

    return _make


@pytest.fixture
def make_student(session, make_profile):
    def _make(profile=None, **kwargs):
        profile = profile or make_profile(role=models.Role.STUDENT)
        student = models.Student(profile_id=profile.id, enrollment_date=kwargs.pop("enrollment_date", date(2023, 9, 1)), **kwargs)
        session.add(student)
        session.commit()
        session.refresh(student)
        return student

    return _make


@pytest.fixture
def make_lecturer(session, make_profile):
    def _make(profile=None, **kwargs):
        profile = profile or make_profile(role=models.Role.FACULTY)
        lecturer = models.Lecturer(
            profile_id=profile.id,
            employee_id=kwargs.pop("employee_id", "EMP1001"),
            specialization=kwargs.pop("specialization", "Computer Science"),
            **kwargs,
        )
        session.add(lecturer)
        session.commit()
        session.refresh(lecturer)
        return lecturer

    return _make
