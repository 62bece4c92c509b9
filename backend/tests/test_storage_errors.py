import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from campus import schemas, tokens
from campus.errors import StorageError
from campus.services import AuthService, CourseService, LecturerService, ProfileService, StudentService


def _fail(*args, **kwargs):
    raise OperationalError("UPDATE lecturer", {}, Exception("database is locked"))


def test_update_failure_is_wrapped(session, make_lecturer, monkeypatch):
    lecturer = make_lecturer()
    monkeypatch.setattr(session, "commit", _fail)
    with pytest.raises(StorageError) as exc:
        LecturerService(session).update(lecturer.id, schemas.LecturerUpdate(bio='New bio'))
    assert exc.value.message == f'Failed to update lecturer with id {lecturer.id}'
    assert exc.value.status_code == 500


def test_storage_error_response_hides_details(client, make_profile, auth_headers, monkeypatch):
    me = make_profile()
    headers = auth_headers(me)
    monkeypatch.setattr(Session, "commit", _fail)
    r = client.patch(f'/profiles/{me.id}', json={'first_name': 'X'}, headers=headers)
    assert r.status_code == 500
    assert r.json() == {'detail': f'Failed to update profile with id {me.id}'}


def test_create_failure_is_wrapped(session, monkeypatch):
    monkeypatch.setattr(session, "commit", _fail)
    dto = schemas.ProfileCreate(first_name='A', last_name='B', email='a@example.com', password='pw')
    with pytest.raises(StorageError) as exc:
        ProfileService(session).create(dto)
    assert exc.value.message == 'Failed to create profile'


def test_lookup_failure_during_assign_is_wrapped(session, make_lecturer, make_course, monkeypatch):
    lecturer = make_lecturer()
    course = make_course()
    rollbacks = []
    monkeypatch.setattr(session, "rollback", lambda: rollbacks.append(True))
    monkeypatch.setattr(session, "get", _fail)
    with pytest.raises(StorageError) as exc:
        LecturerService(session).assign_lecturer_to_course(lecturer.id, course.id)
    assert exc.value.message == f'Failed to assign course {course.id} to lecturer with id {lecturer.id}'
    assert rollbacks == [True]


def test_lookup_failure_during_batch_replace_is_wrapped(session, make_lecturer, make_course, monkeypatch):
    lecturer = make_lecturer()
    course = make_course()
    monkeypatch.setattr(session, "exec", _fail)
    with pytest.raises(StorageError) as exc:
        LecturerService(session).update_lecturer_courses(lecturer.id, [course.id])
    assert exc.value.message == f'Failed to update courses for lecturer with id {lecturer.id}'


def test_lookup_failure_during_student_create_is_wrapped(session, make_profile, monkeypatch):
    profile = make_profile()
    monkeypatch.setattr(session, "get", _fail)
    dto = schemas.StudentCreate(enrollment_date='2024-09-01', profile_id=profile.id)
    with pytest.raises(StorageError) as exc:
        StudentService(session).create(dto)
    assert exc.value.message == 'Failed to create student'


def test_duplicate_email_lookup_failure_is_wrapped(session, monkeypatch):
    monkeypatch.setattr(session, "exec", _fail)
    dto = schemas.ProfileCreate(first_name='A', last_name='B', email='a@example.com', password='pw')
    with pytest.raises(StorageError) as exc:
        ProfileService(session).create(dto)
    assert exc.value.message == 'Failed to create profile'


def test_sign_in_lookup_failure_is_wrapped(session, make_profile, monkeypatch):
    make_profile(email='ada@example.com')
    monkeypatch.setattr(session, "exec", _fail)
    with pytest.raises(StorageError) as exc:
        AuthService(session).sign_in('ada@example.com', 'secret')
    assert exc.value.message == 'Failed to sign in'


def test_refresh_lookup_failure_is_wrapped(session, make_profile, monkeypatch):
    profile = make_profile()
    token = tokens.create_refresh_token(profile)
    monkeypatch.setattr(session, "get", _fail)
    with pytest.raises(StorageError) as exc:
        AuthService(session).refresh(profile.id, token)
    assert exc.value.message == f'Failed to refresh tokens for profile with id {profile.id}'


def test_sign_in_failure_response(client, make_profile, monkeypatch):
    make_profile(email='ada@example.com')
    monkeypatch.setattr(Session, "exec", _fail)
    r = client.post('/auth/signin', json={'email': 'ada@example.com', 'password': 'secret'})
    assert r.status_code == 500
    assert r.json() == {'detail': 'Failed to sign in'}


def test_course_side_lookup_failure_is_wrapped(session, make_course, make_student, monkeypatch):
    course = make_course()
    student = make_student()
    monkeypatch.setattr(session, "get", _fail)
    with pytest.raises(StorageError) as exc:
        CourseService(session).add_student_to_course(course.id, student.id)
    assert exc.value.message == f'Failed to add student {student.id} to course with id {course.id}'
