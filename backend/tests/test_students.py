from sqlmodel import select

from campus import models
from campus.models import Role


def test_student_reads_only_own_record(client, make_profile, make_student, auth_headers):
    mine = make_student()
    theirs = make_student()
    me = auth_headers(mine.profile)
    r = client.get(f'/students/{mine.id}', headers=me)
    assert r.status_code == 200
    assert r.json()['profile_id'] == mine.profile_id
    r = client.get(f'/students/{theirs.id}', headers=me)
    assert r.status_code == 403
    assert r.json() == {'detail': 'Forbidden resource'}


def test_faculty_reads_any_student(client, make_profile, make_student, auth_headers):
    student = make_student()
    faculty = make_profile(role=Role.FACULTY)
    assert client.get(f'/students/{student.id}', headers=auth_headers(faculty)).status_code == 200
    assert len(client.get('/students', headers=auth_headers(faculty)).json()) == 1


def test_guest_cannot_list_students(client, make_profile, auth_headers):
    assert client.get('/students', headers=auth_headers(make_profile())).status_code == 403


def test_student_updates_own_record_only(client, make_student, auth_headers):
    mine = make_student()
    theirs = make_student()
    me = auth_headers(mine.profile)
    r = client.patch(f'/students/{mine.id}', json={'gpa': 3.7}, headers=me)
    assert r.status_code == 200
    assert r.json()['gpa'] == 3.7
    assert client.patch(f'/students/{theirs.id}', json={'gpa': 1.0}, headers=me).status_code == 403


def test_gpa_out_of_range(client, make_student, auth_headers):
    student = make_student()
    r = client.patch(f'/students/{student.id}', json={'gpa': 4.5}, headers=auth_headers(student.profile))
    assert r.status_code == 400
    assert r.json()['errors'][0]['field'] == 'gpa'


def test_create_student_is_public(client, make_profile):
    profile = make_profile(role=Role.STUDENT)
    r = client.post('/students', json={'enrollment_date': '2024-09-01', 'profile_id': profile.id})
    assert r.status_code == 201
    assert r.json()['profile']['email'] == profile.email


def test_create_student_with_missing_department(client, make_profile):
    profile = make_profile(role=Role.STUDENT)
    r = client.post('/students', json={'enrollment_date': '2024-09-01', 'profile_id': profile.id, 'department_id': 9})
    assert r.status_code == 404
    assert r.json()['detail'] == 'Department with ID 9 not found'


def test_enrollment_flow(client, make_student, make_course, auth_headers):
    student = make_student()
    a = make_course(title='A')
    b = make_course(title='B')
    me = auth_headers(student.profile)
    r = client.post(f'/students/{student.id}/courses/{a.id}', headers=me)
    assert r.status_code == 200
    # enrolling twice is a no-op
    r = client.post(f'/students/{student.id}/courses/{a.id}', headers=me)
    assert [c['id'] for c in r.json()['courses']] == [a.id]
    r = client.patch(f'/students/{student.id}/courses', json=[a.id, b.id], headers=me)
    assert sorted(c['id'] for c in r.json()['courses']) == [a.id, b.id]
    r = client.get(f'/students/{student.id}/courses', headers=me)
    assert len(r.json()) == 2
    r = client.delete(f'/students/{student.id}/courses/{a.id}', headers=me)
    assert [c['id'] for c in r.json()['courses']] == [b.id]


def test_cannot_enroll_someone_else(client, make_student, make_course, auth_headers):
    mine = make_student()
    theirs = make_student()
    course = make_course()
    r = client.post(f'/students/{theirs.id}/courses/{course.id}', headers=auth_headers(mine.profile))
    assert r.status_code == 403


def test_unenroll_without_courses(client, make_student, make_course, auth_headers):
    student = make_student()
    course = make_course()
    r = client.delete(f'/students/{student.id}/courses/{course.id}', headers=auth_headers(student.profile))
    assert r.status_code == 404
    assert r.json()['detail'] == f'Student with ID {student.id} is not assigned to any courses'


def test_only_admin_deletes_students(client, make_profile, make_student, auth_headers):
    student = make_student()
    assert client.delete(f'/students/{student.id}', headers=auth_headers(student.profile)).status_code == 403
    admin = make_profile(role=Role.ADMIN)
    assert client.delete(f'/students/{student.id}', headers=auth_headers(admin)).status_code == 204


def test_list_filters_by_name(client, session, make_profile, make_student, auth_headers):
    ada = make_profile(role=Role.STUDENT)
    ada.first_name = 'Ada'
    session.add(ada)
    session.commit()
    make_student(profile=ada)
    make_student()
    faculty = auth_headers(make_profile(role=Role.FACULTY))
    r = client.get('/students?name=ADA', headers=faculty)
    assert [s['profile_id'] for s in r.json()] == [ada.id]


def test_create_student_with_missing_profile_writes_nothing(client, session):
    r = client.post('/students', json={'enrollment_date': '2024-09-01', 'profile_id': 77})
    assert r.status_code == 404
    assert r.json()['detail'] == 'Profile with ID 77 not found'
    assert session.exec(select(models.Student)).all() == []


def test_batch_replace_with_unknown_course_keeps_enrollment(client, session, make_student, make_course, auth_headers):
    student = make_student()
    a = make_course(title='A')
    b = make_course(title='B')
    me = auth_headers(student.profile)
    client.post(f'/students/{student.id}/courses/{a.id}', headers=me)
    r = client.patch(f'/students/{student.id}/courses', json=[b.id, 999], headers=me)
    assert r.status_code == 404
    assert r.json()['detail'] == 'Courses with IDs 999 not found'
    r = client.get(f'/students/{student.id}/courses', headers=me)
    assert [c['id'] for c in r.json()] == [a.id]
    assert len(session.exec(select(models.StudentCourseLink)).all()) == 1
