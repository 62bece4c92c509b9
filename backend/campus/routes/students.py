from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request, Response
from sqlmodel import Session

from .. import models, policies, schemas, services
from ..abilities import Action, Subject
from ..auth import get_current_user
from ..database import get_session
from ..guards import PoliciesGuard, ensure_owner

router = APIRouter()

read_guard = [Depends(PoliciesGuard(policies.read_student))]
update_guard = [Depends(PoliciesGuard(policies.update_student))]


def _check_student_owner(svc: services.StudentService, student_id: int, user: models.Profile, action: Action, request: Request) -> models.Student:
    """Load the student row and compare its profile with the requester."""
    student = svc.find_one(student_id)
    ensure_owner(user, Subject.STUDENT, action, student.profile_id, request)
    return student


@router.post('', response_model=schemas.StudentOut, status_code=201)
def create_student(payload: schemas.StudentCreate, db: Session = Depends(get_session)):
    """Create the student record for an existing profile (public)."""
    return services.StudentService(db).create(payload)


@router.get('', response_model=List[schemas.StudentOut], dependencies=read_guard)
def list_students(name: Optional[str] = None, db: Session = Depends(get_session)):
    return services.StudentService(db).find_all(name)


@router.get('/{student_id}', response_model=schemas.StudentOut, dependencies=read_guard)
def get_student(student_id: int, request: Request, db: Session = Depends(get_session), user: models.Profile = Depends(get_current_user)):
    """Students may only view their own record; faculty and admins view all."""
    return _check_student_owner(services.StudentService(db), student_id, user, Action.READ, request)


@router.patch('/{student_id}', response_model=schemas.StudentOut, dependencies=update_guard)
def update_student(
    student_id: int,
    payload: schemas.StudentUpdate,
    request: Request,
    db: Session = Depends(get_session),
    user: models.Profile = Depends(get_current_user),
):
    svc = services.StudentService(db)
    _check_student_owner(svc, student_id, user, Action.UPDATE, request)
    return svc.update(student_id, payload)


@router.delete('/{student_id}', status_code=204, dependencies=[Depends(PoliciesGuard(policies.delete_student))])
def delete_student(student_id: int, db: Session = Depends(get_session)):
    services.StudentService(db).remove(student_id)
    return Response(status_code=204)


@router.get('/{student_id}/courses', response_model=List[schemas.CourseOut], dependencies=read_guard)
def get_student_courses(student_id: int, request: Request, db: Session = Depends(get_session), user: models.Profile = Depends(get_current_user)):
    svc = services.StudentService(db)
    _check_student_owner(svc, student_id, user, Action.READ, request)
    return svc.get_student_courses(student_id)


@router.post('/{student_id}/courses/{course_id}', response_model=schemas.StudentWithCoursesOut, dependencies=update_guard)
def enroll_student_in_course(
    student_id: int,
    course_id: int,
    request: Request,
    db: Session = Depends(get_session),
    user: models.Profile = Depends(get_current_user),
):
    svc = services.StudentService(db)
    _check_student_owner(svc, student_id, user, Action.UPDATE, request)
    return svc.enroll_student_in_course(student_id, course_id)


@router.delete('/{student_id}/courses/{course_id}', response_model=schemas.StudentWithCoursesOut, dependencies=update_guard)
def unenroll_student_from_course(
    student_id: int,
    course_id: int,
    request: Request,
    db: Session = Depends(get_session),
    user: models.Profile = Depends(get_current_user),
):
    svc = services.StudentService(db)
    _check_student_owner(svc, student_id, user, Action.UPDATE, request)
    return svc.unenroll_student_from_course(student_id, course_id)


@router.patch('/{student_id}/courses', response_model=schemas.StudentWithCoursesOut, dependencies=update_guard)
def update_student_courses(
    student_id: int,
    request: Request,
    course_ids: List[int] = Body(...),
    db: Session = Depends(get_session),
    user: models.Profile = Depends(get_current_user),
):
    """Replace the student's course set with `course_ids` (all must exist)."""
    svc = services.StudentService(db)
    _check_student_owner(svc, student_id, user, Action.UPDATE, request)
    return svc.update_student_courses(student_id, course_ids)
