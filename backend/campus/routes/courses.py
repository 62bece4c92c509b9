from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from .. import policies, schemas, services
from ..database import get_session
from ..guards import PoliciesGuard

router = APIRouter()

read_guard = [Depends(PoliciesGuard(policies.read_course))]
update_guard = [Depends(PoliciesGuard(policies.update_course))]


@router.post('', response_model=schemas.CourseOut, status_code=201, dependencies=[Depends(PoliciesGuard(policies.create_course))])
def create_course(payload: schemas.CourseCreate, db: Session = Depends(get_session)):
    return services.CourseService(db).create(payload)


@router.get('', response_model=List[schemas.CourseOut], dependencies=read_guard)
def list_courses(search: Optional[str] = None, db: Session = Depends(get_session)):
    """List courses; `search` matches title or description, case-insensitively."""
    return services.CourseService(db).find_all(search)


@router.get('/{course_id}', response_model=schemas.CourseOut, dependencies=read_guard)
def get_course(course_id: int, db: Session = Depends(get_session)):
    return services.CourseService(db).find_one(course_id)


@router.patch('/{course_id}', response_model=schemas.CourseOut, dependencies=update_guard)
def update_course(course_id: int, payload: schemas.CourseUpdate, db: Session = Depends(get_session)):
    return services.CourseService(db).update(course_id, payload)


@router.delete('/{course_id}', status_code=204, dependencies=[Depends(PoliciesGuard(policies.delete_course))])
def delete_course(course_id: int, db: Session = Depends(get_session)):
    services.CourseService(db).remove(course_id)
    return Response(status_code=204)


@router.get(
    '/{course_id}/students',
    response_model=List[schemas.StudentOut],
    dependencies=[Depends(PoliciesGuard(policies.read_course, policies.read_student))],
)
def get_enrolled_students(course_id: int, db: Session = Depends(get_session)):
    """Enrolled students; requires read access to both courses and students."""
    return services.CourseService(db).get_enrolled_students(course_id)


@router.post('/{course_id}/students/{student_id}', response_model=schemas.CourseOut, dependencies=update_guard)
def add_student_to_course(course_id: int, student_id: int, db: Session = Depends(get_session)):
    return services.CourseService(db).add_student_to_course(course_id, student_id)


@router.delete('/{course_id}/students/{student_id}', response_model=schemas.CourseOut, dependencies=update_guard)
def remove_student_from_course(course_id: int, student_id: int, db: Session = Depends(get_session)):
    return services.CourseService(db).remove_student_from_course(course_id, student_id)
