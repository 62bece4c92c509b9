from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Response
from sqlmodel import Session

from .. import policies, schemas, services
from ..database import get_session
from ..guards import PoliciesGuard

router = APIRouter()

read_guard = [Depends(PoliciesGuard(policies.read_lecturer))]
update_guard = [Depends(PoliciesGuard(policies.update_lecturer))]


@router.post('', response_model=schemas.LecturerOut, status_code=201)
def create_lecturer(payload: schemas.LecturerCreate, db: Session = Depends(get_session)):
    """Create the lecturer record for an existing profile (public)."""
    return services.LecturerService(db).create(payload)


@router.get('', response_model=List[schemas.LecturerOut], dependencies=read_guard)
def list_lecturers(name: Optional[str] = None, db: Session = Depends(get_session)):
    return services.LecturerService(db).find_all(name)


@router.get('/{lecturer_id}', response_model=schemas.LecturerOut, dependencies=read_guard)
def get_lecturer(lecturer_id: int, db: Session = Depends(get_session)):
    return services.LecturerService(db).find_one(lecturer_id)


@router.patch('/{lecturer_id}', response_model=schemas.LecturerOut, dependencies=update_guard)
def update_lecturer(lecturer_id: int, payload: schemas.LecturerUpdate, db: Session = Depends(get_session)):
    return services.LecturerService(db).update(lecturer_id, payload)


@router.delete('/{lecturer_id}', status_code=204, dependencies=[Depends(PoliciesGuard(policies.delete_lecturer))])
def delete_lecturer(lecturer_id: int, db: Session = Depends(get_session)):
    services.LecturerService(db).remove(lecturer_id)
    return Response(status_code=204)


@router.get('/{lecturer_id}/courses', response_model=List[schemas.CourseOut], dependencies=read_guard)
def get_lecturer_courses(lecturer_id: int, db: Session = Depends(get_session)):
    return services.LecturerService(db).get_lecturer_courses(lecturer_id)


@router.post('/{lecturer_id}/courses/{course_id}', response_model=schemas.LecturerWithCoursesOut, dependencies=update_guard)
def assign_lecturer_to_course(lecturer_id: int, course_id: int, db: Session = Depends(get_session)):
    """Assign a course; assigning an already assigned course changes nothing."""
    return services.LecturerService(db).assign_lecturer_to_course(lecturer_id, course_id)


@router.delete('/{lecturer_id}/courses/{course_id}', response_model=schemas.LecturerWithCoursesOut, dependencies=update_guard)
def unassign_lecturer_from_course(lecturer_id: int, course_id: int, db: Session = Depends(get_session)):
    return services.LecturerService(db).unassign_lecturer_from_course(lecturer_id, course_id)


@router.patch('/{lecturer_id}/courses', response_model=schemas.LecturerWithCoursesOut, dependencies=update_guard)
def update_lecturer_courses(lecturer_id: int, course_ids: List[int] = Body(...), db: Session = Depends(get_session)):
    """Replace the lecturer's course set (batch assignment)."""
    return services.LecturerService(db).update_lecturer_courses(lecturer_id, course_ids)
