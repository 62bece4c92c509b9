from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from .. import policies, schemas, services
from ..database import get_session
from ..guards import PoliciesGuard

router = APIRouter()


@router.post('', response_model=schemas.DepartmentOut, status_code=201, dependencies=[Depends(PoliciesGuard(policies.create_department))])
def create_department(payload: schemas.DepartmentCreate, db: Session = Depends(get_session)):
    return services.DepartmentService(db).create(payload)


@router.get('', response_model=List[schemas.DepartmentOut], dependencies=[Depends(PoliciesGuard(policies.read_department))])
def list_departments(name: Optional[str] = None, db: Session = Depends(get_session)):
    return services.DepartmentService(db).find_all(name)


@router.get('/{department_id}', response_model=schemas.DepartmentOut, dependencies=[Depends(PoliciesGuard(policies.read_department))])
def get_department(department_id: int, db: Session = Depends(get_session)):
    return services.DepartmentService(db).find_one(department_id)


@router.patch('/{department_id}', response_model=schemas.DepartmentOut, dependencies=[Depends(PoliciesGuard(policies.update_department))])
def update_department(department_id: int, payload: schemas.DepartmentUpdate, db: Session = Depends(get_session)):
    return services.DepartmentService(db).update(department_id, payload)


@router.delete('/{department_id}', status_code=204, dependencies=[Depends(PoliciesGuard(policies.delete_department))])
def delete_department(department_id: int, db: Session = Depends(get_session)):
    services.DepartmentService(db).remove(department_id)
    return Response(status_code=204)
