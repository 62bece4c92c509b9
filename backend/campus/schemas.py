"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
the route handlers and tests. `*Out` models never include the password or
the refresh-token hash of a profile.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from .models import Role


class SignInIn(BaseModel):
    """Payload for `/auth/signin`."""
    email: EmailStr
    password: str = Field(min_length=1)


class TokensOut(BaseModel):
    """Authentication response containing an access/refresh token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class ProfileCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: EmailStr = Field(max_length=100)
    password: str = Field(min_length=1, max_length=100)
    role: Role = Role.GUEST


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[EmailStr] = Field(default=None, max_length=100)
    password: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[Role] = None


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime


class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    head_of_department: Optional[str] = None


class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    head_of_department: Optional[str] = None


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    head_of_department: Optional[str] = None


class _CourseDates(BaseModel):
    @model_validator(mode="after")
    def _check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CourseCreate(_CourseDates):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    credits: int = Field(default=0, ge=0)
    duration: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    department_id: Optional[int] = None


class CourseUpdate(_CourseDates):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    credits: Optional[int] = Field(default=None, ge=0)
    duration: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    department_id: Optional[int] = None


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    credits: int
    duration: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    department_id: Optional[int] = None
    department: Optional[DepartmentOut] = None


class StudentCreate(BaseModel):
    enrollment_date: date
    degree_program: Optional[str] = None
    gpa: Optional[float] = Field(default=None, ge=0, le=4.0)
    department_id: Optional[int] = None
    profile_id: int


class StudentUpdate(BaseModel):
    enrollment_date: Optional[date] = None
    degree_program: Optional[str] = None
    gpa: Optional[float] = Field(default=None, ge=0, le=4.0)
    department_id: Optional[int] = None


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    enrollment_date: date
    degree_program: Optional[str] = None
    gpa: Optional[float] = None
    department_id: Optional[int] = None
    profile_id: int
    profile: Optional[ProfileOut] = None


class LecturerCreate(BaseModel):
    employee_id: str = Field(min_length=1)
    specialization: str = Field(min_length=1)
    bio: Optional[str] = None
    office_location: Optional[str] = None
    phone_number: Optional[str] = None
    profile_id: int


class LecturerUpdate(BaseModel):
    employee_id: Optional[str] = Field(default=None, min_length=1)
    specialization: Optional[str] = Field(default=None, min_length=1)
    bio: Optional[str] = None
    office_location: Optional[str] = None
    phone_number: Optional[str] = None


class LecturerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str
    specialization: str
    bio: Optional[str] = None
    office_location: Optional[str] = None
    phone_number: Optional[str] = None
    profile_id: int
    profile: Optional[ProfileOut] = None


class LecturerWithCoursesOut(LecturerOut):
    courses: List[CourseOut] = []


class StudentWithCoursesOut(StudentOut):
    courses: List[CourseOut] = []
