"""Business logic services used by the HTTP routes.

This module holds one service class per entity plus `AuthService`.
Services coordinate repositories, validate references between entities
and raise the typed errors from `campus.errors`:

- a missing target or related row raises `NotFoundError`,
- a duplicate unique value raises `ConflictError`,
- any other database failure is rolled back, logged and re-raised as a
  `StorageError` naming the operation ("Failed to update lecturer with id 1").
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from . import models, repositories, schemas, tokens
from .errors import AuthenticationError, ConflictError, NotFoundError, StorageError, ValidationError

logger = logging.getLogger("campus.services")


@contextmanager
def storage_guard(session: Session, message: str, conflict: Optional[str] = None):
    """Translate database failures raised inside the block into typed errors."""
    try:
        yield
    except IntegrityError as exc:
        session.rollback()
        if conflict is not None:
            raise ConflictError(conflict) from exc
        logger.error("%s: %s", message, exc)
        raise StorageError(message) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("%s: %s", message, exc)
        raise StorageError(message) from exc


def _apply_patch(obj, changes: Dict[str, object], required: Iterable[str] = ()) -> None:
    """Copy `changes` onto `obj`; explicit nulls on `required` fields are rejected."""
    nulled = {name: "may not be null" for name in required if name in changes and changes[name] is None}
    if nulled:
        raise ValidationError("Invalid update payload", fields=nulled)
    for name, value in changes.items():
        setattr(obj, name, value)


class ProfileService:
    """Profile CRUD; passwords are hashed on create and on update."""

    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.ProfileRepository(session)

    def create(self, dto: schemas.ProfileCreate) -> models.Profile:
        taken = f"Profile with email {dto.email} already exists"
        with storage_guard(self.session, "Failed to create profile", conflict=taken):
            if self.repo.get_by_email(dto.email):
                raise ConflictError(taken)
            profile = models.Profile(
                first_name=dto.first_name,
                last_name=dto.last_name,
                email=dto.email,
                password=tokens.hash_password(dto.password),
                role=dto.role,
            )
            return self.repo.add(profile)

    def find_all(self, email: Optional[str] = None) -> List[models.Profile]:
        with storage_guard(self.session, "Failed to list profiles"):
            return self.repo.list(email)

    def find_one(self, profile_id: int) -> models.Profile:
        with storage_guard(self.session, f"Failed to find profile with id {profile_id}"):
            profile = self.repo.get(profile_id)
        if profile is None:
            raise NotFoundError(f"No profile found with id {profile_id}")
        return profile

    def update(self, profile_id: int, dto: schemas.ProfileUpdate) -> models.Profile:
        changes = dto.model_dump(exclude_unset=True)
        taken = f"Profile with email {changes['email']} already exists" if changes.get("email") else None
        with storage_guard(self.session, f"Failed to update profile with id {profile_id}", conflict=taken):
            profile = self.find_one(profile_id)
            if changes.get("email") and changes["email"] != profile.email:
                existing = self.repo.get_by_email(changes["email"])
                if existing is not None and existing.id != profile.id:
                    raise ConflictError(taken)
            if changes.get("password") is not None:
                changes["password"] = tokens.hash_password(changes["password"])
            _apply_patch(profile, changes, required=("first_name", "last_name", "email", "password", "role"))
            return self.repo.save(profile)

    def remove(self, profile_id: int) -> None:
        with storage_guard(self.session, f"Failed to remove profile with id {profile_id}"):
            self.repo.delete(self.find_one(profile_id))


class DepartmentService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.DepartmentRepository(session)

    def create(self, dto: schemas.DepartmentCreate) -> models.Department:
        with storage_guard(self.session, "Failed to create department"):
            return self.repo.add(models.Department(**dto.model_dump()))

    def find_all(self, name: Optional[str] = None) -> List[models.Department]:
        with storage_guard(self.session, "Failed to list departments"):
            return self.repo.list(name)

    def find_one(self, department_id: int) -> models.Department:
        with storage_guard(self.session, f"Failed to find department with id {department_id}"):
            department = self.repo.get(department_id)
        if department is None:
            raise NotFoundError(f"No department found with id {department_id}")
        return department

    def update(self, department_id: int, dto: schemas.DepartmentUpdate) -> models.Department:
        with storage_guard(self.session, f"Failed to update department with id {department_id}"):
            department = self.find_one(department_id)
            _apply_patch(department, dto.model_dump(exclude_unset=True), required=("name",))
            return self.repo.save(department)

    def remove(self, department_id: int) -> None:
        with storage_guard(self.session, f"Failed to remove department with id {department_id}"):
            self.repo.delete(self.find_one(department_id))


def _require_department(session: Session, department_id: Optional[int]) -> None:
    if department_id is None:
        return
    if repositories.DepartmentRepository(session).get(department_id) is None:
        raise NotFoundError(f"Department with ID {department_id} not found")


class CourseService:
    """Course CRUD plus the course-side view of student enrollment."""

    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.CourseRepository(session)
        self.student_repo = repositories.StudentRepository(session)

    def create(self, dto: schemas.CourseCreate) -> models.Course:
        with storage_guard(self.session, "Failed to create course"):
            _require_department(self.session, dto.department_id)
            return self.repo.add(models.Course(**dto.model_dump()))

    def find_all(self, search: Optional[str] = None) -> List[models.Course]:
        with storage_guard(self.session, "Failed to list courses"):
            return self.repo.list(search)

    def find_one(self, course_id: int) -> models.Course:
        with storage_guard(self.session, f"Failed to find course with id {course_id}"):
            course = self.repo.get(course_id)
        if course is None:
            raise NotFoundError(f"No course found with id {course_id}")
        return course

    def update(self, course_id: int, dto: schemas.CourseUpdate) -> models.Course:
        changes = dto.model_dump(exclude_unset=True)
        with storage_guard(self.session, f"Failed to update course with id {course_id}"):
            course = self.find_one(course_id)
            if changes.get("department_id") is not None:
                _require_department(self.session, changes["department_id"])
            start = changes.get("start_date", course.start_date)
            end = changes.get("end_date", course.end_date)
            if start and end and end < start:
                raise ValidationError("Invalid update payload", fields={"end_date": "must not be before start_date"})
            _apply_patch(course, changes, required=("title", "credits"))
            return self.repo.save(course)

    def remove(self, course_id: int) -> None:
        with storage_guard(self.session, f"Failed to remove course with id {course_id}"):
            self.repo.delete(self.find_one(course_id))

    def _get_course(self, course_id: int) -> models.Course:
        course = self.repo.get(course_id)
        if course is None:
            raise NotFoundError(f"Course with ID {course_id} not found")
        return course

    def _get_student(self, student_id: int) -> models.Student:
        student = self.student_repo.get(student_id)
        if student is None:
            raise NotFoundError(f"Student with ID {student_id} not found")
        return student

    def get_enrolled_students(self, course_id: int) -> List[models.Student]:
        with storage_guard(self.session, f"Failed to list students of course with id {course_id}"):
            return list(self._get_course(course_id).students or [])

    def add_student_to_course(self, course_id: int, student_id: int) -> models.Course:
        with storage_guard(self.session, f"Failed to add student {student_id} to course with id {course_id}"):
            course = self._get_course(course_id)
            student = self._get_student(student_id)
            if any(s.id == student.id for s in course.students):
                return course
            course.students.append(student)
            return self.repo.save(course)

    def remove_student_from_course(self, course_id: int, student_id: int) -> models.Course:
        with storage_guard(self.session, f"Failed to remove student {student_id} from course with id {course_id}"):
            course = self._get_course(course_id)
            self._get_student(student_id)
            if not course.students:
                raise NotFoundError(f"Course with ID {course_id} has no enrolled students")
            remaining = [s for s in course.students if s.id != student_id]
            if len(remaining) == len(course.students):
                raise NotFoundError(f"Student with ID {student_id} is not enrolled in course with ID {course_id}")
            course.students = remaining
            return self.repo.save(course)


class _CourseMembershipService:
    """Course assignment shared by students and lecturers.

    Subclasses set `label` ("Student"/"Lecturer") and `repo`.
    """
    label: str

    def __init__(self, session: Session):
        self.session = session
        self.course_repo = repositories.CourseRepository(session)
        self.profile_repo = repositories.ProfileRepository(session)

    def _require_profile(self, profile_id: int) -> models.Profile:
        profile = self.profile_repo.get(profile_id)
        if profile is None:
            raise NotFoundError(f"Profile with ID {profile_id} not found")
        if self.repo.get_by_profile(profile_id) is not None:
            raise ConflictError(f"Profile with ID {profile_id} already has a {self.label.lower()} record")
        return profile

    def find_all(self, name: Optional[str] = None) -> list:
        with storage_guard(self.session, f"Failed to list {self.label.lower()}s"):
            return self.repo.list(name)

    def find_one(self, obj_id: int):
        with storage_guard(self.session, f"Failed to find {self.label.lower()} with id {obj_id}"):
            obj = self.repo.get(obj_id)
        if obj is None:
            raise NotFoundError(f"No {self.label.lower()} found with id {obj_id}")
        return obj

    def remove(self, obj_id: int) -> None:
        with storage_guard(self.session, f"Failed to remove {self.label.lower()} with id {obj_id}"):
            self.repo.delete(self.find_one(obj_id))

    def _get_owner(self, obj_id: int):
        obj = self.repo.get(obj_id)
        if obj is None:
            raise NotFoundError(f"{self.label} with ID {obj_id} not found")
        return obj

    def get_courses(self, obj_id: int) -> List[models.Course]:
        with storage_guard(self.session, f"Failed to list courses of {self.label.lower()} with id {obj_id}"):
            return list(self._get_owner(obj_id).courses or [])

    def assign_course(self, obj_id: int, course_id: int):
        """Add `course_id` to the owner's courses; already assigned is a no-op."""
        with storage_guard(self.session, f"Failed to assign course {course_id} to {self.label.lower()} with id {obj_id}"):
            owner = self._get_owner(obj_id)
            course = self.course_repo.get(course_id)
            if course is None:
                raise NotFoundError(f"Course with ID {course_id} not found")
            if any(c.id == course.id for c in owner.courses):
                return owner
            owner.courses.append(course)
            return self.repo.save(owner)

    def unassign_course(self, obj_id: int, course_id: int):
        with storage_guard(self.session, f"Failed to unassign course {course_id} from {self.label.lower()} with id {obj_id}"):
            owner = self._get_owner(obj_id)
            if not owner.courses:
                raise NotFoundError(f"{self.label} with ID {obj_id} is not assigned to any courses")
            remaining = [c for c in owner.courses if c.id != course_id]
            if len(remaining) == len(owner.courses):
                raise NotFoundError(f"{self.label} with ID {obj_id} is not assigned to course with ID {course_id}")
            owner.courses = remaining
            return self.repo.save(owner)

    def replace_courses(self, obj_id: int, course_ids: List[int]):
        """Replace the owner's whole course set.

        Every id must resolve before anything is written; otherwise a
        `NotFoundError` lists the ids that were not found.
        """
        with storage_guard(self.session, f"Failed to update courses for {self.label.lower()} with id {obj_id}"):
            owner = self._get_owner(obj_id)
            wanted = list(dict.fromkeys(course_ids))
            found = self.course_repo.get_many(wanted)
            found_ids = {c.id for c in found}
            missing = [str(cid) for cid in wanted if cid not in found_ids]
            if missing:
                raise NotFoundError(f"Courses with IDs {', '.join(missing)} not found")
            by_id = {c.id: c for c in found}
            owner.courses = [by_id[cid] for cid in wanted]
            return self.repo.save(owner)


class StudentService(_CourseMembershipService):
    label = "Student"

    def __init__(self, session: Session):
        super().__init__(session)
        self.repo = repositories.StudentRepository(session)

    def create(self, dto: schemas.StudentCreate) -> models.Student:
        with storage_guard(self.session, "Failed to create student"):
            self._require_profile(dto.profile_id)
            _require_department(self.session, dto.department_id)
            return self.repo.add(models.Student(**dto.model_dump()))

    def update(self, student_id: int, dto: schemas.StudentUpdate) -> models.Student:
        changes = dto.model_dump(exclude_unset=True)
        with storage_guard(self.session, f"Failed to update student with id {student_id}"):
            student = self.find_one(student_id)
            if changes.get("department_id") is not None:
                _require_department(self.session, changes["department_id"])
            _apply_patch(student, changes, required=("enrollment_date",))
            return self.repo.save(student)

    def get_student_courses(self, student_id: int) -> List[models.Course]:
        return self.get_courses(student_id)

    def enroll_student_in_course(self, student_id: int, course_id: int) -> models.Student:
        return self.assign_course(student_id, course_id)

    def unenroll_student_from_course(self, student_id: int, course_id: int) -> models.Student:
        return self.unassign_course(student_id, course_id)

    def update_student_courses(self, student_id: int, course_ids: List[int]) -> models.Student:
        return self.replace_courses(student_id, course_ids)


class LecturerService(_CourseMembershipService):
    label = "Lecturer"

    def __init__(self, session: Session):
        super().__init__(session)
        self.repo = repositories.LecturerRepository(session)

    def create(self, dto: schemas.LecturerCreate) -> models.Lecturer:
        with storage_guard(self.session, "Failed to create lecturer"):
            self._require_profile(dto.profile_id)
            return self.repo.add(models.Lecturer(**dto.model_dump()))

    def update(self, lecturer_id: int, dto: schemas.LecturerUpdate) -> models.Lecturer:
        with storage_guard(self.session, f"Failed to update lecturer with id {lecturer_id}"):
            lecturer = self.find_one(lecturer_id)
            _apply_patch(lecturer, dto.model_dump(exclude_unset=True), required=("employee_id", "specialization"))
            return self.repo.save(lecturer)

    def get_lecturer_courses(self, lecturer_id: int) -> List[models.Course]:
        return self.get_courses(lecturer_id)

    def assign_lecturer_to_course(self, lecturer_id: int, course_id: int) -> models.Lecturer:
        return self.assign_course(lecturer_id, course_id)

    def unassign_lecturer_from_course(self, lecturer_id: int, course_id: int) -> models.Lecturer:
        return self.unassign_course(lecturer_id, course_id)

    def update_lecturer_courses(self, lecturer_id: int, course_ids: List[int]) -> models.Lecturer:
        return self.replace_courses(lecturer_id, course_ids)


class AuthService:
    """Sign-in, sign-out and refresh-token rotation."""

    def __init__(self, session: Session):
        self.session = session
        self.profile_repo = repositories.ProfileRepository(session)

    def _issue_tokens(self, profile: models.Profile) -> Dict[str, str]:
        access_token = tokens.create_access_token(profile)
        refresh_token = tokens.create_refresh_token(profile)
        profile.hashed_refresh_token = tokens.hash_password(refresh_token)
        self.profile_repo.save(profile)
        return {"access_token": access_token, "refresh_token": refresh_token}

    def sign_in(self, email: str, password: str) -> Dict[str, str]:
        """Verify credentials and return a fresh access/refresh token pair.

        Unknown email and wrong password fail the same way so callers
        cannot probe which emails exist.
        """
        with storage_guard(self.session, "Failed to sign in"):
            profile = self.profile_repo.get_by_email(email)
            if profile is None or not tokens.verify_password(password, profile.password):
                raise AuthenticationError("Invalid credentials")
            issued = self._issue_tokens(profile)
        logger.info("sign_in profile_id=%s", profile.id)
        return issued

    def sign_out(self, profile_id: int) -> None:
        with storage_guard(self.session, f"Failed to sign out profile with id {profile_id}"):
            profile = self.profile_repo.get(profile_id)
            if profile is None:
                raise NotFoundError(f"No profile found with id {profile_id}")
            if profile.hashed_refresh_token is None:
                return
            profile.hashed_refresh_token = None
            self.profile_repo.save(profile)
        logger.info("sign_out profile_id=%s", profile_id)

    def refresh(self, profile_id: int, refresh_token: str) -> Dict[str, str]:
        """Rotate the refresh token: the presented token is consumed."""
        payload = tokens.decode_refresh_token(refresh_token)
        if str(payload.get("sub")) != str(profile_id):
            raise AuthenticationError("Access denied")
        with storage_guard(self.session, f"Failed to refresh tokens for profile with id {profile_id}"):
            profile = self.profile_repo.get(profile_id)
            if profile is None or not profile.hashed_refresh_token:
                raise AuthenticationError("Access denied")
            if not tokens.verify_password(refresh_token, profile.hashed_refresh_token):
                raise AuthenticationError("Access denied")
            return self._issue_tokens(profile)
