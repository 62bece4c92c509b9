"""Demo data seeding.

`SeedService.seed` wipes every campus table inside a single transaction
and then creates departments, courses, faculty profiles with lecturer
records and student profiles with student records, all generated with
Faker. Seeded profiles share the password `password`.
"""

import logging
import random
from datetime import timedelta
from typing import Dict, List, Optional

from faker import Faker
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import models, tokens

logger = logging.getLogger("campus.seed")

SEED_PASSWORD = "password"

DEPARTMENT_NAMES = [
    'Computer Science',
    'Mathematics',
    'Physics',
    'Biology',
    'Chemistry',
    'Psychology',
    'Business Administration',
    'Engineering',
]

COURSE_TITLES = [
    'Introduction to Programming',
    'Data Structures and Algorithms',
    'Database Systems',
    'Machine Learning',
    'Web Development',
    'Linear Algebra',
    'Calculus I',
    'Quantum Physics',
    'Organic Chemistry',
    'Human Physiology',
    'Cognitive Psychology',
    'Financial Accounting',
    'Marketing Management',
    'Electrical Engineering Fundamentals',
    'Mechanical Engineering Principles',
]

SPECIALIZATIONS = [
    'Computer Science',
    'Software Engineering',
    'Data Science',
    'Machine Learning',
    'Mathematics',
    'Physics',
    'Chemistry',
    'Biology',
    'Psychology',
    'Business Administration',
    'Finance',
    'Electrical Engineering',
    'Mechanical Engineering',
]

DEGREE_PROGRAMS = ['Bachelor of Science', 'Bachelor of Arts', 'Master of Science', 'PhD']

# link tables first, then rows holding foreign keys, then their targets
CLEAR_ORDER = [
    models.LecturerCourseLink,
    models.StudentCourseLink,
    models.Student,
    models.Lecturer,
    models.Profile,
    models.Course,
    models.Department,
]


class SeedService:
    """Reset the database to a generated demo data set."""

    def __init__(self, session: Session, seed: Optional[int] = None, lecturers: int = 10, students: int = 20):
        self.session = session
        self.fake = Faker()
        self.rng = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)
        self.lecturer_count = lecturers
        self.student_count = students

    def clear(self) -> None:
        """Delete every row from the campus tables in one transaction."""
        logger.info("Clearing existing data...")
        try:
            for model in CLEAR_ORDER:
                self.session.exec(delete(model))
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to clear tables")
            raise
        logger.info("All tables cleared successfully")

    def _pick_courses(self, courses: List[models.Course], low: int, high: int) -> List[models.Course]:
        count = min(len(courses), self.rng.randint(low, high))
        return self.rng.sample(courses, count)

    def _profile(self, role: models.Role, password_hash: str) -> models.Profile:
        first = self.fake.first_name()
        last = self.fake.last_name()
        return models.Profile(
            first_name=first,
            last_name=last,
            email=self.fake.unique.email(domain='university.edu'),
            password=password_hash,
            role=role,
        )

    def seed(self) -> Dict[str, int]:
        logger.info("Starting the seeding process...")
        self.clear()
        # one hash shared by every seeded profile
        password_hash = tokens.hash_password(SEED_PASSWORD)

        departments = []
        for name in DEPARTMENT_NAMES:
            department = models.Department(
                name=name,
                description=self.fake.paragraph(),
                head_of_department=f"Dr. {self.fake.name()}",
            )
            self.session.add(department)
            departments.append(department)
        self.session.flush()
        logger.info("Created %d departments", len(departments))

        courses = []
        for title in COURSE_TITLES:
            start = self.fake.date_between(start_date='-1y', end_date='today')
            course = models.Course(
                title=title,
                description=self.fake.paragraph(),
                credits=self.rng.randint(1, 5),
                duration=f"{self.rng.randint(8, 16)} weeks",
                start_date=start,
                end_date=start + timedelta(days=30 * self.rng.randint(3, 6)),
                department_id=self.rng.choice(departments).id,
            )
            self.session.add(course)
            courses.append(course)
        self.session.flush()
        logger.info("Created %d courses", len(courses))

        for _ in range(self.lecturer_count):
            lecturer = models.Lecturer(
                employee_id=f"EMP{self.rng.randint(1000, 9999)}",
                specialization=self.rng.choice(SPECIALIZATIONS),
                bio=self.fake.paragraph(),
                office_location=f"Room {self.rng.randint(100, 999)}",
                phone_number=self.fake.phone_number(),
                profile=self._profile(models.Role.FACULTY, password_hash),
                courses=self._pick_courses(courses, 2, 5),
            )
            self.session.add(lecturer)
        logger.info("Created %d lecturers with profiles", self.lecturer_count)

        for _ in range(self.student_count):
            student = models.Student(
                enrollment_date=self.fake.date_between(start_date='-4y', end_date='today'),
                degree_program=self.rng.choice(DEGREE_PROGRAMS),
                gpa=round(self.rng.uniform(2.0, 4.0), 2),
                department_id=self.rng.choice(departments).id,
                profile=self._profile(models.Role.STUDENT, password_hash),
                courses=self._pick_courses(courses, 3, 6),
            )
            self.session.add(student)
        logger.info("Created %d students with profiles", self.student_count)

        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Error during seeding")
            raise
        logger.info("Seeding completed successfully")
        return {
            'departments': len(departments),
            'courses': len(courses),
            'lecturers': self.lecturer_count,
            'students': self.student_count,
        }
