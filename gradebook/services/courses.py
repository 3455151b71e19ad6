from __future__ import annotations
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import CourseNotFoundError, CourseReferenceError, GradebookValidationError
from ..extensions import db
from ..models import Course, Enrollment, Exercise, Teacher
from .ingestion import CourseRequest

logger = logging.getLogger(__name__)


@dataclass
class CourseSummary:
    id: int
    code: str
    name: str
    description: Optional[str]
    teacher_name: str
    created_at: Optional[datetime]
    is_active: bool
    total_students: int
    total_exercises: int

    def to_dict(self):
        return asdict(self)


def _count(model, course_id):
    return (db.session.query(func.count(model.id))
            .filter(model.course_id == course_id, model.is_active.is_(True))
            .scalar())


def summarize(course: Course) -> CourseSummary:
    return CourseSummary(
        id=course.id,
        code=course.code,
        name=course.name,
        description=course.description,
        teacher_name=course.teacher.name,
        created_at=course.created_at,
        is_active=course.is_active,
        total_students=_count(Enrollment, course.id),
        total_exercises=_count(Exercise, course.id),
    )


def create_course(request: CourseRequest, teacher_id: int) -> Course:
    code = (request.code or "").strip()
    name = (request.name or "").strip()
    errors = []
    if not code:
        errors.append("Course code is required")
    if not name:
        errors.append("Course name is required")
    if errors:
        raise GradebookValidationError(errors)

    teacher = db.session.get(Teacher, teacher_id)
    if teacher is None:
        raise CourseReferenceError("Teacher not found")

    course = Course(code=code, name=name, description=(request.description or "").strip(),
                    teacher=teacher, is_active=True)
    db.session.add(course)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise CourseReferenceError(f"Course code {code} already exists") from e
    logger.info("Created course %s for teacher %s", code, teacher.id)
    return course


def deactivate_course(course_id: int, teacher_id: int) -> Course:
    course = db.session.get(Course, course_id)
    if course is None or course.teacher_id != teacher_id:
        raise CourseNotFoundError(f"Course {course_id} not found")
    course.is_active = False
    db.session.commit()
    logger.info("Deactivated course %s", course.code)
    return course


def teacher_courses(teacher_id: int) -> List[CourseSummary]:
    courses = (Course.query
               .filter_by(teacher_id=teacher_id, is_active=True)
               .order_by(Course.code).all())
    return [summarize(c) for c in courses]


def course_details(course_id: int) -> CourseSummary:
    course = db.session.get(Course, course_id)
    if course is None:
        raise CourseNotFoundError(f"Course {course_id} not found")
    return summarize(course)
