from __future__ import annotations
import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from ..errors import CourseReferenceError, GradebookValidationError, ParseRecoveryWarning
from ..extensions import db
from ..models import Course, Enrollment, Exercise, GradeRecord, Student, Teacher
from ..models.timestamps import utcnow
from .classifier import classify_grade
from .csv_format import detect_format
from .csv_parser import ParsedGradebook, parse_gradebook
from .identity import StudentResolver

logger = logging.getLogger(__name__)

COURSE_CREATE_RETRIES = 1
GENERIC_FAILURE = "The gradebook could not be processed; no changes were saved"


@dataclass
class CourseRequest:
    code: str
    name: str = ""
    description: str = ""


@dataclass
class GradebookUpload:
    filename: Optional[str]
    data: bytes


@dataclass
class IngestionResult:
    success: bool
    message: str
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    total_students: int = 0
    total_exercises: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)

    @classmethod
    def failed(cls, errors):
        return cls(success=False, message="Error processing CSV file", errors=list(errors))


def validate_upload(upload: Optional[GradebookUpload], request: CourseRequest):
    errors = []
    if upload is None or not upload.filename:
        errors.append("No file was provided")
    elif not upload.filename.lower().endswith(".csv"):
        errors.append("The file must be a CSV file")
    elif not upload.data:
        errors.append("The CSV file is empty")
    if not (request.code or "").strip():
        errors.append("Course code is required")
    if errors:
        raise GradebookValidationError(errors)


def ingest_gradebook(upload: Optional[GradebookUpload], request: CourseRequest,
                     teacher_id: Optional[int]) -> IngestionResult:
    """Load a gradebook CSV into a course, all or nothing.

    Re-uploading the same file is idempotent: exercises, enrollments and grade
    records are reused or overwritten, never duplicated. Any failure rolls the
    session back so no partial course update is ever visible.
    """
    try:
        validate_upload(upload, request)
        parsed = parse_gradebook(upload.data, detect_format(upload.data))
        if not parsed.columns:
            raise GradebookValidationError("The header row has no exercise columns")
    except GradebookValidationError as e:
        logger.info("Rejected gradebook upload for %r: %s", request.code, e)
        return IngestionResult.failed(e.messages)

    for attempt in range(COURSE_CREATE_RETRIES + 1):
        try:
            result = _apply(parsed, request, teacher_id)
            db.session.commit()
            return result
        except GradebookValidationError as e:
            db.session.rollback()
            return IngestionResult.failed(e.messages)
        except CourseReferenceError as e:
            db.session.rollback()
            logger.warning("Gradebook for %r refused: %s", request.code, e)
            return IngestionResult.failed([str(e)])
        except IntegrityError:
            db.session.rollback()
            # another writer created the course code first; run again against its row
            if attempt < COURSE_CREATE_RETRIES and _course_exists(request.code):
                logger.warning("Course %r was created concurrently, retrying", request.code)
                continue
            logger.exception("Integrity error while saving gradebook for %r", request.code)
            return IngestionResult.failed([GENERIC_FAILURE])
        except Exception:
            db.session.rollback()
            logger.exception("Unexpected error while saving gradebook for %r", request.code)
            return IngestionResult.failed([GENERIC_FAILURE])
    return IngestionResult.failed([GENERIC_FAILURE])


def _course_exists(code: str) -> bool:
    return Course.query.filter_by(code=code.strip()).first() is not None


def get_or_create_course(request: CourseRequest, teacher_id: Optional[int]) -> Course:
    teacher = db.session.get(Teacher, teacher_id) if teacher_id is not None else None
    if teacher is None:
        raise CourseReferenceError("Teacher not found")

    code = request.code.strip()
    course = Course.query.filter_by(code=code).one_or_none()
    if course is not None:
        if not course.is_active:
            raise CourseReferenceError(f"Course {code} is inactive")
        return course

    name = (request.name or "").strip()
    if not name:
        raise GradebookValidationError("Course name is required to create a course")
    course = Course(code=code, name=name, description=(request.description or "").strip(),
                    teacher=teacher, is_active=True)
    db.session.add(course)
    # surfaces a concurrent insert of the same code before anything else is written
    db.session.flush()
    logger.info("Created course %s (%r) for teacher %s", code, name, teacher.id)
    return course


def get_or_create_exercises(course: Course, parsed: ParsedGradebook,
                            warnings: List[ParseRecoveryWarning]) -> List[Exercise]:
    existing = {e.name: e for e in Exercise.query.filter_by(course_id=course.id)}
    exercises, seen = [], set()
    for name in parsed.exercise_names:
        if name in seen:
            warnings.append(ParseRecoveryWarning(
                f"exercise column {name!r} appears more than once; the last value wins"))
        seen.add(name)
        exercise = existing.get(name)
        if exercise is None:
            exercise = Exercise(course=course, name=name, description=f"Exercise: {name}",
                                max_score=100, is_active=True)
            db.session.add(exercise)
            existing[name] = exercise
        exercises.append(exercise)
    return exercises


def _apply(parsed: ParsedGradebook, request: CourseRequest,
           teacher_id: Optional[int]) -> IngestionResult:
    warnings = list(parsed.warnings)
    course = get_or_create_course(request, teacher_id)
    exercises = get_or_create_exercises(course, parsed, warnings)
    db.session.flush()

    resolver = StudentResolver(course)
    enrollments: Dict[Student, Enrollment] = {
        e.student: e for e in Enrollment.query.filter_by(course_id=course.id)
    }
    records: Dict[Tuple[Student, Exercise], GradeRecord] = {
        (g.student, g.exercise): g
        for g in GradeRecord.query.join(Exercise).filter(Exercise.course_id == course.id)
    }

    now = utcnow()
    students = set()
    for row in parsed.rows:
        student = resolver.resolve(row.name)
        students.add(student)

        enrollment = enrollments.get(student)
        if enrollment is None:
            enrollment = Enrollment(student=student, course=course, is_active=True)
            db.session.add(enrollment)
            enrollments[student] = enrollment
        elif not enrollment.is_active:
            enrollment.is_active = True

        for exercise, token in zip(exercises, row.tokens):
            if token is None:
                continue
            grade = classify_grade(token)
            if grade.degraded:
                warnings.append(ParseRecoveryWarning(
                    f"{token!r} for {exercise.name!r} is not a whole score between 0 and 100, "
                    f"recorded as pending", line=row.line))
            record = records.get((student, exercise))
            if record is None:
                record = GradeRecord(student=student, exercise=exercise)
                db.session.add(record)
                records[(student, exercise)] = record
            record.status = grade.status
            record.score = grade.score
            record.submitted_at = now if grade.submitted else None

    db.session.flush()
    for warning in warnings:
        logger.warning("Gradebook %s: %s", course.code, warning)
    logger.info("Gradebook processed for %s: %d students (%d new), %d exercises",
                course.code, len(students), resolver.created, len(set(exercises)))

    return IngestionResult(
        success=True,
        message="CSV file processed successfully",
        course_id=course.id,
        course_name=course.name,
        total_students=len(students),
        total_exercises=len(set(exercises)),
        errors=[str(w) for w in warnings],
    )
