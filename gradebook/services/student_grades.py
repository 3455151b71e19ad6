from __future__ import annotations
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import joinedload

from ..enums import GradeStatus
from ..errors import CourseNotFoundError
from ..extensions import db
from ..models import Course, Enrollment, Exercise, GradeRecord, Student
from .statistics import StatusTally, active_exercises


@dataclass
class StudentCourseSummary:
    course_id: int
    course_name: str
    course_code: str
    teacher_name: str
    enrolled_at: Optional[datetime]
    total_exercises: int
    completed_exercises: int
    average_score: float
    completion_percentage: float

    def to_dict(self):
        return asdict(self)


@dataclass
class ExerciseGrade:
    exercise_id: int
    exercise_name: str
    score: Optional[int]
    status: str
    status_label: str
    submitted_at: Optional[datetime]
    max_score: int


@dataclass
class StudentGradeSheet:
    student_id: int
    student_name: str
    student_email: str
    course_id: int
    course_name: str
    total_exercises: int
    correct_count: int
    incorrect_count: int
    pending_count: int
    not_submitted_count: int
    average_score: float
    completion_percentage: float
    exercise_grades: List[ExerciseGrade] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


def _get_student(student_id):
    student = db.session.get(Student, student_id)
    if student is None:
        raise CourseNotFoundError(f"Student {student_id} not found")
    return student


def _records(student_id, course_id):
    return (GradeRecord.query
            .join(Exercise)
            .filter(GradeRecord.student_id == student_id,
                    Exercise.course_id == course_id,
                    Exercise.is_active.is_(True))
            .all())


def student_courses(student_id: int) -> List[StudentCourseSummary]:
    _get_student(student_id)
    enrollments = (Enrollment.query
                   .options(joinedload(Enrollment.course).joinedload(Course.teacher))
                   .filter_by(student_id=student_id, is_active=True)
                   .order_by(Enrollment.enrolled_at).all())
    out = []
    for en in enrollments:
        total = len(active_exercises(en.course_id))
        tally = StatusTally()
        for g in _records(student_id, en.course_id):
            tally.add(g.status, g.score)
        completed = tally.counts[GradeStatus.CORRECT] + tally.counts[GradeStatus.INCORRECT]
        out.append(StudentCourseSummary(
            course_id=en.course.id,
            course_name=en.course.name,
            course_code=en.course.code,
            teacher_name=en.course.teacher.name,
            enrolled_at=en.enrolled_at,
            total_exercises=total,
            completed_exercises=completed,
            average_score=tally.average,
            completion_percentage=tally.completion(total),
        ))
    return out


def student_grades(student_id: int, course_id: int) -> StudentGradeSheet:
    student = _get_student(student_id)
    enrollment = (Enrollment.query
                  .filter_by(student_id=student_id, course_id=course_id, is_active=True)
                  .one_or_none())
    if enrollment is None:
        raise CourseNotFoundError("The student is not enrolled in this course")

    exercises = active_exercises(course_id)
    by_exercise = {g.exercise_id: g for g in _records(student_id, course_id)}
    tally = StatusTally()
    rows = []
    for exercise in exercises:
        g = by_exercise.get(exercise.id)
        if g is None:
            # no cell for this exercise in any upload
            rows.append(ExerciseGrade(exercise.id, exercise.name, None,
                                      GradeStatus.NOT_SUBMITTED.name,
                                      GradeStatus.NOT_SUBMITTED.label, None,
                                      exercise.max_score))
            continue
        tally.add(g.status, g.score)
        rows.append(ExerciseGrade(exercise.id, exercise.name, g.score, g.status.name,
                                  g.status.label, g.submitted_at, exercise.max_score))

    return StudentGradeSheet(
        student_id=student.id,
        student_name=student.name,
        student_email=student.email,
        course_id=enrollment.course.id,
        course_name=enrollment.course.name,
        total_exercises=len(exercises),
        correct_count=tally.counts[GradeStatus.CORRECT],
        incorrect_count=tally.counts[GradeStatus.INCORRECT],
        pending_count=tally.counts[GradeStatus.PENDING],
        not_submitted_count=tally.counts[GradeStatus.NOT_SUBMITTED],
        average_score=tally.average,
        completion_percentage=tally.completion(len(exercises)),
        exercise_grades=rows,
    )
