from __future__ import annotations
import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.orm import joinedload

from ..enums import GradeStatus
from ..errors import CourseNotFoundError
from ..extensions import db
from ..models import Course, Enrollment, Exercise, GradeRecord

logger = logging.getLogger(__name__)


class StatusTally:
    """Per-status counts plus the running score sum of the scored records."""

    def __init__(self):
        self.counts = {status: 0 for status in GradeStatus}
        self.score_sum = 0
        self.scored = 0

    def add(self, status: GradeStatus, score: Optional[int]):
        self.counts[status] += 1
        if score is not None:
            self.score_sum += score
            self.scored += 1

    def merge(self, other: "StatusTally"):
        for status, n in other.counts.items():
            self.counts[status] += n
        self.score_sum += other.score_sum
        self.scored += other.scored

    @property
    def total(self):
        return sum(self.counts.values())

    @property
    def attempted(self):
        return sum(n for status, n in self.counts.items() if status.counts_as_attempted)

    @property
    def average(self):
        return self.score_sum / self.scored if self.scored else 0.0

    def completion(self, total_exercises):
        return self.attempted / total_exercises * 100 if total_exercises else 0.0


@dataclass
class ExerciseStatistics:
    exercise_id: int
    exercise_name: str
    total_submissions: int
    correct_submissions: int
    incorrect_submissions: int
    pending_submissions: int
    not_submitted_count: int
    average_score: float


@dataclass
class StudentPerformance:
    student_id: int
    student_name: str
    student_email: str
    total_exercises: int
    correct_count: int
    incorrect_count: int
    pending_count: int
    not_submitted_count: int
    average_score: float
    completion_percentage: float


@dataclass
class CourseStatistics:
    course_id: int
    course_name: str
    total_students: int
    total_exercises: int
    # per-record totals: each is the sum of the matching exercise figures
    correct_submissions: int
    incorrect_submissions: int
    pending_submissions: int
    not_submitted_count: int
    average_score: float
    exercise_statistics: List[ExerciseStatistics] = field(default_factory=list)
    student_performance: List[StudentPerformance] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


def active_exercises(course_id: int) -> List[Exercise]:
    return (Exercise.query
            .filter_by(course_id=course_id, is_active=True)
            .order_by(Exercise.id).all())


def active_enrollments(course_id: int) -> List[Enrollment]:
    return (Enrollment.query
            .options(joinedload(Enrollment.student))
            .filter_by(course_id=course_id, is_active=True)
            .order_by(Enrollment.id).all())


def course_statistics(course_id: int) -> CourseStatistics:
    course = db.session.get(Course, course_id)
    if course is None:
        raise CourseNotFoundError(f"Course {course_id} not found")

    exercises = active_exercises(course.id)
    enrollments = active_enrollments(course.id)
    by_exercise: Dict[int, StatusTally] = {e.id: StatusTally() for e in exercises}
    by_student: Dict[int, StatusTally] = {en.student_id: StatusTally() for en in enrollments}

    records = (db.session.query(GradeRecord.exercise_id, GradeRecord.student_id,
                                GradeRecord.status, GradeRecord.score)
               .join(Exercise, GradeRecord.exercise_id == Exercise.id)
               .filter(Exercise.course_id == course.id, Exercise.is_active.is_(True)))
    visited = 0
    for exercise_id, student_id, status, score in records:
        # an exercise committed after the exercise list was read is left for the next call
        exercise_tally = by_exercise.get(exercise_id)
        if exercise_tally is None:
            continue
        visited += 1
        exercise_tally.add(status, score)
        tally = by_student.get(student_id)
        if tally is not None:
            tally.add(status, score)

    course_tally = StatusTally()
    exercise_stats = []
    for exercise in exercises:
        tally = by_exercise[exercise.id]
        course_tally.merge(tally)
        exercise_stats.append(ExerciseStatistics(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            total_submissions=tally.total,
            correct_submissions=tally.counts[GradeStatus.CORRECT],
            incorrect_submissions=tally.counts[GradeStatus.INCORRECT],
            pending_submissions=tally.counts[GradeStatus.PENDING],
            not_submitted_count=tally.counts[GradeStatus.NOT_SUBMITTED],
            average_score=tally.average,
        ))

    total_exercises = len(exercises)
    performance = []
    for enrollment in enrollments:
        tally = by_student[enrollment.student_id]
        performance.append(StudentPerformance(
            student_id=enrollment.student.id,
            student_name=enrollment.student.name,
            student_email=enrollment.student.email,
            total_exercises=total_exercises,
            correct_count=tally.counts[GradeStatus.CORRECT],
            incorrect_count=tally.counts[GradeStatus.INCORRECT],
            pending_count=tally.counts[GradeStatus.PENDING],
            not_submitted_count=tally.counts[GradeStatus.NOT_SUBMITTED],
            average_score=tally.average,
            completion_percentage=tally.completion(total_exercises),
        ))

    logger.debug("Statistics for course %s: %d records visited", course.code, visited)
    return CourseStatistics(
        course_id=course.id,
        course_name=course.name,
        total_students=len(enrollments),
        total_exercises=total_exercises,
        correct_submissions=course_tally.counts[GradeStatus.CORRECT],
        incorrect_submissions=course_tally.counts[GradeStatus.INCORRECT],
        pending_submissions=course_tally.counts[GradeStatus.PENDING],
        not_submitted_count=course_tally.counts[GradeStatus.NOT_SUBMITTED],
        average_score=course_tally.average,
        exercise_statistics=exercise_stats,
        student_performance=performance,
    )
