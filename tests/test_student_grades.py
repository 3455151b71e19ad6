import pytest

from gradebook.errors import CourseNotFoundError
from gradebook.models import Course, Exercise, Student
from gradebook.services.student_grades import student_courses, student_grades


@pytest.fixture
def ana(upload):
    upload("Name,E1,E2,E3\nAna,90,40,in progress\n")
    upload("Name,Q1,Q2\nAna,85,NA\n", code="MATH", name="Math")
    return Student.query.filter_by(name="Ana").one()


def test_student_courses(ana):
    summaries = {s.course_code: s for s in student_courses(ana.id)}
    cs = summaries["CS101"]
    assert cs.total_exercises == 3
    assert cs.completed_exercises == 2
    assert cs.average_score == 65.0
    assert cs.completion_percentage == pytest.approx(100.0)
    math = summaries["MATH"]
    assert math.completed_exercises == 1
    assert math.completion_percentage == 50.0
    assert math.teacher_name == "Grace Hopper"


def test_student_grade_sheet_fills_missing_exercises(ana):
    course = Course.query.filter_by(code="MATH").one()
    sheet = student_grades(ana.id, course.id)
    assert [g.exercise_name for g in sheet.exercise_grades] == ["Q1", "Q2"]
    q1, q2 = sheet.exercise_grades
    assert (q1.status, q1.score, q1.max_score) == ("CORRECT", 85, 100)
    assert q1.submitted_at is not None
    assert (q2.status, q2.status_label, q2.score) == ("NOT_SUBMITTED", "Not submitted", None)
    assert sheet.correct_count == 1
    assert sheet.average_score == 85.0


def test_grade_sheet_skips_inactive_exercises(ana, db):
    course = Course.query.filter_by(code="CS101").one()
    Exercise.query.filter_by(course_id=course.id, name="E3").one().is_active = False
    db.session.commit()
    sheet = student_grades(ana.id, course.id)
    assert sheet.total_exercises == 2
    assert sheet.pending_count == 0
    assert sheet.completion_percentage == 100.0


def test_not_enrolled(ana, teacher, db):
    other = Course(code="ART", name="Art", teacher=teacher)
    db.session.add(other)
    db.session.commit()
    with pytest.raises(CourseNotFoundError):
        student_grades(ana.id, other.id)
