from ..enums import GradeStatus
from ..extensions import db
from .timestamps import utcnow

class Enrollment(db.Model):
    __tablename__ = "enrollment"
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("student.id"), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey("course.id"), nullable=False)
    enrolled_at = db.Column(db.DateTime, default=utcnow)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    __table_args__ = (
        db.UniqueConstraint("student_id", "course_id", name="uq_student_course"),
    )

    student = db.relationship("Student", back_populates="enrollments")
    course = db.relationship("Course", back_populates="enrollments")

class GradeRecord(db.Model):
    __tablename__ = "grade_record"
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("student.id"), nullable=False)
    exercise_id = db.Column(db.Integer, db.ForeignKey("exercise.id"), nullable=False)
    status = db.Column(db.Enum(GradeStatus, name="grade_status"), nullable=False)
    score = db.Column(db.Integer)                          # only for CORRECT / INCORRECT
    submitted_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    __table_args__ = (
        db.UniqueConstraint("student_id", "exercise_id", name="uq_student_exercise"),
        db.CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)",
                           name="ck_score_0_100"),
    )

    student = db.relationship("Student", back_populates="grades")
    exercise = db.relationship("Exercise", back_populates="grades")
