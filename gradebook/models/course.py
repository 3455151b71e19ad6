from ..extensions import db
from .timestamps import utcnow

class Course(db.Model):
    __tablename__ = "course"
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.String(1000))
    teacher_id = db.Column(db.Integer, db.ForeignKey("teacher.id"), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    teacher = db.relationship("Teacher", back_populates="courses")
    # courses are deactivated, never deleted
    exercises = db.relationship("Exercise", back_populates="course",
                                order_by="Exercise.id")
    enrollments = db.relationship("Enrollment", back_populates="course")

    def __repr__(self):
        return f"<Course {self.id} {self.code}>"

class Exercise(db.Model):
    __tablename__ = "exercise"
    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("course.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.String(1000))
    max_score = db.Column(db.Integer, nullable=False, default=100)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    __table_args__ = (
        db.UniqueConstraint("course_id", "name", name="uq_exercise_course_name"),
    )

    course = db.relationship("Course", back_populates="exercises")
    grades = db.relationship("GradeRecord", back_populates="exercise",
                             cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Exercise {self.id} {self.name!r}>"
