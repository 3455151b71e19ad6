from ..extensions import db
from .timestamps import utcnow

class Student(db.Model):
    __tablename__ = "student"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    code = db.Column(db.String(16), nullable=False)          # short enrollment code
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    enrollments = db.relationship(
        "Enrollment", back_populates="student", cascade="all, delete-orphan"
    )
    grades = db.relationship(
        "GradeRecord", back_populates="student", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Student {self.id} {self.email}>"

class Teacher(db.Model):
    __tablename__ = "teacher"
    id = db.Column(db.Integer, primary_key=True)
    teacher_no = db.Column(db.String(32), unique=True, nullable=False)
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255), unique=True)
    dept = db.Column(db.String(64))

    courses = db.relationship("Course", back_populates="teacher")

    def __repr__(self):
        return f"<Teacher {self.id} {self.teacher_no}>"
