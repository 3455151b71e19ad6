from ..extensions import db
from .people import Student, Teacher
from .course import Course, Exercise
from .enrollment import Enrollment, GradeRecord
from .user import User

__all__ = [
    "Student", "Teacher", "Course", "Exercise",
    "Enrollment", "GradeRecord", "User",
]
