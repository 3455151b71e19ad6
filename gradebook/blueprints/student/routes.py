from flask import jsonify
from flask_login import login_required, current_user
from ..auth.routes import role_required
from ...errors import CourseNotFoundError
from ...services.student_grades import student_courses, student_grades
from . import bp

def get_current_student_id():
    return current_user.student_id

@bp.get("/courses")
@login_required
@role_required("student")
def my_courses():
    return jsonify([c.to_dict() for c in student_courses(get_current_student_id())])

@bp.get("/grades")
@login_required
@role_required("student")
def my_grades():
    sid = get_current_student_id()
    sheets = [student_grades(sid, c.course_id) for c in student_courses(sid)]
    return jsonify([s.to_dict() for s in sheets])

@bp.get("/courses/<int:cid>/grades")
@login_required
@role_required("student")
def course_grades(cid):
    try:
        return jsonify(student_grades(get_current_student_id(), cid).to_dict())
    except CourseNotFoundError as e:
        return jsonify(message=str(e)), 404
