from flask import request, jsonify
from flask_login import login_required, current_user
from ..auth.routes import role_required, payload
from ...errors import CourseNotFoundError, CourseReferenceError, GradebookValidationError
from ...services.courses import (course_details, create_course, deactivate_course,
                                 teacher_courses)
from ...services.ingestion import (GENERIC_FAILURE, CourseRequest, GradebookUpload,
                                   ingest_gradebook)
from ...services.statistics import course_statistics
from . import bp

def get_current_teacher_id():
    return current_user.teacher_id

@bp.post("/upload-csv")
@login_required
@role_required("teacher")
def upload_csv():
    f = request.files.get("file")
    upload = GradebookUpload(filename=f.filename, data=f.read()) if f else None
    req = CourseRequest(
        code=request.form.get("courseCode", ""),
        name=request.form.get("courseName", ""),
        description=request.form.get("description", ""),
    )
    result = ingest_gradebook(upload, req, get_current_teacher_id())
    if result.success:
        return jsonify(result.to_dict()), 200
    # rolled back on an unexpected error, not a problem with the file
    status = 500 if GENERIC_FAILURE in result.errors else 400
    return jsonify(result.to_dict()), status

@bp.get("/courses")
@login_required
@role_required("teacher")
def my_courses():
    return jsonify([c.to_dict() for c in teacher_courses(get_current_teacher_id())])

@bp.post("/courses")
@login_required
@role_required("teacher")
def new_course():
    data = payload()
    req = CourseRequest(code=data.get("courseCode", ""), name=data.get("courseName", ""),
                        description=data.get("description", ""))
    try:
        c = create_course(req, get_current_teacher_id())
    except GradebookValidationError as e:
        return jsonify(message="Course not created", errors=e.messages), 400
    except CourseReferenceError as e:
        return jsonify(message="Course not created", errors=[str(e)]), 409
    return jsonify(course_details(c.id).to_dict()), 201

@bp.get("/courses/<int:cid>")
@login_required
@role_required("teacher")
def course(cid):
    try:
        return jsonify(course_details(cid).to_dict())
    except CourseNotFoundError as e:
        return jsonify(message=str(e)), 404

@bp.get("/courses/<int:cid>/statistics")
@login_required
@role_required("teacher")
def statistics(cid):
    try:
        return jsonify(course_statistics(cid).to_dict())
    except CourseNotFoundError as e:
        return jsonify(message=str(e)), 404

@bp.post("/courses/<int:cid>/deactivate")
@login_required
@role_required("teacher")
def deactivate(cid):
    try:
        c = deactivate_course(cid, get_current_teacher_id())
    except CourseNotFoundError as e:
        return jsonify(message=str(e)), 404
    return jsonify(id=c.id, code=c.code, is_active=c.is_active)
