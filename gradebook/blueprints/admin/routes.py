from flask import jsonify
from flask_login import login_required
from ..auth.routes import role_required, payload
from ...errors import GradebookValidationError
from ...models import Teacher
from ...services.accounts import create_teacher as create_teacher_account
from . import bp

@bp.get("/teachers")
@login_required
@role_required("admin")
def teachers():
    items = Teacher.query.order_by(Teacher.teacher_no).all()
    return jsonify([
        {"id": t.id, "teacher_no": t.teacher_no, "name": t.name, "email": t.email, "dept": t.dept}
        for t in items
    ])

@bp.post("/teachers")
@login_required
@role_required("admin")
def create_teacher():
    data = payload()
    try:
        t = create_teacher_account(data.get("teacher_no"), data.get("name"),
                                   data.get("password"), email=data.get("email"),
                                   dept=data.get("dept"))
    except GradebookValidationError as e:
        return jsonify(message="Teacher not created", errors=e.messages), 400
    return jsonify(id=t.id, teacher_no=t.teacher_no, name=t.name), 201
