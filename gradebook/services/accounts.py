import logging

from sqlalchemy.exc import IntegrityError

from ..errors import GradebookValidationError
from ..extensions import db
from ..models import Teacher
from ..models.user import User

logger = logging.getLogger(__name__)


def create_teacher(teacher_no, name, password, email=None, dept=None):
    teacher_no = (teacher_no or "").strip()
    name = (name or "").strip()
    if not teacher_no or not name or not password:
        raise GradebookValidationError("Teacher No., name and password are required")

    t = Teacher(teacher_no=teacher_no, name=name,
                email=(email or "").strip() or None, dept=(dept or "").strip() or None)
    u = User(username=teacher_no, role="teacher", teacher=t)
    u.set_password(password)
    db.session.add_all([t, u])
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise GradebookValidationError("Teacher No. and email must be unique") from e
    logger.info("Created teacher %s", teacher_no)
    return t
