from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash
from ..extensions import db

class User(UserMixin, db.Model):
    """Login account. Teachers sign in with their Teacher No., students with their address."""
    __tablename__ = "user"
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(16), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("student.id", ondelete="CASCADE"))
    teacher_id = db.Column(db.Integer, db.ForeignKey("teacher.id", ondelete="CASCADE"))

    student = db.relationship("Student", backref=db.backref("login", uselist=False))
    teacher = db.relationship("Teacher", backref=db.backref("login", uselist=False))

    __table_args__ = (
        db.CheckConstraint("role IN ('admin', 'teacher', 'student')", name="ck_user_role"),
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)
