from flask import request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from ...models.user import User
from . import bp
from functools import wraps
from flask import abort

def role_required(*roles):
    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated or current_user.role not in roles:
                abort(403)
            return f(*args, **kwargs)
        return wrapper
    return deco

def payload():
    return request.get_json(silent=True) or request.form

@bp.post("/login")
def login():
    data = payload()
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    u = User.query.filter_by(username=username).one_or_none()
    if u and u.check_password(password):
        login_user(u)
        return jsonify(id=u.id, username=u.username, role=u.role)
    return jsonify(message="Incorrect username or password"), 401

@bp.get("/logout")
@login_required
def logout():
    logout_user()
    return jsonify(message="Logged out")
