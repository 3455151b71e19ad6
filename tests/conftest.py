import pytest

from gradebook import create_app
from gradebook.extensions import db as _db
from gradebook.services.accounts import create_teacher
from gradebook.services.ingestion import CourseRequest, GradebookUpload, ingest_gradebook


@pytest.fixture
def app():
    app = create_app("config.TestConfig")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def teacher(app):
    return create_teacher("T001", "Grace Hopper", "secret-pass", email="grace@example.edu")


@pytest.fixture
def upload(teacher):
    def _upload(text, code="CS101", name="Intro to Programming", filename="grades.csv",
                teacher_id=None):
        data = text.encode("utf-8") if isinstance(text, str) else text
        return ingest_gradebook(GradebookUpload(filename, data),
                                CourseRequest(code, name, ""),
                                teacher.id if teacher_id is None else teacher_id)
    return _upload
