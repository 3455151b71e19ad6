import json
from pathlib import Path

import click
from flask.cli import AppGroup

from .errors import CourseNotFoundError, GradebookValidationError
from .extensions import db
from .models import Course, Teacher
from .services.accounts import create_teacher
from .services.ingestion import CourseRequest, GradebookUpload, ingest_gradebook
from .services.statistics import course_statistics

gradebook_cli = AppGroup("gradebook", help="Gradebook import and statistics.")


@gradebook_cli.command("init-db")
def init_db():
    """Create all tables (use `flask db upgrade` once migrations exist)."""
    db.create_all()
    click.echo("Database tables created")


@gradebook_cli.command("create-teacher")
@click.argument("teacher_no")
@click.argument("name")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--email", default=None)
@click.option("--dept", default=None)
def create_teacher_command(teacher_no, name, password, email, dept):
    try:
        t = create_teacher(teacher_no, name, password, email=email, dept=dept)
    except GradebookValidationError as e:
        raise click.ClickException("; ".join(e.messages))
    click.echo(f"Created teacher {t.teacher_no} (id {t.id})")


@gradebook_cli.command("import-csv")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--code", required=True, help="Course code.")
@click.option("--name", default="", help="Course name, required for a new course.")
@click.option("--description", default="")
@click.option("--teacher-no", required=True, help="Teacher No. of the submitting teacher.")
def import_csv(path, code, name, description, teacher_no):
    teacher = Teacher.query.filter_by(teacher_no=teacher_no).one_or_none()
    upload = GradebookUpload(filename=path.name, data=path.read_bytes())
    result = ingest_gradebook(upload, CourseRequest(code, name, description),
                              teacher.id if teacher else None)
    click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    if not result.success:
        raise SystemExit(1)


@gradebook_cli.command("stats")
@click.argument("code")
def stats(code):
    c = Course.query.filter_by(code=code).one_or_none()
    if c is None:
        raise click.ClickException(f"Course {code} not found")
    try:
        s = course_statistics(c.id)
    except CourseNotFoundError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(s.to_dict(), indent=2, ensure_ascii=False))
