import json

from gradebook.models import Course, Teacher


def test_import_csv_and_stats(app, tmp_path):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["gradebook", "create-teacher", "T050", "Prof X",
                                 "--password", "pw"])
    assert result.exit_code == 0, result.output
    assert Teacher.query.filter_by(teacher_no="T050").count() == 1

    path = tmp_path / "grades.csv"
    path.write_text("Name;E1;E2\nAna;90;40\n", encoding="utf-8")
    result = runner.invoke(args=["gradebook", "import-csv", str(path), "--code", "C9",
                                 "--name", "Course Nine", "--teacher-no", "T050"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["total_exercises"] == 2
    assert Course.query.filter_by(code="C9").count() == 1

    result = runner.invoke(args=["gradebook", "stats", "C9"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["average_score"] == 65.0


def test_import_csv_unknown_teacher_fails(app, tmp_path):
    path = tmp_path / "grades.csv"
    path.write_text("Name,E1\nAna,90\n", encoding="utf-8")
    result = app.test_cli_runner().invoke(args=["gradebook", "import-csv", str(path),
                                                "--code", "C9", "--name", "N",
                                                "--teacher-no", "nobody"])
    assert result.exit_code == 1
    assert Course.query.count() == 0


def test_stats_unknown_course(app):
    result = app.test_cli_runner().invoke(args=["gradebook", "stats", "NOPE"])
    assert result.exit_code != 0
