import pytest

from gradebook.enums import GradeStatus
from gradebook.services.classifier import classify_grade


@pytest.mark.parametrize("token,status,score", [
    ("95", GradeStatus.CORRECT, 95),
    ("80", GradeStatus.CORRECT, 80),
    ("100", GradeStatus.CORRECT, 100),
    ("79", GradeStatus.INCORRECT, 79),
    ("45", GradeStatus.INCORRECT, 45),
    ("1", GradeStatus.INCORRECT, 1),
    ("0", GradeStatus.INCORRECT, 0),
    (" 88 ", GradeStatus.CORRECT, 88),
    ("+85", GradeStatus.CORRECT, 85),
])
def test_integer_scores(token, status, score):
    result = classify_grade(token)
    assert result.status is status
    assert result.score == score
    assert result.submitted is True
    assert result.degraded is False


@pytest.mark.parametrize("token", ["", "   ", None, "Not Submitted", "not submitted", "NOT SUBMITTED"])
def test_not_submitted(token):
    result = classify_grade(token)
    assert result.status is GradeStatus.NOT_SUBMITTED
    assert result.score is None
    assert result.submitted is False


@pytest.mark.parametrize("token", ["in progress", "A+", "see notes", "9O", "½"])
def test_text_is_pending(token):
    result = classify_grade(token)
    assert result.status is GradeStatus.PENDING
    assert result.score is None
    assert result.submitted is False
    assert result.degraded is False


@pytest.mark.parametrize("token", ["95.5", "8,5", "101", "150", "-3"])
def test_numeric_tokens_that_cannot_be_stored_degrade_to_pending(token):
    result = classify_grade(token)
    assert result.status is GradeStatus.PENDING
    assert result.score is None
    assert result.degraded is True


def test_every_token_maps_to_exactly_one_status():
    for token in ["", "0", "100", "Not Submitted", "x", "1e3", "٣", "007"]:
        assert classify_grade(token).status in set(GradeStatus)


def test_leading_zeros_parse_as_integer():
    assert classify_grade("007").score == 7
