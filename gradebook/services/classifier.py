import re
from typing import NamedTuple, Optional

from ..enums import GradeStatus

PASSING_SCORE = 80
MIN_SCORE = 0
MAX_SCORE = 100
NOT_SUBMITTED = "not submitted"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+[.,][0-9]+")


class GradeClassification(NamedTuple):
    status: GradeStatus
    score: Optional[int] = None
    submitted: bool = False
    # a numeric-looking token that could not be stored as a score
    degraded: bool = False


def classify_grade(token):
    """Map one gradebook cell to a status and optional score.

    Total: every token gets exactly one status. Text that is not a
    number is treated as a grading note and becomes PENDING.
    """
    value = (token or "").strip()
    if not value or value.lower() == NOT_SUBMITTED:
        return GradeClassification(GradeStatus.NOT_SUBMITTED)

    if not _INT_RE.fullmatch(value):
        return GradeClassification(GradeStatus.PENDING,
                                   degraded=bool(_DECIMAL_RE.fullmatch(value)))

    score = int(value)
    if score < MIN_SCORE or score > MAX_SCORE:
        return GradeClassification(GradeStatus.PENDING, degraded=True)
    if score >= PASSING_SCORE:
        return GradeClassification(GradeStatus.CORRECT, score, True)
    # zero counts as an ordinary low score
    return GradeClassification(GradeStatus.INCORRECT, score, True)
