from __future__ import annotations
import csv
import io
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import GradebookValidationError, ParseRecoveryWarning
from .csv_format import CsvFormat

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
SUSPICIOUS_NAME_LENGTH = 100
TOTAL_GRADE = "total grade"
DROPPED_TOKENS = {"na", TOTAL_GRADE}

_WS_RE = re.compile(r"\s+")
# a run of 2-3 digits that is not part of a longer number
_GRADE_RUN_RE = re.compile(r"(?<!\d)\d{2,3}(?!\d)")


@dataclass(frozen=True)
class ExerciseColumn:
    index: int      # column in the source row
    name: str


@dataclass
class GradebookRow:
    line: int
    name: str
    # aligned with ParsedGradebook.columns; None means the cell was dropped or missing
    tokens: List[Optional[str]]


@dataclass
class ParsedGradebook:
    columns: List[ExerciseColumn]
    rows: List[GradebookRow]
    warnings: List[ParseRecoveryWarning] = field(default_factory=list)

    @property
    def exercise_names(self) -> List[str]:
        return [c.name for c in self.columns]


def strip_quotes(value: Optional[str], quotechar: str = '"') -> str:
    if value is None:
        return ""
    return value.strip().strip(quotechar).strip()


def clean_text(value: Optional[str], quotechar: str = '"') -> str:
    return _WS_RE.sub(" ", strip_quotes(value, quotechar)).strip()


def exercise_columns(header: List[str], quotechar: str = '"') -> List[ExerciseColumn]:
    """Exercise columns of a header row, keeping each one's source index.

    Column 0 labels the student names. Empty cells and a trailing
    "Total Grade" column never become exercises.
    """
    columns = []
    for index, cell in enumerate(header):
        if index == 0:
            continue
        name = clean_text(cell, quotechar)
        if not name or name.lower() == TOTAL_GRADE:
            continue
        columns.append(ExerciseColumn(index=index, name=name))
    return columns


def clean_student_name(raw: str, line: int, warnings: List[ParseRecoveryWarning],
                       quotechar: str = '"') -> str:
    name = clean_text(raw, quotechar)
    if len(name) > MAX_NAME_LENGTH:
        warnings.append(ParseRecoveryWarning(
            f"student name truncated to {MAX_NAME_LENGTH} characters", line=line))
        name = name[:MAX_NAME_LENGTH].rstrip()

    # grades leaking into the name column usually means a separator was misread
    if len(name) > SUSPICIOUS_NAME_LENGTH and len(_GRADE_RUN_RE.findall(name)) >= 2:
        head = name.split(",", 1)[0].strip()
        if head and len(head) < SUSPICIOUS_NAME_LENGTH:
            warnings.append(ParseRecoveryWarning(
                f"student name looked like it contained grades, kept {head!r}", line=line))
            name = head
    return name


def row_tokens(row: List[str], columns: List[ExerciseColumn],
               quotechar: str = '"') -> List[Optional[str]]:
    tokens = []
    for column in columns:
        if column.index >= len(row):
            tokens.append(None)
            continue
        token = strip_quotes(row[column.index], quotechar)
        if token.lower() in DROPPED_TOKENS:
            tokens.append(None)
        else:
            tokens.append(token)
    return tokens


def decode_body(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise GradebookValidationError("The file must be UTF-8 encoded") from e


def parse_gradebook(data: bytes, fmt: CsvFormat) -> ParsedGradebook:
    text = decode_body(data)
    reader = csv.reader(io.StringIO(text, newline=""),
                        delimiter=fmt.delimiter, quotechar=fmt.quotechar)
    warnings: List[ParseRecoveryWarning] = []

    try:
        header = next(reader)
    except StopIteration:
        return ParsedGradebook(columns=[], rows=[], warnings=warnings)
    except csv.Error as e:
        raise GradebookValidationError(f"Malformed CSV header: {e}") from e

    columns = exercise_columns(header, fmt.quotechar)
    rows = []
    try:
        for row in reader:
            line = reader.line_num
            if not row or not row[0].strip():
                continue
            name = clean_student_name(row[0], line, warnings, fmt.quotechar)
            if not name:
                continue
            rows.append(GradebookRow(line=line, name=name,
                                     tokens=row_tokens(row, columns, fmt.quotechar)))
    except csv.Error as e:
        raise GradebookValidationError(f"Malformed CSV near line {reader.line_num}: {e}") from e

    logger.info("Parsed gradebook: %d exercise columns, %d student rows",
                len(columns), len(rows))
    return ParsedGradebook(columns=columns, rows=rows, warnings=warnings)
