from .classifier import GradeClassification, classify_grade
from .csv_format import CsvFormat, detect_format
from .csv_parser import ParsedGradebook, parse_gradebook
from .ingestion import CourseRequest, GradebookUpload, IngestionResult, ingest_gradebook
from .statistics import CourseStatistics, course_statistics

__all__ = [
    "GradeClassification", "classify_grade", "CsvFormat", "detect_format",
    "ParsedGradebook", "parse_gradebook", "CourseRequest", "GradebookUpload",
    "IngestionResult", "ingest_gradebook", "CourseStatistics", "course_statistics",
]
