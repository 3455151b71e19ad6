from __future__ import annotations
import logging
import re
import unicodedata
import uuid
from typing import Dict, Optional, Set

from flask import current_app
from werkzeug.security import generate_password_hash

from ..errors import IdentityCollisionExhausted
from ..extensions import db
from ..models import Course, Enrollment, Student, User

logger = logging.getLogger(__name__)

MAX_EMAIL_LENGTH = 255
EMAIL_SUFFIX_ATTEMPTS = 100
FALLBACK_LOCAL_PART = "student"

_WS_RE = re.compile(r"\s+")
_SLUG_DROP_RE = re.compile(r"[^a-z0-9\s]")


def normalize_name(name: str) -> str:
    return _WS_RE.sub(" ", name or "").strip().casefold()


def email_slug(name: str) -> str:
    """Local part synthesized from a student name: 'Ana  María' -> 'ana.maria'."""
    folded = unicodedata.normalize("NFKD", name or "")
    folded = folded.encode("ascii", "ignore").decode("ascii").lower()
    folded = _SLUG_DROP_RE.sub("", folded).strip()
    return _WS_RE.sub(".", folded)


def _fit(local: str, domain: str, reserve: int = 0) -> str:
    room = MAX_EMAIL_LENGTH - len(domain) - 1 - reserve
    return local[:max(room, 1)].rstrip(".") or FALLBACK_LOCAL_PART[:max(room, 1)]


def suffixed_email(local: str, domain: str, taken: Set[str],
                   attempts: int = EMAIL_SUFFIX_ATTEMPTS) -> str:
    candidate = f"{_fit(local, domain)}@{domain}"
    if candidate not in taken:
        return candidate
    for n in range(1, attempts + 1):
        suffix = str(n)
        candidate = f"{_fit(local, domain, len(suffix))}{suffix}@{domain}"
        if candidate not in taken:
            return candidate
    raise IdentityCollisionExhausted(f"no free address for {local!r} after {attempts} attempts")


def random_email(domain: str, taken: Set[str]) -> str:
    while True:
        candidate = f"{FALLBACK_LOCAL_PART}.{uuid.uuid4().hex[:12]}@{domain}"
        if candidate not in taken:
            return candidate


class StudentResolver:
    """Finds or creates the Student behind a gradebook name for one ingestion run.

    Lookups go through in-memory indexes built once from the database and kept
    current as students are created, so a run never creates two students whose
    names differ only by case or spacing.
    """

    def __init__(self, course: Course, domain: Optional[str] = None,
                 default_password: Optional[str] = None):
        self.course = course
        self.domain = (domain or current_app.config["SYNTHETIC_EMAIL_DOMAIN"]).lower()
        self.default_password = (default_password
                                 or current_app.config["DEFAULT_STUDENT_PASSWORD"])
        self.created = 0
        self._by_name: Dict[str, Student] = {}
        self._enrolled_by_slug: Dict[str, Student] = {}
        self._taken: Set[str] = set()
        self._password_hash = None
        self._load()

    def _load(self):
        for student in Student.query.order_by(Student.id).all():
            self._by_name.setdefault(normalize_name(student.name), student)
            self._taken.add(student.email.lower())
        for (username,) in db.session.query(User.username):
            self._taken.add(username.lower())
        if self.course.id is not None:
            enrolled = (Student.query.join(Enrollment)
                        .filter(Enrollment.course_id == self.course.id)
                        .order_by(Student.id).all())
            for student in enrolled:
                slug = email_slug(student.name)
                if slug:
                    self._enrolled_by_slug.setdefault(slug, student)

    def resolve(self, name: str) -> Student:
        key = normalize_name(name)
        student = self._by_name.get(key)
        if student is not None:
            return student

        # a student already in this course whose address on file was derived from this name
        slug = email_slug(name)
        student = self._enrolled_by_slug.get(slug) if slug else None
        if student is not None:
            logger.debug("Matched %r to enrolled student %s by address", name, student.email)
            self._by_name[key] = student
            return student

        return self._create(name, key)

    def _create(self, name: str, key: str) -> Student:
        email = self._new_email(name)
        if self._password_hash is None:
            self._password_hash = generate_password_hash(self.default_password)

        student = Student(name=name, email=email, code=uuid.uuid4().hex[:8], is_active=True)
        user = User(username=email, password_hash=self._password_hash,
                    role="student", student=student)
        db.session.add_all([student, user])

        self._by_name[key] = student
        self._taken.add(email)
        self.created += 1
        logger.debug("Created student %r with address %s", name, email)
        return student

    def _new_email(self, name: str) -> str:
        local = email_slug(name) or FALLBACK_LOCAL_PART
        try:
            return suffixed_email(local, self.domain, self._taken)
        except IdentityCollisionExhausted as e:
            logger.warning("%s, using a random address", e)
            return random_email(self.domain, self._taken)
