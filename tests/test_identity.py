import re

import pytest

from gradebook.errors import IdentityCollisionExhausted
from gradebook.models import Course, Enrollment, Student, User
from gradebook.services.identity import (
    EMAIL_SUFFIX_ATTEMPTS,
    MAX_EMAIL_LENGTH,
    StudentResolver,
    email_slug,
    normalize_name,
    random_email,
    suffixed_email,
)

DOMAIN = "students.example.edu"


@pytest.fixture
def course(db, teacher):
    c = Course(code="MATH1", name="Math", teacher=teacher)
    db.session.add(c)
    db.session.commit()
    return c


def add_student(db, name, email):
    s = Student(name=name, email=email, code="abcd1234")
    db.session.add(s)
    db.session.commit()
    return s


def test_email_slug():
    assert email_slug("Ana María  López") == "ana.maria.lopez"
    assert email_slug("O'Brien, Pat") == "obrien.pat"
    assert email_slug("###") == ""


def test_email_slug_folds_accents():
    assert email_slug("José Núñez") == "jose.nunez"
    assert email_slug("Zoë  Ångström") == "zoe.angstrom"


def test_normalize_name():
    assert normalize_name("  ANA   lopez ") == "ana lopez"


def test_suffix_on_collision():
    taken = {f"ana@{DOMAIN}", f"ana1@{DOMAIN}"}
    assert suffixed_email("ana", DOMAIN, taken) == f"ana2@{DOMAIN}"


def test_suffix_attempts_are_bounded():
    taken = {f"ana@{DOMAIN}", f"ana1@{DOMAIN}", f"ana2@{DOMAIN}"}
    with pytest.raises(IdentityCollisionExhausted):
        suffixed_email("ana", DOMAIN, taken, attempts=2)


def test_random_fallback_is_unique():
    taken = set()
    first = random_email(DOMAIN, taken)
    taken.add(first)
    assert random_email(DOMAIN, taken) != first
    assert first.endswith("@" + DOMAIN)


def test_address_length_is_capped():
    local = "a" * 400
    email = suffixed_email(local, DOMAIN, {f"{'a' * (MAX_EMAIL_LENGTH - len(DOMAIN) - 1)}@{DOMAIN}"})
    assert len(email) <= MAX_EMAIL_LENGTH
    assert email.endswith(f"1@{DOMAIN}")


def test_resolve_reuses_student_by_case_insensitive_name(db, course):
    existing = add_student(db, "Ana Lopez", "ana@real.example")
    resolver = StudentResolver(course, domain=DOMAIN)
    assert resolver.resolve("ana LOPEZ") is existing
    assert resolver.resolve("  Ana   Lopez ") is existing
    assert resolver.created == 0


def test_resolve_creates_once_per_run(db, course):
    resolver = StudentResolver(course, domain=DOMAIN, default_password="placeholder")
    first = resolver.resolve("New Person")
    second = resolver.resolve("NEW person")
    assert first is second
    assert resolver.created == 1
    db.session.flush()
    assert first.email == f"new.person@{DOMAIN}"
    assert len(first.code) == 8
    user = User.query.filter_by(student_id=first.id).one()
    assert user.role == "student"
    assert user.username == first.email


def test_synthesized_address_avoids_existing_one(db, course):
    add_student(db, "Someone Else", f"ana.lopez@{DOMAIN}")
    resolver = StudentResolver(course, domain=DOMAIN)
    s = resolver.resolve("Ana Lopez")
    assert s.email == f"ana.lopez1@{DOMAIN}"


def test_enrolled_student_is_matched_by_address_slug(db, course):
    s = add_student(db, "José Núñez", "jose.nunez@real.example")
    db.session.add(Enrollment(student=s, course=course))
    db.session.commit()
    resolver = StudentResolver(course, domain=DOMAIN)
    assert resolver.resolve("Jose Nunez") is s
    assert resolver.created == 0


def test_name_without_letters_gets_fallback_local_part(db, course):
    resolver = StudentResolver(course, domain=DOMAIN)
    s = resolver.resolve("###")
    assert s.email == f"student@{DOMAIN}"
    assert resolver.resolve("$$$").email == f"student1@{DOMAIN}"


def test_exhausted_suffixes_fall_back_to_random_address(db, course):
    taken = [f"ana.lopez@{DOMAIN}"] + [f"ana.lopez{n}@{DOMAIN}"
                                       for n in range(1, EMAIL_SUFFIX_ATTEMPTS + 1)]
    db.session.add_all(Student(name=f"Holder {i}", email=email, code="abcd1234")
                       for i, email in enumerate(taken))
    db.session.commit()

    resolver = StudentResolver(course, domain=DOMAIN)
    s = resolver.resolve("Ana Lopez")
    assert re.fullmatch(r"student\.[0-9a-f]{12}@" + re.escape(DOMAIN), s.email)
    assert resolver.created == 1
    db.session.flush()
    assert User.query.filter_by(student_id=s.id).one().username == s.email
