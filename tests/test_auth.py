import logging

import pytest

from portal.core.auth import authenticate
from portal.core.security import derive_password
from tests.conftest import SECRET

TAMARA_PASSWORD = derive_password("S022", SECRET)


def test_derived_password_authenticates(directory):
    result = authenticate(directory, "Tamara", TAMARA_PASSWORD)
    assert result.ok is True
    assert result.staff_override is False
    assert result.student.preferred_name == "Tamara"
    assert result.student.student_id == "S022"


def test_name_match_ignores_case_and_whitespace(directory):
    result = authenticate(directory, "  TAMARA ", TAMARA_PASSWORD)
    assert result.ok is True
    assert result.student.preferred_name == "Tamara"


def test_wrong_password(directory):
    result = authenticate(directory, "Tamara", "ac-wrong-passwd")
    assert result.ok is False
    assert result.reason == "bad-password"
    assert result.student is None


def test_other_students_password_is_rejected(directory):
    result = authenticate(directory, "Tamara", derive_password("S031", SECRET))
    assert result.reason == "bad-password"


def test_unknown_student(directory):
    result = authenticate(directory, "Unknown", "anything")
    assert result.ok is False
    assert result.reason == "not-found"


@pytest.mark.parametrize(
    "name, password",
    [("", "x"), ("   ", "x"), (None, "x"), ("Tamara", ""), ("Tamara", None), (None, None)],
)
def test_missing_fields(directory, name, password):
    result = authenticate(directory, name, password)
    assert result.ok is False
    assert result.reason == "missing-fields"


def test_staff_override_logs_in_as_any_student(directory, caplog):
    with caplog.at_level(logging.WARNING, logger="portal.core.auth"):
        result = authenticate(directory, "luis", "staff-pass", staff_password="staff-pass")

    assert result.ok is True
    assert result.staff_override is True
    assert result.student.student_id == "S031"
    assert "[STAFF OVERRIDE] Luis at " in caplog.text
    assert "staff-pass" not in caplog.text


def test_staff_override_still_requires_a_known_student(directory):
    result = authenticate(directory, "Unknown", "staff-pass", staff_password="staff-pass")
    assert result.reason == "not-found"


def test_staff_override_disabled_when_empty(directory):
    result = authenticate(directory, "Tamara", "", staff_password="")
    assert result.reason == "missing-fields"
    result = authenticate(directory, "Tamara", "staff-pass", staff_password="")
    assert result.reason == "bad-password"


def test_derived_password_still_works_with_override_configured(directory):
    result = authenticate(directory, "Tamara", TAMARA_PASSWORD, staff_password="staff-pass")
    assert result.ok is True
    assert result.staff_override is False


def test_result_never_carries_the_password(directory):
    result = authenticate(directory, "Tamara", TAMARA_PASSWORD)
    assert TAMARA_PASSWORD not in result.model_dump_json()
