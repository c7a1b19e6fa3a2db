# portal/core/auth.py
import logging
from datetime import datetime, timezone
from typing import Optional

from portal.db.directory import StudentDirectory
from portal.schemas.student import AuthResult

logger = logging.getLogger(__name__)


def authenticate(
    directory: StudentDirectory,
    preferred_name: Optional[str],
    password: Optional[str],
    staff_password: str = "",
) -> AuthResult:
    """Check a (display name, password) pair against the roster snapshot.

    The staff override password, when configured, logs in as any known student.
    """
    if not preferred_name or not preferred_name.strip() or not password:
        return AuthResult(ok=False, reason="missing-fields")

    student = directory.lookup(preferred_name)
    if student is None:
        logger.info("[Auth] Login for unknown preferred name")
        return AuthResult(ok=False, reason="not-found")

    if staff_password and password == staff_password:
        logger.warning(
            f"[STAFF OVERRIDE] {student.preferred_name} at {datetime.now(timezone.utc).isoformat()}"
        )
        return AuthResult(ok=True, staff_override=True, student=student.public)

    if password != student.password:
        logger.info(f"[Auth] Bad password for {student.student_id}")
        return AuthResult(ok=False, reason="bad-password")

    return AuthResult(ok=True, staff_override=False, student=student.public)
