# portal/crud/student.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from portal.core.airtable import AirtableClient, Record
from portal.core.config import Settings
from portal.core.identity import extract_student_id
from portal.core.security import derive_password
from portal.schemas.student import Student

logger = logging.getLogger(__name__)

PREFERRED_NAME_FIELD = "Preferred Name"
NAME_FIELD = "Name"
STUDENT_ID_FIELD = "StudentID"


def normalize_name(name: Any) -> Optional[str]:
    """Lookup key for a display name: trimmed and lower-cased. None for blanks."""
    if not isinstance(name, str):
        return None
    key = name.strip().lower()
    return key or None


def student_from_record(record: Record, secret: str) -> Optional[Student]:
    """Turn one roster row into a Student, or None if it has no name or no id."""
    fields = record.get("fields") or {}
    preferred_name = fields.get(PREFERRED_NAME_FIELD)
    if not isinstance(preferred_name, str) or not preferred_name.strip():
        return None

    student_id = extract_student_id(fields.get(NAME_FIELD))
    if not student_id:
        fallback = fields.get(STUDENT_ID_FIELD)
        student_id = str(fallback).strip() if fallback not in (None, "") else None
    if not student_id:
        return None

    return Student(
        preferred_name=preferred_name,
        student_id=student_id,
        password=derive_password(student_id, secret),
    )


def build_students(records: Iterable[Record], secret: str) -> Dict[str, Student]:
    """Build a snapshot keyed by normalized display name. First row wins on duplicates."""
    students: Dict[str, Student] = {}
    skipped = 0
    for record in records:
        student = student_from_record(record, secret)
        if student is None:
            skipped += 1
            continue
        key = normalize_name(student.preferred_name)
        if key in students:
            logger.warning(
                f"⚠️ [Directory] Duplicate preferred name '{student.preferred_name}' "
                f"(record {record.get('id')}); keeping {students[key].student_id}"
            )
            continue
        students[key] = student

    if skipped:
        logger.info(f"[Directory] Skipped {skipped} roster rows without a name or student id")
    return students


async def fetch_roster(client: AirtableClient, settings: Settings) -> List[Record]:
    return await client.list_records(
        settings.AIRTABLE_STUDENTS_TABLE,
        view=settings.AIRTABLE_STUDENTS_VIEW or None,
    )
