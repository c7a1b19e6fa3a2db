# portal/crud/attendance.py
import datetime
import logging
import math
from typing import Any, Iterable, List, Optional

from portal.core.airtable import AirtableClient, Record
from portal.core.config import Settings
from portal.core.errors import NotFoundError
from portal.db.directory import StudentDirectory
from portal.schemas.attendance import AttendanceRecord, AttendanceSummary

logger = logging.getLogger(__name__)

DATE_FIELD = "Date"
BLOCK_FIELDS = {
    "block_a": "Block A",
    "block_b": "Block B",
    "block_c": "Block C",
    "block_d": "Block D",
}

ON_TIME = "On Time"
# Absent-block thresholds for the warning zones
RED_ZONE_ABSENCES = 23
YELLOW_ZONE_ABSENCES = 12


def _escape(value: str) -> str:
    return value.replace("'", "\\'")


def attendance_formula(preferred_name: str, settings: Settings) -> str:
    name_field = settings.AIRTABLE_ATTENDANCE_NAME_FIELD
    cutoff = settings.ATTENDANCE_CUTOFF.isoformat()
    return (
        f"AND({{{name_field}}}='{_escape(preferred_name)}', "
        f"IS_AFTER({{{DATE_FIELD}}}, '{cutoff}'))"
    )


def _as_text(value: Any) -> Optional[str]:
    # Lookup/rollup fields come back as lists
    if value is None or value == "":
        return None
    if isinstance(value, list):
        parts = [str(v) for v in value if v not in (None, "")]
        return ", ".join(parts) or None
    return str(value)


def _as_date(value: Any, record_id: Optional[str] = None) -> Optional[datetime.date]:
    # Date fields are "YYYY-MM-DD"; date-time fields carry a time part we drop
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.date.fromisoformat(value[:10])
    except ValueError:
        logger.warning(f"⚠️ [Attendance] Unreadable date {value!r} on record {record_id}")
        return None


def record_from_airtable(record: Record, settings: Settings) -> AttendanceRecord:
    fields = record.get("fields") or {}
    values = {key: _as_text(fields.get(name)) for key, name in BLOCK_FIELDS.items()}
    return AttendanceRecord(
        id=record["id"],
        date=_as_date(fields.get(DATE_FIELD), record.get("id")),
        course=_as_text(fields.get(settings.AIRTABLE_COURSE_FIELD)),
        **values,
    )


async def get_attendance(
    client: AirtableClient,
    directory: StudentDirectory,
    preferred_name: str,
    settings: Settings,
) -> List[AttendanceRecord]:
    """Attendance rows for one student, newest first, dated after the configured cutoff.

    Raises NotFoundError for unknown students and UpstreamError when Airtable fails.
    """
    student = directory.lookup(preferred_name)
    if student is None:
        raise NotFoundError()

    rows = await client.list_records(
        settings.AIRTABLE_ATTENDANCE_TABLE,
        view=settings.AIRTABLE_ATTENDANCE_VIEW or None,
        filter_by_formula=attendance_formula(student.preferred_name, settings),
        sort=[(DATE_FIELD, "desc")],
    )
    records = [record_from_airtable(row, settings) for row in rows]
    logger.info(f"[Attendance] {len(records)} records for {student.student_id}")
    return records


def summarize(records: Iterable[AttendanceRecord]) -> AttendanceSummary:
    total = on_time = tardy = absent = 0
    for record in records:
        for status in record.blocks:
            if not status:
                continue
            total += 1
            if status == ON_TIME:
                on_time += 1
            elif "Tardy" in status:
                tardy += 1
            elif "Absent" in status:
                absent += 1

    if absent >= RED_ZONE_ABSENCES:
        zone = "red"
    elif absent >= YELLOW_ZONE_ABSENCES:
        zone = "yellow"
    else:
        zone = "green"

    return AttendanceSummary(
        total_blocks=total,
        on_time_blocks=on_time,
        tardy_blocks=tardy,
        absent_blocks=absent,
        attendance_rate=math.floor(on_time / total * 100 + 0.5) if total else 0,
        zone=zone,
    )
