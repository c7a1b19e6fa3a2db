# portal/api/attendance.py
from fastapi import APIRouter, Depends, Path

from portal.api.deps import get_airtable, get_app_settings, get_directory
from portal.core.airtable import AirtableClient
from portal.core.config import Settings
from portal.crud.attendance import get_attendance, summarize
from portal.db.directory import StudentDirectory
from portal.schemas.attendance import AttendanceResponse

router = APIRouter()


@router.get("/{preferred_name}", response_model=AttendanceResponse)
async def get_attendance_for_student(
    preferred_name: str = Path(..., description="Student's preferred (display) name"),
    client: AirtableClient = Depends(get_airtable),
    directory: StudentDirectory = Depends(get_directory),
    settings: Settings = Depends(get_app_settings),
):
    # NotFoundError / UpstreamError are rendered by the handler in portal.main
    records = await get_attendance(client, directory, preferred_name, settings)
    return AttendanceResponse(records=records, summary=summarize(records))
