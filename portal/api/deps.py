# portal/api/deps.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from portal.core.airtable import AirtableClient
from portal.core.config import Settings
from portal.core.errors import AuthError
from portal.core.security import decode_access_token
from portal.db.directory import StudentDirectory
from portal.schemas.student import SessionResponse

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_directory(request: Request) -> StudentDirectory:
    return request.app.state.directory


def get_airtable(request: Request) -> AirtableClient:
    return request.app.state.airtable


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    directory: StudentDirectory = Depends(get_directory),
) -> SessionResponse:
    if credentials is None:
        raise AuthError("Not authenticated")

    payload = decode_access_token(
        credentials.credentials, settings.PORTAL_PW_SECRET, algorithm=settings.ALGORITHM
    )
    student = directory.lookup(payload.get("sub"))
    # Token outlived the student (removed from the roster or re-numbered)
    if student is None or student.student_id != payload.get("sid"):
        raise AuthError("Could not validate credentials")

    return SessionResponse(staff_override=bool(payload.get("staff")), student=student.public)
