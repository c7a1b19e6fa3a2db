# portal/api/auth.py
from datetime import timedelta

from fastapi import APIRouter, Depends

from portal.api.deps import get_app_settings, get_current_session, get_directory
from portal.core.auth import authenticate
from portal.core.config import Settings
from portal.core.errors import AuthError, ValidationError
from portal.core.security import create_access_token
from portal.db.directory import StudentDirectory
from portal.schemas.student import LoginRequest, LoginResponse, SessionResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    form: LoginRequest,
    directory: StudentDirectory = Depends(get_directory),
    settings: Settings = Depends(get_app_settings),
):
    result = authenticate(directory, form.preferred_name, form.password, settings.MASTER_PORTAL_PW)
    if result.reason == "missing-fields":
        raise ValidationError("Preferred name and password are required")
    # not-found and bad-password look the same from outside
    if not result.ok:
        raise AuthError()

    access_token = create_access_token(
        data={
            "sub": result.student.preferred_name,
            "sid": result.student.student_id,
            "staff": result.staff_override,
        },
        secret=settings.PORTAL_PW_SECRET,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        algorithm=settings.ALGORITHM,
    )
    return LoginResponse(
        staff_override=result.staff_override,
        student=result.student,
        access_token=access_token,
    )


@router.get("/me", response_model=SessionResponse)
def me(session: SessionResponse = Depends(get_current_session)):
    return session
