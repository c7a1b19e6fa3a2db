# portal/schemas/student.py
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Student(BaseModel):
    """One roster row after identity extraction. Holds the derived password, so never returned."""

    model_config = ConfigDict(frozen=True)

    preferred_name: str
    student_id: str
    password: str = Field(repr=False)

    @property
    def public(self) -> "StudentOut":
        return StudentOut(preferred_name=self.preferred_name, student_id=self.student_id)


class StudentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    preferred_name: str = Field(alias="preferredName")
    student_id: str = Field(alias="studentId")


class LoginRequest(BaseModel):
    # Optional so that missing fields reach authenticate() and come back as a 400
    model_config = ConfigDict(populate_by_name=True)

    preferred_name: Optional[str] = Field(default=None, alias="preferredName")
    password: Optional[str] = None


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    staff_override: bool = Field(alias="staffOverride")
    student: StudentOut
    access_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    staff_override: bool = Field(alias="staffOverride")
    student: StudentOut


AuthFailure = Literal["missing-fields", "not-found", "bad-password"]


class AuthResult(BaseModel):
    ok: bool
    staff_override: bool = False
    student: Optional[StudentOut] = None
    reason: Optional[AuthFailure] = None
