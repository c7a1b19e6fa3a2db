# portal/core/config.py
from datetime import date
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portal.core.errors import ConfigError


class Settings(BaseSettings):
    # === Secrets (no defaults: the process must not start without them) ===
    PORTAL_PW_SECRET: str
    MASTER_PORTAL_PW: str = ""  # empty disables the staff override

    # === Airtable ===
    AIRTABLE_API_KEY: str
    AIRTABLE_BASE_ID: str
    AIRTABLE_API_URL: str = "https://api.airtable.com/v0"
    AIRTABLE_STUDENTS_TABLE: str = "Students"
    AIRTABLE_STUDENTS_VIEW: str = ""
    AIRTABLE_ATTENDANCE_TABLE: str = "Attendance"
    AIRTABLE_ATTENDANCE_VIEW: str = "Grid view"
    AIRTABLE_ATTENDANCE_NAME_FIELD: str = "PreferredNameText"
    AIRTABLE_COURSE_FIELD: str = "Current Course (from Student)"
    AIRTABLE_TIMEOUT: float = 10.0

    # Only records dated strictly after this day are returned
    ATTENDANCE_CUTOFF: date = date(2025, 9, 7)
    STUDENT_REFRESH_SECONDS: int = 300

    # === Sessions ===
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720

    # === Server ===
    ALLOWED_ORIGINS: str = ""  # comma-separated; empty allows any origin
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("PORTAL_PW_SECRET", "AIRTABLE_API_KEY", "AIRTABLE_BASE_ID")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("STUDENT_REFRESH_SECONDS")
    @classmethod
    def positive_interval(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def staff_override_enabled(self) -> bool:
        return bool(self.MASTER_PORTAL_PW)


_settings: Optional[Settings] = None


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, turning validation failures into ConfigError.

    Only the names of the offending variables are reported, never their values.
    """
    try:
        return Settings(**overrides)
    except PydanticValidationError as e:
        names = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ConfigError(
            "Missing or invalid configuration",
            details=", ".join(names) + " must be set (check your .env)",
        ) from None


def get_settings() -> Settings:
    # Created once per process
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
