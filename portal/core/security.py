# portal/core/security.py
import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from portal.core.config import get_settings
from portal.core.errors import AuthError, ConfigError

# Context label for the token signing key, so the portal secret is never a JWT key itself
_SESSION_KEY_LABEL = b"portal-session-token"


def _resolve_secret(secret: Optional[str]) -> str:
    if secret is None:
        secret = get_settings().PORTAL_PW_SECRET
    if not secret:
        raise ConfigError("PORTAL_PW_SECRET is not set")
    return secret


def derive_password(student_id: str, secret: Optional[str] = None) -> str:
    """Derive the login password for a student id.

    HMAC-SHA256 of the trimmed id, URL-safe base64 without padding, first
    11 characters, shaped as ``ac-XXXXX-XXXXXX``.
    """
    key = _resolve_secret(secret).encode("utf-8")
    digest = hmac.new(key, str(student_id).strip().encode("utf-8"), hashlib.sha256).digest()
    raw = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
    return f"ac-{raw[:5]}-{raw[5:11]}"


def session_signing_key(secret: Optional[str] = None) -> str:
    key = _resolve_secret(secret).encode("utf-8")
    return hmac.new(key, _SESSION_KEY_LABEL, hashlib.sha256).hexdigest()


def create_access_token(
    data: dict,
    secret: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    algorithm: str = "HS256",
) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, session_signing_key(secret), algorithm=algorithm)


def decode_access_token(token: str, secret: Optional[str] = None, algorithm: str = "HS256") -> dict:
    """Decode a session token and return its payload."""
    try:
        return jwt.decode(token, session_signing_key(secret), algorithms=[algorithm])
    except JWTError:
        raise AuthError("Could not validate credentials")
