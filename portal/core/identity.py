# portal/core/identity.py
import re
from typing import Any, Optional

# "S022 - Tamara", "S022–Tamara", "S022 — Tamara": hyphen, en dash or em dash
_ID_WITH_SEPARATOR = re.compile(r"^([A-Za-z][0-9]{2,})\s*[-–—]\s*", re.ASCII)
# "S022", "S022 Tamara", "S022/Tamara"
_ID_LEADING_TOKEN = re.compile(r"^([A-Za-z][0-9]{2,})\b", re.ASCII)


def extract_student_id(raw_name: Any) -> Optional[str]:
    """Pull the leading student identifier (letter + 2 or more digits) out of a Name field.

    Returns None when nothing can be derived; callers skip such rows.
    """
    if not isinstance(raw_name, str):
        return None

    m = _ID_WITH_SEPARATOR.match(raw_name)
    if m:
        return m.group(1)

    m = _ID_LEADING_TOKEN.match(raw_name)
    if m:
        return m.group(1)
    return None
