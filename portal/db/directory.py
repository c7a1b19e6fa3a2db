# portal/db/directory.py
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from portal.core.airtable import AirtableClient
from portal.core.config import Settings
from portal.crud.student import build_students, fetch_roster, normalize_name
from portal.schemas.student import Student

logger = logging.getLogger(__name__)


class StudentDirectory:
    """In-memory snapshot of the roster, keyed by normalized preferred name.

    ``refresh()`` builds a complete new dict and swaps it in with one
    assignment, so lookups see either the old snapshot or the new one.
    The lock only serializes refreshes; lookups never take it.
    """

    def __init__(self, client: AirtableClient, settings: Settings):
        self._client = client
        self._settings = settings
        self._students: Dict[str, Student] = {}
        self._lock = asyncio.Lock()
        self.loaded_at: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self._students)

    def lookup(self, name) -> Optional[Student]:
        key = normalize_name(name)
        if key is None:
            return None
        return self._students.get(key)

    def students(self) -> List[Student]:
        return list(self._students.values())

    async def refresh(self) -> bool:
        """Reload the roster. Returns False if another refresh was already running.

        Upstream errors propagate; the current snapshot is left untouched.
        """
        if self._lock.locked():
            logger.warning("[Directory] Refresh already in progress, skipping")
            return False

        async with self._lock:
            records = await fetch_roster(self._client, self._settings)
            snapshot = build_students(records, self._settings.PORTAL_PW_SECRET)
            self._students = snapshot
            self.loaded_at = datetime.now(timezone.utc)

        logger.info(f"✅ [Directory] Loaded {len(snapshot)} students from Airtable")
        return True

    async def run_periodic(self, interval: float) -> None:
        # Runs until cancelled; a failed refresh keeps the previous snapshot
        while True:
            await asyncio.sleep(interval)
            try:
                await self.refresh()
            except Exception:
                logger.exception(
                    f"🔥 [Directory] Refresh failed, keeping {len(self)} cached students"
                )
