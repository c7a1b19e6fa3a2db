# portal/core/airtable.py
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from portal.core.config import Settings
from portal.core.errors import UpstreamError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class AirtableClient:
    """Thin async wrapper over the Airtable "list records" endpoint.

    One ``httpx.AsyncClient`` is shared by the refresh task and all requests.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = f"{settings.AIRTABLE_API_URL.rstrip('/')}/{settings.AIRTABLE_BASE_ID}/"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {settings.AIRTABLE_API_KEY}",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(settings.AIRTABLE_TIMEOUT),
            transport=transport,
        )

    async def list_records(
        self,
        table: str,
        view: Optional[str] = None,
        filter_by_formula: Optional[str] = None,
        sort: Optional[List[tuple]] = None,
    ) -> List[Record]:
        """Return every record of a table, following the ``offset`` cursor across pages.

        ``sort`` is a list of ``(field, direction)`` pairs.
        """
        params = []
        if view:
            params.append(("view", view))
        if filter_by_formula:
            params.append(("filterByFormula", filter_by_formula))
        for i, (field, direction) in enumerate(sort or []):
            params.append((f"sort[{i}][field]", field))
            params.append((f"sort[{i}][direction]", direction))

        records: List[Record] = []
        offset = None
        while True:
            page_params = params + ([("offset", offset)] if offset else [])
            data = await self._get(quote(table, safe=""), page_params)
            records.extend(data.get("records") or [])
            offset = data.get("offset")
            if not offset:
                break
        return records

    async def _get(self, path: str, params: list) -> dict:
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"❌ [Airtable] Timeout on {path}: {e!r}")
            raise UpstreamError("Airtable request timed out", timeout=True)
        except httpx.HTTPError as e:
            logger.error(f"❌ [Airtable] Request to {path} failed: {e!r}")
            raise UpstreamError("Airtable is unreachable")

        if response.status_code != 200:
            # Body stays in the server log; callers only see the status
            logger.error(f"❌ [Airtable] {path} responded {response.status_code}: {response.text}")
            raise UpstreamError(
                details=f"Airtable responded with status {response.status_code}",
                upstream_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            logger.error(f"❌ [Airtable] {path} returned a non-JSON body")
            raise UpstreamError(details="Airtable returned an unreadable response")

    async def aclose(self) -> None:
        await self._client.aclose()
