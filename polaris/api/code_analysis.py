import logging
from typing import Any, Optional

from polaris.core.api_client import ApiClient

logger = logging.getLogger(__name__)


class CodeAnalysisAPI:
    """Event trees and source code for findings."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_events_with_source(
        self,
        finding_key: str,
        run_id: str,
        occurrence_number: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> Any:
        params = [("finding-key", finding_key), ("run-id", run_id)]
        if occurrence_number is not None:
            params.append(("occurrence-number", str(occurrence_number)))
        if max_depth is not None:
            params.append(("max-depth", str(max_depth)))

        logger.debug("Getting events: finding_key=%s, run_id=%s", finding_key, run_id)
        return await self.client.get_json(
            "/api/code-analysis/v0/events-with-source",
            params=params,
            headers={"Accept": "application/json", "Accept-Language": "en"},
        )

    async def get_source_code(self, run_id: str, path: str) -> str:
        resp = await self.client.get(
            "/api/code-analysis/v0/source-code",
            params=[("run-id", run_id), ("path", path)],
            headers={"Accept": "text/plain"},
        )
        return resp.text
