import logging
from typing import Any, Dict, Sequence

from polaris.api.common import page_params
from polaris.core.api_client import JSONAPI_MEDIA_TYPE, ApiClient
from polaris.core.errors import InvalidArgument
from polaris.schemas.polaris import TriageCurrentResponse, TriageValues

logger = logging.getLogger(__name__)


class TriageAPI:
    """
    Triage 查询与更新

    API:
    - GET /api/triage-query/v1/triage-current
    - GET /api/triage-query/v1/triage-history-items
    - POST /api/triage-command/v1/triage-issues
    """

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_triage(self, project_id: str, issue_key: str) -> TriageCurrentResponse:
        params = [
            ("filter[triage-current][project-id][$eq]", project_id),
            ("filter[triage-current][issue-key][$eq]", issue_key),
        ]
        logger.debug("Getting triage: project_id=%s, issue_key=%s", project_id, issue_key)
        return await self.client.get_model(
            "/api/triage-query/v1/triage-current", TriageCurrentResponse, params=params
        )

    async def update_triage(
        self,
        project_id: str,
        issue_keys: Sequence[str],
        triage_values: TriageValues,
    ) -> Any:
        """
        批量更新 issue 的 triage 值

        Raises:
            InvalidArgument: 没有 issue key，或 triage_values 全部为空
        """
        if not issue_keys:
            raise InvalidArgument("At least one issue key is required")
        if triage_values.is_empty():
            raise InvalidArgument("At least one of dismiss, owner or commentary is required")

        body: Dict[str, Any] = {
            "data": {
                "type": "triage-issues",
                "attributes": {
                    "project-id": project_id,
                    "issue-keys": list(issue_keys),
                    "triage-values": triage_values.to_payload(),
                },
            }
        }
        logger.info("Updating triage: project_id=%s, %d issues", project_id, len(issue_keys))
        resp = await self.client.post(
            "/api/triage-command/v1/triage-issues",
            json=body,
            headers={"Content-Type": JSONAPI_MEDIA_TYPE},
        )
        return resp.json() if resp.body else {}

    async def get_triage_history(
        self, project_id: str, issue_key: str, limit: int = 10, offset: int = 0
    ) -> Any:
        params = [
            ("filter[triage-history-items][project-id][$eq]", project_id),
            ("filter[triage-history-items][issue-key][$eq]", issue_key),
        ]
        params.extend(page_params(limit, offset))
        return await self.client.get_json(
            "/api/triage-query/v1/triage-history-items", params=params
        )
