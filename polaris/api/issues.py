import logging
from typing import Any, Dict, Optional, Sequence

from polaris.api.common import page_params
from polaris.core.api_client import ApiClient
from polaris.schemas.jsonapi import PageEnvelope
from polaris.schemas.polaris import Issue

logger = logging.getLogger(__name__)

LIST_INCLUDES = ("severity", "issue-type", "tool-domain-service")
DETAIL_INCLUDES = LIST_INCLUDES + ("path", "transitions")


def _include_params(names: Sequence[str]):
    return [("include[issue][]", name) for name in names]


class IssueAPI:
    """
    Issue 查询接口

    API:
    - GET /api/query/v1/issues
    - GET /api/query/v1/issues/{issue_id}
    """

    def __init__(self, client: ApiClient):
        self.client = client

    async def list_issues(
        self,
        project_id: str,
        branch_id: Optional[str] = None,
        run_ids: Optional[Sequence[str]] = None,
        limit: int = 25,
        offset: int = 0,
    ) -> PageEnvelope[Issue]:
        """
        获取 issue 列表（单页）

        Args:
            project_id: 项目 ID
            branch_id: 分支 ID
            run_ids: 运行记录 ID 列表，每个值一个 run-id[] 参数
            limit: 每页数量
            offset: 偏移量

        Returns:
            PageEnvelope[Issue]，severity / issue-type / tool-domain-service 在 included 中
        """
        params = [("project-id", project_id)]
        params.extend(page_params(limit, offset))
        if branch_id:
            params.append(("branch-id", branch_id))
        for run_id in run_ids or ():
            params.append(("run-id[]", run_id))
        params.extend(_include_params(LIST_INCLUDES))

        logger.debug(
            "Listing issues: project_id=%s, branch_id=%s, offset=%d",
            project_id,
            branch_id,
            offset,
        )
        return await self.client.get_model(
            "/api/query/v1/issues", PageEnvelope[Issue], params=params
        )

    async def get_issue(
        self, issue_id: str, project_id: str, branch_id: str
    ) -> Dict[str, Any]:
        """Single issue as raw JSON (``data`` + ``included``)."""
        params = [("project-id", project_id), ("branch-id", branch_id)]
        params.extend(_include_params(DETAIL_INCLUDES))

        logger.debug("Getting issue: issue_id=%s, project_id=%s", issue_id, project_id)
        return await self.client.get_json(f"/api/query/v1/issues/{issue_id}", params=params)
