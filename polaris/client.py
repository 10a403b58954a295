"""
PolarisClient - 高层客户端

组合各 API 类，提供单页查询和基于 fetch_all 的全量查询 (list_all_*)。
"""

import logging
from typing import Any, Optional, Sequence

from polaris.api import CodeAnalysisAPI, CommonAPI, IssueAPI, TriageAPI
from polaris.core.api_client import ApiClient
from polaris.core.config import PolarisConfig
from polaris.core.errors import NotFound
from polaris.core.pagination import fetch_all
from polaris.core.session import Credential, TokenSession
from polaris.core.transport import HttpTransport
from polaris.schemas.jsonapi import PageEnvelope
from polaris.schemas.polaris import (
    Branch,
    Issue,
    Project,
    Run,
    TriageCurrentResponse,
    TriageValues,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25


class PolarisClient:
    """High-level client for the Polaris API. One API token per instance."""

    def __init__(
        self,
        config: PolarisConfig,
        transport: Optional[HttpTransport] = None,
        session: Optional[TokenSession] = None,
    ):
        self.config = config
        self.api = ApiClient(config, transport=transport, session=session)
        self.common = CommonAPI(self.api)
        self.issues = IssueAPI(self.api)
        self.triage = TriageAPI(self.api)
        self.code_analysis = CodeAnalysisAPI(self.api)

    async def authenticate(self) -> Credential:
        """Exchange the API token now, replacing any cached credential."""
        return await self.api.session.authenticate()

    # ── Projects ──

    async def list_projects(
        self, name_filter: Optional[str] = None, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> PageEnvelope[Project]:
        return await self.common.list_projects(name_filter, limit, offset)

    async def list_all_projects(
        self, name_filter: Optional[str] = None, page_size: int = DEFAULT_PAGE_SIZE
    ) -> PageEnvelope[Project]:
        async def page(offset: int, limit: int) -> PageEnvelope[Project]:
            return await self.common.list_projects(name_filter, limit, offset)

        return await fetch_all(page, page_size)

    # ── Branches ──

    async def list_branches(
        self, project_id: str, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> PageEnvelope[Branch]:
        return await self.common.list_branches(project_id, limit, offset)

    async def list_all_branches(
        self, project_id: str, page_size: int = DEFAULT_PAGE_SIZE
    ) -> PageEnvelope[Branch]:
        async def page(offset: int, limit: int) -> PageEnvelope[Branch]:
            return await self.common.list_branches(project_id, limit, offset)

        return await fetch_all(page, page_size)

    async def find_main_branch(
        self, project_id: str, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Branch:
        """
        Return the project's main branch.

        Raises:
            NotFound: no branch is flagged main-for-project
        """
        branches = await self.list_all_branches(project_id, page_size)
        for branch in branches.data:
            if branch.is_main:
                logger.debug("Main branch for %s: %s", project_id, branch.id)
                return branch
        raise NotFound(f"No main branch found for project {project_id}")

    # ── Runs ──

    async def list_runs(
        self,
        project_id: str,
        revision_id: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> PageEnvelope[Run]:
        return await self.common.list_runs(project_id, revision_id, limit, offset)

    async def list_all_runs(
        self,
        project_id: str,
        revision_id: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> PageEnvelope[Run]:
        async def page(offset: int, limit: int) -> PageEnvelope[Run]:
            return await self.common.list_runs(project_id, revision_id, limit, offset)

        return await fetch_all(page, page_size)

    # ── Issues ──

    async def list_issues(
        self,
        project_id: str,
        branch_id: Optional[str] = None,
        run_ids: Optional[Sequence[str]] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> PageEnvelope[Issue]:
        return await self.issues.list_issues(project_id, branch_id, run_ids, limit, offset)

    async def list_all_issues(
        self,
        project_id: str,
        branch_id: Optional[str] = None,
        run_ids: Optional[Sequence[str]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> PageEnvelope[Issue]:
        async def page(offset: int, limit: int) -> PageEnvelope[Issue]:
            return await self.issues.list_issues(project_id, branch_id, run_ids, limit, offset)

        return await fetch_all(page, page_size)

    async def get_issue(self, issue_id: str, project_id: str, branch_id: str) -> Any:
        return await self.issues.get_issue(issue_id, project_id, branch_id)

    # ── Code analysis ──

    async def get_events_with_source(
        self,
        finding_key: str,
        run_id: str,
        occurrence_number: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> Any:
        return await self.code_analysis.get_events_with_source(
            finding_key, run_id, occurrence_number, max_depth
        )

    async def get_source_code(self, run_id: str, path: str) -> str:
        return await self.code_analysis.get_source_code(run_id, path)

    # ── Triage ──

    async def get_triage(self, project_id: str, issue_key: str) -> TriageCurrentResponse:
        return await self.triage.get_triage(project_id, issue_key)

    async def update_triage(
        self, project_id: str, issue_keys: Sequence[str], triage_values: TriageValues
    ) -> Any:
        return await self.triage.update_triage(project_id, issue_keys, triage_values)

    async def get_triage_history(
        self, project_id: str, issue_key: str, limit: int = 10, offset: int = 0
    ) -> Any:
        return await self.triage.get_triage_history(project_id, issue_key, limit, offset)

    async def close(self) -> None:
        await self.api.close()

    async def __aenter__(self) -> "PolarisClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
