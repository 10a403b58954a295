"""
CommonAPI - common-object service

- GET /api/common/v0/projects
- GET /api/common/v0/branches
- GET /api/common/v0/runs
"""

import logging
from typing import List, Optional, Tuple

from polaris.core.api_client import ApiClient
from polaris.schemas.jsonapi import PageEnvelope
from polaris.schemas.polaris import Branch, Project, Run

logger = logging.getLogger(__name__)


def page_params(limit: int, offset: int) -> List[Tuple[str, str]]:
    return [("page[limit]", str(limit)), ("page[offset]", str(offset))]


class CommonAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    async def list_projects(
        self, name_filter: Optional[str] = None, limit: int = 25, offset: int = 0
    ) -> PageEnvelope[Project]:
        """
        List projects, optionally filtering by exact name.

        Branches are always side-loaded.
        """
        params = page_params(limit, offset)
        if name_filter:
            params.append(("filter[project][name][$eq]", name_filter))
        params.append(("include[project][]", "branches"))

        logger.debug("Listing projects: name=%s, limit=%d, offset=%d", name_filter, limit, offset)
        return await self.client.get_model(
            "/api/common/v0/projects", PageEnvelope[Project], params=params
        )

    async def list_branches(
        self, project_id: str, limit: int = 25, offset: int = 0
    ) -> PageEnvelope[Branch]:
        params = [("filter[branch][project][id][$eq]", project_id)]
        params.extend(page_params(limit, offset))

        logger.debug("Listing branches: project_id=%s, offset=%d", project_id, offset)
        return await self.client.get_model(
            "/api/common/v0/branches", PageEnvelope[Branch], params=params
        )

    async def list_runs(
        self,
        project_id: str,
        revision_id: Optional[str] = None,
        limit: int = 25,
        offset: int = 0,
    ) -> PageEnvelope[Run]:
        params = [("filter[run][project][id][$eq]", project_id)]
        params.extend(page_params(limit, offset))
        if revision_id:
            params.append(("filter[run][revision][id][$eq]", revision_id))

        logger.debug(
            "Listing runs: project_id=%s, revision_id=%s, offset=%d",
            project_id,
            revision_id,
            offset,
        )
        return await self.client.get_model(
            "/api/common/v0/runs", PageEnvelope[Run], params=params
        )
