import pytest
from unittest.mock import AsyncMock, MagicMock

from polaris.api.common import CommonAPI, page_params
from polaris.schemas.jsonapi import PageEnvelope
from polaris.schemas.polaris import Branch, Project, Run


@pytest.fixture
def api_client():
    client = MagicMock()
    client.get_model = AsyncMock(return_value=PageEnvelope(data=[]))
    return client


def test_page_params():
    assert page_params(25, 50) == [("page[limit]", "25"), ("page[offset]", "50")]


@pytest.mark.asyncio
async def test_list_projects_without_filter(api_client):
    await CommonAPI(api_client).list_projects(limit=10, offset=20)

    api_client.get_model.assert_awaited_once_with(
        "/api/common/v0/projects",
        PageEnvelope[Project],
        params=[
            ("page[limit]", "10"),
            ("page[offset]", "20"),
            ("include[project][]", "branches"),
        ],
    )


@pytest.mark.asyncio
async def test_list_projects_with_name_filter(api_client):
    await CommonAPI(api_client).list_projects(name_filter="my-app")

    params = api_client.get_model.await_args.kwargs["params"]
    assert ("filter[project][name][$eq]", "my-app") in params
    assert params[-1] == ("include[project][]", "branches")


@pytest.mark.asyncio
async def test_list_branches(api_client):
    await CommonAPI(api_client).list_branches("p1", limit=5, offset=0)

    api_client.get_model.assert_awaited_once_with(
        "/api/common/v0/branches",
        PageEnvelope[Branch],
        params=[
            ("filter[branch][project][id][$eq]", "p1"),
            ("page[limit]", "5"),
            ("page[offset]", "0"),
        ],
    )


@pytest.mark.asyncio
async def test_list_runs_with_revision(api_client):
    await CommonAPI(api_client).list_runs("p1", revision_id="rev-9")

    args = api_client.get_model.await_args
    assert args.args == ("/api/common/v0/runs", PageEnvelope[Run])
    assert args.kwargs["params"] == [
        ("filter[run][project][id][$eq]", "p1"),
        ("page[limit]", "25"),
        ("page[offset]", "0"),
        ("filter[run][revision][id][$eq]", "rev-9"),
    ]


@pytest.mark.asyncio
async def test_list_runs_without_revision(api_client):
    await CommonAPI(api_client).list_runs("p1")

    params = api_client.get_model.await_args.kwargs["params"]
    assert all(not key.startswith("filter[run][revision]") for key, _ in params)
