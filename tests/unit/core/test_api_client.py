"""
ApiClient 测试

测试覆盖:
1. Bearer / Accept 头注入与首次请求认证
2. 状态码到异常的映射
3. 响应解码失败
"""

import httpx
import pytest
from httpx import Response

from polaris.core.api_client import JSONAPI_MEDIA_TYPE, ApiClient
from polaris.core.errors import ApiError, DeserializationError, NotFound, TransportFailure
from polaris.schemas.jsonapi import PageEnvelope
from polaris.schemas.polaris import Project

BASE_URL = "https://polaris.test"
AUTH_URL = f"{BASE_URL}/api/auth/v2/authenticate"


@pytest.fixture
def auth_route(respx_mock):
    return respx_mock.post(AUTH_URL).mock(return_value=Response(200, json={"jwt": "jwt-xyz"}))


@pytest.mark.asyncio
async def test_injects_bearer_and_accept_headers(respx_mock, config, auth_route):
    route = respx_mock.get(f"{BASE_URL}/api/things").mock(return_value=Response(200, json={}))

    client = ApiClient(config)
    try:
        await client.get("/api/things")
        await client.get("/api/things")
    finally:
        await client.close()

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer jwt-xyz"
    assert request.headers["Accept"] == JSONAPI_MEDIA_TYPE
    # 第二次请求复用缓存的 JWT
    assert auth_route.call_count == 1
    assert route.call_count == 2


@pytest.mark.asyncio
async def test_extra_headers_override_accept(respx_mock, config, auth_route):
    route = respx_mock.get(f"{BASE_URL}/api/source").mock(return_value=Response(200, text="x"))

    client = ApiClient(config)
    try:
        await client.get("/api/source", headers={"Accept": "text/plain"})
    finally:
        await client.close()

    assert route.calls.last.request.headers["Accept"] == "text/plain"


@pytest.mark.asyncio
async def test_404_raises_not_found(respx_mock, config, auth_route):
    respx_mock.get(f"{BASE_URL}/api/missing").mock(return_value=Response(404, text="no such issue"))

    client = ApiClient(config)
    try:
        with pytest.raises(NotFound) as exc_info:
            await client.get("/api/missing")
    finally:
        await client.close()

    assert exc_info.value.status == 404
    assert str(exc_info.value) == "Not found: no such issue"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 403, 500, 503])
async def test_other_errors_raise_api_error(respx_mock, config, auth_route, status):
    respx_mock.get(f"{BASE_URL}/api/broken").mock(return_value=Response(status, text="boom"))

    client = ApiClient(config)
    try:
        with pytest.raises(ApiError) as exc_info:
            await client.get("/api/broken")
    finally:
        await client.close()

    assert not isinstance(exc_info.value, NotFound)
    assert exc_info.value.status == status
    assert exc_info.value.detail == "boom"
    assert str(exc_info.value) == f"API error {status}: boom"


@pytest.mark.asyncio
async def test_get_model_decodes_page(respx_mock, config, auth_route):
    respx_mock.get(f"{BASE_URL}/api/projects").mock(
        return_value=Response(
            200,
            json={
                "data": [{"type": "project", "id": "p1", "attributes": {"name": "demo"}}],
                "meta": {"offset": 0, "limit": 25, "total": 1},
            },
        )
    )

    client = ApiClient(config)
    try:
        page = await client.get_model("/api/projects", PageEnvelope[Project])
    finally:
        await client.close()

    assert page.data[0].attributes.name == "demo"
    assert page.meta.total == 1


@pytest.mark.asyncio
async def test_get_model_rejects_wrong_shape(respx_mock, config, auth_route):
    respx_mock.get(f"{BASE_URL}/api/projects").mock(
        return_value=Response(200, json={"items": []})
    )

    client = ApiClient(config)
    try:
        with pytest.raises(DeserializationError):
            await client.get_model("/api/projects", PageEnvelope[Project])
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_get_json_rejects_non_json(respx_mock, config, auth_route):
    respx_mock.get(f"{BASE_URL}/api/detail").mock(return_value=Response(200, text="<html>"))

    client = ApiClient(config)
    try:
        with pytest.raises(DeserializationError):
            await client.get_json("/api/detail")
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_timeout_becomes_transport_failure(respx_mock, config, auth_route):
    respx_mock.get(f"{BASE_URL}/api/slow").mock(side_effect=httpx.ReadTimeout("slow"))

    client = ApiClient(config)
    try:
        with pytest.raises(TransportFailure, match="timed out"):
            await client.get("/api/slow")
    finally:
        await client.close()
