"""
Token exchange 测试

测试覆盖:
1. 成功交换并解析 jwt
2. 非 2xx 状态与畸形响应体
3. 请求体格式（form 编码的 accesstoken）
"""

import httpx
import pytest
from httpx import Response
from pydantic import ValidationError

from polaris.core.auth import AuthClient, AuthenticateResponse, mask_token
from polaris.core.errors import AuthenticationFailed, TransportFailure
from polaris.core.transport import HttpTransport

BASE_URL = "https://polaris.test"
AUTH_URL = f"{BASE_URL}/api/auth/v2/authenticate"


def test_mask_token():
    assert mask_token("abcdefgh") == "abcd***"
    assert mask_token("abc") == "***"
    assert mask_token("") == "***"


def test_authenticate_response_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        AuthenticateResponse.model_validate({"jwt": "x", "refresh": "y"})


@pytest.mark.asyncio
async def test_authenticate_returns_jwt(respx_mock):
    route = respx_mock.post(AUTH_URL).mock(return_value=Response(200, json={"jwt": "eyJ.abc.def"}))

    async with HttpTransport() as transport:
        client = AuthClient(BASE_URL + "/", transport)
        jwt = await client.authenticate_with_token("api-token-123")

    assert jwt == "eyJ.abc.def"
    request = route.calls.last.request
    assert request.headers["Accept"] == "application/json"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.content == b"accesstoken=api-token-123"


@pytest.mark.asyncio
async def test_authenticate_rejected_token(respx_mock):
    respx_mock.post(AUTH_URL).mock(return_value=Response(401, text="bad token"))

    async with HttpTransport() as transport:
        client = AuthClient(BASE_URL, transport)
        with pytest.raises(AuthenticationFailed) as exc_info:
            await client.authenticate_with_token("wrong")

    assert exc_info.value.status == 401
    assert exc_info.value.body == "bad token"
    assert "401" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b'{"token": "x"}',
        b'{"jwt": "x", "expires": 60}',
        b'{"jwt": 42}',
    ],
)
async def test_authenticate_malformed_body(respx_mock, body):
    respx_mock.post(AUTH_URL).mock(return_value=Response(200, content=body))

    async with HttpTransport() as transport:
        client = AuthClient(BASE_URL, transport)
        with pytest.raises(AuthenticationFailed) as exc_info:
            await client.authenticate_with_token("api-token-123")

    assert exc_info.value.status == 200


@pytest.mark.asyncio
async def test_authenticate_transport_failure(respx_mock):
    respx_mock.post(AUTH_URL).mock(side_effect=httpx.ConnectError("refused"))

    async with HttpTransport() as transport:
        client = AuthClient(BASE_URL, transport)
        with pytest.raises(TransportFailure):
            await client.authenticate_with_token("api-token-123")
