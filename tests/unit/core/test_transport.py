import httpx
import pytest
from httpx import Response

from polaris.core.errors import DeserializationError, TransportFailure
from polaris.core.transport import HttpTransport, TransportResponse


@pytest.mark.asyncio
async def test_request_returns_status_and_body(respx_mock):
    route = respx_mock.get("https://mock.api/things").mock(
        return_value=Response(200, json={"data": []})
    )

    async with HttpTransport(timeout=5) as transport:
        resp = await transport.request(
            "GET", "https://mock.api/things", params=[("page[limit]", "25")]
        )

    assert resp.status == 200
    assert resp.is_success
    assert resp.json() == {"data": []}
    assert route.called
    # httpx 会对方括号进行编码
    assert route.calls.last.request.url.params["page[limit]"] == "25"


@pytest.mark.asyncio
async def test_non_success_status_is_not_raised(respx_mock):
    respx_mock.get("https://mock.api/missing").mock(return_value=Response(404, text="nope"))

    async with HttpTransport() as transport:
        resp = await transport.request("GET", "https://mock.api/missing")

    assert resp.status == 404
    assert not resp.is_success
    assert resp.text == "nope"


@pytest.mark.asyncio
async def test_repeated_query_keys_are_preserved(respx_mock):
    route = respx_mock.get("https://mock.api/issues").mock(return_value=Response(200, json={}))

    async with HttpTransport() as transport:
        await transport.request(
            "GET", "https://mock.api/issues", params=[("run-id[]", "r1"), ("run-id[]", "r2")]
        )

    assert route.calls.last.request.url.params.get_list("run-id[]") == ["r1", "r2"]


@pytest.mark.asyncio
async def test_form_body(respx_mock):
    route = respx_mock.post("https://mock.api/auth").mock(return_value=Response(200, json={}))

    async with HttpTransport() as transport:
        await transport.request("POST", "https://mock.api/auth", data={"accesstoken": "t"})

    request = route.calls.last.request
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.content == b"accesstoken=t"


@pytest.mark.asyncio
async def test_network_error_becomes_transport_failure(respx_mock):
    respx_mock.get("https://mock.api/down").mock(side_effect=httpx.ConnectError("refused"))

    async with HttpTransport() as transport:
        with pytest.raises(TransportFailure):
            await transport.request("GET", "https://mock.api/down")


@pytest.mark.asyncio
async def test_timeout_becomes_transport_failure(respx_mock):
    respx_mock.get("https://mock.api/slow").mock(side_effect=httpx.ReadTimeout("slow"))

    async with HttpTransport() as transport:
        with pytest.raises(TransportFailure) as exc_info:
            await transport.request("GET", "https://mock.api/slow")

    assert "timed out" in str(exc_info.value)


def test_invalid_json_body_raises_deserialization_error():
    resp = TransportResponse(status=200, body=b"<html>")
    with pytest.raises(DeserializationError):
        resp.json()
