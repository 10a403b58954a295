"""
HTTP transport

对 httpx.AsyncClient 的薄封装：执行请求并返回状态码 + 响应体，
非 2xx 响应不抛异常（由调用方检查状态码），网络层错误统一转换为 TransportFailure。
"""

import json as jsonlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import httpx

from polaris.core.config import settings
from polaris.core.errors import DeserializationError, TransportFailure

logger = logging.getLogger(__name__)

QueryParams = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


@dataclass(frozen=True)
class TransportResponse:
    status: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        try:
            return jsonlib.loads(self.body)
        except ValueError as e:
            raise DeserializationError(f"Response body is not valid JSON: {e}") from e


class HttpTransport:
    """
    Polaris HTTP 传输层

    特性:
    - 单个 AsyncClient 复用连接
    - 不做重试，错误直接上抛
    - 非 2xx 响应原样返回
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        # 未指定时使用 POLARIS_HTTP_TIMEOUT
        self.timeout = timeout if timeout is not None else settings.POLARIS_HTTP_TIMEOUT
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
        )
        logger.debug("HttpTransport initialized (timeout=%.1fs)", self.timeout)

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[QueryParams] = None,
        data: Optional[Mapping[str, str]] = None,
        json: Optional[Any] = None,
    ) -> TransportResponse:
        """
        执行一次 HTTP 请求

        Args:
            method: HTTP 方法 (GET, POST, ...)
            url: 完整 URL
            headers: 请求头
            params: 查询参数，允许重复 key（传入 (key, value) 列表）
            data: 表单字段 (application/x-www-form-urlencoded)
            json: JSON 请求体

        Returns:
            TransportResponse

        Raises:
            TransportFailure: 连接失败、超时等网络层错误
        """
        logger.debug("Making %s request to %s", method, url)
        try:
            resp = await self.client.request(
                method,
                url,
                headers=dict(headers) if headers else None,
                params=params,
                data=data,
                json=json,
            )
        except httpx.TimeoutException as e:
            logger.error("%s %s timed out after %.1f seconds: %s", method, url, self.timeout, e)
            raise TransportFailure(f"Request timed out: {method} {url}") from e
        except httpx.HTTPError as e:
            logger.error("%s %s failed (network error): %s", method, url, e)
            raise TransportFailure(f"HTTP error: {e}") from e

        logger.debug("Response status: %d from %s", resp.status_code, url)
        return TransportResponse(
            status=resp.status_code,
            body=resp.content,
            headers=dict(resp.headers),
        )

    async def close(self) -> None:
        """关闭底层连接"""
        logger.debug("Closing HttpTransport connection")
        await self.client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
