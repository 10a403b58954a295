import logging
from typing import Any, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from polaris.core.auth import AuthClient
from polaris.core.config import PolarisConfig
from polaris.core.errors import ApiError, DeserializationError, NotFound
from polaris.core.session import TokenSession
from polaris.core.transport import HttpTransport, QueryParams, TransportResponse

logger = logging.getLogger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

M = TypeVar("M", bound=BaseModel)


def check_response(resp: TransportResponse, path: str = "") -> TransportResponse:
    """
    检查响应状态码

    Raises:
        NotFound: 404
        ApiError: 其他非 2xx 状态码
    """
    if resp.is_success:
        return resp
    detail = resp.text
    logger.error("HTTP error %d from %s: %s", resp.status, path, detail[:200])
    if resp.status == 404:
        raise NotFound(detail)
    raise ApiError(resp.status, detail)


def decode_model(resp: TransportResponse, model: Type[M]) -> M:
    try:
        return model.model_validate_json(resp.body)
    except ValidationError as e:
        raise DeserializationError(f"Unexpected {model.__name__} response: {e}") from e


class ApiClient:
    """
    Polaris API 异步客户端

    特性:
    - 自动注入 Bearer 认证头 (首次请求时换取 JWT 并缓存)
    - 默认 Accept: application/vnd.api+json
    - 统一的状态码检查与响应解码
    - 不做自动重试
    """

    def __init__(
        self,
        config: PolarisConfig,
        transport: Optional[HttpTransport] = None,
        session: Optional[TokenSession] = None,
    ):
        self.base_url = config.base_url.rstrip("/")
        self.transport = transport or HttpTransport()
        self.session = session or TokenSession(
            AuthClient(self.base_url, self.transport), config.api_token
        )
        logger.info("Initializing ApiClient with base_url=%s", self.base_url)

    async def _auth_headers(self, extra: Optional[Mapping[str, str]]) -> dict:
        credential = await self.session.get_credential()
        headers = {
            "Authorization": f"Bearer {credential.bearer_token}",
            "Accept": JSONAPI_MEDIA_TYPE,
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[QueryParams] = None,
        json: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        """Send an authenticated request and raise on non-2xx."""
        resp = await self.transport.request(
            method,
            f"{self.base_url}{path}",
            headers=await self._auth_headers(headers),
            params=params,
            json=json,
        )
        check_response(resp, path)
        logger.debug("Request successful: %s %s -> %d", method, path, resp.status)
        return resp

    async def get(
        self,
        path: str,
        params: Optional[QueryParams] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        return await self.request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        json: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        return await self.request("POST", path, json=json, headers=headers)

    async def get_model(
        self, path: str, model: Type[M], params: Optional[QueryParams] = None
    ) -> M:
        return decode_model(await self.get(path, params=params), model)

    async def get_json(
        self,
        path: str,
        params: Optional[QueryParams] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return (await self.get(path, params=params, headers=headers)).json()

    async def close(self) -> None:
        logger.info("Closing ApiClient connection")
        await self.transport.close()
