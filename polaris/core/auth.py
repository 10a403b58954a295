import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from polaris.core.errors import AuthenticationFailed
from polaris.core.transport import HttpTransport

logger = logging.getLogger(__name__)

AUTHENTICATE_PATH = "/api/auth/v2/authenticate"


def mask_token(token: str, visible_chars: int = 4) -> str:
    """对 token 进行脱敏处理，仅显示前几个字符"""
    if not token or len(token) <= visible_chars:
        return "***"
    return f"{token[:visible_chars]}***"


class AuthenticateResponse(BaseModel):
    """Body of POST /api/auth/v2/authenticate. Any other field is rejected."""

    model_config = ConfigDict(extra="forbid")

    jwt: str


class AuthClient:
    """Exchanges a long-lived API token for a short-lived JWT."""

    def __init__(self, base_url: str, transport: Optional[HttpTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.transport = transport or HttpTransport()

    async def authenticate_with_token(self, api_token: str) -> str:
        """
        Authenticate with an API token to get a JWT.

        The request body is form-encoded with a single ``accesstoken`` field.

        Raises:
            AuthenticationFailed: non-2xx status, or a body that is not ``{"jwt": "..."}``
            TransportFailure: the request could not be completed
        """
        url = f"{self.base_url}{AUTHENTICATE_PATH}"
        logger.debug("Exchanging API token %s at %s", mask_token(api_token), url)

        resp = await self.transport.request(
            "POST",
            url,
            headers={"Accept": "application/json"},
            data={"accesstoken": api_token},
        )

        if not resp.is_success:
            logger.error("Token exchange failed with HTTP status %d", resp.status)
            raise AuthenticationFailed(resp.status, resp.text)

        try:
            auth_resp = AuthenticateResponse.model_validate_json(resp.body)
        except ValidationError as e:
            # 不记录响应体，避免泄露 token
            logger.error("Token exchange response parsing failed: %d errors", e.error_count())
            raise AuthenticationFailed(resp.status, resp.text) from e

        logger.info("Token exchange succeeded: jwt=%s", mask_token(auth_resp.jwt))
        return auth_resp.jwt
