"""
Polaris 客户端异常体系

所有异常均继承自 PolarisError。httpx 异常仅在 transport 层转换为
TransportFailure，pydantic 校验异常仅在解码层转换为 DeserializationError，
上层逻辑不直接匹配第三方库的异常类型。
"""

from typing import Optional


class PolarisError(Exception):
    """Base class for every error raised by this package."""


class TransportFailure(PolarisError):
    """The request could not be completed (connect error, timeout, ...)."""


class AuthenticationFailed(PolarisError):
    """Token exchange was rejected or returned an unusable body."""

    def __init__(self, status: Optional[int], body: str):
        self.status = status
        self.body = body
        super().__init__(f"Authentication failed: HTTP {status}: {body}")


class ApiError(PolarisError):
    """Non-success response from a resource endpoint."""

    def __init__(self, status: int, detail: str):
        self.status = status
        self.detail = detail
        super().__init__(f"API error {status}: {detail}")


class NotFound(ApiError):
    def __init__(self, detail: str, status: int = 404):
        super().__init__(status, detail)

    def __str__(self) -> str:
        return f"Not found: {self.detail}"


class DeserializationError(PolarisError):
    """Response body did not match the expected resource/page shape."""


class InvalidArgument(PolarisError, ValueError):
    """Caller-side misuse, e.g. a zero page size."""


class ConfigurationError(PolarisError):
    """Missing or unusable configuration (no API token, keychain failure)."""
