"""
Session / Token Cache

单槽凭证缓存：首次调用时执行一次 token 交换并缓存结果，之后所有调用直接
复用缓存，直到显式 clear() 或重新 authenticate()。本层不做主动过期。

并发策略：首次认证使用 asyncio.Lock 做 single-flight 去重（双重检查），
槽位本身的读写由 threading.Lock 保护，读者不会看到写了一半的值。
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from polaris.core.auth import AuthClient, mask_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    bearer_token: str

    def __repr__(self) -> str:
        return f"Credential(bearer_token={mask_token(self.bearer_token)!r})"


class CredentialCache:
    """Holds at most one credential."""

    def __init__(self):
        self._credential: Optional[Credential] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[Credential]:
        with self._lock:
            return self._credential

    def set(self, credential: Credential) -> None:
        with self._lock:
            self._credential = credential
        logger.debug("Credential cached: %r", credential)

    def clear(self) -> None:
        with self._lock:
            self._credential = None
        logger.debug("Credential cache cleared")


class TokenSession:
    """
    Serves bearer credentials to API callers.

    Owned by one client instance; there is no module-level credential state.
    """

    def __init__(
        self,
        auth_client: AuthClient,
        api_token: str,
        cache: Optional[CredentialCache] = None,
    ):
        self.auth_client = auth_client
        self._api_token = api_token
        self.cache = cache or CredentialCache()
        self._auth_lock = asyncio.Lock()

    async def get_credential(self) -> Credential:
        """
        Return the cached credential, authenticating on first use.

        Concurrent first calls collapse into a single exchange.
        """
        # 快速路径：已缓存则直接返回，无需网络访问
        cached = self.cache.get()
        if cached is not None:
            return cached

        async with self._auth_lock:
            # 双重检查：等待锁期间其他协程可能已完成认证
            cached = self.cache.get()
            if cached is not None:
                logger.debug("Using credential cached by a concurrent caller")
                return cached
            return await self._exchange()

    async def authenticate(self) -> Credential:
        """Unconditionally exchange the API token and overwrite the cache."""
        async with self._auth_lock:
            return await self._exchange()

    def clear(self) -> None:
        self.cache.clear()

    async def _exchange(self) -> Credential:
        # 失败时异常直接上抛，缓存保持为空，下次调用会重新认证
        jwt = await self.auth_client.authenticate_with_token(self._api_token)
        credential = Credential(bearer_token=jwt)
        self.cache.set(credential)
        logger.info("Authenticated: %r", credential)
        return credential
