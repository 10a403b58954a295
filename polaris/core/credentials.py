"""
API token 的持久化存储（OS keychain）

本模块是唯一读写持久化凭证的地方；核心客户端只接收 token 字符串。
"""

import logging
from enum import Enum
from typing import Optional, Tuple

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from polaris.core.config import settings
from polaris.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "polaris-cli"
KEYRING_USER = "api-token"


class TokenSource(str, Enum):
    FLAG = "--api-token flag"
    ENV = "POLARIS_API_TOKEN env var"
    KEYCHAIN = "OS keychain"
    NONE = "none"


def load_token() -> Optional[str]:
    """Read the stored token; keychain errors count as "no token"."""
    try:
        return keyring.get_password(KEYRING_SERVICE, KEYRING_USER)
    except KeyringError as e:
        logger.warning("Could not read token from OS keychain: %s", e)
        return None


def store_token(token: str) -> None:
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USER, token)
    except KeyringError as e:
        raise ConfigurationError(f"Failed to store token in keychain: {e}") from e
    logger.info("API token stored in OS keychain")


def delete_token() -> bool:
    """Remove the stored token. Returns False when nothing was stored."""
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USER)
    except PasswordDeleteError:
        return False
    except KeyringError as e:
        raise ConfigurationError(f"Failed to remove token: {e}") from e
    logger.info("API token removed from OS keychain")
    return True


def resolve_token(flag_value: Optional[str] = None) -> Tuple[Optional[str], TokenSource]:
    """Pick the active token: command-line flag, then environment, then keychain."""
    if flag_value:
        return flag_value, TokenSource.FLAG
    if settings.POLARIS_API_TOKEN:
        return settings.POLARIS_API_TOKEN, TokenSource.ENV
    stored = load_token()
    if stored:
        return stored, TokenSource.KEYCHAIN
    return None, TokenSource.NONE
