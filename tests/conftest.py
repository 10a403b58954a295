import logging
import sys

import pytest

from polaris.core.config import PolarisConfig
from polaris.schemas.jsonapi import PageEnvelope, PaginationMeta

# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

BASE_URL = "https://polaris.test"


@pytest.fixture(autouse=True)
def log_test_start(request):
    """Log test start and end for each test."""
    logger.info("=" * 80)
    logger.info("Starting test: %s", request.node.name)
    yield
    logger.info("Completed test: %s", request.node.name)
    logger.info("=" * 80)


@pytest.fixture
def config():
    return PolarisConfig(base_url=BASE_URL, api_token="api-token-123")


def make_page(items, offset=None, limit=None, total=None, included=None, meta=True):
    """构造一页 PageEnvelope，items 为任意对象"""
    return PageEnvelope(
        data=list(items),
        included=list(included or []),
        meta=PaginationMeta(offset=offset, limit=limit, total=total) if meta else None,
    )


def issue_json(n, severity_id=None, type_id=None):
    """构造 issue 资源 JSON"""
    relationships = {}
    if severity_id is not None:
        relationships["severity"] = {"data": {"type": "taxon", "id": severity_id}}
    if type_id is not None:
        relationships["issue-type"] = {"data": {"type": "issue-type", "id": type_id}}
    return {
        "type": "issue",
        "id": f"issue-{n:04d}",
        "attributes": {
            "issue-key": f"key-{n}",
            "finding-key": f"finding-{n}",
            "sub-tool": "NULL_RETURNS",
        },
        "relationships": relationships,
    }


@pytest.fixture
def page_factory():
    return make_page


@pytest.fixture
def issue_factory():
    return issue_json
