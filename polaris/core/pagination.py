"""
Auto-pagination over offset/limit collection endpoints.

Pages are fetched strictly one after another, so merged ``data`` keeps page
arrival order and the offset only moves forward. Any page error aborts the run
and propagates unchanged; no partial result is returned.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from polaris.core.errors import InvalidArgument
from polaris.schemas.jsonapi import PageEnvelope, PaginationMeta

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def fetch_all(
    fetch_page: Callable[[int, int], Awaitable[PageEnvelope[T]]], page_size: int
) -> PageEnvelope[T]:
    """
    Drain a paginated collection.

    Stops when a page comes back shorter than ``page_size``, or when the most
    recently reported ``meta.total`` says the next offset is past the end.

    Args:
        fetch_page: ``async (offset, limit) -> PageEnvelope``
        page_size: items requested per page, must be positive

    Returns:
        One envelope with every page's ``data`` concatenated, every page's
        ``included`` appended (duplicates kept) and a summary meta of
        ``{offset: 0, limit: None, total: <last reported total>}``, or no
        meta at all when no page reported a total.

    Raises:
        InvalidArgument: page_size is not positive
    """
    if page_size <= 0:
        raise InvalidArgument(f"page_size must be positive, got {page_size}")

    all_data = []
    all_included = []
    offset = 0
    total: Optional[int] = None
    pages = 0

    while True:
        page = await fetch_page(offset, page_size)
        pages += 1

        # 后续页面的 total 覆盖之前的值
        if page.meta is not None and page.meta.total is not None:
            total = page.meta.total

        count = len(page.data)
        all_data.extend(page.data)
        all_included.extend(page.included)
        logger.debug(
            "Fetched page %d: offset=%d, items=%d, total=%s", pages, offset, count, total
        )

        if count < page_size:
            break
        offset += page_size
        if total is not None and offset >= total:
            break

    logger.info("Auto-pagination finished: %d pages, %d items", pages, len(all_data))
    return PageEnvelope(
        data=all_data,
        included=all_included,
        meta=PaginationMeta(offset=0, limit=None, total=total) if total is not None else None,
    )
