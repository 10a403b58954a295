"""
Relationship resolver

把 JSON:API 中稀疏的关系引用（只有 type + id）解析为 included 资源上的
可读属性（例如 severity 关系 -> taxon 名称）。任何一步失败都返回占位符，
不抛异常：关系数据缺失是常态。
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

FALLBACK = "-"
NAME_ATTRIBUTE = "/attributes/name"

IncludedIndex = Dict[str, Dict[str, Any]]

_MISSING = object()


def json_pointer(value: Any, pointer: str) -> Optional[Any]:
    """
    Look up an RFC 6901 pointer such as ``/severity/data/id``.

    Returns None when any segment is missing or the shape does not match.
    """
    if pointer == "":
        return value
    if not pointer.startswith("/"):
        return None

    current = value
    for raw in pointer[1:].split("/"):
        token = raw.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            current = current.get(token, _MISSING)
        elif isinstance(current, list):
            if not token.isdigit():
                return None
            index = int(token)
            current = current[index] if index < len(current) else _MISSING
        else:
            return None
        if current is _MISSING:
            return None
    return current


def index_key(resource_type: str, resource_id: str) -> str:
    return f"{resource_type}:{resource_id}"


def build_included_index(included: Iterable[Any]) -> IncludedIndex:
    """
    Index side-loaded resources by ``type:id``.

    Duplicates are expected when pages are merged; the last one wins.
    Entries without a string type and id are skipped.
    """
    index: IncludedIndex = {}
    for resource in included:
        if not isinstance(resource, dict):
            continue
        resource_type, resource_id = resource.get("type"), resource.get("id")
        if isinstance(resource_type, str) and isinstance(resource_id, str):
            index[index_key(resource_type, resource_id)] = resource
    logger.debug("Built included index: %d entries", len(index))
    return index


def lookup_included(
    relationships: Optional[Dict[str, Any]],
    relationship_path: str,
    type_prefix: str,
    index: IncludedIndex,
) -> Optional[Dict[str, Any]]:
    """Return the included resource a relationship points to, if any."""
    if not relationships:
        return None
    related_id = json_pointer(relationships, relationship_path)
    if not isinstance(related_id, str):
        return None
    return index.get(index_key(type_prefix, related_id))


def resolve_included(
    relationships: Optional[Dict[str, Any]],
    relationship_path: str,
    type_prefix: str,
    index: IncludedIndex,
    attribute: str = NAME_ATTRIBUTE,
    fallback: str = FALLBACK,
) -> str:
    """
    Resolve a relationship to a display string.

    Example:
        >>> resolve_included(issue.relationships, "/severity/data/id", "taxon", index)
        'High'
    """
    related = lookup_included(relationships, relationship_path, type_prefix, index)
    if related is None:
        return fallback
    value = json_pointer(related, attribute)
    return value if isinstance(value, str) else fallback


def path_segments(
    relationships: Optional[Dict[str, Any]],
    index: IncludedIndex,
    relationship_path: str = "/path/data/id",
) -> Optional[List[str]]:
    """Path segments of the included ``path`` resource, or None."""
    related = lookup_included(relationships, relationship_path, "path", index)
    if related is None:
        return None
    segments = json_pointer(related, "/attributes/path")
    if not isinstance(segments, list):
        return None
    return [s for s in segments if isinstance(s, str)]


def resolve_included_path(
    relationships: Optional[Dict[str, Any]],
    index: IncludedIndex,
    fallback: str = FALLBACK,
) -> str:
    """Join the included ``path`` resource's segments with ``/``."""
    segments = path_segments(relationships, index)
    return "/".join(segments) if segments is not None else fallback
