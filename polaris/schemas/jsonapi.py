from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Resource(BaseModel):
    """
    Generic JSON:API resource object.

    Subclasses narrow ``attributes`` to a concrete model.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    id: str
    attributes: Dict[str, Any] = Field(default_factory=dict)
    relationships: Optional[Dict[str, Any]] = None


class PaginationMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    offset: Optional[int] = None
    limit: Optional[int] = None
    total: Optional[int] = None


class PageEnvelope(BaseModel, Generic[T]):
    """
    One page of a collection response.

    ``data`` keeps server order; ``included`` is not deduplicated and is kept
    as raw JSON objects since side-loaded resources come in arbitrary shapes.
    """

    model_config = ConfigDict(extra="ignore")

    data: List[T]
    included: List[Dict[str, Any]] = Field(default_factory=list)
    meta: Optional[PaginationMeta] = None
