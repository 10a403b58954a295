from .jsonapi import PageEnvelope, PaginationMeta, Resource
from .polaris import (
    Branch,
    Issue,
    Project,
    Run,
    TriageCurrent,
    TriageCurrentResponse,
    TriageValues,
)

__all__ = [
    "PageEnvelope",
    "PaginationMeta",
    "Resource",
    "Project",
    "Branch",
    "Run",
    "Issue",
    "TriageCurrent",
    "TriageCurrentResponse",
    "TriageValues",
]
