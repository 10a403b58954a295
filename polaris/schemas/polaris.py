from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from polaris.schemas.jsonapi import Resource


class _Attributes(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProjectAttributes(_Attributes):
    name: str
    description: Optional[str] = None


class Project(Resource):
    attributes: ProjectAttributes


class BranchAttributes(_Attributes):
    name: str
    main_for_project: Optional[bool] = Field(None, alias="main-for-project")


class Branch(Resource):
    attributes: BranchAttributes

    @property
    def is_main(self) -> bool:
        return bool(self.attributes.main_for_project)


class RunAttributes(_Attributes):
    status: Optional[str] = None
    date_created: Optional[str] = Field(None, alias="date-created")
    date_completed: Optional[str] = Field(None, alias="date-completed")


class Run(Resource):
    attributes: RunAttributes


class IssueAttributes(_Attributes):
    issue_key: str = Field(alias="issue-key")
    finding_key: str = Field(alias="finding-key")
    sub_tool: Optional[str] = Field(None, alias="sub-tool")


class Issue(Resource):
    attributes: IssueAttributes


class TriageCurrentAttributes(_Attributes):
    issue_key: str = Field(alias="issue-key")
    project_id: str = Field(alias="project-id")
    dismissal_status: Optional[str] = Field(None, alias="dismissal-status")
    triage_current_values: List[Dict[str, Any]] = Field(
        default_factory=list, alias="triage-current-values"
    )


class TriageCurrent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    id: str
    attributes: TriageCurrentAttributes


class TriageCurrentResponse(BaseModel):
    data: List[TriageCurrent] = Field(default_factory=list)


class TriageValues(BaseModel):
    """Values for updating triage on issues. Unset values are not sent."""

    dismiss: Optional[str] = None  # NOT_DISMISSED, DISMISSED_BY_DESIGN, DISMISSED_AS_FP, ...
    owner: Optional[str] = None  # owner email
    commentary: Optional[str] = None

    def is_empty(self) -> bool:
        return self.dismiss is None and self.owner is None and self.commentary is None

    def to_payload(self) -> Dict[str, str]:
        payload: Dict[str, str] = {}
        if self.dismiss is not None:
            payload["DISMISS"] = self.dismiss
        if self.owner is not None:
            payload["OWNER"] = self.owner
        if self.commentary is not None:
            payload["COMMENTARY"] = self.commentary
        return payload
