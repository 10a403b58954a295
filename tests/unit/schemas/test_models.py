import pytest
from pydantic import ValidationError

from polaris.schemas.jsonapi import PageEnvelope, PaginationMeta, Resource
from polaris.schemas.polaris import Branch, Issue, Project, TriageCurrentResponse, TriageValues


def test_project_page_parses_with_included():
    page = PageEnvelope[Project].model_validate(
        {
            "data": [
                {
                    "type": "project",
                    "id": "p1",
                    "attributes": {"name": "demo", "description": None, "extra": 1},
                    "relationships": {"branches": {"data": [{"type": "branch", "id": "b1"}]}},
                }
            ],
            "included": [{"type": "branch", "id": "b1", "attributes": {"name": "main"}}],
            "meta": {"offset": 0, "limit": 25, "total": 1, "unknown": True},
        }
    )

    assert page.data[0].attributes.name == "demo"
    assert page.included[0]["id"] == "b1"
    assert page.meta == PaginationMeta(offset=0, limit=25, total=1)


def test_page_without_included_or_meta():
    page = PageEnvelope[Project].model_validate({"data": []})
    assert page.included == []
    assert page.meta is None


def test_page_requires_data():
    with pytest.raises(ValidationError):
        PageEnvelope[Project].model_validate({"included": []})


def test_branch_main_flag():
    branch = Branch.model_validate(
        {"type": "branch", "id": "b1", "attributes": {"name": "main", "main-for-project": True}}
    )
    other = Branch.model_validate({"type": "branch", "id": "b2", "attributes": {"name": "dev"}})

    assert branch.is_main
    assert not other.is_main


def test_issue_attributes_use_kebab_case_aliases():
    issue = Issue.model_validate(
        {
            "type": "issue",
            "id": "i1",
            "attributes": {"issue-key": "k1", "finding-key": "f1", "sub-tool": "RESOURCE_LEAK"},
            "relationships": {"severity": {"data": {"type": "taxon", "id": "5"}}},
        }
    )

    assert issue.attributes.issue_key == "k1"
    assert issue.attributes.sub_tool == "RESOURCE_LEAK"
    assert issue.relationships["severity"]["data"] == {"type": "taxon", "id": "5"}


def test_issue_requires_issue_key():
    with pytest.raises(ValidationError):
        Issue.model_validate({"type": "issue", "id": "i1", "attributes": {"finding-key": "f1"}})


def test_generic_resource_keeps_raw_attributes():
    resource = Resource.model_validate({"type": "taxon", "id": "5", "attributes": {"name": "High"}})
    assert resource.attributes == {"name": "High"}
    assert resource.relationships is None


def test_triage_current_response():
    resp = TriageCurrentResponse.model_validate(
        {
            "data": [
                {
                    "type": "triage-current",
                    "id": "t1",
                    "attributes": {
                        "issue-key": "k1",
                        "project-id": "p1",
                        "dismissal-status": "NOT_DISMISSED",
                        "triage-current-values": [{"attribute-semantic-id": "OWNER"}],
                    },
                }
            ]
        }
    )

    attrs = resp.data[0].attributes
    assert attrs.dismissal_status == "NOT_DISMISSED"
    assert attrs.triage_current_values[0]["attribute-semantic-id"] == "OWNER"


def test_triage_values_payload():
    assert TriageValues().is_empty()
    values = TriageValues(owner="dev@example.com")
    assert not values.is_empty()
    assert values.to_payload() == {"OWNER": "dev@example.com"}
