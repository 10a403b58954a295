"""
CLI 输出渲染

每种资源提供两种投影:
- *_rows: JSON / TOON 输出用的精简字典列表
- format_*: 终端表格 / 详情文本
"""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import toon

from polaris.core.resolver import (
    FALLBACK,
    build_included_index,
    json_pointer,
    path_segments,
    resolve_included,
    resolve_included_path,
)
from polaris.schemas.jsonapi import PageEnvelope
from polaris.schemas.polaris import Branch, Issue, Project, Run, TriageCurrentResponse

EVENT_TAGS = {"main": "►", "path": "→", "evidence": "╴", "example": "◆"}
SUMMARY_EVENT_LIMIT = 5


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def to_toon(value: Any) -> str:
    """Token-efficient TOON text for a JSON value."""
    return toon.encode(value)


def _or_dash(value: Any) -> str:
    return FALLBACK if value is None else str(value)


def _str_at(value: Any, pointer: str) -> str:
    found = json_pointer(value, pointer)
    return found if isinstance(found, str) else FALLBACK


def _int_at(value: Any, pointer: str) -> str:
    found = json_pointer(value, pointer)
    if isinstance(found, int) and not isinstance(found, bool):
        return str(found)
    return FALLBACK


# ── Projects / branches / runs ──


def project_rows(resp: PageEnvelope[Project]) -> List[Dict[str, Any]]:
    return [
        {"id": p.id, "name": p.attributes.name, "description": p.attributes.description}
        for p in resp.data
    ]


def format_projects(resp: PageEnvelope[Project]) -> str:
    if not resp.data:
        return "No projects found."
    lines = [
        f"{len(resp.data)} projects found.\n",
        f"{'ID':<40} {'NAME':<40} DESCRIPTION",
        "-" * 100,
    ]
    for p in resp.data:
        lines.append(f"{p.id:<40} {p.attributes.name:<40} {_or_dash(p.attributes.description)}")
    return "\n".join(lines)


def branch_rows(resp: PageEnvelope[Branch]) -> List[Dict[str, Any]]:
    return [{"id": b.id, "name": b.attributes.name, "main": b.is_main} for b in resp.data]


def format_branches(resp: PageEnvelope[Branch]) -> str:
    if not resp.data:
        return "No branches found."
    lines = [f"{len(resp.data)} branches found.\n", f"{'ID':<40} {'NAME':<30} MAIN", "-" * 80]
    for b in resp.data:
        lines.append(f"{b.id:<40} {b.attributes.name:<30} {'✓' if b.is_main else ''}".rstrip())
    return "\n".join(lines)


def run_rows(resp: PageEnvelope[Run]) -> List[Dict[str, Any]]:
    return [
        {
            "id": r.id,
            "status": r.attributes.status,
            "date_created": r.attributes.date_created,
            "date_completed": r.attributes.date_completed,
        }
        for r in resp.data
    ]


def format_runs(resp: PageEnvelope[Run]) -> str:
    if not resp.data:
        return "No runs found."
    lines = [
        f"{len(resp.data)} runs found.\n",
        f"{'ID':<40} {'STATUS':<12} {'CREATED':<28} COMPLETED",
        "-" * 110,
    ]
    for r in resp.data:
        a = r.attributes
        lines.append(
            f"{r.id:<40} {_or_dash(a.status):<12} {_or_dash(a.date_created):<28} "
            f"{_or_dash(a.date_completed)}"
        )
    return "\n".join(lines)


# ── Issues ──


def issue_rows(resp: PageEnvelope[Issue]) -> List[Dict[str, Any]]:
    index = build_included_index(resp.included)
    rows = []
    for issue in resp.data:
        rows.append(
            {
                "id": issue.id,
                "issue_key": issue.attributes.issue_key,
                "finding_key": issue.attributes.finding_key,
                "checker": issue.attributes.sub_tool,
                "severity": resolve_included(
                    issue.relationships, "/severity/data/id", "taxon", index
                ),
                "type": resolve_included(
                    issue.relationships, "/issue-type/data/id", "issue-type", index
                ),
            }
        )
    return rows


def format_issues(resp: PageEnvelope[Issue]) -> str:
    if not resp.data:
        return "No issues found."
    lines = [
        f"{len(resp.data)} issues found.\n",
        f"{'ID (short)':<12} {'ISSUE-KEY':<64} {'CHECKER':<20} {'SEVERITY':<10} TYPE",
        "-" * 130,
    ]
    for row in issue_rows(resp):
        lines.append(
            f"{row['id'][:10]:<12} {row['issue_key']:<64} {_or_dash(row['checker']):<20} "
            f"{row['severity']:<10} {row['type']}"
        )
    return "\n".join(lines)


def issue_web_url(
    base_url: str,
    project_id: str,
    branch_id: str,
    issue_id: str,
    revision_id: Optional[str] = None,
    path: Optional[List[str]] = None,
) -> str:
    url = f"{base_url.rstrip('/')}/projects/{project_id}/branches/{branch_id}"
    if revision_id:
        url += f"/revisions/{revision_id}"
    url += f"/issues/{issue_id}?pagingOffset=0"
    if path is not None:
        path_query = "[" + ",".join(f'"{segment}"' for segment in path) + "]"
        url += f"&path={quote(path_query, safe='')}"
    return url


def _first_revision_id(included: List[Any]) -> Optional[str]:
    for resource in included:
        if isinstance(resource, dict) and resource.get("type") == "transition":
            revision = json_pointer(resource, "/attributes/revision-id")
            if isinstance(revision, str):
                return revision
    return None


def format_issue_detail(val: Any, base_url: str, project_id: str, branch_id: str) -> str:
    data = val.get("data", val) if isinstance(val, dict) else {}
    included = val.get("included") if isinstance(val, dict) else None
    included = included if isinstance(included, list) else []
    index = build_included_index(included)
    relationships = data.get("relationships") if isinstance(data, dict) else None
    relationships = relationships if isinstance(relationships, dict) else None

    issue_id = _str_at(data, "/id")
    lines = [
        f"Issue:          {_str_at(data, '/attributes/issue-key')}",
        f"ID:             {issue_id}",
        "Severity:       "
        + resolve_included(relationships, "/severity/data/id", "taxon", index),
        "Type:           "
        + resolve_included(relationships, "/issue-type/data/id", "issue-type", index),
        f"Checker:        {_str_at(data, '/attributes/sub-tool')}",
        "Tool:           "
        + resolve_included(
            relationships, "/tool-domain-service/data/id", "tool-domain-service", index
        ),
        f"Path:           {resolve_included_path(relationships, index)}",
        f"Finding key:    {_str_at(data, '/attributes/finding-key')}",
        f"First detected: {_str_at(data, '/attributes/first-detected-on')}",
    ]
    url = issue_web_url(
        base_url,
        project_id,
        branch_id,
        issue_id,
        revision_id=_first_revision_id(included),
        path=path_segments(relationships, index),
    )
    lines.append(f"URL:            {url}")
    return "\n".join(lines)


# ── Events ──


def _event_trees(events: Any) -> List[Any]:
    data = json_pointer(events, "/data")
    return data if isinstance(data, list) else []


def _main_location(tree: Any) -> str:
    segments = json_pointer(tree, "/main-event-file-path")
    main_file = (
        "/".join(s for s in segments if isinstance(s, str))
        if isinstance(segments, list)
        else FALLBACK
    )
    return f"{main_file}:{_int_at(tree, '/main-event-line-number')}"


def _snippet_lines(src: Any, indent: int) -> List[str]:
    code = json_pointer(src, "/source-code")
    if not isinstance(code, str) or not code:
        return []
    start = json_pointer(src, "/start-line")
    start = start if isinstance(start, int) else 0
    pad = "  " * indent
    return [f"{pad}  {start + i:>5} │ {line}" for i, line in enumerate(code.splitlines())]


def _event_lines(event: Any, indent: int) -> List[str]:
    pad = "  " * indent
    tag = EVENT_TAGS.get(_str_at(event, "/event-type"), " ")
    lines = [
        f"{pad}{tag} {_str_at(event, '/filePath')}:{_int_at(event, '/line-number')}: "
        f"{_str_at(event, '/event-description')}"
    ]
    for key in ("source-before", "source-after"):
        src = json_pointer(event, f"/{key}")
        if src is not None:
            lines.extend(_snippet_lines(src, indent + 1))
    return lines


def _events_recursive(events: List[Any], indent: int) -> List[str]:
    lines: List[str] = []
    for event in events:
        lines.extend(_event_lines(event, indent))
        children = json_pointer(event, "/evidence-events")
        if isinstance(children, list) and children:
            lines.extend(_events_recursive(children, indent + 1))
    return lines


def format_events_summary(events: Any) -> str:
    """Short event listing appended to the issue detail view."""
    trees = _event_trees(events)
    if not trees:
        return ""
    lines = ["\n── Event Summary ──"]
    for tree in trees:
        lines.append(
            f"Main event:     {_main_location(tree)} ({_str_at(tree, '/language')})"
        )
        evts = json_pointer(tree, "/events")
        if not isinstance(evts, list):
            continue
        for event in evts[:SUMMARY_EVENT_LIMIT]:
            lines.extend(_event_lines(event, 1))
        if len(evts) > SUMMARY_EVENT_LIMIT:
            lines.append(
                f"  ... and {len(evts) - SUMMARY_EVENT_LIMIT} more events "
                "(use `polaris events` for full tree)"
            )
    return "\n".join(lines)


def format_event_tree(events: Any) -> str:
    trees = _event_trees(events)
    if not trees:
        return "No events found."
    lines: List[str] = []
    for tree in trees:
        lines.append(f"Finding:  {_str_at(tree, '/finding-key')}")
        lines.append(f"Main:     {_main_location(tree)}")
        lines.append(f"Language: {_str_at(tree, '/language')}\n")
        evts = json_pointer(tree, "/events")
        if isinstance(evts, list):
            lines.extend(_events_recursive(evts, 0))
    return "\n".join(lines)


# ── Triage ──


def format_triage(resp: TriageCurrentResponse) -> str:
    if not resp.data:
        return "No triage data found."
    lines: List[str] = []
    for tc in resp.data:
        a = tc.attributes
        lines.append(f"Issue key:        {a.issue_key}")
        lines.append(f"Project ID:       {a.project_id}")
        lines.append(f"Dismissal status: {a.dismissal_status or 'N/A'}")
        if a.triage_current_values:
            lines.append("Triage values:")
            for value in a.triage_current_values:
                lines.append("  " + to_json(value).replace("\n", "\n  "))
    return "\n".join(lines)
