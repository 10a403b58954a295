"""
polaris 命令行入口

Usage:
    polaris projects --name "my project"
    polaris issues --project-id <id> --json
    polaris --format toon branches --project-id <id>
    polaris triage update --project-id <id> --issue-keys k1,k2 --dismiss DISMISSED_AS_FP
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, List, Optional

from polaris.client import PolarisClient
from polaris.core import credentials
from polaris.core.config import PolarisConfig, settings
from polaris.core.errors import ConfigurationError, InvalidArgument, PolarisError
from polaris.core.resolver import json_pointer
from polaris.formatting import (
    branch_rows,
    format_branches,
    format_event_tree,
    format_events_summary,
    format_issue_detail,
    format_issues,
    format_projects,
    format_runs,
    format_triage,
    issue_rows,
    project_rows,
    run_rows,
    to_json,
    to_toon,
)
from polaris.schemas.polaris import TriageValues

logger = logging.getLogger(__name__)

PRETTY = "pretty"
JSON = "json"
TOON = "toon"
FORMATS = [PRETTY, JSON, TOON]


def output_options(suppress: bool) -> argparse.ArgumentParser:
    """
    --format / --json / --toon，可以写在任意子命令之后

    子命令上的副本使用 SUPPRESS 默认值，未显式指定时不会覆盖顶层解析结果。
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--format",
        choices=FORMATS,
        default=argparse.SUPPRESS if suppress else PRETTY,
        dest="output_format",
        help="Output format",
    )
    parent.add_argument(
        "--json",
        action="store_true",
        default=argparse.SUPPRESS if suppress else False,
        help="Shorthand for --format json",
    )
    parent.add_argument(
        "--toon",
        action="store_true",
        default=argparse.SUPPRESS if suppress else False,
        help="Shorthand for --format toon",
    )
    return parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polaris",
        description="BlackDuck Polaris CLI client",
        parents=[output_options(suppress=False)],
    )
    parser.add_argument(
        "--base-url",
        default=settings.POLARIS_BASE_URL,
        help="Base URL for the Polaris instance (env: POLARIS_BASE_URL)",
    )
    parser.add_argument(
        "--api-token", default=None, help="API token (env: POLARIS_API_TOKEN)"
    )
    parser.add_argument("--page-size", type=int, default=settings.POLARIS_PAGE_SIZE)
    parser.add_argument("--log-level", default=None, help="Log level (env: LOG_LEVEL)")

    sub_options = output_options(suppress=True)

    def command(group, name: str, help_text: str) -> argparse.ArgumentParser:
        return group.add_parser(name, help=help_text, parents=[sub_options])

    commands = parser.add_subparsers(dest="command", required=True)

    auth = command(commands, "auth", "Manage authentication")
    auth_actions = auth.add_subparsers(dest="action", required=True)
    login = command(auth_actions, "login", "Store API token in OS keychain")
    login.add_argument("--token", default=None, help="API token (will prompt if not provided)")
    command(auth_actions, "logout", "Remove API token from OS keychain")
    command(auth_actions, "status", "Show authentication status")
    command(auth_actions, "jwt", "Authenticate and display JWT (for debugging)")

    projects = command(commands, "projects", "List projects")
    projects.add_argument("--name", default=None, help="Filter by project name")

    branches = command(commands, "branches", "List branches for a project")
    branches.add_argument("--project-id", required=True)

    runs = command(commands, "runs", "List runs for a project")
    runs.add_argument("--project-id", required=True)
    runs.add_argument("--revision-id", default=None)

    issues = command(commands, "issues", "List issues for a project")
    issues.add_argument("--project-id", required=True)
    issues.add_argument("--branch-id", default=None, help="Defaults to the main branch")

    issue = command(commands, "issue", "Show full details for a single issue")
    issue.add_argument("--issue-id", required=True)
    issue.add_argument("--project-id", required=True)
    issue.add_argument("--branch-id", default=None, help="Defaults to the main branch")

    events = command(commands, "events", "Show event tree with source code for a finding")
    events.add_argument("--finding-key", required=True)
    events.add_argument("--run-id", required=True)
    events.add_argument("--occurrence", type=int, default=None)
    events.add_argument("--max-depth", type=int, default=None)

    source = command(commands, "source", "Print full source code of a file in a run")
    source.add_argument("--run-id", required=True)
    source.add_argument("--path", required=True)

    triage = command(commands, "triage", "Triage operations")
    triage_actions = triage.add_subparsers(dest="action", required=True)
    triage_get = command(triage_actions, "get", "Get current triage status for an issue")
    triage_get.add_argument("--project-id", required=True)
    triage_get.add_argument("--issue-key", required=True)
    triage_update = command(triage_actions, "update", "Update triage for issues")
    triage_update.add_argument("--project-id", required=True)
    triage_update.add_argument(
        "--issue-keys",
        required=True,
        type=lambda s: [k.strip() for k in s.split(",") if k.strip()],
        help="Issue key(s), comma-separated",
    )
    triage_update.add_argument(
        "--dismiss", default=None, help="NOT_DISMISSED, DISMISSED_BY_DESIGN, DISMISSED_AS_FP, ..."
    )
    triage_update.add_argument("--owner", default=None, help="Owner email")
    triage_update.add_argument("--comment", default=None, help="Comment text")
    triage_history = command(triage_actions, "history", "Get triage history for an issue")
    triage_history.add_argument("--project-id", required=True)
    triage_history.add_argument("--issue-key", required=True)
    triage_history.add_argument("--limit", type=int, default=10)

    return parser


def output_format(args: argparse.Namespace) -> str:
    # --json 优先于 --toon，二者都优先于 --format
    if args.json:
        return JSON
    if args.toon:
        return TOON
    return args.output_format


def emit(args: argparse.Namespace, value: Any) -> None:
    """Print a JSON value; pretty mode falls back to indented JSON."""
    print(to_toon(value) if output_format(args) == TOON else to_json(value))


def make_client(args: argparse.Namespace) -> PolarisClient:
    token, source = credentials.resolve_token(args.api_token)
    if not token:
        raise ConfigurationError(
            "API token required: use `polaris auth login`, set POLARIS_API_TOKEN, "
            "or pass --api-token"
        )
    logger.debug("Using API token from %s", source.value)
    return PolarisClient(PolarisConfig(base_url=args.base_url, api_token=token))


async def resolve_branch(
    client: PolarisClient, project_id: str, branch_id: Optional[str], page_size: int
) -> str:
    if branch_id:
        return branch_id
    return (await client.find_main_branch(project_id, page_size)).id


# ── auth ──


async def _auth_login(args: argparse.Namespace) -> None:
    token = args.token
    if token is None:
        sys.stderr.write("Enter API token: ")
        sys.stderr.flush()
        token = sys.stdin.readline()
    token = token.strip()
    if not token:
        raise ConfigurationError("Token cannot be empty")

    # 存储前先验证 token 可用
    async with PolarisClient(PolarisConfig(base_url=args.base_url, api_token=token)) as client:
        await client.authenticate()
    credentials.store_token(token)
    sys.stderr.write("✓ Token verified and stored in OS keychain\n")


def _auth_logout(args: argparse.Namespace) -> None:
    if credentials.delete_token():
        sys.stderr.write("✓ Token removed from OS keychain\n")
    else:
        sys.stderr.write("No token stored in keychain\n")


def _auth_status(args: argparse.Namespace) -> None:
    has_flag = bool(args.api_token)
    has_env = bool(settings.POLARIS_API_TOKEN)
    has_keychain = credentials.load_token() is not None
    _, source = credentials.resolve_token(args.api_token)

    if output_format(args) == PRETTY:
        print(f"Token source:  {source.value}")
        print(f"  --api-token: {'set' if has_flag else 'not set'}")
        print(f"  env var:     {'set' if has_env else 'not set'}")
        print(f"  keychain:    {'stored' if has_keychain else 'empty'}")
    else:
        emit(
            args,
            {
                "active_source": source.value,
                "api_token_flag": has_flag,
                "env_var": has_env,
                "keychain": has_keychain,
            },
        )


async def _auth_jwt(client: PolarisClient, args: argparse.Namespace) -> None:
    credential = await client.authenticate()
    if output_format(args) == PRETTY:
        print(credential.bearer_token)
    else:
        emit(args, {"jwt": credential.bearer_token})


# ── resources ──


async def _projects(client: PolarisClient, args: argparse.Namespace) -> None:
    resp = await client.list_all_projects(args.name, args.page_size)
    if output_format(args) == PRETTY:
        print(format_projects(resp))
    else:
        emit(args, project_rows(resp))


async def _branches(client: PolarisClient, args: argparse.Namespace) -> None:
    resp = await client.list_all_branches(args.project_id, args.page_size)
    if output_format(args) == PRETTY:
        print(format_branches(resp))
    else:
        emit(args, branch_rows(resp))


async def _runs(client: PolarisClient, args: argparse.Namespace) -> None:
    resp = await client.list_all_runs(args.project_id, args.revision_id, args.page_size)
    if output_format(args) == PRETTY:
        print(format_runs(resp))
    else:
        emit(args, run_rows(resp))


async def _issues(client: PolarisClient, args: argparse.Namespace) -> None:
    branch_id = await resolve_branch(client, args.project_id, args.branch_id, args.page_size)
    resp = await client.list_all_issues(args.project_id, branch_id, None, args.page_size)
    if output_format(args) == PRETTY:
        print(format_issues(resp))
    else:
        emit(args, issue_rows(resp))


async def _issue(client: PolarisClient, args: argparse.Namespace) -> None:
    branch_id = await resolve_branch(client, args.project_id, args.branch_id, args.page_size)
    val = await client.get_issue(args.issue_id, args.project_id, branch_id)
    if output_format(args) != PRETTY:
        emit(args, val)
        return

    print(format_issue_detail(val, args.base_url, args.project_id, branch_id))

    data = val.get("data", val) if isinstance(val, dict) else {}
    finding_key = json_pointer(data, "/attributes/finding-key")
    run_id = json_pointer(data, "/relationships/latest-observed-on-run/data/id")
    if isinstance(finding_key, str) and isinstance(run_id, str):
        try:
            events = await client.get_events_with_source(finding_key, run_id, None, 1)
        except PolarisError as e:
            # 事件获取失败不影响 issue 详情展示
            logger.warning("Could not fetch events for %s: %s", finding_key, e)
            sys.stderr.write(f"\n(Could not fetch events: {e})\n")
            return
        summary = format_events_summary(events)
        if summary:
            print(summary)


async def _events(client: PolarisClient, args: argparse.Namespace) -> None:
    events = await client.get_events_with_source(
        args.finding_key, args.run_id, args.occurrence, args.max_depth
    )
    if output_format(args) == PRETTY:
        print(format_event_tree(events))
    else:
        emit(args, events)


async def _source(client: PolarisClient, args: argparse.Namespace) -> None:
    print(await client.get_source_code(args.run_id, args.path))


async def _triage(client: PolarisClient, args: argparse.Namespace) -> None:
    pretty = output_format(args) == PRETTY
    if args.action == "get":
        resp = await client.get_triage(args.project_id, args.issue_key)
        if pretty:
            print(format_triage(resp))
        else:
            emit(args, resp.model_dump(by_alias=True))
    elif args.action == "update":
        values = TriageValues(dismiss=args.dismiss, owner=args.owner, commentary=args.comment)
        resp = await client.update_triage(args.project_id, args.issue_keys, values)
        if pretty:
            print("Triage updated successfully.")
        else:
            emit(args, resp)
    else:
        history = await client.get_triage_history(args.project_id, args.issue_key, args.limit, 0)
        emit(args, history)


HANDLERS = {
    "projects": _projects,
    "branches": _branches,
    "runs": _runs,
    "issues": _issues,
    "issue": _issue,
    "events": _events,
    "source": _source,
    "triage": _triage,
}


async def run(args: argparse.Namespace) -> None:
    # auth 子命令中只有 jwt 需要客户端
    if args.command == "auth":
        if args.action == "login":
            await _auth_login(args)
            return
        if args.action == "logout":
            _auth_logout(args)
            return
        if args.action == "status":
            _auth_status(args)
            return

    if args.command == "triage" and args.action == "update":
        if args.dismiss is None and args.owner is None and args.comment is None:
            raise InvalidArgument("At least one of --dismiss, --owner, or --comment is required")

    async with make_client(args) as client:
        if args.command == "auth":
            await _auth_jwt(client, args)
        else:
            await HANDLERS[args.command](client, args)


def configure_logging(level_name: Optional[str]) -> None:
    level = settings.get_log_level()
    if level_name:
        resolved = logging.getLevelName(level_name.upper())
        level = resolved if isinstance(resolved, int) else level
    # 日志只输出到 stderr，stdout 留给命令输出
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        asyncio.run(run(args))
    except PolarisError as e:
        logger.debug("Command failed", exc_info=True)
        sys.stderr.write(f"Error: {e}\n")
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
