# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from gitzone.app import Dashboard
from gitzone.config import configure_logging, require_env_var
from gitzone.domain import Failed, InputValidationError
from gitzone.domain.model import (
    EntityKind,
    RecordDraft,
    RepositoryDraft,
    RepositoryRef,
    RepositorySort,
    RepositoryVisibility,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Sequence
    from types import FrameType

    from gitzone.domain import MutationResult
    from gitzone.domain.model import CommitEntry, DnsRecord, Repository, Zone

log = logging.getLogger(__name__)

type DashboardFactory = Callable[[], Dashboard]


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage GitHub repositories and Cloudflare DNS")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser("login", help="Store a GitHub token after validating it")
    login.add_argument(
        "--token",
        type=str,
        help="Personal access token (defaults to GITHUB_TOKEN)",
    )
    subparsers.add_parser("logout", help="Forget the stored GitHub token")

    repos = subparsers.add_parser("repos", help="Repository commands")
    repos_sub = repos.add_subparsers(dest="repos_command", required=True)
    repos_list = repos_sub.add_parser("list", help="List repositories with branch/commit counts")
    repos_list.add_argument("--search", type=str, default="", help="Match name or description")
    repos_list.add_argument(
        "--visibility",
        choices=[item.value for item in RepositoryVisibility],
        default=RepositoryVisibility.ALL.value,
    )
    repos_list.add_argument("--owner", type=str, help="Only repositories of this owner")
    repos_list.add_argument(
        "--sort",
        choices=[item.value for item in RepositorySort],
        default=RepositorySort.UPDATED.value,
    )
    repos_create = repos_sub.add_parser("create", help="Create a repository")
    repos_create.add_argument("name", type=str)
    repos_create.add_argument("--description", type=str, default="")
    repos_create.add_argument("--private", action="store_true")
    repos_rename = repos_sub.add_parser("rename", help="Rename a repository")
    repos_rename.add_argument("repository", type=str, help="OWNER/NAME")
    repos_rename.add_argument("new_name", type=str)
    repos_delete = repos_sub.add_parser("delete", help="Delete one or more repositories")
    repos_delete.add_argument("repositories", nargs="+", help="OWNER/NAME")
    repos_clone = repos_sub.add_parser("clone", help="Print the git clone command of a repository")
    repos_clone.add_argument("repository", type=str, help="OWNER/NAME")

    subparsers.add_parser("commits", help="Show the recent-commit feed")

    accounts = subparsers.add_parser("accounts", help="DNS credential commands")
    accounts_sub = accounts.add_subparsers(dest="accounts_command", required=True)
    accounts_sub.add_parser("list", help="List configured DNS accounts")
    accounts_add = accounts_sub.add_parser("add", help="Add a DNS account")
    accounts_add.add_argument("name", type=str)
    accounts_add.add_argument("--api-key", type=str, required=True, help="API token or key")
    accounts_add.add_argument(
        "--email",
        type=str,
        default="",
        help="Login email; only for global API keys",
    )
    accounts_remove = accounts_sub.add_parser("remove", help="Remove a DNS account")
    accounts_remove.add_argument("account", type=str, help="Account id or name")

    zones = subparsers.add_parser("zones", help="List zones across all accounts")
    _add_zone_filters(zones)
    zones.add_argument("--refresh", action="store_true", help="Ignore cached zone listings")

    records = subparsers.add_parser("records", help="DNS record commands")
    records_sub = records.add_subparsers(dest="records_command", required=True)
    records_list = records_sub.add_parser("list", help="List records of a zone")
    records_list.add_argument("zone_id", type=str)
    records_list.add_argument("--type", type=str, help="Only records of this type")
    records_list.add_argument("--search", type=str, default="", help="Match name or content")
    for name in ("create", "update"):
        command = records_sub.add_parser(name, help=f"{name.capitalize()} a record")
        command.add_argument("zone_id", type=str)
        if name == "update":
            command.add_argument("record_id", type=str)
        command.add_argument("--type", type=str, required=True)
        command.add_argument("--name", type=str, required=True)
        command.add_argument("--content", type=str, required=True)
        command.add_argument("--ttl", type=int, default=1, help="1 means automatic")
        command.add_argument("--proxied", action="store_true")
    records_delete = records_sub.add_parser("delete", help="Delete a record")
    records_delete.add_argument("zone_id", type=str)
    records_delete.add_argument("record_id", type=str)

    replace = subparsers.add_parser(
        "replace",
        help="Replace an A record value in every zone matching the filters",
    )
    replace.add_argument("old_value", type=str)
    replace.add_argument("new_value", type=str)
    _add_zone_filters(replace)

    return parser.parse_args(list(argv))


def _add_zone_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--search", type=str, default="", help="Match zone name")
    parser.add_argument("--account", type=str, help="Local account id or name")
    parser.add_argument("--owner", type=str, help="Provider-side account id")
    parser.add_argument("--status", type=str, help="Zone status, e.g. active or pending")


def _apply_zone_filters(dashboard: Dashboard, args: argparse.Namespace) -> None:
    zone_filter = dashboard.store.zone_filter
    zone_filter.search = args.search
    zone_filter.real_account_id = args.owner
    zone_filter.status = args.status
    if args.account:
        account = dashboard.find_account(args.account)
        if account is None:
            raise InputValidationError(f"Unknown DNS account: {args.account}")
        zone_filter.account_id = account.id


def _require[T](result: MutationResult[T]) -> T:
    if isinstance(result, Failed):
        raise result.error
    return result.value


def _print_repositories(dashboard: Dashboard) -> None:
    repositories: list[Repository] = dashboard.store.get_filtered(EntityKind.REPOSITORY)
    for repo in repositories:
        stats = dashboard.store.stats_for(repo.ref)
        if stats is None:
            counts = "   - br      - commits"
        else:
            counts = f"{stats.branches:>4} br {stats.commits:>6} commits"
        flags = "private" if repo.private else "public"
        if repo.fork:
            flags += ",fork"
        print(f"{repo.full_name:<50} {counts}  {repo.stars:>5}*  {flags}")


def _print_commits(commits: Sequence[CommitEntry]) -> None:
    for commit in commits:
        source = str(commit.repository) if commit.repository else "-"
        stamp = commit.committed_at.strftime("%Y-%m-%d %H:%M")
        print(f"{stamp}  {commit.sha[:7]}  {source:<40} {commit.author}: {commit.summary}")


def _print_zones(zones: Sequence[Zone]) -> None:
    for zone in zones:
        owner = zone.owner.name if zone.owner else "-"
        print(f"{zone.id}  {zone.name:<40} {zone.status:<10} {owner}")


def _print_records(records: Sequence[DnsRecord]) -> None:
    for record in records:
        proxied = "proxied" if record.proxied else "dns-only"
        ttl = "auto" if record.ttl == 1 else str(record.ttl)
        print(f"{record.id}  {record.type:<6} {record.name:<40} {record.content}  {ttl} {proxied}")


def _record_draft(args: argparse.Namespace) -> RecordDraft:
    return RecordDraft(
        type=args.type.strip().upper(),
        name=args.name,
        content=args.content,
        proxied=args.proxied,
        ttl=args.ttl,
    )


async def _run(args: argparse.Namespace, dashboard: Dashboard) -> None:  # noqa: C901, PLR0912
    async with dashboard:
        if args.command == "login":
            token = args.token or require_env_var("GITHUB_TOKEN")
            user = await dashboard.login(token)
            print(f"Logged in as {user.login}")
        elif args.command == "logout":
            dashboard.logout()
        elif args.command == "repos":
            await _run_repos(args, dashboard)
        elif args.command == "commits":
            feed = await dashboard.refresh_commits()
            _print_commits(feed or [])
        elif args.command == "accounts":
            _run_accounts(args, dashboard)
        elif args.command == "zones":
            _apply_zone_filters(dashboard, args)
            result = await dashboard.zones.refresh(force=args.refresh)
            if result is not None and result.failed:
                log.warning("Zones of %s accounts could not be loaded", len(result.failed))
            _print_zones(dashboard.store.get_filtered(EntityKind.ZONE))
        elif args.command == "records":
            await _run_records(args, dashboard)
        elif args.command == "replace":
            _apply_zone_filters(dashboard, args)
            report = await dashboard.bulk_replace(args.old_value, args.new_value)
            print(report.summary())
            if report.failed_zones:
                print("Failed zones: " + ", ".join(report.failed_zones))
        else:
            raise InputValidationError(f"Unsupported command: {args.command}")


async def _run_repos(args: argparse.Namespace, dashboard: Dashboard) -> None:
    if args.repos_command == "list":
        repository_filter = dashboard.store.repository_filter
        repository_filter.search = args.search
        repository_filter.visibility = RepositoryVisibility(args.visibility)
        repository_filter.owner = args.owner
        repository_filter.sort = RepositorySort(args.sort)
        await dashboard.load()
        _print_repositories(dashboard)
    elif args.repos_command == "create":
        draft = RepositoryDraft(
            name=args.name, description=args.description, private=args.private
        )
        created = _require(await dashboard.repositories.create(draft))
        print(f"Created {created.full_name}")
    elif args.repos_command == "rename":
        ref = RepositoryRef.parse(args.repository)
        await dashboard.repositories.refresh()
        renamed = _require(await dashboard.repositories.rename(ref, args.new_name))
        print(f"Renamed {ref} to {renamed.full_name}")
    elif args.repos_command == "delete":
        refs = [RepositoryRef.parse(value) for value in args.repositories]
        await dashboard.repositories.refresh()
        missing = [ref for ref in refs if not dashboard.store.select(ref)]
        if missing:
            raise InputValidationError("Unknown repositories: " + ", ".join(map(str, missing)))
        report = await dashboard.repositories.delete_selected()
        for ref in report.deleted:
            print(f"Deleted {ref}")
        for ref, message in report.failed.items():
            print(f"Failed to delete {ref}: {message}", file=sys.stderr)
        if report.failed:
            raise RuntimeError(f"{len(report.failed)} repositories could not be deleted")
    elif args.repos_command == "clone":
        ref = RepositoryRef.parse(args.repository)
        await dashboard.repositories.refresh()
        print(clone_command(dashboard.store.repository(ref), ref))


def clone_command(repo: Repository | None, ref: RepositoryRef) -> str:
    if repo is None:
        raise InputValidationError(f"Unknown repository: {ref}")
    if not repo.clone_url:
        raise InputValidationError(f"{ref} has no clone URL")
    return f"git clone {repo.clone_url}"


def _run_accounts(args: argparse.Namespace, dashboard: Dashboard) -> None:
    if args.accounts_command == "list":
        for account in dashboard.store.accounts:
            kind = "global key" if account.email else "api token"
            print(f"{account.id}  {account.name:<30} {kind}")
    elif args.accounts_command == "add":
        account = dashboard.add_account(name=args.name, api_key=args.api_key, email=args.email)
        print(f"Added account {account.name} ({account.id})")
    elif args.accounts_command == "remove":
        account = dashboard.find_account(args.account)
        if account is None or not dashboard.remove_account(account.id):
            raise InputValidationError(f"Unknown DNS account: {args.account}")
        print(f"Removed account {account.name}")


async def _run_records(args: argparse.Namespace, dashboard: Dashboard) -> None:
    await dashboard.zones.refresh()
    zone_id = args.zone_id
    if args.records_command == "list":
        await dashboard.records.load(zone_id)
        record_filter = dashboard.store.record_filter
        record_filter.type = args.type.upper() if args.type else None
        record_filter.search = args.search
        _print_records(dashboard.store.get_filtered(EntityKind.DNS_RECORD))
    elif args.records_command == "create":
        record = _require(await dashboard.records.create(zone_id, _record_draft(args)))
        print(f"Created {record.type} record {record.name} ({record.id})")
    elif args.records_command == "update":
        record = _require(
            await dashboard.records.update(zone_id, args.record_id, _record_draft(args))
        )
        print(f"Updated {record.type} record {record.name}")
    elif args.records_command == "delete":
        record_id = _require(await dashboard.records.delete(zone_id, args.record_id))
        print(f"Deleted record {record_id}")


def main(
    argv: Sequence[str] | None = None,
    *,
    dashboard_factory: DashboardFactory = Dashboard,
    runner: Callable[[Coroutine[object, object, None]], None] = asyncio.run,
) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        runner(_run(parsed_args, dashboard_factory()))
    except (InputValidationError, ValueError) as exc:
        log.error("Invalid input: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
