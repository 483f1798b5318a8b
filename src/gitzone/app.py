"""Application orchestration: the dashboard controller wiring store, clients and components."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from gitzone.adapters.cloudflare import CloudflareClient
from gitzone.adapters.credentials import JsonFileCredentialStore
from gitzone.adapters.github import GitHubClient
from gitzone.config import (
    ConfigurationError,
    get_aggregation_config,
    get_cloudflare_config,
    get_github_config,
)
from gitzone.domain import (
    BulkMutationExecutor,
    CommitAggregator,
    InputValidationError,
    ReconciliationStore,
    RecordOperations,
    RepositoryOperations,
    StatsEnrichmentPipeline,
    UnauthorizedError,
    ZoneAggregator,
)
from gitzone.domain.model import Account

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from gitzone.config import AggregationConfig, CloudflareConfig, GitHubConfig
    from gitzone.domain import BulkReplaceReport
    from gitzone.domain.model import (
        CommitEntry,
        CountKind,
        PageProbeResult,
        Repository,
        RepositoryDraft,
        User,
    )
    from gitzone.domain.ports import CredentialStore, DnsService, RepoService
    from gitzone.domain.stats import StatsRunResult

log = getLogger(__name__)

TOKEN_KEY = "github_token"
ACCOUNTS_KEY = "dns_accounts"

_ACCOUNTS = TypeAdapter(list[Account])


class SessionGuardedRepoService:
    """Delegates to a ``RepoService`` and reports every rejected token before re-raising.

    Aggregates swallow per-repository failures, so the teardown has to hook in
    below them rather than around them.
    """

    def __init__(self, inner: RepoService, on_unauthorized: Callable[[], None]) -> None:
        self.inner = inner
        self._on_unauthorized = on_unauthorized

    async def _call[T](self, call: Awaitable[T]) -> T:
        try:
            return await call
        except UnauthorizedError:
            self._on_unauthorized()
            raise

    async def get_user(self) -> User:
        return await self._call(self.inner.get_user())

    async def list_repos(self) -> list[Repository]:
        return await self._call(self.inner.list_repos())

    async def create_repo(self, draft: RepositoryDraft) -> Repository:
        return await self._call(self.inner.create_repo(draft))

    async def rename_repo(self, owner: str, name: str, new_name: str) -> Repository:
        return await self._call(self.inner.rename_repo(owner, name, new_name))

    async def delete_repo(self, owner: str, name: str) -> None:
        await self._call(self.inner.delete_repo(owner, name))

    async def probe_count(self, owner: str, name: str, kind: CountKind) -> PageProbeResult:
        return await self._call(self.inner.probe_count(owner, name, kind))

    async def list_commits(
        self,
        owner: str,
        name: str,
        *,
        per_page: int = 10,
        page: int = 1,
    ) -> list[CommitEntry]:
        return await self._call(
            self.inner.list_commits(owner, name, per_page=per_page, page=page)
        )


class Dashboard:
    """Owns one session: the store, both remote clients and every component.

    A rejected source-hosting token anywhere ends the session through ``logout``;
    a rejected DNS credential only fails the call that used it.
    """

    def __init__(
        self,
        *,
        credentials: CredentialStore | None = None,
        store: ReconciliationStore | None = None,
        repo_service: RepoService | None = None,
        dns_service: DnsService | None = None,
        github_config: GitHubConfig | None = None,
        cloudflare_config: CloudflareConfig | None = None,
        aggregation: AggregationConfig | None = None,
    ) -> None:
        self.credentials = credentials or JsonFileCredentialStore()
        self.store = store or ReconciliationStore()
        limits = aggregation or get_aggregation_config()

        self._github: GitHubClient | None = None
        if repo_service is None:
            config = github_config or get_github_config()
            self._github = GitHubClient(
                config=config, token=self.credentials.get(TOKEN_KEY) or config.token
            )
            repo_service = self._github
        self._cloudflare: CloudflareClient | None = None
        if dns_service is None:
            self._cloudflare = CloudflareClient(
                config=cloudflare_config or get_cloudflare_config()
            )
            dns_service = self._cloudflare
        self.repo_service = SessionGuardedRepoService(repo_service, self.logout)
        self.dns_service = dns_service

        self.stats = StatsEnrichmentPipeline(
            self.store, self.repo_service, window=limits.stats_window
        )
        self.commits = CommitAggregator(
            self.store,
            self.repo_service,
            source_repositories=limits.commit_source_repositories,
            per_repository=limits.commits_per_repository,
            feed_size=limits.commit_feed_size,
        )
        self.zones = ZoneAggregator(self.store, dns_service)
        self.bulk = BulkMutationExecutor(
            self.store, dns_service, record_type=limits.bulk_record_type
        )
        self.repositories = RepositoryOperations(self.store, self.repo_service)
        self.records = RecordOperations(self.store, dns_service)

        self.store.set_accounts(self._load_accounts())

    async def __aenter__(self) -> Dashboard:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._github is not None:
            await self._github.aclose()
        if self._cloudflare is not None:
            await self._cloudflare.aclose()

    # -- session -------------------------------------------------------------

    @property
    def logged_in(self) -> bool:
        return self.store.user is not None

    async def login(self, token: str) -> User:
        """Validate ``token`` against the hosting service and persist it on success."""

        token = token.strip()
        if not token:
            raise InputValidationError("A token is required")
        if self._github is not None:
            self._github.token = token
        user = await self.repo_service.get_user()
        self.credentials.set(TOKEN_KEY, token)
        self.store.user = user
        log.info("Logged in as %s", user.login)
        return user

    def logout(self) -> None:
        """Tear the session down: every fetched collection goes, accounts stay."""

        self.store.clear_session()
        self.credentials.delete(TOKEN_KEY)
        if self._github is not None:
            self._github.token = None
        log.info("Session cleared")

    async def load(self) -> StatsRunResult | None:
        """Fetch the user and repository list, then enrich the visible window with stats."""

        if self.store.user is None:
            self.store.user = await self.repo_service.get_user()
        await self.repositories.refresh()
        return await self.stats.run()

    async def refresh_commits(self) -> list[CommitEntry] | None:
        if not self.store.repositories:
            await self.repositories.refresh()
        return await self.commits.refresh()

    # -- dns -----------------------------------------------------------------

    async def bulk_replace(self, old_value: str, new_value: str) -> BulkReplaceReport:
        """Rewrite matching records across the filtered zones of every account."""

        await self.zones.refresh()
        return await self.bulk.replace_record_values(old_value, new_value)

    def add_account(self, *, name: str, api_key: str, email: str = "") -> Account:
        name, api_key = name.strip(), api_key.strip()
        if not name or not api_key:
            raise InputValidationError("An account needs a name and an API key")
        account = Account.create(name=name, api_key=api_key, email=email.strip())
        self.store.add_account(account)
        self._save_accounts()
        log.info("Added DNS account %s", account.name)
        return account

    def remove_account(self, account_id: str) -> bool:
        removed = self.store.remove_account(account_id)
        if removed:
            self._save_accounts()
            log.info("Removed DNS account %s", account_id)
        return removed

    def find_account(self, key: str) -> Account | None:
        """Look an account up by id or, failing that, by name."""

        account = self.store.account(key)
        if account is not None:
            return account
        return next((item for item in self.store.accounts if item.name == key), None)

    def _load_accounts(self) -> list[Account]:
        raw = self.credentials.get(ACCOUNTS_KEY)
        if not raw:
            return []
        try:
            return _ACCOUNTS.validate_json(raw)
        except ValidationError as exc:
            raise ConfigurationError("Stored DNS accounts are unreadable") from exc

    def _save_accounts(self) -> None:
        self.credentials.set(ACCOUNTS_KEY, _ACCOUNTS.dump_json(self.store.accounts).decode())
