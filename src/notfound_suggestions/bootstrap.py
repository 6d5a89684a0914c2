"""Application bootstrap/wiring."""

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from notfound_suggestions.application.services import (
    CrashGuardRegistry,
    ExpiredJobPurger,
    SuggestionJobPolicy,
    SuggestionPollService,
    SuggestionTriggerService,
    WorkerCoordinator,
)
from notfound_suggestions.config import Settings, StoreBackend
from notfound_suggestions.domain.poll_nonce import PollNonceSigner
from notfound_suggestions.domain.ports import JobStore, PurgeableJobStore, SuggestionEngine
from notfound_suggestions.infrastructure.dispatch import (
    HttpWorkerDispatcher,
    InProcessWorkerDispatcher,
)
from notfound_suggestions.infrastructure.rate_limiting import StoreBackedRateLimiter
from notfound_suggestions.infrastructure.rendering import HtmlSuggestionRenderer
from notfound_suggestions.infrastructure.stores import InMemoryJobStore, PostgresJobStore
from notfound_suggestions.infrastructure.suggestions import CatalogSuggestionEngine

logger = logging.getLogger(__name__)

SHUTDOWN_REASON = "service shutdown while computation was in flight"


@runtime_checkable
class _ClosableJobStore(Protocol):
    async def close(self) -> None:
        """Release store resources."""


@dataclass(slots=True)
class SuggestionServices:
    """Composed service graph plus the lifecycle of its background parts."""

    settings: Settings
    store: JobStore
    trigger: SuggestionTriggerService
    coordinator: WorkerCoordinator
    poller: SuggestionPollService
    rate_limiter: StoreBackedRateLimiter
    nonce_signer: PollNonceSigner
    dispatcher: HttpWorkerDispatcher | InProcessWorkerDispatcher
    purger: ExpiredJobPurger | None = None

    async def startup(self) -> None:
        """Start background workers owned by the service graph."""

        await self.dispatcher.start()
        if self.purger is not None:
            await self.purger.start()

    async def shutdown(self) -> None:
        """Stop background workers and mark interrupted computations as failed."""

        if self.purger is not None:
            await self.purger.stop()
        await self.dispatcher.stop()

        fired = await self.coordinator.crash_guards.fire_all(SHUTDOWN_REASON)
        if fired:
            logger.warning("Marked %s in-flight suggestion jobs as failed on shutdown.", fired)

        if isinstance(self.store, _ClosableJobStore):
            await self.store.close()


def _build_store(settings: Settings) -> JobStore:
    if settings.store_backend == StoreBackend.POSTGRES:
        if settings.postgres_dsn is None:
            raise ValueError("NFS_POSTGRES_DSN is required when NFS_STORE_BACKEND=postgres.")
        return PostgresJobStore(
            dsn=settings.postgres_dsn,
            min_pool_size=settings.postgres_pool_min_size,
            max_pool_size=settings.postgres_pool_max_size,
        )
    return InMemoryJobStore()


def _build_engine(settings: Settings) -> SuggestionEngine:
    if settings.catalog_path is None:
        logger.warning(
            "NFS_CATALOG_PATH is not set; suggestion jobs will complete with no suggestions."
        )
        return CatalogSuggestionEngine(
            limit=settings.suggestion_limit,
            min_score=settings.suggestion_min_score,
        )
    return CatalogSuggestionEngine.from_file(
        settings.catalog_path,
        limit=settings.suggestion_limit,
        min_score=settings.suggestion_min_score,
    )


def compute_endpoint(settings: Settings) -> str | None:
    """Build the externally reachable worker endpoint from settings."""

    if settings.public_url is None:
        return None

    base_url = settings.public_url.strip().rstrip("/")
    if not base_url:
        return None

    api_prefix = settings.api_prefix.strip()
    normalized_prefix = ""
    if api_prefix:
        normalized_prefix = api_prefix if api_prefix.startswith("/") else f"/{api_prefix}"
        normalized_prefix = normalized_prefix.rstrip("/")
    return f"{base_url}{normalized_prefix}/suggestions/compute"


def _build_purger(settings: Settings, store: JobStore) -> ExpiredJobPurger | None:
    if not isinstance(store, PurgeableJobStore):
        return None
    return ExpiredJobPurger(store, interval_seconds=settings.store_purge_interval_seconds)


def build_suggestion_services(settings: Settings) -> SuggestionServices:
    """Compose service graph."""

    store = _build_store(settings)
    policy = SuggestionJobPolicy(
        job_ttl_seconds=settings.job_ttl_seconds,
        error_ttl_seconds=settings.error_ttl_seconds,
        cached_completion_ttl_seconds=settings.cached_completion_ttl_seconds,
        recovery_threshold_seconds=settings.recovery_threshold_seconds,
    )
    coordinator = WorkerCoordinator(
        store=store,
        engine=_build_engine(settings),
        policy=policy,
        site_base_path=settings.site_base_path,
        include_categories=settings.suggest_categories,
        include_tags=settings.suggest_tags,
        crash_guards=CrashGuardRegistry(),
    )

    endpoint = compute_endpoint(settings)
    dispatcher: HttpWorkerDispatcher | InProcessWorkerDispatcher
    if endpoint is None:
        logger.info("NFS_PUBLIC_URL is not set; suggestion workers run in-process.")
        dispatcher = InProcessWorkerDispatcher(coordinator.handle)
    else:
        dispatcher = HttpWorkerDispatcher(
            compute_endpoint=endpoint,
            timeout_seconds=settings.dispatch_timeout_seconds,
        )

    return SuggestionServices(
        settings=settings,
        store=store,
        trigger=SuggestionTriggerService(store=store, dispatcher=dispatcher, policy=policy),
        coordinator=coordinator,
        poller=SuggestionPollService(
            store=store,
            renderer=HtmlSuggestionRenderer(),
            policy=policy,
        ),
        rate_limiter=StoreBackedRateLimiter(store),
        nonce_signer=PollNonceSigner(
            settings.poll_nonce_secret,
            lifetime_seconds=settings.poll_nonce_lifetime_seconds,
        ),
        dispatcher=dispatcher,
        purger=_build_purger(settings, store),
    )


__all__ = ["SuggestionServices", "build_suggestion_services", "compute_endpoint"]
