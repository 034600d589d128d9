"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests
from sqlalchemy.orm import sessionmaker

from adlinkcrawl import config as env
from adlinkcrawl.db.engine import make_engine
from adlinkcrawl.domain.execution_budget import ExecutionBudget
from adlinkcrawl.repository.ads import AdsRepository
from adlinkcrawl.repository.analysis_status import AnalysisStatusRepository
from adlinkcrawl.repository.results import ResultsRepository
from adlinkcrawl.services.analysis_lifecycle import AnalysisLifecycle
from adlinkcrawl.services.audit_job_runner import AuditJobRunner
from adlinkcrawl.services.crawl_driver import AccountCrawlDriver
from adlinkcrawl.services.entity_enumerator import EntityEnumerator
from adlinkcrawl.services.fetch_quota import FetchQuota
from adlinkcrawl.services.fleet_orchestrator import FleetOrchestrator
from adlinkcrawl.services.http_service import HttpService
from adlinkcrawl.services.notification_service import LoggingNotifier, NotificationService
from adlinkcrawl.services.options_service import OptionsService
from adlinkcrawl.services.report_service import ResultReporter
from adlinkcrawl.services.response_validator import AcceptAllValidator
from adlinkcrawl.services.scheduler_service import SchedulerService
from adlinkcrawl.services.url_checker import UrlChecker


# Environment variables used by the container (read via `adlinkcrawl.config` helpers).
#
# DATABASE_URL (str | optional)
#   SQLAlchemy connection string for the ads mirror, labels and report tables.
#
# USER_AGENT (str, default: "AdLinkCrawl/0.1")
#   User-Agent header for URL checks.
#
# HTTP_TIMEOUT (int seconds, default: 10)
#   Timeout for each URL check request.
#
# ADLINKCRAWL_OPTIONS_PATH (str, default: "configs/options.yml")
#   YAML job options file.
#
# ADLINKCRAWL_EXECUTION_LIMIT_SECONDS (int seconds, default: 1800)
#   Wall-clock limit of one invocation. Accounts stop `timeout_buffer_seconds`
#   before it and resume on the next invocation.
#
# ADLINKCRAWL_BATCH_SIZE (int, default: 50)
#   Accounts picked per invocation.
#
# ADLINKCRAWL_ACCOUNT_WORKERS (int, default: 8)
#   Accounts crawled concurrently.
#
# ADLINKCRAWL_MAX_ENTITIES_PER_QUERY (int, default: 50000)
#   Cap on entities listed per kind and account in one invocation.
#
# ADLINKCRAWL_PREVIEW_MODE (bool, default: false)
#   Read-only labels: nothing is tagged and missing labels are an error.
#
# ADLINKCRAWL_FETCH_QPS / ADLINKCRAWL_FETCH_DAILY_LIMIT (int | optional)
#   Fetch allowance shared by all workers. Unset means unlimited.
#
# ADLINKCRAWL_RUN_INTERVAL_MINUTES (int minutes, default: 60)
#   How often the scheduler invokes the audit.
ENV = {
    "DATABASE_URL": env.get_optional_str_env("DATABASE_URL"),
    "USER_AGENT": env.get_str_env("USER_AGENT", "AdLinkCrawl/0.1"),
    "HTTP_TIMEOUT": env.get_int_env("HTTP_TIMEOUT", 10),
    "ADLINKCRAWL_OPTIONS_PATH": env.get_str_env("ADLINKCRAWL_OPTIONS_PATH", "configs/options.yml"),
    "ADLINKCRAWL_EXECUTION_LIMIT_SECONDS": env.get_int_env("ADLINKCRAWL_EXECUTION_LIMIT_SECONDS", 1800),
    "ADLINKCRAWL_BATCH_SIZE": env.get_int_env("ADLINKCRAWL_BATCH_SIZE", 50),
    "ADLINKCRAWL_ACCOUNT_WORKERS": env.get_int_env("ADLINKCRAWL_ACCOUNT_WORKERS", 8),
    "ADLINKCRAWL_MAX_ENTITIES_PER_QUERY": env.get_int_env("ADLINKCRAWL_MAX_ENTITIES_PER_QUERY", 50_000),
    "ADLINKCRAWL_PREVIEW_MODE": env.get_bool_env("ADLINKCRAWL_PREVIEW_MODE", False),
    "ADLINKCRAWL_FETCH_QPS": env.get_optional_int_env("ADLINKCRAWL_FETCH_QPS"),
    "ADLINKCRAWL_FETCH_DAILY_LIMIT": env.get_optional_int_env("ADLINKCRAWL_FETCH_DAILY_LIMIT"),
    "ADLINKCRAWL_RUN_INTERVAL_MINUTES": env.get_int_env("ADLINKCRAWL_RUN_INTERVAL_MINUTES", 60),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for AdLinkCrawl application."""

    config = providers.Configuration(default=ENV)

    # Database engine - Singleton to reuse connection pool
    db_engine = providers.Singleton(
        make_engine,
        database_url=config.DATABASE_URL
    )
    session_factory = providers.Factory(
        sessionmaker,
        bind=db_engine,
        future=True
    )

    # Repositories
    ads_repository = providers.Singleton(
        AdsRepository,
        session_factory=session_factory,
        read_only=config.ADLINKCRAWL_PREVIEW_MODE.as_(bool),
    )

    results_repository = providers.Singleton(
        ResultsRepository,
        session_factory=session_factory
    )

    status_repository = providers.Singleton(
        AnalysisStatusRepository,
        session_factory=session_factory
    )

    # URL checking
    fetch_quota = providers.Singleton(
        FetchQuota,
        per_second=config.ADLINKCRAWL_FETCH_QPS,
        per_day=config.ADLINKCRAWL_FETCH_DAILY_LIMIT,
    )

    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        timeout=config.HTTP_TIMEOUT.as_(int),
        quota=fetch_quota,
    )

    response_validator = providers.Singleton(AcceptAllValidator)

    url_checker = providers.Singleton(
        UrlChecker,
        fetcher=http_service,
        validator=response_validator,
    )

    entity_enumerator = providers.Singleton(
        EntityEnumerator,
        store=ads_repository,
        max_per_query=config.ADLINKCRAWL_MAX_ENTITIES_PER_QUERY.as_(int),
    )

    # One driver per account; the budget is passed in by the orchestrator
    crawl_driver = providers.Factory(
        AccountCrawlDriver,
        store=ads_repository,
        enumerator=entity_enumerator,
        checker=url_checker,
        read_only=config.ADLINKCRAWL_PREVIEW_MODE.as_(bool),
    )

    execution_budget = providers.Factory(
        ExecutionBudget,
        limit_seconds=config.ADLINKCRAWL_EXECUTION_LIMIT_SECONDS.as_(int),
    )

    fleet_orchestrator = providers.Singleton(
        FleetOrchestrator,
        account_store=ads_repository,
        driver_factory=crawl_driver.provider,
        batch_size=config.ADLINKCRAWL_BATCH_SIZE.as_(int),
        max_workers=config.ADLINKCRAWL_ACCOUNT_WORKERS.as_(int),
        quota=fetch_quota,
    )

    # Cycle, report and notifications
    analysis_lifecycle = providers.Singleton(
        AnalysisLifecycle,
        status_repo=status_repository,
        results_repo=results_repository,
        account_store=ads_repository,
    )

    result_reporter = providers.Singleton(
        ResultReporter,
        results_repo=results_repository,
    )

    notification_service = providers.Singleton(
        NotificationService,
        notifier=providers.Singleton(LoggingNotifier),
    )

    options_service = providers.Singleton(
        OptionsService,
        options_path=config.ADLINKCRAWL_OPTIONS_PATH.as_(str),
    )

    audit_job_runner = providers.Singleton(
        AuditJobRunner,
        options_service=options_service,
        lifecycle=analysis_lifecycle,
        orchestrator=fleet_orchestrator,
        reporter=result_reporter,
        notifications=notification_service,
        status_repo=status_repository,
        budget_factory=execution_budget.provider,
    )

    scheduler_service = providers.Singleton(
        SchedulerService,
        job_runner=audit_job_runner,
        interval_minutes=config.ADLINKCRAWL_RUN_INTERVAL_MINUTES.as_(int),
    )
