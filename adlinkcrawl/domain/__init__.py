"""Domain objects for AdLinkCrawl - explicit re-exports to satisfy linters."""
from .options import Options as Options, QuotaConfig as QuotaConfig
from .entities import (
    Entity as Entity,
    EntityGroup as EntityGroup,
    EntityKind as EntityKind,
    EntitySelector as EntitySelector,
    Enumeration as Enumeration,
    TagCapability as TagCapability,
    TagTarget as TagTarget,
    TagTargetKind as TagTargetKind,
)
from .url_check_result import UrlCheckResult as UrlCheckResult, EntityType as EntityType
from .analysis_status import AnalysisStatus as AnalysisStatus
from .crawl_result import AccountCrawlResult as AccountCrawlResult, FleetCrawlResult as FleetCrawlResult
from .checked_url_set import CheckedUrlSet as CheckedUrlSet

__all__ = [
    "Options",
    "QuotaConfig",
    "Entity",
    "EntityGroup",
    "EntityKind",
    "EntitySelector",
    "Enumeration",
    "TagCapability",
    "TagTarget",
    "TagTargetKind",
    "UrlCheckResult",
    "EntityType",
    "AnalysisStatus",
    "AccountCrawlResult",
    "FleetCrawlResult",
    "CheckedUrlSet",
]
