from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class EntityKind(str, Enum):
    AD = "ad"
    KEYWORD = "keyword"
    CAMPAIGN_SITELINK = "campaign_sitelink"
    AD_GROUP_SITELINK = "ad_group_sitelink"

    @property
    def is_sitelink(self) -> bool:
        return self in (EntityKind.CAMPAIGN_SITELINK, EntityKind.AD_GROUP_SITELINK)


class TagTargetKind(str, Enum):
    AD = "ad"
    KEYWORD = "keyword"
    CAMPAIGN = "campaign"
    AD_GROUP = "ad_group"


@dataclass(frozen=True)
class TagTarget:
    """Something the tag store can attach a label to."""

    kind: TagTargetKind
    entity_id: int


@dataclass(frozen=True)
class TagCapability:
    """Resolved once when an entity is enumerated.

    Entities that cannot carry a label themselves name the parent that is
    labelled in their place.
    """

    can_tag: bool
    parent_for_tagging: Optional[TagTarget] = None


@dataclass(frozen=True)
class Entity:
    kind: EntityKind
    entity_id: int
    account_id: str
    campaign_name: Optional[str]
    ad_group_name: Optional[str]
    text: Optional[str]
    final_url: Optional[str]
    mobile_final_url: Optional[str]
    capability: TagCapability

    @property
    def urls(self) -> Tuple[str, ...]:
        """Primary URL first, then the mobile variant, skipping blanks."""
        return tuple(u for u in (self.final_url, self.mobile_final_url) if u)

    @property
    def tag_target(self) -> TagTarget:
        if self.capability.can_tag:
            return TagTarget(TagTargetKind(self.kind.value), self.entity_id)
        if self.capability.parent_for_tagging is None:
            raise ValueError(f"{self.kind.value} {self.entity_id} has no tagging target")
        return self.capability.parent_for_tagging


@dataclass(frozen=True)
class EntityGroup:
    """Unit of work and tagging: one ad or keyword, or one sitelink container."""

    tag_target: TagTarget
    entities: Tuple[Entity, ...]


@dataclass(frozen=True)
class EntitySelector:
    kind: EntityKind
    include_paused: bool = False
    labeled: bool = False


@dataclass(frozen=True)
class Enumeration:
    """Materialized groups plus the total the backing store reports."""

    items: Tuple[EntityGroup, ...]
    total_count: int

    @property
    def is_truncated(self) -> bool:
        return len(self.items) < self.total_count
