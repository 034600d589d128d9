"""URL check result data model."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from adlinkcrawl.domain.entities import Entity, EntityKind
from adlinkcrawl.utils.datetime_utils import parse_to_utc_naive

ResponseOutcome = Union[int, str]


class EntityType(str, Enum):
    AD = "Ad"
    KEYWORD = "Keyword"
    CAMPAIGN_SITELINK = "Campaign Sitelink"
    AD_GROUP_SITELINK = "AdGroup Sitelink"

    @classmethod
    def for_kind(cls, kind: EntityKind) -> "EntityType":
        return _KIND_TO_TYPE[kind]


_KIND_TO_TYPE = {
    EntityKind.AD: EntityType.AD,
    EntityKind.KEYWORD: EntityType.KEYWORD,
    EntityKind.CAMPAIGN_SITELINK: EntityType.CAMPAIGN_SITELINK,
    EntityKind.AD_GROUP_SITELINK: EntityType.AD_GROUP_SITELINK,
}


@dataclass(frozen=True)
class UrlCheckResult:
    account_id: str
    timestamp: datetime
    url: str
    response_outcome: ResponseOutcome
    entity_type: EntityType
    campaign_name: Optional[str] = None
    ad_group_name: Optional[str] = None
    ad_text: Optional[str] = None
    keyword_text: Optional[str] = None
    sitelink_text: Optional[str] = None

    @classmethod
    def for_entity(cls, entity: Entity, url: str, outcome: ResponseOutcome, timestamp: datetime) -> "UrlCheckResult":
        """Build a result row, routing the entity text into the matching column."""
        return cls(
            account_id=entity.account_id,
            timestamp=timestamp,
            url=url,
            response_outcome=outcome,
            entity_type=EntityType.for_kind(entity.kind),
            campaign_name=entity.campaign_name,
            ad_group_name=entity.ad_group_name,
            ad_text=entity.text if entity.kind is EntityKind.AD else None,
            keyword_text=entity.text if entity.kind is EntityKind.KEYWORD else None,
            sitelink_text=entity.text if entity.kind.is_sitelink else None,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "timestamp": self.timestamp.isoformat(),
            "url": self.url,
            "response_outcome": self.response_outcome,
            "entity_type": self.entity_type.value,
            "campaign_name": self.campaign_name,
            "ad_group_name": self.ad_group_name,
            "ad_text": self.ad_text,
            "keyword_text": self.keyword_text,
            "sitelink_text": self.sitelink_text,
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "UrlCheckResult":
        return cls(
            account_id=data["account_id"],
            timestamp=parse_to_utc_naive(data["timestamp"]),
            url=data["url"],
            response_outcome=data["response_outcome"],
            entity_type=EntityType(data["entity_type"]),
            campaign_name=data.get("campaign_name"),
            ad_group_name=data.get("ad_group_name"),
            ad_text=data.get("ad_text"),
            keyword_text=data.get("keyword_text"),
            sitelink_text=data.get("sitelink_text"),
        )
