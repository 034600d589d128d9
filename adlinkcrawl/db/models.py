from __future__ import annotations


from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base


Base = declarative_base()

ENABLED = "ENABLED"
PAUSED = "PAUSED"
REMOVED = "REMOVED"


class Account(Base):
    __tablename__ = "accounts"

    account_id = Column(Text, primary_key=True)
    name = Column(Text, nullable=True)


class AccountLabel(Base):
    """Fleet-level label marking an account as fully checked this cycle."""
    __tablename__ = "account_labels"
    __table_args__ = (UniqueConstraint("account_id", "name"),)

    account_label_id = Column(Integer, primary_key=True)
    account_id = Column(Text, ForeignKey("accounts.account_id"), nullable=False)
    name = Column(Text, nullable=False)


class Label(Base):
    """Label definition inside one account; entities reference it through EntityLabel."""
    __tablename__ = "labels"
    __table_args__ = (UniqueConstraint("account_id", "name"),)

    label_id = Column(Integer, primary_key=True)
    account_id = Column(Text, ForeignKey("accounts.account_id"), nullable=False)
    name = Column(Text, nullable=False)


class EntityLabel(Base):
    __tablename__ = "entity_labels"
    __table_args__ = (UniqueConstraint("label_id", "target_kind", "target_id"),)

    entity_label_id = Column(Integer, primary_key=True)
    label_id = Column(Integer, ForeignKey("labels.label_id", ondelete="CASCADE"), nullable=False)
    target_kind = Column(Text, nullable=False)  # ad | keyword | campaign | ad_group
    target_id = Column(Integer, nullable=False)


class Campaign(Base):
    __tablename__ = "campaigns"

    campaign_id = Column(Integer, primary_key=True)
    account_id = Column(Text, ForeignKey("accounts.account_id"), nullable=False)
    name = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default=ENABLED)


class AdGroup(Base):
    __tablename__ = "ad_groups"

    ad_group_id = Column(Integer, primary_key=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.campaign_id"), nullable=False)
    name = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default=ENABLED)


class Ad(Base):
    __tablename__ = "ads"

    ad_id = Column(Integer, primary_key=True)
    ad_group_id = Column(Integer, ForeignKey("ad_groups.ad_group_id"), nullable=False)
    status = Column(Text, nullable=False, default=ENABLED)
    headline = Column(Text, nullable=True)
    final_url = Column(Text, nullable=True)
    mobile_final_url = Column(Text, nullable=True)


class Keyword(Base):
    __tablename__ = "keywords"

    keyword_id = Column(Integer, primary_key=True)
    ad_group_id = Column(Integer, ForeignKey("ad_groups.ad_group_id"), nullable=False)
    status = Column(Text, nullable=False, default=ENABLED)
    text = Column(Text, nullable=False)
    final_url = Column(Text, nullable=True)
    mobile_final_url = Column(Text, nullable=True)


class Sitelink(Base):
    """Sitelink extension attached to either a campaign or an ad group."""
    __tablename__ = "sitelinks"

    sitelink_id = Column(Integer, primary_key=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.campaign_id"), nullable=True)
    ad_group_id = Column(Integer, ForeignKey("ad_groups.ad_group_id"), nullable=True)
    link_text = Column(Text, nullable=True)
    final_url = Column(Text, nullable=True)
    mobile_final_url = Column(Text, nullable=True)


class AnalysisStatus(Base):
    __tablename__ = "analysis_status"

    status_id = Column(Integer, primary_key=True)
    date_started = Column(DateTime, nullable=True)
    date_completed = Column(DateTime, nullable=True)
    date_emailed = Column(DateTime, nullable=True)


class UrlCheckResult(Base):
    __tablename__ = "url_check_results"

    result_id = Column(Integer, primary_key=True)
    account_id = Column(Text, nullable=False)
    checked_at = Column(DateTime, nullable=False)
    url = Column(Text, nullable=False)
    response_code = Column(Integer, nullable=True)
    response_message = Column(Text, nullable=True)
    entity_type = Column(Text, nullable=False)
    campaign_name = Column(Text, nullable=True)
    ad_group_name = Column(Text, nullable=True)
    ad_text = Column(Text, nullable=True)
    keyword_text = Column(Text, nullable=True)
    sitelink_text = Column(Text, nullable=True)
    archived = Column(Boolean, nullable=False, default=False)
    archived_at = Column(DateTime, nullable=True)
