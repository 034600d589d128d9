import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from adlinkcrawl.db.models import (
    ENABLED,
    PAUSED,
    Account,
    AccountLabel,
    Ad,
    AdGroup,
    Campaign,
    EntityLabel,
    Keyword,
    Label,
    Sitelink,
)
from adlinkcrawl.domain.entities import (
    Entity,
    EntityGroup,
    EntityKind,
    EntitySelector,
    TagCapability,
    TagTarget,
    TagTargetKind,
)
from adlinkcrawl.exceptions import TagStoreReadOnlyError

logger = logging.getLogger(__name__)

_TAGGABLE = TagCapability(can_tag=True)


def _has_url(model):
    return or_(model.final_url.is_not(None), model.mobile_final_url.is_not(None))


class AdsRepository:
    """Ads entities, labels and accounts backed by SQLAlchemy.

    Requires an explicit `session_factory` (callable returning a `Session`).
    With `read_only=True` (preview mode) label mutations are skipped, and
    creating a missing label raises `TagStoreReadOnlyError`.
    """

    def __init__(self, session_factory, read_only: bool = False):
        self.session_factory = session_factory
        self.read_only = read_only

    def get_session(self) -> Session:
        return self.session_factory()

    @staticmethod
    def _statuses(include_paused: bool) -> List[str]:
        return [ENABLED, PAUSED] if include_paused else [ENABLED]

    @staticmethod
    def _label_id(session: Session, account_id: str, label_name: str) -> Optional[int]:
        q = select(Label.label_id).where(Label.account_id == account_id, Label.name == label_name)
        return session.execute(q).scalars().first()

    # -- labels -----------------------------------------------------------

    def label_exists(self, account_id: str, label_name: str) -> bool:
        with self.get_session() as session:
            return self._label_id(session, account_id, label_name) is not None

    def create_label(self, account_id: str, label_name: str) -> None:
        if self.read_only:
            raise TagStoreReadOnlyError(account_id, label_name)
        with self.get_session() as session:
            if self._label_id(session, account_id, label_name) is not None:
                return
            session.add(Label(account_id=account_id, name=label_name))
            # Another worker may create the same label concurrently.
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                if self._label_id(session, account_id, label_name) is None:
                    raise

    def apply_label(self, account_id: str, target: TagTarget, label_name: str) -> None:
        if self.read_only:
            logger.debug("Preview mode: not labelling %s %s", target.kind.value, target.entity_id)
            return
        with self.get_session() as session:
            label_id = self._label_id(session, account_id, label_name)
            if label_id is None:
                raise ValueError(f"Label {label_name!r} does not exist in account {account_id}")
            q = select(EntityLabel.entity_label_id).where(
                EntityLabel.label_id == label_id,
                EntityLabel.target_kind == target.kind.value,
                EntityLabel.target_id == target.entity_id,
            )
            if session.execute(q).scalars().first() is not None:
                return
            session.add(EntityLabel(label_id=label_id, target_kind=target.kind.value, target_id=target.entity_id))
            session.commit()

    def _labeled_clause(self, account_id: str, label_name: str, target_kind: TagTargetKind, id_column):
        return (
            select(EntityLabel.entity_label_id)
            .join(Label, Label.label_id == EntityLabel.label_id)
            .where(
                Label.account_id == account_id,
                Label.name == label_name,
                EntityLabel.target_kind == target_kind.value,
                EntityLabel.target_id == id_column,
            )
            .exists()
        )

    # -- entity groups ----------------------------------------------------

    def _group_ids_query(self, account_id: str, selector: EntitySelector, label_name: str):
        """Select the ids of tagging targets matching `selector`, plus the id column."""
        statuses = self._statuses(selector.include_paused)
        kind = selector.kind
        if kind is EntityKind.AD:
            id_col, target_kind = Ad.ad_id, TagTargetKind.AD
            q = (
                select(Ad.ad_id)
                .join(AdGroup, AdGroup.ad_group_id == Ad.ad_group_id)
                .join(Campaign, Campaign.campaign_id == AdGroup.campaign_id)
                .where(Ad.status.in_(statuses), _has_url(Ad))
            )
        elif kind is EntityKind.KEYWORD:
            id_col, target_kind = Keyword.keyword_id, TagTargetKind.KEYWORD
            q = (
                select(Keyword.keyword_id)
                .join(AdGroup, AdGroup.ad_group_id == Keyword.ad_group_id)
                .join(Campaign, Campaign.campaign_id == AdGroup.campaign_id)
                .where(Keyword.status.in_(statuses), _has_url(Keyword))
            )
        elif kind is EntityKind.AD_GROUP_SITELINK:
            id_col, target_kind = AdGroup.ad_group_id, TagTargetKind.AD_GROUP
            has_sitelinks = select(Sitelink.sitelink_id).where(
                Sitelink.ad_group_id == AdGroup.ad_group_id, _has_url(Sitelink)
            ).exists()
            q = (
                select(AdGroup.ad_group_id)
                .join(Campaign, Campaign.campaign_id == AdGroup.campaign_id)
                .where(has_sitelinks)
            )
        else:
            id_col, target_kind = Campaign.campaign_id, TagTargetKind.CAMPAIGN
            has_sitelinks = select(Sitelink.sitelink_id).where(
                Sitelink.campaign_id == Campaign.campaign_id, _has_url(Sitelink)
            ).exists()
            q = select(Campaign.campaign_id).where(has_sitelinks)

        q = q.where(Campaign.account_id == account_id, Campaign.status.in_(statuses))
        if kind is not EntityKind.CAMPAIGN_SITELINK:
            q = q.where(AdGroup.status.in_(statuses))

        labeled = self._labeled_clause(account_id, label_name, target_kind, id_col)
        q = q.where(labeled if selector.labeled else ~labeled)
        return q, id_col

    def count_groups(self, account_id: str, selector: EntitySelector, label_name: str) -> int:
        q, _ = self._group_ids_query(account_id, selector, label_name)
        with self.get_session() as session:
            return int(session.execute(select(func.count()).select_from(q.subquery())).scalar_one())

    def select_groups(self, account_id: str, selector: EntitySelector, label_name: str, *, offset: int, limit: int) -> List[EntityGroup]:
        q, id_col = self._group_ids_query(account_id, selector, label_name)
        q = q.order_by(id_col).offset(offset).limit(limit)
        with self.get_session() as session:
            ids = list(session.execute(q).scalars().all())
            if not ids:
                return []
            if selector.kind is EntityKind.AD:
                return self._ad_groups(session, account_id, ids)
            if selector.kind is EntityKind.KEYWORD:
                return self._keyword_groups(session, account_id, ids)
            if selector.kind is EntityKind.AD_GROUP_SITELINK:
                return self._ad_group_sitelink_groups(session, account_id, ids)
            return self._campaign_sitelink_groups(session, account_id, ids)

    def _ad_groups(self, session: Session, account_id: str, ids: List[int]) -> List[EntityGroup]:
        q = (
            select(Ad, AdGroup.name, Campaign.name)
            .join(AdGroup, AdGroup.ad_group_id == Ad.ad_group_id)
            .join(Campaign, Campaign.campaign_id == AdGroup.campaign_id)
            .where(Ad.ad_id.in_(ids))
            .order_by(Ad.ad_id)
        )
        groups = []
        for ad, ad_group_name, campaign_name in session.execute(q).all():
            entity = Entity(
                kind=EntityKind.AD,
                entity_id=ad.ad_id,
                account_id=account_id,
                campaign_name=campaign_name,
                ad_group_name=ad_group_name,
                text=ad.headline,
                final_url=ad.final_url,
                mobile_final_url=ad.mobile_final_url,
                capability=_TAGGABLE,
            )
            groups.append(EntityGroup(entity.tag_target, (entity,)))
        return groups

    def _keyword_groups(self, session: Session, account_id: str, ids: List[int]) -> List[EntityGroup]:
        q = (
            select(Keyword, AdGroup.name, Campaign.name)
            .join(AdGroup, AdGroup.ad_group_id == Keyword.ad_group_id)
            .join(Campaign, Campaign.campaign_id == AdGroup.campaign_id)
            .where(Keyword.keyword_id.in_(ids))
            .order_by(Keyword.keyword_id)
        )
        groups = []
        for kw, ad_group_name, campaign_name in session.execute(q).all():
            entity = Entity(
                kind=EntityKind.KEYWORD,
                entity_id=kw.keyword_id,
                account_id=account_id,
                campaign_name=campaign_name,
                ad_group_name=ad_group_name,
                text=kw.text,
                final_url=kw.final_url,
                mobile_final_url=kw.mobile_final_url,
                capability=_TAGGABLE,
            )
            groups.append(EntityGroup(entity.tag_target, (entity,)))
        return groups

    def _sitelinks_by_parent(self, session: Session, parent_col, ids: List[int]) -> Dict[int, List[Sitelink]]:
        q = select(Sitelink).where(parent_col.in_(ids), _has_url(Sitelink)).order_by(Sitelink.sitelink_id)
        by_parent: Dict[int, List[Sitelink]] = {}
        for sl in session.execute(q).scalars().all():
            by_parent.setdefault(getattr(sl, parent_col.key), []).append(sl)
        return by_parent

    @staticmethod
    def _sitelink_entity(sl: Sitelink, kind: EntityKind, account_id: str, parent: TagTarget, names: Tuple[str, Optional[str]]) -> Entity:
        campaign_name, ad_group_name = names
        return Entity(
            kind=kind,
            entity_id=sl.sitelink_id,
            account_id=account_id,
            campaign_name=campaign_name,
            ad_group_name=ad_group_name,
            text=sl.link_text,
            final_url=sl.final_url,
            mobile_final_url=sl.mobile_final_url,
            capability=TagCapability(can_tag=False, parent_for_tagging=parent),
        )

    def _campaign_sitelink_groups(self, session: Session, account_id: str, ids: List[int]) -> List[EntityGroup]:
        campaigns = session.execute(
            select(Campaign).where(Campaign.campaign_id.in_(ids)).order_by(Campaign.campaign_id)
        ).scalars().all()
        sitelinks = self._sitelinks_by_parent(session, Sitelink.campaign_id, ids)
        groups = []
        for c in campaigns:
            parent = TagTarget(TagTargetKind.CAMPAIGN, c.campaign_id)
            entities = tuple(
                self._sitelink_entity(sl, EntityKind.CAMPAIGN_SITELINK, account_id, parent, (c.name, None))
                for sl in sitelinks.get(c.campaign_id, [])
            )
            groups.append(EntityGroup(parent, entities))
        return groups

    def _ad_group_sitelink_groups(self, session: Session, account_id: str, ids: List[int]) -> List[EntityGroup]:
        rows = session.execute(
            select(AdGroup, Campaign.name)
            .join(Campaign, Campaign.campaign_id == AdGroup.campaign_id)
            .where(AdGroup.ad_group_id.in_(ids))
            .order_by(AdGroup.ad_group_id)
        ).all()
        sitelinks = self._sitelinks_by_parent(session, Sitelink.ad_group_id, ids)
        groups = []
        for ag, campaign_name in rows:
            parent = TagTarget(TagTargetKind.AD_GROUP, ag.ad_group_id)
            entities = tuple(
                self._sitelink_entity(sl, EntityKind.AD_GROUP_SITELINK, account_id, parent, (campaign_name, ag.name))
                for sl in sitelinks.get(ag.ad_group_id, [])
            )
            groups.append(EntityGroup(parent, entities))
        return groups

    # -- accounts ---------------------------------------------------------

    def _unlabeled_accounts(self, label_name: str):
        labeled = select(AccountLabel.account_label_id).where(
            AccountLabel.account_id == Account.account_id, AccountLabel.name == label_name
        ).exists()
        return select(Account.account_id).where(~labeled)

    def list_account_ids(self, *, without_label: str, limit: Optional[int] = None) -> List[str]:
        q = self._unlabeled_accounts(without_label).order_by(Account.account_id)
        if limit:
            q = q.limit(limit)
        with self.get_session() as session:
            return list(session.execute(q).scalars().all())

    def count_accounts(self, *, without_label: str) -> int:
        q = self._unlabeled_accounts(without_label)
        with self.get_session() as session:
            return int(session.execute(select(func.count()).select_from(q.subquery())).scalar_one())

    def apply_account_label(self, account_id: str, label_name: str) -> None:
        if self.read_only:
            logger.debug("Preview mode: not labelling account %s", account_id)
            return
        with self.get_session() as session:
            q = select(AccountLabel.account_label_id).where(
                AccountLabel.account_id == account_id, AccountLabel.name == label_name
            )
            if session.execute(q).scalars().first() is not None:
                return
            session.add(AccountLabel(account_id=account_id, name=label_name))
            session.commit()

    def clear_labels(self, label_name: str) -> None:
        """Remove `label_name` from every account and delete it in every account.

        Deleting the account-scoped label definitions also drops the label
        from every ad, keyword, campaign and ad group.
        """
        if self.read_only:
            logger.info("Preview mode: not clearing label %s", label_name)
            return
        with self.get_session() as session:
            label_ids = select(Label.label_id).where(Label.name == label_name)
            session.execute(
                delete(EntityLabel).where(EntityLabel.label_id.in_(label_ids)).execution_options(synchronize_session=False)
            )
            session.execute(delete(Label).where(Label.name == label_name).execution_options(synchronize_session=False))
            session.execute(
                delete(AccountLabel).where(AccountLabel.name == label_name).execution_options(synchronize_session=False)
            )
            session.commit()
