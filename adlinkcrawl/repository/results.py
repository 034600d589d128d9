from typing import Iterable, List, Optional

from sqlalchemy import func, not_, or_, select, update
from sqlalchemy.orm import Session

from adlinkcrawl.db.models import UrlCheckResult as DBUrlCheckResult
from adlinkcrawl.domain.url_check_result import EntityType, UrlCheckResult
from adlinkcrawl.utils.datetime_utils import utc_now


class ResultsRepository:
    """Append-only report of URL check results for the current cycle.

    Rows of previous cycles are kept but flagged `archived`.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get_session(self) -> Session:
        return self.session_factory()

    @staticmethod
    def _to_row(result: UrlCheckResult) -> DBUrlCheckResult:
        outcome = result.response_outcome
        is_code = isinstance(outcome, int) and not isinstance(outcome, bool)
        return DBUrlCheckResult(
            account_id=result.account_id,
            checked_at=result.timestamp,
            url=result.url,
            response_code=outcome if is_code else None,
            response_message=None if is_code else str(outcome),
            entity_type=result.entity_type.value,
            campaign_name=result.campaign_name,
            ad_group_name=result.ad_group_name,
            ad_text=result.ad_text,
            keyword_text=result.keyword_text,
            sitelink_text=result.sitelink_text,
            archived=False,
        )

    @staticmethod
    def _to_domain(row: DBUrlCheckResult) -> UrlCheckResult:
        return UrlCheckResult(
            account_id=row.account_id,
            timestamp=row.checked_at,
            url=row.url,
            response_outcome=row.response_code if row.response_code is not None else row.response_message,
            entity_type=EntityType(row.entity_type),
            campaign_name=row.campaign_name,
            ad_group_name=row.ad_group_name,
            ad_text=row.ad_text,
            keyword_text=row.keyword_text,
            sitelink_text=row.sitelink_text,
        )

    def append(self, results: Iterable[UrlCheckResult]) -> int:
        rows = [self._to_row(r) for r in results]
        if not rows:
            return 0
        with self.get_session() as session:
            session.add_all(rows)
            session.commit()
        return len(rows)

    def _error_clause(self, valid_codes: Iterable[int]):
        codes = list(valid_codes)
        return or_(DBUrlCheckResult.response_code.is_(None), not_(DBUrlCheckResult.response_code.in_(codes)))

    def count_errors(self, valid_codes: Iterable[int]) -> int:
        """Count current-cycle rows whose outcome is not an accepted status code."""
        q = select(func.count(DBUrlCheckResult.result_id)).where(
            DBUrlCheckResult.archived.is_(False),
            self._error_clause(valid_codes),
        )
        with self.get_session() as session:
            return int(session.execute(q).scalar_one())

    def list_results(self, *, limit: Optional[int] = None, errors_only_for: Optional[Iterable[int]] = None) -> List[UrlCheckResult]:
        """Current-cycle rows in insertion order.

        Pass the accepted status codes as `errors_only_for` to list failures only.
        """
        q = select(DBUrlCheckResult).where(DBUrlCheckResult.archived.is_(False))
        if errors_only_for is not None:
            q = q.where(self._error_clause(errors_only_for))
        q = q.order_by(DBUrlCheckResult.result_id)
        if limit:
            q = q.limit(limit)
        with self.get_session() as session:
            return [self._to_domain(r) for r in session.execute(q).scalars().all()]

    def archive_all(self) -> int:
        """Flag every current-cycle row as archived. Returns the number of rows."""
        with self.get_session() as session:
            res = session.execute(
                update(DBUrlCheckResult)
                .where(DBUrlCheckResult.archived.is_(False))
                .values(archived=True, archived_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            session.commit()
            return res.rowcount or 0
