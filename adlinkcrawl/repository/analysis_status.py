from sqlalchemy import select
from sqlalchemy.orm import Session

from adlinkcrawl.db.models import AnalysisStatus as DBAnalysisStatus
from adlinkcrawl.domain.analysis_status import AnalysisStatus

_STATUS_ID = 1


class AnalysisStatusRepository:
    """Single-row store for the analysis cycle timestamps."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get_session(self) -> Session:
        return self.session_factory()

    def load(self) -> AnalysisStatus:
        with self.get_session() as session:
            row = session.execute(
                select(DBAnalysisStatus).where(DBAnalysisStatus.status_id == _STATUS_ID)
            ).scalars().first()
            if row is None:
                return AnalysisStatus()
            return AnalysisStatus(
                date_started=row.date_started,
                date_completed=row.date_completed,
                date_emailed=row.date_emailed,
            )

    def save(self, status: AnalysisStatus) -> None:
        with self.get_session() as session:
            row = session.get(DBAnalysisStatus, _STATUS_ID)
            if row is None:
                row = DBAnalysisStatus(status_id=_STATUS_ID)
                session.add(row)
            row.date_started = status.date_started
            row.date_completed = status.date_completed
            row.date_emailed = status.date_emailed
            session.commit()
