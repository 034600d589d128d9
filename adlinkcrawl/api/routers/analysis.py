import logging
from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel

from adlinkcrawl.api.auth import require_admin
from adlinkcrawl.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class AnalysisStatusResponse(BaseModel):
    date_started: Optional[datetime] = None
    date_completed: Optional[datetime] = None
    date_emailed: Optional[datetime] = None
    has_ever_run: bool
    in_progress: bool


class UrlCheckResultResponse(BaseModel):
    account_id: str
    timestamp: datetime
    url: str
    response: Union[int, str]
    entity_type: str
    campaign_name: Optional[str] = None
    ad_group_name: Optional[str] = None
    ad_text: Optional[str] = None
    keyword_text: Optional[str] = None
    sitelink_text: Optional[str] = None


def _status_to_response(status) -> AnalysisStatusResponse:
    return AnalysisStatusResponse(
        date_started=status.date_started,
        date_completed=status.date_completed,
        date_emailed=status.date_emailed,
        has_ever_run=status.has_ever_run,
        in_progress=status.is_in_progress,
    )


def _result_to_response(r) -> UrlCheckResultResponse:
    return UrlCheckResultResponse(
        account_id=r.account_id,
        timestamp=r.timestamp,
        url=r.url,
        response=r.response_outcome,
        entity_type=r.entity_type.value,
        campaign_name=r.campaign_name,
        ad_group_name=r.ad_group_name,
        ad_text=r.ad_text,
        keyword_text=r.keyword_text,
        sitelink_text=r.sitelink_text,
    )


def create_analysis_router(status_repo, results_repo, options_service, job_runner):
    router = APIRouter(prefix="/analysis", tags=["Analysis"])

    @router.get("/status", response_model=AnalysisStatusResponse)
    def get_status():
        return _status_to_response(status_repo.load())

    @router.get("/results", response_model=List[UrlCheckResultResponse])
    def list_results(errors_only: bool = False, limit: Optional[int] = 100):
        """Return current-cycle report rows, oldest first."""
        valid_codes = None
        if errors_only:
            try:
                valid_codes = options_service.load().valid_codes
            except ConfigurationError as e:
                raise HTTPException(status_code=409, detail=str(e))
        rows = results_repo.list_results(limit=limit, errors_only_for=valid_codes)
        return [_result_to_response(r) for r in rows]

    @router.post("/run", status_code=202, dependencies=[Depends(require_admin)])
    def run(background_tasks: BackgroundTasks):
        if job_runner.is_running:
            raise HTTPException(status_code=409, detail="audit already running")

        def _run():
            try:
                job_runner.run()
            except Exception:
                logger.exception("Audit triggered via API failed")

        background_tasks.add_task(_run)
        return {"status": "started"}

    return router
