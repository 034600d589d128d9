from fastapi import FastAPI

from adlinkcrawl.api.routers import create_analysis_router, create_systems_router


def create_app(container) -> FastAPI:
    """Build the control API from the dependency container."""
    app = FastAPI(title="AdLinkCrawl")
    app.include_router(create_systems_router(container.config()))
    app.include_router(
        create_analysis_router(
            status_repo=container.status_repository(),
            results_repo=container.results_repository(),
            options_service=container.options_service(),
            job_runner=container.audit_job_runner(),
        )
    )
    return app
