from fastapi import APIRouter

REDACTED_KEYS = frozenset({"DATABASE_URL", "ADMIN_TOKEN"})


def create_systems_router(container_env: dict):
    """Create systems router with access to container environment config."""
    router = APIRouter(prefix="/systems", tags=["System"])

    @router.get("/health")
    def health():
        return {"status": "ok"}

    @router.get("/config")
    def get_config():
        """Return current environment configuration values, secrets masked."""
        env = {}
        for key, value in container_env.items():
            if value is None:
                env[key] = None
            elif key in REDACTED_KEYS:
                env[key] = "***"
            else:
                env[key] = str(value)
        return {"environment": env}

    return router
