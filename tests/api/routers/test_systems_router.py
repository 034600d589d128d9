from adlinkcrawl.api.routers.systems import create_systems_router


def _get_endpoint(router, path: str, method: str):
    for route in router.routes:
        if getattr(route, "path", None) != path:
            continue
        if method.upper() in getattr(route, "methods", set()):
            return route.endpoint
    raise AssertionError(f"No route found for {method} {path}")


def test_health():
    router = create_systems_router({})
    assert _get_endpoint(router, "/systems/health", "GET")() == {"status": "ok"}


def test_config_masks_secrets():
    router = create_systems_router({
        "DATABASE_URL": "postgresql://user:pw@db/ads",
        "HTTP_TIMEOUT": 10,
        "ADLINKCRAWL_FETCH_QPS": None,
    })

    env = _get_endpoint(router, "/systems/config", "GET")()["environment"]

    assert env == {"DATABASE_URL": "***", "HTTP_TIMEOUT": "10", "ADLINKCRAWL_FETCH_QPS": None}
