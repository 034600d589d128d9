import requests
from typing import Callable, Optional

from adlinkcrawl.domain.http_response import HttpResponse
from adlinkcrawl.exceptions import HttpFetchError
from adlinkcrawl.services.fetch_quota import FetchQuota


class HttpService:
    """
    HTTP client wrapper for checking destination URLs.

    Requires http_client callable for dependency injection (DIP compliance).
    Error statuses (4xx/5xx) come back as ordinary responses; only transport
    failures raise `HttpFetchError`. When a `FetchQuota` is supplied every
    call draws from it first and may raise its rate-limit/daily signals.
    """

    def __init__(self, user_agent: str, http_client: Callable, timeout: int = 10, quota: Optional[FetchQuota] = None):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client
        self.quota = quota

    def fetch(self, url: str) -> HttpResponse:
        """GET `url` and return status code, body text and Content-Type."""
        if self.quota is not None:
            self.quota.acquire()
        headers = {"User-Agent": self.user_agent}
        try:
            resp = self.http_client(url, headers=headers, timeout=self.timeout, allow_redirects=True)
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, e) from e

        ct = None
        if hasattr(resp, 'headers'):
            ct = resp.headers.get('Content-Type')

        return HttpResponse(resp.status_code, resp.text, ct)
