from typing import NamedTuple, Optional


class HttpResponse(NamedTuple):
    """Response from one HTTP check: status code plus captured body."""
    status_code: int
    text: str
    content_type: Optional[str] = None
