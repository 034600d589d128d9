from typing import Optional

from adlinkcrawl.domain.entities import Entity
from adlinkcrawl.domain.http_response import HttpResponse
from adlinkcrawl.domain.options import Options


class AcceptAllValidator:
    """Default custom validation hook: every response passes.

    Replace with a site-specific implementation (e.g. checking that a product
    page is not showing "out of stock") and wire it through the container.
    """

    def is_valid_response(self, url: str, response: HttpResponse, options: Options, entity: Optional[Entity]) -> bool:
        return True
