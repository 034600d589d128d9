"""Protocol (interface) definitions for services."""
from typing import List, Optional, Protocol

from adlinkcrawl.domain.entities import Entity, EntityGroup, EntitySelector, TagTarget
from adlinkcrawl.domain.http_response import HttpResponse
from adlinkcrawl.domain.options import Options


class Fetcher(Protocol):
    """Fetch a URL and return a normalized HTTP-like response."""

    def fetch(self, url: str) -> HttpResponse: ...


class ResponseValidator(Protocol):
    """Extra content check applied to responses with an accepted status.

    Must be side-effect free and fast; returning False marks the URL as
    failed custom validation.
    """

    def is_valid_response(self, url: str, response: HttpResponse, options: Options, entity: Optional[Entity]) -> bool: ...


class EntityStore(Protocol):
    """Ads entities of one account plus the account-scoped label relation."""

    def label_exists(self, account_id: str, label_name: str) -> bool: ...

    def create_label(self, account_id: str, label_name: str) -> None: ...

    def apply_label(self, account_id: str, target: TagTarget, label_name: str) -> None: ...

    def select_groups(self, account_id: str, selector: EntitySelector, label_name: str, *, offset: int, limit: int) -> List[EntityGroup]: ...

    def count_groups(self, account_id: str, selector: EntitySelector, label_name: str) -> int: ...


class AccountStore(Protocol):
    """Accounts of the fleet and the fleet-level completion label."""

    def list_account_ids(self, *, without_label: str, limit: Optional[int] = None) -> List[str]: ...

    def count_accounts(self, *, without_label: str) -> int: ...

    def apply_account_label(self, account_id: str, label_name: str) -> None: ...

    def clear_labels(self, label_name: str) -> None: ...
