from typing import Iterable, Set


class CheckedUrlSet:
    """
    Tracks which URLs have already been checked within one account.

    Owned by a single crawl driver invocation and never shared across
    accounts. Seeded from already-labelled entities so a resumed account does
    not re-check URLs recorded in an earlier run.
    """

    def __init__(self, urls: Iterable[str] = ()):
        self._checked: Set[str] = set(urls)

    def update(self, urls: Iterable[str]) -> None:
        self._checked.update(urls)

    def add_if_new(self, url: str) -> bool:
        """Mark `url` and report whether it was unseen before."""
        if url in self._checked:
            return False
        self._checked.add(url)
        return True

    def __contains__(self, url: object) -> bool:
        return url in self._checked

    def __len__(self) -> int:
        return len(self._checked)
