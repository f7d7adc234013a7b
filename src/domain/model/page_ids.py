"""Page identifier set used to drop duplicate articles."""


class PageIdentitySet:
    """Append-only set of page ids.

    Holds one id per headword variant of a single lookup.
    """

    __slots__ = ("_ids",)

    def __init__(self) -> None:
        self._ids: list[int] = []

    def insert(self, page_id: int) -> bool:
        """Add page_id. Returns False if it was already present."""
        if page_id in self._ids:
            return False
        self._ids.append(page_id)
        return True

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(self._ids)
