"""Audio link port — registry of pronunciation audio found in articles."""

from typing import Protocol


class AudioLinkRegistryPort(Protocol):
    """Port for registering audio links.

    register_and_wrap() receives a quoted URL expression (``"https://..."``)
    and the id of the dictionary that found it, and returns markup to embed
    in front of the link. Implementations must accept concurrent calls.
    """

    def register_and_wrap(self, url_expression: str, owner_id: str) -> str: ...
