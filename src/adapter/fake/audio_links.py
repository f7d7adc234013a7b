"""In-memory implementation of AudioLinkRegistryPort for testing."""


class FakeAudioLinkRegistry:
    """Records registrations and returns a recognizable marker."""

    def __init__(self):
        self.registered: list[tuple[str, str]] = []

    def register_and_wrap(self, url_expression: str, owner_id: str) -> str:
        self.registered.append((url_expression, owner_id))
        return f"<!--audio {owner_id}-->"
