from typing import Any, List


class InMemoryLogService:
    """
    Default log sink passed to the proxy controller. Keeps whatever it is given.
    """

    def __init__(self):
        self.entries: List[Any] = []

    def log(self, entry: Any):
        self.entries.append(entry)

    def clear(self):
        self.entries.clear()
