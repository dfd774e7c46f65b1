import threading


class SemanticMatchCache:
    """Process-wide memo of parameter-name equivalence answers.

    Append-only. Keys are order-insensitive pairs of normalized names; a
    concurrent miss on the same pair just repeats the call and the last
    writer wins.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], bool] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(first: str, second: str) -> tuple[str, str]:
        return (first, second) if first <= second else (second, first)

    def get(self, first: str, second: str) -> bool | None:
        with self._lock:
            return self._entries.get(self.key(first, second))

    def put(self, first: str, second: str, equivalent: bool) -> None:
        with self._lock:
            self._entries[self.key(first, second)] = equivalent

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
