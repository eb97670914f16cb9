"""
In-memory store client.

Holds all data in the current process. Useful for tests and for running a
worker and producer inside one process; it offers none of the sharing that
makes Redis the production store.
"""

from collections import defaultdict, deque


class MemoryStore:
    """
    Dictionary-backed implementation of the store contract.

    No method awaits midway, so each operation is atomic with respect to
    other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        self._lists: dict[str, deque[str]] = defaultdict(deque)
        self._sets: dict[str, set[str]] = defaultdict(set)
        self._values: dict[str, str] = {}

    async def list_push(self, key: str, value: str) -> int:
        self._lists[key].append(value)
        return len(self._lists[key])

    async def list_pop_front(self, key: str) -> str | None:
        items = self._lists.get(key)
        if not items:
            return None
        return items.popleft()

    async def list_length(self, key: str) -> int:
        return len(self._lists.get(key, ()))

    async def list_range(self, key: str, start: int, stop: int) -> list[str]:
        items = list(self._lists.get(key, ()))
        # Redis LRANGE semantics: inclusive stop, negative indexes from the end
        size = len(items)
        if start < 0:
            start = max(size + start, 0)
        if stop < 0:
            stop = size + stop
        if start > stop:
            return []
        return items[start : stop + 1]

    async def set_add(self, key: str, member: str) -> None:
        self._sets[key].add(member)

    async def set_remove(self, key: str, member: str) -> None:
        members = self._sets.get(key)
        if members is not None:
            members.discard(member)

    async def set_members(self, key: str) -> set[str]:
        return set(self._sets.get(key, ()))

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._values.pop(key, None)
            self._lists.pop(key, None)
            self._sets.pop(key, None)

    async def incr(self, key: str) -> int:
        value = int(self._values.get(key, 0)) + 1
        self._values[key] = str(value)
        return value

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None

    def flush(self) -> None:
        """Drop every key."""
        self._lists.clear()
        self._sets.clear()
        self._values.clear()
