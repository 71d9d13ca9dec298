"""
Aggregation points for partial results.

Each shared structure of a pipeline run is mutated only through one of
these collectors, and every mutation runs under the collector's lock.
"""

import threading
from typing import Dict, Iterable, List, Tuple

from phasemr.common.types import FinalResult, GroupedItems, MappedItem, ReducedCounts


class _Collector:
    """Lock plus a frozen flag shared by all collectors"""

    def __init__(self):
        self.lock = threading.Lock()
        self._frozen = False

    def freeze(self):
        """Make the structure read-only; called once its phase barrier is crossed"""
        with self.lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_open(self):
        if self._frozen:
            raise RuntimeError(f"{type(self).__name__} is frozen")


class MappedItemCollector(_Collector):
    """Merges map task output into one ordered list"""

    def __init__(self):
        super().__init__()
        self._items: List[MappedItem] = []
        self._sources: List[str] = []

    def deliver(self, source_key: str, items: List[MappedItem]):
        """Append all items of one map task; items of a task stay contiguous and ordered"""
        with self.lock:
            self._check_open()
            self._items.extend(items)
            self._sources.append(source_key)

    @property
    def deliveries(self) -> int:
        with self.lock:
            return len(self._sources)

    @property
    def sources(self) -> Tuple[str, ...]:
        """Source keys in the order their deliveries were merged"""
        with self.lock:
            return tuple(self._sources)

    def __len__(self):
        with self.lock:
            return len(self._items)

    def snapshot(self) -> Tuple[MappedItem, ...]:
        with self.lock:
            return tuple(self._items)


class GroupedItemsTable(_Collector):
    """token -> source keys, with get-or-create and append in one critical section"""

    def __init__(self):
        super().__init__()
        self._groups: GroupedItems = {}

    def append(self, token: str, source_key: str):
        with self.lock:
            self._check_open()
            keys = self._groups.get(token)
            if keys is None:
                keys = []
                self._groups[token] = keys
            keys.append(source_key)

    def extend(self, items: Iterable[MappedItem]):
        """Append a batch of items while holding the lock once"""
        with self.lock:
            self._check_open()
            for item in items:
                keys = self._groups.get(item.token)
                if keys is None:
                    keys = []
                    self._groups[item.token] = keys
                keys.append(item.source_key)

    def __len__(self):
        with self.lock:
            return len(self._groups)

    def snapshot(self) -> GroupedItems:
        with self.lock:
            return {token: list(keys) for token, keys in self._groups.items()}


class ResultCollector(_Collector):
    """Merges per-token count tables into the final result"""

    def __init__(self):
        super().__init__()
        self._results: FinalResult = {}

    def deliver(self, token: str, counts: ReducedCounts):
        with self.lock:
            self._check_open()
            if token in self._results:
                raise ValueError(f"Token delivered twice: {token!r}")
            self._results[token] = dict(counts)

    def __len__(self):
        with self.lock:
            return len(self._results)

    def snapshot(self) -> FinalResult:
        with self.lock:
            return {token: dict(counts) for token, counts in self._results.items()}
