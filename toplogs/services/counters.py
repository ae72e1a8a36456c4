"""
Counters - frequency tables and the observed time window

Small building blocks owned by the StatCollector.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Generic, Hashable, Iterator, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)

# Extremes with an offset so they compare against any aware timestamp
MAX_INSTANT = datetime.max.replace(tzinfo=timezone.utc)
MIN_INSTANT = datetime.min.replace(tzinfo=timezone.utc)


class FrequencyTable(Generic[K]):
    """
    Counts occurrences per key.

    Reading an unseen key returns 0 and does not add it; only increment()
    adds keys, so is_empty() reflects what was actually recorded.
    """

    def __init__(self) -> None:
        self._counts: Counter = Counter()

    def increment(self, key: K) -> None:
        self._counts[key] += 1

    def __getitem__(self, key: K) -> int:
        return self._counts[key]

    def __contains__(self, key: object) -> bool:
        return key in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def is_empty(self) -> bool:
        return not self._counts

    def iterate(self) -> Iterator[Tuple[K, int]]:
        """(key, count) pairs in no particular order; a fresh iterator per call"""
        return iter(list(self._counts.items()))

    def keys(self) -> Iterator[K]:
        return iter(list(self._counts))

    def total(self) -> int:
        return sum(self._counts.values())

    def __repr__(self) -> str:
        return f"FrequencyTable({dict(self._counts)!r})"


class DurationWindow:
    """Oldest and newest timestamps seen, compared as absolute instants"""

    def __init__(self) -> None:
        self.start: datetime = MAX_INSTANT
        self.end: datetime = MIN_INSTANT

    def observe(self, timestamp: datetime) -> None:
        if timestamp < self.start:
            self.start = timestamp
        if timestamp > self.end:
            self.end = timestamp

    @property
    def is_set(self) -> bool:
        return self.start <= self.end

    def bounds(self) -> Optional[Tuple[datetime, datetime]]:
        """(start, end) once something was observed, otherwise None"""
        if not self.is_set:
            return None
        return self.start, self.end
