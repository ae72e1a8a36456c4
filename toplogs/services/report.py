"""
ReportRenderer Class - Orders and truncates counts into display rows

The renderer only produces strings; drawing tables is left to the
output device (the CLI console or the JSON API).
"""

from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from toplogs.models.data_models import Bucket, ReportSection
from toplogs.utils.helpers import digits

Row = Tuple[str, str]


class SortOrder(Enum):
    BY_KEY = "by_key"
    BY_VALUE = "by_value"


def display(key: Any) -> str:
    return str(key)


class ReportRenderer:
    """
    Turns (key, count) pairs into ordered rows.
    Responsibilities:
    - Sort by the key's display form or by descending count
    - Truncate to the top-N
    - Label latency buckets
    """

    @staticmethod
    def render_table(
        pairs: Iterable[Tuple[Any, int]],
        order: SortOrder,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """
        Sort and truncate pairs. `limit=None` keeps every row.

        BY_VALUE ties fall back to the key's display form so the same
        input always renders the same way.
        """
        data = [(display(k), v) for k, v in pairs]
        if order is SortOrder.BY_KEY:
            data.sort(key=lambda kv: kv[0])
        else:
            data.sort(key=lambda kv: (-kv[1], kv[0]))

        if limit is not None:
            data = data[:limit]
        return [(k, str(v)) for k, v in data]

    @staticmethod
    def render_buckets(buckets: List[Bucket]) -> List[Row]:
        # bounds are padded to the width of the largest observed second
        max_key = max((b.hi - 1 for b in buckets if not b.unknown), default=0)
        width = digits(max_key)
        return [(b.label(width), str(b.count)) for b in buckets]

    @classmethod
    def section(
        cls,
        title: str,
        pairs: Iterable[Tuple[Any, int]],
        order: SortOrder,
        limit: Optional[int] = None,
    ) -> ReportSection:
        return ReportSection(title=title, rows=cls.render_table(pairs, order, limit))
