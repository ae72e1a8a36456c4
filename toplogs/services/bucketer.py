"""
AdaptiveBucketer - groups whole-second latencies into readable ranges

Latency tables are keyed by seconds truncated to an int. Listing every
distinct second produces long reports full of single-count rows, so
adjacent values are merged until each range holds at least
`min_threshold` requests.
"""

import math
import sys
from typing import List, Optional

from toplogs.models.data_models import Bucket
from toplogs.services.counters import FrequencyTable

# Key recorded when an entry carries no latency; sorts after every real value
NO_VALUE = sys.maxsize


def to_seconds_key(value: Optional[float]) -> int:
    """
    Table key for a latency in (fractional) seconds.

    Values that cannot be a whole number of seconds below NO_VALUE
    (nan, inf, huge) count as no value.
    """
    if value is None or not math.isfinite(value) or value >= NO_VALUE:
        return NO_VALUE
    return int(value)


class AdaptiveBucketer:
    """
    Builds display buckets from a latency FrequencyTable.

    Buckets come out in ascending order. Every bucket but the trailing
    one reaches min_threshold; the trailing one is emitted regardless so
    no observation is dropped. The no-value bucket, when present, is last.
    """

    def __init__(self, min_threshold: int):
        if min_threshold < 1:
            raise ValueError("min_threshold must be a positive integer")
        self.min_threshold = min_threshold

    def bucketize(self, table: FrequencyTable[int]) -> List[Bucket]:
        keys = sorted(k for k in table.keys() if k < NO_VALUE)
        buckets: List[Bucket] = []

        bucket_start: Optional[int] = None
        running = 0
        for key in keys:
            if bucket_start is None:
                bucket_start = key
            running += table[key]
            if running >= self.min_threshold:
                buckets.append(Bucket(lo=bucket_start, hi=key + 1, count=running))
                bucket_start = None
                running = 0

        if bucket_start is not None and running > 0:
            buckets.append(Bucket(lo=bucket_start, hi=keys[-1] + 1, count=running))

        no_value = table[NO_VALUE]
        if no_value > 0:
            buckets.append(Bucket(lo=NO_VALUE, hi=NO_VALUE, count=no_value, unknown=True))

        return buckets
