"""
Helper Functions

This module contains utility functions used by the parser and the report.
"""

from datetime import datetime
from ipaddress import ip_address
from typing import Any, List, Optional

from dateutil import parser as dtparser

from toplogs.models.data_models import IPAddress

CLF_TS_FORMAT = "%d/%b/%Y:%H:%M:%S %z"
LEGACY_GOROUTER_TS_FORMAT = "%d/%m/%Y:%H:%M:%S.%f %z"


def parse_clf_ts(x: str) -> Optional[datetime]:
    """Parse a common log format timestamp, e.g. 10/Oct/2000:13:55:36 -0700"""
    try:
        return datetime.strptime(x.strip(), CLF_TS_FORMAT)
    except ValueError:
        return None


def parse_iso_ts(x: str) -> Optional[datetime]:
    """
    Parse a Gorouter timestamp.

    Current routers write ISO 8601 (2019-01-28T22:15:08.622+0000), older
    ones wrote 28/01/2019:22:15:08.622 +0000. Naive values are rejected so
    that every recorded instant carries an offset.
    """
    if not x:
        return None
    try:
        dt = dtparser.isoparse(x.strip())
    except ValueError:
        try:
            dt = datetime.strptime(x.strip(), LEGACY_GOROUTER_TS_FORMAT)
        except ValueError:
            return None
    if dt.tzinfo is None:
        return None
    return dt


def dash_to_none(x: Optional[str]) -> Optional[str]:
    """Access logs write '-' (or nothing) for absent values"""
    if x is None:
        return None
    x = x.strip()
    if x in ("", "-"):
        return None
    return x


def safe_int(x: Any) -> Optional[int]:
    """Safely convert to int"""
    try:
        return int(x) if x is not None else None
    except (TypeError, ValueError):
        return None


def safe_float(x: Any) -> Optional[float]:
    """Safely convert to float"""
    try:
        return float(x) if x is not None else None
    except (TypeError, ValueError):
        return None


def parse_ip(x: str) -> Optional[IPAddress]:
    """Parse an address, dropping a trailing :port and [] around IPv6"""
    x = x.strip()
    try:
        return ip_address(x)
    except ValueError:
        pass
    if x.startswith("["):
        host, _, _ = x[1:].partition("]")
    else:
        host, _, port = x.rpartition(":")
        if not port.isdigit():
            return None
    try:
        return ip_address(host)
    except ValueError:
        return None


def split_list(x: Optional[str]) -> List[str]:
    """Split a comma separated header value, keeping order"""
    x = dash_to_none(x)
    if x is None:
        return []
    return [part.strip() for part in x.split(",") if part.strip()]


def digits(n: int) -> int:
    """Display width of a non-negative integer"""
    return len(str(n))
