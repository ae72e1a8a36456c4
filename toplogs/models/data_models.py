"""
Data Models (DTOs - Data Transfer Objects)

This module contains the dataclasses shared by the parser, the collector
and the report renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

IPAddress = Union[IPv4Address, IPv6Address]

NONE_MARKER = "<none>"


class LogFormat(str, Enum):
    COMMON = "common"
    COMBINED = "combined"
    GOROUTER = "gorouter"
    CLOUD_CONTROLLER = "cloud_controller"


class RequestKind(Enum):
    VALID = "valid"
    INVALID_PATH = "invalid_path"
    INVALID_REQUEST = "invalid_request"


@dataclass(frozen=True)
class RequestLine:
    """
    The quoted request of an access log line.

    VALID requests carry the method and the split URI. INVALID_PATH means
    the line had a method and a URI but the URI could not be parsed, in
    which case `raw` holds the URI text. INVALID_REQUEST means the text
    could not be split at all and `raw` holds all of it.
    """
    kind: RequestKind
    raw: str
    method: Optional[str] = None
    path: Optional[str] = None
    query: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.kind is RequestKind.VALID

    @property
    def path_no_query(self) -> str:
        if not self.is_valid:
            return ""
        return self.path or ""

    @property
    def path_with_query(self) -> str:
        if not self.is_valid:
            return self.raw
        if not self.path and self.query is None:
            return NONE_MARKER
        if self.query is None:
            return self.path or ""
        return f"{self.path or ''}?{self.query}"


@dataclass
class CommonLogEntry:
    """Apache/nginx common log format entry"""
    format: ClassVar[LogFormat] = LogFormat.COMMON
    ip: IPAddress
    timestamp: datetime
    request: RequestLine
    status_code: int
    bytes_sent: Optional[int] = None


@dataclass
class CombinedLogEntry:
    """Common log format plus referrer and user agent"""
    format: ClassVar[LogFormat] = LogFormat.COMBINED
    ip: IPAddress
    timestamp: datetime
    request: RequestLine
    status_code: int
    bytes_sent: Optional[int] = None
    referrer: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class GorouterLogEntry:
    """Cloud Foundry Gorouter access log entry"""
    format: ClassVar[LogFormat] = LogFormat.GOROUTER
    request_host: str
    timestamp: datetime
    request: RequestLine
    status_code: int
    remote_addr: IPAddress
    bytes_received: Optional[int] = None
    bytes_sent: Optional[int] = None
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    backend_addr: Optional[IPAddress] = None
    x_forwarded_for: List[str] = field(default_factory=list)
    app_id: Optional[str] = None
    app_index: Optional[int] = None
    response_time: Optional[float] = None
    gorouter_time: Optional[float] = None
    x_cf_routererror: Optional[str] = None


@dataclass
class CloudControllerLogEntry:
    """Cloud Controller nginx access log entry"""
    format: ClassVar[LogFormat] = LogFormat.CLOUD_CONTROLLER
    request_host: str
    timestamp: datetime
    request: RequestLine
    status_code: int
    bytes_sent: Optional[int] = None
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    x_forwarded_for: List[str] = field(default_factory=list)
    vcap_request_id: Optional[str] = None
    response_time: Optional[float] = None


LogEntry = Union[CommonLogEntry, CombinedLogEntry, GorouterLogEntry, CloudControllerLogEntry]


@dataclass(frozen=True)
class Bucket:
    """A range [lo, hi) of whole-second latencies, or the no-value bucket"""
    lo: int
    hi: int
    count: int
    unknown: bool = False

    def label(self, width: int = 0) -> str:
        if self.unknown:
            return NONE_MARKER
        return f"{self.lo:>{width}} to {self.hi:>{width}}"


@dataclass
class ReportSection:
    """One titled two-column table of the report"""
    title: str
    rows: List[Tuple[str, str]]


@dataclass
class Report:
    """Summary handed to an output device"""
    duration: Optional[Tuple[datetime, datetime]]
    total_requests: int
    total_errors: int
    sections: List[ReportSection] = field(default_factory=list)

    def section(self, title: str) -> Optional[ReportSection]:
        for s in self.sections:
            if s.title == title:
                return s
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duration": (
                {"start": self.duration[0].isoformat(), "end": self.duration[1].isoformat()}
                if self.duration
                else None
            ),
            "total_requests": self.total_requests,
            "total_errors": self.total_errors,
            "sections": [
                {"title": s.title, "rows": [list(r) for r in s.rows]}
                for s in self.sections
            ],
        }
