"""
LogParser Class - Handles parsing of access log lines

This module parses raw access log lines into the per-format entry
dataclasses. The collector never looks at raw text; everything it needs
is decoded here.
"""

import math
import re
from typing import Callable, Dict, Optional
from urllib.parse import urlsplit

from toplogs.models.data_models import (
    CloudControllerLogEntry,
    CombinedLogEntry,
    CommonLogEntry,
    GorouterLogEntry,
    IPAddress,
    LogEntry,
    LogFormat,
    RequestKind,
    RequestLine,
)
from toplogs.services.bucketer import NO_VALUE
from toplogs.utils.helpers import (
    dash_to_none,
    parse_clf_ts,
    parse_ip,
    parse_iso_ts,
    safe_float,
    safe_int,
    split_list,
)


class ParseError(ValueError):
    """Raised when a line does not match the declared log format"""


_QUOTED = r'"(?P<{}>(?:[^"\\]|\\.)*)"'

PATTERNS = {
    LogFormat.COMMON: re.compile(
        r"^(?P<ip>\S+)\s+\S+\s+\S+\s+"
        r"\[(?P<timestamp>[^\]]+)\]\s+"
        + _QUOTED.format("request")
        + r"\s+(?P<status>\d{3})\s+(?P<bytes>\d+|-)\s*$"
    ),
    LogFormat.COMBINED: re.compile(
        r"^(?P<ip>\S+)\s+\S+\s+\S+\s+"
        r"\[(?P<timestamp>[^\]]+)\]\s+"
        + _QUOTED.format("request")
        + r"\s+(?P<status>\d{3})\s+(?P<bytes>\d+|-)\s+"
        + _QUOTED.format("referrer")
        + r"\s+"
        + _QUOTED.format("user_agent")
        + r"\s*$"
    ),
    LogFormat.GOROUTER: re.compile(
        r"^(?P<host>\S+)\s+-\s+"
        r"\[(?P<timestamp>[^\]]+)\]\s+"
        + _QUOTED.format("request")
        + r"\s+(?P<status>\d{3})\s+(?P<bytes_received>\d+|-)\s+(?P<bytes_sent>\d+|-)\s+"
        + _QUOTED.format("referrer")
        + r"\s+"
        + _QUOTED.format("user_agent")
        + r"\s+"
        + _QUOTED.format("remote_addr")
        + r"\s+"
        + _QUOTED.format("backend_addr")
        + r"(?P<extra>.*)$"
    ),
    LogFormat.CLOUD_CONTROLLER: re.compile(
        r"^(?P<host>\S+)\s+-\s+"
        r"\[(?P<timestamp>[^\]]+)\]\s+"
        + _QUOTED.format("request")
        + r"\s+(?P<status>\d{3})\s+(?P<bytes>\d+|-)\s+"
        + _QUOTED.format("referrer")
        + r"\s+"
        + _QUOTED.format("user_agent")
        + r"\s+(?P<xff>.*?)\s*"
        r"vcap_request_id:(?P<request_id>\S*)\s+"
        r"response_time:(?P<response_time>\S*)\s*$"
    ),
}

# key:"value" or key:value pairs trailing a Gorouter line
EXTRA_FIELD = re.compile(r'(?P<key>[a-z_0-9]+):(?:"(?P<quoted>(?:[^"\\]|\\.)*)"|(?P<bare>\S*))')


class LogParser:
    """
    Parses raw access log lines into entry dataclasses.
    Responsibilities:
    - Match a line against the declared format
    - Split the request line into method, path and query
    - Normalize '-' placeholders to None
    """

    def __init__(self) -> None:
        self._handlers: Dict[LogFormat, Callable[[re.Match], LogEntry]] = {
            LogFormat.COMMON: self._common,
            LogFormat.COMBINED: self._combined,
            LogFormat.GOROUTER: self._gorouter,
            LogFormat.CLOUD_CONTROLLER: self._cloud_controller,
        }

    def parse(self, line: str, log_format: LogFormat) -> LogEntry:
        """Decode one line, raising ParseError when it does not fit"""
        log_format = LogFormat(log_format)
        m = PATTERNS[log_format].match(line.rstrip("\r\n"))
        if m is None:
            raise ParseError(f"line does not match the {log_format.value} format")
        return self._handlers[log_format](m)

    @staticmethod
    def parse_request(text: str) -> RequestLine:
        """
        Split a request line such as 'GET /index.html?a=1 HTTP/1.1'.

        The protocol is optional. Anything that does not split into at
        least a method and a URI is kept as raw text.
        """
        parts = text.split()
        if len(parts) not in (2, 3) or not parts[0].isalpha():
            return RequestLine(kind=RequestKind.INVALID_REQUEST, raw=text)

        method, uri = parts[0], parts[1]
        if any(ord(c) < 0x20 or ord(c) == 0x7F for c in uri):
            return RequestLine(kind=RequestKind.INVALID_PATH, raw=uri)
        try:
            split = urlsplit(uri)
        except ValueError:
            return RequestLine(kind=RequestKind.INVALID_PATH, raw=uri)

        if method.upper() == "CONNECT":
            # authority-form, e.g. CONNECT example.com:443
            return RequestLine(kind=RequestKind.VALID, raw=text, method=method)

        query = split.query if "?" in uri else None
        return RequestLine(
            kind=RequestKind.VALID,
            raw=text,
            method=method,
            path=split.path,
            query=query,
        )

    @staticmethod
    def _timestamp(raw: str, parse: Callable[[str], object]):
        ts = parse(raw)
        if ts is None:
            raise ParseError(f"invalid timestamp '{raw}'")
        return ts

    @staticmethod
    def _ip(raw: str, field_name: str) -> IPAddress:
        ip = parse_ip(raw)
        if ip is None:
            raise ParseError(f"invalid {field_name} '{raw}'")
        return ip

    @staticmethod
    def _status(raw: str) -> int:
        status = int(raw)
        if not 100 <= status <= 999:
            raise ParseError(f"invalid status code '{raw}'")
        return status

    @staticmethod
    def _seconds(raw: Optional[str], field_name: str) -> Optional[float]:
        raw = dash_to_none(raw)
        if raw is None:
            return None
        value = safe_float(raw)
        if value is None or not math.isfinite(value) or value >= NO_VALUE:
            raise ParseError(f"invalid {field_name} '{raw}'")
        return value

    def _common(self, m: re.Match) -> CommonLogEntry:
        return CommonLogEntry(
            ip=self._ip(m.group("ip"), "client address"),
            timestamp=self._timestamp(m.group("timestamp"), parse_clf_ts),
            request=self.parse_request(m.group("request")),
            status_code=self._status(m.group("status")),
            bytes_sent=safe_int(dash_to_none(m.group("bytes"))),
        )

    def _combined(self, m: re.Match) -> CombinedLogEntry:
        return CombinedLogEntry(
            ip=self._ip(m.group("ip"), "client address"),
            timestamp=self._timestamp(m.group("timestamp"), parse_clf_ts),
            request=self.parse_request(m.group("request")),
            status_code=self._status(m.group("status")),
            bytes_sent=safe_int(dash_to_none(m.group("bytes"))),
            referrer=dash_to_none(m.group("referrer")),
            user_agent=dash_to_none(m.group("user_agent")),
        )

    def _gorouter(self, m: re.Match) -> GorouterLogEntry:
        extra = {
            e.group("key"): e.group("quoted") if e.group("quoted") is not None else e.group("bare")
            for e in EXTRA_FIELD.finditer(m.group("extra"))
        }

        backend = dash_to_none(m.group("backend_addr"))
        app_index = dash_to_none(extra.get("app_index"))
        if app_index is not None and safe_int(app_index) is None:
            raise ParseError(f"invalid app_index '{app_index}'")

        return GorouterLogEntry(
            request_host=m.group("host"),
            timestamp=self._timestamp(m.group("timestamp"), parse_iso_ts),
            request=self.parse_request(m.group("request")),
            status_code=self._status(m.group("status")),
            remote_addr=self._ip(m.group("remote_addr"), "remote address"),
            bytes_received=safe_int(dash_to_none(m.group("bytes_received"))),
            bytes_sent=safe_int(dash_to_none(m.group("bytes_sent"))),
            referrer=dash_to_none(m.group("referrer")),
            user_agent=dash_to_none(m.group("user_agent")),
            backend_addr=self._ip(backend, "backend address") if backend else None,
            x_forwarded_for=split_list(extra.get("x_forwarded_for")),
            app_id=dash_to_none(extra.get("app_id")),
            app_index=safe_int(app_index),
            response_time=self._seconds(extra.get("response_time"), "response_time"),
            gorouter_time=self._seconds(extra.get("gorouter_time"), "gorouter_time"),
            x_cf_routererror=dash_to_none(extra.get("x_cf_routererror")),
        )

    def _cloud_controller(self, m: re.Match) -> CloudControllerLogEntry:
        return CloudControllerLogEntry(
            request_host=m.group("host"),
            timestamp=self._timestamp(m.group("timestamp"), parse_clf_ts),
            request=self.parse_request(m.group("request")),
            status_code=self._status(m.group("status")),
            bytes_sent=safe_int(dash_to_none(m.group("bytes"))),
            referrer=dash_to_none(m.group("referrer")),
            user_agent=dash_to_none(m.group("user_agent")),
            x_forwarded_for=split_list(m.group("xff")),
            vcap_request_id=dash_to_none(m.group("request_id")),
            response_time=self._seconds(m.group("response_time"), "response_time"),
        )
