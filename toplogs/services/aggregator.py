"""
StatCollector Class - Accumulates statistics over parsed entries

This module owns all state of one run: totals, the observed time window
and one frequency table per tracked dimension. Entries are recorded one
at a time; summarize() turns the state into a Report.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from toplogs.config import ReportConfig
from toplogs.models.data_models import (
    NONE_MARKER,
    CloudControllerLogEntry,
    CombinedLogEntry,
    CommonLogEntry,
    GorouterLogEntry,
    LogEntry,
    LogFormat,
    Report,
    ReportSection,
)
from toplogs.services.bucketer import AdaptiveBucketer, to_seconds_key
from toplogs.services.counters import DurationWindow, FrequencyTable
from toplogs.services.parser import LogParser, ParseError
from toplogs.services.report import ReportRenderer, SortOrder

logger = logging.getLogger(__name__)

FORWARDED_FOR_SEPARATOR = ", "


@dataclass
class RunStatistics:
    """Everything accumulated during one run"""
    total_requests: int = 0
    errors: int = 0
    duration: DurationWindow = field(default_factory=DurationWindow)
    response_codes: FrequencyTable = field(default_factory=FrequencyTable)
    request_methods: FrequencyTable = field(default_factory=FrequencyTable)
    requests_no_query: FrequencyTable = field(default_factory=FrequencyTable)
    requests_query: FrequencyTable = field(default_factory=FrequencyTable)
    client_ips: FrequencyTable = field(default_factory=FrequencyTable)
    referrers: FrequencyTable = field(default_factory=FrequencyTable)
    user_agents: FrequencyTable = field(default_factory=FrequencyTable)
    backend_ips: FrequencyTable = field(default_factory=FrequencyTable)
    x_forwarded_fors: FrequencyTable = field(default_factory=FrequencyTable)
    hosts: FrequencyTable = field(default_factory=FrequencyTable)
    app_ids: FrequencyTable = field(default_factory=FrequencyTable)
    app_indexes: FrequencyTable = field(default_factory=FrequencyTable)
    response_times: FrequencyTable = field(default_factory=FrequencyTable)
    gorouter_times: FrequencyTable = field(default_factory=FrequencyTable)
    x_cf_routererrors: FrequencyTable = field(default_factory=FrequencyTable)


class StatCollector:
    """
    Aggregates parsed entries into RunStatistics.
    Responsibilities:
    - Dispatch on the entry's log format
    - Count every dimension the format carries, using <none> for gaps
    - Produce the report once all input is consumed
    """

    def __init__(self, config: Optional[ReportConfig] = None):
        self.config = config or ReportConfig()
        self.stats = RunStatistics()
        self._handlers: Dict[LogFormat, Callable[[LogEntry], None]] = {
            LogFormat.COMMON: self._record_common,
            LogFormat.COMBINED: self._record_combined,
            LogFormat.GOROUTER: self._record_gorouter,
            LogFormat.CLOUD_CONTROLLER: self._record_cloud_controller,
        }

    @property
    def total_requests(self) -> int:
        return self.stats.total_requests

    @property
    def errors(self) -> int:
        return self.stats.errors

    def record(self, entry: LogEntry) -> None:
        self._handlers[entry.format](entry)

    def record_parse_failure(self) -> None:
        self.stats.errors += 1

    def _record_request(self, entry: LogEntry) -> None:
        s = self.stats
        s.total_requests += 1
        s.duration.observe(entry.timestamp)
        s.response_codes.increment(entry.status_code)

        if entry.request.is_valid:
            s.request_methods.increment(entry.request.method)

        s.requests_no_query.increment(entry.request.path_no_query)
        s.requests_query.increment(entry.request.path_with_query)

    def _record_agent(self, entry: LogEntry) -> None:
        self.stats.referrers.increment(entry.referrer or NONE_MARKER)
        self.stats.user_agents.increment(entry.user_agent or NONE_MARKER)

    def _record_forwarding(self, entry: LogEntry) -> None:
        self.stats.x_forwarded_fors.increment(FORWARDED_FOR_SEPARATOR.join(entry.x_forwarded_for))
        self.stats.hosts.increment(entry.request_host)
        self.stats.response_times.increment(to_seconds_key(entry.response_time))

    def _record_common(self, entry: CommonLogEntry) -> None:
        self._record_request(entry)
        self.stats.client_ips.increment(entry.ip)

    def _record_combined(self, entry: CombinedLogEntry) -> None:
        self._record_request(entry)
        self.stats.client_ips.increment(entry.ip)
        self._record_agent(entry)

    def _record_cloud_controller(self, entry: CloudControllerLogEntry) -> None:
        self._record_request(entry)
        self._record_agent(entry)
        self._record_forwarding(entry)

    def _record_gorouter(self, entry: GorouterLogEntry) -> None:
        s = self.stats
        self._record_request(entry)
        s.client_ips.increment(entry.remote_addr)
        self._record_agent(entry)
        self._record_forwarding(entry)

        if entry.backend_addr is not None:
            s.backend_ips.increment(entry.backend_addr)
        if entry.app_id is not None:
            s.app_ids.increment(entry.app_id)
        if entry.app_index is not None:
            s.app_indexes.increment(entry.app_index)

        s.gorouter_times.increment(to_seconds_key(entry.gorouter_time))
        s.x_cf_routererrors.increment(entry.x_cf_routererror or NONE_MARKER)

    def process_lines(self, lines: Iterable[str], log_format: LogFormat, parser: Optional[LogParser] = None) -> None:
        """Parse and record each line; failures are counted and logged"""
        parser = parser or LogParser()
        for line in lines:
            try:
                entry = parser.parse(line, log_format)
            except ParseError as err:
                self.record_parse_failure()
                if not self.config.ignore_parse_errors:
                    logger.warning("Parse error: %s with line '%s'", err, line)
                continue
            self.record(entry)

    def summarize(self) -> Report:
        """Render every populated table into report sections"""
        s = self.stats
        top = self.config.max_results
        by_value = SortOrder.BY_VALUE
        sections: List[ReportSection] = []

        def add(title: str, table: FrequencyTable, order: SortOrder = by_value, limit=top) -> None:
            if not table.is_empty():
                sections.append(ReportRenderer.section(title, table.iterate(), order, limit))

        def add_times(title: str, table: FrequencyTable) -> None:
            if table.is_empty():
                return
            buckets = AdaptiveBucketer(self.config.min_response_time_threshold).bucketize(table)
            sections.append(ReportSection(title=title, rows=ReportRenderer.render_buckets(buckets)))

        add("Response Codes", s.response_codes, SortOrder.BY_KEY, None)
        add("Request Methods", s.request_methods, SortOrder.BY_KEY, None)
        add(f"Top '{top}' Requests (no query params)", s.requests_no_query)
        add(f"Top '{top}' Requests (with query params)", s.requests_query)
        add(f"Top '{top}' User Agents", s.user_agents)
        add(f"Top '{top}' Referrers", s.referrers)
        add(f"Top '{top}' Client IPs", s.client_ips)
        add(f"Top '{top}' Backend Address (Cells & Platform VMs)", s.backend_ips)
        add(f"Top '{top}' X-Forwarded-For Ips", s.x_forwarded_fors)
        add(f"Top '{top}' Destination Hosts", s.hosts)
        add(f"Top '{top}' Application UUIDs", s.app_ids)
        add(f"Top '{top}' Application Indexes", s.app_indexes)
        add_times("Top Response Times", s.response_times)
        add_times("Top Gorouter Times", s.gorouter_times)
        add(f"Top '{top}' CF Router Errors", s.x_cf_routererrors)

        return Report(
            duration=s.duration.bounds(),
            total_requests=s.total_requests,
            total_errors=s.errors,
            sections=sections,
        )
