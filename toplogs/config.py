"""
Report configuration

Defaults can be changed through the environment; explicit command line
flags or query parameters take precedence.
"""

import os
from dataclasses import dataclass
from typing import Optional


class ConfigError(ValueError):
    """Raised for invalid configuration values, before any input is read"""


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


@dataclass
class ReportConfig:
    max_results: int = 10
    min_response_time_threshold: int = 100
    ignore_parse_errors: bool = False

    @classmethod
    def from_env(
        cls,
        max_results: Optional[int] = None,
        min_response_time_threshold: Optional[int] = None,
        ignore_parse_errors: Optional[bool] = None,
    ) -> "ReportConfig":
        """Build a validated config; arguments that are not None win over the environment"""
        config = cls(
            max_results=(
                max_results
                if max_results is not None
                else _env_int("TOPLOGS_TOP", cls.max_results)
            ),
            min_response_time_threshold=(
                min_response_time_threshold
                if min_response_time_threshold is not None
                else _env_int("TOPLOGS_MIN_RESPONSE_TIME_THRESHOLD", cls.min_response_time_threshold)
            ),
            ignore_parse_errors=(
                ignore_parse_errors
                if ignore_parse_errors is not None
                else _env_bool("TOPLOGS_IGNORE_PARSE_ERRORS", cls.ignore_parse_errors)
            ),
        )
        config.validate()
        return config

    def validate(self) -> None:
        if self.max_results < 1:
            raise ConfigError(f"max_results must be a positive integer, got {self.max_results}")
        if self.min_response_time_threshold < 1:
            raise ConfigError(
                "min_response_time_threshold must be a positive integer, "
                f"got {self.min_response_time_threshold}"
            )
