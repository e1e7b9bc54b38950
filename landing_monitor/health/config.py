"""
Health configuration - Loads and validates monitor configuration.

This module loads the rule sets, status filter and notification settings
from a JSON file. Every value is validated before any URL is fetched.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from landing_monitor.core.entities import (
    DEFAULT_CONTENT_ERROR_PHRASES,
    DEFAULT_ERROR_CODE_PATTERNS,
    DEFAULT_WARNING_CODE_PATTERNS,
    RuleSet,
    TargetStatusFilter,
)

logger = logging.getLogger(__name__)

URL_SOURCE_KINDS = ("ads", "keywords")

# Older configs spell the combined filter with a space
_STATUS_ALIASES = {"ENABLED PAUSED": TargetStatusFilter.ENABLED_OR_PAUSED}


# Configuration schema structure
# {
#   "error_code_patterns": List[str],        # regexes over the status code
#   "warning_code_patterns": List[str],
#   "content_error_phrases": List[str],
#   "target_status_filter": str,             # ENABLED | PAUSED | ENABLED_OR_PAUSED
#   "strip_query_parameters": bool,
#   "notification_recipients": List[str],
#   "send_reassurance_email": bool,
#   "reassurance_weekday": int,              # Monday=0
#   "url_source": str,                       # ads | keywords
#   "max_workers": int,
#   "fetch_timeout": Optional[float],
#   "follow_redirects": bool,
#   "email_subject": str,
#   "reply_to": Optional[str],
#   "sender_name": Optional[str]
# }


class ConfigError(ValueError):
    """Raised when the monitor configuration is invalid."""


@dataclass(frozen=True)
class MonitorConfig:
    """Validated monitor configuration."""

    error_code_patterns: Tuple[str, ...] = DEFAULT_ERROR_CODE_PATTERNS
    warning_code_patterns: Tuple[str, ...] = DEFAULT_WARNING_CODE_PATTERNS
    content_error_phrases: Tuple[str, ...] = DEFAULT_CONTENT_ERROR_PHRASES
    target_status_filter: TargetStatusFilter = TargetStatusFilter.ENABLED
    strip_query_parameters: bool = True
    notification_recipients: Tuple[str, ...] = field(default_factory=tuple)
    send_reassurance_email: bool = True
    reassurance_weekday: int = 0
    url_source: str = "ads"
    max_workers: int = 4
    fetch_timeout: Optional[float] = None
    follow_redirects: bool = False
    email_subject: str = "Landing Page Monitor"
    reply_to: Optional[str] = None
    sender_name: Optional[str] = None

    def rules(self) -> RuleSet:
        """Build the immutable RuleSet used by every target."""
        return RuleSet(
            error_code_patterns=tuple(
                re.compile(p) for p in self.error_code_patterns
            ),
            warning_code_patterns=tuple(
                re.compile(p) for p in self.warning_code_patterns
            ),
            content_error_phrases=self.content_error_phrases,
            strip_query_parameters=self.strip_query_parameters,
        )


def find_config_path() -> Path:
    """
    Locate the default config file.

    Looks for configs/watch.json, then falls back to
    configs/watch.example.json.

    Raises:
        FileNotFoundError: If neither file exists
    """
    project_root = Path(__file__).parent.parent.parent
    json_path = project_root / "configs" / "watch.json"
    example_json = project_root / "configs" / "watch.example.json"

    if json_path.exists():
        return json_path
    if example_json.exists():
        logger.warning(
            "Using example config file: %s. "
            "Create configs/watch.json for production.",
            example_json,
        )
        return example_json
    raise FileNotFoundError(
        f"Config file not found. Expected one of: {json_path} or {example_json}"
    )


def load_config(config_path: Optional[str] = None) -> MonitorConfig:
    """
    Load monitor configuration from a JSON file.

    Args:
        config_path: Path to config file. If None, uses configs/watch.json
                     or falls back to configs/watch.example.json

    Returns:
        Validated MonitorConfig

    Raises:
        FileNotFoundError: If no config file found
        ConfigError: If config is invalid
    """
    config_file = Path(config_path) if config_path else find_config_path()
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    if config_file.suffix in (".yaml", ".yml"):
        raise ConfigError(
            "YAML config files are not supported. Use JSON format instead."
        )

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    config = parse_config(data)

    logger.info(
        "Loaded monitor config from %s: status=%s, %d recipients",
        config_file,
        config.target_status_filter.value,
        len(config.notification_recipients),
    )
    return config


def parse_status_filter(value: Any) -> TargetStatusFilter:
    """
    Parse a target status filter value.

    Raises:
        ConfigError: If the value is not a recognised filter
    """
    if isinstance(value, TargetStatusFilter):
        return value
    if not isinstance(value, str):
        raise ConfigError("Field 'target_status_filter' must be a string")

    key = value.strip().upper()
    if key in _STATUS_ALIASES:
        return _STATUS_ALIASES[key]
    try:
        return TargetStatusFilter(key)
    except ValueError as e:
        valid = tuple(s.value for s in TargetStatusFilter)
        raise ConfigError(
            f"Field 'target_status_filter' must be one of {valid}, got {value!r}"
        ) from e


def _string_list(
    data: Dict[str, Any], key: str, default: Tuple[str, ...]
) -> Tuple[str, ...]:
    value = data.get(key, list(default))
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"Field '{key}' must be a list of strings")
    return tuple(value)


def _pattern_list(
    data: Dict[str, Any], key: str, default: Tuple[str, ...]
) -> Tuple[str, ...]:
    patterns = _string_list(data, key, default)
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid pattern {pattern!r} in '{key}': {e}") from e
    return patterns


def _bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"Field '{key}' must be a bool")
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"Field '{key}' must be a string")
    return value


def parse_config(data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate a raw configuration dict.

    Args:
        data: Parsed JSON configuration

    Returns:
        Validated MonitorConfig (missing keys take their defaults)

    Raises:
        ConfigError: If any value is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError("Config must be a JSON object")

    defaults = MonitorConfig()

    recipients: List[str] = list(
        _string_list(data, "notification_recipients", ())
    )
    for recipient in recipients:
        if "@" not in recipient:
            raise ConfigError(f"Invalid notification recipient: {recipient!r}")

    weekday = data.get("reassurance_weekday", defaults.reassurance_weekday)
    if not _is_int(weekday) or not 0 <= weekday <= 6:
        raise ConfigError("Field 'reassurance_weekday' must be an int from 0 to 6")

    url_source = data.get("url_source", defaults.url_source)
    if url_source not in URL_SOURCE_KINDS:
        raise ConfigError(f"Field 'url_source' must be one of {URL_SOURCE_KINDS}")

    max_workers = data.get("max_workers", defaults.max_workers)
    if not _is_int(max_workers) or max_workers < 1:
        raise ConfigError("Field 'max_workers' must be a positive int")

    fetch_timeout = data.get("fetch_timeout", defaults.fetch_timeout)
    if fetch_timeout is not None and (
        isinstance(fetch_timeout, bool)
        or not isinstance(fetch_timeout, (int, float))
        or fetch_timeout <= 0
    ):
        raise ConfigError("Field 'fetch_timeout' must be a positive number or null")

    email_subject = _optional_str(data, "email_subject") or defaults.email_subject

    return MonitorConfig(
        error_code_patterns=_pattern_list(
            data, "error_code_patterns", defaults.error_code_patterns
        ),
        warning_code_patterns=_pattern_list(
            data, "warning_code_patterns", defaults.warning_code_patterns
        ),
        content_error_phrases=_string_list(
            data, "content_error_phrases", defaults.content_error_phrases
        ),
        target_status_filter=parse_status_filter(
            data.get("target_status_filter", defaults.target_status_filter)
        ),
        strip_query_parameters=_bool(
            data, "strip_query_parameters", defaults.strip_query_parameters
        ),
        notification_recipients=tuple(dict.fromkeys(recipients)),
        send_reassurance_email=_bool(
            data, "send_reassurance_email", defaults.send_reassurance_email
        ),
        reassurance_weekday=weekday,
        url_source=url_source,
        max_workers=max_workers,
        fetch_timeout=float(fetch_timeout) if fetch_timeout is not None else None,
        follow_redirects=_bool(data, "follow_redirects", defaults.follow_redirects),
        email_subject=email_subject,
        reply_to=_optional_str(data, "reply_to"),
        sender_name=_optional_str(data, "sender_name"),
    )
