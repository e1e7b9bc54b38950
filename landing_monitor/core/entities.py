"""
Core entities - Domain models for landing page monitoring.

These are plain data containers shared by every layer. They carry no I/O
and no behaviour beyond small convenience constructors.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Tuple, Union

# A status-code classifier: compiled regex or predicate over the code string.
CodePattern = Union[re.Pattern, Callable[[str], bool]]


class ErrorCategory(str, Enum):
    """Kind of issue recorded against a URL."""

    HTTP_ERROR = "HttpError"
    HTTP_WARNING = "HttpWarning"
    CONTENT_ERROR = "ContentError"
    FETCH_FAILURE = "FetchFailure"


class TargetStatusFilter(str, Enum):
    """Which ads/keywords of an account contribute URLs."""

    ENABLED = "ENABLED"
    PAUSED = "PAUSED"
    ENABLED_OR_PAUSED = "ENABLED_OR_PAUSED"


@dataclass(frozen=True)
class Finding:
    """A single issue tied to one URL."""

    url: str
    message: str
    category: ErrorCategory


@dataclass(frozen=True)
class FetchSuccess:
    """Transport returned an HTTP response (any status code)."""

    status_code: int
    body: str


@dataclass(frozen=True)
class FetchFailure:
    """Transport could not produce an HTTP response."""

    reason: str


FetchOutcome = Union[FetchSuccess, FetchFailure]


DEFAULT_ERROR_CODE_PATTERNS = (r"4[0-9]{2}", r"5[0-9]{2}")
DEFAULT_WARNING_CODE_PATTERNS = (r"3[0-9]{2}",)
DEFAULT_CONTENT_ERROR_PHRASES = ("Liquid error:", " liquid error ", " err ")


@dataclass(frozen=True)
class RuleSet:
    """
    Classification rules, read-only for the duration of a run.

    Code patterns are tested in order and all of them are evaluated, so
    overlapping patterns each produce their own finding.
    """

    error_code_patterns: Tuple[CodePattern, ...] = ()
    warning_code_patterns: Tuple[CodePattern, ...] = ()
    content_error_phrases: Tuple[str, ...] = ()
    strip_query_parameters: bool = True

    @classmethod
    def default(cls) -> "RuleSet":
        """Rules flagging 4xx/5xx as errors, 3xx as warnings."""
        return cls(
            error_code_patterns=tuple(
                re.compile(p) for p in DEFAULT_ERROR_CODE_PATTERNS
            ),
            warning_code_patterns=tuple(
                re.compile(p) for p in DEFAULT_WARNING_CODE_PATTERNS
            ),
            content_error_phrases=DEFAULT_CONTENT_ERROR_PHRASES,
            strip_query_parameters=True,
        )


@dataclass(frozen=True)
class GlobalSummary:
    """Totals across all targets plus the notification decision."""

    total_errors: int
    total_warnings: int
    total_content_errors: int
    should_notify: bool
    title: str

    @property
    def has_issues(self) -> bool:
        return bool(
            self.total_errors or self.total_warnings or self.total_content_errors
        )


@dataclass
class SourceSelection:
    """
    Result of choosing which entities of an account to read URLs from.

    Exactly one of ``entities`` / ``error`` is meaningful: a selection with an
    ``error`` is a configuration problem and must not be processed.
    """

    entities: Iterable[Any] = ()
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error
