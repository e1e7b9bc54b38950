"""
Health checks - Classification functions for fetched landing pages.

This module provides pure functions for normalizing URLs and classifying
an HTTP response (status code and body) against a RuleSet.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional

from landing_monitor.core.entities import (
    CodePattern,
    ErrorCategory,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    Finding,
    RuleSet,
)
from landing_monitor.core.ports import UrlFetcher

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Error - url fetch failed."
TARGET_FAILED_PREFIX = "Error - target could not be checked: "
HTTP_ERROR_PREFIX = "HTTP Error Code - "
HTTP_WARNING_PREFIX = "HTTP Code - "
CONTENT_ERROR_PREFIX = "Page contains: "


def normalize_url(
    url: Optional[str], strip_query_parameters: bool = True
) -> Optional[str]:
    """
    Normalize a raw URL for deduplication.

    Args:
        url: Raw URL (may be None or empty)
        strip_query_parameters: Drop everything from the first "?" on

    Returns:
        Normalized URL, or None if there is nothing to check

    Note: No validation is done here, bad URLs fail at fetch time.
    """
    if not url or not url.strip():
        return None

    url = url.strip()
    if strip_query_parameters:
        url = url.split("?", 1)[0]

    return url or None


def matches_code(pattern: CodePattern, code_text: str) -> bool:
    """
    Test a status-code string against a single pattern.

    Args:
        pattern: Compiled regex, regex string or predicate callable
        code_text: Status code as text (e.g. "404")

    Returns:
        True if the pattern matches anywhere in the code text
    """
    if isinstance(pattern, str):
        return re.search(pattern, code_text) is not None
    if hasattr(pattern, "search"):
        return pattern.search(code_text) is not None
    return bool(pattern(code_text))


def _check_codes(
    url: str,
    status_code: int,
    patterns: Iterable[CodePattern],
    prefix: str,
    category: ErrorCategory,
) -> List[Finding]:
    code_text = str(status_code)
    findings: List[Finding] = []
    # Every pattern is tested, overlapping patterns each add a finding
    for pattern in patterns:
        if matches_code(pattern, code_text):
            findings.append(Finding(url, prefix + code_text, category))
    return findings


def check_http_errors(
    url: str, status_code: int, patterns: Iterable[CodePattern]
) -> List[Finding]:
    """
    Check a status code against the error patterns.

    Returns:
        One HTTP_ERROR finding per matching pattern
    """
    return _check_codes(
        url, status_code, patterns, HTTP_ERROR_PREFIX, ErrorCategory.HTTP_ERROR
    )


def check_http_warnings(
    url: str, status_code: int, patterns: Iterable[CodePattern]
) -> List[Finding]:
    """
    Check a status code against the warning patterns.

    Returns:
        One HTTP_WARNING finding per matching pattern
    """
    return _check_codes(
        url,
        status_code,
        patterns,
        HTTP_WARNING_PREFIX,
        ErrorCategory.HTTP_WARNING,
    )


def check_content(
    url: str, body: str, phrases: Iterable[str]
) -> Optional[Finding]:
    """
    Search a response body for error phrases.

    All matching phrases are collapsed into a single finding, unlike the
    HTTP checks which emit one finding per pattern.

    Args:
        url: URL the body belongs to
        body: Response body text
        phrases: Literal phrases, matched case-sensitively

    Returns:
        CONTENT_ERROR finding listing the matched phrases, or None
    """
    if not body:
        return None

    matched = [f'"{phrase}"' for phrase in phrases if phrase and phrase in body]
    if not matched:
        return None

    return Finding(
        url, CONTENT_ERROR_PREFIX + ", ".join(matched), ErrorCategory.CONTENT_ERROR
    )


def safe_fetch(fetcher: UrlFetcher, url: str) -> FetchOutcome:
    """
    Call a fetcher and convert anything it raises into a FetchFailure.

    Args:
        fetcher: Fetcher port implementation
        url: URL to fetch

    Returns:
        The fetcher's outcome, or FetchFailure if it raised
    """
    try:
        outcome = fetcher.fetch(url)
    except Exception as e:  # pylint: disable=broad-except
        logger.warning("Fetcher raised for %s: %s", url, e)
        return FetchFailure(reason=str(e) or e.__class__.__name__)

    if not isinstance(outcome, (FetchSuccess, FetchFailure)):
        logger.warning("Fetcher returned unexpected result for %s", url)
        return FetchFailure(reason=f"Unexpected fetch result: {outcome!r}")

    return outcome


def classify(
    url: str, outcome: FetchOutcome, rules: RuleSet
) -> Dict[ErrorCategory, List[Finding]]:
    """
    Run every check against a fetch outcome.

    Args:
        url: URL that was fetched
        outcome: Result of the fetch
        rules: Rule set to classify against

    Returns:
        Dict mapping category -> findings (categories without findings are
        omitted)
    """
    if isinstance(outcome, FetchFailure):
        return {
            ErrorCategory.FETCH_FAILURE: [
                Finding(url, FETCH_FAILED_MESSAGE, ErrorCategory.FETCH_FAILURE)
            ]
        }

    result: Dict[ErrorCategory, List[Finding]] = {}

    errors = check_http_errors(url, outcome.status_code, rules.error_code_patterns)
    if errors:
        result[ErrorCategory.HTTP_ERROR] = errors

    warnings = check_http_warnings(
        url, outcome.status_code, rules.warning_code_patterns
    )
    if warnings:
        result[ErrorCategory.HTTP_WARNING] = warnings

    content = check_content(url, outcome.body, rules.content_error_phrases)
    if content is not None:
        result[ErrorCategory.CONTENT_ERROR] = [content]

    return result
