"""
Health aggregation - Combines per-target results into a global summary.

Only call this after every per-target ResultSet has been processed; the
functions here read the results and never modify them.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from landing_monitor.core.entities import GlobalSummary
from landing_monitor.health.results import (
    BAD_URLS_KEY,
    ON_PAGE_ERRORS_KEY,
    WARN_URLS_KEY,
    ResultSet,
)

logger = logging.getLogger(__name__)

MONDAY = 0

ALL_CLEAR_TITLE = "Everything looks good! No errors found."


def _counts(result: Union[ResultSet, Dict[str, Any]]) -> Tuple[int, int, int]:
    if isinstance(result, ResultSet):
        return result.error_count, result.warning_count, result.content_error_count
    return (
        len(result.get(BAD_URLS_KEY, [])),
        len(result.get(WARN_URLS_KEY, [])),
        len(result.get(ON_PAGE_ERRORS_KEY, [])),
    )


def count_totals(
    results: Iterable[Union[ResultSet, Dict[str, Any]]]
) -> Tuple[int, int, int]:
    """
    Sum finding counts across targets.

    Args:
        results: ResultSets or their to_dict() form

    Returns:
        Tuple of (total_errors, total_warnings, total_content_errors)
    """
    total_errors = total_warnings = total_content_errors = 0
    for result in results:
        errors, warnings, content_errors = _counts(result)
        total_errors += errors
        total_warnings += warnings
        total_content_errors += content_errors
    return total_errors, total_warnings, total_content_errors


def choose_title(errors: int, warnings: int, content_errors: int) -> str:
    """
    Pick the headline by severity: errors, then content errors, then warnings.
    """
    if errors > 0:
        return f"Errors found! {errors} url(s) have errors - please check ASAP."
    if content_errors > 0:
        return f"Content errors found! {content_errors} url(s) have warning signs."
    if warnings > 0:
        return f"Warning! {warnings} url(s) have warning signs."
    return ALL_CLEAR_TITLE


def is_reassurance_day(today: Optional[date] = None, weekday: int = MONDAY) -> bool:
    """
    Check whether today is the day for the all-clear message.

    Args:
        today: Date to check (default: today)
        weekday: Day of week, Monday=0 ... Sunday=6

    Returns:
        True if today falls on the given weekday
    """
    if today is None:
        today = date.today()
    return today.weekday() == weekday


def should_notify(
    errors: int,
    warnings: int,
    content_errors: int,
    reassurance_day: bool,
    reassurance_enabled: bool,
) -> bool:
    """Notify on any finding, or on the reassurance day when enabled."""
    return (
        errors > 0
        or warnings > 0
        or content_errors > 0
        or (reassurance_day and reassurance_enabled)
    )


def summarize(
    results: Iterable[Union[ResultSet, Dict[str, Any]]],
    reassurance_enabled: bool = False,
    today: Optional[date] = None,
    reassurance_weekday: int = MONDAY,
) -> GlobalSummary:
    """
    Build the global summary for a finished run.

    Args:
        results: Finalized ResultSets (or their serialized form)
        reassurance_enabled: Send the all-clear message on the reassurance day
        today: Date used for the reassurance check (default: today)
        reassurance_weekday: Day of week for the all-clear message

    Returns:
        GlobalSummary with totals, title and notification decision
    """
    errors, warnings, content_errors = count_totals(results)
    reassurance_day = is_reassurance_day(today, reassurance_weekday)

    summary = GlobalSummary(
        total_errors=errors,
        total_warnings=warnings,
        total_content_errors=content_errors,
        should_notify=should_notify(
            errors, warnings, content_errors, reassurance_day, reassurance_enabled
        ),
        title=choose_title(errors, warnings, content_errors),
    )

    logger.info(
        "Totals: %d errors, %d warnings, %d content errors (notify=%s)",
        errors,
        warnings,
        content_errors,
        summary.should_notify,
    )
    return summary
