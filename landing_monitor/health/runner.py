"""
Health runner - Orchestrates a monitoring pass over every target.

This module loads configuration, fans out one worker per target, joins the
finished results, aggregates them and sends the notification.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple

from landing_monitor.adapters.fetchers import AdapterRequestsFetcher
from landing_monitor.adapters.sources import AdapterJsonAccountSource
from landing_monitor.application.check_target_use_case import (
    CheckTargetUseCase,
    TargetReport,
)
from landing_monitor.core.entities import GlobalSummary
from landing_monitor.core.ports import Notifier, UrlFetcher, UrlSource
from landing_monitor.health import aggregate, checks, config, notify
from landing_monitor.health.report import AdapterHtmlReporter, AdapterTextReporter
from landing_monitor.health.results import ResultSet

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_WARN = 2
EXIT_FAIL = 3

MAX_TARGET_WORKERS = 8


def exit_code_for(summary: GlobalSummary) -> int:
    """
    Map a summary to an exit code.

    Returns:
        3 if any errors, 2 if only warnings/content errors, else 0
    """
    if summary.total_errors:
        return EXIT_FAIL
    if summary.total_warnings or summary.total_content_errors:
        return EXIT_WARN
    return EXIT_OK


def process_target(
    name: str,
    entities: Iterable[Any],
    use_case: CheckTargetUseCase,
) -> TargetReport:
    """
    Run one target, containing any failure to that target.

    Args:
        name: Target name
        entities: Entities selected for the target
        use_case: Configured CheckTargetUseCase

    Returns:
        The target's report; if the target failed, a report holding a single
        error finding for the target so the failure is counted and reported
    """
    try:
        return use_case.execute(name, entities)
    except Exception as e:  # pylint: disable=broad-except
        logger.error("Failed to process %s: %s", name, e, exc_info=True)
        failed = ResultSet(use_case.rules)
        failed.record_failure(name, f"{checks.TARGET_FAILED_PREFIX}{e}")
        failed.process_all(use_case.fetcher)
        return TargetReport(
            name=name,
            result_set=failed,
            text=use_case.reporter.render_row(name, failed),
        )


def check_targets(
    targets: List[Tuple[str, Iterable[Any]]],
    use_case: CheckTargetUseCase,
    max_parallel_targets: int = MAX_TARGET_WORKERS,
) -> List[TargetReport]:
    """
    Fan out one worker per target and join the results.

    Args:
        targets: (name, entities) pairs
        use_case: Configured CheckTargetUseCase
        max_parallel_targets: Upper bound on concurrent targets

    Returns:
        Reports in the same order as the targets
    """
    if not targets:
        return []

    workers = max(1, min(max_parallel_targets, len(targets)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(process_target, name, entities, use_case)
            for name, entities in targets
        ]
        reports = [future.result() for future in futures]

    logger.info("All %d targets processed.", len(reports))
    return reports


def select_targets(
    source: UrlSource, monitor_config: config.MonitorConfig
) -> List[Tuple[str, Iterable[Any]]]:
    """
    Select the entities of every account before any fetching starts.

    Raises:
        config.ConfigError: If any selection is misconfigured
    """
    targets = []
    for account in source.accounts():
        selection = source.select(
            account,
            monitor_config.url_source,
            monitor_config.target_status_filter,
        )
        if not selection.ok:
            raise config.ConfigError(selection.error)
        targets.append((account, selection.entities))
    return targets


def send_summary(
    reports: List[TargetReport],
    monitor_config: config.MonitorConfig,
    today: Optional[date] = None,
    dry_run: bool = False,
    email: Optional[Notifier] = None,
    fallback: Optional[Notifier] = None,
) -> GlobalSummary:
    """
    Aggregate finished reports and notify if needed.

    Args:
        reports: Finished per-target reports
        monitor_config: Monitor configuration
        today: Date for the reassurance check (default: today)
        dry_run: Print the report instead of emailing it
        email: Email notifier (default: SMTP)
        fallback: Fallback/dry-run notifier (default: stdout)

    Returns:
        The computed GlobalSummary
    """
    summary = aggregate.summarize(
        [report.result_set for report in reports],
        reassurance_enabled=monitor_config.send_reassurance_email,
        today=today,
        reassurance_weekday=monitor_config.reassurance_weekday,
    )

    if not summary.should_notify:
        logger.info("Nothing to report, no notification sent.")
        return summary

    text_reporter = AdapterTextReporter()
    text_body = text_reporter.render_document(
        "".join(
            text_reporter.render_row(report.name, report.result_set)
            for report in reports
        ),
        summary.title,
    )

    if fallback is None:
        fallback = notify.AdapterStdoutNotifier()

    recipients = list(monitor_config.notification_recipients)
    if dry_run:
        logger.info("Dry-run mode: printing report instead of sending it")
        fallback.send(recipients, monitor_config.email_subject, text_body)
        return summary

    html_body = AdapterHtmlReporter().render_document(
        "".join(report.text for report in reports), summary.title
    )
    if email is None:
        email = notify.AdapterSmtpNotifier(
            reply_to=monitor_config.reply_to, sender_name=monitor_config.sender_name
        )

    notify.notify(
        recipients,
        monitor_config.email_subject,
        html_body,
        text_body,
        email=email,
        fallback=fallback,
    )
    return summary


def run_monitor(
    accounts_path: Optional[str] = None,
    config_path: Optional[str] = None,
    dry_run: bool = False,
    today: Optional[date] = None,
    source: Optional[UrlSource] = None,
    fetcher: Optional[UrlFetcher] = None,
    email: Optional[Notifier] = None,
) -> int:
    """
    Run a full monitoring pass and return an exit code.

    Args:
        accounts_path: Path to the accounts export (ignored if source given)
        config_path: Path to config file (optional)
        dry_run: If True, print the report instead of emailing it
        today: Date for the reassurance check (default: today)
        source: UrlSource to use instead of the JSON export
        fetcher: UrlFetcher to use instead of requests
        email: Email notifier to use instead of SMTP

    Returns:
        Exit code: 0 (all clear), 2 (warnings), 3 (errors or bad config)
    """
    try:
        monitor_config = config.load_config(config_path)
    except (FileNotFoundError, config.ConfigError) as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_FAIL

    if source is None:
        if not accounts_path:
            logger.error("No accounts file given")
            return EXIT_FAIL
        source = AdapterJsonAccountSource(accounts_path)

    try:
        targets = select_targets(source, monitor_config)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Cannot select targets: %s", e)
        return EXIT_FAIL

    if fetcher is None:
        fetcher = AdapterRequestsFetcher(
            timeout=monitor_config.fetch_timeout,
            follow_redirects=monitor_config.follow_redirects,
        )

    use_case = CheckTargetUseCase(
        fetcher=fetcher,
        reporter=AdapterHtmlReporter(),
        rules=monitor_config.rules(),
        max_workers=monitor_config.max_workers,
    )

    logger.info("Checking %d targets...", len(targets))
    reports = check_targets(targets, use_case)

    summary = send_summary(
        reports, monitor_config, today=today, dry_run=dry_run, email=email
    )
    return exit_code_for(summary)
