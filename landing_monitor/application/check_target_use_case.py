"""
Check Target Use Case - Evaluates the landing pages of one target.

This use case takes the entities selected for a target (e.g. an ad
account), collects their deduplicated final URLs, fetches and classifies
each one, and renders the target's report fragment.

Each execution owns its ResultSet exclusively, so several targets can be
executed in parallel without sharing state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from landing_monitor.application.use_cases import UseCase
from landing_monitor.core.entities import RuleSet
from landing_monitor.core.ports import Reporter, UrlFetcher
from landing_monitor.health.results import ResultSet

logger = logging.getLogger(__name__)


@dataclass
class TargetReport:
    """What a finished target hands to the join step."""

    name: str
    result_set: ResultSet
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "text": self.text,
            "data": self.result_set.to_dict(),
        }


class CheckTargetUseCase(UseCase):  # pylint: disable=too-few-public-methods
    """
    Use case for checking every landing page of a single target.

    1. Collects final URLs from the target's entities (deduplicated)
    2. Fetches and classifies each URL through the ResultSet
    3. Renders the target's fragment with the Reporter
    """

    def __init__(
        self,
        fetcher: UrlFetcher,
        reporter: Reporter,
        rules: Optional[RuleSet] = None,
        max_workers: int = 1,
    ):
        """
        Initialize the use case with its dependencies.

        Args:
            fetcher: Implementation of UrlFetcher port
            reporter: Implementation of Reporter port
            rules: Rule set to classify against (default: RuleSet.default())
            max_workers: Concurrent fetches within the target
        """
        self.fetcher = fetcher
        self.reporter = reporter
        self.rules = rules if rules is not None else RuleSet.default()
        self.max_workers = max_workers

    def execute(self, name: str, entities: Iterable[Any]) -> TargetReport:
        """
        Check a target's landing pages.

        Args:
            name: Target name, used in logs and the report
            entities: One-pass iterable of entities carrying final URLs

        Returns:
            TargetReport with the finalized ResultSet and rendered fragment
        """
        result_set = ResultSet(self.rules)
        result_set.process_iterator(entities)
        result_set.process_all(self.fetcher, max_workers=self.max_workers)

        logger.info(
            "Processed %s: %d urls, %d errors, %d warnings, %d content errors",
            name,
            result_set.url_count,
            result_set.error_count,
            result_set.warning_count,
            result_set.content_error_count,
        )

        text = self.reporter.render_row(name, result_set)
        return TargetReport(name=name, result_set=result_set, text=text)
