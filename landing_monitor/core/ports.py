"""
Core ports - Interfaces to the collaborators of the evaluation engine.

The engine only talks to the outside world through these abstractions:
where URLs come from, how they are fetched, how results are rendered and
how a notification is delivered.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterator, Sequence

from landing_monitor.core.entities import (
    FetchOutcome,
    SourceSelection,
    TargetStatusFilter,
)

if TYPE_CHECKING:
    from landing_monitor.health.results import ResultSet


class UrlFetcher(ABC):  # pylint: disable=too-few-public-methods
    """Port for fetching a single URL."""

    @abstractmethod
    def fetch(self, url: str) -> FetchOutcome:
        """
        Fetch a URL once.

        Implementations must not raise: transport faults are returned as
        FetchFailure.
        """


class UrlSource(ABC):
    """Port for the upstream provider of accounts and their entities."""

    @abstractmethod
    def accounts(self) -> Iterator[str]:
        """Yield account names, one per target."""

    @abstractmethod
    def select(
        self, account: str, kind: str, status_filter: TargetStatusFilter
    ) -> SourceSelection:
        """
        Select the entities of an account whose final URLs are checked.

        Returns a SourceSelection carrying an error instead of raising when
        the selection itself is misconfigured.
        """


class Reporter(ABC):
    """Port for turning results into a report document."""

    @abstractmethod
    def render_row(self, target_name: str, result_set: "ResultSet") -> str:
        """Render the fragment for one target."""

    @abstractmethod
    def render_document(self, body: str, title: str) -> str:
        """Wrap the concatenated fragments into a full document."""


class Notifier(ABC):  # pylint: disable=too-few-public-methods
    """Port for the delivery channel."""

    @abstractmethod
    def send(self, recipients: Sequence[str], subject: str, body: Any) -> bool:
        """Deliver a report. Returns True on success."""
