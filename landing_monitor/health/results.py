"""
Health results - Per-target container of URLs and their findings.

A ResultSet is created per target, filled with URLs, processed once and then
treated as read-only by the aggregation and reporting steps.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from landing_monitor.core.entities import (
    ErrorCategory,
    FetchOutcome,
    Finding,
    RuleSet,
)
from landing_monitor.core.ports import UrlFetcher
from landing_monitor.health import checks

logger = logging.getLogger(__name__)

# Serialized bucket names, kept stable for JSON consumers
BAD_URLS_KEY = "badUrls"
WARN_URLS_KEY = "warnUrls"
ON_PAGE_ERRORS_KEY = "onPageErrors"


def extract_final_url(item: Any) -> Optional[str]:
    """
    Pull the destination URL out of a source item.

    Accepts plain strings, mappings with a "final_url" key, or objects with
    a final_url attribute.
    """
    if item is None or isinstance(item, str):
        return item
    if isinstance(item, dict):
        return item.get("final_url")
    return getattr(item, "final_url", None)


class ResultSet:
    """
    Deduplicated URLs of one target plus the three finding buckets.

    Buckets:
    - bad_urls: HTTP errors and fetch failures
    - warn_urls: HTTP warnings
    - on_page_errors: content issues

    Buckets are exposed as tuples, so callers cannot alter them.
    """

    def __init__(self, rules: Optional[RuleSet] = None):
        self.rules = rules if rules is not None else RuleSet.default()
        self._urls: Dict[str, None] = {}
        self._bad_urls: List[Finding] = []
        self._warn_urls: List[Finding] = []
        self._on_page_errors: List[Finding] = []
        self._finalized = False

    @property
    def urls(self) -> List[str]:
        """URLs in first-seen order."""
        return list(self._urls)

    @property
    def bad_urls(self) -> Tuple[Finding, ...]:
        return tuple(self._bad_urls)

    @property
    def warn_urls(self) -> Tuple[Finding, ...]:
        return tuple(self._warn_urls)

    @property
    def on_page_errors(self) -> Tuple[Finding, ...]:
        return tuple(self._on_page_errors)

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def url_count(self) -> int:
        return len(self._urls)

    @property
    def error_count(self) -> int:
        return len(self._bad_urls)

    @property
    def warning_count(self) -> int:
        return len(self._warn_urls)

    @property
    def content_error_count(self) -> int:
        return len(self._on_page_errors)

    def _ensure_open(self) -> None:
        if self._finalized:
            raise RuntimeError("ResultSet already processed and is read-only")

    def add_url(self, raw_url: Optional[str]) -> bool:
        """
        Normalize and insert a URL.

        Returns:
            True if the URL was new, False if empty or already present
        """
        self._ensure_open()
        url = checks.normalize_url(raw_url, self.rules.strip_query_parameters)
        if url is None or url in self._urls:
            return False
        self._urls[url] = None
        return True

    def add_urls(self, raw_urls: Iterable[Optional[str]]) -> int:
        """Insert several URLs, returning how many were new."""
        return sum(1 for raw_url in raw_urls if self.add_url(raw_url))

    def record_failure(self, subject: str, message: str) -> None:
        """
        Record a failure that is not the outcome of fetching one URL.

        Used when the target itself breaks, e.g. its source raises while
        being read. The finding lands in bad_urls so it counts as an error.
        """
        self._ensure_open()
        self._bad_urls.append(Finding(subject, message, ErrorCategory.FETCH_FAILURE))

    def process_iterator(
        self,
        items: Iterable[Any],
        extract: Callable[[Any], Optional[str]] = extract_final_url,
    ) -> int:
        """
        Consume a one-pass source of items, collecting their final URLs.

        Args:
            items: Iterable of source items (ads, keywords, strings...)
            extract: Function pulling the URL out of an item

        Returns:
            Number of new URLs added
        """
        added = 0
        for item in items:
            if self.add_url(extract(item)):
                added += 1
        logger.debug("Collected %d unique URLs", self.url_count)
        return added

    def process_all(self, fetcher: UrlFetcher, max_workers: int = 1) -> None:
        """
        Fetch and classify every URL, then freeze the set.

        Args:
            fetcher: Fetcher port implementation
            max_workers: Concurrent fetches; 1 fetches sequentially

        Findings are always applied in URL insertion order, whatever order
        the fetches complete in. A failing URL never stops the others.
        """
        self._ensure_open()
        urls = self.urls

        if max_workers > 1 and len(urls) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                future_to_url = {
                    url: executor.submit(checks.safe_fetch, fetcher, url)
                    for url in urls
                }
                outcomes = [future_to_url[url].result() for url in urls]
        else:
            outcomes = [checks.safe_fetch(fetcher, url) for url in urls]

        for url, outcome in zip(urls, outcomes):
            self._record(url, outcome)

        self._finalized = True
        logger.debug(
            "Processed %d URLs: %d errors, %d warnings, %d content errors",
            self.url_count,
            self.error_count,
            self.warning_count,
            self.content_error_count,
        )

    def _record(self, url: str, outcome: FetchOutcome) -> None:
        try:
            findings = checks.classify(url, outcome, self.rules)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Failed to classify %s: %s", url, e, exc_info=True)
            findings = {
                ErrorCategory.FETCH_FAILURE: [
                    Finding(
                        url, checks.FETCH_FAILED_MESSAGE, ErrorCategory.FETCH_FAILURE
                    )
                ]
            }

        for category, items in findings.items():
            if category == ErrorCategory.FETCH_FAILURE:
                logger.warning("Fetch failed for %s", url)
            self._bucket_for(category).extend(items)

    def _bucket_for(self, category: ErrorCategory) -> List[Finding]:
        if category in (ErrorCategory.HTTP_ERROR, ErrorCategory.FETCH_FAILURE):
            return self._bad_urls
        if category == ErrorCategory.HTTP_WARNING:
            return self._warn_urls
        return self._on_page_errors

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the URL list and buckets.

        Returns:
            JSON-compatible dict with urls, badUrls, warnUrls, onPageErrors
        """

        def _dump(findings: Tuple[Finding, ...]) -> List[Dict[str, str]]:
            return [
                {"url": f.url, "error": f.message, "category": f.category.value}
                for f in findings
            ]

        return {
            "urls": self.urls,
            BAD_URLS_KEY: _dump(self.bad_urls),
            WARN_URLS_KEY: _dump(self.warn_urls),
            ON_PAGE_ERRORS_KEY: _dump(self.on_page_errors),
        }

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], rules: Optional[RuleSet] = None
    ) -> "ResultSet":
        """
        Rebuild a finalized ResultSet from its serialized form.

        Findings without a category get the default for their bucket
        (fetch failures are recognised by their message).
        """
        result_set = cls(rules)
        for url in data.get("urls", []):
            if url:
                result_set._urls[url] = None

        def _load(key: str, default: ErrorCategory) -> List[Finding]:
            findings = []
            for entry in data.get(key, []):
                category = entry.get("category")
                if category:
                    parsed = ErrorCategory(category)
                elif entry.get("error") == checks.FETCH_FAILED_MESSAGE:
                    parsed = ErrorCategory.FETCH_FAILURE
                else:
                    parsed = default
                findings.append(Finding(entry["url"], entry["error"], parsed))
            return findings

        result_set._bad_urls = _load(BAD_URLS_KEY, ErrorCategory.HTTP_ERROR)
        result_set._warn_urls = _load(WARN_URLS_KEY, ErrorCategory.HTTP_WARNING)
        result_set._on_page_errors = _load(
            ON_PAGE_ERRORS_KEY, ErrorCategory.CONTENT_ERROR
        )
        result_set._finalized = True
        return result_set
