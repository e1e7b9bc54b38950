"""
Requests fetcher adapter - Fetches landing pages with the requests library.

This adapter implements UrlFetcher with a single GET per URL. It never
raises: every transport problem is returned as a FetchFailure.
"""

import logging
from typing import Dict, Optional

import requests  # type: ignore

from landing_monitor.core.entities import FetchFailure, FetchOutcome, FetchSuccess
from landing_monitor.core.ports import UrlFetcher

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "LandingPageMonitor/1.0"


class AdapterRequestsFetcher(UrlFetcher):
    """
    Adapter that implements UrlFetcher using requests.

    HTTP error statuses are not exceptions here: a 404 or 500 is a
    successful fetch whose status code the classifier looks at. Redirects
    are not followed by default so 3xx responses stay visible.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        follow_redirects: bool = False,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds (None: transport default)
            follow_redirects: Whether to follow 3xx responses
            verify_ssl: Whether to verify SSL certificates
            session: Optional requests session to reuse
            headers: Extra request headers
        """
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.verify_ssl = verify_ssl
        self.session = session or requests.Session()
        self.headers = {"User-Agent": DEFAULT_USER_AGENT}
        if headers:
            self.headers.update(headers)

    def fetch(self, url: str) -> FetchOutcome:
        """
        Fetch a URL once, without retries.

        Args:
            url: URL to fetch

        Returns:
            FetchSuccess with status code and body, or FetchFailure
        """
        try:
            response = self.session.get(
                url,
                timeout=self.timeout,
                allow_redirects=self.follow_redirects,
                verify=self.verify_ssl,
                headers=self.headers,
            )
            logger.debug("Fetched %s: %d", url, response.status_code)
            return FetchSuccess(status_code=response.status_code, body=response.text)
        except requests.exceptions.RequestException as e:
            logger.warning("Request failed for %s: %s", url, e)
            return FetchFailure(reason=str(e))
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Unexpected error fetching %s: %s", url, e, exc_info=True)
            return FetchFailure(reason=str(e) or e.__class__.__name__)
