"""
Fetchers module - UrlFetcher port implementations.
"""

from landing_monitor.adapters.fetchers.requests_fetcher import (
    AdapterRequestsFetcher,
)

__all__ = ["AdapterRequestsFetcher"]
