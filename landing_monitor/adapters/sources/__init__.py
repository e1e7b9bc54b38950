"""
Sources module - UrlSource port implementations.

Sources provide the accounts to monitor and the ads/keywords whose final
URLs are checked.
"""

from landing_monitor.adapters.sources.json_accounts import (
    AdapterJsonAccountSource,
    condition_for,
    matches_status,
)

__all__ = ["AdapterJsonAccountSource", "condition_for", "matches_status"]
