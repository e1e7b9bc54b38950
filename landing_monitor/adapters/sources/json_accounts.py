"""
JSON account source adapter - Reads accounts and entities from an export file.

This adapter implements UrlSource over a JSON export of ad accounts:

    {
      "accounts": [
        {
          "name": "Acme Ltd",
          "ads": [
            {"final_url": "https://acme.example/shoes?utm_source=x",
             "status": "ENABLED",
             "ad_group_status": "ENABLED",
             "campaign_status": "ENABLED"}
          ],
          "keywords": [...]
        }
      ]
    }

Missing or null status fields count as ENABLED. Accounts sharing a name are
kept apart by suffixing the later ones with their position, e.g. "Shop #2".
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from landing_monitor.core.entities import SourceSelection, TargetStatusFilter
from landing_monitor.core.ports import UrlSource

logger = logging.getLogger(__name__)

ENTITY_KINDS = ("ads", "keywords")
STATUS_FIELDS = ("ad_group_status", "campaign_status", "status")


def condition_for(status_filter: TargetStatusFilter) -> Optional[str]:
    """
    Describe the selection condition for a status filter.

    Returns:
        Condition text, or None when no filtering applies
    """
    if status_filter == TargetStatusFilter.ENABLED:
        return (
            "AdGroupStatus = 'ENABLED' AND CampaignStatus = 'ENABLED' "
            "AND Status = 'ENABLED'"
        )
    if status_filter == TargetStatusFilter.PAUSED:
        return (
            "AdGroupStatus = 'PAUSED' OR CampaignStatus = 'PAUSED' "
            "OR Status = 'PAUSED'"
        )
    return None


def matches_status(
    entity: Dict[str, Any], status_filter: TargetStatusFilter
) -> bool:
    """
    Check whether an entity passes the status filter.

    ENABLED needs the entity, its ad group and its campaign all enabled;
    PAUSED needs any of the three paused; ENABLED_OR_PAUSED keeps all.
    """
    statuses = [str(entity.get(key) or "ENABLED").upper() for key in STATUS_FIELDS]
    if status_filter == TargetStatusFilter.ENABLED:
        return all(status == "ENABLED" for status in statuses)
    if status_filter == TargetStatusFilter.PAUSED:
        return any(status == "PAUSED" for status in statuses)
    return True


class AdapterJsonAccountSource(UrlSource):
    """
    Adapter that implements UrlSource over a JSON account export.

    The file is read once, on first use.
    """

    def __init__(self, path: str):
        """
        Initialize the source.

        Args:
            path: Path to the JSON export file
        """
        self.path = Path(path)
        self._accounts: Optional[Dict[str, Dict[str, Any]]] = None

    def load(self) -> Dict[str, Dict[str, Any]]:
        """
        Read and index the export file by account name.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not a valid export
        """
        if self._accounts is not None:
            return self._accounts

        if not self.path.exists():
            raise FileNotFoundError(f"Accounts file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in accounts file: {e}") from e

        accounts = data.get("accounts") if isinstance(data, dict) else None
        if not isinstance(accounts, list):
            raise ValueError("Accounts file must contain an 'accounts' list")

        indexed: Dict[str, Dict[str, Any]] = {}
        for position, account in enumerate(accounts):
            if not isinstance(account, dict):
                raise ValueError(f"Account #{position} must be an object")
            name = str(account.get("name") or f"Account {position + 1}")
            if name in indexed:
                unique = f"{name} #{position + 1}"
                logger.warning(
                    "Duplicate account name %r at position %d, using %r",
                    name,
                    position + 1,
                    unique,
                )
                name = unique
            indexed[name] = account

        logger.info("Loaded %d accounts from %s", len(indexed), self.path)
        self._accounts = indexed
        return indexed

    def accounts(self) -> Iterator[str]:
        return iter(list(self.load()))

    def select(
        self, account: str, kind: str, status_filter: TargetStatusFilter
    ) -> SourceSelection:
        """
        Select an account's ads or keywords matching the status filter.

        Args:
            account: Account name
            kind: "ads" or "keywords"
            status_filter: Status filter to apply

        Returns:
            SourceSelection with a lazy entity iterator, or with an error
        """
        if kind not in ENTITY_KINDS:
            return SourceSelection(
                error=f"Entity type must be one of {ENTITY_KINDS}, got {kind!r}"
            )

        accounts = self.load()
        if account not in accounts:
            return SourceSelection(error=f"Unknown account: {account}")

        entities: List[Any] = accounts[account].get(kind) or []
        if not isinstance(entities, list):
            return SourceSelection(
                error=f"Field '{kind}' must be a list for account: {account}"
            )

        logger.debug(
            "Selecting %s for %s where %s",
            kind,
            account,
            condition_for(status_filter) or "(no condition)",
        )
        return SourceSelection(entities=self._filtered(entities, status_filter))

    @staticmethod
    def _filtered(
        entities: List[Any], status_filter: TargetStatusFilter
    ) -> Iterator[Dict[str, Any]]:
        for entity in entities:
            if isinstance(entity, dict) and matches_status(entity, status_filter):
                yield entity
