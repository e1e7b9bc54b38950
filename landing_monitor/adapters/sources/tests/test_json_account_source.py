"""
Tests for the JSON account source adapter.
"""

import json

import pytest

from landing_monitor.adapters.sources import (
    AdapterJsonAccountSource,
    condition_for,
    matches_status,
)
from landing_monitor.core.entities import TargetStatusFilter


def entity(url, status="ENABLED", ad_group="ENABLED", campaign="ENABLED"):
    return {
        "final_url": url,
        "status": status,
        "ad_group_status": ad_group,
        "campaign_status": campaign,
    }


class TestMatchesStatus:
    """Tests for matches_status function."""

    def test_enabled_needs_all_enabled(self):
        assert matches_status(entity("u"), TargetStatusFilter.ENABLED) is True
        assert (
            matches_status(entity("u", campaign="PAUSED"), TargetStatusFilter.ENABLED)
            is False
        )

    def test_paused_needs_any_paused(self):
        assert (
            matches_status(entity("u", ad_group="PAUSED"), TargetStatusFilter.PAUSED)
            is True
        )
        assert matches_status(entity("u"), TargetStatusFilter.PAUSED) is False

    def test_enabled_or_paused_keeps_everything(self):
        assert (
            matches_status(
                entity("u", status="REMOVED"), TargetStatusFilter.ENABLED_OR_PAUSED
            )
            is True
        )

    def test_missing_status_counts_as_enabled(self):
        assert matches_status({"final_url": "u"}, TargetStatusFilter.ENABLED) is True

    def test_null_status_counts_as_enabled(self):
        nulls = entity("u", status=None, ad_group=None, campaign=None)
        assert matches_status(nulls, TargetStatusFilter.ENABLED) is True
        assert matches_status(nulls, TargetStatusFilter.PAUSED) is False

    def test_condition_text(self):
        assert "AND" in condition_for(TargetStatusFilter.ENABLED)
        assert "OR" in condition_for(TargetStatusFilter.PAUSED)
        assert condition_for(TargetStatusFilter.ENABLED_OR_PAUSED) is None


class TestAdapterJsonAccountSource:
    """Tests for AdapterJsonAccountSource."""

    @pytest.fixture
    def accounts_file(self, tmp_path):
        path = tmp_path / "accounts.json"
        path.write_text(
            json.dumps(
                {
                    "accounts": [
                        {
                            "name": "Acme",
                            "ads": [
                                entity("https://a.com/1"),
                                entity("https://a.com/2", status="PAUSED"),
                            ],
                            "keywords": [entity("https://a.com/k")],
                        },
                        {"ads": []},
                    ]
                }
            ),
            encoding="utf-8",
        )
        return str(path)

    def test_accounts(self, accounts_file):
        source = AdapterJsonAccountSource(accounts_file)
        assert list(source.accounts()) == ["Acme", "Account 2"]

    def test_select_ads_enabled(self, accounts_file):
        source = AdapterJsonAccountSource(accounts_file)

        selection = source.select("Acme", "ads", TargetStatusFilter.ENABLED)

        assert selection.ok is True
        assert [e["final_url"] for e in selection.entities] == ["https://a.com/1"]

    def test_selection_is_one_pass(self, accounts_file):
        """Test the selected entities are a lazy, one-pass iterator."""
        source = AdapterJsonAccountSource(accounts_file)
        selection = source.select("Acme", "ads", TargetStatusFilter.ENABLED_OR_PAUSED)

        assert len(list(selection.entities)) == 2
        assert list(selection.entities) == []

    def test_select_keywords(self, accounts_file):
        source = AdapterJsonAccountSource(accounts_file)
        selection = source.select("Acme", "keywords", TargetStatusFilter.ENABLED)
        assert [e["final_url"] for e in selection.entities] == ["https://a.com/k"]

    def test_unknown_kind_is_error_result(self, accounts_file):
        """Test an unknown entity type is returned as an error, not raised."""
        source = AdapterJsonAccountSource(accounts_file)

        selection = source.select("Acme", "campaigns", TargetStatusFilter.ENABLED)

        assert selection.ok is False
        assert "campaigns" in selection.error

    def test_unknown_account_is_error_result(self, accounts_file):
        source = AdapterJsonAccountSource(accounts_file)
        selection = source.select("Nobody", "ads", TargetStatusFilter.ENABLED)
        assert selection.ok is False

    def test_duplicate_names_keep_every_account(self, tmp_path):
        """Test accounts sharing a name are both selectable."""
        path = tmp_path / "accounts.json"
        path.write_text(
            json.dumps(
                {
                    "accounts": [
                        {"name": "Shop", "ads": [entity("https://a.example/1")]},
                        {"name": "Shop", "ads": [entity("https://b.example/2")]},
                    ]
                }
            ),
            encoding="utf-8",
        )
        source = AdapterJsonAccountSource(str(path))

        names = list(source.accounts())
        assert names == ["Shop", "Shop #2"]
        urls = [
            e["final_url"]
            for name in names
            for e in source.select(name, "ads", TargetStatusFilter.ENABLED).entities
        ]
        assert urls == ["https://a.example/1", "https://b.example/2"]

    def test_missing_file(self, tmp_path):
        source = AdapterJsonAccountSource(str(tmp_path / "missing.json"))
        with pytest.raises(FileNotFoundError):
            list(source.accounts())

    def test_invalid_export(self, tmp_path):
        path = tmp_path / "accounts.json"
        path.write_text(json.dumps({"accounts": {}}), encoding="utf-8")
        with pytest.raises(ValueError):
            AdapterJsonAccountSource(str(path)).load()
