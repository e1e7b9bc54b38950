"""
Tests for Check Target Use Case.

Tests the per-target flow that collects URLs, fetches and classifies them,
and renders the target's fragment.
"""

import subprocess
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest  # type: ignore

from landing_monitor.application.check_target_use_case import CheckTargetUseCase
from landing_monitor.core.entities import FetchSuccess, RuleSet
from landing_monitor.health.report import AdapterTextReporter


class TestCheckTargetUseCase:
    """Test suite for CheckTargetUseCase."""

    @pytest.fixture
    def mock_fetcher(self):
        """Create a mock fetcher answering 200 with a clean page."""
        fetcher = Mock()
        fetcher.fetch.return_value = FetchSuccess(200, "<html>ok</html>")
        return fetcher

    @pytest.fixture
    def use_case(self, mock_fetcher):
        return CheckTargetUseCase(
            fetcher=mock_fetcher,
            reporter=AdapterTextReporter(),
            rules=RuleSet.default(),
        )

    def test_execute_dedups_before_fetching(self, use_case, mock_fetcher):
        """Test each normalized URL is fetched once."""
        entities = iter(
            [
                {"final_url": "https://a.com/?utm=1"},
                {"final_url": "https://a.com/?utm=2"},
                {"final_url": "https://b.com/"},
            ]
        )

        report = use_case.execute("Acme", entities)

        assert report.name == "Acme"
        assert report.result_set.urls == ["https://a.com/", "https://b.com/"]
        assert mock_fetcher.fetch.call_count == 2
        assert report.result_set.finalized is True

    def test_execute_renders_fragment(self, use_case, mock_fetcher):
        mock_fetcher.fetch.return_value = FetchSuccess(404, "")

        report = use_case.execute("Acme", [{"final_url": "https://a.com/"}])

        assert "Acme" in report.text
        assert "HTTP Error Code - 404" in report.text

    def test_execute_no_entities(self, use_case, mock_fetcher):
        report = use_case.execute("Empty", iter([]))

        assert report.result_set.url_count == 0
        assert report.text == ""
        mock_fetcher.fetch.assert_not_called()

    def test_to_dict(self, use_case):
        report = use_case.execute("Acme", ["https://a.com/"])
        data = report.to_dict()
        assert data["name"] == "Acme"
        assert data["data"]["urls"] == ["https://a.com/"]


def test_module_imports_before_health_package():
    """Test the use case module can be the first one imported."""
    result = subprocess.run(
        [
            sys.executable,
            "-c",
            "import landing_monitor.application.check_target_use_case",
        ],
        cwd=str(Path(__file__).parents[3]),
        capture_output=True,
        text=True,
        check=False,
    )
    assert result.returncode == 0, result.stderr
