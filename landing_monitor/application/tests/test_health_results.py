"""
Tests for health results module.
"""

import json
import threading
import time
from unittest.mock import Mock

import pytest

from landing_monitor.core.entities import (
    ErrorCategory,
    FetchFailure,
    FetchSuccess,
    RuleSet,
)
from landing_monitor.health.results import ResultSet, extract_final_url


def make_fetcher(responses):
    """Create a mock fetcher answering from a url -> outcome/exception map."""

    def _fetch(url):
        outcome = responses[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    fetcher = Mock()
    fetcher.fetch.side_effect = _fetch
    return fetcher


class TestResultSetUrls:
    """Tests for URL collection and deduplication."""

    def test_dedup_preserves_first_seen_order(self):
        """Test repeats after normalization are dropped, order kept."""
        result_set = ResultSet(RuleSet.default())
        added = result_set.add_urls(
            [
                "https://b.com/?x=1",
                "https://a.com/",
                "https://b.com/?x=2",
                "https://a.com/",
                "https://c.com/",
            ]
        )
        assert added == 3
        assert result_set.urls == ["https://b.com/", "https://a.com/", "https://c.com/"]

    def test_query_kept_when_not_stripping(self):
        rules = RuleSet(strip_query_parameters=False)
        result_set = ResultSet(rules)
        result_set.add_urls(["https://a.com/?x=1", "https://a.com/?x=2"])
        assert result_set.url_count == 2

    def test_empty_urls_discarded(self):
        result_set = ResultSet()
        assert result_set.add_url(None) is False
        assert result_set.add_url("") is False
        assert result_set.urls == []

    def test_process_iterator_extracts_final_urls(self):
        """Test entities of different shapes contribute their final URL."""

        class Keyword:
            final_url = "https://k.com/"

        items = iter(
            [
                {"final_url": "https://a.com/?gclid=1"},
                {"final_url": None},
                "https://s.com/",
                Keyword(),
                {"final_url": "https://a.com/"},
            ]
        )
        result_set = ResultSet()
        assert result_set.process_iterator(items) == 3
        assert result_set.urls == ["https://a.com/", "https://s.com/", "https://k.com/"]

    def test_extract_final_url_missing(self):
        assert extract_final_url({}) is None
        assert extract_final_url(object()) is None


class TestResultSetProcessAll:
    """Tests for process_all."""

    def test_classification_buckets(self):
        """Test each status lands in the right bucket."""
        result_set = ResultSet(RuleSet.default())
        result_set.add_urls(["https://e.com/", "https://w.com/", "https://ok.com/"])
        fetcher = make_fetcher(
            {
                "https://e.com/": FetchSuccess(404, ""),
                "https://w.com/": FetchSuccess(301, ""),
                "https://ok.com/": FetchSuccess(200, "<html>fine</html>"),
            }
        )

        result_set.process_all(fetcher)

        assert [f.message for f in result_set.bad_urls] == ["HTTP Error Code - 404"]
        assert [f.message for f in result_set.warn_urls] == ["HTTP Code - 301"]
        assert result_set.on_page_errors == ()

    def test_content_findings_aggregated(self):
        """Test one content finding per URL listing every matched phrase."""
        result_set = ResultSet(RuleSet.default())
        result_set.add_url("https://a.com/")
        fetcher = make_fetcher(
            {"https://a.com/": FetchSuccess(200, "Liquid error: x and err here")}
        )

        result_set.process_all(fetcher)

        assert len(result_set.on_page_errors) == 1
        message = result_set.on_page_errors[0].message
        assert '"Liquid error:"' in message
        assert '" err "' in message
        assert '"Liquid error:", " err "' in message

    def test_fetch_failure_isolated(self):
        """Test a failing URL is recorded and the others still run."""
        result_set = ResultSet(RuleSet.default())
        result_set.add_urls(["https://1.com/", "https://2.com/", "https://3.com/"])
        fetcher = make_fetcher(
            {
                "https://1.com/": FetchSuccess(500, ""),
                "https://2.com/": OSError("connection reset"),
                "https://3.com/": FetchSuccess(302, ""),
            }
        )

        result_set.process_all(fetcher)

        assert [(f.url, f.category) for f in result_set.bad_urls] == [
            ("https://1.com/", ErrorCategory.HTTP_ERROR),
            ("https://2.com/", ErrorCategory.FETCH_FAILURE),
        ]
        assert result_set.bad_urls[1].message == "Error - url fetch failed."
        assert [f.url for f in result_set.warn_urls] == ["https://3.com/"]
        assert fetcher.fetch.call_count == 3

    def test_failure_outcome_recorded(self):
        result_set = ResultSet()
        result_set.add_url("https://x.com/")
        result_set.process_all(make_fetcher({"https://x.com/": FetchFailure("dns")}))
        assert result_set.bad_urls[0].category == ErrorCategory.FETCH_FAILURE
        assert result_set.warn_urls == ()
        assert result_set.on_page_errors == ()

    def test_classifier_error_contained(self):
        """Test a raising pattern degrades to a recorded failure."""

        def broken(code):
            raise RuntimeError("bad predicate")

        result_set = ResultSet(RuleSet(error_code_patterns=(broken,)))
        result_set.add_urls(["https://a.com/", "https://b.com/"])
        fetcher = make_fetcher(
            {
                "https://a.com/": FetchSuccess(200, ""),
                "https://b.com/": FetchSuccess(200, ""),
            }
        )

        result_set.process_all(fetcher)

        assert [f.url for f in result_set.bad_urls] == [
            "https://a.com/",
            "https://b.com/",
        ]

    def test_parallel_results_follow_insertion_order(self):
        """Test concurrent fetches attach results in URL order."""
        urls = [f"https://site{i}.com/" for i in range(6)]
        # Earlier URLs answer slower, so completion order is reversed
        delays = {url: (len(urls) - i) * 0.02 for i, url in enumerate(urls)}
        seen_threads = set()

        def _fetch(url):
            seen_threads.add(threading.get_ident())
            time.sleep(delays[url])
            return FetchSuccess(404, "")

        fetcher = Mock()
        fetcher.fetch.side_effect = _fetch

        result_set = ResultSet(RuleSet.default())
        result_set.add_urls(urls)
        result_set.process_all(fetcher, max_workers=3)

        assert [f.url for f in result_set.bad_urls] == urls
        assert len(seen_threads) > 1

    def test_finalized_after_processing(self):
        """Test the set is read-only once processed."""
        result_set = ResultSet()
        result_set.process_all(make_fetcher({}))
        assert result_set.finalized is True
        with pytest.raises(RuntimeError):
            result_set.add_url("https://late.com/")
        with pytest.raises(RuntimeError):
            result_set.process_all(make_fetcher({}))

    def test_buckets_cannot_be_modified(self):
        """Test bucket views are immutable and detached from the set."""
        result_set = ResultSet(RuleSet.default())
        result_set.add_url("https://a.com/")
        result_set.process_all(make_fetcher({"https://a.com/": FetchSuccess(404, "")}))

        bad_urls = result_set.bad_urls
        assert isinstance(bad_urls, tuple)
        with pytest.raises(AttributeError):
            bad_urls.append(bad_urls[0])
        with pytest.raises(AttributeError):
            result_set.bad_urls = ()
        assert result_set.error_count == 1

    def test_record_failure(self):
        """Test a target-level failure counts as an error finding."""
        result_set = ResultSet()
        result_set.record_failure("Acme", "Error - target could not be checked: x")
        result_set.process_all(make_fetcher({}))

        assert result_set.url_count == 0
        assert result_set.error_count == 1
        assert result_set.bad_urls[0].category == ErrorCategory.FETCH_FAILURE
        with pytest.raises(RuntimeError):
            result_set.record_failure("Acme", "late")

    def test_counts(self):
        result_set = ResultSet(RuleSet.default())
        result_set.add_urls(["https://a.com/", "https://b.com/"])
        result_set.process_all(
            make_fetcher(
                {
                    "https://a.com/": FetchSuccess(404, "Liquid error:"),
                    "https://b.com/": FetchSuccess(307, ""),
                }
            )
        )
        assert result_set.url_count == 2
        assert result_set.error_count == 1
        assert result_set.warning_count == 1
        assert result_set.content_error_count == 1


class TestResultSetSerialization:
    """Tests for to_dict / from_dict."""

    def test_to_dict_keys(self):
        result_set = ResultSet(RuleSet.default())
        result_set.add_url("https://a.com/")
        result_set.process_all(make_fetcher({"https://a.com/": FetchSuccess(404, "")}))

        data = json.loads(json.dumps(result_set.to_dict()))

        assert data["urls"] == ["https://a.com/"]
        assert data["badUrls"] == [
            {
                "url": "https://a.com/",
                "error": "HTTP Error Code - 404",
                "category": "HttpError",
            }
        ]
        assert data["warnUrls"] == []
        assert data["onPageErrors"] == []

    def test_from_dict_without_categories(self):
        """Test findings without a category get their bucket default."""
        data = {
            "urls": ["https://a.com/", "https://b.com/"],
            "badUrls": [
                {"url": "https://a.com/", "error": "Error - url fetch failed."},
                {"url": "https://b.com/", "error": "HTTP Error Code - 500"},
            ],
            "warnUrls": [{"url": "https://b.com/", "error": "HTTP Code - 301"}],
            "onPageErrors": [],
        }

        result_set = ResultSet.from_dict(data)

        assert result_set.finalized is True
        assert result_set.urls == ["https://a.com/", "https://b.com/"]
        assert [f.category for f in result_set.bad_urls] == [
            ErrorCategory.FETCH_FAILURE,
            ErrorCategory.HTTP_ERROR,
        ]
        assert result_set.warn_urls[0].category == ErrorCategory.HTTP_WARNING
