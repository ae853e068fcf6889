"""Unit tests for the statistics aggregator."""

import pytest

from sitemap_verifier.models.data_models import Category, OutcomeRecord, StatisticsSummary
from sitemap_verifier.processor import calculate_stats, get_empty_stats, group_errors_by_type
from sitemap_verifier.processor.stats_calculator import nearest_rank_percentile


def record(status, time_ms=100, url=None, attempts=1, error=None, category=Category.SUCCESS):
    return OutcomeRecord(
        url=url or f"https://example.com/{status}-{time_ms}",
        status_code=status,
        response_time_ms=time_ms,
        attempts=attempts,
        category=category,
        description="",
        error=error
    )


class TestCalculateStats:

    def test_empty_input_returns_all_zero_summary(self):
        stats = calculate_stats([])

        assert stats == StatisticsSummary()
        assert stats.total_urls == 0
        assert stats.successful == 0
        assert stats.failed == 0
        assert stats.success_rate == 0
        assert stats.avg_response_time_ms == 0
        assert stats.p50 == stats.p95 == stats.p99 == 0
        assert stats.status_code_counts == {}

    def test_get_empty_stats_matches(self):
        assert get_empty_stats() == calculate_stats([])

    def test_mixed_batch(self):
        outcomes = [
            record(200, 100), record(200, 150), record(200, 120),
            record(404, 50, category=Category.CLIENT_ERROR),
            record(500, 200, category=Category.SERVER_ERROR),
        ]

        stats = calculate_stats(outcomes)

        assert stats.total_urls == 5
        assert stats.successful == 3
        assert stats.failed == 2
        assert stats.success_rate == 60
        assert stats.avg_response_time_ms == 124

    def test_percentiles_use_nearest_rank(self):
        outcomes = [record(200, t) for t in (50, 10, 40, 20, 30)]

        stats = calculate_stats(outcomes)

        assert stats.min_response_time_ms == 10
        assert stats.max_response_time_ms == 50
        assert stats.p50 == 30   # ceil(2.5) - 1 = 2
        assert stats.p95 == 50   # ceil(4.75) - 1 = 4
        assert stats.p99 == 50
        for value in (stats.p50, stats.p95, stats.p99):
            assert value in (10, 20, 30, 40, 50)

    def test_non_positive_times_are_ignored_for_timing(self):
        outcomes = [
            record(200, 0),
            record(None, 0, category=Category.NETWORK_ERROR),
            record(200, 40),
            record(200, 60),
        ]

        stats = calculate_stats(outcomes)

        assert stats.total_urls == 4
        assert stats.min_response_time_ms == 40
        assert stats.max_response_time_ms == 60
        assert stats.avg_response_time_ms == 50

    def test_average_rounds_half_up(self):
        stats = calculate_stats([record(200, 1), record(200, 2)])

        assert stats.avg_response_time_ms == 2

    def test_null_status_counts_toward_total_only(self):
        outcomes = [
            record(200),
            record(None, category=Category.TIMEOUT),
            record(None, category=Category.NETWORK_ERROR),
            record(503, category=Category.SERVER_ERROR),
        ]

        stats = calculate_stats(outcomes)

        assert stats.total_urls == 4
        assert stats.successful == 1
        assert stats.failed == 1
        assert stats.successful + stats.failed <= stats.total_urls
        assert stats.success_rate == 25

    def test_histogram_keeps_null_bucket(self):
        outcomes = [record(200), record(200), record(301), record(None, 0), record(404)]

        stats = calculate_stats(outcomes)

        assert stats.status_code_counts == {200: 2, 301: 1, None: 1, 404: 1}

    def test_redirects_count_as_successful(self):
        stats = calculate_stats([record(301), record(302), record(404)])

        assert stats.successful == 2
        assert stats.failed == 1

    def test_success_rate_two_decimals(self):
        stats = calculate_stats([record(200), record(404), record(404)])

        assert stats.success_rate == 33.33

    @pytest.mark.parametrize("statuses", [
        [200], [404], [None], [200, None, 500], [100, 600, 200, 399, 400],
    ])
    def test_bucket_invariant(self, statuses):
        stats = calculate_stats([record(s) for s in statuses])

        assert stats.successful >= 0
        assert stats.failed >= 0
        assert stats.successful + stats.failed <= stats.total_urls
        assert sum(stats.status_code_counts.values()) == stats.total_urls


class TestNearestRankPercentile:

    def test_empty(self):
        assert nearest_rank_percentile([], 50) == 0

    def test_single_value(self):
        assert nearest_rank_percentile([7], 1) == 7
        assert nearest_rank_percentile([7], 99) == 7

    def test_low_percentile_clamps_to_first(self):
        assert nearest_rank_percentile([1, 2, 3], 0) == 1

    def test_hundred_values(self):
        values = list(range(1, 101))
        assert nearest_rank_percentile(values, 50) == 50
        assert nearest_rank_percentile(values, 95) == 95
        assert nearest_rank_percentile(values, 99) == 99


class TestGroupErrorsByType:

    def test_groups_failed_statuses(self):
        outcomes = [
            record(200),
            record(404, url="https://example.com/a", error="Not Found"),
            record(404, url="https://example.com/b", error="Not Found"),
            record(503, url="https://example.com/c", attempts=4, error="Service Unavailable"),
            record(None, error="Request timeout"),
        ]

        errors = group_errors_by_type(outcomes)

        assert set(errors) == {404, 503}
        assert [e["url"] for e in errors[404]] == ["https://example.com/a", "https://example.com/b"]
        assert errors[503] == [
            {"url": "https://example.com/c", "attempts": 4, "error": "Service Unavailable"}
        ]

    def test_no_failures(self):
        assert group_errors_by_type([record(200), record(None)]) == {}
