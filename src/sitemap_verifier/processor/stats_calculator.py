"""Statistics over a batch of URL check outcomes."""

import math
from typing import Dict, Iterable, List, Optional, Sequence

from sitemap_verifier.models.data_models import OutcomeRecord, StatisticsSummary


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def nearest_rank_percentile(sorted_values: Sequence[int], percentile: float) -> int:
    """
    Nearest-rank percentile of an ascending sequence.

    index = ceil(p / 100 * n) - 1, clamped to [0, n - 1]; 0 for an empty sequence.
    """
    n = len(sorted_values)
    if n == 0:
        return 0
    index = math.ceil((percentile / 100) * n) - 1
    return sorted_values[min(max(index, 0), n - 1)]


def get_empty_stats() -> StatisticsSummary:
    """Summary for an empty batch: all zeros, empty histogram."""
    return StatisticsSummary()


def calculate_stats(outcomes: Iterable[OutcomeRecord]) -> StatisticsSummary:
    """
    Compute the statistics summary for a batch.

    successful counts statuses in [200, 400), failed counts statuses >= 400;
    records without a status count toward total_urls only. Response-time
    figures ignore non-positive times. The status histogram covers every
    record, with None as the bucket for URLs that never reached a server.

    Args:
        outcomes: Outcome records of one batch

    Returns:
        StatisticsSummary
    """
    outcomes = list(outcomes)
    if not outcomes:
        return get_empty_stats()

    total = len(outcomes)
    successful = 0
    failed = 0
    status_code_counts: Dict[Optional[int], int] = {}

    for outcome in outcomes:
        code = outcome.status_code
        if code is not None:
            if 200 <= code < 400:
                successful += 1
            elif code >= 400:
                failed += 1
        status_code_counts[code] = status_code_counts.get(code, 0) + 1

    times = sorted(o.response_time_ms for o in outcomes if o.response_time_ms > 0)
    avg = _round_half_up(sum(times) / len(times)) if times else 0

    return StatisticsSummary(
        total_urls=total,
        successful=successful,
        failed=failed,
        success_rate=_round_half_up(successful / total * 100 * 100) / 100,
        avg_response_time_ms=avg,
        min_response_time_ms=times[0] if times else 0,
        max_response_time_ms=times[-1] if times else 0,
        p50=nearest_rank_percentile(times, 50),
        p95=nearest_rank_percentile(times, 95),
        p99=nearest_rank_percentile(times, 99),
        status_code_counts=status_code_counts
    )


def group_errors_by_type(outcomes: Iterable[OutcomeRecord]) -> Dict[int, List[Dict]]:
    """Group outcomes with status >= 400 by status code."""
    errors: Dict[int, List[Dict]] = {}
    for outcome in outcomes:
        if outcome.status_code is not None and outcome.status_code >= 400:
            errors.setdefault(outcome.status_code, []).append({
                "url": outcome.url,
                "attempts": outcome.attempts,
                "error": outcome.error,
            })
    return errors
