"""Report writers for verification results.

The JSON report is meant for CI/CD consumption; the CSV export is a flat
per-URL table for spreadsheets. Both are built from a CheckResult and never
recompute anything the statistics aggregator already provides, except the
per-status error grouping.
"""

import csv
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from sitemap_verifier.models.data_models import CheckResult, OutcomeRecord
from sitemap_verifier.processor import group_errors_by_type


def _status_key(code: Optional[int]) -> str:
    # Transport failures keep their own bucket
    return "null" if code is None else str(code)


def _report_filename(extension: str) -> str:
    now = datetime.now(timezone.utc)
    return f"sitemap-check-{now.strftime('%Y-%m-%d')}-{int(time.time() * 1000)}.{extension}"


class JSONReportFormatter:
    """
    Formats verification results as JSON.

    Example output structure:
    {
        "metadata": {"source": "urls.txt", "timestamp": "...", "duration_seconds": 4.2},
        "summary": {"total_urls": 5, "successful": 3, "failed": 2, ...},
        "status_code_distribution": {"200": 3, "404": 1, "null": 1},
        "results": [...],
        "errors": {"404": [{"url": "...", "attempts": 1, "error": "Not Found"}]}
    }
    """

    def format(self, result: CheckResult) -> Dict[str, Any]:
        """
        Format check result as JSON-serializable dictionary.

        Args:
            result: Complete verification result

        Returns:
            Dictionary with metadata, summary, distribution, results and errors
        """
        return {
            "metadata": self._format_metadata(result),
            "summary": self._format_summary(result),
            "status_code_distribution": {
                _status_key(code): count
                for code, count in result.summary.status_code_counts.items()
            },
            "results": [self._format_outcome(o) for o in result.outcomes],
            "errors": {
                str(code): failures
                for code, failures in group_errors_by_type(result.outcomes).items()
            }
        }

    def _format_metadata(self, result: CheckResult) -> Dict[str, Any]:
        return {
            "source": result.source,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "duration_seconds": round(result.duration_seconds, 1)
        }

    def _format_summary(self, result: CheckResult) -> Dict[str, Any]:
        summary = result.summary
        return {
            "total_urls": summary.total_urls,
            "successful": summary.successful,
            "failed": summary.failed,
            "success_rate": summary.success_rate,
            "avg_response_time_ms": summary.avg_response_time_ms,
            "min_response_time_ms": summary.min_response_time_ms,
            "max_response_time_ms": summary.max_response_time_ms,
            "p50_response_time_ms": summary.p50,
            "p95_response_time_ms": summary.p95,
            "p99_response_time_ms": summary.p99
        }

    @staticmethod
    def _format_outcome(outcome: OutcomeRecord) -> Dict[str, Any]:
        return {
            "url": outcome.url,
            "status_code": outcome.status_code,
            "response_time_ms": outcome.response_time_ms,
            "attempts": outcome.attempts,
            "category": outcome.category.value,
            "description": outcome.description,
            "error": outcome.error,
            "redirect_url": outcome.redirect_url
        }

    def save(self, result: CheckResult, directory: str = "reports") -> Path:
        """
        Save formatted result to a timestamped JSON file.

        Creates the directory if needed. Uses 2-space indentation.

        Returns:
            Path of the written file
        """
        output_dir = Path(directory)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / _report_filename("json")

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(self.format(result), f, indent=2, ensure_ascii=False)

        return output_path


class CSVExporter:
    """Exports one row per checked URL."""

    HEADERS = [
        "URL", "Status Code", "Response Time (ms)", "Attempts",
        "Category", "Description", "Error", "Redirect URL"
    ]

    def rows(self, result: CheckResult) -> List[List[Any]]:
        return [
            [
                o.url,
                o.status_code if o.status_code is not None else "N/A",
                o.response_time_ms,
                o.attempts,
                o.category.value,
                o.description or "",
                o.error or "",
                o.redirect_url or ""
            ]
            for o in result.outcomes
        ]

    def save(self, result: CheckResult, directory: str = "reports") -> Path:
        output_dir = Path(directory)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / _report_filename("csv")

        with open(output_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(self.HEADERS)
            writer.writerows(self.rows(result))

        return output_path
