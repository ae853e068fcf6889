"""CLI entry point for the sitemap verifier.

This module provides the command-line interface for checking a list of
sitemap URLs with argument parsing, a live progress bar, summary tables and
CI-friendly exit codes.
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from sitemap_verifier import __version__
from sitemap_verifier.models.config import CheckerConfig, ConfigManager
from sitemap_verifier.models.data_models import CheckResult, ProgressEvent, URLEntry
from sitemap_verifier.monitoring.logger import StructuredLogger
from sitemap_verifier.pipeline.orchestrator import CheckOrchestrator
from sitemap_verifier.pipeline.output import CSVExporter, JSONReportFormatter
from sitemap_verifier.pipeline.url_source import load_url_entries
from sitemap_verifier.processor import group_errors_by_type


EXIT_OK = 0
EXIT_URL_FAILURES = 1
EXIT_FATAL = 2
EXIT_INTERRUPTED = 130

console = Console()


@click.command()
@click.argument("urls_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    default="config/config.yaml",
    help="Path to configuration YAML file",
)
@click.option(
    "--concurrency",
    "-p",
    type=int,
    help="Maximum URLs checked in parallel (overrides config)",
)
@click.option(
    "--retries",
    "-r",
    type=int,
    help="Retries after the first failed attempt (overrides config)",
)
@click.option(
    "--timeout",
    "-t",
    type=float,
    help="Per-request timeout in seconds (overrides config)",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for saved reports (overrides config)",
)
@click.option(
    "--format",
    "-f",
    "formats",
    type=click.Choice(["json", "csv"], case_sensitive=False),
    multiple=True,
    help="Report format to write; repeatable (overrides config)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides config)",
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable progress bars (useful for CI/CD)",
)
@click.version_option(version=__version__, prog_name="sitemap-verifier")
def main(
    urls_file: Path,
    config: Path,
    concurrency: Optional[int],
    retries: Optional[int],
    timeout: Optional[float],
    output_dir: Optional[Path],
    formats: Tuple[str, ...],
    log_level: Optional[str],
    no_progress: bool,
) -> None:
    """
    Sitemap Verifier - Concurrent reachability checks for sitemap URLs.

    Reads URLS_FILE (plain text, JSON or YAML list of URLs extracted from a
    sitemap), checks every URL with bounded concurrency and retries, prints a
    summary and writes reports.

    Exit codes: 0 all URLs healthy, 1 some URLs failed with 4xx/5xx,
    2 fatal error, 130 interrupted.

    Examples:

        # Check URLs with default configuration
        $ sitemap-verifier urls.txt

        # Raise concurrency and write JSON and CSV reports
        $ sitemap-verifier urls.json -p 25 -f json -f csv

        # Disable progress bars for CI/CD
        $ sitemap-verifier urls.txt --no-progress
    """
    try:
        cli_overrides = {}
        if concurrency is not None:
            cli_overrides["max_parallel"] = concurrency
        if retries is not None:
            cli_overrides["max_retries"] = retries
        if timeout is not None:
            cli_overrides["request_timeout"] = timeout
        if output_dir is not None:
            cli_overrides["output_directory"] = str(output_dir)
        if formats:
            cli_overrides["report_formats"] = [fmt.lower() for fmt in formats]
        if log_level is not None:
            cli_overrides["log_level"] = log_level.upper()

        config_manager = ConfigManager(config)
        checker_config = config_manager.load_config(cli_overrides)
        logger = StructuredLogger(level=checker_config.log_level)

        entries = load_url_entries(urls_file, logger=logger)
        if not entries:
            console.print(f"[red]Error:[/red] No URLs found in {urls_file}", style="bold red")
            sys.exit(EXIT_FATAL)

        _display_config_summary(checker_config, len(entries), no_progress)

        result = asyncio.run(
            _run_with_progress(checker_config, entries, str(urls_file), logger, no_progress)
        )

        report_paths = _save_reports(result, checker_config)

        _display_results(result, report_paths, no_progress)

        sys.exit(EXIT_URL_FAILURES if result.summary.failed > 0 else EXIT_OK)

    except KeyboardInterrupt:
        console.print("\n[yellow]Verification interrupted by user[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except asyncio.TimeoutError:
        console.print("\n[red]Error:[/red] Batch exceeded total_timeout", style="bold red")
        sys.exit(EXIT_FATAL)
    except Exception as e:
        console.print(f"\n[red]Error:[/red] {e}", style="bold red")
        sys.exit(EXIT_FATAL)


async def _run_with_progress(
    config: CheckerConfig,
    entries: Sequence[URLEntry],
    source: str,
    logger: StructuredLogger,
    no_progress: bool,
) -> CheckResult:
    """
    Run the check with progress tracking.

    Args:
        config: Checker configuration
        entries: URL entries to check
        source: Label of the input, carried into reports
        logger: Structured logger shared by all components
        no_progress: Whether to disable progress bars

    Returns:
        Verification result
    """
    orchestrator = CheckOrchestrator(config, logger=logger)

    if no_progress:
        console.print("[cyan]Checking URLs...[/cyan]")
        return await orchestrator.run(entries, source=source)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task("[cyan]Checking URLs...", total=len(entries))

        def on_progress(event: ProgressEvent) -> None:
            progress.update(task_id, completed=event.completed_count)

        return await orchestrator.run(entries, source=source, on_progress=on_progress)


def _save_reports(result: CheckResult, config: CheckerConfig) -> List[Path]:
    writers = {"json": JSONReportFormatter(), "csv": CSVExporter()}
    return [
        writers[fmt].save(result, config.output_directory)
        for fmt in config.report_formats
    ]


def _display_config_summary(config: CheckerConfig, url_count: int, no_progress: bool) -> None:
    """Display configuration summary before running."""
    if no_progress:
        return

    console.print("\n[bold cyan]Verifier Configuration[/bold cyan]")
    console.print(f"  URLs: {url_count}")
    console.print(f"  Concurrency: {config.max_parallel}")
    console.print(f"  Retries: {config.max_retries} (base delay {config.retry_delay_ms}ms)")
    console.print(f"  Request Timeout: {config.request_timeout}s")
    console.print()


def _status_style(code: Optional[int]) -> str:
    if code is None:
        return "magenta"
    if 200 <= code < 300:
        return "green"
    if 300 <= code < 400:
        return "blue"
    if 400 <= code < 500:
        return "yellow"
    return "red"


def _display_results(
    result: CheckResult,
    report_paths: List[Path],
    no_progress: bool,
) -> None:
    """Display final results summary."""
    summary = result.summary

    if no_progress:
        # Simple output for CI/CD
        console.print(
            f"✓ Checked {summary.total_urls} URLs: {summary.successful} ok, "
            f"{summary.failed} failed ({summary.success_rate:.2f}% success)"
        )
        for path in report_paths:
            console.print(f"✓ Report saved to: {path}")
        return

    console.print("\n[bold green]Verification Complete![/bold green]\n")

    summary_table = Table(title="Summary", show_header=False)
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("Source", result.source)
    summary_table.add_row("Duration", f"{result.duration_seconds:.1f}s")
    summary_table.add_row("Total URLs", str(summary.total_urls))
    summary_table.add_row("Successful", f"{summary.successful} ({summary.success_rate:.2f}%)")
    summary_table.add_row("Failed", str(summary.failed))
    summary_table.add_row("Avg Response Time", f"{summary.avg_response_time_ms}ms")
    summary_table.add_row("Min Response Time", f"{summary.min_response_time_ms}ms")
    summary_table.add_row("Max Response Time", f"{summary.max_response_time_ms}ms")
    summary_table.add_row("P50 Response Time", f"{summary.p50}ms")
    summary_table.add_row("P95 Response Time", f"{summary.p95}ms")
    summary_table.add_row("P99 Response Time", f"{summary.p99}ms")
    console.print(summary_table)
    console.print()

    if summary.status_code_counts:
        status_table = Table(title="Status Code Distribution")
        status_table.add_column("Status", style="cyan")
        status_table.add_column("Count", justify="right")
        status_table.add_column("Share", justify="right")

        ordered = sorted(
            summary.status_code_counts.items(),
            key=lambda item: -1 if item[0] is None else item[0],
            reverse=True
        )
        for code, count in ordered:
            label = "no response" if code is None else str(code)
            status_table.add_row(
                f"[{_status_style(code)}]{label}[/]",
                str(count),
                f"{count / summary.total_urls * 100:.1f}%",
            )
        console.print(status_table)
        console.print()

    errors = group_errors_by_type(result.outcomes)
    if errors:
        console.print("[bold red]Error Summary[/bold red]")
        for code in sorted(errors, reverse=True):
            failures = errors[code]
            console.print(f"  [red]Status {code}: {len(failures)} error(s)[/red]")
            for failure in failures[:3]:
                console.print(f"    • {failure['url']}", style="dim")
            if len(failures) > 3:
                console.print(f"    ... and {len(failures) - 3} more", style="dim")
        console.print()

    for path in report_paths:
        console.print(f"[bold]Report saved to:[/bold] {path}")
    console.print()


if __name__ == "__main__":
    main()
