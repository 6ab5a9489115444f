"""Command line interface.

CLI module using Typer with Rich-formatted output for the audit, validate and
init commands. Reports render as one table per category; --json prints the
camelCase report instead.
"""

# ruff: noqa: B008

import asyncio
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table
from rich.traceback import install as install_rich_traceback

from siteaudit import __version__
from siteaudit.auditor import run_audit
from siteaudit.checks import CATEGORIES
from siteaudit.config import AuditConfig, dump_default_config, load_config
from siteaudit.exceptions import ConfigError, CrawlError, RobotsDisallowed, SiteAuditError
from siteaudit.models import AuditStatus, RivalAudit
from siteaudit.utils import setup_logging

install_rich_traceback(show_locals=True)

console = Console()

app = typer.Typer(
    name="siteaudit",
    help="siteaudit - SEO best-practices audit for local-business websites",
    add_completion=False,
)

STATUS_STYLES = {
    AuditStatus.PRIORITY_OFI: "bold red",
    AuditStatus.OFI: "yellow",
    AuditStatus.OK: "green",
    AuditStatus.NA: "dim",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"siteaudit version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """siteaudit - SEO best-practices audit for local-business websites."""
    pass


def _apply_overrides(
    audit_config: AuditConfig, max_pages: int | None, concurrency: int | None
) -> AuditConfig:
    """Apply command line overrides and re-validate (bounds, concurrency clamp)."""
    data: dict[str, Any] = audit_config.model_dump()
    if max_pages is not None:
        data["crawling"]["max_pages"] = max_pages
    if concurrency is not None:
        data["crawling"]["max_concurrency"] = concurrency
    try:
        return AuditConfig.model_validate(data)
    except ValueError as e:
        raise ConfigError(f"Invalid command line option: {e}") from e


def render_report(report: RivalAudit) -> None:
    """Print one table per category followed by the summary."""
    console.print(f"\n[bold]Audit of[/bold] {report.url}")
    console.print(f"[dim]{report.timestamp.isoformat()}[/dim]\n")

    results = report.categories()
    for category in CATEGORIES:
        table = Table(title=category.title, title_justify="left", expand=True)
        table.add_column("Check", style="cyan", ratio=3)
        table.add_column("Status", ratio=1)
        table.add_column("Notes", style="white", ratio=4)
        for item in results[category.key].items:
            status = f"[{STATUS_STYLES[item.status]}]{item.status}[/]"
            table.add_row(item.name, status, item.notes or "")
        console.print(table)

    summary = report.summary
    stats = report.crawl_stats
    table = Table(title="Summary", title_justify="left")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Priority OFI", f"[bold red]{summary.priority_ofi_count}[/]")
    table.add_row("OFI", f"[yellow]{summary.ofi_count}[/]")
    table.add_row("OK", f"[green]{summary.ok_count}[/]")
    table.add_row("N/A", str(summary.na_count))
    table.add_row("Total checks", str(summary.total))
    table.add_row("Pages fetched", str(stats.pages_fetched))
    table.add_row("Pages failed", str(stats.pages_failed))
    table.add_row("Skipped by robots.txt", str(stats.skipped_by_robots))
    table.add_row("Reached page cap", "Yes" if stats.reached_max_pages else "No")
    if stats.stopped_early:
        table.add_row("Stopped early", "[yellow]Yes (partial report)[/]")
    console.print(table)


@app.command()
def audit(
    url: str = typer.Argument(..., help="Site to audit, e.g. 'example.com'"),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML config file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    max_pages: int | None = typer.Option(
        None,
        "--max-pages",
        help="Limit number of pages to crawl",
        min=1,
    ),
    concurrency: int | None = typer.Option(
        None,
        "--concurrency",
        help="Number of concurrent crawl workers",
        min=1,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the JSON report to this file",
        dir_okay=False,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the JSON report instead of tables",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose logging",
    ),
) -> None:
    """Crawl a site and audit it against local-SEO best practices.

    Fetches the homepage, discovers up to --max-pages internal pages,
    classifies them and runs every check. Exits non-zero only when no
    report could be produced.
    """
    setup_logging(verbose=verbose)
    try:
        audit_config = load_config(config) if config else AuditConfig()
        audit_config = _apply_overrides(audit_config, max_pages, concurrency)

        if not json_output:
            console.print(
                f"[cyan]Auditing:[/cyan] {url} "
                f"[dim](max {audit_config.crawling.max_pages} pages, "
                f"{audit_config.crawling.max_concurrency} workers)[/dim]"
            )

        report = asyncio.run(run_audit(url, audit_config))

        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(report.to_json(), encoding="utf-8")

        if json_output:
            typer.echo(report.to_json())
        else:
            render_report(report)
            if output:
                console.print(f"\n[green]Report written:[/green] {output}")

    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1) from None

    except RobotsDisallowed as e:
        console.print(f"[red]Audit blocked:[/red] {e}")
        raise typer.Exit(code=1) from None

    except CrawlError as e:
        console.print(f"[red]Audit failed:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(code=1) from None

    except SiteAuditError as e:
        console.print(f"[red]Audit failed:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(code=1) from None

    except KeyboardInterrupt:
        console.print("\n[yellow]Audit interrupted by user[/yellow]")
        raise typer.Exit(code=130) from None

    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        else:
            console.print("[dim]Use --verbose to see full traceback[/dim]")
        raise typer.Exit(code=1) from None


@app.command()
def validate(
    config_path: Path = typer.Argument(
        ...,
        help="Path to YAML config file to validate",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
) -> None:
    """Validate a siteaudit configuration file.

    Checks YAML syntax and validates all configuration fields against
    the schema. Displays detailed error messages if validation fails.
    """
    try:
        console.print(f"[cyan]Validating configuration:[/cyan] {config_path}")

        audit_config = load_config(config_path)

        console.print("[green][OK] Configuration is valid![/green]\n")

        crawling = audit_config.crawling
        table = Table(title="Configuration Summary")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")

        table.add_row("Max Pages", str(crawling.max_pages))
        table.add_row("Concurrency", str(crawling.max_concurrency))
        table.add_row("Request Timeout", f"{crawling.per_request_timeout_ms} ms")
        table.add_row("Retries", str(crawling.retry_attempts))
        table.add_row("Request Delay", f"{crawling.request_delay_ms} ms")
        table.add_row(
            "Deadline",
            f"{crawling.deadline_seconds} s" if crawling.deadline_seconds else "none",
        )
        table.add_row("User Agent", crawling.user_agent)
        table.add_row("Respect robots.txt", "Yes" if crawling.respect_robots else "No")
        table.add_row("Sitemap Discovery", "Yes" if audit_config.sitemap.enabled else "No")
        table.add_row(
            "Similarity Threshold", str(audit_config.analysis.similarity_threshold)
        )

        console.print(table)

    except ConfigError as e:
        console.print("[red][FAIL] Configuration validation failed:[/red]\n")
        console.print(str(e))
        raise typer.Exit(code=1) from None


@app.command()
def init(
    output_path: Path | None = typer.Argument(
        None,
        help="Output path for generated config file (default: siteaudit.yaml)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing file",
    ),
) -> None:
    """Write a configuration file populated with the defaults."""
    if output_path is None:
        output_path = Path("siteaudit.yaml")

    if output_path.exists() and not force:
        console.print(f"[red]Error:[/red] File already exists: {output_path}")
        console.print("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(code=1)

    try:
        with output_path.open("w", encoding="utf-8") as f:
            f.write("# siteaudit configuration\n\n")
            f.write(dump_default_config())
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        raise typer.Exit(code=1) from None

    console.print(f"[green][OK] Configuration created:[/green] {output_path}")
    console.print("\n[dim]Next steps:[/dim]")
    console.print(f"  1. Edit {output_path} to customize settings")
    console.print(f"  2. Run: siteaudit validate {output_path}")
    console.print(f"  3. Run: siteaudit audit example.com --config {output_path}")


if __name__ == "__main__":
    app()
