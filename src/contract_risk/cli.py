"""Command-line interface for Contract Risk Analyzer.

Provides ``analyze``, ``pages``, and ``redact`` commands with rich terminal
output using the ``click`` and ``rich`` libraries.

Usage::

    contract-risk analyze lease.pdf
    contract-risk analyze --language hinglish --output json lease.pdf
    contract-risk pages lease.pdf
    contract-risk redact notes.txt
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .analyzer import ContractAnalyzer
from .config import Settings, configure_logging
from .exceptions import ExtractionError
from .models import AnalysisResult, KeyPointType, Language, RiskLevel
from .redaction import Redactor

console = Console()

LANGUAGE_CHOICE = click.Choice([lang.value for lang in Language])


def _get_risk_style(level: RiskLevel | KeyPointType) -> str:
    """Return a rich style string for a risk level."""
    return {
        "high": "bold red",
        "medium": "bold yellow",
        "low": "dim green",
        "info": "dim",
    }.get(level.value, "")


def _get_risk_icon(level: RiskLevel) -> str:
    return {
        RiskLevel.HIGH: "🔴",
        RiskLevel.MEDIUM: "🟡",
        RiskLevel.LOW: "🟢",
    }.get(level, "")


def _build_analyzer(offline: bool, verbose: bool) -> ContractAnalyzer:
    load_dotenv()
    settings = Settings.from_env()
    if offline:
        settings.offline = True
    configure_logging("INFO" if verbose else settings.log_level)
    return ContractAnalyzer.from_settings(settings)


def _run(analyzer: ContractAnalyzer, file: Path, language: str) -> AnalysisResult:
    try:
        return analyzer.analyze_file(file, language)
    except ExtractionError as e:
        console.print(f"[bold red]Extraction failed:[/] {e.user_message}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)


@click.group()
@click.version_option(package_name="contract-risk-analyzer")
def main() -> None:
    """📄 Contract Risk Analyzer: plain-language risk review of contracts.

    Extracts text from a PDF, redacts personal data, and labels clauses,
    lines, and pages by risk.
    """
    pass


@main.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--language", "-l", type=LANGUAGE_CHOICE, default="en", help="Output language.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.option("--save", "-s", type=click.Path(path_type=Path), default=None,
              help="Save results to a JSON file.")
@click.option("--offline", is_flag=True, help="Use heuristics only; never call a model.")
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline steps.")
def analyze(file: Path, language: str, output: str, save: Path | None,
            offline: bool, verbose: bool) -> None:
    """Run full risk analysis on a contract.

    Example: contract-risk analyze lease.pdf
    """
    analyzer = _build_analyzer(offline, verbose)

    with console.status("[bold blue]Analyzing document...", spinner="dots"):
        result = _run(analyzer, file, language)

    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _render_analysis(result, file.name)

    if save:
        save.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        console.print(f"\n[dim]Results saved to {save}[/]")


@main.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--language", "-l", type=LANGUAGE_CHOICE, default="en", help="Output language.")
@click.option("--offline", is_flag=True, help="Use heuristics only; never call a model.")
def pages(file: Path, language: str, offline: bool) -> None:
    """Show the page-by-page breakdown of a contract.

    Example: contract-risk pages lease.pdf
    """
    analyzer = _build_analyzer(offline, verbose=False)

    with console.status("[bold blue]Analyzing pages...", spinner="dots"):
        result = _run(analyzer, file, language)

    _render_pages(result)


@main.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
def redact(file: Path) -> None:
    """Print a text file with personal data replaced by placeholders.

    Example: contract-risk redact notes.txt
    """
    text = file.read_text(encoding="utf-8", errors="replace")
    click.echo(Redactor().redact(text))


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_analysis(result: AnalysisResult, filename: str) -> None:
    """Render a full AnalysisResult with rich formatting."""
    console.print()

    counts = result.risk_counts()
    overall = result.overall_risk
    console.print(Panel(
        f"[bold]{filename}[/]\n"
        f"Pages: {result.page_count or '?'} | "
        f"Clauses: {len(result.clauses)} | "
        f"Segments: {len(result.segments or [])} | "
        f"High: {counts[RiskLevel.HIGH]} Medium: {counts[RiskLevel.MEDIUM]} Low: {counts[RiskLevel.LOW]}",
        title="📄 Contract Risk Analysis",
        border_style="blue",
    ))

    console.print(Panel(result.summary, title="Summary", border_style="dim"))

    if result.clauses:
        table = Table(title="Clauses", show_lines=True)
        table.add_column("#", justify="right", width=4)
        table.add_column("Title", style="cyan", width=28)
        table.add_column("What it means", style="white", max_width=60)
        table.add_column("Page", justify="center", width=6)
        table.add_column("Risk", justify="center", width=8)

        for i, clause in enumerate(result.clauses, 1):
            table.add_row(
                str(i),
                clause.title,
                clause.simple,
                str(clause.page or "-"),
                Text(clause.risk.value.upper(), style=_get_risk_style(clause.risk)),
            )
        console.print(table)
        console.print()

    if result.high_risk_clauses:
        console.print("[bold]Needs Attention[/]")
        for clause in result.high_risk_clauses:
            console.print(f"  {_get_risk_icon(clause.risk)} [bold red]{clause.title}[/]: {clause.why}")
        console.print()

    console.print(
        f"Overall Risk: {_get_risk_icon(overall)} "
        f"[{_get_risk_style(overall)}]{overall.value.upper()}[/]"
    )
    console.print()


def _render_pages(result: AnalysisResult) -> None:
    """Render the page analysis list as a rich table."""
    if not result.page_analysis:
        console.print("[dim]No page-by-page analysis available for this document.[/]")
        return

    table = Table(title="Page-by-page analysis", show_lines=True)
    table.add_column("Page", justify="right", width=5)
    table.add_column("Risk", justify="center", width=8)
    table.add_column("Summary", style="white", max_width=70)
    table.add_column("Key points", style="cyan", max_width=40)

    for page in result.page_analysis:
        points = "\n".join(
            f"[{_get_risk_style(kp.type)}]•[/] {kp.title}" for kp in page.key_points
        )
        table.add_row(
            str(page.page_number),
            Text(page.risk_level.value.upper(), style=_get_risk_style(page.risk_level)),
            page.summary,
            points or "-",
        )

    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
