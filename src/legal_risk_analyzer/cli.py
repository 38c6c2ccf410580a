"""Command-line interface for Legal Risk Analyzer.

Provides ``analyze``, ``analyze-text``, ``clauses`` and ``serve`` commands
with rich terminal output using the ``click`` and ``rich`` libraries.

Usage::

    legal-risk-analyzer analyze contract.pdf
    legal-risk-analyzer analyze --no-llm --output json contract.docx
    cat terms.txt | legal-risk-analyzer analyze-text -
    legal-risk-analyzer clauses contract.pdf
    legal-risk-analyzer serve --port 8000
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .analyzer import LegalAnalyzer
from .config import Settings, configure_logging
from .errors import LegalAnalyzerError
from .extractors import ClauseClassifier
from .models import AnalysisResult, Clause, RiskLevel, Severity
from .parsers import guess_content_type, read_document
from .summarizer import risk_tier_name

console = Console()


def _get_risk_style(level: RiskLevel | Severity) -> str:
    """Return a rich style string for a clause risk level or issue severity."""
    return {
        "critical": "bold white on red",
        "high": "bold red",
        "medium": "bold yellow",
        "low": "dim green",
    }.get(level.value, "")


def _get_risk_icon(level: RiskLevel | Severity) -> str:
    """Return an emoji icon for a clause risk level or issue severity."""
    return {
        "critical": "⛔",
        "high": "🔴",
        "medium": "🟡",
        "low": "🟢",
    }.get(level.value, "")


def _score_style(score: int) -> str:
    return {
        "high": "bold red",
        "moderate": "bold yellow",
        "low": "bold green",
    }[risk_tier_name(score)]


@click.group()
@click.version_option(package_name="legal-risk-analyzer")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """⚖️ Legal Risk Analyzer — contract risk scoring with LLM and heuristic analysis.

    Scores legal documents for financial, legal, operational, compliance
    and reputational risk, flags critical issues and risky clauses.
    """
    try:
        settings = Settings.from_env()
    except ValidationError as e:
        console.print(f"[bold red]Invalid configuration:[/] {e}")
        sys.exit(1)
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


def _run_analysis(
    settings: Settings,
    text: str,
    filename: str | None,
    file_type: str,
    file_size: int | None,
    no_llm: bool,
    timeout: float | None,
) -> AnalysisResult:
    if no_llm:
        analyzer = LegalAnalyzer(Settings(llm_enabled=False))
        return analyzer.analyze_heuristic(
            text, filename, file_type=file_type, file_size=file_size
        )
    analyzer = LegalAnalyzer(settings)
    return analyzer.analyze_sync(
        text, filename, file_type=file_type, file_size=file_size, timeout=timeout
    )


def _emit(result: AnalysisResult, output: str, save: Path | None) -> None:
    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_analysis(result)

    if save:
        save.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        if output != "json":
            console.print(f"\n[dim]Results saved to {save}[/]")


_output_option = click.option(
    "--output", "-o", type=click.Choice(["rich", "json"]), default="rich", help="Output format."
)
_save_option = click.option(
    "--save", "-s", type=click.Path(path_type=Path), default=None,
    help="Save results to a JSON file.",
)
_no_llm_option = click.option(
    "--no-llm", is_flag=True, help="Skip the language model and use heuristic scoring only."
)
_timeout_option = click.option(
    "--timeout", type=float, default=None, help="Seconds allowed for the LLM call."
)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_output_option
@_save_option
@_no_llm_option
@_timeout_option
@click.pass_obj
def analyze(
    settings: Settings,
    file: Path,
    output: str,
    save: Path | None,
    no_llm: bool,
    timeout: float | None,
) -> None:
    """Run full risk analysis on a legal document.

    Example: legal-risk-analyzer analyze contract.pdf
    """
    with console.status("[bold blue]Analyzing document...", spinner="dots"):
        try:
            text = read_document(file)
            result = _run_analysis(
                settings,
                text,
                file.name,
                guess_content_type(file.name),
                file.stat().st_size,
                no_llm,
                timeout,
            )
        except (LegalAnalyzerError, OSError) as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    _emit(result, output, save)


@main.command("analyze-text")
@click.argument("text", required=False, default="-")
@_output_option
@_save_option
@_no_llm_option
@_timeout_option
@click.pass_obj
def analyze_text(
    settings: Settings,
    text: str,
    output: str,
    save: Path | None,
    no_llm: bool,
    timeout: float | None,
) -> None:
    """Analyze TEXT directly, or standard input when TEXT is '-'.

    Example: cat terms.txt | legal-risk-analyzer analyze-text -
    """
    if text == "-":
        text = sys.stdin.read()
    if not text.strip():
        console.print("[bold red]Error:[/] Text is required")
        sys.exit(1)

    with console.status("[bold blue]Analyzing text...", spinner="dots"):
        try:
            result = _run_analysis(settings, text, None, "text/plain", None, no_llm, timeout)
        except LegalAnalyzerError as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    _emit(result, output, save)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_output_option
def clauses(file: Path, output: str) -> None:
    """List the classified clauses of a legal document.

    Example: legal-risk-analyzer clauses contract.pdf
    """
    try:
        found = ClauseClassifier().classify(read_document(file))
    except (LegalAnalyzerError, OSError) as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    if output == "json":
        click.echo(json.dumps([c.to_dict() for c in found], indent=2))
    else:
        _render_clauses(found, file.name)


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port.")
@click.pass_obj
def serve(settings: Settings, host: str, port: int) -> None:
    """Run the HTTP analysis service.

    Example: legal-risk-analyzer serve --host 0.0.0.0 --port 8000
    """
    import uvicorn

    from .api import create_app

    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_analysis(result: AnalysisResult) -> None:
    """Render a full AnalysisResult with rich formatting."""
    console.print()

    meta = result.file_metadata
    filename = meta.filename if meta else "untitled.txt"
    score_style = _score_style(result.overall_risk_score)
    console.print(Panel(
        f"[bold]{filename}[/]\n"
        f"{result.document_type} | {result.industry_context} | "
        f"Clauses: {len(result.clauses)} | "
        f"Critical issues: {len(result.critical_issues)} | "
        f"Source: {result.source}",
        title="⚖️ Legal Risk Analysis",
        border_style="blue",
    ))

    console.print(Panel(result.summary, title="Summary", border_style="dim"))

    # Breakdown
    table = Table(title="Risk Breakdown", show_lines=False)
    table.add_column("Category", style="cyan", width=20)
    table.add_column("Score", justify="center", width=8)
    table.add_column("", width=12)
    for name, value in result.risk_breakdown.to_dict().items():
        value = int(value)
        table.add_row(
            name.replace("_", " ").title(),
            f"{value}/10",
            Text("█" * value, style=_score_style(value * 10)),
        )
    console.print(table)
    console.print()

    if result.critical_issues:
        console.print("[bold]Critical Issues[/]")
        for issue in result.critical_issues:
            icon = _get_risk_icon(issue.severity)
            style = _get_risk_style(issue.severity)
            console.print(f"  {icon} [{style}]{issue.severity.value.upper()}[/]: {issue.issue}")
            if issue.impact:
                console.print(f"      {issue.impact}")
            if issue.recommendation:
                console.print(f"      💡 {issue.recommendation}")
        console.print()

    if result.clauses:
        _render_clauses(result.clauses, filename)

    if result.key_findings:
        console.print("[bold]Key Findings[/]")
        for finding in result.key_findings:
            console.print(f"  • {finding}")
        console.print()

    if result.recommendations:
        console.print("[bold]Recommendations[/]")
        for rec in result.recommendations:
            console.print(f"  💡 {rec}")
        console.print()

    console.print(
        f"Overall Risk Score: [{score_style}]{result.overall_risk_score}/100[/] "
        f"(confidence {result.risk_confidence}%)"
    )
    console.print()


def _render_clauses(clauses: list[Clause], filename: str) -> None:
    """Render clauses as a rich table."""
    table = Table(title=f"Clauses — {filename}", show_lines=True)
    table.add_column("ID", justify="right", width=10)
    table.add_column("Type", style="cyan", width=20)
    table.add_column("Text (excerpt)", style="white", max_width=60)
    table.add_column("Score", justify="center", width=6)
    table.add_column("Conf.", justify="center", width=6)
    table.add_column("Risk", justify="center", width=8)

    for clause in clauses:
        risk_text = Text(clause.risk_level.value.upper(), style=_get_risk_style(clause.risk_level))
        excerpt = clause.text[:120] + ("..." if len(clause.text) > 120 else "")

        table.add_row(
            clause.clause_id,
            clause.clause_type,
            excerpt,
            str(clause.risk_score),
            f"{clause.confidence}%",
            risk_text,
        )

    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
