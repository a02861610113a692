"""Insight commands for the trade journal CLI.

Runs behavior detection, pattern analysis, the pre-trade risk check and
mental-state correlations, and renders the results.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tradejournal import config as settings
from tradejournal.tools import analysis as analysis_tools

console = Console()

SEVERITY_COLORS = {"low": "yellow", "medium": "yellow", "high": "red"}
RISK_COLORS = {"low": "green", "medium": "yellow", "high": "red"}

BEHAVIOR_TITLES = {
    "revenge_trading": "Revenge Trading",
    "overtrading": "Overtrading",
    "lot_size_escalation": "Lot-Size Escalation",
}


def _context() -> tuple[Optional[dict], str, Path]:
    """Return (config, user_id, db_path), using defaults if no config exists."""
    config = settings.load_config()
    return config, settings.get_user_id(config), settings.get_db_path(config)


def _fail(message: str, title: str = "Error") -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def _get_summarizer(config: Optional[dict]):
    """Build the hosted summarizer, or None to run offline.

    Returns None when disabled in config, when no OpenAI key is set, or
    when the Agents SDK is not installed.
    """
    if not settings.summarizer_enabled(config):
        return None
    api_key = settings.get_openai_key(config)
    if not api_key:
        return None
    try:
        from tradejournal.agents.summarizer import PatternSummarizerAgent
    except ImportError as e:
        console.print(f"[dim]Agent SDK not available ({e}); using offline analysis.[/dim]")
        return None
    return PatternSummarizerAgent(
        model=settings.get_openai_model(config),
        timeout=settings.summarizer_timeout(config),
        api_key=api_key,
    )


def _format_rate(value: Optional[float]) -> str:
    return f"{value:.0f}% win rate" if value is not None else "[dim]No data[/dim]"


@click.command()
def behavior() -> None:
    """Scan the last 24 hours for risky trading behavior.

    Flags revenge trading (a bigger trade within 15 minutes of a loss),
    overtrading (more than 10 trades in 2 hours) and lot-size
    escalation over the last three trades. Findings are saved to the
    journal.

    \b
    Examples:
      tradejournal behavior
    """
    _, user_id, db_path = _context()
    result = analysis_tools.analyze_behavior(user_id, db_path=db_path)
    if result["error"]:
        _fail(result["error"])

    if result["message"]:
        console.print(Panel(
            f"[dim]{result['message']}[/dim]",
            title="[bold]Behavior Check[/bold]",
            border_style="dim",
        ))
        return

    if not result["behaviors"]:
        console.print(Panel(
            f"[green]No risky behavior detected[/green] across "
            f"{result['trades_analyzed']} recent trades.",
            title="[bold green]Behavior Check[/bold green]",
            border_style="green",
        ))
        return

    for finding in result["behaviors"]:
        color = SEVERITY_COLORS[finding["severity"]]
        trade_ids = ", ".join(f"#{i}" for i in finding["trade_sequence"])
        console.print(Panel(
            f"{finding['ai_recommendation']}\n\n"
            f"[dim]Trades: {trade_ids or '-'}[/dim]",
            title=(
                f"[bold {color}]{BEHAVIOR_TITLES[finding['behavior_type']]} "
                f"({finding['severity'].upper()})[/bold {color}]"
            ),
            border_style=color,
        ))
    console.print(f"[dim]{result['trades_analyzed']} trades analyzed.[/dim]")


@click.command()
@click.option("--offline", is_flag=True, help="Skip the AI summarizer.")
def patterns(offline: bool) -> None:
    """Find your best pairs, weekdays and sessions over 90 days.

    Needs at least 5 trades. Uses the AI summarizer when an OpenAI key
    is configured, otherwise derives patterns locally.

    \b
    Examples:
      tradejournal patterns
      tradejournal patterns --offline
    """
    config, user_id, db_path = _context()
    summarizer = None if offline else _get_summarizer(config)

    if summarizer is not None:
        console.print("[dim]Generating AI pattern analysis...[/dim]")

    result = analysis_tools.analyze_patterns(user_id, summarizer=summarizer, db_path=db_path)
    if result["error"]:
        title = "Not Enough Data" if "required" in result else "Error"
        _fail(result["error"], title=title)

    for name, key, label in (
        ("Pairs", "pairs", "pair"),
        ("Weekdays", "days", "day"),
        ("Sessions", "sessions", "session"),
    ):
        rows = result["aggregates"][key]
        table = Table(title=name, show_header=True, header_style="bold cyan")
        table.add_column(label.title(), style="bold")
        table.add_column("Win Rate", justify="right")
        table.add_column("Trades", justify="right")
        if key == "pairs":
            table.add_column("P&L", justify="right")
        for row in rows:
            cells = [row[label], f"{row['win_rate']:.1f}%", str(row["total_trades"])]
            if key == "pairs":
                cells.append(f"{row['total_pnl']:.2f}")
            table.add_row(*cells)
        console.print(table)

    source = "AI summarizer" if result["source"] == "summarizer" else "offline analysis"
    for pattern in result["patterns"]:
        console.print(Panel(
            f"{pattern['description']}\n\n"
            f"Win rate: {pattern['win_rate']:.1f}%  |  "
            f"Sample: {pattern['sample_size']}  |  "
            f"Confidence: {pattern['confidence_score']:.0f}\n"
            f"[cyan]{pattern['recommendations']}[/cyan]",
            title=f"[bold]{pattern['pattern_type'].replace('_', ' ').title()}[/bold]",
            border_style="cyan",
        ))
    console.print(
        f"[dim]{result['trades_analyzed']} trades analyzed via {source}.[/dim]"
    )


@click.command()
def risk() -> None:
    """Check pre-trade risk from today's check-in and recent losses.

    \b
    Examples:
      tradejournal risk
    """
    _, user_id, db_path = _context()
    result = analysis_tools.pre_trade_risk(user_id, db_path=db_path)

    level = result["risk_level"]
    color = RISK_COLORS[level]
    lines = [result["message"]]

    today = result["today"]
    if today:
        lines.append(
            f"\n[bold]Today's State[/bold]\n"
            f"Confidence: {today['confidence']}/10\n"
            f"Sleep:      {today['sleep_hours']}h\n"
            f"Stress:     {today['stress']}/10"
        )
    lines.append(f"\nLosses in the last 2 hours: {result['recent_losses']}")

    historical = result["historical"]
    if historical:
        lines.append(
            f"\n[bold]Similar Days[/bold]\n"
            f"Win rate: {historical['win_rate']}%  |  "
            f"Avg P&L: {historical['avg_pnl']}  |  "
            f"Trades: {historical['sample_size']}"
        )

    console.print(Panel(
        "\n".join(lines),
        title=f"[bold {color}]{level.upper()} RISK[/bold {color}]",
        border_style=color,
    ))


@click.command()
def correlations() -> None:
    """Show how confidence, sleep and stress relate to your win rate.

    \b
    Examples:
      tradejournal correlations
    """
    _, user_id, db_path = _context()
    result = analysis_tools.checkin_correlations(user_id, db_path=db_path)
    if result["error"]:
        _fail(result["error"])

    data = result["correlations"]
    if data is None:
        console.print(Panel(
            "[dim]Not enough history yet. Check in on days you trade to build "
            "correlations.[/dim]",
            title="[bold]Mental State Correlations[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Mental State Correlations", show_header=True, header_style="bold cyan")
    table.add_column("Condition", style="bold")
    table.add_column("Avg Daily Win Rate", justify="right")

    table.add_row("High confidence (7-10)", _format_rate(data["confidence"]["high"]))
    table.add_row("Medium confidence (4-6)", _format_rate(data["confidence"]["medium"]))
    table.add_row("Low confidence (1-3)", _format_rate(data["confidence"]["low"]))
    table.add_row("Good sleep (7+ hrs)", _format_rate(data["sleep"]["good"]))
    table.add_row("Poor sleep (<6 hrs)", _format_rate(data["sleep"]["poor"]))
    table.add_row("Low stress (1-4)", _format_rate(data["stress"]["low"]))
    table.add_row("High stress (7-10)", _format_rate(data["stress"]["high"]))

    console.print(table)
    console.print(
        f"[dim]{data['matched_days']} matched days from {result['checkins']} check-ins "
        f"and {result['trades']} trades.[/dim]"
    )
