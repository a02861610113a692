"""Journal commands for the trade journal CLI.

Handles trade logging, trade history, deleting the last trade and the
daily mental-state check-in.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tradejournal import config as settings
from tradejournal.tools import journal as journal_tools

console = Console()

OUTCOMES = ["open", "win", "loss", "breakeven"]
MOODS = ["great", "good", "neutral", "anxious", "stressed", "tired"]


def _context() -> tuple[str, Path]:
    """Return (user_id, db_path) from config, using defaults if absent."""
    config = settings.load_config()
    return settings.get_user_id(config), settings.get_db_path(config)


def _fail(message: str, title: str = "Error") -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def _format_pnl(pnl: Optional[float]) -> str:
    if pnl is None:
        return "-"
    color = "green" if pnl >= 0 else "red"
    sign = "+" if pnl >= 0 else ""
    return f"[{color}]{sign}{pnl:.2f}[/{color}]"


@click.command()
def init() -> None:
    """Create a config file with default settings.

    \b
    Examples:
      tradejournal init
    """
    existed = settings.CONFIG_PATH.exists()
    path = settings.write_default_config()
    if existed:
        console.print(f"[dim]Config already exists at[/dim] [cyan]{path}[/cyan]")
    else:
        console.print(f"[green]Created config at[/green] [cyan]{path}[/cyan]")


@click.command()
@click.argument("pair")
@click.argument("direction", type=click.Choice(["buy", "sell"], case_sensitive=False))
@click.argument("entry_price", type=float)
@click.option("--exit", "exit_price", type=float, default=None, help="Exit price.")
@click.option("--sl", "stop_loss", type=float, default=None, help="Stop-loss level.")
@click.option("--tp", "take_profit", type=float, default=None, help="Take-profit level.")
@click.option("--volume", type=float, default=None, help="Position size in lots.")
@click.option("--pnl", "profit_loss", type=float, default=None, help="Realized profit/loss.")
@click.option(
    "--outcome",
    type=click.Choice(OUTCOMES, case_sensitive=False),
    default="open",
    show_default=True,
    help="Trade outcome.",
)
@click.option("--emotion-before", default=None, help="How you felt before entry.")
@click.option("--emotion-after", default=None, help="How you felt after exit.")
@click.option("--session", default=None, help="Session tag.")
@click.option("--notes", default=None, help="Free-text notes.")
@click.option("--ticket", "broker_ticket", default=None, help="Broker ticket; updates a matching trade.")
def log(
    pair: str,
    direction: str,
    entry_price: float,
    exit_price: Optional[float],
    stop_loss: Optional[float],
    take_profit: Optional[float],
    volume: Optional[float],
    profit_loss: Optional[float],
    outcome: str,
    emotion_before: Optional[str],
    emotion_after: Optional[str],
    session: Optional[str],
    notes: Optional[str],
    broker_ticket: Optional[str],
) -> None:
    """Log a trade to the journal.

    \b
    Examples:
      tradejournal log EURUSD buy 1.0850 --volume 0.1
      tradejournal log GBPJPY sell 191.20 --exit 190.80 --pnl 42.5 --outcome win
    """
    user_id, db_path = _context()
    result = journal_tools.log_trade(
        user_id=user_id,
        pair=pair,
        direction=direction,
        entry_price=entry_price,
        exit_price=exit_price,
        stop_loss=stop_loss,
        take_profit=take_profit,
        volume=volume,
        profit_loss=profit_loss,
        outcome=outcome,
        emotion_before=emotion_before,
        emotion_after=emotion_after,
        session=session,
        notes=notes,
        broker_ticket=broker_ticket,
        db_path=db_path,
    )
    if result["error"]:
        _fail(result["error"], title="Trade Not Saved")

    trade = result["trade"]
    console.print(
        f"[green]Logged trade #{result['id']}:[/green] {trade['pair']} "
        f"{trade['direction'].upper()} @ {trade['entry_price']} ({trade['outcome']})"
    )


@click.command()
@click.option(
    "--days",
    type=int,
    default=None,
    help="Number of days of history to show.",
)
@click.option("--pair", default=None, help="Only show this pair.")
def trades(days: Optional[int], pair: Optional[str]) -> None:
    """Display journaled trades, newest first.

    \b
    Examples:
      tradejournal trades           # All trades
      tradejournal trades --days 7  # Last 7 days
    """
    user_id, db_path = _context()
    result = journal_tools.get_trades(
        user_id, days=days, pair=pair.upper() if pair else None, db_path=db_path
    )
    if result["error"]:
        _fail(result["error"])

    if not result["trades"]:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title="[bold]Trade Journal[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title="Trade Journal",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date/Time", style="dim")
    table.add_column("Pair", style="bold")
    table.add_column("Side", justify="center")
    table.add_column("Volume", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("Outcome", justify="center")
    table.add_column("P&L", justify="right")

    for trade in result["trades"]:
        side_color = "green" if trade["direction"] == "buy" else "red"
        table.add_row(
            str(trade["id"]),
            trade["created_at"][:16].replace("T", " "),
            trade["pair"],
            f"[{side_color}]{trade['direction'].upper()}[/{side_color}]",
            f"{trade['volume']:.2f}" if trade["volume"] is not None else "-",
            f"{trade['entry_price']}",
            trade["outcome"],
            _format_pnl(trade["profit_loss"]),
        )

    console.print(table)
    console.print(f"\n[bold]Total Trades:[/bold] {result['count']}")
    console.print(f"[bold]Total P&L:[/bold] {_format_pnl(result['total_pnl'])}")


@click.command(name="delete-last")
@click.confirmation_option(prompt="Delete your most recent trade?")
def delete_last() -> None:
    """Delete the most recently logged trade.

    \b
    Examples:
      tradejournal delete-last --yes
    """
    user_id, db_path = _context()
    result = journal_tools.delete_last_trade(user_id, db_path=db_path)
    if result["error"]:
        _fail(result["error"])

    deleted = result["deleted"]
    if deleted is None:
        console.print("[dim]No trades to delete.[/dim]")
        return
    console.print(
        f"[yellow]Deleted trade #{deleted['id']}:[/yellow] {deleted['pair']} "
        f"{deleted['direction'].upper()} @ {deleted['entry_price']}"
    )


@click.command()
@click.option("--confidence", type=click.IntRange(1, 10), required=True, help="Confidence (1-10).")
@click.option("--stress", type=click.IntRange(1, 10), required=True, help="Stress (1-10).")
@click.option("--sleep", "sleep_hours", type=click.FloatRange(0, 24), required=True, help="Hours slept.")
@click.option("--focus", "focus_level", type=click.IntRange(1, 10), default=5, show_default=True, help="Focus (1-10).")
@click.option(
    "--mood",
    type=click.Choice(MOODS, case_sensitive=False),
    default="neutral",
    show_default=True,
    help="Current mood.",
)
@click.option("--note", default=None, help="Free-text note.")
def checkin(
    confidence: int,
    stress: int,
    sleep_hours: float,
    focus_level: int,
    mood: str,
    note: Optional[str],
) -> None:
    """Record today's mental-state check-in.

    Running it again the same day replaces the earlier check-in.

    \b
    Examples:
      tradejournal checkin --confidence 7 --stress 3 --sleep 7.5 --mood good
    """
    user_id, db_path = _context()
    result = journal_tools.save_checkin(
        user_id=user_id,
        confidence=confidence,
        stress=stress,
        sleep_hours=sleep_hours,
        mood=mood.lower(),
        focus_level=focus_level,
        note=note,
        db_path=db_path,
    )
    if result["error"]:
        _fail(result["error"], title="Check-in Not Saved")

    saved = result["checkin"]
    console.print(Panel(
        f"Mood:       {saved['mood']}\n"
        f"Confidence: {saved['confidence']}/10\n"
        f"Stress:     {saved['stress']}/10\n"
        f"Sleep:      {saved['sleep_hours']}h\n"
        f"Focus:      {saved['focus_level']}/10",
        title=f"[bold cyan]Check-in {saved['check_in_date']}[/bold cyan]",
        border_style="cyan",
    ))
