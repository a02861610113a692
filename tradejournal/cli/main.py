"""Entry point for the ``tradejournal`` command.

Subcommand modules pull in pydantic models, the SQLite store and (for
``patterns``) the Agents SDK, so they are imported only when the
command that lives there is run.
"""

import importlib
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

console = Console()

# command name -> (module, attribute)
JOURNAL_COMMANDS = {
    "init": ("tradejournal.cli.journal", "init"),
    "log": ("tradejournal.cli.journal", "log"),
    "trades": ("tradejournal.cli.journal", "trades"),
    "delete-last": ("tradejournal.cli.journal", "delete_last"),
    "checkin": ("tradejournal.cli.journal", "checkin"),
}
INSIGHT_COMMANDS = {
    "behavior": ("tradejournal.cli.insights", "behavior"),
    "patterns": ("tradejournal.cli.insights", "patterns"),
    "risk": ("tradejournal.cli.insights", "risk"),
    "correlations": ("tradejournal.cli.insights", "correlations"),
}
LAZY_SUBCOMMANDS = {**JOURNAL_COMMANDS, **INSIGHT_COMMANDS}


class LazyGroup(click.Group):
    """Click group that resolves subcommands from import paths on demand."""

    def __init__(self, *args, lazy_subcommands: dict[str, tuple[str, str]] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*self.commands, *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = self.commands.get(cmd_name)
        if command is None and cmd_name in self.lazy_subcommands:
            command = self._import_command(cmd_name)
            self.add_command(command, cmd_name)
        return command

    def _import_command(self, cmd_name: str) -> click.Command:
        module_path, attr_name = self.lazy_subcommands[cmd_name]
        command = getattr(importlib.import_module(module_path), attr_name, None)
        if not isinstance(command, click.Command):
            raise click.ClickException(f"{module_path}.{attr_name} is not a command")
        return command

    def format_commands(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Show journal and insight commands under separate headings."""
        for title, names in (("Journal", JOURNAL_COMMANDS), ("Insights", INSIGHT_COMMANDS)):
            rows = []
            for name in names:
                command = self.get_command(ctx, name)
                rows.append((name, command.get_short_help_str(formatter.width)))
            with formatter.section(title):
                formatter.write_dl(rows)


@click.group(
    cls=LazyGroup,
    lazy_subcommands=LAZY_SUBCOMMANDS,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(package_name="tradejournal")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Trade Journal - log trades and catch bad trading behavior early.

    Record trades and daily mental-state check-ins, then let the
    journal flag revenge trading, overtrading and lot-size escalation,
    surface your best pairs, days and sessions, and rate the risk of
    trading right now.

    \b
    Quick Start:
      tradejournal checkin --confidence 7 --stress 3 --sleep 7.5
      tradejournal log EURUSD buy 1.0850 --volume 0.1
      tradejournal risk        # Pre-trade risk check
      tradejournal behavior    # Scan the last 24 hours
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.ensure_object(dict)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
