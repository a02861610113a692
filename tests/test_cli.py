"""Tests for the command-line interface.

**Feature: trade-journal**
"""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from tradejournal.cli.main import LAZY_SUBCOMMANDS, cli


@pytest.fixture
def runner():
    """CLI runner with config pointing at a temporary database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = {
            "user": {"id": "cli-tester"},
            "database": {"path": str(Path(tmpdir) / "journal.db")},
            "summarizer": {"enabled": False},
        }
        with patch("tradejournal.config.load_config", return_value=config):
            yield CliRunner()


def _log_trades(runner: CliRunner, count: int) -> None:
    for i in range(count):
        outcome = "win" if i % 2 else "loss"
        pnl = "12.5" if outcome == "win" else "-8"
        result = runner.invoke(
            cli,
            ["log", "EURUSD", "buy", "1.0850", "--volume", "0.1", "--outcome", outcome, "--pnl", pnl],
        )
        assert result.exit_code == 0, result.output


class TestCommandDiscovery:
    """Tests for lazy command loading."""

    def test_help_lists_all_commands(self, runner: CliRunner):
        """Every lazy command appears in the help text."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in LAZY_SUBCOMMANDS:
            assert name in result.output

    @pytest.mark.parametrize("name", sorted(LAZY_SUBCOMMANDS))
    def test_each_command_loads(self, runner: CliRunner, name: str):
        """Each command module resolves and shows its own help."""
        result = runner.invoke(cli, [name, "--help"])

        assert result.exit_code == 0, result.output

    def test_unknown_command(self, runner: CliRunner):
        """Unknown commands are a usage error."""
        result = runner.invoke(cli, ["scan"])

        assert result.exit_code != 0


class TestJournalCommands:
    """Tests for log, trades, delete-last and checkin."""

    def test_log_and_list(self, runner: CliRunner):
        """A logged trade shows up in the trade list."""
        logged = runner.invoke(cli, ["log", "gbpjpy", "sell", "191.2", "--volume", "0.5"])
        listed = runner.invoke(cli, ["trades"])

        assert logged.exit_code == 0
        assert "GBPJPY" in logged.output
        assert "GBPJPY" in listed.output
        assert "Total Trades: 1" in listed.output

    def test_invalid_trade_fails(self, runner: CliRunner):
        """Validation errors are shown and exit with status 1."""
        result = runner.invoke(cli, ["log", "EURUSD", "buy", "1.08", "--volume", "-1"])

        assert result.exit_code == 1
        assert "Trade Not Saved" in result.output

    def test_empty_journal(self, runner: CliRunner):
        """An empty journal says so."""
        result = runner.invoke(cli, ["trades"])

        assert "No trades found" in result.output

    def test_delete_last(self, runner: CliRunner):
        """The newest trade is removed after confirmation."""
        _log_trades(runner, 2)

        result = runner.invoke(cli, ["delete-last", "--yes"])
        listed = runner.invoke(cli, ["trades"])

        assert "Deleted trade" in result.output
        assert "Total Trades: 1" in listed.output

    def test_checkin_rejects_out_of_range(self, runner: CliRunner):
        """Scores outside 1-10 are rejected by the option parser."""
        result = runner.invoke(cli, ["checkin", "--confidence", "11", "--stress", "3", "--sleep", "7"])

        assert result.exit_code == 2


class TestInsightCommands:
    """Tests for behavior, patterns, risk and correlations."""

    def test_behavior_without_trades(self, runner: CliRunner):
        """No recent trades means nothing to analyze."""
        result = runner.invoke(cli, ["behavior"])

        assert result.exit_code == 0
        assert "No recent trades to analyze" in result.output

    def test_behavior_with_calm_trades(self, runner: CliRunner):
        """Equal-sized trades raise no findings."""
        _log_trades(runner, 2)

        result = runner.invoke(cli, ["behavior"])

        assert "No risky behavior detected" in result.output

    def test_patterns_need_five_trades(self, runner: CliRunner):
        """Too little history is reported with counts."""
        _log_trades(runner, 3)

        result = runner.invoke(cli, ["patterns"])

        assert result.exit_code == 1
        assert "Need at least 5 trades, found 3" in result.output

    def test_patterns_offline(self, runner: CliRunner):
        """Offline analysis prints the tables and patterns."""
        _log_trades(runner, 6)

        result = runner.invoke(cli, ["patterns", "--offline"])

        assert result.exit_code == 0, result.output
        assert "EURUSD" in result.output
        assert "offline analysis" in result.output

    def test_risk_after_good_checkin(self, runner: CliRunner):
        """A good check-in with no losses is low risk."""
        checkin = runner.invoke(
            cli, ["checkin", "--confidence", "8", "--stress", "2", "--sleep", "8", "--mood", "good"]
        )
        result = runner.invoke(cli, ["risk"])

        assert checkin.exit_code == 0
        assert "LOW RISK" in result.output

    def test_risk_without_checkin(self, runner: CliRunner):
        """No check-in is medium risk."""
        result = runner.invoke(cli, ["risk"])

        assert "MEDIUM RISK" in result.output

    def test_correlations_without_history(self, runner: CliRunner):
        """Without history the command explains what is missing."""
        result = runner.invoke(cli, ["correlations"])

        assert result.exit_code == 0
        assert "Not enough history yet" in result.output
