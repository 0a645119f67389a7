"""Tests for CLI commands."""

import json
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from timeslice.cli import EXIT_CANCELLED, main
from timeslice.models.reporting import RunSummary


@pytest.fixture
def no_wait(monkeypatch):
    """Make real-time waits return immediately."""
    monkeypatch.setattr(
        "timeslice.schedule.scheduler.EventWaiter.wait",
        lambda self, seconds, stop_event: stop_event.is_set(),
    )


@pytest.fixture
def small_config(tmp_path: Path) -> Path:
    path = tmp_path / "small.yaml"
    path.write_text(yaml.dump({
        "dry_run": {"price": "10", "balances": {"USDT": "30", "ETH": "1"}},
    }))
    return path


class TestCLI:
    def test_no_command_returns_1(self, capsys):
        assert main([]) == 1

    def test_config_show(self, capsys):
        assert main(["config", "show"]) == 0
        assert "dry-run" in capsys.readouterr().out

    def test_config_set(self, capsys):
        assert main(["config", "set", "schedule.quantum=5"]) == 0
        assert "Set schedule.quantum = 5" in capsys.readouterr().out

    def test_config_set_nested_balance(self, small_config, capsys):
        assert main(["--config", str(small_config), "config", "set", "dry_run.balances.ETH=3"]) == 0
        assert "Set dry_run.balances.ETH = 3" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "keyvalue", ["schedule.quantum=0", "nonexistent.key=1", "venue.nope=1"]
    )
    def test_config_set_invalid(self, keyvalue, capsys):
        assert main(["config", "set", keyvalue]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_config_set_requires_key_value(self, capsys):
        assert main(["config", "set", "schedule.quantum"]) == 1
        assert "key=value" in capsys.readouterr().out

    def test_plan_quantized(self, small_config, capsys):
        result = main([
            "--config", str(small_config), "plan",
            "--symbol", "ETHUSDT", "--duration", "1H", "--total-amount", "5",
        ])
        assert result == 0
        out = capsys.readouterr().out
        assert "QUANTIZED" in out
        assert "every 720s" in out

    def test_run_dry(self, small_config, no_wait, capsys):
        result = main([
            "--config", str(small_config), "run",
            "--symbol", "ETHUSDT", "--total-run-time", "10s", "--side", "buy",
        ])
        assert result == 0
        out = capsys.readouterr().out
        assert "Orders: 10 attempted, 10 succeeded, 0 failed" in out
        assert "PLAN_EXHAUSTED" in out

    def test_run_json(self, small_config, no_wait, capsys):
        result = main([
            "--config", str(small_config), "run", "--json",
            "--symbol", "ETHUSDT", "--duration", "5s", "--side", "SELL",
        ])
        assert result == 0
        data = json.loads(capsys.readouterr().out)
        assert data["side"] == "SELL"
        assert data["orders_succeeded"] == 5
        assert Decimal(data["initial_budget"]) == Decimal("10")

    def test_empty_plan_is_success(self, small_config, no_wait, capsys):
        result = main([
            "--config", str(small_config), "run",
            "--symbol", "ETHUSDT", "--duration", "1H", "--total-amount", "0.5",
        ])
        assert result == 0
        assert "EMPTY_PLAN" in capsys.readouterr().out

    def test_invalid_duration(self, capsys):
        assert main(["run", "--duration", "2h"]) == 1
        assert "Invalid duration format" in capsys.readouterr().out

    def test_invalid_side(self, capsys):
        assert main(["run", "--side", "HOLD"]) == 1
        assert "Invalid side" in capsys.readouterr().out

    def test_insufficient_funds(self, small_config, no_wait, capsys):
        result = main([
            "--config", str(small_config), "run",
            "--symbol", "ETHUSDT", "--total-amount", "31",
        ])
        assert result == 1
        assert "Errors: 1" in capsys.readouterr().out

    @pytest.mark.parametrize("command", ["run", "plan"])
    @pytest.mark.parametrize("amount", ["nan", "inf", "Infinity"])
    def test_non_finite_amount_rejected(self, command, amount, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([command, "--total-amount", amount])
        assert exc_info.value.code == 2
        assert "finite" in capsys.readouterr().err

    def test_unsupported_quote(self, capsys):
        assert main(["plan", "--symbol", "BTCEUR"]) == 1
        assert "Unsupported quote asset" in capsys.readouterr().out

    def test_live_without_credentials(self, monkeypatch, capsys):
        monkeypatch.delenv("BINANCE_API_KEY", raising=False)
        monkeypatch.delenv("BINANCE_SECRET_KEY", raising=False)
        assert main(["run", "--live"]) == 1
        assert "API key and secret key are required" in capsys.readouterr().out

    def test_cancelled_exit_code(self, monkeypatch, capsys):
        summary = RunSummary(
            run_id="abc", mode="dry-run", symbol="BTCUSDT", side="BUY",
            stop_reason="CANCELLED",
        )
        monkeypatch.setattr("timeslice.cli.ExecutionRunner.run", lambda self, request: summary)
        assert main(["run", "--duration", "1m"]) == EXIT_CANCELLED
