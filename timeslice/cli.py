"""CLI entry point for the time-sliced execution engine."""

import argparse
import logging
from decimal import Decimal, InvalidOperation

from timeslice.config.loader import get_config_value, load_config, set_config_value
from timeslice.config.schema import EngineConfig, ExecutionMode
from timeslice.models.reporting import StopReason
from timeslice.reporting.formatters import (
    format_plan_text,
    format_summary_json,
    format_summary_text,
)
from timeslice.runner import ExecutionRunner, build_venue
from timeslice.schedule.duration_parser import InvalidDurationFormat, parse_duration
from timeslice.schedule.planner import ExecutionRequest, PreflightError, normalize_side
from timeslice.venue.binance_client import BinanceClientError

EXIT_CANCELLED = 130


def _decimal(text: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {text!r}") from None
    if not value.is_finite():
        raise argparse.ArgumentTypeError(f"amount must be a finite number: {text!r}")
    return value


def _add_order_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--symbol", default=None, help="Trading pair symbol (e.g. BTCUSDT)")
    p.add_argument(
        "--total-run-time", "--duration", dest="duration", default=None,
        help="Total run time (e.g. 30m, 2H, 1D, 1W, 1M)",
    )
    p.add_argument(
        "--total-amount", type=_decimal, default=None,
        help="Total quote amount to use (default: full available balance)",
    )
    p.add_argument("--side", default="BUY", help="Order side: BUY or SELL")
    p.add_argument("--live", action="store_true", help="Trade against the live venue")
    p.add_argument("--api-key", default=None, help="Venue API key (or BINANCE_API_KEY)")
    p.add_argument(
        "--secret-key", default=None, help="Venue secret key (or BINANCE_SECRET_KEY)"
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="timeslice",
        description="Spread a quote-currency budget over time as market orders",
    )
    parser.add_argument("--config", default=None, help="Config YAML path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="Execute a time-sliced schedule")
    _add_order_args(run_p)
    run_p.add_argument("--json", action="store_true", help="Print the summary as JSON")

    plan_p = sub.add_parser("plan", help="Show the schedule without placing orders")
    _add_order_args(plan_p)

    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Validate a config override")
    set_p.add_argument("keyvalue", help="key=value (e.g. schedule.quantum=5)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    if args.command == "run":
        return _cmd_run(config, args)
    elif args.command == "plan":
        return _cmd_plan(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _prepare(config: EngineConfig, args) -> tuple[EngineConfig, ExecutionRunner, ExecutionRequest]:
    if args.live:
        config = config.model_copy(
            update={"execution": config.execution.model_copy(update={"mode": ExecutionMode.LIVE})}
        )
    request = ExecutionRequest(
        symbol=args.symbol or config.schedule.default_symbol,
        duration=parse_duration(args.duration or config.schedule.default_duration),
        side=normalize_side(args.side),
        total_amount=args.total_amount,
    )
    venue = build_venue(config, api_key=args.api_key, secret_key=args.secret_key)
    return config, ExecutionRunner(config, venue), request


def _cmd_run(config: EngineConfig, args) -> int:
    try:
        config, runner, request = _prepare(config, args)
    except (InvalidDurationFormat, PreflightError, BinanceClientError) as e:
        print(f"Error: {e}")
        return 1

    if config.execution.mode == ExecutionMode.LIVE:
        print("WARNING: Running in LIVE mode")
    summary = runner.run(request)

    if args.json:
        print(format_summary_json(summary))
    else:
        print(format_summary_text(summary))

    if summary.errors:
        return 1
    if summary.stop_reason == StopReason.CANCELLED:
        return EXIT_CANCELLED
    return 0


def _cmd_plan(config: EngineConfig, args) -> int:
    try:
        config, runner, request = _prepare(config, args)
        plan = runner.plan(request)
    except (InvalidDurationFormat, PreflightError, BinanceClientError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    print(format_plan_text(plan, request.symbol, config.venue.quote_asset))
    return 0


def _cmd_config(config: EngineConfig, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except (KeyError, TypeError, ValueError) as e:
            print(f"Error: {e}")
            return 1
    print("Use: config show | config set key=value")
    return 1
