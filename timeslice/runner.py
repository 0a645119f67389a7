"""Execution runner: builds the venue, runs the scheduler, reports the result."""

import logging
import signal
import threading
import time
import uuid
from contextlib import contextmanager

from timeslice.config.loader import config_hash
from timeslice.config.schema import EngineConfig, ExecutionMode
from timeslice.models.execution import ExecutionPlan
from timeslice.models.reporting import RunResult, RunSummary
from timeslice.reporting.formatters import format_summary_text
from timeslice.reporting.run_summarizer import RunSummarizer
from timeslice.schedule.duration_parser import format_seconds
from timeslice.schedule.events import EventSink, FanOutEventSink, LoggingEventSink
from timeslice.schedule.planner import ExecutionRequest, PreflightError
from timeslice.schedule.scheduler import Scheduler, Waiter
from timeslice.venue.base import Venue
from timeslice.venue.binance_client import BinanceClient
from timeslice.venue.dry_run import DryRunVenue
from timeslice.venue.live_adapter import BinanceVenue

logger = logging.getLogger(__name__)


def build_venue(
    config: EngineConfig,
    api_key: str | None = None,
    secret_key: str | None = None,
) -> Venue:
    """Create the venue for the configured execution mode.

    Live mode raises BinanceClientError immediately when credentials are
    missing.
    """
    if config.execution.mode == ExecutionMode.LIVE:
        client = BinanceClient(
            api_key=api_key,
            secret_key=secret_key,
            base_url=config.venue.base_url,
            timeout=config.venue.timeout_seconds,
            recv_window_ms=config.venue.recv_window_ms,
        )
        return BinanceVenue(client)
    return DryRunVenue(
        price=config.dry_run.price,
        balances=config.dry_run.balances,
        fail_every=config.dry_run.fail_every,
    )


class ExecutionRunner:
    def __init__(
        self,
        config: EngineConfig,
        venue: Venue,
        sink: EventSink | None = None,
        waiter: Waiter | None = None,
    ):
        self.config = config
        self.venue = venue
        self.sink = sink
        self.waiter = waiter
        self.result: RunResult | None = None

    def _scheduler(self) -> Scheduler:
        log_sink = LoggingEventSink(quote_asset=self.config.venue.quote_asset)
        sink = FanOutEventSink(log_sink, self.sink) if self.sink else log_sink
        return Scheduler(
            self.venue,
            sink=sink,
            waiter=self.waiter,
            quote_asset=self.config.venue.quote_asset,
            quantum=self.config.schedule.quantum,
        )

    def plan(self, request: ExecutionRequest) -> ExecutionPlan:
        """Run pre-flight and build the plan without dispatching anything."""
        return self._scheduler().prepare(request)

    def run(self, request: ExecutionRequest) -> RunSummary:
        """Execute a full run. Fatal pre-flight errors are recorded, not raised."""
        start_time = time.monotonic()
        run_id = str(uuid.uuid4())
        summarizer = RunSummarizer(
            run_id, self.config.execution.mode.value, request.symbol, request.side.value
        )
        summarizer.record_duration_spec(request.duration)
        summarizer.record_config_hash(config_hash(self.config))

        logger.info(
            "Total run time: %s (%d seconds)",
            format_seconds(request.duration.total_seconds),
            request.duration.total_seconds,
        )

        scheduler = self._scheduler()
        try:
            with _stop_on_signals(scheduler):
                self.result = scheduler.execute(request)
            summarizer.record_result(self.result)
        except (PreflightError, ValueError) as e:
            logger.error("Run aborted: %s", e)
            summarizer.record_error(str(e))
        except Exception as e:
            logger.exception("Run failed")
            summarizer.record_error(str(e))

        summarizer.record_elapsed(time.monotonic() - start_time)
        summary = summarizer.finalize()
        logger.info("\n%s", format_summary_text(summary))
        return summary


@contextmanager
def _stop_on_signals(scheduler: Scheduler):
    """Route SIGINT/SIGTERM to Scheduler.stop() for the duration of a run."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _stop(signum: int, frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s, cancelling schedule...", sig_name)
        scheduler.stop()

    previous = {
        sig: signal.signal(sig, _stop) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
