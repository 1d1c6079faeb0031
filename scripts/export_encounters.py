import argparse
import logging
import signal
import threading
from pathlib import Path

from encounter_reports import config
from encounter_reports.client import JobClient
from encounter_reports.delivery import FileSystemDelivery
from encounter_reports.errors import JobTimeoutError
from encounter_reports.logger import configure_logging
from encounter_reports.orchestrator import ReportOrchestrator, ReportOutcome, ReportProgress
from encounter_reports.polling import CancellationToken, PollLoop


logger = logging.getLogger("export_encounters")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_TIMED_OUT = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export encounters as a PDF report.")
    parser.add_argument("encounter_ids", nargs="+", help="Encounter identifiers, in report order")
    parser.add_argument("--base-url", default=config.REPORT_API_BASE)
    parser.add_argument("--output-dir", type=Path, default=config.REPORT_OUTPUT_DIR)
    parser.add_argument("--interval", type=float, default=config.REPORT_POLL_INTERVAL, help="Seconds between polls")
    parser.add_argument("--max-attempts", type=int, default=config.REPORT_MAX_ATTEMPTS)
    parser.add_argument("--verbose", action="store_true")
    return parser


def _log_progress(progress: ReportProgress) -> None:
    if progress.attempts:
        logger.debug(f"{progress.phase.value}: attempt {progress.attempts}/{progress.max_attempts}")
    else:
        logger.debug(progress.phase.value)


def install_interrupt_handler(token: CancellationToken):
    """First Ctrl+C cancels the run; a second one raises KeyboardInterrupt."""

    def handle(signum, frame):
        signal.signal(signal.SIGINT, signal.default_int_handler)
        # Event.set() takes a lock the interrupted frame may be holding
        threading.Thread(target=token.cancel, daemon=True).start()

    return signal.signal(signal.SIGINT, handle)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    token = CancellationToken()
    previous_handler = install_interrupt_handler(token)
    try:
        with JobClient(args.base_url) as client:
            orchestrator = ReportOrchestrator(
                client,
                poll_loop=PollLoop(client, interval=args.interval, max_attempts=args.max_attempts),
                delivery=FileSystemDelivery(args.output_dir),
            )
            result = orchestrator.run(args.encounter_ids, on_progress=_log_progress, cancellation=token)
    except KeyboardInterrupt:
        logger.warning("Interrupted again; aborting")
        return EXIT_CANCELLED
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if result.ok:
        print(f"Saved {result.delivery.path.resolve()}")
        return EXIT_OK
    if result.outcome is ReportOutcome.CANCELLED:
        return EXIT_CANCELLED
    if isinstance(result.error, JobTimeoutError):
        return EXIT_TIMED_OUT
    return EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
