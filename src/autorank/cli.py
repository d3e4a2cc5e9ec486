#!/usr/bin/env python
"""Run a bulk catalog upload from the command line.

Usage:
    autorank-run (--csv path/to/data.csv | --sheet-url URL) \
        --username USER [--password PASS] \
        [--batch-size 500] \
        [--mode simulated|real] \
        [--scenario SUCCESS|ERROR_VPN|ERROR_AUTH|ERROR_UPLOAD] \
        [--env PROD|STAGING] \
        [--delay SECONDS] \
        [--dry-run]

Examples:
    # Simulated run of a local CSV file
    autorank-run --csv catalog.csv --username jdoe --password secret

    # Real browser session against the portal, password from AUTORANK_PASSWORD
    AUTORANK_PASSWORD=... autorank-run --sheet-url https://docs.google.com/... \
        --username jdoe --mode real

Ctrl+C requests a stop: the job finishes the batch in progress and pauses.
"""

import argparse
import asyncio
import getpass
import os
import signal
import sys
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from autorank.config import Settings, get_settings
from autorank.core.exceptions import AppException, DataSourceError
from autorank.core.logging import get_logger, setup_logging
from autorank.core.security import describe_config
from autorank.data.batching import count_batches
from autorank.data.records import parse_records
from autorank.executors.registry import ExecutorRegistry
from autorank.jobs.cancellation import CancellationToken
from autorank.jobs.models import ExecutionMode, JobConfig, JobStatus, SimulationScenario
from autorank.jobs.observers import LoggingObserver
from autorank.jobs.orchestrator import JobOrchestrator
from autorank.services.data_service import DataService

logger = get_logger(__name__)

PASSWORD_ENV_VAR = "AUTORANK_PASSWORD"

EXIT_CODES = {
    JobStatus.COMPLETED: 0,
    JobStatus.FAILED: 1,
    JobStatus.PAUSED: 130,
}
EXIT_PRECONDITION = 2


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="autorank-run",
        description="Upload catalog data to the Rank 2 portal in batches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", help="Path to a CSV file (header row first)")
    source.add_argument("--sheet-url", help="Google Sheet sharing URL")

    parser.add_argument("--username", default="", help="Portal login")
    parser.add_argument(
        "--password",
        default=None,
        help=f"Portal password (default: ${PASSWORD_ENV_VAR}, then prompt)",
    )
    parser.add_argument(
        "--batch-size",
        type=positive_int,
        default=None,
        help="Records per upload (default: DEFAULT_BATCH_SIZE setting, 500)",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ExecutionMode],
        default=ExecutionMode.SIMULATED.value,
        help="simulated (default) or real browser automation",
    )
    parser.add_argument(
        "--scenario",
        choices=[s.value for s in SimulationScenario],
        default=SimulationScenario.SUCCESS.value,
        help="Fault to inject in simulated mode",
    )
    parser.add_argument(
        "--env", choices=["PROD", "STAGING"], default="PROD", help="Target environment"
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to wait between batches (default: INTER_BATCH_DELAY_SECONDS setting)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and batch the data, then exit without logging in",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def resolve_password(args: argparse.Namespace) -> str:
    """Password from the flag, the environment, or an interactive prompt."""
    if args.password is not None:
        return args.password
    from_env = os.environ.get(PASSWORD_ENV_VAR)
    if from_env:
        return from_env
    if sys.stdin.isatty():
        return getpass.getpass("Portal password: ")
    return ""


async def load_csv_text(args: argparse.Namespace, settings: Settings) -> str:
    """Read the CSV file or download the sheet."""
    if args.csv:
        csv_file = Path(args.csv)
        if not csv_file.exists():
            raise DataSourceError(f"CSV file not found: {args.csv}")
        return csv_file.read_text(encoding="utf-8")

    sheet = await DataService(settings).load_sheet(args.sheet_url)
    for warning in sheet.warnings:
        logger.warning(warning)
    return sheet.csv_text


def _register_signal_handlers(token: CancellationToken) -> dict[int, Any]:
    """Turn SIGINT/SIGTERM into a cooperative stop request.

    Returns:
        dict[int, Any]: Previous handlers, to restore once the job is over.
    """
    loop = asyncio.get_running_loop()

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.warning(f"Received signal {signum}, stopping after the current batch...")
        loop.call_soon_threadsafe(token.cancel, "Job stopped by user.")

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, signal_handler)
    return previous


async def run_job(args: argparse.Namespace, settings: Settings | None = None) -> int:
    """Run one job to a terminal state.

    Returns:
        int: Process exit code.
    """
    settings = settings or get_settings()
    if args.delay is not None:
        settings = settings.model_copy(update={"inter_batch_delay_seconds": args.delay})

    config = JobConfig(
        username=args.username,
        password=SecretStr(resolve_password(args)),
        batch_size=(
            args.batch_size if args.batch_size is not None else settings.default_batch_size
        ),
        target_env=args.env,
        mode=ExecutionMode(args.mode),
        scenario=SimulationScenario(args.scenario),
    )
    logger.info(f"Job configuration: {describe_config(config)}")

    try:
        records = parse_records(await load_csv_text(args, settings))
    except DataSourceError as e:
        logger.error(f"Could not load data: {e.message}")
        return EXIT_PRECONDITION

    if args.dry_run:
        batches = count_batches(len(records), config.batch_size)
        logger.info(f"Dry run: {len(records)} records, {batches} batch(es); nothing uploaded")
        return 0

    orchestrator = JobOrchestrator(settings, observers=[LoggingObserver()])
    executor = ExecutorRegistry().create(config, settings)
    token = CancellationToken()
    previous_handlers = _register_signal_handlers(token)

    try:
        status = await orchestrator.execute(config, records, executor, token)
    except AppException as e:
        logger.error(f"Cannot start job: {e.message}")
        return EXIT_PRECONDITION
    finally:
        await executor.aclose()
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)

    stats = orchestrator.stats
    logger.info(
        f"Finished with status {status.value}: {stats.success_count} uploaded, "
        f"{stats.error_count} failed, {stats.batches_completed}/{stats.batches_total} batches"
    )
    return EXIT_CODES[status]


def main(argv: list[str] | None = None) -> int:
    """Entry point returning the exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return asyncio.run(run_job(args))


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
