"""
CLI Application - Entry point for the git partition sync producer.

Usage:
    # Show what would change (default)
    gitpartsync

    # Apply changes once
    gitpartsync --no-dry-run

    # Reconcile forever, sleeping RECONCILE_SLEEP_TIME between cycles
    gitpartsync --no-dry-run --no-run-once
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Optional

from ..adapters.archive import GitArchiveMaterializer
from ..adapters.config import EnvironmentConfigProvider
from ..adapters.gitlab import GitLabAdapter
from ..adapters.graphql import GraphQLDesiredStateAdapter
from ..adapters.s3 import S3ObjectStore
from ..application.context import CycleContext
from ..application.sync import ChangeDetector, SyncOrchestrator
from ..core.exceptions import ConfigurationError, GitPartSyncError
from ..core.ports.config_provider import AppConfig
from .exit_codes import ExitCode
from .output import Console


logger = logging.getLogger("gitpartsync")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )
    for noisy in ("boto3", "botocore", "s3transfer", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitpartsync",
        description="Keep an S3 bucket of encrypted repository archives in sync with desired state",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--dry-run",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Only print planned actions (default: true)"
    )

    parser.add_argument(
        "--run-once",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Exit after a single cycle (default: true)"
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        help="Path to a .env file with configuration"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser


def build_orchestrator(config: AppConfig) -> SyncOrchestrator:
    """Wire adapters into an orchestrator."""
    git_host = GitLabAdapter(config.gitlab)
    return SyncOrchestrator(
        feed=GraphQLDesiredStateAdapter(config.graphql),
        git_host=git_host,
        store=S3ObjectStore(config.storage),
        materializer=GitArchiveMaterializer(git_host, config.pipeline.public_key),
        config=config.pipeline,
    )


def pr_check_can_exit(config: AppConfig, detector: Optional[ChangeDetector] = None) -> bool:
    """
    Compare the previous bundle with the current one.

    Returns:
        True when neither the sync targets nor this producer's own
        deployment changed, so the run can be skipped
    """
    if detector is None:
        feed = GraphQLDesiredStateAdapter(config.graphql, query_file=config.pr_check.query_file)
        detector = ChangeDetector(feed, saas_name=config.pr_check.saas_name)
    return detector.unchanged(config.pr_check.previous_bundle_sha)


def run_cycle(
    orchestrator: SyncOrchestrator,
    config: AppConfig,
    console: Console,
) -> ExitCode:
    """
    Run one reconciliation cycle and report it.

    Raises:
        ConfigurationError: If desired state is unusable
    """
    start = time.monotonic()
    try:
        result = orchestrator.run_cycle(
            dry_run=config.dry_run,
            context=CycleContext(timeout=config.pipeline.cycle_timeout),
        )
    except ConfigurationError:
        raise
    except GitPartSyncError as e:
        logger.error(f"Reconciliation failed: {e}")
        return ExitCode.SYNC_FAILED

    if result.dry_run:
        console.dry_run_banner()
        console.planned_actions(result.planned)
    console.sync_result(result)

    logger.info(f"Cycle finished in {time.monotonic() - start:.1f}s")
    return ExitCode.SUCCESS if result.success else ExitCode.SYNC_FAILED


def run(
    config: AppConfig,
    console: Optional[Console] = None,
    orchestrator: Optional[SyncOrchestrator] = None,
    detector: Optional[ChangeDetector] = None,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: Optional[int] = None,
) -> ExitCode:
    """Run the producer with a loaded configuration."""
    console = console or Console(verbose=config.verbose)

    if config.pr_check.enabled:
        try:
            if pr_check_can_exit(config, detector):
                logger.info("Relevant config is the same. Exiting early")
                return ExitCode.SUCCESS
        except GitPartSyncError as e:
            logger.error(f"PR check failed: {e}")
            return ExitCode.CONFIG_ERROR

    orchestrator = orchestrator or build_orchestrator(config)
    logger.info(
        f"Starting {'dry-run ' if config.dry_run else ''}reconciliation "
        f"for shard {config.instance_shard}"
    )

    cycles = 0
    while True:
        try:
            status = run_cycle(orchestrator, config, console)
        except ConfigurationError as e:
            logger.error(f"Invalid desired state: {e}")
            return ExitCode.CONFIG_ERROR

        cycles += 1
        if config.run_once or (max_cycles is not None and cycles >= max_cycles):
            return status

        logger.info(f"Sleeping {config.reconcile_interval:g}s until next cycle")
        sleep(config.reconcile_interval)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    provider = EnvironmentConfigProvider(
        env_file=args.env_file,
        cli_overrides={
            "dry_run": args.dry_run,
            "run_once": args.run_once,
            "verbose": args.verbose or None,
        },
    )

    errors = provider.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return ExitCode.CONFIG_ERROR

    try:
        config = provider.load()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return ExitCode.CONFIG_ERROR

    try:
        return run(config)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return ExitCode.INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
