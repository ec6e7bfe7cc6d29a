#!/usr/bin/env python3
"""loggen — Entry Point."""

import argparse
import logging
import signal
import sys

from loggen import __version__
from loggen.config import load_yaml_config, load_config, validate
from loggen.scheduler import Scheduler, SetupError
from loggen.strategy import WrapStrategy

logger = logging.getLogger(__name__)


def non_negative_int(value: str) -> int:
    if not value.isdigit():
        raise argparse.ArgumentTypeError(f"{value} isn't a positive number")
    return int(value)


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loggen",
        description="Generates log lines from a folder structure of samples",
    )
    parser.add_argument(
        "-i", "--in-base-dir", dest="in_base_dir", metavar="DIR",
        help="Input base directory",
    )
    parser.add_argument(
        "-o", "--out-base-dir", dest="out_base_dir", metavar="DIR",
        help="Output base directory",
    )
    parser.add_argument(
        "-t", "--interval", dest="interval_ms", metavar="MS", type=non_negative_int,
        help="Time in milliseconds between reads (default: 250)",
    )
    parser.add_argument(
        "-p", "--parallelism", dest="parallelism", metavar="COUNT", type=non_negative_int,
        help="Number of parallel generators (default: 0 = number of CPUs)",
    )
    parser.add_argument(
        "-s", "--strategy", dest="strategy",
        choices=[s.value for s in WrapStrategy],
        help="What to do with an output file when its sample is exhausted (default: append)",
    )
    parser.add_argument(
        "-c", "--config", default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--no-sort", dest="sort_paths", action="store_const", const=False, default=None,
        help="Assign files to workers in raw directory-walk order instead of sorted order",
    )
    parser.add_argument(
        "--log-level", dest="log_level", type=str.upper,
        help="Internal logging level (default: INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _install_signal_handlers(scheduler: Scheduler):
    def _signal_handler(sig, _frame):
        logger.info("Shutdown signal received (signal %d), stopping...", sig)
        scheduler.stop_event.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)
    # Die quietly when whoever reads our output goes away.
    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal.SIG_DFL)


def main(argv: list[str] | None = None) -> int:
    args = build_cli_parser().parse_args(argv)

    # Internal logging to stderr (separate from generated log output)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [LOGGEN] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args, load_yaml_config(args.config))
        validate(config)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    logging.getLogger().setLevel(config.log_level)

    scheduler = Scheduler(config)
    _install_signal_handlers(scheduler)

    try:
        scheduler.start()
    except SetupError as e:
        logger.error("Error: %s", e)
        return 1

    failed = scheduler.wait()
    logger.info("loggen stopped (%d worker failure(s))", len(failed))
    return 0


if __name__ == "__main__":
    sys.exit(main())
