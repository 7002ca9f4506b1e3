#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Entry point for the workstation initialisation run.

Handles argument parsing, logging setup and settings loading, then runs the
fixed step sequence and prints the summary. The exit code is 0 unless a fatal
precondition (privileges, package update/upgrade) failed.
"""

import argparse
import logging
import sys
from typing import List, Optional

from common.core_utils import setup_logging
from common.system_utils import get_ubuntu_codename
from workstation_init.config_loader import DEFAULT_CONFIG_FILE, load_app_settings
from workstation_init.host_tools import HostTools
from workstation_init.orchestrator import Orchestrator
from workstation_init.reporter import render_summary, write_report_json
from workstation_init.steps import build_default_steps

logger = logging.getLogger("workstation_init")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Basic initialisation & tuning for an Ubuntu-family workstation. Run with sudo."
    )
    parser.add_argument(
        "--config",
        "-c",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the YAML settings file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug output",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also append log lines to this file",
    )
    parser.add_argument(
        "--report-json",
        default=None,
        help="Write the run report as JSON to this path",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(
        log_level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )

    app_settings = load_app_settings(args.config, current_logger=logger)
    # Re-apply so the console carries the configured prefix and symbols.
    setup_logging(
        log_level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
        log_prefix=app_settings.log_prefix,
        symbols=app_settings.symbols,
    )

    codename = get_ubuntu_codename(
        app_settings.paths.os_release, app_settings, current_logger=logger
    )
    logger.info(f"Detected Ubuntu codename: {codename}")

    tools = HostTools.default()
    orchestrator = Orchestrator(
        app_settings,
        build_default_steps(tools),
        orchestrator_logger=logger,
    )
    report = orchestrator.run()

    print()
    print(render_summary(report))

    if args.report_json:
        path = write_report_json(report, args.report_json)
        logger.info(f"Run report written to {path}")

    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
