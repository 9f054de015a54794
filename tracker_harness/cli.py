"""Command-line interface for the health tracker harness.

Provides argument parsing and main entry point for running the harness
from the command line.
"""

import argparse
import sys
from typing import Optional

from tracker_harness.client import HarnessFatalError
from tracker_harness.config import DEFAULT_CONFIG_PATH, ConfigError, apply_overrides, load_config
from tracker_harness.reporters import CompositeReporter, ConsoleReporter, JsonReporter, Reporter
from tracker_harness.resources import RESOURCE_KEYS
from tracker_harness.runner import HarnessRunner

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_ERROR = 2


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="tracker-harness",
        description="Run the health tracker API verification pass against a backend",
    )

    parser.add_argument(
        "-c", "--config",
        default=None,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH} if present)",
    )

    parser.add_argument(
        "-u", "--base-url",
        metavar="URL",
        help="Backend base URL (overrides config and TRACKER_BASE_URL)",
    )

    parser.add_argument(
        "-t", "--timeout",
        type=float,
        metavar="SECONDS",
        help="Per-request timeout in seconds",
    )

    parser.add_argument(
        "-r", "--resources",
        metavar="LIST",
        help=f"Comma-separated resources to verify ({','.join(RESOURCE_KEYS)})",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress timing and per-step output, show only summary",
    )

    parser.add_argument(
        "-j", "--json-output",
        metavar="PATH",
        help="Write JSON results to file",
    )

    parser.add_argument(
        "--github-actions",
        action="store_true",
        help="Enable GitHub Actions output mode",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        default=None,
        help="Call GET /health before authenticating",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any step fails",
    )

    return parser.parse_args(argv)


def create_reporters(args: argparse.Namespace) -> list[Reporter]:
    """Create reporters based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        List of configured reporters
    """
    reporters: list[Reporter] = [ConsoleReporter(quiet=args.quiet)]

    if args.json_output or args.github_actions:
        reporters.append(JsonReporter(
            output_path=args.json_output,
            github_output=args.github_actions,
        ))

    return reporters


def parse_resources(filter_str: str) -> list[str]:
    """Parse a comma-separated resource list.

    Raises:
        ValueError: If a key is not a known resource
    """
    keys = [k.strip().lower() for k in filter_str.split(",") if k.strip()]
    unknown = [k for k in keys if k not in RESOURCE_KEYS]
    if unknown:
        raise ValueError(f"Unknown resource(s): {', '.join(unknown)}")
    if not keys:
        raise ValueError("No resources selected")
    return keys


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for a completed run (1 with --strict if any step
        failed), 2 for configuration errors or an aborted run
    """
    args = parse_args(argv)

    try:
        config = load_config(
            args.config or DEFAULT_CONFIG_PATH,
            required=args.config is not None,
        )
        config = apply_overrides(
            config,
            base_url=args.base_url,
            timeout=args.timeout,
            health_check=args.health_check,
        )
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    resource_keys = None
    if args.resources:
        try:
            resource_keys = parse_resources(args.resources)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return EXIT_ERROR

    reporters = create_reporters(args)
    if len(reporters) == 1:
        reporter = reporters[0]
    else:
        reporter = CompositeReporter(reporters)

    runner = HarnessRunner(config, reporter=reporter, resource_keys=resource_keys)
    try:
        result = runner.run()
    except HarnessFatalError as e:
        reporter.on_fatal(str(e), e.sections)
        return EXIT_ERROR

    if args.strict and result.has_failures:
        return EXIT_FAILURES
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
