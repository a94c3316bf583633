#!/usr/bin/env python3
"""Command-line interface for apivisibility.

This module classifies operations against visibility rules from the shell:
- Configuration file loading with CLI mask overrides
- Eager mask checking (``--check``)
- Classification of named operations, a FastAPI app, or the demo app
- Text or Markdown reports

Example:
    >>> from apivisibility.cli import parse_arguments
    >>> args = parse_arguments(["--hidden", "User.Delete*", "--demo"])
"""

import argparse
import importlib
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

from apivisibility.core.constants import APIVISIBILITY_VERSION, ConfigKey, ErrorCode
from apivisibility.core.validators import ValidationError, validate_mask_list
from apivisibility.infrastructure.config_manager import (
    ApiConfiguration,
    ConfigError,
    ConfigManager,
    ConfigSource,
    set_global_config,
)
from apivisibility.infrastructure.logger import Logger, configure_logging
from apivisibility.reporting import ReportError, render_report
from apivisibility.rules.engine import MissingGroupNameError, VisibilityRuleEngine
from apivisibility.rules.patterns import InvalidPatternError, split_mask

DESCRIPTION = "apivisibility - classify API operations for catalogue visibility"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.error_code = error_code
        super().__init__(message)


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If argument combination is invalid
    """
    parser = argparse.ArgumentParser(
        prog="apivisibility",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Classify operations against a configuration file
  apivisibility --config appsettings.yaml -o User.GetUser -o WeatherForecast.GetWeatherForecast

  # Override the hidden list and report on the demo app
  apivisibility --hidden "User.*" --demo

  # Report on the routes of your own FastAPI app as Markdown
  apivisibility --config appsettings.yaml --app myservice.main:app --format markdown

  # Fail fast on masks that do not compile
  apivisibility --config appsettings.yaml --check
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {APIVISIBILITY_VERSION}",
    )

    # Configuration
    config_group = parser.add_argument_group("configuration")

    config_group.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML or JSON)",
    )

    config_group.add_argument(
        "--visible",
        metavar="MASK",
        nargs="+",
        help="Visible item masks, replacing VisibleItems from other sources",
    )

    config_group.add_argument(
        "--hidden",
        metavar="MASK",
        nargs="+",
        help="Hidden item masks, replacing HiddenItems from other sources",
    )

    config_group.add_argument(
        "--check",
        action="store_true",
        help="Compile every mask and exit",
    )

    # Operations to classify
    target_group = parser.add_argument_group("operations")

    target_group.add_argument(
        "-o",
        "--operation",
        metavar="GROUP[.OPERATION]",
        action="append",
        dest="operations",
        help="Operation to classify (can be specified multiple times)",
    )

    target_group.add_argument(
        "--app",
        metavar="MODULE:ATTR",
        help="Classify the routes of a FastAPI application",
    )

    target_group.add_argument(
        "--demo",
        action="store_true",
        help="Classify the routes of the bundled demo application",
    )

    # Output
    output_group = parser.add_argument_group("output options")

    output_group.add_argument(
        "--format",
        choices=["text", "markdown"],
        default="text",
        help="Report format (default: text)",
    )

    output_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Raises:
        CLIError: If validation fails
    """
    if args.app and args.demo:
        raise CLIError("--app and --demo cannot be combined")

    if not args.check and not (args.operations or args.app or args.demo):
        raise CLIError(
            "Nothing to classify: use --operation, --app, --demo or --check\n"
            "Use --help for usage information"
        )

    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}", ErrorCode.NOT_FOUND)

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    if args.app and ":" not in args.app:
        raise CLIError(f"--app must look like MODULE:ATTR, got: {args.app}")


def build_config_from_args(args: argparse.Namespace) -> dict:
    """
    Build the CLI-level configuration layer from arguments.

    Only masks given on the command line are set, so unspecified lists
    fall through to lower-precedence sources.
    """
    section = {}
    if args.visible is not None:
        section[ConfigKey.VISIBLE_ITEMS] = list(args.visible)
    if args.hidden is not None:
        section[ConfigKey.HIDDEN_ITEMS] = list(args.hidden)

    config: dict = {}
    if args.debug:
        config[ConfigKey.LOGGING] = {ConfigKey.LOG_LEVEL: "DEBUG"}
    if section:
        config[ConfigKey.SECTION] = section
    return config


def load_configuration(args: argparse.Namespace) -> ConfigManager:
    """
    Resolve configuration from file, environment and arguments.

    Raises:
        ConfigError: If the file cannot be loaded
    """
    manager = ConfigManager()
    if args.config:
        manager.load_file(args.config, ConfigSource.USER_CONFIG)
    manager.load_dict(build_config_from_args(args), ConfigSource.CLI_ARGS)
    return manager


def setup_logging(manager: ConfigManager) -> Logger:
    """Setup logging for every apivisibility logger from the resolved configuration."""
    return configure_logging(
        manager.get(f"{ConfigKey.LOGGING}.{ConfigKey.LOG_LEVEL}", "INFO"),
        manager.get(f"{ConfigKey.LOGGING}.{ConfigKey.LOG_FILE}"),
    )


def check_masks(configuration: ApiConfiguration) -> None:
    """
    Compile every configured mask.

    Raises:
        ValidationError: On the first mask that does not compile
    """
    validate_mask_list(configuration.visible_items, ConfigKey.VISIBLE_ITEMS)
    validate_mask_list(configuration.hidden_items, ConfigKey.HIDDEN_ITEMS)


def parse_operation(value: str) -> Tuple[str, Optional[str]]:
    """Split a ``GROUP[.OPERATION]`` argument into its two names."""
    parsed = split_mask(value)
    return parsed.group_pattern, parsed.operation_pattern


def load_app(app_path: str) -> Any:
    """
    Import a FastAPI application from ``MODULE:ATTR``.

    A callable attribute is treated as an application factory.

    Raises:
        CLIError: If the module or attribute cannot be loaded
    """
    module_name, _, attr = app_path.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise CLIError(f"Cannot import module {module_name}: {e}", ErrorCode.NOT_FOUND)

    try:
        target = getattr(module, attr)
    except AttributeError:
        raise CLIError(f"Module {module_name} has no attribute {attr}", ErrorCode.NOT_FOUND)

    if callable(target) and not hasattr(target, "routes"):
        target = target()
    return target


def collect_operations(args: argparse.Namespace) -> List[Tuple[str, Optional[str]]]:
    """
    Gather the operations to classify from the arguments.

    Returns:
        List of (group name, operation name) pairs
    """
    operations = [parse_operation(value) for value in args.operations or []]

    if args.app or args.demo:
        from apivisibility.integration.fastapi_adapter import describe_route, iter_api_routes

        if args.demo:
            from apivisibility.demo import create_demo_app

            # Demo routes are classified by this command, not at app creation
            app = create_demo_app(ApiConfiguration())
        else:
            app = load_app(args.app)

        for route in iter_api_routes(app):
            descriptor = describe_route(route)
            operations.append((descriptor.group_name, descriptor.operation_name))

    return operations


def run(args: argparse.Namespace) -> int:
    """
    Execute the command for parsed arguments.

    Returns:
        Process exit code
    """
    manager = load_configuration(args)
    # Factories loaded by --app or --demo read this manager
    set_global_config(manager)
    logger = setup_logging(manager)
    configuration = manager.get_api_configuration()

    if args.check:
        check_masks(configuration)
        logger.info(
            "All masks compile",
            visible=len(configuration.visible_items),
            hidden=len(configuration.hidden_items),
        )
        if not (args.operations or args.app or args.demo):
            return 0

    engine = VisibilityRuleEngine.from_config(configuration, logger=logger)
    decisions = [engine.explain(group, operation) for group, operation in collect_operations(args)]

    print(render_report(decisions, engine, fmt=args.format), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit code
    """
    try:
        args = parse_arguments(argv)
        return run(args)

    except (
        CLIError,
        ConfigError,
        ValidationError,
        ReportError,
        InvalidPatternError,
        MissingGroupNameError,
    ) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
