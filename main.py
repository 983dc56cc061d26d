#!/usr/bin/env python3
"""
biztositok - command line access to the site API

Invokes one API function and prints the decoded JSON reply.
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from biztositok import Client
from biztositok.config import Config
from biztositok.exceptions import (
    BiztositokError,
    ConfigurationError,
    DecodeError,
    TransportError,
)
from biztositok.logging_config import get_module_logger, setup_logging

logger = get_module_logger("main")

PASSWORD_ENV_VAR = "BIZTOSITOK_PASSWORD"

EXIT_API_FAILURE = 1
EXIT_CLIENT_ERROR = 2


def _print_error_box(title: str, details: str, suggestions: str | None = None) -> None:
    """
    Print a formatted error box with title, details, and optional suggestions.

    Args:
        title: Error title/header
        details: Error details/description
        suggestions: Optional suggestions for resolving the error
    """
    logger.error("=" * 80)
    logger.error(title)
    logger.error("=" * 80)
    logger.error(details)
    if suggestions:
        logger.error("")
        logger.error(suggestions)
    logger.error("=" * 80)


def handle_client_error(error: BiztositokError) -> None:
    """Log a client error with a hint matching its type."""
    if isinstance(error, TransportError):
        _print_error_box(
            "REQUEST FAILED",
            str(error),
            "Check the --endpoint value and your network connection.\n"
            "Use --timeout / --connect-timeout to adjust the time limits.",
        )
    elif isinstance(error, DecodeError):
        details = str(error)
        if error.raw_response:
            details += f"\n\nResponse body (first 500 chars):\n{error.raw_response[:500]}"
        _print_error_box("INVALID API RESPONSE", details)
    elif isinstance(error, ConfigurationError):
        _print_error_box(
            "CONFIGURATION ERROR",
            str(error),
            "Set the value with a command line option or in the YAML config file (--config).",
        )
    else:
        _print_error_box("ERROR", str(error))


def parse_key_value(item: str) -> tuple[str, Any]:
    """
    Parse a KEY=VALUE argument.

    VALUE is decoded as JSON when possible (numbers, booleans, objects, lists),
    otherwise it is kept as a string.
    """
    key, separator, raw_value = item.partition("=")
    if not separator or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{item}'")

    try:
        value = json.loads(raw_value)
    except ValueError:
        value = raw_value

    return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Invoke a function of the biztositok site API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  Values not given on the command line come from the YAML file named by
  --config or the BIZTOSITOK_CONFIG environment variable (sections:
  client, transport, logging). The password can also be set with the
  BIZTOSITOK_PASSWORD environment variable.

Examples:
  # Call a function without parameters
  python main.py /status --endpoint https://example.com --username me

  # Pass parameters (values are parsed as JSON when possible)
  python main.py /user/get --param id=5 --param 'filter={"active": true}'

  # Use a config file and write a debug log
  python main.py /user/list --config config/client_config.yaml --log-file debug.log
        """,
    )

    parser.add_argument("path", type=str, help='Path of the API function (e.g. "/user/get")')
    parser.add_argument("--config", type=str, help="YAML config file")
    parser.add_argument("--endpoint", type=str, help="API endpoint, e.g. https://example.com")
    parser.add_argument("--username", type=str, help="API username")
    parser.add_argument(
        "--password", type=str, help=f"API password (or set {PASSWORD_ENV_VAR} env var)"
    )
    parser.add_argument(
        "--param",
        type=parse_key_value,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="POST parameter, can be repeated",
    )
    parser.add_argument(
        "--query",
        type=parse_key_value,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query string parameter, can be repeated",
    )
    parser.add_argument("--timeout", type=float, help="Response timeout in seconds")
    parser.add_argument("--connect-timeout", type=float, help="Connect timeout in seconds")
    parser.add_argument("--log-file", type=str, help="Write a DEBUG log to this file")
    parser.add_argument("--quiet", action="store_true", help="Only print the response and errors")

    return parser


def create_client(args: argparse.Namespace, config_obj: Config) -> Client:
    """Create the client from the config file, overridden by command line options."""
    client = Client.from_config(config_obj)

    if args.endpoint:
        client.api_endpoint = args.endpoint
    if args.username:
        client.username = args.username

    password = args.password or os.getenv(PASSWORD_ENV_VAR)
    if password:
        client.password = password

    overrides: dict[str, Any] = {}
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.connect_timeout is not None:
        overrides["connect_timeout"] = args.connect_timeout
    if overrides:
        client.set_transport_options(**overrides)

    return client


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config_obj = Config(config_file=args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        return EXIT_CLIENT_ERROR

    # Quiet mode still reports errors on stderr
    setup_logging(
        log_file=Path(args.log_file) if args.log_file else None,
        level="ERROR" if args.quiet else config_obj.get("logging.level", "INFO"),
    )

    try:
        client = create_client(args, config_obj)
        response = client.invoke(args.path, dict(args.param), query=dict(args.query) or None)
    except BiztositokError as e:
        handle_client_error(e)
        return EXIT_CLIENT_ERROR

    print(json.dumps(response.payload, indent=2, ensure_ascii=False))

    if not response.is_success():
        logger.error(f"API call {args.path} was not successful")
        if response.message():
            logger.error(response.message())
        for line in response.errors_combined():
            logger.error(f"  {line}")
        return EXIT_API_FAILURE

    if response.message():
        logger.info(response.message())
    return 0


if __name__ == "__main__":
    sys.exit(main())
