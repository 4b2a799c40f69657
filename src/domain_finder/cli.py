"""
Command-line interface for the domain finder.

Commands:
- check: Check one or more domains given as arguments
- check-list: Check domains read from a file
- serve: Run the HTTP API
- config: Configuration management

Results are printed as JSON.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .audit_logger import AuditLogger
from .checker import DomainChecker
from .config import (
    SystemConfig,
    apply_env_overrides,
    config_to_dict,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)
from .exceptions import ConfigError
from .relay_client import RelayClient


DEFAULT_CONFIG_PATH = Path.home() / ".domain_finder" / "config.json"


def resolve_config(config_path: Optional[str]) -> SystemConfig:
    """
    Load the configuration file if given, then apply environment overrides.

    Raises:
        ConfigError: If the file cannot be loaded
    """
    if config_path:
        config = load_config_from_file(Path(config_path))
    else:
        config = create_default_config()
    return apply_env_overrides(config)


async def run_checks(
    domains: list[str],
    config: SystemConfig,
    remote: bool = False,
    verbose: bool = False,
) -> dict:
    """Check domains locally or through the remote API and return the JSON payload."""
    if remote:
        relay = RelayClient(
            api_url=config.endpoints.api_url,
            timeout=config.timeouts.relay,
        )
        return await relay.check(domains)

    logger = None
    if verbose:
        logger = AuditLogger.from_config(config.logging)

    async with DomainChecker(config=config, logger=logger) as checker:
        batch = await checker.check_domains(domains)
    return batch.to_dict()


def emit_results(payload: dict, output_file: Optional[Path] = None) -> int:
    """
    Print (and optionally save) a result payload.

    Returns:
        Exit code: 0 if any domain is available, 1 otherwise
    """
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    print(text)

    if output_file:
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(text + "\n", encoding="utf-8")
        except OSError as e:
            print(f"Error writing results: {e}", file=sys.stderr)
            return 1

    if "error" in payload:
        return 1
    results = payload.get("results", [])
    return 0 if any(result.get("available") for result in results) else 1


def read_domains_file(domains_file: Path) -> list[str]:
    """One domain per line; blank lines and '#' comments are skipped."""
    with open(domains_file, "r", encoding="utf-8") as f:
        return [
            line.strip() for line in f
            if line.strip() and not line.lstrip().startswith("#")
        ]


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    try:
        config = resolve_config(args.config)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    payload = asyncio.run(run_checks(
        domains=args.domains,
        config=config,
        remote=args.remote,
        verbose=args.verbose,
    ))
    output_file = Path(args.output) if args.output else None
    return emit_results(payload, output_file)


def cmd_check_list(args: argparse.Namespace) -> int:
    """Handle the 'check-list' command."""
    try:
        config = resolve_config(args.config)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    try:
        domains = read_domains_file(Path(args.file))
    except FileNotFoundError:
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    if not domains:
        print("Error: No domains found in file", file=sys.stderr)
        return 1

    if len(domains) > config.max_batch_size:
        print(
            f"Warning: only the first {config.max_batch_size} of {len(domains)} "
            "domains are checked",
            file=sys.stderr,
        )

    payload = asyncio.run(run_checks(
        domains=domains,
        config=config,
        remote=args.remote,
        verbose=args.verbose,
    ))
    output_file = Path(args.output) if args.output else None
    return emit_results(payload, output_file)


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command."""
    import uvicorn

    from .api import create_app

    try:
        config = resolve_config(args.config)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1
        try:
            save_config_to_file(create_default_config(), config_path)
        except OSError as e:
            print(f"Error saving config: {e}", file=sys.stderr)
            return 1
        print(f"Configuration created at: {config_path}")
        return 0

    try:
        config = load_config_from_file(config_path)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.code == "not_found":
            print("Use 'config init' to create a default configuration.")
        return 1

    if args.action == "show":
        print(f"Configuration from: {config_path}")
        print(json.dumps(config_to_dict(config), indent=2))
        return 0

    print(f"Configuration at {config_path} is valid.")
    return 0


def _add_check_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--output", "-o",
        help="Path to write results as JSON",
    )
    parser.add_argument(
        "--remote", "-r",
        action="store_true",
        help="Send the domains to the remote API instead of resolving locally",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log resolution details to stderr",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-finder",
        description="Domain availability checker (RDAP, DNS and WHOIS fallbacks)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser(
        "check",
        help="Check domains for availability",
    )
    check_parser.add_argument(
        "domains",
        nargs="+",
        help="Domains to check (e.g., example.com example.io)",
    )
    _add_check_options(check_parser)
    check_parser.set_defaults(func=cmd_check)

    check_list_parser = subparsers.add_parser(
        "check-list",
        help="Check domains from a file",
    )
    check_list_parser.add_argument(
        "file",
        help="Path to file containing domains (one per line)",
    )
    _add_check_options(check_list_parser)
    check_list_parser.set_defaults(func=cmd_check_list)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API",
    )
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.add_argument("--config", "-c", help="Path to configuration file")
    serve_parser.set_defaults(func=cmd_serve)

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    load_dotenv()
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
