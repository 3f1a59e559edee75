"""
Command-line interface for the domain sweep system.

This module provides the main CLI entry point with commands for:
- check: Check a base name across TLDs
- check-list: Check full domains listed in a file
- validate: Validate a base name without any network access
- config: Configuration management
"""

import argparse
import asyncio
import dataclasses
import json
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from . import __version__
from .config import (
    LOG_FORMATS,
    LOG_LEVELS,
    BatchConfig,
    LoggingConfig,
    QueryConfig,
    RetryConfig,
    SystemConfig,
)
from .domain_validator import InputValidator
from .enums import AvailabilityStatus, CheckMethod
from .exceptions import ValidationError
from .models import CheckRequest, DomainResult
from .orchestrator import DomainQueryEngine
from .structured_logger import StructuredLogger
from .tld_registry import DEFAULT_TLDS, EXTENDED_TLDS

DEFAULT_CONFIG_PATH = Path.home() / ".domain_sweep" / "config.json"

ENV_PREFIX = "DOMAIN_SWEEP_"

STATUS_LABELS = {
    AvailabilityStatus.AVAILABLE: "available",
    AvailabilityStatus.TAKEN: "taken",
    AvailabilityStatus.CHECKING: "checking",
    AvailabilityStatus.ERROR: "error",
    AvailabilityStatus.UNKNOWN: "unknown",
}


def create_default_config(simulation_mode: bool = False) -> SystemConfig:
    """Create a default system configuration."""
    return SystemConfig(simulation_mode=simulation_mode)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _choice_env(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = os.getenv(name, default).strip().lower()
    return value if value in choices else default


def load_config_from_env(base: Optional[SystemConfig] = None) -> SystemConfig:
    """
    Build a configuration from DOMAIN_SWEEP_* environment variables.

    A .env file in the working directory is loaded first. Unset or
    unparseable variables keep the value from `base` (or the defaults).

    Recognized variables: TLDS (comma separated), DNS_TIMEOUT, WHOIS_TIMEOUT,
    MAX_RETRIES, WHOIS_DELAY, BATCH_SIZE, MAX_CONCURRENCY, LOG_LEVEL,
    LOG_FORMAT, SIMULATION.
    """
    load_dotenv(find_dotenv(usecwd=True))
    config = base or create_default_config()

    tlds = config.tlds
    raw_tlds = os.getenv(f"{ENV_PREFIX}TLDS", "")
    parsed_tlds = [t.strip() for t in raw_tlds.split(",") if t.strip()]
    if parsed_tlds:
        tlds = parsed_tlds

    max_retries = _int_env(f"{ENV_PREFIX}MAX_RETRIES", config.dns.max_retries)
    dns = dataclasses.replace(
        config.dns,
        timeout_seconds=_float_env(f"{ENV_PREFIX}DNS_TIMEOUT", config.dns.timeout_seconds),
        max_retries=max_retries,
    )
    whois = dataclasses.replace(
        config.whois,
        timeout_seconds=_float_env(f"{ENV_PREFIX}WHOIS_TIMEOUT", config.whois.timeout_seconds),
        max_retries=max_retries,
    )
    batch = dataclasses.replace(
        config.batch,
        batch_size=_int_env(f"{ENV_PREFIX}BATCH_SIZE", config.batch.batch_size),
        max_concurrency=_int_env(f"{ENV_PREFIX}MAX_CONCURRENCY", config.batch.max_concurrency),
    )
    logging_config = LoggingConfig(
        level=_choice_env(f"{ENV_PREFIX}LOG_LEVEL", config.logging.level, LOG_LEVELS),
        output_format=_choice_env(
            f"{ENV_PREFIX}LOG_FORMAT", config.logging.output_format, LOG_FORMATS
        ),
    )
    simulation = os.getenv(f"{ENV_PREFIX}SIMULATION")

    return dataclasses.replace(
        config,
        tlds=tlds,
        dns=dns,
        whois=whois,
        batch=batch,
        logging=logging_config,
        whois_rate_limit_delay_seconds=_float_env(
            f"{ENV_PREFIX}WHOIS_DELAY", config.whois_rate_limit_delay_seconds
        ),
        simulation_mode=config.simulation_mode if simulation is None else simulation == "1",
    )


def _query_config_from_dict(data: dict, default: QueryConfig) -> QueryConfig:
    return QueryConfig(
        timeout_seconds=data.get("timeout_seconds", default.timeout_seconds),
        max_retries=data.get("max_retries", default.max_retries),
        retry_delay_seconds=data.get("retry_delay_seconds", default.retry_delay_seconds),
        use_exponential_backoff=data.get("use_exponential_backoff", default.use_exponential_backoff),
    )


def load_config_from_file(config_path: Path) -> Optional[SystemConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        defaults = create_default_config()

        retry_data = data.get("retry", {})
        retry = RetryConfig(
            max_retries=retry_data.get("max_retries", defaults.retry.max_retries),
            initial_delay_seconds=retry_data.get(
                "initial_delay_seconds", defaults.retry.initial_delay_seconds
            ),
            use_exponential_backoff=retry_data.get(
                "use_exponential_backoff", defaults.retry.use_exponential_backoff
            ),
            max_delay_seconds=retry_data.get("max_delay_seconds", defaults.retry.max_delay_seconds),
            backoff_multiplier=retry_data.get(
                "backoff_multiplier", defaults.retry.backoff_multiplier
            ),
        )

        batch_data = data.get("batch", {})
        batch = BatchConfig(
            batch_size=batch_data.get("batch_size", defaults.batch.batch_size),
            max_concurrency=batch_data.get("max_concurrency", defaults.batch.max_concurrency),
            batch_delay_seconds=batch_data.get(
                "batch_delay_seconds", defaults.batch.batch_delay_seconds
            ),
            fail_fast=batch_data.get("fail_fast", defaults.batch.fail_fast),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", defaults.logging.level),
            output_format=logging_data.get("output_format", defaults.logging.output_format),
        )

        return SystemConfig(
            tlds=data.get("tlds") or defaults.tlds,
            dns=_query_config_from_dict(data.get("dns", {}), defaults.dns),
            whois=_query_config_from_dict(data.get("whois", {}), defaults.whois),
            retry=retry,
            batch=batch,
            logging=logging_config,
            whois_rate_limit_delay_seconds=data.get(
                "whois_rate_limit_delay_seconds", defaults.whois_rate_limit_delay_seconds
            ),
            whois_servers=data.get("whois_servers"),
            simulation_mode=data.get("simulation_mode", False),
        )

    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: SystemConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: SystemConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "tlds": list(config.tlds),
            "dns": dataclasses.asdict(config.dns),
            "whois": dataclasses.asdict(config.whois),
            "retry": dataclasses.asdict(config.retry),
            "batch": dataclasses.asdict(config.batch),
            "logging": dataclasses.asdict(config.logging),
            "whois_rate_limit_delay_seconds": config.whois_rate_limit_delay_seconds,
            "whois_servers": config.whois_servers,
            "simulation_mode": config.simulation_mode,
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def create_logger(config: SystemConfig, verbose: bool = False) -> StructuredLogger:
    return StructuredLogger(
        output_format=config.logging.output_format,
        level="debug" if verbose else config.logging.level,
    )


def format_result(result: DomainResult) -> str:
    line = f"  {result.domain:<32} {STATUS_LABELS[result.status]}"
    if result.error:
        line += f"  ({result.error})"
    elif result.note:
        line += f"  [{result.note}]"
    return line


async def check_base_domain(
    base_domain: str,
    config: SystemConfig,
    tlds: Optional[list[str]] = None,
    method: CheckMethod = CheckMethod.HYBRID,
    as_json: bool = False,
    verbose: bool = False,
) -> int:
    """
    Check a base name across TLDs.

    Returns:
        Exit code (0 if any domain is available, 1 otherwise)
    """
    if config.simulation_mode and not as_json:
        print("Simulation mode: no real network requests are made")

    logger = create_logger(config, verbose)

    async with DomainQueryEngine(config=config, method=method, logger=logger) as engine:
        try:
            response = await engine.handle_request(CheckRequest(base_domain=base_domain, tlds=tlds))
        except ValidationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

        if as_json:
            print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(f"Results for '{response.base_domain}' ({method.value}):")
            for result in response.results:
                print(format_result(result))
                if verbose and method == CheckMethod.HYBRID:
                    print(f"    {engine.probe.strategy_explanation(result.domain)}")

            summary = response.summary
            print(
                f"\nSummary: {summary.available}/{summary.total} available, "
                f"{summary.taken} taken, {summary.errors} errors, {summary.unknown} unknown "
                f"({response.execution_time_ms:.0f}ms)"
            )
            if verbose:
                analytics = engine.performance_analytics()
                if analytics.average_check_time_ms is not None:
                    print(
                        f"  Fastest: {analytics.fastest_check_time_ms:.1f}ms, "
                        f"average: {analytics.average_check_time_ms:.1f}ms"
                    )

    return 0 if response.summary.available > 0 else 1


async def check_domain_list(
    domains_file: Path,
    config: SystemConfig,
    output_file: Optional[Path] = None,
    method: CheckMethod = CheckMethod.HYBRID,
    verbose: bool = False,
) -> int:
    """
    Check full domains from a file.

    Args:
        domains_file: Path to file containing domains (one per line, '#' comments)
        config: System configuration
        output_file: Optional path to write the batch result as JSON
        method: Check method
        verbose: Enable verbose output

    Returns:
        Exit code (0 if any available, 1 if all taken/error)
    """
    try:
        with open(domains_file, "r", encoding="utf-8") as f:
            domains = [line.strip() for line in f if line.strip() and not line.startswith("#")]
    except FileNotFoundError:
        print(f"Error: File not found: {domains_file}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    if not domains:
        print("Error: No domains found in file", file=sys.stderr)
        return 1

    if config.simulation_mode:
        print("Simulation mode: no real network requests are made")

    print(f"Checking {len(domains)} domain(s)...")

    logger = create_logger(config, verbose)
    async with DomainQueryEngine(config=config, method=method, logger=logger) as engine:
        batch = await engine.check_domains(domains)

    for result in batch.results:
        print(format_result(result))

    available_count = sum(1 for r in batch.results if r.status == AvailabilityStatus.AVAILABLE)
    print(f"\nSummary: {available_count}/{batch.total_domains} domain(s) available")
    if batch.failed:
        print(f"Failed checks: {len(batch.failed)} (success rate {batch.success_rate:.1f}%)")

    if output_file:
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, "w", encoding="utf-8") as f:
                json.dump(batch.to_dict(), f, indent=2, ensure_ascii=False)
            print(f"Results written to: {output_file}")
        except OSError as e:
            print(f"Error writing results: {e}", file=sys.stderr)

    return 0 if available_count > 0 else 1


def resolve_config(args: argparse.Namespace) -> Optional[SystemConfig]:
    """Config file when given, otherwise the environment; --dry-run forces simulation."""
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
            return None
    else:
        config = load_config_from_env()

    if getattr(args, "dry_run", False):
        config = dataclasses.replace(config, simulation_mode=True)
    return config


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    config = resolve_config(args)
    if config is None:
        return 1

    tlds = args.tlds
    if args.extended:
        tlds = list(EXTENDED_TLDS)

    return asyncio.run(check_base_domain(
        base_domain=args.base_domain,
        config=config,
        tlds=tlds,
        method=CheckMethod(args.method),
        as_json=args.json,
        verbose=args.verbose,
    ))


def cmd_check_list(args: argparse.Namespace) -> int:
    """Handle the 'check-list' command."""
    config = resolve_config(args)
    if config is None:
        return 1

    output_file = Path(args.output) if args.output else None

    return asyncio.run(check_domain_list(
        domains_file=Path(args.file),
        config=config,
        output_file=output_file,
        method=CheckMethod(args.method),
        verbose=args.verbose,
    ))


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the 'validate' command."""
    result = InputValidator().validate_domain_name(args.name)
    if result.valid:
        print(f"'{result.sanitized_input}' is a valid domain name")
        return 0

    print(f"'{args.name}' is not a valid domain name:")
    for error in result.errors:
        print(f"  - [{error.code.value}] {error.message}")
    return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  TLDs: {', '.join(config.tlds)}")
        print(f"  DNS timeout: {config.dns.timeout_seconds}s, retries: {config.dns.max_retries}")
        print(f"  WHOIS timeout: {config.whois.timeout_seconds}s, retries: {config.whois.max_retries}")
        print(f"  WHOIS delay: {config.whois_rate_limit_delay_seconds}s")
        print(
            f"  Batch: size {config.batch.batch_size}, "
            f"concurrency {config.batch.max_concurrency}, fail fast {config.batch.fail_fast}"
        )
        print(f"  Simulation mode: {config.simulation_mode}")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        if save_config_to_file(create_default_config(), config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def _add_common_check_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--method", "-m",
        choices=[m.value for m in CheckMethod],
        default=CheckMethod.HYBRID.value,
        help="Check method (default: hybrid)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - no real network requests",
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-sweep",
        description="Check a domain name across many TLDs with DNS and WHOIS",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'check' command
    check_parser = subparsers.add_parser(
        "check",
        help="Check a base name across TLDs",
    )
    check_parser.add_argument(
        "base_domain",
        help="Base name to check (e.g., example)",
    )
    check_parser.add_argument(
        "--tlds", "-t",
        nargs="+",
        help=f"TLDs to check (default: {' '.join(DEFAULT_TLDS)})",
    )
    check_parser.add_argument(
        "--extended", "-e",
        action="store_true",
        help="Check the extended TLD list",
    )
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the response as JSON",
    )
    _add_common_check_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    # 'check-list' command
    check_list_parser = subparsers.add_parser(
        "check-list",
        help="Check full domains from a file",
    )
    check_list_parser.add_argument(
        "file",
        help="Path to file containing domains (one per line)",
    )
    check_list_parser.add_argument(
        "--output", "-o",
        help="Path to write results as JSON",
    )
    _add_common_check_arguments(check_list_parser)
    check_list_parser.set_defaults(func=cmd_check_list)

    # 'validate' command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a base name without checking it",
    )
    validate_parser.add_argument("name", help="Base name to validate")
    validate_parser.set_defaults(func=cmd_validate)

    # 'config' command
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
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
