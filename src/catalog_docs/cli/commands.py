from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from catalog_docs.config import DocsConfig, find_config_path, load_config
from catalog_docs.db_introspect import create_catalog_reader
from catalog_docs.reports.generator import generate_documentation

MISSING_CONFIG_MESSAGE = (
    "Missing or invalid configuration. "
    "Please create one with OutputFolder and ConnectionString."
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConfigUnavailable(Exception):
    """Raised when no usable configuration could be loaded."""


def run(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="catalog-docs",
        description="Generate markdown documentation from a database catalog"
    )
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Override the configured log level")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Document tables, views and routines")
    gen.add_argument("--config", help="Path to JSON or YAML config (default: appsettings.json)")
    gen.add_argument("--output", help="Override the configured output folder")
    gen.add_argument("--no-clean", action="store_true",
                     help="Keep existing files in the output folder")

    ping = sub.add_parser("ping", help="Test the database connection")
    ping.add_argument("--config", help="Path to JSON or YAML config (default: appsettings.json)")

    args = parser.parse_args(argv)

    try:
        if args.cmd == "generate":
            config = _load_config(args.config, announce=True)
            overrides = {}
            if args.output:
                overrides["output_folder"] = Path(args.output)
            if args.no_clean:
                overrides["clean_output"] = False
            if overrides:
                config = config.model_copy(update=overrides)
            _configure_logging(args.log_level or config.log_level)
            asyncio.run(generate(config))
        elif args.cmd == "ping":
            config = _load_config(args.config)
            _configure_logging(args.log_level or config.log_level)
            asyncio.run(db_ping(config))
    except ConfigUnavailable:
        print(MISSING_CONFIG_MESSAGE)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _load_config(config_path: str | None, announce: bool = False) -> DocsConfig:
    path = find_config_path(config_path)

    if announce:
        print(f"Current Directory: {Path.cwd()}")
        print(f"Found {path}" if path.exists() else f"Missing {path}")

    try:
        return load_config(path)
    except FileNotFoundError as e:
        raise ConfigUnavailable(str(e)) from e
    except ValueError as e:
        print(f"Error reading config: {e}", file=sys.stderr)
        raise ConfigUnavailable(str(e)) from e


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


async def generate(config: DocsConfig) -> None:
    """Generate documentation for the configured database.

    Args:
        config: Run configuration

    Raises:
        pyodbc.Error / asyncpg.PostgresError: If a catalog query fails
    """
    result = await generate_documentation(config)

    print(f"\n✓ Documentation written to {result.output_folder}")
    print(f"  Tables:            {result.tables}")
    print(f"  Views:             {result.views}")
    print(f"  Stored procedures: {result.procedures}")
    print(f"  Functions:         {result.functions}")
    print(f"  Summary:           {result.summary_path}")
    print("Done.")


async def db_ping(config: DocsConfig) -> None:
    """Test the database connection and print the server version.

    Args:
        config: Run configuration
    """
    dialect = config.resolved_dialect()
    async with create_catalog_reader(config.connection_string, dialect) as reader:
        version = await reader.server_version()

    print("✓ Database connection successful")
    print(f"  Dialect: {dialect}")
    print(f"  Server:  {version}")
