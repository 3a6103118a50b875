"""Main entry point for the JSON workbench MCP server."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import structlog

from .config.loader import ConfigLoader, ConfigurationError
from .server import WorkbenchServer
from .utils.logging_config import setup_logging


def setup_structlog(log_level: str = "INFO") -> None:
    """Route structlog through stdlib logging with JSON output."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.getLogger("json_workbench").setLevel(getattr(logging, log_level.upper(), logging.INFO))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="json-workbench", description="JSON workbench MCP server (stdio)")
    parser.add_argument("config", nargs="?", default=None, help="Path to config.yaml")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    parser.add_argument("--json-logs", action="store_true", help="Format stdlib log records as JSON")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> None:
    """Load configuration, configure logging and serve over stdio."""
    args = parse_args(argv)

    config = ConfigLoader(config_file=args.config, env_file=args.env_file).load_config()
    setup_logging(config.log_level, log_file=args.log_file, enable_json_logging=args.json_logs)
    setup_structlog(config.log_level)

    logger = structlog.get_logger(__name__)
    logger.info("Starting JSON workbench MCP server", log_level=config.log_level)

    try:
        await WorkbenchServer(config).run_stdio()
    except Exception as e:
        logger.error(f"Server failed: {e}", exc_info=True)
        raise


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        structlog.get_logger(__name__).info("Server shutdown requested")


if __name__ == "__main__":
    run()
