# =============================================================================
# main.py  —  Entry Point for the Apollo.io MCP server
# =============================================================================
#
# HOW TO RUN:
#   python main.py --api-key <key>           # or set APOLLO_IO_API_KEY
#   python main.py --list-tools              # print the tool catalog and exit
#
# WHAT HAPPENS:
#   1. Loads .env (APOLLO_IO_API_KEY, APOLLO_IO_TIMEOUT, APOLLO_IO_LOG_LEVEL)
#   2. Resolves the immutable ApolloConfig; no key → exit status 1
#   3. Builds ONE ApolloClient and the ToolDispatcher around it
#   4. Registers the tools with FastMCP and serves them over stdio
#
# Uncaught exceptions (main thread or worker threads) are logged to stderr.
# A failure inside a worker thread does not bring the server down.  Errors
# from event-loop tasks nobody awaited are logged by the server's lifespan
# (see tools/mcp_server.py).
# =============================================================================

import argparse
import json
import logging
import os
import sys
import threading

from dotenv import find_dotenv, load_dotenv

from core.apollo_client import ApolloClient
from core.config import API_KEY_ENV, load_config
from core.exceptions import ConfigurationError
from tools.dispatcher import ToolDispatcher
from tools.mcp_server import build_server, configure_logging

LOG_LEVEL_ENV = "APOLLO_IO_LOG_LEVEL"

logger = logging.getLogger("apollo_mcp")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="apollo-io-mcp",
        description="Expose the Apollo.io API as MCP tools over stdio.",
    )
    parser.add_argument("--api-key", help=f"Apollo.io API key (default: ${API_KEY_ENV})")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds (default: 30)")
    parser.add_argument("--log-level", help=f"Logging level (default: ${LOG_LEVEL_ENV} or INFO)")
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Print the tool catalog as JSON and exit",
    )
    return parser.parse_args(argv)


def _install_fault_logging() -> None:
    """Log faults that escape every handler instead of losing them."""

    def _log_uncaught(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        logger.critical("Uncaught exception", exc_info=(exc_type, exc, tb))

    def _log_thread(args: threading.ExceptHookArgs) -> None:
        logger.error(
            "Unhandled exception in thread %s",
            args.thread.name if args.thread else "?",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _log_uncaught
    threading.excepthook = _log_thread


def main(argv=None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    args = parse_args(argv)
    configure_logging(args.log_level or os.environ.get(LOG_LEVEL_ENV, "INFO"))

    try:
        config = load_config(api_key=args.api_key, timeout=args.timeout, use_dotenv=False)
    except ConfigurationError as exc:
        logger.error("Cannot start: %s", exc)
        return 1

    with ApolloClient(config) as client:
        dispatcher = ToolDispatcher(client)

        if args.list_tools:
            print(json.dumps(dispatcher.list_tools(), indent=2))
            return 0

        server = build_server(dispatcher)
        _install_fault_logging()
        logger.info("Apollo.io MCP server starting")
        try:
            server.run()
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
