"""
Command line entry point.

    semantic-memory serve                    # MCP over stdio
    semantic-memory serve --transport http   # FastAPI on loopback
    semantic-memory stats
"""

import argparse
import asyncio
import signal
import sys

from .core.config import API_HOST, API_PORT, LOG_LEVEL, get_db_path, validate_config
from .core.errors import MemoryServerError
from .core.service import MemoryService
from .util.logging import logger


def _exit_on_sigterm(signum, frame):
    raise SystemExit(0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semantic-memory",
        description="Semantic memory and user biography server backed by SQLite",
    )
    parser.add_argument("--db-path", default=None, help=f"SQLite database file (default: {get_db_path()})")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default: %(default)s)")

    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Serve the memory tools")
    serve.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    serve.add_argument("--host", default=API_HOST, help="HTTP bind host (default: %(default)s)")
    serve.add_argument("--port", type=int, default=API_PORT, help="HTTP bind port (default: %(default)s)")

    subparsers.add_parser("stats", help="Print memory count and biography status")
    return parser


def serve(service: MemoryService, transport: str, host: str, port: int) -> None:
    from .api.tools import ToolDispatcher

    if transport == "http":
        import uvicorn
        from .api.main import create_app

        uvicorn.run(create_app(service, manage_lifecycle=False), host=host, port=port, log_level="warning")
        return

    from .api.mcp_server import run_stdio

    asyncio.run(run_stdio(ToolDispatcher(service.memories, service.bio)))


def stats(service: MemoryService) -> None:
    print(f"Database: {service.db.path}")
    print(f"Memories: {service.memories.count()}")
    print(f"Biography: {'set' if service.bio.get() is not None else 'not set'}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    command = args.command or "serve"
    logger.set_level(args.log_level)

    issues = validate_config()
    if issues:
        for issue in issues:
            logger.error(f"Configuration error: {issue}")
        return 1

    service = MemoryService.from_config(args.db_path)
    signal.signal(signal.SIGTERM, _exit_on_sigterm)

    try:
        service.start(load_model=command == "serve")
    except MemoryServerError as e:
        logger.error(f"Fatal error during startup: {e}")
        service.close()
        return 1

    try:
        if command == "stats":
            stats(service)
        else:
            serve(
                service,
                getattr(args, "transport", "stdio"),
                getattr(args, "host", API_HOST),
                getattr(args, "port", API_PORT),
            )
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        service.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
