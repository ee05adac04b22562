"""
Entry point: serve the QuickBase SDK tools over stdio.

Logs go to stderr; stdout carries protocol messages only.
"""

import asyncio
import logging
import os
import sys

from .server import ServerConfig, create_server


logger = logging.getLogger("quickbase_mcp")

LOG_LEVEL_ENV = "QUICKBASE_MCP_LOG_LEVEL"


def configure_logging(server_name: str) -> None:
    """Send log records to stderr with a server-name prefix."""
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        format=f"[{server_name}] %(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
    )


def main() -> int:
    config = ServerConfig()
    configure_logging(config.name)

    logger.info(f"Starting {config.name} v{config.version}")
    for repo in config.repositories:
        logger.info(f"Repository {repo.name}: {repo.path}")

    server = create_server(config)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
