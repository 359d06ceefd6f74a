"""Entry point for the Gmail extension server."""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from gmail_extension.utils import ValidationError, key_from_hex


def configure_logging() -> None:
    """Configure logging to stderr (STDIO-safe).

    Sends all logs to stderr so they don't interfere with MCP's
    STDIO transport which uses stdout for JSON-RPC messages.

    Respects LOG_LEVEL env var (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = logging.getLevelNamesMapping().get(log_level_str, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # Reduce noise from Google libraries
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)


REQUIRED_VARIABLES = ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "TOKEN_ENCRYPTION_KEY")
CONTINUATION_BACKENDS = ("file", "memory")
TRANSPORTS = ("stdio", "sse", "http", "streamable-http")


def _non_negative_int(name: str) -> bool:
    value = os.getenv(name)
    return value is None or value.strip().isdigit()


def validate_environment() -> bool:
    """Validate the extension's configuration.

    Checks the OAuth client and sealing key, the continuation store settings
    (CONTINUATION_BACKEND, CONTINUATION_TTL_SECONDS) and the transport
    settings (TRANSPORT, PORT). Every problem is logged before returning.

    Returns:
        True if the configuration is usable, False otherwise.
    """
    logger = logging.getLogger(__name__)
    problems: list[str] = []

    missing = [var for var in REQUIRED_VARIABLES if not os.getenv(var)]
    if missing:
        problems.append(f"Missing required environment variables: {', '.join(missing)}")
    else:
        try:
            key_from_hex(os.getenv("TOKEN_ENCRYPTION_KEY", ""))
        except ValidationError as e:
            problems.append(f"TOKEN_ENCRYPTION_KEY: {e.message}")

    backend = os.getenv("CONTINUATION_BACKEND", "file").lower()
    if backend not in CONTINUATION_BACKENDS:
        problems.append(f"CONTINUATION_BACKEND must be one of {', '.join(CONTINUATION_BACKENDS)}")
    if not _non_negative_int("CONTINUATION_TTL_SECONDS"):
        problems.append("CONTINUATION_TTL_SECONDS must be a non-negative integer")

    transport = os.getenv("TRANSPORT", "stdio").lower()
    if transport not in TRANSPORTS:
        problems.append(f"TRANSPORT must be one of {', '.join(TRANSPORTS)}")
    if not _non_negative_int("PORT"):
        problems.append("PORT must be a number")

    for problem in problems:
        logger.error(problem)
    return not problems


def main() -> None:
    """Main entry point.

    Loads environment, validates configuration, and starts the server with
    the transport named by TRANSPORT (stdio, sse/http or streamable-http).
    """
    load_dotenv()

    configure_logging()
    logger = logging.getLogger(__name__)

    if not validate_environment():
        logger.error("Environment validation failed. Exiting.")
        sys.exit(1)

    # Import server after environment is validated
    from gmail_extension.server import mcp

    transport = os.getenv("TRANSPORT", "stdio").lower()
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))

    match transport:
        case "sse" | "http":
            import uvicorn

            logger.info(
                "Starting Gmail extension server with SSE transport on %s:%d", host, port
            )
            uvicorn.run(mcp.sse_app(), host=host, port=port, log_level="info")
        case "streamable-http":
            logger.info(
                "Starting Gmail extension server with streamable-http transport on %s:%d", host, port
            )
            mcp.settings.host = host
            mcp.settings.port = port
            mcp.run(transport="streamable-http")
        case _:
            logger.info("Starting Gmail extension server with STDIO transport")
            mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
