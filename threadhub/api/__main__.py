"""
threadhub.api.__main__ - CLI entry point for the API server

Usage:
    python -m threadhub.api --host 0.0.0.0 --port 8000
"""

import argparse

import uvicorn

from threadhub.settings import get_settings


def main() -> None:
    """Parse arguments and serve the API with uvicorn."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="threadhub-api",
        description="Serve the threadhub thread listing API",
    )
    parser.add_argument(
        "--host",
        default=settings.api_host,
        help=f"Interface to bind (default: {settings.api_host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.api_port,
        help=f"Port to listen on (default: {settings.api_port})",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.log_level})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development only)",
    )

    args = parser.parse_args()

    uvicorn.run(
        "threadhub.api.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
