"""Run the geocache search API."""

import argparse

import uvicorn

from geocache.core.config import settings


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Geocache search API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Store credentials come from the environment (DB_HOST, DB_NAME, DB_USER,
DB_PASSWORD or DATABASE_URL) or a .env file.

Examples:
  python -m geocache
  python -m geocache --host 0.0.0.0 --port 8080
""",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes (development)"
    )
    args = parser.parse_args()

    uvicorn.run(
        "geocache.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
