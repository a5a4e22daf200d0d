#!/usr/bin/env python3
"""Start the NewsDeck aggregation API server.

This script starts the FastAPI application with uvicorn.

Usage:
    python scripts/start_server.py

Or with custom settings:
    python scripts/start_server.py --host 0.0.0.0 --port 8000 --reload
"""

import argparse
import sys

import uvicorn

from newsdeck.core.config import settings


def main():
    """Start the API server."""
    parser = argparse.ArgumentParser(
        description="Start the NewsDeck aggregation API"
    )
    parser.add_argument(
        "--host",
        default=settings.api_host,
        help=f"Host to bind to (default: {settings.api_host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.api_port,
        help=f"Port to bind to (default: {settings.api_port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="Uvicorn log level (default: info)",
    )

    args = parser.parse_args()

    print("=" * 80)
    print("  NEWSDECK AGGREGATION SERVICE")
    print("=" * 80)
    print("\nStarting API server...")
    print(f"   Host: {args.host}")
    print(f"   Port: {args.port}")
    print(f"   Reload: {args.reload}")
    print(f"   Log Level: {args.log_level}")
    print("\nEndpoints:")
    print(f"   Feed: POST http://{args.host}:{args.port}/fetch-news")
    print(f"   Categories: http://{args.host}:{args.port}/categories")
    print(f"   Health: http://{args.host}:{args.port}/health")
    print(f"   Swagger UI: http://{args.host}:{args.port}/docs")
    print("\n" + "=" * 80 + "\n")

    try:
        uvicorn.run(
            "newsdeck.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=args.log_level,
        )
    except KeyboardInterrupt:
        print("\n\nServer stopped by user")
        return 0
    except Exception as e:
        print(f"\n\nError starting server: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
