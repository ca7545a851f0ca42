#!/usr/bin/env python3
"""
VaultMerkle API Server Script.

Runs the FastAPI application with uvicorn.
Requires Python 3.11+.

Usage:
    python scripts/serve_api.py --port 8000
"""

import argparse
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from utils.config import get_settings


def main() -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Serve the VaultMerkle API")
    parser.add_argument("--host", type=str, default=settings.api.host)
    parser.add_argument("--port", type=int, default=settings.api.port)
    parser.add_argument(
        "--reload",
        action="store_true",
        default=settings.api.debug,
        help="Reload on code changes",
    )
    args = parser.parse_args()

    import uvicorn

    print(f"\nStarting {settings.app_name} API on {args.host}:{args.port}...")
    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        app_dir=str(Path(__file__).parent.parent / "backend"),
    )


if __name__ == "__main__":
    main()
