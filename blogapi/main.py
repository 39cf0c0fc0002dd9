"""
Blog API - command line entry point.

Usage:
    blogapi                    # serve on API_HOST:API_PORT
    blogapi --port 9000 --reload
"""

from __future__ import annotations

import argparse

import uvicorn

from blogapi.config import get_settings


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    
    parser = argparse.ArgumentParser(description="Run the blog API server")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)
    
    uvicorn.run(
        "blogapi.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
