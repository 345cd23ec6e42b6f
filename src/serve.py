"""Command-line entry point that serves the BizAdvisor API with uvicorn.

Usage:
    bizadvisor-serve --host 0.0.0.0 --port 8080
"""

import argparse
import os

import uvicorn


def parse_serve_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse serve-mode arguments (host, port)."""
    parser = argparse.ArgumentParser(description="BizAdvisor API server")
    parser.add_argument("--host", default=os.environ.get("HOST", "127.0.0.1"), help="Bind address")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", "8080")),
        help="Listen port",
    )
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    return parser.parse_args(args)


def main(args: list[str] | None = None) -> None:
    """Run the API server until interrupted."""
    serve_args = parse_serve_args(args)
    uvicorn.run(
        "src.api.main:app",
        host=serve_args.host,
        port=serve_args.port,
        reload=serve_args.reload,
        log_level=os.environ.get("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
