#!/usr/bin/env python3
"""
Local development server runner.

Runs the FastAPI application using uvicorn. By default the delivery
worker runs inside the same process against in-memory backends, so a
single command gives a working pipeline without AWS.

Usage:
    python run_local.py
    python run_local.py --port 8081
    python run_local.py --reload  # Auto-reload on code changes
"""

import argparse
import os
from pathlib import Path

import uvicorn

project_root = Path(__file__).parent


def main():
    parser = argparse.ArgumentParser(
        description="Run FormRelay locally with uvicorn"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8081,
        help="Port to run the server on (default: 8081)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level for uvicorn (default: info)"
    )

    args = parser.parse_args()

    env_file = project_root / ".env"
    if not env_file.exists():
        print("No .env file found; using in-memory queue and status store.")
        os.environ.setdefault("QUEUE_BACKEND", "memory")
        os.environ.setdefault("STATUS_BACKEND", "memory")
        os.environ.setdefault("RUN_WORKER_IN_PROCESS", "true")
        os.environ.setdefault("METRICS_ENABLED", "false")

    print("=" * 60)
    print("Starting FormRelay (Local Development)")
    print("=" * 60)
    print(f"Submit: POST http://{args.host}:{args.port}/submit")
    print(f"Health: http://{args.host}:{args.port}/health")
    print("=" * 60)

    uvicorn.run(
        "formrelay.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        reload_dirs=[str(project_root / "src")] if args.reload else None
    )


if __name__ == "__main__":
    main()
