"""Bench runner API server entry point.

Usage:
    python run_server.py
    python run_server.py --host 0.0.0.0 --port 9000
    python run_server.py --results-dir /srv/bench/results --log-level debug
"""
from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def main() -> None:
    from benchrun.api.config import ApiSettings

    defaults = ApiSettings()
    parser = argparse.ArgumentParser(description="Bench Runner API Server")
    parser.add_argument("--host", default=defaults.host, help=f"Bind address (default: {defaults.host})")
    parser.add_argument("--port", type=int, default=defaults.port, help=f"Port (default: {defaults.port})")
    parser.add_argument("--results-dir", default=defaults.results_dir, help="Folder for <product id>.txt result files")
    parser.add_argument("--log-level", default=defaults.log_level.lower(),
                        choices=["debug", "info", "warning", "error"])
    parser.add_argument("--log-format", default=defaults.log_format, choices=["structured", "json"])
    args = parser.parse_args()

    import uvicorn

    from benchrun.api.main import create_app

    settings = defaults.model_copy(update={
        "host": args.host,
        "port": args.port,
        "results_dir": args.results_dir,
        "log_level": args.log_level.upper(),
        "log_format": args.log_format,
    })
    app = create_app(settings)

    logger.info("Starting Bench Runner API on %s:%s", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
