"""Command-line entry point.

    python -m backend.main receive --port 5500
    python -m backend.main demo --seconds 30 --debug
"""

import argparse
from typing import List, Optional

from backend.logging_config import configure_logging
from backend.settings import ExportSettings
from core.exceptions import ConfigurationError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rimio", description="Colony snapshot exporter tools")
    parser.add_argument("--log-level", default=None, help="Log level (default: RIMIO_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    receive = sub.add_parser("receive", help="Run the companion receiver")
    receive.add_argument("--host", default="127.0.0.1")
    receive.add_argument("--port", type=int, default=None, help="Default: RIMIO_PORT or 5500")

    demo = sub.add_parser("demo", help="Export a synthetic colony through the real pipeline")
    demo.add_argument("--seconds", type=float, default=10.0)
    demo.add_argument("--tps", type=int, default=60, help="Simulation ticks per second")
    demo.add_argument("--seed", type=int, default=42)
    demo.add_argument("--host", default=None, help="Default: RIMIO_HOST or localhost")
    demo.add_argument("--port", type=int, default=None, help="Default: RIMIO_PORT or 5500")
    demo.add_argument("--debug", action="store_true", help="Emit per-cycle timing messages")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ExportSettings()
    except ConfigurationError as e:
        parser.error(str(e))
    if args.host is not None:
        settings.host = args.host
    if args.port is not None:
        settings.port = args.port

    if args.command == "receive":
        import uvicorn

        from backend.companion_app import create_app

        configure_logging(level=args.log_level, include_uvicorn=True)
        uvicorn.run(create_app(), host=settings.host, port=settings.port, log_level="info")
        return 0

    from backend.demo_runner import run_demo

    configure_logging(level=args.log_level or ("DEBUG" if args.debug else None))
    settings.enable_debug = settings.enable_debug or args.debug
    service = run_demo(seconds=args.seconds, tps=args.tps, seed=args.seed, settings=settings)
    return 0 if service.consecutive_failures == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
