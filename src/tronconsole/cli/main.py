from __future__ import annotations

import argparse
import logging
import sys

from loguru import logger

from tronconsole.api.app import build_console, create_app, make_chain, make_store
from tronconsole.config import settings
from tronconsole.core.enums import Network
from tronconsole.core.errors import ConsoleError


class InterceptHandler(logging.Handler):
    """Route stdlib logging (werkzeug, sqlalchemy, urllib3) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = settings.LOG_LEVEL, log_file: str = settings.LOG_FILE) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
    )
    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="14 days",
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}",
            serialize=True,
        )
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tronconsole", description="TRC-20 token console (TRON)")
    p.add_argument("--host", default=settings.HOST, help="Bind address")
    p.add_argument("--port", type=int, default=settings.PORT, help="Bind port")
    p.add_argument(
        "--network",
        choices=[n.value for n in Network],
        default=settings.DEFAULT_NETWORK,
        help="Network selected at startup",
    )
    p.add_argument("--use-static", action="store_true", help="Use the in-memory chain (dev/testing)")
    p.add_argument("--store", choices=["memory", "sql"], default=settings.STORE_BACKEND, help="Storage backend")
    p.add_argument("--database-url", default=settings.DATABASE_URL, help="SQLAlchemy URL for --store sql")
    p.add_argument("--log-level", default=settings.LOG_LEVEL, help="DEBUG, INFO, WARNING, ...")
    p.add_argument("--log-file", default=settings.LOG_FILE, help="Also write JSON logs here (rotated daily)")
    return p


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level.upper(), args.log_file)

    try:
        store = make_store(args.store, args.database_url)
        chain = make_chain(args.use_static)
    except (ConsoleError, ValueError) as exc:
        logger.error(f"Startup failed: {exc}")
        return 2

    if chain is None and not settings.TRONGRID_API_KEY:
        logger.warning("TRONGRID_API_KEY is not set; TronGrid rate limits will be tight")

    console = build_console(network=Network(args.network), store=store, chain=chain)
    app = create_app(console)

    adapter_label = "StaticChainAdapter (dev/testing)" if args.use_static else "TronGridChainAdapter"
    logger.info(f"Adapter: {adapter_label} | store: {args.store} | network: {args.network}")
    logger.info(f"Serving on http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, threaded=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
