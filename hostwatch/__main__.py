"""Run the telemetry engine with its JSON endpoint: ``python -m hostwatch``."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace

from hostwatch.app import build_engine
from hostwatch.core.config import load_settings
from hostwatch.web import create_app

logger = logging.getLogger("hostwatch")


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Host telemetry engine")
    parser.add_argument("--host", default=settings.server.host)
    parser.add_argument("--port", type=int, default=settings.server.port)
    parser.add_argument("--db-url", default=settings.storage.database_url)
    parser.add_argument("--interval", type=float, default=settings.sampling.fast_interval)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    settings = replace(
        settings,
        sampling=replace(settings.sampling, fast_interval=args.interval),
        storage=replace(settings.storage, database_url=args.db_url),
    )
    engine = build_engine(settings)
    server = create_app(engine, host=args.host, port=args.port)
    engine.start()
    logger.info("Serving telemetry on %s", server.server_address())
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Stopping...")
    finally:
        server.stop()
        engine.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
