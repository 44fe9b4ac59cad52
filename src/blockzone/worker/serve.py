from __future__ import annotations

import argparse
import logging

from . import create_app
from .config import WorkerConfig


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run the BlockZone leaderboard worker.")
    p.add_argument("--host", type=str, default="127.0.0.1")
    p.add_argument("--port", type=int, default=8787)
    p.add_argument("--store", type=str, default=None,
                   help="Directory for persistent KV namespaces (in-memory when omitted)")
    p.add_argument("--debug", action="store_true")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = WorkerConfig.from_env()
    if args.store:
        config.store_path = args.store
    app = create_app(config)
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":  # pragma: no cover
    main()
