"""Run the rover coordinator behind the aiohttp ingress server.

Usage::

    python -m sentinel_rover --port 3000 --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging

from aiohttp import web

from sentinel_rover.config import SentinelConfig
from sentinel_rover.coordinator import RoverCoordinator
from sentinel_rover.server import create_app

_logger = logging.getLogger("sentinel_rover")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="sentinel_rover", description="Sentinel rover defense coordinator")
    parser.add_argument("--host", default=None, help="Bind address (default: SENTINEL_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: SENTINEL_PORT, PORT or 3000)")
    parser.add_argument("--no-simulation", action="store_true", help="Disable telemetry and threat simulation")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the simulation random generator")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Root log level",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.no_simulation:
        overrides["simulation_enabled"] = False
    if args.seed is not None:
        overrides["random_seed"] = args.seed
    config = SentinelConfig.from_env(**overrides)

    coordinator = RoverCoordinator(config)
    app = create_app(coordinator)
    _logger.info("Sentinel rover defense API on http://%s:%d/api (ws: /ws)", config.host, config.port)
    web.run_app(app, host=config.host, port=config.port, print=None)


if __name__ == "__main__":
    main()
