"""Entry point for the RideBook PyQt client."""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import List, Optional

from .core.config import ClientSettings
from .core.logger import logger
from .gui import run
from .server_api import MockServerAPI, ServerAPI


def _parse_args(
    settings: ClientSettings, argv: Optional[List[str]] = None
) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the RideBook desktop client.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment variables RIDEBOOK_API_URL, RIDEBOOK_TIMEOUT,\n"
            "RIDEBOOK_PASSENGER_POLL_MS, RIDEBOOK_RIDER_POLL_MS and\n"
            "RIDEBOOK_COOKIE_FILE (or a .env file) provide the defaults."
        ),
    )
    parser.add_argument(
        "--api-url",
        default=settings.api_url,
        help="Base URL of the RideBook REST API (default: %(default)s).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.timeout,
        help="HTTP timeout in seconds when calling the API (default: %(default)s).",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use an in-memory API seeded with demo accounts instead of the network.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    settings = ClientSettings.from_env()
    args = _parse_args(settings, argv)
    settings = replace(settings, api_url=args.api_url.rstrip("/"), timeout=args.timeout)

    api: ServerAPI
    if args.mock:
        api = MockServerAPI()
        logger.info(
            "Using in-memory API; demo accounts use password '%s'",
            MockServerAPI.DEMO_PASSWORD,
        )
    else:
        api = ServerAPI(settings.api_url, settings.timeout)
        logger.info("Using RideBook API at %s", settings.api_url)

    run(settings=settings, api=api)


if __name__ == "__main__":
    main()
