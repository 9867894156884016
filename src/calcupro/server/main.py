"""
Entrypoint running the calculator API under uvicorn.

Command-line options override the environment (see ``ServiceSettings.from_env``).
"""

import argparse
from typing import List, Optional

from pydantic import ValidationError
import uvicorn

from calcupro.common.config import ServiceSettings
from calcupro.common.logger import configure_logging, logger
from calcupro.server.app import create_app


def parse_args(argv: Optional[List[str]] = None) -> ServiceSettings:
    """
    Parse command-line arguments and validate them into service settings.

    :param list argv: Arguments to parse, ``sys.argv[1:]`` when omitted

    :return: Validated settings
    :rtype: ServiceSettings
    """
    parser = argparse.ArgumentParser(description="CalcuPro arithmetic API server")
    parser.add_argument("--host", help="Address to bind (default: CALCUPRO_HOST or 127.0.0.1)")
    parser.add_argument("--port", help="Port to listen on (default: CALCUPRO_PORT, PORT or 3001)")
    parser.add_argument("--log-level", help="Logging level (default: CALCUPRO_LOG_LEVEL or INFO)")

    args = parser.parse_args(argv)

    try:
        settings = ServiceSettings.from_env()
        overrides = {
            "host": args.host,
            "port": args.port,
            "log_level": args.log_level.upper() if args.log_level else None,
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}
        if overrides:
            settings = ServiceSettings(**{**settings.model_dump(), **overrides})
        return settings
    except ValidationError as exc:
        parser.error(str(exc))


def main(argv: Optional[List[str]] = None) -> None:
    """Start the API server."""
    settings = parse_args(argv)
    configure_logging(settings.log_level)

    logger.info(f"🧮 Calculator API running on {settings.host}:{settings.port}")
    logger.info(f"   Health check: http://{settings.host}:{settings.port}/health")

    uvicorn.run(
        create_app(settings),
        host=str(settings.host),
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
