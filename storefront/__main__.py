from __future__ import annotations

import argparse

import uvicorn

from storefront.config import get_settings
from storefront.observability.logging import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Storefront orders/products API")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    args = parser.parse_args()

    configure_logging(get_settings().log_level)
    # log_config=None keeps the structlog handlers installed above.
    uvicorn.run("storefront.main:app", host=args.host, port=args.port, reload=bool(args.reload), log_config=None)


if __name__ == "__main__":
    main()
