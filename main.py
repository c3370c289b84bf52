"""Entry point for the document provider host with proper lifespan management."""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn

from document_contract.config import settings
from document_contract.resolver import create_resolver
from document_contract.server import create_app

# Custom logging format
LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(message)s"
DATE_FORMAT = "%m/%d/%y %H:%M:%S"


def configure_logging():
    """Configure unified logging format for all loggers."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.handlers = [handler]

    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main():
    """Run the provider host."""
    configure_logging()

    resolver = create_resolver(include_remote=False)
    if len(resolver) == 0:
        logging.warning(
            "No providers configured! Set DOCUMENT_CONTRACT_LOCAL_ROOT_DIR to serve a directory."
        )
    else:
        logging.info(f"Serving authorities: {', '.join(resolver.get_authorities())}")

    @asynccontextmanager
    async def lifespan(app):
        yield
        # Shutdown
        logging.info("Shutting down provider host...")
        resolver.close_all()
        logging.info("Provider host shutdown complete")

    app = create_app(resolver, lifespan=lifespan)

    logging.info(
        f"Starting document provider host on http://{settings.http_host}:{settings.http_port}"
    )

    # Configure uvicorn to use our logging format
    log_config = uvicorn.config.LOGGING_CONFIG.copy()
    log_config["formatters"]["default"]["fmt"] = LOG_FORMAT
    log_config["formatters"]["default"]["datefmt"] = DATE_FORMAT
    log_config["formatters"]["access"]["fmt"] = LOG_FORMAT
    log_config["formatters"]["access"]["datefmt"] = DATE_FORMAT

    # Run with uvicorn
    uvicorn.run(
        app,
        host=settings.http_host,
        port=settings.http_port,
        log_level="info",
        log_config=log_config,
    )


if __name__ == "__main__":
    main()
