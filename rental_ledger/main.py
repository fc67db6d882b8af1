"""Main application entry point."""

import logging
import os

import uvicorn
from dotenv import load_dotenv

from rental_ledger.services.config import load_config
from rental_ledger.services.locale_service import configure_locale
from rental_ledger.services.logging import setup_server_logging

# Load environment variables
load_dotenv()


def main() -> None:
    """Configure logging and serve the API with uvicorn."""
    config = load_config()
    setup_server_logging(config.log_file, config.log_level)
    configure_locale(config.locale, config.currency)
    logger = logging.getLogger(__name__)

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(
        "Starting rental ledger API on %s:%d (database=%s, locale=%s)",
        host,
        port,
        config.database_url.split("://")[0],
        config.locale,
    )

    from rental_ledger.api.app import app

    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
