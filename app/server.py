"""
Process entry point.

    razorpay-backend                              # console script
    uvicorn app.server:build_app --factory        # under uvicorn directly

Both refuse to start, before any port is bound, when RAZORPAY_KEY_ID or
RAZORPAY_KEY_SECRET is missing.
"""
import sys

import uvicorn

from app.config.load_env import load_env
from app.config.settings import load_settings
from app.errors import ConfigurationError
from app.logging_config import configure_logging, get_logger
from app.main import create_app

logger = get_logger(__name__)


def build_app():
    load_env()
    return create_app()


def main() -> int:
    load_env()
    try:
        settings = load_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error("configuration_error", error=str(e))
        sys.exit(1)

    app = create_app(settings)
    logger.info("server_listening", host=settings.HOST, port=settings.PORT, environment=settings.ENVIRONMENT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
    return 0


if __name__ == "__main__":
    main()
