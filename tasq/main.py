"""
Main application entry point
"""

import uvicorn
from tasq.config.settings import settings
from tasq.utils.error_handler import StoreCorruptedError
from tasq.utils.logger import logger
from tasq.web.main import create_app


def main():
    """Main entry point"""
    try:
        app = create_app()
    except StoreCorruptedError as e:
        # Refuse to start rather than overwrite unreadable data
        logger.critical(f"Fatal error: {e}")
        raise SystemExit(1)

    logger.info(f"Starting TasQ on http://{settings.WEB_HOST}:{settings.WEB_PORT}")
    uvicorn.run(app, host=settings.WEB_HOST, port=settings.WEB_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
