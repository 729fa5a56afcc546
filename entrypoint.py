import sys

import uvicorn

from constants import HOST, LOG_FILE, LOG_LEVEL, PORT
from logging_config import get_logger, setup_logging

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from app import app  # noqa: E402

logger = get_logger(__name__)


def main() -> int:
    """Run the relay until a shutdown signal arrives.

    uvicorn exits with status 1 by itself when the listener cannot bind;
    anything else escaping the server is logged and mapped to status 1 here.
    """
    logger.info(f"Starting relay server on {HOST}:{PORT}")
    try:
        uvicorn.run(app, host=HOST, port=PORT, log_config=None)
    except Exception as e:
        logger.critical(f"Unrecoverable server error: {e}", exc_info=True)
        return 1
    logger.info("Server closed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
