"""Run the API server: `python -m gigconnect`."""
import logging

import uvicorn

from . import config


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger("gigconnect")
    logger.info("Starting server on %s:%s", config.HOST, config.PORT)
    uvicorn.run("gigconnect.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
