import logging

import uvicorn

from .api import create_app
from .config import RelayConfig

logger = logging.getLogger(__name__)


def main():
    config = RelayConfig.from_env()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app(config)
    logger.info(f"Server listening on http://{config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)


if __name__ == "__main__":
    main()
