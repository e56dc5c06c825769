"""
Entry point to run the identity API server.
"""
import logging

import uvicorn

from app.api import create_app
from app.config import Settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("server")


def main() -> None:
    settings = Settings.from_env()
    app = create_app(settings)
    log.info("server is running on port %s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
