#!/usr/bin/env python3
"""Movie Night Recommender server entrypoint: python -m recserver.server"""

import uvicorn

from .app import create_app
from .config import ServerConfig


def main() -> None:
    config = ServerConfig.from_env()
    app = create_app()
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
