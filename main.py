#!/usr/bin/env python3
"""Project entry point. Bootstraps the leaderboard core and web server."""

import logging

from core import config
from web import app as web_app


logger = logging.getLogger("leaderboard")


def configure_logging() -> None:
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main() -> None:
    configure_logging()
    core = web_app.install_core(web_app.build_core())
    host, port = config.host(), config.port()
    logger.info({"evt": "leaderboard_server_start", "host": host, "port": port})
    try:
        web_app.app.run(host=host, port=port, threaded=True)
    finally:
        core.shutdown()


if __name__ == "__main__":
    main()
