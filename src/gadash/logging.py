from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
NOISY_LOGGERS = ("httpx", "httpcore", "matplotlib")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Request lines and font cache chatter drown out render progress at INFO.
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
