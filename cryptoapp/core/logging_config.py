import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stdout handler to the "cryptoapp" logger.
    Calling it again (tests build several apps) only updates the level.
    """
    logger = logging.getLogger("cryptoapp")
    logger.setLevel(level.upper())

    if not any(getattr(h, "_cryptoapp", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._cryptoapp = True
        logger.addHandler(handler)

    return logger
