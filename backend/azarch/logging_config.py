import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the package logger. Safe to call twice."""
    logger = logging.getLogger("azarch")
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    if any(getattr(h, "_azarch", False) for h in logger.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._azarch = True
    logger.addHandler(handler)
