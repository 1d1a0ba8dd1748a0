"""Logging configuration"""
import logging
import sys

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "dateparser", "tzlocal")


def setup_logging(log_level: str = "INFO") -> None:
    """Send every module logger to stdout in one format.

    Safe to call more than once: the stdout handler is only attached the
    first time.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if not any(getattr(h, "_biseo", False) for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handler._biseo = True
        root_logger.addHandler(handler)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).info(f"Logging configured with level: {logging.getLevelName(level)}")
