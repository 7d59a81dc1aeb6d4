"""Root logging setup for the server process."""

from logging.config import dictConfig


def setup_logging(level: str = "INFO") -> None:
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
            }
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": level,
                "propagate": True
            },
            # SQL echo is controlled by DEBUG, not by the root level
            "sqlalchemy.engine": {
                "level": "WARNING",
            },
        },
    })
