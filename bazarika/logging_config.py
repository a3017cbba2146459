import logging
from logging.config import dictConfig

from bazarika.middleware.request_context import RequestIdFilter


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup."""
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["request_id"],
            },
        },
        "root": {"level": level.upper(), "handlers": ["console"]},
        "loggers": {
            # SQL echo stays off unless asked for explicitly
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    })

    logging.getLogger(__name__).debug("Logging configured at %s", level)
