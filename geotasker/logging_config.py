from logging.config import dictConfig
from pathlib import Path

from geotasker.core.config import DevConfig, GlobalConfig, config

LOG_FILE_NAME = "geotasker.log"
HANDLERS = ["console", "json_file"]


def configure_logging(settings: GlobalConfig = config) -> None:
    """Rich console plus a rotating JSON file, both tagged with the request correlation id."""
    dev = isinstance(settings, DevConfig)
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "correlation_id": {
                    "()": "asgi_correlation_id.CorrelationIdFilter",
                    "uuid_length": 8 if dev else 32,
                    "default_value": "-",
                },
            },
            "formatters": {
                "console": {
                    "class": "logging.Formatter",
                    "style": "{",
                    "format": "({correlation_id}) {name} - {message}",
                },
                "json": {
                    "class": "pythonjsonlogger.jsonlogger.JsonFormatter",
                    "style": "{",
                    "format": "{asctime} {levelname} {correlation_id} {name} {funcName} {message}",
                },
            },
            "handlers": {
                "console": {
                    "class": "rich.logging.RichHandler",
                    "formatter": "console",
                    "filters": ["correlation_id"],
                },
                "json_file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "formatter": "json",
                    "filename": str(log_dir / LOG_FILE_NAME),
                    "maxBytes": 1024 * 1024,
                    "backupCount": 2,
                    "encoding": "utf8",
                    "filters": ["correlation_id"],
                },
            },
            "loggers": {
                "geotasker": {
                    "handlers": HANDLERS,
                    "level": "DEBUG" if dev else "INFO",
                    "propagate": False,
                },
                # per-request lines duplicate the client's own request log
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
        }
    )
