import logging
import sys

# Client libraries that log every HTTP request or pool event at INFO.
_CHATTY_LOGGERS = ("httpx", "openai", "psycopg.pool")


class Log:
    """Centralized worker logging on the ``insight_worker`` logger."""

    _logger: logging.Logger = logging.getLogger("insight_worker")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level, attach a stdout handler once and quiet chatty clients.

        Client library loggers stay at WARNING unless the worker runs at DEBUG.
        """
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(
                logging.DEBUG if cls._logger.level == logging.DEBUG else logging.WARNING
            )

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log at ERROR with the traceback of the exception being handled."""
        cls._logger.exception(message, extra=kwargs)
