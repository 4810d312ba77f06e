import logging
from typing import Any, Dict, Optional


class AppLogger:
    """Stdlib logger wrapper that carries bound key/value context.

    Messages are rendered as ``message | key=value ...`` so that a plain
    console handler stays greppable without a structured formatter.
    """

    def __init__(
        self,
        name: str,
        context: Optional[Dict[str, Any]] = None,
        _logger: Optional[logging.Logger] = None,
    ):
        self._logger = _logger or logging.getLogger(name)
        self._name = name
        self._context = dict(context or {})

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self._context)

    def bind(self, **extra: Any) -> "AppLogger":
        return AppLogger(self._name, {**self._context, **extra}, _logger=self._logger)

    def debug(self, message: str, **context: Any) -> None:
        self.log(logging.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log(logging.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.log(logging.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        self.log(logging.ERROR, message, **context)

    def exception(self, message: str, **context: Any) -> None:
        """Log at ERROR including the exception currently being handled."""
        self.log(logging.ERROR, message, exc_info=True, **context)

    def log(self, level: int, message: str, *, exc_info: Any = None, **context: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        payload = {**self._context, **context}
        self._logger.log(level, render(message, payload), exc_info=exc_info)


def render(message: str, context: Dict[str, Any]) -> str:
    if not context:
        return message
    pairs = " ".join(f"{key}={_stringify(value)}" for key, value in context.items())
    return f"{message} | {pairs}"


def _stringify(value: Any) -> str:
    if isinstance(value, (list, tuple, set, dict)):
        return repr(value)
    return str(value)


def get_logger(name: str) -> AppLogger:
    return AppLogger(name)
