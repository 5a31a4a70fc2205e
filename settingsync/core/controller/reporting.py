from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ErrorReporter(Protocol):
    def report(self, error: BaseException) -> None: ...


class LoggingErrorReporter(ErrorReporter):
    def __init__(self, logger: logging.Logger = logger) -> None:
        self._logger = logger

    def report(self, error: BaseException) -> None:
        self._logger.error("%s", error, exc_info=error)
