"""User-facing notices (the toasts of the UI), collected and logged."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from studygen.core.logging import get_logger

logger = get_logger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


Listener = Callable[[Notice], None]


class Notifier:
    """Keeps every notice for the presentation surface and fans out to listeners."""

    def __init__(self) -> None:
        self.notices: list[Notice] = []
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _push(self, level: NoticeLevel, message: str) -> None:
        notice = Notice(level, message)
        self.notices.append(notice)
        if level is NoticeLevel.ERROR:
            logger.warning("notice: %s", message)
        else:
            logger.info("notice: %s", message)
        for fn in list(self._listeners):
            fn(notice)

    def success(self, message: str) -> None:
        self._push(NoticeLevel.SUCCESS, message)

    def info(self, message: str) -> None:
        self._push(NoticeLevel.INFO, message)

    def error(self, message: str) -> None:
        self._push(NoticeLevel.ERROR, message)

    @property
    def errors(self) -> list[str]:
        return [n.message for n in self.notices if n.level is NoticeLevel.ERROR]

    def clear(self) -> None:
        self.notices.clear()
