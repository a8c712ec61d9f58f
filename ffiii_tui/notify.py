"""Transient status line shown in the top bar."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .commands import Emit, Tick
from .logger import get_logger

log = get_logger(__name__)

CLEAR_AFTER = 10.0


class Level(Enum):
    LOG = "log"
    WARN = "warn"
    ERR = "err"


@dataclass(frozen=True)
class Notify:
    text: str
    level: Level = Level.LOG


@dataclass(frozen=True)
class ClearNotification:
    serial: int


def notify_log(text: str) -> Emit:
    return Emit(Notify(text, Level.LOG))


def notify_warn(text: str) -> Emit:
    return Emit(Notify(text, Level.WARN))


def notify_err(text: str) -> Emit:
    return Emit(Notify(text, Level.ERR))


class NotifyModel:
    """Holds the latest notification until its clear timer fires."""

    def __init__(self):
        self.text = ""
        self.level = Level.LOG
        self.serial = 0

    def update(self, msg):
        if isinstance(msg, Notify):
            self.serial += 1
            self.text = msg.text
            self.level = msg.level
            if msg.level is Level.ERR:
                log.error("notify: %s", msg.text)
            elif msg.level is Level.WARN:
                log.warning("notify: %s", msg.text)
            else:
                log.info("notify: %s", msg.text)
            return Tick(CLEAR_AFTER, ClearNotification(self.serial))
        if isinstance(msg, ClearNotification):
            # a newer notification owns the line
            if msg.serial == self.serial:
                self.text = ""
                self.level = Level.LOG
        return None

    def view(self) -> str:
        if not self.text:
            return ""
        return f"Notification: {self.text}"
