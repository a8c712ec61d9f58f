"""Deferred commands.

A command is a value describing work for the runtime. Invoking an
:class:`Emit`, :class:`Call` or :class:`Tick` yields exactly one message.
:class:`Batch` members run independently; :class:`Sequence` members run one
after another, each starting once the previous message has been handled.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable


class Command:
    """Marker base for command values."""


@dataclass(frozen=True)
class Emit(Command):
    msg: Any

    def __call__(self):
        return self.msg


@dataclass(frozen=True)
class Call(Command):
    func: Callable
    args: tuple = ()

    def __call__(self):
        return self.func(*self.args)


@dataclass(frozen=True)
class Tick(Command):
    delay: float
    msg: Any

    def __call__(self):
        time.sleep(self.delay)
        return self.msg


@dataclass(frozen=True)
class Batch(Command):
    cmds: tuple


@dataclass(frozen=True)
class Sequence(Command):
    cmds: tuple


def _compact(cmds):
    return tuple(c for c in cmds if c is not None)


def batch(*cmds):
    """Combine commands that may run in any order."""
    valid = _compact(cmds)
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return Batch(valid)


def sequence(*cmds):
    """Combine commands that must run in order."""
    valid = _compact(cmds)
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return Sequence(valid)
