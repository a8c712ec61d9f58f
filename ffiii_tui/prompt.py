"""Modal single-line prompt.

While a prompt is open it receives every key. ``enter`` hands the trimmed
input to the continuation (``"None"`` when empty) and ``esc`` hands it
``"None"`` regardless of what was typed. The continuation decides what
cancelling means.
"""
from __future__ import annotations

from dataclasses import dataclass

from .commands import Emit
from .messages import Key

CANCEL = "None"


class Continuation:
    """Follow-up to run with the prompt's final value."""

    def resolve(self, value: str):
        raise NotImplementedError


@dataclass(frozen=True)
class PromptRequest:
    prompt: str
    value: str
    continuation: Continuation


def ask(prompt: str, value: str, continuation: Continuation) -> Emit:
    """Command opening a prompt."""
    return Emit(PromptRequest(prompt, value, continuation))


class LineInput:
    """Editable line with a cursor."""

    def __init__(self, value: str = ""):
        self.set_value(value)

    def set_value(self, value: str) -> None:
        self.value = value
        self.cursor = len(value)

    def update(self, key: str) -> None:
        if key == "backspace":
            if self.cursor > 0:
                self.value = self.value[: self.cursor - 1] + self.value[self.cursor :]
                self.cursor -= 1
        elif key == "delete":
            self.value = self.value[: self.cursor] + self.value[self.cursor + 1 :]
        elif key == "left":
            self.cursor = max(0, self.cursor - 1)
        elif key == "right":
            self.cursor = min(len(self.value), self.cursor + 1)
        elif key in ("home", "ctrl+a"):
            self.cursor = 0
        elif key == "end":
            self.cursor = len(self.value)
        elif key == "ctrl+u":
            self.set_value("")
        elif len(key) == 1 and key.isprintable():
            self.value = self.value[: self.cursor] + key + self.value[self.cursor :]
            self.cursor += 1


class PromptModel:
    def __init__(self):
        self.label = ""
        self.input = LineInput()
        self.continuation: Continuation | None = None
        self.focused = False

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def update(self, msg):
        if isinstance(msg, PromptRequest):
            self.label = msg.prompt
            self.input.set_value(msg.value)
            self.continuation = msg.continuation
            self.focus()
            return None
        if not self.focused or not isinstance(msg, Key):
            return None
        if msg.name == "enter":
            value = self.input.value.strip() or CANCEL
            return self._finish(value)
        if msg.name == "esc":
            return self._finish(CANCEL)
        self.input.update(msg.name)
        return None

    def _finish(self, value: str):
        self.blur()
        continuation, self.continuation = self.continuation, None
        if continuation is None:
            return None
        return continuation.resolve(value)

    def view(self) -> str:
        return f"{self.label}{self.input.value}"
