"""Event loop running the :class:`~ffiii_tui.ui.App` inside curses.

Keys and command results are funnelled through one queue and applied on the
loop thread, so views never see concurrent updates. Commands run on a thread
pool; a :class:`Sequence` runs its members one at a time and waits until the
loop has handled each resulting message before starting the next.
"""
from __future__ import annotations

import curses
import queue
import threading
from concurrent.futures import ThreadPoolExecutor

from . import screen
from .commands import Batch, Emit, Sequence, Tick
from .keys import key_name
from .logger import get_logger
from .messages import Key, Quit, WindowSize
from .notify import Level, Notify

log = get_logger(__name__)

KEY_TIMEOUT_MS = 50
WORKERS = 16


class Program:
    def __init__(self, app, stdscr, draw=screen.draw, workers: int = WORKERS):
        self.app = app
        self.stdscr = stdscr
        self.draw = draw
        self.messages: "queue.Queue[tuple]" = queue.Queue()
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ffiii-cmd")
        self.running = False

    # commands

    def _invoke(self, cmd):
        try:
            return cmd()
        except Exception as exc:
            log.exception("command %r failed", cmd)
            return Notify(str(exc), Level.ERR)

    def _run_async(self, cmd) -> None:
        self.messages.put((self._invoke(cmd), None))

    def _run_and_wait(self, cmd) -> None:
        """Run ``cmd`` and block until the loop has handled its message(s)."""
        if cmd is None:
            return
        if isinstance(cmd, (Batch, Sequence)):
            for member in cmd.cmds:
                self._run_and_wait(member)
            return
        done = threading.Event()
        self.messages.put((self._invoke(cmd), done))
        while not done.wait(0.1):
            if not self.running:
                return

    def _schedule(self, tick: Tick) -> None:
        # timers are daemon threads so pending ticks never delay exit
        timer = threading.Timer(tick.delay, self.messages.put, args=((tick.msg, None),))
        timer.daemon = True
        timer.start()

    def _run_sequence(self, cmds) -> None:
        for cmd in cmds:
            if not self.running:
                return
            self._run_and_wait(cmd)

    def dispatch(self, cmd) -> None:
        if cmd is None:
            return
        if isinstance(cmd, Batch):
            for member in cmd.cmds:
                self.dispatch(member)
        elif isinstance(cmd, Sequence):
            self.executor.submit(self._run_sequence, cmd.cmds)
        elif isinstance(cmd, Emit):
            self.messages.put((cmd.msg, None))
        elif isinstance(cmd, Tick):
            self._schedule(cmd)
        else:
            self.executor.submit(self._run_async, cmd)

    # messages

    def handle(self, msg) -> None:
        if msg is None:
            return
        if isinstance(msg, Quit):
            log.info("quit requested")
            self.running = False
            return
        try:
            cmd = self.app.update(msg)
        except Exception as exc:
            log.exception("update failed for %r", msg)
            cmd = Emit(Notify(str(exc), Level.ERR))
        self.dispatch(cmd)

    def drain(self) -> None:
        while self.running:
            try:
                msg, done = self.messages.get_nowait()
            except queue.Empty:
                return
            try:
                self.handle(msg)
            finally:
                if done is not None:
                    done.set()

    def read_key(self):
        try:
            ch = self.stdscr.get_wch()
        except curses.error:
            return None
        if ch == curses.KEY_RESIZE:
            curses.update_lines_cols()
            h, w = self.stdscr.getmaxyx()
            return WindowSize(w, h)
        name = key_name(ch)
        if name is None:
            return None
        return Key(name)

    def run(self) -> None:
        self.running = True
        self.stdscr.timeout(KEY_TIMEOUT_MS)
        h, w = self.stdscr.getmaxyx()
        self.handle(WindowSize(w, h))
        self.dispatch(self.app.init())
        try:
            while self.running:
                self.drain()
                if not self.running:
                    break
                self.draw(self.stdscr, self.app)
                self.handle(self.read_key())
        finally:
            self.running = False
            # release sequence runners still waiting on the loop
            while True:
                try:
                    _, done = self.messages.get_nowait()
                except queue.Empty:
                    break
                if done is not None:
                    done.set()
            self.executor.shutdown(wait=False, cancel_futures=True)


def run(stdscr, app) -> None:
    """Run ``app`` until the user quits."""
    with screen.temp_cursor(0), screen.keypad_mode(stdscr):
        try:
            curses.use_default_colors()
        except curses.error:  # pragma: no cover - terminals without color
            pass
        Program(app, stdscr).run()
