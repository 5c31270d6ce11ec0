"""Pytest fixtures and fakes shared by the hozumi tests."""

from __future__ import annotations

import curses
import threading

import pytest

from hozumi import timing
from hozumi.config import WriterConfig


class RecordingClock:
    """Stands in for time.sleep; remembers every hold."""

    def __init__(self):
        self.holds = []

    def __call__(self, seconds):
        self.holds.append(seconds)

    @property
    def elapsed(self):
        return sum(self.holds)


class RecordingRow:
    def __init__(self, surface, y):
        self.surface = surface
        self.y = y

    def __enter__(self):
        with self.surface.lock:
            if self.y in self.surface.active:
                self.surface.overlaps.append(self.y)
            self.surface.active.add(self.y)
        return self

    def __exit__(self, *exc):
        with self.surface.lock:
            self.surface.active.discard(self.y)
            self.surface.finished.append(self.y)
        return False

    def show(self, text, duration, highlight=False):
        with self.surface.lock:
            self.surface.frames.append((self.y, text, duration, highlight))
        self.surface.sleep(duration)


class RecordingSurface:
    """In-memory surface capturing every frame the sequencer emits."""

    def __init__(self, sleep=None):
        self.lock = threading.Lock()
        self.sleep = sleep or (lambda seconds: None)
        self.frames = []
        self.pauses = []
        self.shown_lines = []
        self.active = set()
        self.overlaps = []
        self.finished = []
        self.next_row = 0

    def band(self, count):
        rows = [RecordingRow(self, y) for y in range(self.next_row, self.next_row + count)]
        self.next_row += count
        return rows

    def pause(self, duration):
        self.pauses.append(duration)

    def show_lines(self, lines, duration):
        self.shown_lines.append((list(lines), duration))

    def frames_for(self, y):
        return [frame for frame in self.frames if frame[0] == y]


class FakeScreen:
    """Just enough of a curses window for the grid renderer."""

    def __init__(self, width=40, height=10, keys=()):
        self.width = width
        self.height = height
        self.keys = list(keys)
        self.writes = []
        self.refreshes = 0

    def getmaxyx(self):
        return self.height, self.width

    def addstr(self, y, x, text, attr=0):
        self.writes.append((y, x, text, attr))
        if y == self.height - 1 and x + len(text) >= self.width:
            raise curses.error("addwstr() returned ERR")

    def refresh(self):
        self.refreshes += 1

    def nodelay(self, flag):
        pass

    def getch(self):
        if self.keys:
            return self.keys.pop(0)
        return -1


def make_config(contents=('ほずみ',), tier='middle', **flags):
    if flags.get('parallel'):
        flags.setdefault('fixed', True)
    return WriterConfig(contents=tuple(contents), timing=timing.resolve(tier), **flags)


@pytest.fixture
def clock() -> RecordingClock:
    return RecordingClock()


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def screen() -> FakeScreen:
    return FakeScreen()
