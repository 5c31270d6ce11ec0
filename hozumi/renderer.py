"""Frame renderers and the row surfaces the sequencer writes through.

Two regimes share one row interface:

* ScrollingSurface prints the whole line buffer through a StreamRenderer,
  holds, then moves the cursor back up and clears what it printed.
* GridSurface writes rows of a fixed cell Grid and paints it with curses.
"""

import curses
import logging
import shutil
import sys
import threading
import time
from collections import deque

from hozumi.cells import CONTINUATION, DEFAULT, HIGHLIGHT, Grid, clip, physical_rows, sanitize

logger = logging.getLogger(__name__)

# ANSI escape codes
YELLOW = '\033[33m'
BLUE = '\033[34m'
RESET = '\033[0m'
UP_AND_CLEAR = '\033[A\033[2K'


class AnimationStopped(Exception):
    """Raised from a hold once the stop event has been set."""


class StreamRenderer:
    def __init__(self, stream=None, sleep=time.sleep, columns=None):
        self.stream = stream or sys.stdout
        self.sleep = sleep
        self.columns = columns
        self._rows = 0

    def render(self, lines):
        if not lines:
            return
        self.stream.write('\n'.join(lines) + '\n')
        self.stream.flush()
        self._rows += sum(physical_rows(line, self.columns) for line in lines)

    def hold(self, duration):
        self.sleep(duration)

    def erase(self):
        # Walk back up over every row written since the last erase
        self.stream.write(UP_AND_CLEAR * self._rows)
        self.stream.flush()
        self._rows = 0

    def frame(self, lines, duration):
        self.render(lines)
        self.hold(duration)
        self.erase()

    def reset(self):
        self.stream.write(RESET + '\n')
        self.stream.flush()


class ScrollingRow:
    def __init__(self, surface):
        self.surface = surface
        self._opened = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def show(self, text, duration, highlight=False):
        # Only the newest line is ever live in scrolling mode
        text = sanitize(text)
        lines = self.surface.lines
        if self._opened:
            lines[-1] = text
        else:
            lines.append(text)
            self._opened = True
        self.surface.present(duration)


class ScrollingSurface:
    """Growing line buffer reprinted every frame.

    With `rows` set, the buffer never takes more than that many physical
    terminal rows: old lines drop off the top, and a single line taller
    than the limit is cut short.
    """

    def __init__(self, renderer, rows=None):
        self.renderer = renderer
        self.rows = rows
        self.lines = deque()

    @classmethod
    def for_terminal(cls, sleep=time.sleep):
        size = shutil.get_terminal_size()
        renderer = StreamRenderer(sleep=sleep, columns=size.columns)
        return cls(renderer, rows=max(1, size.lines - 1))

    def physical_rows(self):
        return sum(physical_rows(line, self.renderer.columns) for line in self.lines)

    def _trim(self):
        if self.rows is None:
            return
        while len(self.lines) > 1 and self.physical_rows() > self.rows:
            self.lines.popleft()
        if self.lines and self.physical_rows() > self.rows:
            self.lines[-1] = clip(self.lines[-1], self.renderer.columns, self.rows)

    def present(self, duration):
        self._trim()
        self.renderer.frame(list(self.lines), duration)

    def band(self, count):
        return [ScrollingRow(self) for _ in range(count)]

    def pause(self, duration):
        self.renderer.hold(duration)

    def show_lines(self, lines, duration):
        self.lines = deque(lines)
        self.present(duration)

    def close(self):
        self.renderer.reset()


class GridRenderer:
    """Paints a Grid onto a curses window, one refresh per frame."""

    def __init__(self, screen, lock=None):
        self.screen = screen
        self.lock = lock or threading.Lock()
        self.attrs = {DEFAULT: curses.A_NORMAL, HIGHLIGHT: curses.A_BOLD}
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        try:
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(HIGHLIGHT, curses.COLOR_YELLOW, -1)
            self.attrs[HIGHLIGHT] = curses.color_pair(HIGHLIGHT)
        except curses.error:
            logger.warning("Terminal has no color support, highlighting in bold")

    def size(self):
        with self.lock:
            height, width = self.screen.getmaxyx()
        return width, height

    def flush(self, grid):
        dirty = grid.take_dirty()
        with self.lock:
            for y in sorted(dirty):
                if y < grid.height:
                    self._paint_row(y, grid.rows[y])
            self.screen.refresh()

    def _paint_row(self, y, row):
        x = 0
        while x < len(row):
            color = row[x].color
            start = x
            chars = []
            while x < len(row) and (row[x].color == color or row[x] is CONTINUATION):
                chars.append(row[x].char)
                x += 1
            try:
                self.screen.addstr(y, start, ''.join(chars), self.attrs[color])
            except curses.error:
                # Writing the bottom-right cell moves the cursor off screen
                pass


class GridRow:
    def __init__(self, surface, y):
        self.surface = surface
        self.y = y
        self._claim = None

    def __enter__(self):
        self._claim = self.surface.grid.claim(self.y)
        self._claim.__enter__()
        return self

    def __exit__(self, *exc):
        claim, self._claim = self._claim, None
        return claim.__exit__(*exc)

    def show(self, text, duration, highlight=False):
        surface = self.surface
        surface.grid.set_row(self.y, text, HIGHLIGHT if highlight else DEFAULT)
        surface.renderer.flush(surface.grid)
        surface.hold(duration)


class GridSurface:
    """Rows of a fixed grid handed out band by band, wrapping to the top."""

    def __init__(self, renderer, stop=None, sleep=None):
        self.renderer = renderer
        self.stop = stop or threading.Event()
        self.sleep = sleep or self.stop.wait
        self.grid = Grid(*renderer.size())
        self.cursor = 0
        self.wrap()

    def wrap(self):
        width, height = self.renderer.size()
        self.grid.resize(width, height)
        self.renderer.flush(self.grid)
        self.cursor = 0

    def band(self, count):
        if self.cursor > 0 and self.cursor + count > self.grid.height:
            logger.debug(f"Grid full at row {self.cursor}, wrapping to the top")
            self.wrap()
        rows = [GridRow(self, y) for y in range(self.cursor, self.cursor + count)]
        self.cursor += count
        return rows

    def hold(self, duration):
        self.sleep(duration)
        if self.stop.is_set():
            raise AnimationStopped()

    def pause(self, duration):
        self.hold(duration)

    def close(self):
        self.stop.set()
