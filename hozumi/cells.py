"""Character widths and the fixed-size cell grid."""

import logging
import re
import threading
import unicodedata
from collections import namedtuple
from contextlib import contextmanager

logger = logging.getLogger(__name__)

ANSI_PATTERN = re.compile(r'\033\[[0-9;?]*[A-Za-z]')
ANSI_SPLIT = re.compile(f'({ANSI_PATTERN.pattern})')

PLACEHOLDER = '?'

DEFAULT = 0
HIGHLIGHT = 1

Cell = namedtuple('Cell', ['char', 'color'])

BLANK = Cell(' ', DEFAULT)
# Right half of a wide character; painters skip it
CONTINUATION = Cell('', DEFAULT)


def printable(char):
    """Replace a lone surrogate (an undecodable argv byte) or a control
    character with '?', so one character never moves the cursor."""
    if '\ud800' <= char <= '\udfff':
        return PLACEHOLDER
    if unicodedata.category(char) == 'Cc':
        return PLACEHOLDER
    return char


def sanitize(text):
    return ''.join(printable(c) for c in text)


def char_width(char):
    if unicodedata.combining(char):
        return 0
    if unicodedata.east_asian_width(char) in ('W', 'F'):
        return 2
    return 1


def _walk(text, columns):
    """Yield (token, row, width) for text laid out `columns` wide.

    ANSI sequences come through whole with zero width. A character that
    would straddle the right edge starts the next row, as terminals do.
    """
    row = x = 0
    for token in ANSI_SPLIT.split(text):
        if not token:
            continue
        if ANSI_PATTERN.fullmatch(token):
            yield token, row, 0
            continue
        for char in token:
            w = char_width(printable(char))
            if columns and x and x + w > columns:
                row += 1
                x = 0
            x += w
            yield char, row, w


def display_width(text):
    """Terminal columns taken by text, ignoring ANSI color sequences."""
    return sum(w for _, _, w in _walk(text, None))


def physical_rows(text, columns):
    # A line exactly `columns` wide does not wrap
    rows = 0
    for _, row, _ in _walk(text, columns):
        rows = row
    return rows + 1


def clip(text, columns, rows):
    """Cut text down to what fits in `rows` rows of `columns` cells."""
    if not columns:
        return text
    return ''.join(token for token, row, _ in _walk(text, columns) if row < rows)


class RowConflict(RuntimeError):
    pass


class Grid:
    """A width x height block of cells addressed by (column, row).

    Writers claim a row before writing it. Two live claims on one row
    raise RowConflict, so concurrent writers only ever touch disjoint
    rows.
    """

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.rows = [[BLANK] * width for _ in range(height)]
        self.dirty = set(range(height))
        self._claimed = set()
        self._lock = threading.Lock()

    def resize(self, width, height):
        self.width = width
        self.height = height
        self.clear()

    def clear(self):
        self.rows = [[BLANK] * self.width for _ in range(self.height)]
        with self._lock:
            self.dirty = set(range(self.height))

    def take_dirty(self):
        with self._lock:
            dirty, self.dirty = self.dirty, set()
        return dirty

    def _touch(self, y):
        with self._lock:
            self.dirty.add(y)

    @contextmanager
    def claim(self, y):
        with self._lock:
            if y in self._claimed:
                logger.error(f"Row {y} claimed by two writers")
                raise RowConflict(f"row {y} is already being written")
            self._claimed.add(y)
        try:
            yield y
        finally:
            with self._lock:
                self._claimed.discard(y)

    def set_row(self, y, text, color=DEFAULT):
        """Clear row y and write text from column 0, honoring wide chars."""
        if not 0 <= y < self.height:
            return
        row = [BLANK] * self.width
        x = 0
        for char in text:
            char = printable(char)
            w = char_width(char)
            if w == 0:
                continue
            if x + w > self.width:
                break
            row[x] = Cell(char, color)
            if w == 2:
                row[x + 1] = CONTINUATION
            x += w
        self.rows[y] = row
        self._touch(y)

    def row_text(self, y):
        return ''.join(cell.char for cell in self.rows[y]).rstrip()
