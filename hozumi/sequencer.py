"""The typewriter itself: reveal cycles, the Cool! shout and the dance."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait

from hozumi.renderer import BLUE, YELLOW

logger = logging.getLogger(__name__)

COOL = 'C' + 'o' * 85 + 'l!'

# Gap between row starts in a fixed-grid band
ROW_STAGGER = 0.090

DANCE_REACH = 40

LOGO = [
    f"{YELLOW}-  -  {BLUE}----  {YELLOW}----  {BLUE}-  -  {YELLOW}-   -  {BLUE}--- ",
    f"{YELLOW}-  -  {BLUE}-  -  {YELLOW}  -   {BLUE}-  -  {YELLOW}-- --  {BLUE} -  ",
    f"{YELLOW}----  {BLUE}-  -  {YELLOW} -    {BLUE}-  -  {YELLOW}- - -  {BLUE} -  ",
    f"{YELLOW}-  -  {BLUE}-  -  {YELLOW}-     {BLUE}-  -  {YELLOW}-   -  {BLUE} -  ",
    f"{YELLOW}-  -  {BLUE}----  {YELLOW}----  {BLUE}----  {YELLOW}-   -  {BLUE}--- ",
]


def dance_offsets(reach=DANCE_REACH):
    """One swing of the dance: 0 up to reach, then reach back down to 0."""
    return list(range(reach + 1)) + list(range(reach, -1, -1))


class Sequencer:
    def __init__(self, config, surface):
        self.config = config
        self.timing = config.timing
        self.surface = surface

    def run(self, cycles=None):
        """Animate until stopped, or for `cycles` passes when given."""
        if self.config.graphical:
            self.dance(cycles)
            return
        done = 0
        while cycles is None or done < cycles:
            self.cycle()
            done += 1
            logger.debug(f"Reveal cycle {done} finished")

    def cycle(self):
        rows = self.surface.band(self.config.band_height)
        if self.config.parallel:
            self.write_parallel(rows)
        else:
            self.write_sequential(rows)

    def write_sequential(self, rows):
        contents = self.config.contents
        for row, content in zip(rows, contents):
            self.write_row(row, content)
            if self.config.fixed:
                self.surface.pause(ROW_STAGGER)
        if self.config.cool:
            self.write_cool(rows[len(contents)])

    def write_parallel(self, rows):
        """Start one writer per row, ROW_STAGGER apart, and join them all.

        Each writer owns exactly one row of the band, so writers never
        share a row; the grid enforces this through its row claims.
        """
        contents = self.config.contents
        with ThreadPoolExecutor(max_workers=len(rows)) as pool:
            futures = []
            for row, content in zip(rows, contents):
                futures.append(pool.submit(self.write_row, row, content))
                self.surface.pause(ROW_STAGGER)
            if self.config.cool:
                futures.append(pool.submit(self.write_cool, rows[len(contents)]))
            wait(futures)
        # Re-raise the first failure, AnimationStopped included
        for future in futures:
            future.result()
        return len(futures)

    def write_row(self, row, content):
        letters = list(content)
        with row:
            # Flicker: each letter alone
            for letter in letters:
                row.show(letter, self.timing.row)
            # Typewriter: growing prefix
            for i in range(1, len(letters) + 1):
                row.show(''.join(letters[:i]), self.timing.letter)
            row.show(content, self.timing.row)

    def write_cool(self, row):
        with row:
            for i in range(1, len(COOL) + 1):
                row.show(COOL[:i], self.timing.cool, highlight=True)

    def dance(self, cycles=None):
        done = 0
        while cycles is None or done < cycles:
            for space in dance_offsets():
                lines = [' ' * space + line for line in LOGO]
                self.surface.show_lines(lines, self.timing.letter)
            done += 1
