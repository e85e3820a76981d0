"""
Curses front end: owns the terminal for the duration of a game.

The terminal is put into raw input mode on entry and restored on every
exit path, including errors and Ctrl+C.
"""

import curses
import logging
from typing import Optional, Union

from .core import DEFAULT_GLYPHS, QUIT, Cell, Direction, GameRenderer, InputHandler, SnakeError

logger = logging.getLogger(__name__)

KEY_ESCAPE = 27
ESCAPE_DELAY_MS = 25

KEY_MAP = {
    curses.KEY_UP: Direction.UP,
    curses.KEY_DOWN: Direction.DOWN,
    curses.KEY_LEFT: Direction.LEFT,
    curses.KEY_RIGHT: Direction.RIGHT,
    KEY_ESCAPE: QUIT,
}

# Colour pair numbers
SNAKE_PAIR = 1
FOOD_PAIR = 2
SCORE_PAIR = 3
BORDER_PAIR = 4

CELL_PAIRS = {
    Cell.HEAD: SNAKE_PAIR,
    Cell.BODY: SNAKE_PAIR,
    Cell.FOOD: FOOD_PAIR,
    Cell.BORDER: BORDER_PAIR,
}


class TerminalError(SnakeError):
    """The terminal could not be driven; the game cannot continue"""


def translate_key(key: int) -> Optional[Union[Direction, str]]:
    """Map a curses key code to a Direction or QUIT; anything else is ignored"""
    return KEY_MAP.get(key)


class Terminal(GameRenderer, InputHandler):
    """Scoped ownership of the curses screen"""

    def __init__(self, glyphs: Optional[dict] = None):
        self.glyphs = glyphs or DEFAULT_GLYPHS
        self.stdscr = None
        self.colors = False
        self.status_row = 0

    def __enter__(self):
        try:
            self.stdscr = curses.initscr()
            curses.noecho()
            curses.cbreak()
            self.stdscr.keypad(True)
        except curses.error as exc:
            try:
                self.restore()
            except TerminalError:
                logger.debug("Restore after failed start also failed", exc_info=True)
            raise TerminalError(f"Could not enter raw terminal mode: {exc}") from exc

        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("Terminal cannot hide the cursor")

        # Escape would otherwise wait a full second for a possible sequence
        try:
            curses.set_escdelay(ESCAPE_DELAY_MS)
        except curses.error:
            logger.debug("Terminal rejected the escape delay")

        self.setup_colors()
        logger.info("Terminal session started")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restore()
        logger.info("Terminal session ended")
        return False

    def setup_colors(self):
        if not curses.has_colors():
            return
        try:
            curses.start_color()
            curses.init_pair(SNAKE_PAIR, curses.COLOR_GREEN, curses.COLOR_BLACK)
            curses.init_pair(FOOD_PAIR, curses.COLOR_RED, curses.COLOR_BLACK)
            curses.init_pair(SCORE_PAIR, curses.COLOR_YELLOW, curses.COLOR_BLACK)
            curses.init_pair(BORDER_PAIR, curses.COLOR_WHITE, curses.COLOR_BLACK)
        except curses.error:
            logger.debug("Colour setup failed, drawing in monochrome")
            return
        self.colors = True

    def restore(self):
        """Back to cooked mode; safe to call more than once"""
        if self.stdscr is None:
            return
        stdscr, self.stdscr = self.stdscr, None

        # Every step runs even if an earlier one fails; endwin always last
        failure = None
        for step in (lambda: stdscr.keypad(False), curses.echo, curses.nocbreak, curses.endwin):
            try:
                step()
            except curses.error as exc:
                failure = failure or exc
        if failure is not None:
            raise TerminalError(f"Could not restore terminal mode: {failure}") from failure

    def check_size(self, width: int, height: int):
        """Fail when the window cannot hold the board and the status line"""
        rows, cols = self.screen.getmaxyx()
        # One spare row keeps the status line off the bottom-right corner
        if rows < height + 2 or cols < width:
            raise TerminalError(
                f"Terminal too small! Minimum size: {width}x{height + 2}, got {cols}x{rows}"
            )
        self.status_row = height

    @property
    def screen(self):
        if self.stdscr is None:
            raise TerminalError("Terminal session is not active")
        return self.stdscr

    def _addstr(self, y: int, x: int, text: str, attr: int = 0):
        try:
            self.screen.addstr(y, x, text, attr)
        except curses.error as exc:
            raise TerminalError(f"Could not draw at ({x}, {y}): {exc}") from exc

    def _pair(self, pair: Optional[int]) -> int:
        if pair is None or not self.colors:
            return 0
        return curses.color_pair(pair)

    def clear(self):
        try:
            self.screen.erase()
        except curses.error as exc:
            raise TerminalError(f"Could not clear the screen: {exc}") from exc

    def draw_cell(self, x: int, y: int, cell: Cell):
        self._addstr(y, x, self.glyphs[cell], self._pair(CELL_PAIRS.get(cell)))
        self.status_row = max(self.status_row, y + 1)

    def draw_status(self, text: str):
        self._addstr(self.status_row, 0, text, self._pair(SCORE_PAIR))

    def refresh(self):
        try:
            self.screen.refresh()
        except curses.error as exc:
            raise TerminalError(f"Could not refresh the screen: {exc}") from exc

    def get_input(self, timeout_ms: int) -> Optional[Union[Direction, str]]:
        self.screen.timeout(max(int(timeout_ms), 0))
        key = self.screen.getch()
        if key == -1:
            return None
        return translate_key(key)
