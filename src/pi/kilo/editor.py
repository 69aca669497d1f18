"""Editor session: cursor state and the render/read/update loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from pi.kilo.buffer import LineBuffer
from pi.kilo.keys import Key, KeyDecoder, KeyEvent, SpecialKey
from pi.kilo.render import Renderer
from pi.kilo.terminal import Dimensions, Terminal

logger = logging.getLogger(__name__)

SessionState = Literal["running", "terminating"]

QUIT_KEY = Key.ctrl("q")

_ARROW_KEYS = (Key.up, Key.down, Key.left, Key.right)


@dataclass
class CursorPosition:
    """0-based cursor cell on screen."""

    column: int = 0
    row: int = 0


class EditorSession:
    """Owns the cursor and screen size and drives one terminal.

    The cursor is confined to the screen, not to the loaded text: with no
    scrolling, moving below the last line of a short file is allowed.
    """

    def __init__(
        self,
        terminal: Terminal,
        buffer: LineBuffer | None = None,
        dimensions: Dimensions | None = None,
    ) -> None:
        self.terminal = terminal
        self.buffer = buffer if buffer is not None else LineBuffer()
        if dimensions is None:
            dimensions = terminal.query_dimensions()
        self.dimensions = dimensions
        self.cursor = CursorPosition()
        self.state: SessionState = "running"
        self._decoder = KeyDecoder(terminal.read)
        self._renderer = Renderer(terminal)

    @property
    def running(self) -> bool:
        return self.state == "running"

    # -- cursor -------------------------------------------------------------

    def move_cursor(self, key: SpecialKey) -> None:
        """Move one cell in the arrow's direction, stopping at screen edges."""
        cursor = self.cursor
        if key == Key.left:
            if cursor.column > 0:
                cursor.column -= 1
        elif key == Key.right:
            if cursor.column < self.dimensions.cols - 1:
                cursor.column += 1
        elif key == Key.up:
            if cursor.row > 0:
                cursor.row -= 1
        elif key == Key.down:
            if cursor.row < self.dimensions.rows - 1:
                cursor.row += 1

    # -- input --------------------------------------------------------------

    def process_key(self, key: KeyEvent) -> bool:
        """Apply one key event. Returns ``False`` once the session is quitting."""
        if key == QUIT_KEY:
            logger.info("Quit requested")
            self.state = "terminating"
            return False

        if key == Key.home:
            self.cursor.column = 0
        elif key == Key.end:
            self.cursor.column = self.dimensions.cols - 1
        elif key in (Key.page_up, Key.page_down):
            direction = Key.up if key == Key.page_up else Key.down
            for _ in range(self.dimensions.rows):
                self.move_cursor(direction)
        elif key in _ARROW_KEYS:
            self.move_cursor(key)
        # Everything else is ignored for now.
        return True

    # -- main loop ----------------------------------------------------------

    def refresh_screen(self) -> None:
        self._renderer.render(self)

    def run(self) -> None:
        """Render, read a key and apply it until Ctrl+Q, then clear the screen."""
        while self.running:
            self.refresh_screen()
            self.process_key(self._decoder.read_key())
        self._renderer.clear()
