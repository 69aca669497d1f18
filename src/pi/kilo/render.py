"""Full-frame screen rendering.

Every refresh composes the whole visible screen into one byte string and
hands it to the terminal in a single write. Each row is erased to the end of
the line on its own rather than clearing the screen first, so redraws do not
flash, and the cursor is hidden while the frame is being painted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pi.kilo import __version__
from pi.kilo.buffer import LineBuffer
from pi.kilo.terminal import (
    CLEAR_SCREEN,
    CURSOR_HOME,
    ERASE_LINE,
    HIDE_CURSOR,
    SHOW_CURSOR,
    Dimensions,
    Terminal,
    cursor_to,
)

if TYPE_CHECKING:
    from pi.kilo.editor import CursorPosition, EditorSession

WELCOME_FMT = "Kilo editor -- version {version}"

_EMPTY_ROW = b"~"
_ROW_SEPARATOR = b"\r\n"


class FrameBuffer:
    """Append-only byte accumulator for a single frame."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._size = 0

    def append(self, data: bytes) -> None:
        self._chunks.append(data)
        self._size += len(data)

    def to_bytes(self) -> bytes:
        return b"".join(self._chunks)

    def __len__(self) -> int:
        return self._size


def welcome_line(cols: int, version: str = __version__) -> bytes:
    """The centred banner row shown when no file is loaded.

    The first padding column carries the ``~`` row marker.
    """
    banner = WELCOME_FMT.format(version=version).encode()[:cols]
    padding = (cols - len(banner)) // 2
    line = bytearray()
    if padding:
        line += _EMPTY_ROW
        padding -= 1
    line += b" " * padding
    line += banner
    return bytes(line)


def draw_rows(frame: FrameBuffer, buffer: LineBuffer, dims: Dimensions) -> None:
    row_count = buffer.row_count()
    for y in range(dims.rows):
        if y < row_count:
            frame.append(buffer.row_at(y).content[: dims.cols])
        elif row_count == 0 and y == dims.rows // 3:
            frame.append(welcome_line(dims.cols))
        else:
            frame.append(_EMPTY_ROW)

        frame.append(ERASE_LINE)
        if y < dims.rows - 1:
            frame.append(_ROW_SEPARATOR)


def compose_frame(
    buffer: LineBuffer,
    dims: Dimensions,
    cursor: CursorPosition,
) -> bytes:
    """Build the bytes for one frame. Order matters: escape codes are stateful."""
    frame = FrameBuffer()
    frame.append(HIDE_CURSOR)
    frame.append(CURSOR_HOME)
    draw_rows(frame, buffer, dims)
    frame.append(cursor_to(cursor.row + 1, cursor.column + 1))
    frame.append(SHOW_CURSOR)
    return frame.to_bytes()


class Renderer:
    """Draws editor sessions onto a terminal, one write per frame."""

    def __init__(self, terminal: Terminal) -> None:
        self._terminal = terminal

    def render(self, session: EditorSession) -> None:
        frame = compose_frame(session.buffer, session.dimensions, session.cursor)
        self._terminal.write(frame)

    def clear(self) -> None:
        """Blank the screen and home the cursor."""
        self._terminal.write(CLEAR_SCREEN + CURSOR_HOME)
