"""Raw-mode terminal access over the stdin/stdout file descriptors.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
switches the tty into raw mode, reads single bytes with a bounded idle
timeout, writes whole frames with one ``write`` call, and works out the
window size (falling back to a cursor-position probe when the ioctl is
unavailable).
"""

from __future__ import annotations

import errno
import logging
import os
import re
import signal
import termios
import tty
from dataclasses import dataclass
from typing import ContextManager, Protocol

from pi.kilo.config import Config
from pi.kilo.errors import (
    DimensionQueryError,
    TerminalConfigError,
    TerminalReadError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

CLEAR_SCREEN = b"\x1b[2J"
CURSOR_HOME = b"\x1b[H"
HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"
ERASE_LINE = b"\x1b[K"
CURSOR_FAR_CORNER = b"\x1b[999C\x1b[999B"
QUERY_CURSOR_POSITION = b"\x1b[6n"

_CURSOR_POSITION_RE = re.compile(rb"^\x1b\[(\d+);(\d+)$")
_MAX_CURSOR_REPLY = 31

# Signals that would otherwise kill the process without leaving raw mode.
_TERMINATING_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


def cursor_to(row: int, col: int) -> bytes:
    """Absolute cursor move; *row* and *col* are 1-based."""
    return b"\x1b[%d;%dH" % (row, col)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Dimensions:
    """Screen size in character cells."""

    rows: int
    cols: int

    @property
    def valid(self) -> bool:
        return self.rows >= 1 and self.cols >= 1


class Terminal(Protocol):
    """Interface the session needs from a terminal."""

    def enable_raw_mode(self) -> ContextManager[object]: ...

    def read(self, n: int = 1) -> bytes: ...

    def write(self, data: bytes) -> int: ...

    def query_dimensions(self) -> Dimensions: ...


# ---------------------------------------------------------------------------
# Raw mode
# ---------------------------------------------------------------------------


def make_raw_attributes(attrs: list, vtime: int) -> list:
    """Return a copy of *attrs* (as from ``tcgetattr``) set up for raw input.

    Input arrives byte by byte without echo, line editing, signal keys,
    CR/NL translation or flow control; output is not post-processed. Reads
    return after *vtime* deciseconds even when no byte arrived.
    """
    raw = list(attrs)
    raw[tty.CC] = list(attrs[tty.CC])

    raw[tty.IFLAG] &= ~(
        termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON
    )
    raw[tty.OFLAG] &= ~termios.OPOST
    raw[tty.CFLAG] |= termios.CS8
    raw[tty.LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    raw[tty.CC][termios.VMIN] = 0
    raw[tty.CC][termios.VTIME] = vtime
    return raw


def _termios_reason(exc: termios.error) -> str:
    if len(exc.args) > 1:
        return str(exc.args[1])
    return str(exc)


def _on_terminating_signal(signum: int, frame: object) -> None:
    raise SystemExit(1)


class RawMode:
    """Guard for an active raw-mode session.

    Holds the attributes captured before raw mode was switched on and puts
    them back exactly once, either through :meth:`restore` or on leaving a
    ``with`` block. While active, SIGTERM and SIGHUP are turned into
    ``SystemExit`` so that those exits unwind through the guard too.
    """

    def __init__(self, fd: int, original: list) -> None:
        self._fd = fd
        self._original = original
        self._restored = False
        self._prev_handlers: dict[int, object] = {}
        self._install_signal_handlers()

    @property
    def active(self) -> bool:
        return not self._restored

    def restore(self) -> None:
        """Put the original terminal attributes back. Safe to call twice."""
        if self._restored:
            return
        self._restored = True
        self._restore_signal_handlers()
        try:
            termios.tcsetattr(self._fd, termios.TCSAFLUSH, self._original)
        except termios.error as exc:
            raise TerminalConfigError("tcsetattr", _termios_reason(exc)) from exc
        logger.debug("Terminal attributes restored on fd %d", self._fd)

    def discard(self) -> None:
        """Drop the guard without touching the tty (raw mode never applied)."""
        self._restored = True
        self._restore_signal_handlers()

    def __enter__(self) -> RawMode:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.restore()
            return
        # Keep the in-flight exception; a restore failure is only logged.
        try:
            self.restore()
        except TerminalConfigError:
            logger.exception("Could not restore terminal attributes")

    # -- private: signals ---------------------------------------------------

    def _install_signal_handlers(self) -> None:
        for sig in _TERMINATING_SIGNALS:
            try:
                self._prev_handlers[sig] = signal.getsignal(sig)
                signal.signal(sig, _on_terminating_signal)
            except ValueError:
                # Not the main thread; signals stay as they are.
                self._prev_handlers.pop(sig, None)

    def _restore_signal_handlers(self) -> None:
        for sig, handler in self._prev_handlers.items():
            # None means the handler was installed outside Python.
            signal.signal(sig, signal.SIG_DFL if handler is None else handler)
        self._prev_handlers.clear()


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin and stdout descriptors."""

    def __init__(
        self,
        stdin_fd: int = 0,
        stdout_fd: int = 1,
        config: Config | None = None,
    ) -> None:
        self._stdin_fd = stdin_fd
        self._stdout_fd = stdout_fd
        self._config = config or Config()

    # -- raw mode -----------------------------------------------------------

    def enable_raw_mode(self) -> RawMode:
        """Switch stdin to raw mode and return the guard that undoes it.

        Raises :class:`TerminalConfigError` if the attributes cannot be
        read or applied.
        """
        fd = self._stdin_fd
        try:
            original = termios.tcgetattr(fd)
        except termios.error as exc:
            raise TerminalConfigError("tcgetattr", _termios_reason(exc)) from exc

        guard = RawMode(fd, original)
        raw = make_raw_attributes(original, self._config.vtime)
        try:
            termios.tcsetattr(fd, termios.TCSAFLUSH, raw)
        except termios.error as exc:
            guard.discard()
            raise TerminalConfigError("tcsetattr", _termios_reason(exc)) from exc

        logger.info(
            "Raw mode enabled on fd %d (read timeout %d ms)",
            fd,
            self._config.read_timeout_ms,
        )
        return guard

    # -- I/O ----------------------------------------------------------------

    def read(self, n: int = 1) -> bytes:
        """Read up to *n* bytes; returns ``b""`` when the idle timeout expires."""
        try:
            return os.read(self._stdin_fd, n)
        except OSError as exc:
            if exc.errno in (errno.EAGAIN, errno.EINTR):
                return b""
            raise TerminalReadError.from_os_error("read", exc) from exc

    def write(self, data: bytes) -> int:
        """Write *data* with a single ``write`` call and return the count.

        Terminal output is best effort: short writes are not retried and a
        failed write is logged and reported as zero bytes.
        """
        try:
            written = os.write(self._stdout_fd, data)
        except OSError as exc:
            logger.warning("Terminal write of %d bytes failed: %s", len(data), exc)
            return 0

        if written != len(data):
            logger.debug("Short terminal write: %d of %d bytes", written, len(data))

        if self._config.write_log:
            try:
                with open(self._config.write_log, "ab") as f:
                    f.write(data)
            except OSError:
                pass

        return written

    # -- dimensions ---------------------------------------------------------

    def query_dimensions(self) -> Dimensions:
        """Return the window size.

        Asks the kernel first; when that fails or reports zero columns,
        parks the cursor in the far bottom-right corner and asks the
        terminal where it ended up.
        """
        dims = self._window_size()
        if dims is not None:
            logger.debug("Window size from ioctl: %dx%d", dims.cols, dims.rows)
            return dims

        logger.info("Window size unavailable, probing cursor position")
        dims = self._probe_dimensions()
        if dims is None:
            raise DimensionQueryError(
                "getWindowSize", "terminal did not report its size"
            )
        logger.debug("Window size from cursor probe: %dx%d", dims.cols, dims.rows)
        return dims

    def cursor_position(self) -> Dimensions | None:
        """Ask the terminal for the cursor position (1-based row/col)."""
        if self.write(QUERY_CURSOR_POSITION) != len(QUERY_CURSOR_POSITION):
            return None

        reply = bytearray()
        while len(reply) < _MAX_CURSOR_REPLY:
            ch = self.read(1)
            if not ch or ch == b"R":
                break
            reply += ch
        return parse_cursor_position(bytes(reply))

    def _window_size(self) -> Dimensions | None:
        try:
            size = os.get_terminal_size(self._stdout_fd)
        except OSError as exc:
            logger.debug("get_terminal_size failed: %s", exc)
            return None
        dims = Dimensions(rows=size.lines, cols=size.columns)
        return dims if dims.valid else None

    def _probe_dimensions(self) -> Dimensions | None:
        if self.write(CURSOR_FAR_CORNER) != len(CURSOR_FAR_CORNER):
            return None
        return self.cursor_position()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_cursor_position(reply: bytes) -> Dimensions | None:
    """Parse a cursor-position report with the trailing ``R`` removed.

    >>> parse_cursor_position(b"\\x1b[24;80")
    Dimensions(rows=24, cols=80)
    """
    match = _CURSOR_POSITION_RE.match(reply)
    if not match:
        return None
    dims = Dimensions(rows=int(match.group(1)), cols=int(match.group(2)))
    return dims if dims.valid else None
