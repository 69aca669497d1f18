"""Decoding raw terminal input into key events.

A key event is either a :class:`ByteKey` (a literal byte, printable or
control) or a :class:`SpecialKey` (arrows, Home/End, paging, Delete and
Escape) decoded from an escape sequence. The :class:`KeyDecoder` pulls bytes
from a ``read(n)`` callable that returns ``b""`` when the idle timeout
expires; that timeout is what tells a lone Escape keypress apart from the
start of a sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Union

# ---------------------------------------------------------------------------
# Key event types
# ---------------------------------------------------------------------------

SpecialKeyName = Literal[
    "up",
    "down",
    "left",
    "right",
    "home",
    "end",
    "pageUp",
    "pageDown",
    "delete",
    "escape",
]


@dataclass(frozen=True)
class ByteKey:
    """A literal input byte."""

    code: int


@dataclass(frozen=True)
class SpecialKey:
    """A named key decoded from an escape sequence."""

    name: SpecialKeyName


KeyEvent = Union[ByteKey, SpecialKey]


class Key:
    """Named key constants."""

    up = SpecialKey("up")
    down = SpecialKey("down")
    left = SpecialKey("left")
    right = SpecialKey("right")
    home = SpecialKey("home")
    end = SpecialKey("end")
    page_up = SpecialKey("pageUp")
    page_down = SpecialKey("pageDown")
    delete = SpecialKey("delete")
    escape = SpecialKey("escape")

    @staticmethod
    def ctrl(key: str) -> ByteKey:
        """The byte a terminal sends for Ctrl+*key* (``ord(key) & 0x1f``)."""
        return ByteKey(ord(key) & 0x1F)


# ---------------------------------------------------------------------------
# Sequence tables
# ---------------------------------------------------------------------------

ESC = 0x1B

# ESC [ <letter>
CSI_LETTER_KEYS: dict[int, SpecialKey] = {
    ord("A"): Key.up,
    ord("B"): Key.down,
    ord("C"): Key.right,
    ord("D"): Key.left,
    ord("H"): Key.home,
    ord("F"): Key.end,
}

# ESC [ <digit> ~
CSI_TILDE_KEYS: dict[int, SpecialKey] = {
    ord("1"): Key.home,
    ord("3"): Key.delete,
    ord("4"): Key.end,
    ord("5"): Key.page_up,
    ord("6"): Key.page_down,
    ord("7"): Key.home,
    ord("8"): Key.end,
}

# ESC O <letter>
SS3_KEYS: dict[int, SpecialKey] = {
    ord("H"): Key.home,
    ord("F"): Key.end,
}


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------


class KeyDecoder:
    """Turns a byte source into key events, one event per call.

    Each call consumes exactly the bytes that make up one event and
    nothing more, so no state is carried between calls.
    """

    def __init__(self, read: Callable[[int], bytes]) -> None:
        self._read = read

    def read_key(self) -> KeyEvent:
        """Block until a key arrives and return it.

        An idle timeout before the first byte is not an error; the read is
        simply repeated.
        """
        while True:
            data = self._read(1)
            if data:
                break
        return self._decode(data[0])

    def _next_byte(self) -> int | None:
        data = self._read(1)
        return data[0] if data else None

    def _decode(self, first: int) -> KeyEvent:
        if first != ESC:
            return ByteKey(first)

        second = self._next_byte()
        if second is None:
            return Key.escape
        third = self._next_byte()
        if third is None:
            return Key.escape

        if second == ord("["):
            if ord("0") <= third <= ord("9"):
                fourth = self._next_byte()
                if fourth == ord("~"):
                    return CSI_TILDE_KEYS.get(third, Key.escape)
                return Key.escape
            return CSI_LETTER_KEYS.get(third, Key.escape)

        if second == ord("O"):
            return SS3_KEYS.get(third, Key.escape)

        return Key.escape


def decode_all(data: bytes) -> list[KeyEvent]:
    """Decode a finite byte string; running out of data counts as a timeout."""
    pos = 0

    def _read(n: int) -> bytes:
        nonlocal pos
        chunk = data[pos : pos + n]
        pos += len(chunk)
        return chunk

    decoder = KeyDecoder(_read)
    events: list[KeyEvent] = []
    while pos < len(data):
        events.append(decoder.read_key())
    return events
