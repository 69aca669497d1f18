"""In-memory line buffer: an append-only list of text rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from pi.kilo.errors import FileOpenError

logger = logging.getLogger(__name__)

# Longest first so "\r\n" is removed as a single terminator.
_LINE_TERMINATORS = (b"\r\n", b"\n", b"\r")


@dataclass(frozen=True)
class Row:
    """One line of text, stored without its line terminator."""

    content: bytes

    @property
    def length(self) -> int:
        return len(self.content)


class LineBuffer:
    """Rows in file order. Rows are only ever appended."""

    def __init__(self) -> None:
        self._rows: list[Row] = []

    def append_row(self, line: bytes) -> Row:
        """Append *line* with one trailing line terminator removed."""
        for terminator in _LINE_TERMINATORS:
            if line.endswith(terminator):
                line = line[: -len(terminator)]
                break
        row = Row(line)
        self._rows.append(row)
        return row

    def row_count(self) -> int:
        return len(self._rows)

    def row_at(self, index: int) -> Row:
        """Return row *index*. Raises ``IndexError`` outside ``[0, row_count())``."""
        if not 0 <= index < len(self._rows):
            raise IndexError(f"row {index} out of range (0..{len(self._rows) - 1})")
        return self._rows[index]

    def load_file(self, path: str) -> None:
        """Append every line of the file at *path*.

        ``\\n``, ``\\r`` and ``\\r\\n`` all end a line. Raises
        :class:`FileOpenError` when the file cannot be opened or read.
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as exc:
            raise FileOpenError(path, exc.strerror or str(exc)) from exc

        for line in data.splitlines(keepends=True):
            self.append_row(line)
        logger.info("Loaded %d rows from %s", len(self._rows), path)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)
