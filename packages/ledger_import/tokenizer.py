"""CSV cell and row recognition with source spans.

The export mixes raw text lines (the preamble) with CSV rows, so the standard
library :mod:`csv` reader cannot be pointed at it directly. ``CsvCursor`` walks
the decoded text one cell at a time and reports the exact span of everything
it matches so later stages can point at the offending characters.

Cell grammar
------------
- unquoted: any run of characters other than ``,``, ``\\r`` and ``\\n``; it
  must not start with a quote.
- quoted: ``"``-delimited; ``""`` encodes a literal quote; commas and line
  breaks are kept verbatim. The closing quote must be followed by a cell end
  (``,``, ``\\r``, ``\\n`` or end of input).

Row terminators are ``\\n``, ``\\r\\n`` or end of input.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import TokenizationError

_CELL_END = ",\r\n"
_QUOTE = '"'


@dataclass(frozen=True, slots=True)
class Span:
    """Character offset and length into the decoded input text."""

    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length

    @classmethod
    def between(cls, start: int, end: int) -> Span:
        return cls(start, max(0, end - start))


@dataclass(frozen=True, slots=True)
class Cell:
    text: str
    span: Span = field(compare=False)


@dataclass(frozen=True, slots=True)
class Row:
    """One CSV row: its decoded cells and the span of the whole row."""

    cells: tuple[Cell, ...]
    span: Span = field(compare=False)

    @property
    def texts(self) -> tuple[str, ...]:
        return tuple(c.text for c in self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]


@dataclass(frozen=True, slots=True)
class Line:
    """A raw (non-CSV) line without its terminator."""

    text: str
    span: Span = field(compare=False)


class CsvCursor:
    """A forward-only cursor over the export text.

    ``pos`` is always at a cell boundary between calls.
    """

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    # ---- positioning ------------------------------------------------------

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    # ---- cells ------------------------------------------------------------

    def read_cell(self) -> Cell:
        """Recognize one cell at the cursor; separators are not consumed."""

        start = self.pos
        if self._peek() == _QUOTE:
            text = self._read_quoted()
        else:
            end = start
            while end < len(self.text) and self.text[end] not in _CELL_END:
                end += 1
            text = self.text[start:end]
            self.pos = end
        return Cell(text, Span.between(start, self.pos))

    def _read_quoted(self) -> str:
        start = self.pos
        self.pos += 1
        parts: list[str] = []
        chunk_start = self.pos
        while True:
            close = self.text.find(_QUOTE, self.pos)
            if close < 0:
                raise TokenizationError(
                    "Unterminated quoted cell",
                    span=Span.between(start, len(self.text)),
                )
            if self.text.startswith(_QUOTE * 2, close):
                # Escaped quote: keep one, continue scanning after the pair.
                parts.append(self.text[chunk_start : close + 1])
                self.pos = close + 2
                chunk_start = self.pos
                continue
            parts.append(self.text[chunk_start:close])
            self.pos = close + 1
            break
        nxt = self._peek()
        if nxt and nxt not in _CELL_END:
            raise TokenizationError(
                f"Unexpected character {nxt!r} after closing quote",
                span=Span(self.pos, 1),
            )
        return "".join(parts)

    # ---- separators -------------------------------------------------------

    def read_comma(self) -> bool:
        """Consume a ``,`` if one is at the cursor."""

        if self._peek() == ",":
            self.pos += 1
            return True
        return False

    def read_row_end(self) -> None:
        """Consume ``\\n``, ``\\r\\n`` or accept end of input."""

        if self.at_end():
            return
        if self.text.startswith("\r\n", self.pos):
            self.pos += 2
            return
        if self._peek() == "\n":
            self.pos += 1
            return
        raise TokenizationError(
            f"Expected end of row, found {self._peek()!r}",
            span=Span(self.pos, 1),
        )

    # ---- rows and lines ---------------------------------------------------

    def read_row(self) -> Row:
        """Read cells up to and including the row terminator."""

        start = self.pos
        cells = [self.read_cell()]
        while self.read_comma():
            cells.append(self.read_cell())
        end = self.pos
        self.read_row_end()
        return Row(tuple(cells), Span.between(start, end))

    def read_line(self) -> Line:
        """Read a raw line (no CSV decoding) and its terminator."""

        start = self.pos
        end = self.text.find("\n", start)
        if end < 0:
            end = len(self.text)
            self.pos = end
        else:
            self.pos = end + 1
        text_end = end - 1 if end > start and self.text[end - 1] == "\r" else end
        return Line(self.text[start:text_end], Span.between(start, text_end))


__all__ = ["Cell", "CsvCursor", "Line", "Row", "Span"]
