"""Cell-addressable drawing surface shared by the sampler and the UI."""

from itertools import groupby
from typing import NamedTuple, Protocol

from rich.segment import Segment
from rich.style import Style

BASE_STYLE = Style(color="white", bgcolor="black")


class Cell(NamedTuple):
    """One character cell."""

    char: str
    style: Style


BLANK = Cell(" ", BASE_STYLE)

# Right half of a double-width character; adds no text to the row
WIDE_CONTINUATION = ""


class DisplaySurface(Protocol):
    """What the layout code needs from a terminal."""

    def clear(self) -> None: ...

    def set_cell(self, x: int, y: int, char: str, style: Style) -> None: ...

    def flush(self) -> None: ...

    def size(self) -> tuple[int, int]: ...

    def sync(self, width: int, height: int) -> None: ...


class CellBuffer:
    """A fixed width x height grid of cells. Writes outside the grid are ignored."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.width = max(width, 0)
        self.height = max(height, 0)
        self._rows: list[list[Cell]] = [[BLANK] * self.width for _ in range(self.height)]

    def set_cell(self, x: int, y: int, char: str, style: Style) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self._rows[y][x] = Cell(char, style)

    def cell(self, x: int, y: int) -> Cell:
        return self._rows[y][x]

    def text_line(self, y: int) -> str:
        """Return the characters of row `y` as a string."""
        if not 0 <= y < self.height:
            return ""
        return "".join(cell.char for cell in self._rows[y])

    def segments(self, y: int) -> list[Segment]:
        """Return row `y` as rich segments, merging runs of equal style."""
        if not 0 <= y < self.height:
            return []
        return [
            Segment("".join(cell.char for cell in run), style)
            for style, run in groupby(self._rows[y], key=lambda cell: cell.style)
        ]


class FrameSurface:
    """
    Double-buffered surface.

    The sampler thread is the only writer: it clears, draws into the back
    buffer and flushes. Flushing swaps the back buffer in as the published
    frame, so the UI thread only ever reads complete frames. The UI thread
    only calls `sync` to report new geometry.
    """

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self._geometry: tuple[int, int] = (width, height)
        self._back = CellBuffer(width, height)
        self._front = CellBuffer(width, height)
        self._frame_id = 0

    @property
    def frame(self) -> CellBuffer:
        """The most recently flushed frame."""
        return self._front

    @property
    def frame_id(self) -> int:
        """Number of frames flushed so far."""
        return self._frame_id

    def size(self) -> tuple[int, int]:
        return self._geometry

    def sync(self, width: int, height: int) -> None:
        """Record new terminal geometry; picked up by the next `clear`."""
        self._geometry = (max(width, 0), max(height, 0))

    def clear(self) -> None:
        self._back = CellBuffer(*self._geometry)

    def set_cell(self, x: int, y: int, char: str, style: Style) -> None:
        self._back.set_cell(x, y, char, style)

    def flush(self) -> None:
        self._front = self._back
        self._frame_id += 1
