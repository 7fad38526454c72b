"""Screen layout: turns metrics into styled cell writes on a surface."""

from rich.cells import cell_len, set_cell_size
from rich.style import Style

from sysdash.models import MemoryStats, NetworkCounters, ProcessSample, SystemSnapshot
from sysdash.ranking import RankedView
from sysdash.surface import BASE_STYLE, WIDE_CONTINUATION, DisplaySurface

ELLIPSIS = "..."
NAME_WIDTH = 20

TITLE_STYLE = Style(color="yellow", bgcolor="black")
HEADER_STYLE = Style(color="green", bgcolor="black")
NETWORK_STYLE = Style(color="green", bgcolor="black")
HINT_STYLE = Style(color="grey50", bgcolor="black")
BAR_FILLED_STYLE = Style(bgcolor="green")
BAR_EMPTY_STYLE = Style(bgcolor="grey30")

TABLE_HEADER = f"{'PID':<6s} {'Name':<{NAME_WIDTH}s} {'CPU%':<10s} {'Memory':<10s}"

# Rows taken by the title and header lines, plus one spare line below the table
TABLE_CHROME = 3
TABLE_TOP = 7


def printable(text: str) -> str:
    """Replace control and other non-printable characters with '?'."""
    return "".join(char if char.isprintable() else "?" for char in text)


def truncate(text: str, width: int) -> str:
    """Cut `text` to `width` cells, marking the cut with an ellipsis."""
    if cell_len(text) <= width:
        return text
    if width <= len(ELLIPSIS):
        return set_cell_size(text, max(width, 0))
    return set_cell_size(text, width - len(ELLIPSIS)) + ELLIPSIS


def fit_column(text: str, width: int) -> str:
    """Truncate and pad `text` to exactly `width` cells."""
    return set_cell_size(truncate(text, width), max(width, 0))


def bar_fill(value: float, interior: int) -> int:
    """
    Number of filled cells for a bar of `interior` cells at `value` percent.

    The value is clamped here only, so readings above 100 (multi-core CPU)
    still fill the bar exactly and nothing more.
    """
    if interior <= 0:
        return 0
    filled = int(interior * value / 100)
    return min(max(filled, 0), interior)


def draw_text(
    surface: DisplaySurface,
    x: int,
    y: int,
    text: str,
    style: Style = BASE_STYLE,
    limit: int | None = None,
) -> None:
    """
    Write `text` from (x, y) without wrapping; overflow is dropped.

    Wide characters take two cells and are dropped whole if they do not fit.
    Non-printable characters are drawn as '?'.
    """
    right = surface.size()[0]
    if limit is not None:
        right = min(right, x + max(limit, 0))
    column = x
    for char in printable(text):
        width = cell_len(char)
        if width == 0:
            continue
        if column + width > right:
            break
        surface.set_cell(column, y, char, style)
        if width == 2:
            surface.set_cell(column + 1, y, WIDE_CONTINUATION, style)
        column += width


def draw_bar(
    surface: DisplaySurface,
    x: int,
    y: int,
    width: int,
    label: str,
    value: float,
    stats: str,
) -> None:
    """Render ``label: stats`` on row y and a bracketed bar on row y + 1."""
    interior = max(width - 2, 0)
    filled = bar_fill(value, interior)

    draw_text(surface, x, y, f"{label}: {stats}", TITLE_STYLE)

    surface.set_cell(x, y + 1, "[", BASE_STYLE)
    for i in range(interior):
        style = BAR_FILLED_STYLE if i < filled else BAR_EMPTY_STYLE
        surface.set_cell(x + 1 + i, y + 1, " ", style)
    surface.set_cell(x + interior + 1, y + 1, "]", BASE_STYLE)


def format_process_row(sample: ProcessSample) -> str:
    return (
        f"{sample.pid:<6d} {fit_column(printable(sample.name), NAME_WIDTH)} "
        f"{sample.cpu_percent:<10.1f} {sample.memory_percent:<10.1f}"
    )


def draw_table(
    surface: DisplaySurface,
    x: int,
    y: int,
    width: int,
    height: int,
    title: str,
    header: str,
    view: RankedView,
) -> int:
    """
    Draw a process table.

    Rows that do not fit in `height` are left out. Lines are clipped to
    `width` so neighbouring tables do not overwrite each other.

    Returns:
        Number of data rows drawn.
    """
    draw_text(surface, x, y, title, TITLE_STYLE, limit=width)
    draw_text(surface, x, y + 1, header, HEADER_STYLE, limit=width)

    max_rows = max(height - TABLE_CHROME, 0)
    rows = view[:max_rows]
    for i, sample in enumerate(rows):
        draw_text(surface, x, y + 2 + i, format_process_row(sample), BASE_STYLE, limit=width)
    return len(rows)


def memory_stats_text(memory: MemoryStats) -> str:
    gib = 1024**3
    return (
        f"Total: {memory.total / gib:.2f}GB Used: {memory.used / gib:.2f}GB "
        f"Free: {memory.free / gib:.2f}GB ({memory.used_percent:.1f}%)"
    )


def network_text(network: NetworkCounters) -> str:
    mib = 1024**2
    return (
        f"Network - Received: {network.bytes_recv / mib:.2f}MB ({network.packets_recv} pkts) "
        f"Sent: {network.bytes_sent / mib:.2f}MB ({network.packets_sent} pkts)"
    )


def draw_title(surface: DisplaySurface, width: int) -> None:
    draw_text(surface, 1, 0, "sysdash", TITLE_STYLE)
    hint = "ESC: quit"
    if width > len(hint) + 10:
        draw_text(surface, width - len(hint) - 1, 0, hint, HINT_STYLE)


def render_frame(
    surface: DisplaySurface,
    snapshot: SystemSnapshot,
    by_memory: RankedView,
    by_cpu: RankedView,
) -> None:
    """Lay out and draw one complete frame, then flush it."""
    surface.clear()
    width, height = surface.size()

    draw_title(surface, width)
    draw_bar(
        surface, 1, 1, width - 2, "Memory",
        snapshot.memory.used_percent, memory_stats_text(snapshot.memory),
    )
    draw_bar(
        surface, 1, 3, width - 2, "CPU",
        snapshot.cpu_percent, f"Usage: {snapshot.cpu_percent:.1f}%",
    )
    draw_text(surface, 1, 5, network_text(snapshot.network), NETWORK_STYLE)

    table_height = height - TABLE_TOP
    half = width // 2
    draw_table(
        surface, 1, TABLE_TOP, half - 1, table_height,
        "Top Memory Usage", TABLE_HEADER, by_memory,
    )
    draw_table(
        surface, half + 1, TABLE_TOP, half - 2, table_height,
        "Top CPU Usage", TABLE_HEADER, by_cpu,
    )

    surface.flush()
