"""sysdash - Main Textual application."""

import asyncio
import logging
import signal
import sys
from collections.abc import Sequence
from enum import Enum

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.logging import TextualHandler
from textual.strip import Strip
from textual.widget import Widget

from sysdash.config import DashboardConfig, parse_args
from sysdash.errors import TerminalInitError
from sysdash.monitor import MetricsProvider, PsutilProvider, Sampler
from sysdash.surface import BASE_STYLE, FrameSurface

logger = logging.getLogger(__name__)

# How often the view checks for a newly flushed frame
REPAINT_INTERVAL = 0.05


class LoopState(Enum):
    """Lifecycle of the dashboard."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class FrameView(Widget):
    """Full-screen widget that shows the last frame flushed to the surface."""

    DEFAULT_CSS = """
    FrameView {
        width: 1fr;
        height: 1fr;
        background: black;
    }
    """

    def __init__(self, surface: FrameSurface, *args, **kwargs) -> None:
        """Initialize FrameView."""
        super().__init__(*args, **kwargs)
        self._surface = surface
        self._frame = surface.frame
        self._shown_frame_id = surface.frame_id

    @property
    def shown_frame_id(self) -> int:
        return self._shown_frame_id

    def on_mount(self) -> None:
        self.set_interval(REPAINT_INTERVAL, self.check_frame)

    def on_resize(self, event: events.Resize) -> None:
        """Hand the new geometry to the surface; the next tick lays out for it."""
        self._surface.sync(event.size.width, event.size.height)
        self.refresh()

    def check_frame(self) -> None:
        """Repaint if the sampler has flushed a new frame."""
        frame_id = self._surface.frame_id
        if frame_id != self._shown_frame_id:
            self._frame = self._surface.frame
            self._shown_frame_id = frame_id
            self.refresh()

    def render_line(self, y: int) -> Strip:
        width = self.size.width
        segments = self._frame.segments(y)
        if not segments:
            return Strip.blank(width, BASE_STYLE)
        return Strip(segments).adjust_cell_length(width, BASE_STYLE)


class SysdashApp(App):
    """Main sysdash application."""

    TITLE = "sysdash"
    SUB_TITLE = "Live system dashboard"

    CSS = """
    Screen {
        background: black;
    }
    """

    BINDINGS = [
        Binding("escape", "quit", "Quit", show=False, priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: DashboardConfig | None = None,
        provider: MetricsProvider | None = None,
    ) -> None:
        """Initialize the SysdashApp."""
        super().__init__()
        self._config = config or DashboardConfig()
        self._surface = FrameSurface()
        self._sampler = Sampler(
            provider or PsutilProvider(),
            self._surface,
            interval=self._config.interval,
            top_n=self._config.top_n,
        )
        self._state = LoopState.RUNNING
        self._shutdown_lock = asyncio.Lock()
        self._signals: list[int] = []

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def surface(self) -> FrameSurface:
        return self._surface

    @property
    def sampler(self) -> Sampler:
        return self._sampler

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield FrameView(self._surface, id="frame")

    def on_mount(self) -> None:
        """Start sampling once the screen exists."""
        self._install_signal_handlers()
        # The view's first Resize can arrive after the first tick
        self._surface.sync(self.size.width, self.size.height)
        self._sampler.start()

    def on_unmount(self) -> None:
        self._remove_signal_handlers()
        # Covers exits that did not go through shutdown()
        if self._sampler.is_running:
            self._sampler.stop()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._on_signal, signum)
            except (NotImplementedError, RuntimeError, ValueError):
                # Not supported on this platform or not on the main thread
                logger.debug("Cannot install handler for signal %s", signum)
            else:
                self._signals.append(signum)

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in self._signals:
            loop.remove_signal_handler(signum)
        self._signals.clear()

    def _on_signal(self, signum: int) -> None:
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        self.call_later(self.shutdown)

    async def action_quit(self) -> None:
        """Handle quit action: ESC or ctrl+c."""
        await self.shutdown()

    async def shutdown(self) -> None:
        """
        Stop the sampler, then leave the app.

        Runs once no matter how many quit requests arrive. The sampler is
        joined in a worker thread so the UI keeps running while the last
        tick finishes and flushes its frame.
        """
        async with self._shutdown_lock:
            if self._state is not LoopState.RUNNING:
                return
            self._state = LoopState.SHUTTING_DOWN
            logger.debug("Shutting down")
            await asyncio.to_thread(self._sampler.stop)
            self._state = LoopState.TERMINATED
        self._remove_signal_handlers()
        self.exit(return_code=0)


def setup_logging(debug: bool = False) -> None:
    """Route log records to the textual devtools console, not the screen."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        handlers=[TextualHandler()],
        force=True,
    )


def run(config: DashboardConfig) -> int:
    """
    Run the dashboard until the user quits.

    Returns:
        The process exit code.

    Raises:
        TerminalInitError: If there is no terminal to draw on.
    """
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise TerminalInitError("stdin and stdout must be attached to a terminal")

    app = SysdashApp(config)
    try:
        app.run()
    except OSError as exc:
        raise TerminalInitError(f"could not initialize terminal: {exc}") from exc
    return app.return_code or 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for sysdash application."""
    config = parse_args(argv)
    setup_logging(config.debug)
    try:
        code = run(config)
    except TerminalInitError as exc:
        print(f"sysdash: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
