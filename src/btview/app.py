"""btview - Main Textual application."""

import argparse
import logging
import sys

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.widgets import Footer, RichLog, Static

from btview.capture import EuStackCapture, resolve_targets
from btview.config import Settings, settings
from btview.exceptions import CaptureError
from btview.panel import BASENAME_LABEL, DEMANGLE_LABEL, FULL_PATH_LABEL, RAW_LABEL, BacktracePanel

logger = logging.getLogger(__name__)


class BacktraceApp(App):
    """Interactive viewer for a BacktracePanel."""

    TITLE = "btview"

    # Title and frame lines must start at the same column: border + padding.
    CSS = """
    Screen {
        layout: vertical;
    }

    #columns {
        height: 1;
        padding: 0 2;
        text-wrap: nowrap;
        text-overflow: clip;
    }

    #frames {
        height: 1fr;
        border: solid $primary;
        padding: 0 1;
        overflow-x: auto;
    }
    """

    # Each toggle has one binding per state; check_action shows the one that applies.
    BINDINGS = [
        Binding("f1", "refresh", "Refresh"),
        Binding("f2", "show_raw", RAW_LABEL),
        Binding("f2", "show_demangled", DEMANGLE_LABEL),
        Binding("f3", "show_full_path", FULL_PATH_LABEL),
        Binding("f3", "show_basename", BASENAME_LABEL),
        Binding("p", "show_full_path", FULL_PATH_LABEL, show=False),
        Binding("p", "show_basename", BASENAME_LABEL, show=False),
        Binding("escape", "quit", "Done"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, panel: BacktracePanel) -> None:
        """Initialize the BacktraceApp."""
        super().__init__()
        self._panel = panel
        self.sub_title = panel.header

    @property
    def panel(self) -> BacktracePanel:
        return self._panel

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Static(id="columns")
        yield RichLog(id="frames", wrap=False, auto_scroll=False)
        yield Footer()

    def on_mount(self) -> None:
        """Paint the rows captured when the panel was built."""
        self._redraw()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Enable only the toggle bindings matching the current display state."""
        options = self._panel.options
        match action:
            case "show_raw" | "show_demangled":
                if not options.demangle_available:
                    return False
                return options.demangle == (action == "show_raw")
            case "show_full_path":
                return not options.show_full_path
            case "show_basename":
                return options.show_full_path
        return True

    def _redraw(self) -> None:
        """Re-render every line from the panel state."""
        try:
            columns = self.query_one("#columns", Static)
            frames = self.query_one("#frames", RichLog)
        except NoMatches:
            return  # Not mounted yet

        scroll_x, scroll_y = frames.scroll_x, frames.scroll_y
        columns.update(self._panel.title())
        frames.clear()
        for line in self._panel.lines():
            # Lines keep their full width so columns never wrap.
            frames.write(line, shrink=False, scroll_end=False)
        frames.scroll_to(scroll_x, scroll_y, animate=False)
        self.sub_title = self._panel.header
        self.refresh_bindings()

    def _apply(self, needs_redraw: bool) -> None:
        if needs_redraw:
            self._redraw()

    def action_refresh(self) -> None:
        """Recapture all targets."""
        self._apply(self._panel.refresh())
        if self._panel.has_error:
            self.notify(self._panel.rows[0].message, severity="error")

    def action_show_raw(self) -> None:
        """Show raw symbol names."""
        self._apply(self._panel.toggle_demangle())

    def action_show_demangled(self) -> None:
        """Show demangled symbol names."""
        self._apply(self._panel.toggle_demangle())

    def action_show_full_path(self) -> None:
        """Show full module paths."""
        self._apply(self._panel.toggle_full_path())

    def action_show_basename(self) -> None:
        """Show module basenames."""
        self._apply(self._panel.toggle_full_path())

    def action_quit(self) -> None:
        """Leave the viewer."""
        self.exit()


def configure_logging(config: Settings) -> None:
    """Send log records to the configured file, or drop them."""
    if config.log_file is None:
        logging.getLogger("btview").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=config.log_file,
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="btview", description="Show the backtrace of running processes.")
    parser.add_argument("pids", metavar="PID", type=int, nargs="+", help="process ids to inspect")
    parser.add_argument("--threads", action="store_true", help="also show every thread of each process")
    parser.add_argument("--full-path", action="store_true", help="start with full module paths")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Entry point for btview application."""
    args = parse_args(argv)
    config = settings.model_copy(update={"show_program_path": True}) if args.full_path else settings
    configure_logging(config)

    try:
        targets = resolve_targets(args.pids, threads=args.threads)
    except CaptureError as exc:
        sys.exit(f"btview: {exc.message}")

    capture = EuStackCapture(config.eu_stack_path, config.cxxfilt_path)
    panel = BacktracePanel(targets, capture, config=config)
    app = BacktraceApp(panel)
    app.run()


if __name__ == "__main__":
    main()
