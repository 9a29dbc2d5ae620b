"""Backtrace panel state: captured rows, column metrics and display toggles."""

import logging
from collections.abc import Sequence

from rich.text import Text

from btview.config import Settings, settings
from btview.formatter import DEFAULT_STYLE, LineStyle, format_rows, format_title
from btview.metrics import aggregate
from btview.models import ColumnMetrics, ProcessInfo, Row
from btview.options import DisplayOptions
from btview.rows import CaptureFunc, build_rows, is_error

logger = logging.getLogger(__name__)

DEMANGLE_LABEL = "Demangle"
RAW_LABEL = "Raw"
FULL_PATH_LABEL = "Full Path"
BASENAME_LABEL = "Basename"


class BacktracePanel:
    """
    Backtrace of one or more processes, ready to be painted line by line.

    The panel owns its rows, metrics and options. ``refresh`` recaptures
    everything; the toggles only change which fields are shown.
    """

    def __init__(
        self,
        targets: Sequence[ProcessInfo],
        capture: CaptureFunc,
        config: Settings = settings,
        style: LineStyle = DEFAULT_STYLE,
    ) -> None:
        """
        Initialize the panel and run the first capture.

        Args:
            targets: Processes to show, in display order.
            capture: Callable returning the frames of a pid or raising CaptureError.
            config: Settings providing the initial display preferences.
            style: Styles used for rendered lines.
        """
        self._targets = list(targets)
        self._capture = capture
        self._style = style
        self._rows: list[Row] = []
        self._metrics = ColumnMetrics()
        self.options = DisplayOptions.from_settings(
            config,
            demangle_available=getattr(capture, "supports_demangling", True),
        )
        self.refresh()

    @property
    def rows(self) -> list[Row]:
        return self._rows

    @property
    def metrics(self) -> ColumnMetrics:
        return self._metrics

    @property
    def targets(self) -> list[ProcessInfo]:
        return list(self._targets)

    @property
    def has_error(self) -> bool:
        return is_error(self._rows)

    @property
    def header(self) -> str:
        """Panel caption naming the captured processes."""
        if len(self._targets) == 1:
            target = self._targets[0]
            return f"Backtrace of '{target.command}' ({target.pid})"
        return f"Backtrace of {len(self._targets)} processes"

    def refresh(self) -> bool:
        """Recapture every target and rebuild rows and metrics."""
        rows = build_rows(self._targets, self._capture)
        metrics = aggregate(rows)
        self._rows, self._metrics = rows, metrics
        logger.info("Refreshed backtrace: %d rows", len(rows))
        return True

    def toggle_demangle(self) -> bool:
        """Switch between demangled and raw symbol names."""
        return self.options.toggle_demangle()

    def toggle_full_path(self) -> bool:
        """Switch between module basenames and full paths."""
        return self.options.toggle_full_path()

    def handle_key(self, key: str) -> bool:
        """
        Dispatch a key press.

        Returns:
            True if the panel needs a redraw, False if the key was ignored.
        """
        match key:
            case "f1":
                return self.refresh()
            case "f2":
                return self.toggle_demangle()
            case "f3" | "p":
                return self.toggle_full_path()
        return False

    def function_bar(self) -> list[tuple[str, str]]:
        """Key labels; each label names what pressing the key switches to."""
        bar = [("F1", "Refresh")]
        if self.options.demangle_available:
            bar.append(("F2", RAW_LABEL if self.options.demangle else DEMANGLE_LABEL))
        bar.append(("F3", BASENAME_LABEL if self.options.show_full_path else FULL_PATH_LABEL))
        bar.append(("Esc", "Done"))
        return bar

    def title(self) -> Text:
        """Column title line; empty when an error replaced the rows."""
        if self.has_error:
            return Text("")
        return format_title(self.options, self._metrics, self._style)

    def lines(self) -> list[Text]:
        """Render every row with the current options."""
        return format_rows(self._rows, self.options, self._metrics, self._style)
