"""Fixed-width text layout of backtrace rows."""

from collections.abc import Sequence
from dataclasses import dataclass

from rich.text import Text

from btview.exceptions import LayoutInvariantError
from btview.metrics import INDEX_TITLE, symbol_text
from btview.models import ColumnMetrics, ErrorRow, FrameRow, ProcessHeaderRow, Row
from btview.options import DisplayOptions

ADDRESS_TITLE = "ADDRESS"
NAME_TITLE = "NAME"
PATH_TITLE = "PATH"
MISSING_MODULE = "-"


@dataclass(slots=True, frozen=True)
class LineStyle:
    """Rich styles applied to rendered lines."""

    base: str = ""
    dim: str = "dim"
    highlight: str = "bold cyan"
    title: str = "bold italic dim"


DEFAULT_STYLE = LineStyle()


def format_title(
    options: DisplayOptions,
    metrics: ColumnMetrics,
    style: LineStyle = DEFAULT_STYLE,
) -> Text:
    """Render the column titles at the widths used for frame rows."""
    line = " ".join(
        [
            f"{INDEX_TITLE:>{metrics.index_width}}",
            f"{ADDRESS_TITLE:<{metrics.address_width}}",
            f"{NAME_TITLE:<{metrics.active_name_width(options.demangle)}}",
            f"{PATH_TITLE:<{metrics.active_module_width(options.show_full_path)}}",
        ]
    )
    return Text(line, style=style.title)


def _format_process_header(row: ProcessHeaderRow, options: DisplayOptions, style: LineStyle) -> Text:
    process = row.process
    if process.is_thread and options.show_thread_names:
        name = process.command
    else:
        name = process.basename

    kind = "Thread" if row.is_thread else "Process"
    text = Text(f"- {kind} ", style=style.base)
    text.append(name, style=style.highlight if options.highlight_base_name else style.base)
    text.append(f" ({process.pid}):", style=style.base)
    return text


def _highlight_basename(text: Text, module: str, start: int, basename: str, style: LineStyle) -> None:
    """Highlight the trailing path component of ``module`` if it is the process basename."""
    component_start = module.rfind("/") + 1
    component = module[component_start:]
    trimmed = component.strip()
    if not trimmed or trimmed != basename:
        return

    leading = len(component) - len(component.lstrip())
    begin = start + component_start + leading
    text.stylize(style.highlight, begin, begin + len(trimmed))


def _format_frame(row: FrameRow, options: DisplayOptions, metrics: ColumnMetrics, style: LineStyle) -> Text:
    frame = row.frame
    if frame.is_header:
        raise LayoutInvariantError("frame row carries the title row index")

    module = frame.module_path if options.show_full_path else frame.module_short_name
    module_width = metrics.active_module_width(options.show_full_path)
    digits = max(metrics.address_width - len("0x"), 0)

    prefix = " ".join(
        [
            f"{frame.index:>{metrics.index_width}}",
            f"0x{frame.address:0{digits}x}",
            f"{symbol_text(frame, options.demangle):<{metrics.active_name_width(options.demangle)}}",
        ]
    )
    module_start = len(prefix) + 1
    line = f"{prefix} {(module or MISSING_MODULE):<{module_width}}"

    dimmed = module is None and frame.address == 0
    text = Text(line, style=style.dim if dimmed else style.base)

    if options.highlight_base_name and module:
        _highlight_basename(text, module, module_start, row.process.basename, style)

    return text


def format_row(
    row: Row,
    options: DisplayOptions,
    metrics: ColumnMetrics,
    style: LineStyle = DEFAULT_STYLE,
) -> Text:
    """
    Render one row as a styled line.

    Raises:
        LayoutInvariantError: If a frame row carries the title row index.
    """
    match row:
        case ProcessHeaderRow():
            return _format_process_header(row, options, style)
        case FrameRow():
            return _format_frame(row, options, metrics, style)
        case ErrorRow():
            return Text(row.message)
    raise TypeError(f"not a row: {row!r}")


def format_rows(
    rows: Sequence[Row],
    options: DisplayOptions,
    metrics: ColumnMetrics,
    style: LineStyle = DEFAULT_STYLE,
) -> list[Text]:
    """Render a whole row sequence in order."""
    return [format_row(row, options, metrics, style) for row in rows]
