"""Column width aggregation over a row sequence."""

import logging
from collections.abc import Sequence

from btview.exceptions import LayoutInvariantError
from btview.models import ColumnMetrics, FrameRecord, FrameRow, Row

logger = logging.getLogger(__name__)

INDEX_TITLE = "#"
UNKNOWN_SYMBOL = "??"

MAX_ADDR_32 = 0xFFFFFFFF
ADDRESS_WIDTH_32 = len("0x") + 8
ADDRESS_WIDTH_64 = len("0x") + 16

# Largest width a printf-style field accepts.
MAX_FIELD_WIDTH = 2**31 - 1


def symbol_name(frame: FrameRecord, demangle: bool) -> str:
    """The symbol name shown for a frame under the given demangle setting."""
    if demangle and frame.demangled_name:
        return frame.demangled_name
    return frame.raw_name or UNKNOWN_SYMBOL


def symbol_text(frame: FrameRecord, demangle: bool) -> str:
    """Symbol name with its offset, e.g. ``main+0x20``."""
    return f"{symbol_name(frame, demangle)}+0x{frame.offset:x}"


def _checked(value: int, column: str) -> int:
    if value > MAX_FIELD_WIDTH:
        raise LayoutInvariantError(f"{column} width {value} exceeds {MAX_FIELD_WIDTH}")
    return value


def aggregate(rows: Sequence[Row]) -> ColumnMetrics:
    """
    Compute column widths over every frame row of a sequence.

    Header and error rows are skipped, so an error sequence yields all-zero
    metrics. Raw and demangled names as well as short and full module paths
    are always measured, so display toggles never need a second pass.

    Raises:
        LayoutInvariantError: If a width is beyond the formattable range.
    """
    frame_count = 0
    longest_address = 0
    name_width = 0
    demangled_name_width = 0
    module_short_width = 0
    module_path_width = 0

    for row in rows:
        if not isinstance(row, FrameRow):
            continue
        frame = row.frame
        frame_count += 1

        name_width = max(name_width, len(symbol_text(frame, demangle=False)))
        demangled_name_width = max(demangled_name_width, len(symbol_text(frame, demangle=True)))

        if frame.module_short_name is not None:
            module_short_width = max(module_short_width, len(frame.module_short_name))
        if frame.module_path is not None:
            module_path_width = max(module_path_width, len(frame.module_path))

        longest_address = max(longest_address, frame.address)

    if frame_count == 0:
        return ColumnMetrics()

    address_width = ADDRESS_WIDTH_64 if longest_address > MAX_ADDR_32 else ADDRESS_WIDTH_32
    index_width = max(len(str(frame_count)), len(INDEX_TITLE))

    metrics = ColumnMetrics(
        address_width=address_width,
        index_width=_checked(index_width, "index"),
        name_width=_checked(name_width, "name"),
        demangled_name_width=_checked(demangled_name_width, "demangled name"),
        module_short_width=_checked(module_short_width, "module"),
        module_path_width=_checked(module_path_width, "module path"),
    )
    logger.debug("Aggregated %d frames: %s", frame_count, metrics)
    return metrics
