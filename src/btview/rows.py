"""Row sequence construction from per-process stack captures."""

import logging
from collections.abc import Callable, Iterable, Sequence

from btview.exceptions import CaptureError
from btview.models import ErrorRow, FrameRecord, FrameRow, ProcessHeaderRow, ProcessInfo, Row

logger = logging.getLogger(__name__)

CaptureFunc = Callable[[int], Sequence[FrameRecord]]


def build_rows(targets: Iterable[ProcessInfo], capture: CaptureFunc) -> list[Row]:
    """
    Capture every target in order and lay the results out as rows.

    Each process contributes a header row followed by its frames, top of
    stack first. The first failing capture discards everything collected so
    far and the result is a single ErrorRow; later targets are not captured.

    Args:
        targets: Processes to capture, in display order.
        capture: Callable returning the frames of a pid or raising CaptureError.

    Returns:
        The new row sequence.
    """
    rows: list[Row] = []

    for process in targets:
        logger.debug("Capturing backtrace of pid %d", process.pid)
        try:
            frames = capture(process.pid)
        except CaptureError as exc:
            logger.warning(
                "Capture of pid %d failed, dropping %d collected rows: %s",
                process.pid,
                len(rows),
                exc.message,
            )
            return [ErrorRow(exc.message)]

        rows.append(ProcessHeaderRow(process))
        rows.extend(FrameRow(frame, process) for frame in frames)
        logger.debug("pid %d: %d frames", process.pid, len(frames))

    return rows


def is_error(rows: Sequence[Row]) -> bool:
    """Whether the sequence is the single-ErrorRow form."""
    return len(rows) == 1 and isinstance(rows[0], ErrorRow)
