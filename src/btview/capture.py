"""Stack capture backend built on elfutils' eu-stack."""

import logging
import os
import re
import shutil
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Protocol

import psutil

from btview.exceptions import CaptureError
from btview.models import FrameRecord, ProcessInfo

logger = logging.getLogger(__name__)

_TID_LINE = re.compile(r"^TID (?P<tid>\d+):")
_FRAME_LINE = re.compile(r"^#(?P<index>\d+)\s+0x(?P<address>[0-9a-fA-F]+)(?:\s+(?P<rest>.*))?$")
_NAME_OFFSET = re.compile(r"^(?P<name>.+)\+0x(?P<offset>[0-9a-fA-F]+)$")


class Capture(Protocol):
    """Anything that can capture the frames of a pid."""

    supports_demangling: bool

    def __call__(self, pid: int) -> Sequence[FrameRecord]: ...


def _split_symbol(text: str) -> tuple[str | None, int]:
    """Split ``name+0xoff`` into name and offset."""
    text = text.strip()
    if not text or text == "??":
        return None, 0
    match = _NAME_OFFSET.match(text)
    if match:
        return match.group("name"), int(match.group("offset"), 16)
    return text, 0


def parse_frame_line(line: str) -> FrameRecord | None:
    """
    Parse one eu-stack frame line.

    Lines look like ``#3  0x00007f2a1b2c3d4e poll+0x4e - /usr/lib/libc.so.6``;
    the symbol and the module part are both optional.
    """
    match = _FRAME_LINE.match(line.strip())
    if not match:
        return None

    rest = match.group("rest") or ""
    module: str | None = None
    if rest.startswith("- "):
        symbol, module = "", rest[2:]
    elif " - " in rest:
        symbol, _, module = rest.rpartition(" - ")
    else:
        symbol = rest

    name, offset = _split_symbol(symbol)
    module = module.strip() if module else None

    return FrameRecord(
        index=int(match.group("index")),
        address=int(match.group("address"), 16),
        offset=offset,
        raw_name=name,
        module_path=module or None,
        module_short_name=os.path.basename(module) if module else None,
    )


def parse_eu_stack(output: str, tid: int) -> list[FrameRecord]:
    """
    Extract the frames of one thread from eu-stack output.

    When the output is split into ``TID n:`` blocks only the block of
    ``tid`` is kept; otherwise every frame line is used.
    """
    frames: list[FrameRecord] = []
    has_blocks = False
    in_block = True

    for line in output.splitlines():
        tid_match = _TID_LINE.match(line.strip())
        if tid_match:
            if not has_blocks:
                has_blocks = True
                frames.clear()
            in_block = int(tid_match.group("tid")) == tid
            continue

        if not in_block:
            continue

        frame = parse_frame_line(line)
        if frame is not None:
            frames.append(frame)

    if has_blocks and not frames:
        logger.debug("No frames found for TID %d", tid)
    return frames


class EuStackCapture:
    """
    Capture backtraces by running ``eu-stack`` on the target.

    Symbol names are requested raw and demangled in a single ``c++filt``
    batch per capture when that tool is installed.
    """

    def __init__(self, eu_stack_path: str = "eu-stack", cxxfilt_path: str = "c++filt") -> None:
        """
        Initialize the EuStackCapture.

        Args:
            eu_stack_path: eu-stack executable name or path.
            cxxfilt_path: c++filt executable name or path.
        """
        self._eu_stack_path = eu_stack_path
        self._cxxfilt_path = shutil.which(cxxfilt_path)
        self.supports_demangling = self._cxxfilt_path is not None

    def __call__(self, pid: int) -> list[FrameRecord]:
        """
        Capture the stack of ``pid``, top of stack first.

        Raises:
            CaptureError: If the process is gone, inaccessible, or eu-stack fails.
        """
        if not psutil.pid_exists(pid):
            raise CaptureError(f"No such process: {pid}", pid=pid)

        command = [self._eu_stack_path, "-r", "-m", "-p", str(pid)]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as exc:
            raise CaptureError(f"{self._eu_stack_path} not found", pid=pid) from exc
        except PermissionError as exc:
            raise CaptureError(f"Permission denied running {self._eu_stack_path}", pid=pid) from exc

        if result.returncode != 0:
            message = result.stderr.strip().splitlines()
            detail = message[-1] if message else f"exit status {result.returncode}"
            raise CaptureError(f"eu-stack: {detail}", pid=pid)

        frames = parse_eu_stack(result.stdout, pid)
        if self.supports_demangling:
            frames = self._demangle(frames)
        return frames

    def _demangle(self, frames: list[FrameRecord]) -> list[FrameRecord]:
        """Attach demangled names to frames with mangled symbols."""
        mangled = sorted({f.raw_name for f in frames if f.raw_name and f.raw_name.startswith("_Z")})
        if not mangled:
            return frames

        try:
            result = subprocess.run(
                [self._cxxfilt_path],
                input="\n".join(mangled) + "\n",
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.warning("c++filt failed, showing raw names: %s", exc)
            return frames

        demangled = dict(zip(mangled, result.stdout.splitlines()))
        return [
            replace(frame, demangled_name=demangled[frame.raw_name] or None)
            if frame.raw_name in demangled
            else frame
            for frame in frames
        ]


def resolve_targets(pids: Iterable[int], threads: bool = False) -> list[ProcessInfo]:
    """
    Build display metadata for the requested pids.

    Args:
        pids: Process ids, in display order.
        threads: Also add every thread of each process after its main thread.

    Raises:
        CaptureError: If a pid does not exist or cannot be inspected.
    """
    targets: list[ProcessInfo] = []

    for pid in pids:
        try:
            info = ProcessInfo.from_pid(pid)
            targets.append(info)
            if not threads:
                continue
            thread_ids = sorted(t.id for t in psutil.Process(pid).threads())
        except psutil.NoSuchProcess as exc:
            raise CaptureError(f"No such process: {pid}", pid=pid) from exc
        except psutil.AccessDenied as exc:
            raise CaptureError(f"Permission denied: {pid}", pid=pid) from exc

        for tid in thread_ids:
            if tid == pid:
                continue
            try:
                name = psutil.Process(tid).name()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                name = info.command
            targets.append(
                ProcessInfo(
                    pid=tid,
                    command=name,
                    exe=info.exe,
                    basename_offset=info.basename_offset,
                    is_thread=True,
                )
            )

    return targets
