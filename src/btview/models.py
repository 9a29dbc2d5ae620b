"""Data models for btview."""

from dataclasses import dataclass

import psutil

# Index carried by the synthetic column title row.
HEADER_INDEX = -1


@dataclass(slots=True, frozen=True)
class FrameRecord:
    """Immutable record of one captured stack frame."""

    index: int
    address: int = 0  # 0 means unresolved
    offset: int = 0  # Bytes from symbol start
    raw_name: str | None = None
    demangled_name: str | None = None
    module_path: str | None = None
    module_short_name: str | None = None
    is_signal_frame: bool = False

    @property
    def is_header(self) -> bool:
        """Whether this is the synthetic title row."""
        return self.index == HEADER_INDEX


@dataclass(slots=True, frozen=True)
class ProcessInfo:
    """Display metadata of a target process or thread."""

    pid: int
    command: str
    exe: str | None = None
    basename_offset: int = 0
    is_thread: bool = False

    @property
    def basename(self) -> str:
        """Executable basename, falling back to the command name."""
        if self.exe:
            return self.exe[self.basename_offset :]
        return self.command

    @classmethod
    def from_pid(cls, pid: int, is_thread: bool = False) -> "ProcessInfo":
        """
        Read display metadata for a pid through psutil.

        Missing permissions on the executable link are tolerated; a vanished
        process is not.
        """
        proc = psutil.Process(pid)
        with proc.oneshot():
            command = proc.name()
            try:
                exe = proc.exe() or None
            except (psutil.AccessDenied, psutil.ZombieProcess):
                exe = None

        basename_offset = exe.rfind("/") + 1 if exe else 0
        return cls(
            pid=pid,
            command=command,
            exe=exe,
            basename_offset=basename_offset,
            is_thread=is_thread,
        )


@dataclass(slots=True, frozen=True)
class ProcessHeaderRow:
    """Row introducing the frames of one process."""

    process: ProcessInfo

    @property
    def is_thread(self) -> bool:
        return self.process.is_thread


@dataclass(slots=True, frozen=True)
class FrameRow:
    """Row showing a single frame of a process."""

    frame: FrameRecord
    process: ProcessInfo


@dataclass(slots=True, frozen=True)
class ErrorRow:
    """Row replacing all output when a capture fails."""

    message: str


Row = ProcessHeaderRow | FrameRow | ErrorRow


@dataclass(slots=True, frozen=True)
class ColumnMetrics:
    """Column widths for one row sequence, both display variants included."""

    address_width: int = 0
    index_width: int = 0
    name_width: int = 0
    demangled_name_width: int = 0
    module_short_width: int = 0
    module_path_width: int = 0

    def active_name_width(self, demangle: bool) -> int:
        """Width of the name column under the given demangle setting."""
        return self.demangled_name_width if demangle else self.name_width

    def active_module_width(self, show_full_path: bool) -> int:
        """Width of the module column under the given path setting."""
        return self.module_path_width if show_full_path else self.module_short_width
