"""Shared fixtures for btview tests."""

from collections.abc import Sequence

import pytest

from btview.config import Settings
from btview.exceptions import CaptureError
from btview.models import FrameRecord, ProcessInfo


class FakeCapture:
    """Capture stand-in returning canned frames or failures per pid."""

    def __init__(
        self,
        results: dict[int, Sequence[FrameRecord] | str],
        supports_demangling: bool = True,
    ) -> None:
        self.results = results
        self.supports_demangling = supports_demangling
        self.calls: list[int] = []

    def __call__(self, pid: int) -> Sequence[FrameRecord]:
        self.calls.append(pid)
        result = self.results[pid]
        if isinstance(result, str):
            raise CaptureError(result, pid=pid)
        return result


def make_process(pid: int = 10, exe: str | None = "/usr/bin/myapp", **kwargs) -> ProcessInfo:
    """Build a ProcessInfo whose basename offset matches its exe."""
    command = kwargs.pop("command", exe.rsplit("/", 1)[-1] if exe else "myapp")
    offset = exe.rfind("/") + 1 if exe else 0
    return ProcessInfo(pid=pid, command=command, exe=exe, basename_offset=offset, **kwargs)


@pytest.fixture
def process() -> ProcessInfo:
    return make_process()


@pytest.fixture
def sample_frames() -> list[FrameRecord]:
    """A small C++ stack with one unresolved frame at the bottom."""
    return [
        FrameRecord(
            index=0,
            address=0x7F3A2B4C5D6E,
            offset=0x1E,
            raw_name="__GI___poll",
            module_path="/usr/lib/x86_64-linux-gnu/libc.so.6",
            module_short_name="libc.so.6",
        ),
        FrameRecord(
            index=1,
            address=0x401000,
            offset=0x120,
            raw_name="_ZN6Server3runEv",
            demangled_name="Server::run()",
            module_path="/usr/bin/myapp",
            module_short_name="myapp",
        ),
        FrameRecord(
            index=2,
            address=0x401800,
            offset=0x20,
            raw_name="main",
            module_path="/usr/bin/myapp",
            module_short_name="myapp",
        ),
        FrameRecord(index=3, address=0x0),
    ]


@pytest.fixture
def default_settings() -> Settings:
    return Settings(_env_file=None)
