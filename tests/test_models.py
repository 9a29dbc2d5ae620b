"""Tests for btview data models."""

import os

import pytest

from btview.models import (
    HEADER_INDEX,
    ColumnMetrics,
    ErrorRow,
    FrameRecord,
    FrameRow,
    ProcessHeaderRow,
    ProcessInfo,
)


def test_frame_record_creation():
    """Test FrameRecord dataclass creation."""
    frame = FrameRecord(
        index=2,
        address=0x401000,
        offset=0x20,
        raw_name="main",
        demangled_name=None,
        module_path="/usr/bin/myapp",
        module_short_name="myapp",
        is_signal_frame=False,
    )

    assert frame.index == 2
    assert frame.address == 0x401000
    assert frame.offset == 0x20
    assert frame.raw_name == "main"
    assert frame.demangled_name is None
    assert frame.module_path == "/usr/bin/myapp"
    assert frame.module_short_name == "myapp"
    assert not frame.is_signal_frame
    assert not frame.is_header


def test_frame_record_defaults():
    """Test an unresolved frame has every optional field absent."""
    frame = FrameRecord(index=0)

    assert frame.address == 0
    assert frame.offset == 0
    assert frame.raw_name is None
    assert frame.module_path is None
    assert frame.module_short_name is None


def test_frame_record_header_sentinel():
    """Test the title row sentinel is recognised."""
    assert FrameRecord(index=HEADER_INDEX).is_header


def test_frame_record_is_frozen():
    """Test that FrameRecord is immutable (frozen)."""
    frame = FrameRecord(index=0, raw_name="main")

    with pytest.raises(AttributeError):
        frame.raw_name = "other"


def test_frame_record_uses_slots():
    """Test that FrameRecord uses __slots__ for memory efficiency."""
    assert not hasattr(FrameRecord(index=0), "__dict__")


def test_process_info_basename_from_exe():
    """Test the basename is cut from the executable path."""
    info = ProcessInfo(pid=1, command="myapp", exe="/usr/bin/myapp", basename_offset=9)
    assert info.basename == "myapp"


def test_process_info_basename_falls_back_to_command():
    """Test the command name is used when the executable is unknown."""
    info = ProcessInfo(pid=1, command="kworker/0:1")
    assert info.basename == "kworker/0:1"


def test_process_info_from_pid():
    """Test reading metadata of the running test process."""
    info = ProcessInfo.from_pid(os.getpid())

    assert info.pid == os.getpid()
    assert info.command
    assert not info.is_thread
    if info.exe:
        assert info.exe[info.basename_offset :] == os.path.basename(info.exe)


def test_rows_wrap_their_data():
    """Test the row variants expose the wrapped process and frame."""
    process = ProcessInfo(pid=7, command="worker", is_thread=True)
    frame = FrameRecord(index=0, raw_name="run")

    assert ProcessHeaderRow(process).is_thread
    assert FrameRow(frame, process).frame is frame
    assert ErrorRow("boom").message == "boom"


def test_column_metrics_active_widths():
    """Test metric selection follows the display toggles."""
    metrics = ColumnMetrics(
        address_width=10,
        index_width=1,
        name_width=12,
        demangled_name_width=20,
        module_short_width=5,
        module_path_width=14,
    )

    assert metrics.active_name_width(demangle=True) == 20
    assert metrics.active_name_width(demangle=False) == 12
    assert metrics.active_module_width(show_full_path=True) == 14
    assert metrics.active_module_width(show_full_path=False) == 5


def test_column_metrics_default_is_zero():
    """Test empty metrics are all zero."""
    metrics = ColumnMetrics()
    assert metrics.address_width == 0
    assert metrics.index_width == 0
    assert metrics.name_width == 0
