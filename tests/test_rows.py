"""Tests for row sequence construction."""

from btview.models import ErrorRow, FrameRecord, FrameRow, ProcessHeaderRow
from btview.rows import build_rows, is_error
from conftest import FakeCapture, make_process


def test_single_process_rows(sample_frames, process):
    """Test a header row followed by every frame in capture order."""
    rows = build_rows([process], FakeCapture({10: sample_frames}))

    assert rows[0] == ProcessHeaderRow(process)
    assert [row.frame for row in rows[1:]] == sample_frames
    assert all(isinstance(row, FrameRow) and row.process is process for row in rows[1:])
    assert not is_error(rows)


def test_groups_follow_target_order():
    """Test one group per process in the order the targets were given."""
    first = make_process(pid=11)
    second = make_process(pid=10)
    capture = FakeCapture(
        {
            10: [FrameRecord(index=0, raw_name="b")],
            11: [FrameRecord(index=0, raw_name="a"), FrameRecord(index=1, raw_name="main")],
        }
    )

    rows = build_rows([first, second], capture)

    assert capture.calls == [11, 10]
    assert [type(row) for row in rows] == [ProcessHeaderRow, FrameRow, FrameRow, ProcessHeaderRow, FrameRow]
    assert rows[3].process.pid == 10


def test_zero_frames_is_not_an_error(process):
    """Test an empty capture still produces the header row."""
    rows = build_rows([process], FakeCapture({10: []}))

    assert rows == [ProcessHeaderRow(process)]


def test_no_targets():
    """Test an empty target list yields no rows."""
    assert build_rows([], FakeCapture({})) == []


def test_failure_discards_earlier_processes():
    """Test a failing capture replaces everything with one error row."""
    first = make_process(pid=10)
    second = make_process(pid=11)
    capture = FakeCapture(
        {
            10: [FrameRecord(index=0, address=0x401000), FrameRecord(index=1, address=0x0)],
            11: "permission denied",
        }
    )

    rows = build_rows([first, second], capture)

    assert rows == [ErrorRow("permission denied")]
    assert is_error(rows)


def test_failure_stops_capturing():
    """Test targets after the failing one are never captured."""
    targets = [make_process(pid=pid) for pid in (1, 2, 3)]
    capture = FakeCapture({1: [], 2: "No such process: 2", 3: []})

    rows = build_rows(targets, capture)

    assert capture.calls == [1, 2]
    assert len(rows) == 1
    assert not any(isinstance(row, (FrameRow, ProcessHeaderRow)) for row in rows)
