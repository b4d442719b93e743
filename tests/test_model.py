from __future__ import annotations

import pytest

from mincov.core.model import UNKNOWN_LINE, ClassCoverage, LineStatus, MethodCoverage, counter_status


@pytest.mark.parametrize(
    ("missed", "covered", "expected"),
    [
        (0, 0, LineStatus.EMPTY),
        (3, 0, LineStatus.NOT_COVERED),
        (0, 3, LineStatus.FULLY_COVERED),
        (1, 2, LineStatus.PARTLY_COVERED),
    ],
)
def test_counter_status(missed: int, covered: int, expected: LineStatus) -> None:
    assert counter_status(missed, covered) is expected


def test_counter_status_rejects_negative_counts() -> None:
    with pytest.raises(ValueError, match=">= 0"):
        counter_status(-1, 0)


def test_line_status_flags_combine() -> None:
    assert LineStatus(LineStatus.FULLY_COVERED | LineStatus.NOT_COVERED) is LineStatus.PARTLY_COVERED
    assert LineStatus(LineStatus.EMPTY | LineStatus.NOT_COVERED) is LineStatus.NOT_COVERED
    assert LineStatus.PARTLY_COVERED.is_covered
    assert not LineStatus.EMPTY.is_covered


def test_line_at_distinguishes_absent_from_empty() -> None:
    m = MethodCoverage("m", "()V", 1, 1, 3, {1: LineStatus.FULLY_COVERED, 2: LineStatus.EMPTY})
    assert m.line_at(1) is LineStatus.FULLY_COVERED
    assert m.line_at(2) is LineStatus.EMPTY
    assert m.line_at(3) is None


def test_method_lines_are_read_only() -> None:
    source = {1: LineStatus.FULLY_COVERED}
    m = MethodCoverage("m", "()V", 1, 1, 1, source)
    source[2] = LineStatus.FULLY_COVERED
    assert m.line_at(2) is None
    with pytest.raises(TypeError):
        m.lines[3] = LineStatus.EMPTY  # type: ignore[index]


def test_has_line_info() -> None:
    assert MethodCoverage("m", "()V", 1, 4, 9).has_line_info
    assert not MethodCoverage("m", "()V", 1).has_line_info
    assert not MethodCoverage("m", "()V", 1, 4, UNKNOWN_LINE).has_line_info


def test_negative_counters_are_rejected() -> None:
    with pytest.raises(ValueError, match="instructions_covered"):
        MethodCoverage("m", "()V", -1)
    with pytest.raises(ValueError, match="instructions_covered"):
        ClassCoverage("a/B", -1)


def test_dotted_name() -> None:
    assert ClassCoverage("com/example/A$1", 0).dotted_name == "com.example.A$1"
