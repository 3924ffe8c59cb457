"""Tests for text position helpers and multi-change edits."""

from __future__ import annotations

import pytest

from mdoutline.exceptions import EditConflictError
from mdoutline.schemas import EditorChange, LineCol
from mdoutline.text_utils import (
    END_OF_LINE,
    apply_changes,
    clamp_position,
    get_line_range,
    get_range,
    line_count,
    position_to_offset,
    split_lines,
)

TEXT = "one\ntwo\nthree"


def _change(line: int, ch: int = 0, to: tuple[int, int] | None = None, text: str = "") -> EditorChange:
    end = LineCol(line=to[0], ch=to[1]) if to is not None else None
    return EditorChange(from_=LineCol(line=line, ch=ch), to=end, text=text)


class TestPositions:
    """Tests for line and position helpers."""

    def test_split_and_count(self) -> None:
        """A trailing newline opens one more empty line."""
        assert split_lines("a\nb\n") == ["a", "b", ""]
        assert line_count("a\nb\n") == 3
        assert line_count("") == 1

    @pytest.mark.parametrize(
        ("position", "expected"),
        [
            (LineCol(line=1, ch=2), LineCol(line=1, ch=2)),
            (LineCol(line=1, ch=END_OF_LINE), LineCol(line=1, ch=3)),
            (LineCol(line=9), LineCol(line=2, ch=5)),
            (LineCol(line=-1, ch=4), LineCol(line=0, ch=0)),
        ],
    )
    def test_clamp(self, position: LineCol, expected: LineCol) -> None:
        """Positions outside the text are pulled back in."""
        assert clamp_position(split_lines(TEXT), position) == expected

    def test_offsets(self) -> None:
        """Offsets count each line with its newline."""
        lines = split_lines(TEXT)
        assert position_to_offset(lines, LineCol(line=2)) == 8
        assert get_range(TEXT, LineCol(line=0, ch=1), LineCol(line=1, ch=2)) == "ne\ntw"

    def test_line_range(self) -> None:
        """Only the last line of the document lacks a newline."""
        lines = split_lines(TEXT)
        assert get_line_range(lines, 0, 2) == "one\ntwo\n"
        assert get_line_range(lines, 1, 3) == "two\nthree"
        assert get_line_range(lines, 2, 2) == ""


class TestApplyChanges:
    """Tests for apply_changes."""

    def test_changes_use_original_positions(self) -> None:
        """Every change refers to the text before any change was applied."""
        changes = [
            _change(0, text="zero\n"),
            _change(1, to=(2, 0)),
            _change(2, to=(2, END_OF_LINE), text="3"),
        ]
        assert apply_changes(TEXT, changes) == "zero\none\n3"

    def test_insert_past_end(self) -> None:
        """Insertions after the last line land at the end of the text."""
        assert apply_changes(TEXT, [_change(3, text="\nfour")]) == "one\ntwo\nthree\nfour"

    def test_overlap_raises(self) -> None:
        """Overlapping changes are rejected."""
        with pytest.raises(EditConflictError):
            apply_changes(TEXT, [_change(0, to=(1, 2)), _change(1, to=(2, 0))])

    def test_adjacent_changes(self) -> None:
        """Changes that only touch are fine."""
        changes = [_change(0, to=(1, 0), text="A\n"), _change(1, to=(2, 0), text="B\n")]
        assert apply_changes(TEXT, changes) == "A\nB\nthree"
