"""Line/position helpers and multi-change text edits."""

from __future__ import annotations

import sys
from typing import Iterable

from mdoutline.exceptions import EditConflictError
from mdoutline.schemas import EditorChange, LineCol

END_OF_LINE = sys.maxsize


def split_lines(text: str) -> list[str]:
    """Split text the way an editor counts lines (a trailing newline opens an empty line)."""
    return text.split("\n")


def line_count(text: str) -> int:
    return text.count("\n") + 1


def clamp_position(lines: list[str], pos: LineCol) -> LineCol:
    """Clamp a position into the document.

    Lines past the end map to the end of the last line and characters past
    the end of a line map to its end.
    """
    if pos.line < 0:
        return LineCol(line=0, ch=0)
    if pos.line >= len(lines):
        last = len(lines) - 1
        return LineCol(line=last, ch=len(lines[last]))
    return LineCol(line=pos.line, ch=max(0, min(pos.ch, len(lines[pos.line]))))


def position_to_offset(lines: list[str], pos: LineCol) -> int:
    pos = clamp_position(lines, pos)
    return sum(len(line) + 1 for line in lines[: pos.line]) + pos.ch


def get_range(text: str, start: LineCol, end: LineCol) -> str:
    lines = split_lines(text)
    return text[position_to_offset(lines, start) : position_to_offset(lines, end)]


def get_line_range(lines: list[str], start: int, end: int) -> str:
    """Text of lines ``[start, end)``.

    Every line keeps its newline except the last line of the document,
    which has none.
    """
    start = max(start, 0)
    end = min(end, len(lines))
    if start >= end:
        return ""
    chunk = "\n".join(lines[start:end])
    if end < len(lines):
        chunk += "\n"
    return chunk


def apply_changes(text: str, changes: Iterable[EditorChange]) -> str:
    """Apply several changes at once.

    All positions refer to the original text, so changes are applied from the
    end of the document towards its start.

    Raises:
        EditConflictError: If two changes overlap.
    """
    lines = split_lines(text)
    spans = []
    for change in changes:
        start = position_to_offset(lines, change.from_)
        end = position_to_offset(lines, change.end)
        if end < start:
            start, end = end, start
        spans.append((start, end, change.text))

    spans.sort(key=lambda span: (span[0], span[1]))
    for previous, current in zip(spans, spans[1:]):
        if previous[1] > current[0]:
            raise EditConflictError(
                f"Overlapping changes at offsets {previous[0]}-{previous[1]} and {current[0]}-{current[1]}"
            )

    for start, end, replacement in reversed(spans):
        text = text[:start] + replacement + text[end:]
    return text
