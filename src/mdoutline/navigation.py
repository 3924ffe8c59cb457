"""Cursor movement between headings."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from mdoutline.config import OutlineOptions
from mdoutline.host import Editor
from mdoutline.schemas import OperationResult
from mdoutline.syntax import MAX_HEADING_LEVEL, heading_levels
from mdoutline.text_utils import split_lines

logger = logging.getLogger(__name__)


class MoveMode(str, Enum):
    """How the next heading is chosen."""

    CONTIGUOUS = "contiguous"
    HIGHER = "higher"
    HIGHEST = "highest"
    LOOSE_SIBLING = "loose_sibling"
    STRICT_SIBLING = "strict_sibling"
    PARENT = "parent"
    LAST_CHILD = "last_child"


def _scan(
    levels: list[int], start: int, backwards: bool, accept: Callable[[int], bool], stop: Callable[[int], bool] | None = None
) -> int | None:
    """First line after ``start`` (before it when going backwards) whose level is accepted.

    Scanning ends early, without a result, on a line matching ``stop``.
    """
    indices = range(start - 1, -1, -1) if backwards else range(start + 1, len(levels))
    for index in indices:
        level = levels[index]
        if not level:
            continue
        if accept(level):
            return index
        if stop is not None and stop(level):
            return None
    return None


def _wrap_start(levels: list[int], backwards: bool) -> int:
    # One past the end in the scanning direction, so the edge line is included.
    return len(levels) if backwards else -1


def _contiguous(levels: list[int], start: int, backwards: bool, wrap_around: bool) -> int | None:
    found = _scan(levels, start, backwards, lambda level: True)
    if found is None and wrap_around:
        found = _scan(levels, _wrap_start(levels, backwards), backwards, lambda level: True)
    return found


def _higher(levels: list[int], start: int, backwards: bool) -> int | None:
    current = levels[start]
    if current == 1:
        return None
    if current == 0:
        return _contiguous(levels, start, backwards, False)
    return _scan(levels, start, backwards, lambda level: level < current)


def _highest(levels: list[int], start: int, backwards: bool) -> int | None:
    current = levels[start]
    if current == 1:
        return None
    threshold = current or MAX_HEADING_LEVEL
    indices = range(start - 1, -1, -1) if backwards else range(start + 1, len(levels))
    candidates = [index for index in indices if 0 < levels[index] <= threshold]
    if not candidates:
        return None
    highest = min(levels[index] for index in candidates)
    if highest == current:
        return None
    return next(index for index in candidates if levels[index] == highest)


def _loose_sibling(levels: list[int], start: int, backwards: bool, wrap_around: bool) -> int | None:
    current = levels[start]
    found = _scan(levels, start, backwards, lambda level: level == current)
    if found is None and wrap_around:
        found = _scan(levels, _wrap_start(levels, backwards), backwards, lambda level: level == current)
    return found


def sibling_section_bounds(levels: list[int], start: int) -> tuple[int | None, int | None]:
    """Lines of the nearest higher headings above and below ``start``, None at the document edges."""
    current = levels[start]
    above = _scan(levels, start, True, lambda level: level < current)
    below = _scan(levels, start, False, lambda level: level < current)
    return above, below


def _strict_sibling(levels: list[int], start: int, backwards: bool, wrap_around: bool) -> int | None:
    current = levels[start]
    if current == 1:
        return _loose_sibling(levels, start, backwards, wrap_around)

    def accept(level: int) -> bool:
        return level == current

    def stop(level: int) -> bool:
        return level < current

    found = _scan(levels, start, backwards, accept, stop)
    if found is None and wrap_around:
        # Restart from the other edge of the enclosing section.
        above, below = sibling_section_bounds(levels, start)
        if backwards:
            restart = len(levels) if below is None else below
        else:
            restart = -1 if above is None else above
        found = _scan(levels, restart, backwards, accept, stop)
    return found


def _parent(levels: list[int], start: int) -> int | None:
    current = levels[start]
    if current == 1:
        return None
    return _scan(levels, start, True, lambda level: current == 0 or level < current)


def _last_child(levels: list[int], start: int) -> int | None:
    current = levels[start]
    if current >= MAX_HEADING_LEVEL:
        return None
    if current == 0:
        return _contiguous(levels, start, False, False)
    last = None
    for index in range(start + 1, len(levels)):
        level = levels[index]
        if not level:
            continue
        if level <= current:
            break
        last = index
    return last


def find_heading_line(
    lines: list[str],
    start_line: int,
    mode: MoveMode,
    *,
    backwards: bool = False,
    options: OutlineOptions | None = None,
) -> int | None:
    """Line of the heading the cursor should move to, or None to stay put.

    Lines inside fenced code blocks are never headings.
    """
    opts = options or OutlineOptions()
    levels = heading_levels(lines, opts.max_level)
    if not 0 <= start_line < len(levels):
        return None
    mode = MoveMode(mode)

    if mode in (MoveMode.LOOSE_SIBLING, MoveMode.STRICT_SIBLING) and levels[start_line] == 0:
        # Off a heading, siblings are counted from the heading owning the line.
        owner = _scan(levels, start_line, True, lambda level: True)
        if owner is None:
            return None
        if backwards:
            return owner
        start_line = owner

    if mode is MoveMode.CONTIGUOUS:
        found = _contiguous(levels, start_line, backwards, opts.contiguous_wrap_around)
    elif mode is MoveMode.HIGHER:
        found = _higher(levels, start_line, backwards)
    elif mode is MoveMode.HIGHEST:
        found = _highest(levels, start_line, backwards)
    elif mode is MoveMode.LOOSE_SIBLING:
        found = _loose_sibling(levels, start_line, backwards, opts.loose_sibling_wrap_around)
    elif mode is MoveMode.STRICT_SIBLING:
        found = _strict_sibling(levels, start_line, backwards, opts.strict_sibling_wrap_around)
    elif mode is MoveMode.PARENT:
        found = _parent(levels, start_line)
    else:
        found = _last_child(levels, start_line)
    return found


def move_cursor_to_heading(
    editor: Editor, mode: MoveMode, *, backwards: bool = False, options: OutlineOptions | None = None
) -> OperationResult:
    start_line = editor.get_cursor_line()
    found = find_heading_line(split_lines(editor.get_text()), start_line, mode, backwards=backwards, options=options)
    if found is None or found == start_line:
        return OperationResult(applied=False)
    editor.set_cursor_line(found)
    logger.debug("Moved cursor (%s) from line %d to %d", MoveMode(mode).value, start_line, found)
    return OperationResult(applied=True, cursor_line=found)
