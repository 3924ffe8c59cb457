"""Where a heading of a given level belongs, and inserting new headings there."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from mdoutline.config import OutlineOptions
from mdoutline.exceptions import InvalidHeadingLevelError
from mdoutline.host import Editor
from mdoutline.schemas import EditorChange, LineCol, OperationResult
from mdoutline.syntax import MAX_HEADING_LEVEL, make_definer
from mdoutline.tree import HeadingNode, HeadingTree, Traversal

logger = logging.getLogger(__name__)


def _first_child(node: HeadingNode, predicate) -> HeadingNode | None:
    return next((child for child in node.children if predicate(child)), None)


def _line_inside_section(node: HeadingNode, level: int, skew_upwards: bool, upward_match) -> int:
    if skew_upwards:
        child = _first_child(node, upward_match)
        if child is not None:
            return child.start
    child = _first_child(node, lambda c: c.level < level)
    if child is not None:
        return child.start
    return node.children[-1].end


def resolve_insertion_line(
    tree: HeadingTree, reference: HeadingNode | None, level: int, skew_upwards: bool = False
) -> int:
    """Line a new heading of ``level`` should be inserted at, relative to ``reference``.

    Args:
        tree: Tree the reference belongs to.
        reference: Heading the insertion is relative to; None means the root.
        level: Level of the inserted heading.
        skew_upwards: Prefer the position before the reference over the one after it.

    Returns:
        Line number the inserted text starts at (may equal the line count).

    Raises:
        InvalidHeadingLevelError: If ``level`` is not 1 to 6.
    """
    if not 1 <= level <= MAX_HEADING_LEVEL:
        raise InvalidHeadingLevelError(f"Heading level must be between 1 and 6, got {level}")
    node = reference or tree.root

    if level > node.level:
        if not node.children:
            return node.end
        return _line_inside_section(node, level, skew_upwards, lambda c: c.level == level)

    if level == node.level:
        return node.start if skew_upwards else node.end

    ancestor = node
    while ancestor.level > level:
        ancestor = ancestor.parent

    if ancestor.is_root:
        first = tree.find(lambda n: n.level <= level)
        return first.start if first is not None else tree.root.end

    if ancestor.level == level:
        return ancestor.start if skew_upwards else ancestor.end

    return _line_inside_section(ancestor, level, skew_upwards, lambda c: c.level <= level)


def build_heading_section(level: int, title: str = "", contents: str | None = None) -> str:
    """Text of a new heading section, ending with a blank separation line."""
    body = ""
    if contents:
        body = contents if contents.endswith("\n") else contents + "\n"
    return make_definer(level) + title + "\n" + body + "\n"


def insert_smart_heading(
    editor: Editor,
    level: int,
    *,
    title: str = "",
    contents: str | None = None,
    reference_line: int | None = None,
    options: OutlineOptions | None = None,
) -> OperationResult:
    """Insert a new heading where its level belongs relative to the cursor (or ``reference_line``)."""
    opts = options or OutlineOptions()
    line = editor.get_cursor_line() if reference_line is None else reference_line
    tree = HeadingTree(editor.get_text(), opts.max_level)
    reference = tree.get_node_at_line(line)
    try:
        insertion_line = resolve_insertion_line(tree, reference, level, opts.skew_upwards)
    except InvalidHeadingLevelError as exc:
        return OperationResult(applied=False, notice=str(exc))

    section = build_heading_section(level, title, contents)
    if insertion_line == tree.line_count:
        # The last line has no newline of its own to insert after.
        section = "\n" + section[:-1]

    # Cursor ends on the last contents line, or on the heading itself.
    cursor_line = insertion_line + section.count("\n") - 2
    editor.apply_edit([EditorChange(from_=LineCol(line=insertion_line), text=section)], cursor_line)
    logger.debug("Inserted level %d heading at line %d", level, insertion_line)
    return OperationResult(applied=True, cursor_line=editor.get_cursor_line())


def find_reference_heading_line(text: str, valid_levels: Iterable[int], title_pattern: str) -> int | None:
    """First heading, breadth first, at one of ``valid_levels`` whose title matches ``title_pattern``."""
    levels = set(valid_levels)
    if not levels:
        logger.warning("No valid levels given for the reference heading")
        return None
    regex = re.compile(title_pattern, re.IGNORECASE)
    tree = HeadingTree(text, max_level=max(levels))
    found: list[HeadingNode] = []

    def visit(node: HeadingNode) -> Traversal:
        if node.level in levels and regex.search(node.heading.title):
            found.append(node)
            return Traversal.STOP
        return Traversal.CONTINUE

    tree.breadth_first_traversal(visit)
    if not found:
        logger.warning("No heading matches %r at levels %s", title_pattern, sorted(levels))
        return None
    return found[0].start


def insert_smart_heading_under_heading(
    editor: Editor,
    level: int,
    *,
    valid_levels: Iterable[int],
    title_pattern: str,
    title: str = "",
    contents: str | None = None,
    options: OutlineOptions | None = None,
) -> OperationResult:
    reference_line = find_reference_heading_line(editor.get_text(), valid_levels, title_pattern)
    if reference_line is None:
        return OperationResult(applied=False, notice="Reference heading not found.")
    return insert_smart_heading(
        editor, level, title=title, contents=contents, reference_line=reference_line, options=options
    )
