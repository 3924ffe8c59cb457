"""Operations on a heading section and its level siblings."""

from __future__ import annotations

import logging
from typing import Sequence

from mdoutline.config import OutlineOptions
from mdoutline.exceptions import HeadingNotFoundError
from mdoutline.folds import (
    capture_relative_folds,
    classify_source_folds,
    folds_outside,
    remap_source_folds,
    restore_relative_folds,
    sanitize_folds,
)
from mdoutline.host import Chooser, Editor
from mdoutline.schemas import EditorChange, LineCol, OperationResult
from mdoutline.syntax import MAX_HEADING_LEVEL, make_definer
from mdoutline.text_utils import line_count
from mdoutline.timestamps import DateFormat, compatible_formats, convert_timestamp, get_date_format
from mdoutline.tree import HeadingNode, HeadingTree

logger = logging.getLogger(__name__)


def swap_heading_section(editor: Editor, *, upwards: bool, options: OutlineOptions | None = None) -> OperationResult:
    """Swap the section at the cursor with the previous or next sibling of the same level."""
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    try:
        node = tree.require_node_at_line(editor.get_cursor_line())
    except HeadingNotFoundError as exc:
        logger.debug("%s", exc)
        return OperationResult(applied=False, notice=str(exc))

    other = node.prev if upwards else node.next
    if other is None or other.level != node.level:
        return OperationResult(applied=False, notice="No sibling heading to swap with.")

    first, second = (other, node) if upwards else (node, other)
    ranges = [(first.start, first.end), (second.start, second.end)]
    contents = [tree.get_contents(first), tree.get_contents(second)]
    sizes = [end - start for start, end in ranges]

    # The section ending the document owns no trailing newline.
    if second.heading.has_last_line:
        contents[1] += "\n"
        contents[0] = contents[0][:-1]

    cursor = editor.get_cursor_line()
    cursor_line = cursor - sizes[0] if upwards else cursor + sizes[1]

    folds = editor.get_folds()
    relative = capture_relative_folds(folds, ranges)
    kept = folds_outside(folds, first.start, second.end)

    editor.apply_edit(
        [EditorChange(from_=LineCol(line=first.start), to=LineCol(line=second.end), text=contents[1] + contents[0])],
        cursor_line,
    )
    restored = restore_relative_folds(relative, [first.start, first.start + sizes[1]], [1, 0])
    editor.apply_folds(sanitize_folds(kept + restored, editor.line_count()))
    return OperationResult(applied=True, cursor_line=editor.get_cursor_line())


def _change_sibling_levels(editor: Editor, siblings: Sequence[HeadingNode], level: int) -> OperationResult:
    definer = make_definer(level)
    changes = [
        EditorChange(
            from_=LineCol(line=node.start),
            to=LineCol(line=node.start, ch=len(node.heading.definer)),
            text=definer,
        )
        for node in siblings
    ]
    folds = editor.get_folds()
    cursor = editor.get_cursor_line()
    editor.apply_edit(changes, cursor)
    editor.apply_folds(folds)
    logger.debug("Set %d sibling headings to level %d", len(changes), level)
    return OperationResult(applied=True, cursor_line=cursor)


def shift_sibling_heading_level(editor: Editor, step: int, options: OutlineOptions | None = None) -> OperationResult:
    """Shift the level of the cursor heading and its level siblings by ``step``."""
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    try:
        node = tree.require_node_at_line(editor.get_cursor_line())
    except HeadingNotFoundError as exc:
        logger.debug("%s", exc)
        return OperationResult(applied=False, notice=str(exc))

    current = node.level
    target = ((current - 1 + step) % MAX_HEADING_LEVEL) + 1
    if not opts.level_wrap_around:
        if (step > 0 and target < current) or (step < 0 and target > current):
            return OperationResult(applied=False)
    if target == current:
        return OperationResult(applied=False)
    return _change_sibling_levels(editor, node.get_level_siblings(), target)


async def set_sibling_heading_level(
    editor: Editor, chooser: Chooser, options: OutlineOptions | None = None
) -> OperationResult:
    """Ask for a level and give it to the cursor heading and its level siblings."""
    level = await chooser.choose(
        list(range(1, MAX_HEADING_LEVEL + 1)),
        lambda value: f"Heading {value} {'#' * value}",
        "Select level for the sibling headings",
    )
    if level is None:
        return OperationResult(applied=False)

    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    try:
        node = tree.require_node_at_line(editor.get_cursor_line())
    except HeadingNotFoundError as exc:
        logger.debug("%s", exc)
        return OperationResult(applied=False, notice=str(exc))
    if node.level == level:
        return OperationResult(applied=False)
    return _change_sibling_levels(editor, node.get_level_siblings(), level)


def select_heading_section(editor: Editor, options: OutlineOptions | None = None) -> tuple[LineCol, LineCol] | None:
    """Body of the section at the cursor, from the line after the heading to the end of its last line."""
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    node = tree.get_node_at_line(editor.get_cursor_line())
    if node is None:
        return None
    first, last = node.start + 1, node.end - 1
    if first > last:
        return None
    return LineCol(line=first), LineCol(line=last, ch=len(tree.lines[last]))


def cut_heading_section(editor: Editor, options: OutlineOptions | None = None) -> OperationResult:
    """Remove the section at the cursor; the removed text is returned in the result."""
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    try:
        node = tree.require_node_at_line(editor.get_cursor_line())
    except HeadingNotFoundError as exc:
        logger.debug("%s", exc)
        return OperationResult(applied=False, notice=str(exc))

    section = tree.get_contents(node)
    kinds = classify_source_folds(editor.get_folds(), (node.start, node.end))
    editor.apply_edit([EditorChange(from_=LineCol(line=node.start), to=LineCol(line=node.end))], node.start)
    new_text = editor.get_text()
    editor.apply_folds(
        remap_source_folds(kinds, extraction_line_count=tree.line_count - line_count(new_text), new_text=new_text)
    )
    return OperationResult(applied=True, cursor_line=editor.get_cursor_line(), text=section)


def _render_date_format(fmt: DateFormat) -> str:
    return f"{fmt.name}\n{fmt.display}"


async def transform_sibling_heading_dates(
    editor: Editor,
    chooser: Chooser,
    *,
    exclude_utc_offset: bool = False,
    options: OutlineOptions | None = None,
) -> OperationResult:
    """Rewrite the leading timestamps of the cursor heading's level siblings into another format.

    Only siblings whose timestamp uses the cursor heading's format are changed.
    """
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    try:
        node = tree.require_node_at_line(editor.get_cursor_line())
    except HeadingNotFoundError as exc:
        logger.debug("%s", exc)
        return OperationResult(applied=False, notice=str(exc))
    if node.heading.time_format is None:
        return OperationResult(applied=False, notice="Cursor heading has no valid time format.")

    source = get_date_format(node.heading.time_format)
    candidates = compatible_formats(source, exclude_utc_offset=exclude_utc_offset)
    if not candidates:
        return OperationResult(applied=False, notice="No date formats available for selection.")
    if len(candidates) == 1:
        target = candidates[0]
    else:
        target = await chooser.choose(candidates, _render_date_format, f"Transform from {source.display} to...")
        if target is None:
            return OperationResult(applied=False)

    changes = []
    for sibling in node.get_level_siblings():
        if sibling.heading.time_format != source.name or sibling.heading.timestamp is None:
            continue
        offset = sibling.heading.raw.index(sibling.heading.timestamp, len(sibling.heading.definer))
        try:
            replacement = convert_timestamp(sibling.heading.timestamp, source, target)
        except ValueError as exc:
            logger.warning("Skipping heading at line %d: %s", sibling.start, exc)
            continue
        changes.append(
            EditorChange(
                from_=LineCol(line=sibling.start, ch=offset),
                to=LineCol(line=sibling.start, ch=offset + len(sibling.heading.timestamp)),
                text=replacement,
            )
        )

    if not changes:
        return OperationResult(applied=False)
    folds = editor.get_folds()
    editor.apply_edit(changes, node.start)
    editor.apply_folds(folds)
    return OperationResult(applied=True, cursor_line=node.start)
