"""Sorting level-sibling heading sections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Callable

from mdoutline.config import OutlineOptions
from mdoutline.exceptions import HeadingNotFoundError
from mdoutline.folds import capture_relative_folds, folds_outside, restore_relative_folds, sanitize_folds
from mdoutline.host import Chooser, Editor
from mdoutline.schemas import EditorChange, LineCol, OperationResult
from mdoutline.timestamps import comparable_timestamp, get_date_format
from mdoutline.tree import HeadingNode, HeadingTree

logger = logging.getLogger(__name__)

Comparator = Callable[[HeadingNode, HeadingNode], int]


def _compare(a, b) -> int:
    return (a > b) - (a < b)


def _compare_text(a: str, b: str) -> int:
    return _compare((a.casefold(), a), (b.casefold(), b))


def compare_by_header(a: HeadingNode, b: HeadingNode) -> int:
    return _compare_text(a.heading.text, b.heading.text)


def compare_by_title(a: HeadingNode, b: HeadingNode) -> int:
    return _compare_text(a.heading.title, b.heading.title)


def compare_by_timestamp(a: HeadingNode, b: HeadingNode) -> int:
    """Chronological order; headings without a usable timestamp fall back to comparing the raw strings."""
    a_stamp = a.heading.timestamp or ""
    b_stamp = b.heading.timestamp or ""
    if not a_stamp or not b_stamp:
        return _compare(a_stamp, b_stamp)
    try:
        a_moment = comparable_timestamp(a_stamp, get_date_format(a.heading.time_format))
        b_moment = comparable_timestamp(b_stamp, get_date_format(b.heading.time_format))
    except ValueError:
        return _compare(a_stamp, b_stamp)
    return _compare(a_moment, b_moment)


def _descending(compare: Comparator) -> Comparator:
    return lambda a, b: compare(b, a)


@dataclass(frozen=True)
class SortOrder:
    label: str
    compare: Comparator


def _asc(text: str) -> str:
    return f"ASC  :: {text} :: ASC"


def _desc(text: str) -> str:
    return f"DESC :: {text} :: DESC"


SORT_ORDERS: tuple[SortOrder, ...] = (
    SortOrder(_asc("By Header"), compare_by_header),
    SortOrder(_desc("By Header"), _descending(compare_by_header)),
    SortOrder(_asc("By Title"), compare_by_title),
    SortOrder(_desc("By Title"), _descending(compare_by_title)),
    SortOrder(_asc("By Timestamp"), compare_by_timestamp),
    SortOrder(_desc("By Timestamp"), _descending(compare_by_timestamp)),
)


def sorted_siblings_text(tree: HeadingTree, siblings: list[HeadingNode]) -> str:
    """Concatenated sections in the given order.

    The section ending the document has no trailing newline, so it gets one
    and the block loses its final newline instead.
    """
    text = ""
    at_end_of_file = False
    for node in siblings:
        text += tree.get_contents(node)
        if node.heading.has_last_line:
            text += "\n"
            at_end_of_file = True
    if at_end_of_file:
        text = text[:-1]
    return text


def sort_sibling_headings(editor: Editor, order: SortOrder, options: OutlineOptions | None = None) -> OperationResult:
    """Reorder the cursor heading and its level siblings, carrying their folds along."""
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    cursor = editor.get_cursor_line()
    try:
        node = tree.require_node_at_line(cursor)
    except HeadingNotFoundError as exc:
        return OperationResult(applied=False, notice=str(exc))

    siblings = node.get_level_siblings()
    if len(siblings) < 2:
        return OperationResult(applied=False, notice="Not enough sibling headings to sort.")

    cursor_offset = cursor - node.start
    block_start, block_end = siblings[0].start, siblings[-1].end
    folds = editor.get_folds()
    relative = capture_relative_folds(folds, [(sibling.start, sibling.end) for sibling in siblings])
    kept = folds_outside(folds, block_start, block_end)

    ordered = sorted(siblings, key=cmp_to_key(order.compare))
    index_map = [siblings.index(sibling) for sibling in ordered]

    editor.apply_edit(
        [
            EditorChange(
                from_=LineCol(line=block_start),
                to=LineCol(line=block_end),
                text=sorted_siblings_text(tree, ordered),
            )
        ]
    )

    notice = None
    final_tree = HeadingTree(editor.get_text(), opts.max_level)
    if final_tree.line_count != tree.line_count:
        notice = f"Line count mismatch after sorting (Initial: {tree.line_count}, Final: {final_tree.line_count})."
        logger.error(notice)

    first = final_tree.get_node_starting_at(block_start)
    new_siblings = first.get_level_siblings() if first is not None else []
    if len(new_siblings) != len(siblings):
        message = f"Sibling count mismatch after sorting (Initial: {len(siblings)}, Final: {len(new_siblings)})."
        logger.error(message)
        editor.apply_folds(sanitize_folds(kept, final_tree.line_count))
        editor.set_cursor_line(block_start)
        return OperationResult(applied=True, notice=message, cursor_line=block_start)

    new_starts = [sibling.start for sibling in new_siblings]
    restored = restore_relative_folds(relative, new_starts, index_map)
    editor.apply_folds(sanitize_folds(kept + restored, final_tree.line_count))

    cursor_line = new_starts[ordered.index(node)] + cursor_offset
    editor.set_cursor_line(cursor_line)
    return OperationResult(applied=True, notice=notice, cursor_line=editor.get_cursor_line())


async def choose_and_sort_sibling_headings(
    editor: Editor, chooser: Chooser, options: OutlineOptions | None = None
) -> OperationResult:
    order = await chooser.choose(list(SORT_ORDERS), lambda item: item.label, "Sort sibling headings")
    if order is None:
        return OperationResult(applied=False)
    return sort_sibling_headings(editor, order, options)
