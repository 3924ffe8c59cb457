"""Extract a heading section and insert it elsewhere, in the same or another document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from mdoutline.config import OutlineOptions
from mdoutline.exceptions import DocumentIOError, FoldStoreError
from mdoutline.folds import (
    classify_destination_folds,
    classify_move_folds,
    classify_source_folds,
    remap_destination_folds,
    remap_move_folds,
    remap_source_folds,
)
from mdoutline.host import Chooser, Editor, FoldStore, Workspace
from mdoutline.insertion import resolve_insertion_line
from mdoutline.schemas import EditorChange, Fold, FoldInfo, LineCol, OperationResult
from mdoutline.text_utils import END_OF_LINE, apply_changes, get_line_range, line_count
from mdoutline.tree import HeadingNode, HeadingTree

logger = logging.getLogger(__name__)

ROOT_LABEL = "(top level)"


@dataclass
class ExtractionPlan:
    """Edits that move one heading section.

    Attributes:
        extraction: Line span ``(from, to)`` of the section in its document.
        extraction_changes: Changes removing the section from its document.
        insertion_text: Text to insert at ``insertion_line`` of the destination.
        insertion_line: Destination line the section will start at.
    """

    extraction: tuple[int, int]
    extraction_changes: list[EditorChange]
    insertion_text: str
    insertion_line: int

    @property
    def insertion_line_count(self) -> int:
        return self.insertion_text.count("\n")

    def insertion_change(self) -> EditorChange:
        return EditorChange(from_=LineCol(line=self.insertion_line), text=self.insertion_text)


def plan_extraction(lines: list[str], node: HeadingNode, insertion_line: int, destination_line_count: int) -> ExtractionPlan:
    """Work out the changes moving ``node``'s section to ``insertion_line``.

    A section ending the document has no trailing newline: one is added to the
    inserted text and the newline before the section is removed instead. Text
    inserted after the last line is moved behind a leading newline.
    """
    section = node.get_heading_range()
    ext_from, ext_to = section.from_.line, section.to.line
    insertion_text = get_line_range(lines, ext_from, ext_to)
    changes = [EditorChange(from_=LineCol(line=ext_from), to=LineCol(line=ext_to))]

    if node.heading.has_last_line:
        insertion_text += "\n"
        if ext_from > 0:
            changes.append(
                EditorChange(from_=LineCol(line=ext_from - 1, ch=END_OF_LINE), to=LineCol(line=ext_from))
            )

    if insertion_line == destination_line_count:
        insertion_text = "\n" + insertion_text[:-1]

    return ExtractionPlan(
        extraction=(ext_from, ext_to),
        extraction_changes=changes,
        insertion_text=insertion_text,
        insertion_line=insertion_line,
    )


def render_insertion_candidate(node: HeadingNode) -> str:
    if node.is_root:
        return ROOT_LABEL
    return "  " * max(node.depth - 1, 0) + node.heading.raw


def insertion_candidates(tree: HeadingTree, level: int) -> list[HeadingNode]:
    """Root plus every heading a section of ``level`` can be placed next to or under."""
    return [tree.root, *tree.flatten(lambda node: node.level <= level)]


async def _resolve_extraction_node(
    tree: HeadingTree, editor: Editor, chooser: Chooser, extract_at_cursor: bool
) -> HeadingNode | None:
    if extract_at_cursor:
        return tree.get_node_at_line(editor.get_cursor_line())
    return await chooser.choose(tree.flatten(), render_insertion_candidate, "Heading to extract")


def move_section(
    editor: Editor, tree: HeadingTree, node: HeadingNode, insertion_line: int, *, end_at_insertion: bool = False
) -> OperationResult:
    """Move ``node``'s section to ``insertion_line`` of the same document and remap its folds."""
    ext_from, ext_to = node.start, node.end
    if insertion_line in (ext_from, ext_to):
        return OperationResult(applied=False, notice="Heading is already at the insertion position.")
    if ext_from < insertion_line < ext_to:
        return OperationResult(applied=False, notice="Cannot insert a heading inside its own section.")

    plan = plan_extraction(tree.lines, node, insertion_line, tree.line_count)
    upwards = ext_from > insertion_line
    moved_lines = plan.insertion_line_count
    new_start = insertion_line if upwards else insertion_line - moved_lines

    cursor = editor.get_cursor_line()
    if end_at_insertion:
        cursor_line = new_start + (cursor - ext_from if ext_from <= cursor < ext_to else 0)
    else:
        cursor_line = ext_to if upwards else ext_from

    kinds = classify_move_folds(editor.get_folds(), plan.extraction, insertion_line)
    editor.apply_edit([plan.insertion_change(), *plan.extraction_changes], cursor_line)
    folds = remap_move_folds(
        kinds,
        upwards=upwards,
        insertion_line_count=moved_lines,
        extraction_line=ext_from,
        insertion_line=insertion_line,
        new_text=editor.get_text(),
    )
    editor.apply_folds(folds)
    logger.debug("Moved section %d-%d to line %d (now starts at %d)", ext_from, ext_to, insertion_line, new_start)
    return OperationResult(applied=True, cursor_line=editor.get_cursor_line())


async def extract_and_insert_heading(
    editor: Editor,
    chooser: Chooser,
    *,
    extract_at_cursor: bool = True,
    end_at_insertion: bool = False,
    options: OutlineOptions | None = None,
) -> OperationResult:
    """Move a heading section to a position chosen by the user in the same document."""
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    node = await _resolve_extraction_node(tree, editor, chooser, extract_at_cursor)
    if node is None:
        return OperationResult(applied=False, notice="No heading to extract.")

    # The section cannot be inserted relative to itself or its descendants.
    node.decouple()
    reference = await chooser.choose(
        insertion_candidates(tree, node.level), render_insertion_candidate, f"Insert {node.heading.text!r} near..."
    )
    if reference is None:
        return OperationResult(applied=False)

    insertion_line = resolve_insertion_line(tree, reference, node.level, opts.skew_upwards)
    return move_section(editor, tree, node, insertion_line, end_at_insertion=end_at_insertion)


async def _load_destination_folds(
    destination: Path, destination_editor: Editor | None, fold_store: FoldStore
) -> list[Fold]:
    if destination_editor is not None:
        return destination_editor.get_folds()
    try:
        info = await fold_store.load_folds(destination)
    except FoldStoreError as exc:
        logger.warning("Ignoring unreadable fold state of %s: %s", destination, exc)
        return []
    return list(info.folds) if info else []


async def extract_heading_to_document(
    editor: Editor,
    destination: Path,
    *,
    workspace: Workspace,
    fold_store: FoldStore,
    chooser: Chooser,
    extract_at_cursor: bool = True,
    options: OutlineOptions | None = None,
) -> OperationResult:
    """Move a heading section into another document.

    The destination is written before the section is removed from the
    source, so a failure in between leaves the section duplicated, never lost.
    """
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    node = await _resolve_extraction_node(tree, editor, chooser, extract_at_cursor)
    if node is None:
        return OperationResult(applied=False, notice="No heading to extract.")

    try:
        destination_text = await workspace.read_text(destination)
    except DocumentIOError as exc:
        logger.error("Aborting extraction: %s", exc)
        return OperationResult(applied=False, notice=str(exc))

    destination_tree = HeadingTree(destination_text, opts.max_level)
    reference = await chooser.choose(
        insertion_candidates(destination_tree, node.level),
        render_insertion_candidate,
        f"Insert {node.heading.text!r} into {destination.name} near...",
    )
    if reference is None:
        return OperationResult(applied=False)

    insertion_line = resolve_insertion_line(destination_tree, reference, node.level, opts.skew_upwards)
    plan = plan_extraction(tree.lines, node, insertion_line, destination_tree.line_count)

    destination_editor = workspace.get_editor(destination)
    source_kinds = classify_source_folds(editor.get_folds(), plan.extraction)
    destination_kinds = classify_destination_folds(
        await _load_destination_folds(destination, destination_editor, fold_store), insertion_line
    )

    if destination_editor is not None:
        destination_editor.apply_edit([plan.insertion_change()])
        new_destination_text = destination_editor.get_text()
    else:
        new_destination_text = apply_changes(destination_text, [plan.insertion_change()])
        try:
            await workspace.write_text(destination, new_destination_text)
        except DocumentIOError as exc:
            logger.error("Aborting extraction: %s", exc)
            return OperationResult(applied=False, notice=str(exc))

    source_lines_before = tree.line_count
    editor.apply_edit(plan.extraction_changes, cursor_line=plan.extraction[0])
    new_source_text = editor.get_text()
    editor.apply_folds(
        remap_source_folds(
            source_kinds,
            extraction_line_count=source_lines_before - line_count(new_source_text),
            new_text=new_source_text,
        )
    )

    destination_folds = remap_destination_folds(
        destination_kinds,
        insertion_line_count=plan.insertion_line_count,
        new_text=new_destination_text,
        carried=source_kinds.extracted,
        carried_offset=insertion_line - plan.extraction[0],
    )
    notice = None
    if destination_editor is not None:
        destination_editor.apply_folds(destination_folds)
    else:
        info = FoldInfo(folds=destination_folds, lines=line_count(new_destination_text))
        try:
            await fold_store.save_folds(destination, info)
        except FoldStoreError as exc:
            logger.error("Section moved but destination folds were not saved: %s", exc)
            notice = "Destination fold state could not be saved."

    logger.debug("Moved section %d-%d to %s line %d", *plan.extraction, destination, insertion_line)
    return OperationResult(applied=True, notice=notice, cursor_line=editor.get_cursor_line())
