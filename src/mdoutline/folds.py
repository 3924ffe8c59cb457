"""Fold classification, remapping and fold toggles.

Folds are addressed by line numbers, so every edit that moves lines has to
classify the current folds against the edit and remap them afterwards. The
remap functions here are pure: they take the classified folds plus the edit
geometry and return the new fold list, sorted and clipped to the document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from mdoutline.config import OutlineOptions
from mdoutline.host import Editor
from mdoutline.schemas import Fold, OperationResult
from mdoutline.text_utils import line_count
from mdoutline.tree import HeadingNode, HeadingTree

logger = logging.getLogger(__name__)


@dataclass
class FoldClassification:
    """Folds grouped by how an edit affects them."""

    unaffected: list[Fold] = field(default_factory=list)
    shifted: list[Fold] = field(default_factory=list)
    end_altered: list[Fold] = field(default_factory=list)
    tail_moved: list[Fold] = field(default_factory=list)
    start_altered: list[Fold] = field(default_factory=list)
    extracted: list[Fold] = field(default_factory=list)


def sort_folds(folds: Iterable[Fold]) -> list[Fold]:
    return sorted(folds, key=lambda fold: (fold.from_, fold.to))


def sanitize_folds(folds: Iterable[Fold], total_lines: int) -> list[Fold]:
    """Drop degenerate, out of range and duplicate folds; sort the rest."""
    kept = []
    seen = set()
    for fold in folds:
        if fold in seen:
            continue
        seen.add(fold)
        if 0 <= fold.from_ < fold.to < total_lines:
            kept.append(fold)
        else:
            logger.warning("Dropping fold %d-%d outside a %d line document", fold.from_, fold.to, total_lines)
    return sort_folds(kept)


def reanchor_end_altered(folds: Iterable[Fold], new_text: str | HeadingTree) -> list[Fold]:
    """Re-fit folds whose end was disturbed to the section of the heading they start on.

    Folds that no longer start on a heading are untracked and dropped.
    """
    tree = new_text if isinstance(new_text, HeadingTree) else HeadingTree(new_text)
    starts = {node.start: node for node in tree.iter_nodes()}
    fixed = []
    untracked = []
    for fold in folds:
        node = starts.get(fold.from_)
        if node is None:
            untracked.append(fold)
            continue
        fixed.append(Fold(from_=node.start, to=node.end - 1))
    if untracked:
        logger.warning("Dropping %d untracked folds: %s", len(untracked), [(f.from_, f.to) for f in untracked])
    return fixed


def classify_move_folds(folds: Iterable[Fold], extraction: tuple[int, int], insertion_line: int) -> FoldClassification:
    """Classify folds against a move of lines ``[extraction)`` to ``insertion_line`` in one document."""
    ext_from, ext_to = extraction
    edit_from = min(ext_from, insertion_line)
    edit_to = max(ext_to, insertion_line)
    kinds = FoldClassification()

    def in_edit(line: int) -> bool:
        return edit_from <= line < edit_to

    for fold in folds:
        if fold.from_ < edit_from and in_edit(fold.to):
            kinds.end_altered.append(fold)
        elif fold.from_ >= edit_from and fold.to < edit_to:
            if fold.from_ >= ext_from and fold.to < ext_to:
                kinds.extracted.append(fold)
            elif fold.from_ < ext_from <= fold.to:
                # Upward move: the fold keeps its head but its tail moves above it.
                kinds.tail_moved.append(fold)
            else:
                kinds.shifted.append(fold)
        elif in_edit(fold.from_) and fold.to >= edit_to:
            kinds.start_altered.append(fold)
        else:
            kinds.unaffected.append(fold)
    return kinds


def remap_move_folds(
    kinds: FoldClassification,
    *,
    upwards: bool,
    insertion_line_count: int,
    extraction_line: int,
    insertion_line: int,
    new_text: str,
) -> list[Fold]:
    """Fold list after a same-document move classified by :func:`classify_move_folds`."""
    offset = insertion_line_count if upwards else -insertion_line_count
    reanchored = [*kinds.end_altered, *(fold.shifted(offset) for fold in kinds.tail_moved)]
    updated = reanchor_end_altered(reanchored, new_text)
    updated.extend(fold.shifted(offset) for fold in kinds.shifted)

    for fold in kinds.start_altered:
        if fold.from_ + offset >= fold.to:
            continue
        updated.append(Fold(from_=fold.from_ + offset, to=fold.to))

    extracted_offset = insertion_line - extraction_line
    if not upwards:
        extracted_offset -= insertion_line_count
    updated.extend(fold.shifted(extracted_offset) for fold in kinds.extracted)

    updated.extend(kinds.unaffected)
    return sanitize_folds(updated, line_count(new_text))


def classify_source_folds(folds: Iterable[Fold], extraction: tuple[int, int]) -> FoldClassification:
    """Classify folds of a document lines ``[extraction)`` are removed from."""
    ext_from, ext_to = extraction
    kinds = FoldClassification()
    for fold in folds:
        if fold.from_ < ext_from <= fold.to:
            kinds.end_altered.append(fold)
        elif fold.from_ >= ext_from and fold.to < ext_to:
            kinds.extracted.append(fold)
        elif fold.from_ >= ext_to:
            kinds.shifted.append(fold)
        else:
            kinds.unaffected.append(fold)
    return kinds


def remap_source_folds(kinds: FoldClassification, *, extraction_line_count: int, new_text: str) -> list[Fold]:
    updated = reanchor_end_altered(kinds.end_altered, new_text)
    updated.extend(fold.shifted(-extraction_line_count) for fold in kinds.shifted)
    updated.extend(kinds.unaffected)
    return sanitize_folds(updated, line_count(new_text))


def classify_destination_folds(folds: Iterable[Fold], insertion_line: int) -> FoldClassification:
    """Classify folds of a document text is inserted into at ``insertion_line``."""
    kinds = FoldClassification()
    for fold in folds:
        if fold.from_ < insertion_line <= fold.to:
            kinds.end_altered.append(fold)
        elif fold.from_ >= insertion_line:
            kinds.shifted.append(fold)
        else:
            kinds.unaffected.append(fold)
    return kinds


def remap_destination_folds(
    kinds: FoldClassification,
    *,
    insertion_line_count: int,
    new_text: str,
    carried: Iterable[Fold] = (),
    carried_offset: int = 0,
) -> list[Fold]:
    """Fold list of the destination document, including folds carried with the inserted text."""
    updated = reanchor_end_altered(kinds.end_altered, new_text)
    updated.extend(fold.shifted(insertion_line_count) for fold in kinds.shifted)
    updated.extend(kinds.unaffected)
    updated.extend(fold.shifted(carried_offset) for fold in carried)
    return sanitize_folds(updated, line_count(new_text))


def capture_relative_folds(folds: Iterable[Fold], ranges: Sequence[tuple[int, int]]) -> list[list[Fold]]:
    """Folds fully inside each range, made relative to the range start."""
    folds = list(folds)
    captured: list[list[Fold]] = []
    for start, end in ranges:
        captured.append([fold.shifted(-start) for fold in folds if fold.from_ >= start and fold.to < end])
    return captured


def restore_relative_folds(
    relative: Sequence[Sequence[Fold]], new_starts: Sequence[int], index_map: Sequence[int]
) -> list[Fold]:
    """Re-anchor captured folds: block ``i`` now starts at ``new_starts[i]`` and holds old block ``index_map[i]``."""
    restored = []
    for position, start in enumerate(new_starts):
        restored.extend(fold.shifted(start) for fold in relative[index_map[position]])
    return restored


def folds_outside(folds: Iterable[Fold], start: int, end: int) -> list[Fold]:
    """Folds that do not start inside lines ``[start, end)``."""
    return [fold for fold in folds if not start <= fold.from_ < end]


def section_fold(node: HeadingNode) -> Fold | None:
    """Fold covering a heading's section, None when it has no body."""
    if node.end - 1 <= node.start:
        return None
    return Fold(from_=node.start, to=node.end - 1)


def fold_headings_by_level(tree: HeadingTree, folds: Iterable[Fold], level: int) -> list[Fold]:
    updated = list(folds)
    for node in tree.level_table.get(level, []):
        fold = section_fold(node)
        if fold is not None:
            updated.append(fold)
    return sanitize_folds(updated, tree.line_count)


def unfold_headings_by_level(tree: HeadingTree, folds: Iterable[Fold], level: int) -> list[Fold]:
    heading_lines = {node.start for node in tree.level_table.get(level, [])}
    return sort_folds(fold for fold in folds if fold.from_ not in heading_lines)


def _toggle_group(tree: HeadingTree, folds: list[Fold], group: list[HeadingNode], reference: HeadingNode) -> list[Fold]:
    unfold = any(fold.from_ == reference.start for fold in folds)
    if unfold:
        heading_lines = {node.start for node in group}
        return sort_folds(fold for fold in folds if fold.from_ not in heading_lines)
    updated = list(folds)
    for node in group:
        fold = section_fold(node)
        if fold is not None:
            updated.append(fold)
    return sanitize_folds(updated, tree.line_count)


def same_level_headings(tree: HeadingTree, reference: HeadingNode) -> list[HeadingNode]:
    """Headings of the reference's level inside the section of its parent."""
    top = reference.parent if reference.parent is not None else tree.root
    return tree.flatten(lambda node: node.level == reference.level, top_node=top)


def toggle_sibling_heading_folds(tree: HeadingTree, folds: Iterable[Fold], line: int) -> list[Fold]:
    """Fold every same-level heading around ``line``, or unfold them if the current one is folded."""
    folds = list(folds)
    reference = tree.get_node_at_line(line)
    if reference is None:
        return folds
    return _toggle_group(tree, folds, same_level_headings(tree, reference), reference)


def toggle_children_heading_folds(
    tree: HeadingTree, folds: Iterable[Fold], line: int, *, always_unfold_parent: bool = False
) -> list[Fold]:
    """Toggle folds on the highest-level headings below the heading at ``line``."""
    folds = list(folds)
    parent = tree.get_node_at_line(line)
    if parent is None or not parent.children:
        return folds
    highest_level = min(child.level for child in parent.children)
    group = tree.flatten(lambda node: node.level == highest_level, top_node=parent)
    updated = _toggle_group(tree, folds, group, group[0])
    if always_unfold_parent:
        updated = [fold for fold in updated if fold.from_ != parent.start]
    return updated


def fold_level(editor: Editor, level: int, *, unfold: bool = False, options: OutlineOptions | None = None) -> OperationResult:
    """Fold (or unfold) every heading of ``level`` in the editor."""
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    if unfold:
        folds = unfold_headings_by_level(tree, editor.get_folds(), level)
    else:
        folds = fold_headings_by_level(tree, editor.get_folds(), level)
    editor.apply_folds(folds)
    return OperationResult(applied=True)


def toggle_sibling_folds(editor: Editor, options: OutlineOptions | None = None) -> OperationResult:
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    if tree.get_node_at_line(editor.get_cursor_line()) is None:
        return OperationResult(applied=False)
    editor.apply_folds(toggle_sibling_heading_folds(tree, editor.get_folds(), editor.get_cursor_line()))
    return OperationResult(applied=True)


def toggle_children_folds(editor: Editor, options: OutlineOptions | None = None) -> OperationResult:
    opts = options or OutlineOptions()
    tree = HeadingTree(editor.get_text(), opts.max_level)
    node = tree.get_node_at_line(editor.get_cursor_line())
    if node is None or not node.children:
        return OperationResult(applied=False)
    folds = toggle_children_heading_folds(
        tree, editor.get_folds(), editor.get_cursor_line(), always_unfold_parent=opts.always_unfold_parent
    )
    editor.apply_folds(folds)
    return OperationResult(applied=True)
