"""Tests for fold classification, remapping and toggles."""

from __future__ import annotations

import logging

import pytest

from mdoutline.config import OutlineOptions
from mdoutline.folds import (
    capture_relative_folds,
    classify_destination_folds,
    classify_move_folds,
    classify_source_folds,
    fold_headings_by_level,
    fold_level,
    reanchor_end_altered,
    remap_destination_folds,
    remap_move_folds,
    remap_source_folds,
    restore_relative_folds,
    sanitize_folds,
    section_fold,
    toggle_children_folds,
    toggle_children_heading_folds,
    toggle_sibling_folds,
    toggle_sibling_heading_folds,
    unfold_headings_by_level,
)
from mdoutline.host import MemoryEditor
from mdoutline.schemas import Fold
from mdoutline.tree import HeadingTree


def _fold(start: int, end: int) -> Fold:
    return Fold(from_=start, to=end)


def _spans(folds) -> list[tuple[int, int]]:
    return [(fold.from_, fold.to) for fold in folds]


@pytest.fixture
def outline_folds() -> list[Fold]:
    """Alpha, Beta, Gamma and Epsilon folded."""
    return [_fold(1, 8), _fold(3, 4), _fold(5, 8), _fold(9, 10)]


class TestSanitize:
    """Tests for fold cleanup."""

    def test_drops_invalid_and_duplicates(self, caplog: pytest.LogCaptureFixture) -> None:
        """Degenerate, negative and out of range folds are dropped with a warning."""
        folds = [_fold(5, 7), _fold(1, 2), _fold(1, 2), _fold(3, 3), _fold(-1, 2), _fold(4, 10)]
        with caplog.at_level(logging.WARNING, logger="mdoutline.folds"):
            kept = sanitize_folds(folds, 10)
        assert _spans(kept) == [(1, 2), (5, 7)]
        assert "Dropping fold" in caplog.text

    def test_fold_serializes_with_from_alias(self) -> None:
        """Folds use the ``from`` key when dumped and loaded."""
        fold = Fold.model_validate({"from": 2, "to": 4})
        assert fold.from_ == 2
        assert fold.model_dump(by_alias=True) == {"from": 2, "to": 4}

    def test_reanchor_drops_untracked(self, outline: str) -> None:
        """End-altered folds are refit to their heading; folds off a heading go away."""
        fixed = reanchor_end_altered([_fold(1, 3), _fold(2, 4)], outline)
        assert _spans(fixed) == [(1, 8)]


class TestMoveRemap:
    """Tests for same-document moves."""

    def test_classify_downward_move(self, outline: str, outline_folds: list[Fold]) -> None:
        """Moving Beta below Gamma sorts folds by how the edit touches them."""
        kinds = classify_move_folds(outline_folds, (3, 5), 9)
        assert _spans(kinds.end_altered) == [(1, 8)]
        assert _spans(kinds.extracted) == [(3, 4)]
        assert _spans(kinds.shifted) == [(5, 8)]
        assert _spans(kinds.start_altered) == []
        assert _spans(kinds.unaffected) == [(9, 10)]

    def test_remap_downward_move(self, outline: str, outline_folds: list[Fold]) -> None:
        """Moved and shifted folds land on the same headings after the edit."""
        lines = outline.split("\n")
        moved = lines[:3] + lines[5:9] + lines[3:5] + lines[9:]
        new_text = "\n".join(moved)
        kinds = classify_move_folds(outline_folds, (3, 5), 9)
        folds = remap_move_folds(
            kinds,
            upwards=False,
            insertion_line_count=2,
            extraction_line=3,
            insertion_line=9,
            new_text=new_text,
        )
        assert _spans(folds) == [(1, 8), (3, 6), (7, 8), (9, 10)]
        tree = HeadingTree(new_text)
        for fold in folds:
            assert tree.get_node_starting_at(fold.from_) is not None

    def test_remap_upward_move(self, outline: str) -> None:
        """Moving Gamma above Beta shifts Beta's fold down."""
        lines = outline.split("\n")
        moved = lines[:3] + lines[5:9] + lines[3:5] + lines[9:]
        new_text = "\n".join(moved)
        folds = [_fold(3, 4), _fold(5, 8), _fold(7, 8)]
        kinds = classify_move_folds(folds, (5, 9), 3)
        assert _spans(kinds.extracted) == [(5, 8), (7, 8)]
        remapped = remap_move_folds(
            kinds,
            upwards=True,
            insertion_line_count=4,
            extraction_line=5,
            insertion_line=3,
            new_text=new_text,
        )
        assert _spans(remapped) == [(3, 6), (5, 6), (7, 8)]

    def test_upward_move_out_of_folded_parent(self) -> None:
        """A parent whose last child moves above it is refit to its shorter section."""
        new_text = "# Top\ntop body\n### C\nc body\n## P\np body\n## Q\nq body"
        kinds = classify_move_folds([_fold(2, 5), _fold(6, 7)], (4, 6), 2)
        assert _spans(kinds.tail_moved) == [(2, 5)]
        assert _spans(kinds.shifted) == []
        assert _spans(kinds.unaffected) == [(6, 7)]
        remapped = remap_move_folds(
            kinds,
            upwards=True,
            insertion_line_count=2,
            extraction_line=4,
            insertion_line=2,
            new_text=new_text,
        )
        assert _spans(remapped) == [(4, 5), (6, 7)]
        tree = HeadingTree(new_text)
        assert tree.get_node_starting_at(4).end == 6

    def test_start_altered_downward(self, outline: str) -> None:
        """A fold reaching past the edit keeps its end and moves its start with the shift."""
        lines = outline.split("\n")
        new_text = "\n".join(lines[:3] + lines[5:9] + lines[3:5] + lines[9:])
        kinds = classify_move_folds([_fold(5, 10)], (3, 5), 9)
        assert _spans(kinds.start_altered) == [(5, 10)]
        remapped = remap_move_folds(
            kinds,
            upwards=False,
            insertion_line_count=2,
            extraction_line=3,
            insertion_line=9,
            new_text=new_text,
        )
        assert _spans(remapped) == [(3, 10)]

    def test_start_altered_collapsing_fold_is_dropped(self, outline: str) -> None:
        """A start pushed onto or past the fold end removes the fold."""
        lines = outline.split("\n")
        new_text = "\n".join(lines[:3] + lines[5:9] + lines[3:5] + lines[9:])
        kinds = classify_move_folds([_fold(4, 10), _fold(6, 9)], (5, 9), 3)
        assert _spans(kinds.start_altered) == [(4, 10), (6, 9)]
        remapped = remap_move_folds(
            kinds,
            upwards=True,
            insertion_line_count=4,
            extraction_line=5,
            insertion_line=3,
            new_text=new_text,
        )
        assert _spans(remapped) == [(8, 10)]


class TestCrossDocumentRemap:
    """Tests for source and destination remapping."""

    def test_source_removal(self, outline: str, outline_folds: list[Fold]) -> None:
        """Removing Beta drops its fold, refits Alpha and shifts the rest up."""
        lines = outline.split("\n")
        new_text = "\n".join(lines[:3] + lines[5:])
        kinds = classify_source_folds(outline_folds, (3, 5))
        assert _spans(kinds.extracted) == [(3, 4)]
        folds = remap_source_folds(kinds, extraction_line_count=2, new_text=new_text)
        assert _spans(folds) == [(1, 6), (3, 6), (7, 8)]

    def test_destination_insertion(self, outline: str, outline_folds: list[Fold]) -> None:
        """Inserted folds are carried to the insertion line and later folds shift down."""
        lines = outline.split("\n")
        new_text = "\n".join(lines[:9] + ["# New", "new body"] + lines[9:])
        kinds = classify_destination_folds(outline_folds, 9)
        assert _spans(kinds.shifted) == [(9, 10)]
        folds = remap_destination_folds(
            kinds,
            insertion_line_count=2,
            new_text=new_text,
            carried=[_fold(0, 1)],
            carried_offset=9,
        )
        assert _spans(folds) == [(1, 8), (3, 4), (5, 8), (9, 10), (11, 12)]

    def test_destination_end_altered(self, outline: str) -> None:
        """A fold spanning the insertion line is refit to its grown section."""
        lines = outline.split("\n")
        new_text = "\n".join(lines[:4] + ["extra"] + lines[4:])
        kinds = classify_destination_folds([_fold(3, 4)], 4)
        assert _spans(kinds.end_altered) == [(3, 4)]
        folds = remap_destination_folds(kinds, insertion_line_count=1, new_text=new_text)
        assert _spans(folds) == [(3, 5)]


class TestRelativeFolds:
    """Tests for capturing folds relative to blocks."""

    def test_capture_and_restore(self) -> None:
        """Swapped blocks carry their folds along."""
        folds = [_fold(1, 8), _fold(3, 4), _fold(5, 8), _fold(7, 8)]
        relative = capture_relative_folds(folds, [(3, 5), (5, 9)])
        assert [_spans(block) for block in relative] == [[(0, 1)], [(0, 3), (2, 3)]]
        restored = restore_relative_folds(relative, [3, 7], [1, 0])
        assert _spans(restored) == [(3, 6), (5, 6), (7, 8)]


class TestFoldToggles:
    """Tests for level and toggle folds."""

    def test_section_fold_without_body(self) -> None:
        """A heading with no body lines cannot be folded."""
        tree = HeadingTree("# A\n# B\ntext")
        first, second = tree.root.children
        assert section_fold(first) is None
        assert _spans([section_fold(second)]) == [(1, 2)]

    def test_fold_and_unfold_level(self, outline: str) -> None:
        """Level folds cover each section of that level."""
        tree = HeadingTree(outline)
        folds = fold_headings_by_level(tree, [_fold(3, 4)], 1)
        assert _spans(folds) == [(1, 8), (3, 4), (9, 10)]
        assert _spans(unfold_headings_by_level(tree, folds, 1)) == [(3, 4)]

    def test_toggle_siblings(self, outline: str) -> None:
        """Toggling siblings folds all same-level headings under the parent, then unfolds them."""
        tree = HeadingTree(outline)
        folded = toggle_sibling_heading_folds(tree, [], 4)
        assert _spans(folded) == [(3, 4), (5, 8)]
        assert toggle_sibling_heading_folds(tree, folded, 6) == []

    def test_toggle_siblings_outside_heading(self, outline: str) -> None:
        """The preamble has no siblings to toggle."""
        tree = HeadingTree(outline)
        assert toggle_sibling_heading_folds(tree, [_fold(1, 8)], 0) == [_fold(1, 8)]

    def test_toggle_children(self, outline: str) -> None:
        """Children of the heading are folded, and the parent unfolded on request."""
        tree = HeadingTree(outline)
        folds = toggle_children_heading_folds(tree, [_fold(1, 8)], 1, always_unfold_parent=True)
        assert _spans(folds) == [(3, 4), (5, 8)]
        kept = toggle_children_heading_folds(tree, [_fold(1, 8)], 1)
        assert _spans(kept) == [(1, 8), (3, 4), (5, 8)]

    def test_toggle_children_of_leaf(self, outline: str) -> None:
        """A heading without children keeps the fold state."""
        tree = HeadingTree(outline)
        assert toggle_children_heading_folds(tree, [], 3) == []


class TestFoldCommands:
    """Tests for editor fold commands."""

    def test_fold_level_command(self, outline: str) -> None:
        """Folding level 2 then unfolding it restores the fold state."""
        editor = MemoryEditor(outline)
        assert fold_level(editor, 2).applied
        assert _spans(editor.folds) == [(3, 4), (5, 8)]
        fold_level(editor, 2, unfold=True)
        assert editor.folds == []

    def test_toggle_commands_need_a_heading(self, outline: str) -> None:
        """Commands on the preamble are not applied."""
        editor = MemoryEditor(outline, cursor_line=0)
        assert not toggle_sibling_folds(editor).applied
        assert not toggle_children_folds(editor).applied

    def test_toggle_children_command(self, outline: str) -> None:
        """The option to unfold the parent reaches the toggle."""
        editor = MemoryEditor(outline, cursor_line=2, folds=[_fold(1, 8)])
        result = toggle_children_folds(editor, OutlineOptions(always_unfold_parent=True))
        assert result.applied
        assert _spans(editor.folds) == [(3, 4), (5, 8)]

    def test_toggle_sibling_command(self, outline: str) -> None:
        """Top-level siblings fold together."""
        editor = MemoryEditor(outline, cursor_line=10)
        toggle_sibling_folds(editor)
        assert _spans(editor.folds) == [(1, 8), (9, 10)]
