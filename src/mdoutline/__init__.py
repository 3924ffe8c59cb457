"""mdoutline: heading tree, fold tracking and structural edits for Markdown outlines."""

from mdoutline.config import OutlineOptions
from mdoutline.exceptions import (
    DocumentIOError,
    EditConflictError,
    FoldStoreError,
    HeadingNotFoundError,
    InvalidHeadingLevelError,
    MdOutlineError,
)
from mdoutline.extraction import extract_and_insert_heading, extract_heading_to_document, move_section
from mdoutline.fold_store import JsonFoldStore
from mdoutline.folds import fold_level, toggle_children_folds, toggle_sibling_folds
from mdoutline.host import ListChooser, MemoryEditor, Workspace
from mdoutline.insertion import insert_smart_heading, insert_smart_heading_under_heading, resolve_insertion_line
from mdoutline.navigation import MoveMode, move_cursor_to_heading
from mdoutline.schemas import Fold, FoldInfo, OperationResult
from mdoutline.sections import (
    cut_heading_section,
    select_heading_section,
    set_sibling_heading_level,
    shift_sibling_heading_level,
    swap_heading_section,
    transform_sibling_heading_dates,
)
from mdoutline.sorting import SORT_ORDERS, choose_and_sort_sibling_headings, sort_sibling_headings
from mdoutline.tree import HeadingNode, HeadingTree, Traversal

__all__ = [
    "DocumentIOError",
    "EditConflictError",
    "Fold",
    "FoldInfo",
    "FoldStoreError",
    "HeadingNode",
    "HeadingNotFoundError",
    "HeadingTree",
    "InvalidHeadingLevelError",
    "JsonFoldStore",
    "ListChooser",
    "MdOutlineError",
    "MemoryEditor",
    "MoveMode",
    "OperationResult",
    "OutlineOptions",
    "SORT_ORDERS",
    "Traversal",
    "Workspace",
    "choose_and_sort_sibling_headings",
    "cut_heading_section",
    "extract_and_insert_heading",
    "extract_heading_to_document",
    "fold_level",
    "insert_smart_heading",
    "insert_smart_heading_under_heading",
    "move_cursor_to_heading",
    "move_section",
    "resolve_insertion_line",
    "select_heading_section",
    "set_sibling_heading_level",
    "shift_sibling_heading_level",
    "sort_sibling_headings",
    "swap_heading_section",
    "toggle_children_folds",
    "toggle_sibling_folds",
    "transform_sibling_heading_dates",
]
