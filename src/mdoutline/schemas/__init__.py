"""Shared schemas for mdoutline."""

from mdoutline.schemas.folds import Fold, FoldInfo
from mdoutline.schemas.headings import HeadingLevel, HeadingRange, HeadingRecord
from mdoutline.schemas.positions import EditorChange, LineCol
from mdoutline.schemas.results import OperationResult

__all__ = [
    "EditorChange",
    "Fold",
    "FoldInfo",
    "HeadingLevel",
    "HeadingRange",
    "HeadingRecord",
    "LineCol",
    "OperationResult",
]
