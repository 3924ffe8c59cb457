"""Local configuration for mdoutline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from mdoutline.exceptions import InvalidHeadingLevelError

DEFAULT_FOLD_STORE_DIR = ".mdoutline_folds"
DEFAULT_MAX_LEVEL = 6


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_level(name: str, default: int) -> int:
    # Out of range values are clamped to the ATX levels 1 to 6.
    value = int(os.getenv(name, str(default)))
    return min(max(value, 1), DEFAULT_MAX_LEVEL)


# Where fold state of documents that are not open in an editor is kept.
MDOUTLINE_FOLD_STORE_PATH = Path(os.getenv("MDOUTLINE_FOLD_STORE_PATH", DEFAULT_FOLD_STORE_DIR)).expanduser().resolve()
MDOUTLINE_MAX_LEVEL = _env_level("MDOUTLINE_MAX_LEVEL", DEFAULT_MAX_LEVEL)
MDOUTLINE_SKEW_UPWARDS = _env_flag("MDOUTLINE_SKEW_UPWARDS", False)
MDOUTLINE_CONTIGUOUS_WRAP_AROUND = _env_flag("MDOUTLINE_CONTIGUOUS_WRAP_AROUND", False)
MDOUTLINE_LOOSE_SIBLING_WRAP_AROUND = _env_flag("MDOUTLINE_LOOSE_SIBLING_WRAP_AROUND", False)
MDOUTLINE_STRICT_SIBLING_WRAP_AROUND = _env_flag("MDOUTLINE_STRICT_SIBLING_WRAP_AROUND", False)
MDOUTLINE_LEVEL_WRAP_AROUND = _env_flag("MDOUTLINE_LEVEL_WRAP_AROUND", True)
MDOUTLINE_ALWAYS_UNFOLD_PARENT = _env_flag("MDOUTLINE_ALWAYS_UNFOLD_PARENT", False)


@dataclass
class OutlineOptions:
    """Behaviour switches for outline commands.

    Attributes:
        max_level: Deepest heading level recognised while parsing.
        skew_upwards: Insert before the reference heading instead of after it.
        contiguous_wrap_around: Contiguous navigation restarts at the other end.
        loose_sibling_wrap_around: Loose sibling navigation restarts at the
            other end of the document.
        strict_sibling_wrap_around: Strict sibling navigation restarts at the
            other end of the enclosing section.
        level_wrap_around: Level shifts past 6 or below 1 wrap to the other end.
        always_unfold_parent: Toggling children folds also unfolds the parent.
    """

    max_level: int = MDOUTLINE_MAX_LEVEL
    skew_upwards: bool = MDOUTLINE_SKEW_UPWARDS
    contiguous_wrap_around: bool = MDOUTLINE_CONTIGUOUS_WRAP_AROUND
    loose_sibling_wrap_around: bool = MDOUTLINE_LOOSE_SIBLING_WRAP_AROUND
    strict_sibling_wrap_around: bool = MDOUTLINE_STRICT_SIBLING_WRAP_AROUND
    level_wrap_around: bool = MDOUTLINE_LEVEL_WRAP_AROUND
    always_unfold_parent: bool = MDOUTLINE_ALWAYS_UNFOLD_PARENT

    def __post_init__(self) -> None:
        if not 1 <= self.max_level <= DEFAULT_MAX_LEVEL:
            raise InvalidHeadingLevelError(f"max_level must be between 1 and 6, got {self.max_level}")
