"""ATX heading and fenced code block detection."""

from __future__ import annotations

import re
from functools import lru_cache

MAX_HEADING_LEVEL = 6
CODE_FENCE = "```"


@lru_cache(maxsize=None)
def heading_pattern(max_level: int = MAX_HEADING_LEVEL) -> re.Pattern[str]:
    """Pattern matching the definer of a heading of level 1 to ``max_level``."""
    if not 1 <= max_level <= MAX_HEADING_LEVEL:
        raise ValueError(f"max_level must be between 1 and {MAX_HEADING_LEVEL}, got {max_level}")
    return re.compile(rf"^(#{{1,{max_level}}}) ")


def is_code_fence(line: str) -> bool:
    """Return True if the line opens or closes a fenced code block."""
    return line.lstrip().startswith(CODE_FENCE)


def get_heading_level(line: str, max_level: int = MAX_HEADING_LEVEL) -> int:
    """Return the heading level of a line, or 0 if it is not a heading."""
    match = heading_pattern(max_level).match(line)
    return len(match.group(1)) if match else 0


def make_definer(level: int) -> str:
    return "#" * level + " "


def heading_levels(lines: list[str], max_level: int = MAX_HEADING_LEVEL) -> list[int]:
    """Heading level of every line, 0 for body lines, fences and fenced content."""
    levels: list[int] = []
    in_code_block = False
    for line in lines:
        if is_code_fence(line):
            in_code_block = not in_code_block
            levels.append(0)
        elif in_code_block:
            levels.append(0)
        else:
            levels.append(get_heading_level(line, max_level))
    return levels
