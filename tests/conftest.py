"""Test setup for mdoutline."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


OUTLINE = "\n".join(
    [
        "preamble",  # 0
        "# Alpha",  # 1
        "alpha body",  # 2
        "## Beta",  # 3
        "beta body",  # 4
        "## Gamma",  # 5
        "gamma body",  # 6
        "### Delta",  # 7
        "delta body",  # 8
        "# Epsilon",  # 9
        "epsilon body",  # 10
    ]
)


@pytest.fixture
def outline() -> str:
    """Two top-level sections, the first with nested children; no trailing newline."""
    return OUTLINE
