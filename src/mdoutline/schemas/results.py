"""Command result model."""

from __future__ import annotations

from pydantic import BaseModel


class OperationResult(BaseModel):
    """Outcome of an outline command."""

    applied: bool
    notice: str | None = None
    cursor_line: int | None = None
    text: str | None = None
