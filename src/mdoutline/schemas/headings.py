"""Heading record models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from mdoutline.schemas.positions import LineCol


class HeadingLevel(BaseModel):
    """Heading level as written and as nested."""

    by_syntax: int = Field(..., ge=0, le=6)
    by_depth: int | None = None


class HeadingRange(BaseModel):
    """Line span of a heading section, ``to`` is exclusive and resolved lazily."""

    model_config = ConfigDict(populate_by_name=True)

    from_: LineCol = Field(alias="from")
    to: LineCol | None = None


class HeadingRecord(BaseModel):
    """One parsed ATX heading line."""

    level: HeadingLevel
    raw: str = ""
    definer: str = ""
    text: str = ""
    title: str = ""
    timestamp: str | None = None
    time_format: str | None = None
    range: HeadingRange
    has_last_line: bool = False
