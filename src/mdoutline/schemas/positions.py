"""Editor position and edit models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LineCol(BaseModel):
    """A zero-based line/character position in a document."""

    model_config = ConfigDict(frozen=True)

    line: int
    ch: int = 0


class EditorChange(BaseModel):
    """Replace the text between two positions of the original document.

    A change without ``to`` is a pure insertion at ``from``.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_: LineCol = Field(alias="from")
    to: LineCol | None = None
    text: str = ""

    @property
    def end(self) -> LineCol:
        return self.to if self.to is not None else self.from_
