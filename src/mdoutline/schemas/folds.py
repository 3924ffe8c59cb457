"""Fold state models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Fold(BaseModel):
    """A collapsed region; ``to`` is the last folded line (inclusive)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: int = Field(alias="from")
    to: int

    def shifted(self, offset: int) -> Fold:
        return Fold(from_=self.from_ + offset, to=self.to + offset)


class FoldInfo(BaseModel):
    """Fold state of a document together with the line count it was taken at."""

    folds: list[Fold] = Field(default_factory=list)
    lines: int = 0
