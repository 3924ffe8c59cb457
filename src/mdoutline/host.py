"""Interfaces to the host editor and in-memory implementations of them."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Protocol, Sequence, TypeVar

from mdoutline.exceptions import DocumentIOError
from mdoutline.file_utils import read_text_async, write_text_async
from mdoutline.schemas import EditorChange, Fold, FoldInfo
from mdoutline.text_utils import apply_changes, line_count, split_lines

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Editor(Protocol):
    """A live document: text, cursor and fold state."""

    def get_text(self) -> str: ...

    def line_count(self) -> int: ...

    def get_cursor_line(self) -> int: ...

    def set_cursor_line(self, line: int) -> None: ...

    def apply_edit(self, changes: Sequence[EditorChange], cursor_line: int | None = None) -> None: ...

    def get_folds(self) -> list[Fold]: ...

    def apply_folds(self, folds: Sequence[Fold]) -> None: ...


class FoldStore(Protocol):
    """Fold persistence for documents that are not open."""

    async def load_folds(self, document: Path) -> FoldInfo | None: ...

    async def save_folds(self, document: Path, info: FoldInfo) -> None: ...


class Chooser(Protocol):
    """Asks the user to pick one candidate; None means the choice was cancelled."""

    async def choose(
        self, candidates: Sequence[T], render: Callable[[T], str], placeholder: str = ""
    ) -> T | None: ...


class MemoryEditor:
    """Editor over an in-memory string.

    Edits are applied atomically; fold state is only changed through
    :meth:`apply_folds`.
    """

    def __init__(self, text: str = "", cursor_line: int = 0, folds: Iterable[Fold] = (), path: Path | None = None):
        self.text = text
        self.cursor_line = cursor_line
        self.folds = list(folds)
        self.path = path

    def get_text(self) -> str:
        return self.text

    def line_count(self) -> int:
        return line_count(self.text)

    def get_line(self, line: int) -> str:
        return split_lines(self.text)[line]

    def get_cursor_line(self) -> int:
        return self.cursor_line

    def set_cursor_line(self, line: int) -> None:
        self.cursor_line = max(0, min(line, self.line_count() - 1))

    def apply_edit(self, changes: Sequence[EditorChange], cursor_line: int | None = None) -> None:
        self.text = apply_changes(self.text, changes)
        if cursor_line is not None:
            self.set_cursor_line(cursor_line)

    def get_folds(self) -> list[Fold]:
        return list(self.folds)

    def apply_folds(self, folds: Sequence[Fold]) -> None:
        self.folds = list(folds)


class ListChooser:
    """Chooser answering from a scripted list of rendered labels.

    An answer of None, a label matching no candidate, or running out of
    answers all cancel the choice.
    """

    def __init__(self, answers: Iterable[str | None]):
        self.answers = list(answers)
        self.prompts: list[str] = []

    async def choose(self, candidates, render, placeholder=""):
        self.prompts.append(placeholder)
        if not self.answers:
            return None
        answer = self.answers.pop(0)
        if answer is None:
            return None
        for candidate in candidates:
            if render(candidate) == answer:
                return candidate
        logger.debug("No candidate rendered as %r for %r", answer, placeholder)
        return None


class Workspace:
    """Documents reachable by path, either open in an editor or on disk."""

    def __init__(self, editors: dict[Path, Editor] | None = None):
        self.editors: dict[Path, Editor] = dict(editors or {})

    def open(self, path: Path, editor: Editor) -> None:
        self.editors[Path(path)] = editor

    def get_editor(self, path: Path) -> Editor | None:
        return self.editors.get(Path(path))

    async def read_text(self, path: Path) -> str:
        editor = self.get_editor(path)
        if editor is not None:
            return editor.get_text()
        try:
            return await read_text_async(Path(path))
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentIOError(f"Cannot read {path}: {exc}") from exc

    async def write_text(self, path: Path, text: str) -> None:
        """Replace the whole text of a closed document."""
        try:
            await write_text_async(Path(path), text)
        except OSError as exc:
            raise DocumentIOError(f"Cannot write {path}: {exc}") from exc
