"""File helpers for documents and fold state that are not open in an editor."""

from __future__ import annotations

import asyncio
import hashlib
from pathlib import Path


def fold_file_for(document: Path, base_path: Path) -> Path:
    """Get the fold state file path for a document.

    The name combines the document stem with a digest of its resolved path so
    that documents sharing a name in different folders never collide.

    Args:
        document: Path of the Markdown document.
        base_path: The fold store directory.

    Returns:
        Path to the JSON file holding the document's fold state.
    """
    resolved = str(Path(document).expanduser().resolve())
    digest = hashlib.sha1(resolved.encode("utf-8")).hexdigest()[:12]
    stem = Path(document).stem.replace(" ", "_") or "document"
    return base_path / f"{stem}__{digest}.json"


async def read_text_async(path: Path, encoding: str = "utf-8") -> str:
    """Read text from a file asynchronously using a thread pool.

    Args:
        path: Path to the file to read.
        encoding: Text encoding to use.

    Returns:
        The file contents as a string.
    """
    return await asyncio.to_thread(path.read_text, encoding=encoding)


async def write_text_async(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write text to a file asynchronously using a thread pool.

    Args:
        path: Path to the file to write.
        content: Text content to write.
        encoding: Text encoding to use.
    """
    await asyncio.to_thread(path.write_text, content, encoding=encoding)


async def mkdir_async(path: Path, parents: bool = False, exist_ok: bool = False) -> None:
    """Create a directory asynchronously using a thread pool.

    Args:
        path: Path to the directory to create.
        parents: If True, create parent directories as needed.
        exist_ok: If True, don't raise an error if directory exists.
    """
    await asyncio.to_thread(path.mkdir, parents=parents, exist_ok=exist_ok)


async def exists_async(path: Path) -> bool:
    return await asyncio.to_thread(path.exists)
