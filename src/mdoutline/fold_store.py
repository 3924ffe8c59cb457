"""On-disk fold state for documents that are not open in an editor."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from mdoutline.config import MDOUTLINE_FOLD_STORE_PATH
from mdoutline.exceptions import FoldStoreError
from mdoutline.file_utils import exists_async, fold_file_for, mkdir_async, read_text_async, write_text_async
from mdoutline.schemas import FoldInfo

logger = logging.getLogger(__name__)


class JsonFoldStore:
    """Keeps one JSON ``FoldInfo`` file per document under a store directory."""

    def __init__(self, base_path: Path | None = None) -> None:
        self.base_path = base_path or MDOUTLINE_FOLD_STORE_PATH

    def path_for(self, document: Path) -> Path:
        return fold_file_for(document, self.base_path)

    async def load_folds(self, document: Path) -> FoldInfo | None:
        """Load the stored fold state of a document.

        Returns:
            The stored fold state, or None if nothing was stored yet.

        Raises:
            FoldStoreError: If the stored file cannot be read or decoded.
        """
        path = self.path_for(document)
        if not await exists_async(path):
            return None
        try:
            raw = await read_text_async(path)
            info = FoldInfo.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            raise FoldStoreError(f"Cannot load folds for {document} from {path}: {exc}") from exc
        logger.debug("Loaded %d folds for %s", len(info.folds), document)
        return info

    async def save_folds(self, document: Path, info: FoldInfo) -> None:
        """Persist the fold state of a document.

        Raises:
            FoldStoreError: If the store directory or file cannot be written.
        """
        path = self.path_for(document)
        try:
            await mkdir_async(path.parent, parents=True, exist_ok=True)
            await write_text_async(path, info.model_dump_json(by_alias=True))
        except OSError as exc:
            raise FoldStoreError(f"Cannot save folds for {document} to {path}: {exc}") from exc
        logger.debug("Saved %d folds for %s", len(info.folds), document)
