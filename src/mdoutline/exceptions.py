"""Custom exceptions for mdoutline."""


class MdOutlineError(Exception):
    """Base exception for mdoutline operations."""


class HeadingNotFoundError(MdOutlineError):
    """No heading encloses the requested line."""


class InvalidHeadingLevelError(MdOutlineError):
    """Heading level outside the 1-6 range."""


class EditConflictError(MdOutlineError):
    """Two changes of one edit overlap."""


class DocumentIOError(MdOutlineError):
    """A document could not be read or written."""


class FoldStoreError(DocumentIOError):
    """Stored fold state could not be read or written."""
