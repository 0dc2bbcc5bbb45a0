"""
Image Store Errors

Exceptions raised by content/provenance store implementations.
A read miss is not an error: lookups return None instead.
"""

from typing import List, Optional


class ImageStoreError(Exception):
    """Base class for store failures."""


class InvalidStorageKey(ImageStoreError):
    """Key cannot be used as a storage address (empty, path separators, ..)."""

    def __init__(self, key: str):
        super().__init__(f"Invalid storage key: {key!r}")
        self.key = key


class WriteFailure(ImageStoreError):
    """
    One or both writes of a dual write failed.

    The write that succeeded is left in place; no rollback is attempted.
    """

    def __init__(
        self,
        key: str,
        failed_stores: List[str],
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            f"Failed to write {key!r} to {', '.join(failed_stores)} store"
            + (f": {cause}" if cause else "")
        )
        self.key = key
        self.failed_stores = failed_stores
        self.cause = cause
