"""Custom exceptions for portable-blocks.

Provides a hierarchy of exceptions for different error conditions:
- PortableBlocksError: Base exception for all portable-blocks errors
- DocumentShapeError: Caller passed a value of the wrong type
- StoreError: Error reading or writing a document store
- DocumentNotFoundError: Patch target missing from the store

Malformed HTML is never an error: the converter always degrades to
best-effort text extraction.
"""

from pathlib import Path


class PortableBlocksError(Exception):
    """Base exception for portable-blocks errors."""


class DocumentShapeError(PortableBlocksError, TypeError):
    """Input does not have the shape the caller contract requires.

    Raised for non-string HTML, a non-list document body, or a block
    record that is not a mapping.
    """

    def __init__(self, expected: str, received: object) -> None:
        """Initialize DocumentShapeError.

        Args:
            expected: Description of the expected type.
            received: The offending value.
        """
        self.expected = expected
        self.received_type = type(received).__name__
        super().__init__(f"Expected {expected}, got {self.received_type}")


class StoreError(PortableBlocksError):
    """Error during document store access.

    Attributes:
        path: The store file that failed.
    """

    def __init__(self, path: Path | str, message: str) -> None:
        """Initialize StoreError.

        Args:
            path: The store file that failed.
            message: Description of what went wrong.
        """
        self.path = Path(path)
        super().__init__(f"Document store {self.path}: {message}")


class DocumentNotFoundError(StoreError):
    """A patch referenced a document id the store does not hold."""

    def __init__(self, path: Path | str, doc_id: str) -> None:
        """Initialize DocumentNotFoundError.

        Args:
            path: The store file that was searched.
            doc_id: The missing document id.
        """
        self.doc_id = doc_id
        super().__init__(path, f"no document with _id {doc_id!r}")
