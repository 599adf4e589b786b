"""Document store access for converted posts.

The ``DocumentStore`` protocol is the seam between the link pass and
whatever holds the documents. ``NdjsonDocumentStore`` is the file-backed
implementation: one JSON document per line, rewritten atomically on every
change, so an interrupted patch never leaves a half-written store.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
import os
from pathlib import Path
import tempfile
from typing import Any, Protocol, runtime_checkable

import structlog

from portable_blocks.exceptions import DocumentNotFoundError, StoreError
from portable_blocks.utils.retry import store_retry

logger = structlog.get_logger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """Minimal document store used by the link pass."""

    def fetch_all(self, doc_type: str | None = None) -> list[dict[str, Any]]:
        """Return every document, optionally only those of one ``_type``."""
        ...

    def patch(self, doc_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Merge ``fields`` into the document with ``_id == doc_id``."""
        ...

    def write_all(self, documents: Iterable[Mapping[str, Any]]) -> int:
        """Replace the store contents with ``documents``."""
        ...


class NdjsonDocumentStore:
    """Document store backed by a newline-delimited JSON file.

    Example:
        >>> store = NdjsonDocumentStore("posts.ndjson")
        >>> store.write_all([{"_id": "wp-post-1", "_type": "post", "title": "Hi"}])
        1
        >>> store.patch("wp-post-1", {"title": "Hello"})["title"]
        'Hello'
    """

    def __init__(self, path: Path | str) -> None:
        """Initialize the store.

        Args:
            path: NDJSON file. It does not need to exist until first read.
        """
        self.path = Path(path)

    def fetch_all(self, doc_type: str | None = None) -> list[dict[str, Any]]:
        """Read every document in the store.

        Args:
            doc_type: If given, only documents whose ``_type`` matches.

        Returns:
            Documents in file order.

        Raises:
            StoreError: If the file is missing, unreadable or has a bad line.
        """
        documents = self._read()
        if doc_type is None:
            return documents
        return [document for document in documents if document.get("_type") == doc_type]

    def get(self, doc_id: str) -> dict[str, Any]:
        """Return the document with ``_id == doc_id``.

        Raises:
            DocumentNotFoundError: If no document has that id.
        """
        for document in self._read():
            if document.get("_id") == doc_id:
                return document
        raise DocumentNotFoundError(self.path, doc_id)

    def patch(self, doc_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Set ``fields`` on one document and rewrite the store.

        Args:
            doc_id: ``_id`` of the document to patch.
            fields: Top-level fields to set; other fields are kept.

        Returns:
            The patched document.

        Raises:
            DocumentNotFoundError: If no document has that id.
            StoreError: If the store cannot be read or written.
        """
        documents = self._read()
        for index, document in enumerate(documents):
            if document.get("_id") == doc_id:
                patched = {**document, **fields}
                documents[index] = patched
                self._write(documents)
                logger.debug("Patched document", doc_id=doc_id, fields=sorted(fields))
                return patched
        raise DocumentNotFoundError(self.path, doc_id)

    def write_all(self, documents: Iterable[Mapping[str, Any]]) -> int:
        """Replace the store contents.

        Args:
            documents: Documents to write, in order.

        Returns:
            Number of documents written.
        """
        records = [dict(document) for document in documents]
        self._write(records)
        logger.info("Wrote document store", path=str(self.path), documents=len(records))
        return len(records)

    def _read(self) -> list[dict[str, Any]]:
        try:
            text = _read_text(self.path)
        except OSError as e:
            raise StoreError(self.path, f"cannot read ({e})") from e

        documents = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                document = json.loads(line)
            except json.JSONDecodeError as e:
                raise StoreError(self.path, f"line {line_number}: invalid JSON ({e.msg})") from e
            if not isinstance(document, dict):
                raise StoreError(self.path, f"line {line_number}: expected a JSON object")
            documents.append(document)
        return documents

    def _write(self, documents: list[dict[str, Any]]) -> None:
        payload = "".join(json.dumps(document, ensure_ascii=False) + "\n" for document in documents)
        try:
            _replace_text(self.path, payload)
        except OSError as e:
            raise StoreError(self.path, f"cannot write ({e})") from e


def read_json_file(path: Path | str) -> Any:
    """Load a JSON file, retrying transient I/O errors.

    Raises:
        StoreError: If the file cannot be read or is not valid JSON.
    """
    path = Path(path)
    try:
        return json.loads(_read_text(path))
    except OSError as e:
        raise StoreError(path, f"cannot read ({e})") from e
    except json.JSONDecodeError as e:
        raise StoreError(path, f"invalid JSON at line {e.lineno} ({e.msg})") from e


@store_retry
def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@store_retry
def _replace_text(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
