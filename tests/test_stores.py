"""Tests for the NDJSON document store."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from portable_blocks.exceptions import DocumentNotFoundError, StoreError
from portable_blocks.stores import DocumentStore, NdjsonDocumentStore, read_json_file


class TestNdjsonDocumentStore:
    """Tests for NdjsonDocumentStore."""

    def test_satisfies_protocol(self, tmp_path: Path) -> None:
        assert isinstance(NdjsonDocumentStore(tmp_path / "s.ndjson"), DocumentStore)

    def test_fetch_all(self, store_file: Path) -> None:
        store = NdjsonDocumentStore(store_file)

        assert [doc["_id"] for doc in store.fetch_all()] == [
            "wp-post-1",
            "author-admin",
            "wp-post-2",
        ]
        assert [doc["_id"] for doc in store.fetch_all("post")] == ["wp-post-1", "wp-post-2"]

    def test_get(self, store_file: Path) -> None:
        assert NdjsonDocumentStore(store_file).get("author-admin")["name"] == "Admin"

    def test_get_missing(self, store_file: Path) -> None:
        with pytest.raises(DocumentNotFoundError, match="wp-post-9") as exc_info:
            NdjsonDocumentStore(store_file).get("wp-post-9")
        assert exc_info.value.doc_id == "wp-post-9"

    def test_patch_round_trip(self, store_file: Path) -> None:
        store = NdjsonDocumentStore(store_file)

        patched = store.patch("wp-post-2", {"title": "Renamed", "tags": [1]})

        assert patched["title"] == "Renamed"
        reloaded = NdjsonDocumentStore(store_file).get("wp-post-2")
        assert reloaded == patched
        assert reloaded["body"] == store.get("wp-post-2")["body"]
        assert [doc["_id"] for doc in store.fetch_all()] == [
            "wp-post-1",
            "author-admin",
            "wp-post-2",
        ]

    def test_patch_missing(self, store_file: Path) -> None:
        before = store_file.read_text(encoding="utf-8")

        with pytest.raises(DocumentNotFoundError):
            NdjsonDocumentStore(store_file).patch("nope", {"title": "x"})

        assert store_file.read_text(encoding="utf-8") == before

    def test_patch_leaves_no_temp_files(self, store_file: Path) -> None:
        NdjsonDocumentStore(store_file).patch("wp-post-1", {"title": "x"})
        assert sorted(path.name for path in store_file.parent.iterdir()) == ["store.ndjson"]

    def test_write_all(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "out.ndjson"
        store = NdjsonDocumentStore(path)

        written = store.write_all([{"_id": "a", "text": "café"}, {"_id": "b"}])

        assert written == 2
        lines = path.read_text(encoding="utf-8").splitlines()
        assert [json.loads(line)["_id"] for line in lines] == ["a", "b"]
        assert "café" in lines[0]

    def test_blank_lines_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "s.ndjson"
        path.write_text('{"_id": "a"}\n\n{"_id": "b"}\n', encoding="utf-8")
        assert len(NdjsonDocumentStore(path).fetch_all()) == 2

    def test_invalid_line_reports_line_number(self, tmp_path: Path) -> None:
        path = tmp_path / "s.ndjson"
        path.write_text('{"_id": "a"}\n{broken\n', encoding="utf-8")

        with pytest.raises(StoreError, match="line 2: invalid JSON"):
            NdjsonDocumentStore(path).fetch_all()

    def test_non_object_line(self, tmp_path: Path) -> None:
        path = tmp_path / "s.ndjson"
        path.write_text("[1, 2]\n", encoding="utf-8")

        with pytest.raises(StoreError, match="line 1: expected a JSON object"):
            NdjsonDocumentStore(path).fetch_all()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(StoreError, match="cannot read") as exc_info:
            NdjsonDocumentStore(tmp_path / "missing.ndjson").fetch_all()
        assert exc_info.value.path == tmp_path / "missing.ndjson"

    def test_transient_read_error_is_retried(self, store_file: Path) -> None:
        original = Path.read_text
        calls = 0

        def flaky_read(self: Path, *args, **kwargs) -> str:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise OSError("resource temporarily unavailable")
            return original(self, *args, **kwargs)

        with patch("time.sleep"), patch.object(Path, "read_text", flaky_read):
            documents = NdjsonDocumentStore(store_file).fetch_all()

        assert calls == 2
        assert len(documents) == 3

    def test_persistent_write_error_becomes_store_error(self, store_file: Path) -> None:
        with (
            patch("time.sleep"),
            patch("portable_blocks.stores.os.replace", side_effect=OSError("disk busy")) as mock,
            pytest.raises(StoreError, match="cannot write"),
        ):
            NdjsonDocumentStore(store_file).patch("wp-post-1", {"title": "x"})

        assert mock.call_count == 3
        assert sorted(path.name for path in store_file.parent.iterdir()) == ["store.ndjson"]


class TestReadJsonFile:
    """Tests for read_json_file()."""

    def test_reads_json(self, tmp_path: Path) -> None:
        path = tmp_path / "x.json"
        path.write_text('{"a": [1, 2]}', encoding="utf-8")
        assert read_json_file(path) == {"a": [1, 2]}

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "x.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(StoreError, match="invalid JSON"):
            read_json_file(path)
