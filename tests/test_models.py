"""Tests for Pydantic document models.

Tests validation, serialization and wire-format parsing for Document,
Block, Run and MarkDefinition.
"""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from portable_blocks.exceptions import DocumentShapeError
from portable_blocks.models import (
    Block,
    BlockStyle,
    Document,
    ListKind,
    MarkDefinition,
    Run,
    StyleMark,
    is_block_record,
)


class TestBlockStyle:
    """Tests for BlockStyle."""

    def test_header_levels(self) -> None:
        assert BlockStyle.header(1) is BlockStyle.H1
        assert BlockStyle.header(6) is BlockStyle.H6
        assert BlockStyle.H3.is_header
        assert not BlockStyle.NORMAL.is_header

    def test_header_level_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="between 1 and 6"):
            BlockStyle.header(7)


class TestRun:
    """Tests for Run."""

    def test_defaults(self) -> None:
        run = Run(id="span-0-0")
        assert run.text == ""
        assert run.marks == ()
        assert run.link is None

    def test_mark_names_put_link_last(self) -> None:
        run = Run(id="s", text="x", marks=(StyleMark.EM, StyleMark.STRONG), link="link-0")
        assert run.mark_names() == ["em", "strong", "link-0"]

    def test_frozen(self) -> None:
        run = Run(id="s", text="x")
        with pytest.raises(ValidationError):
            run.text = "y"  # type: ignore[misc]


class TestBlock:
    """Tests for Block validation and serialization."""

    def test_requires_a_run(self) -> None:
        with pytest.raises(ValidationError):
            Block(id="block-0", runs=())

    def test_dangling_link_reference_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown mark"):
            Block(id="block-0", runs=(Run(id="s", text="x", link="link-9"),))

    def test_to_record(self) -> None:
        block = Block(
            id="block-2",
            list_item=ListKind.BULLET,
            level=1,
            mark_defs=(MarkDefinition(key="link-0", href="https://example.com"),),
            runs=(
                Run(id="span-2-0", text="see "),
                Run(id="span-2-1", text="here", marks=(StyleMark.STRONG,), link="link-0"),
            ),
        )

        assert block.to_record() == {
            "id": "block-2",
            "style": "normal",
            "listItem": "bullet",
            "level": 1,
            "markDefs": [{"key": "link-0", "type": "link", "href": "https://example.com"}],
            "children": [
                {"key": "span-2-0", "text": "see ", "marks": []},
                {"key": "span-2-1", "text": "here", "marks": ["strong", "link-0"]},
            ],
        }
        assert block.text == "see here"

    def test_record_omits_list_fields_for_paragraphs(self) -> None:
        record = Block(id="block-0", style=BlockStyle.H2, runs=(Run(id="s", text="T"),)).to_record()
        assert "listItem" not in record
        assert "level" not in record
        assert record["style"] == "h2"

    def test_to_portable_text(self) -> None:
        block = Block(
            id="block-0",
            mark_defs=(MarkDefinition(key="link-0", href="https://example.com"),),
            runs=(Run(id="span-0-0", text="x", link="link-0"),),
        )

        assert block.to_portable_text() == {
            "_type": "block",
            "_key": "block-0",
            "style": "normal",
            "markDefs": [{"_key": "link-0", "_type": "link", "href": "https://example.com"}],
            "children": [{"_type": "span", "_key": "span-0-0", "text": "x", "marks": ["link-0"]}],
        }


class TestBlockFromPortableText:
    """Tests for parsing content store block records."""

    def test_marks_split_into_styles_and_link(self) -> None:
        block = Block.from_portable_text(
            {
                "_type": "block",
                "_key": "k1",
                "style": "h3",
                "markDefs": [{"_key": "m1", "_type": "link", "href": "https://a.example"}],
                "children": [{"_type": "span", "_key": "c1", "text": "t", "marks": ["em", "m1"]}],
            }
        )

        assert block.id == "k1"
        assert block.style is BlockStyle.H3
        assert block.runs[0].marks == (StyleMark.EM,)
        assert block.runs[0].link == "m1"

    def test_missing_keys_fall_back_to_position(self) -> None:
        block = Block.from_portable_text({"children": [{"text": "x"}]}, position=4)
        assert block.id == "block-4"
        assert block.runs[0].id == "span-4-0"

    def test_unknown_marks_and_dangling_refs_dropped(self) -> None:
        block = Block.from_portable_text(
            {"children": [{"_key": "c", "text": "x", "marks": ["underline", "gone", "strong"]}]}
        )
        assert block.runs[0].marks == (StyleMark.STRONG,)
        assert block.runs[0].link is None

    def test_unknown_style_and_list_kind(self) -> None:
        block = Block.from_portable_text(
            {"style": "blockquote", "listItem": "checkbox", "children": [{"text": "x"}]}
        )
        assert block.style is BlockStyle.NORMAL
        assert block.list_item is None
        assert block.level is None

    def test_list_level_defaults_to_one(self) -> None:
        block = Block.from_portable_text({"listItem": "number", "children": [{"text": "x"}]})
        assert block.list_item is ListKind.NUMBER
        assert block.level == 1

    def test_empty_children_get_placeholder_run(self) -> None:
        block = Block.from_portable_text({"_key": "b", "children": []})
        assert len(block.runs) == 1
        assert block.runs[0].text == ""

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(DocumentShapeError):
            Block.from_portable_text(["not", "a", "block"])  # type: ignore[arg-type]

    def test_inline_objects_are_not_runs(self) -> None:
        block = Block.from_portable_text(
            {"children": [{"_type": "inlineImage", "asset": {}}, {"text": "caption"}]},
            position=2,
        )
        assert [(run.id, run.text) for run in block.runs] == [("span-2-0", "caption")]

    def test_non_mapping_child_rejected(self) -> None:
        with pytest.raises(DocumentShapeError, match="span mapping"):
            Block.from_portable_text({"children": ["text"]})


class TestDocument:
    """Tests for Document."""

    def test_empty_placeholder(self) -> None:
        document = Document.empty()
        assert len(document.blocks) == 1
        assert document.blocks[0].id == "block-0"
        assert document.blocks[0].runs == (Run(id="span-0-0"),)

    def test_requires_a_block(self) -> None:
        with pytest.raises(ValidationError):
            Document(blocks=())

    def test_text_joins_blocks(self) -> None:
        document = Document(
            blocks=(
                Block(id="b0", runs=(Run(id="s0", text="one"),)),
                Block(id="b1", runs=(Run(id="s1", text="two"),)),
            )
        )
        assert document.text == "one\n\ntwo"

    def test_from_portable_text_skips_non_blocks(self) -> None:
        document = Document.from_portable_text(
            [
                {"_type": "image", "_key": "i"},
                {"_type": "block", "_key": "b", "children": [{"_key": "s", "text": "x"}]},
            ]
        )
        assert [block.id for block in document.blocks] == ["b"]

    def test_from_portable_text_empty_body(self) -> None:
        assert Document.from_portable_text([]) == Document.empty()

    def test_portable_text_round_trip(self) -> None:
        from portable_blocks.converter import convert

        document = convert('<h2>T</h2><ul><li><a href="/x">go</a> <b>now</b></li></ul>')
        assert Document.from_portable_text(document.to_portable_text()) == document

    @pytest.mark.parametrize("body", ["<p>x</p>", None, {"_type": "block"}])
    def test_from_portable_text_rejects_non_lists(self, body: object) -> None:
        with pytest.raises(DocumentShapeError):
            Document.from_portable_text(body)  # type: ignore[arg-type]


def test_is_block_record() -> None:
    """Entries without _type count as blocks."""
    assert is_block_record({"_type": "block"})
    assert is_block_record({"children": []})
    assert not is_block_record({"_type": "image"})
    with pytest.raises(DocumentShapeError):
        is_block_record("block")
