"""
Unit tests for the Document model.
"""

import unittest

from pydantic import ValidationError

from bulletin.models import Block, BlockType, Document, InlineRun, Position, RunKind


def paragraph_doc(*texts):
    return Document.from_blocks(
        (BlockType.PARAGRAPH, None, None, [InlineRun(text=text)] if text else [])
        for text in texts
    )


class TestInlineRuns(unittest.TestCase):
    """Test run validation."""

    def test_styles_are_canonical(self):
        run = InlineRun(text="x", styles=["italic", "bold", "italic"])
        self.assertEqual(run.styles, ("bold", "italic"))

    def test_unknown_style_rejected(self):
        with self.assertRaises(ValidationError):
            InlineRun(text="x", styles=["blink"])

    def test_image_requires_src(self):
        with self.assertRaises(ValidationError):
            InlineRun(kind=RunKind.IMAGE)
        image = InlineRun(kind=RunKind.IMAGE, src="http://host/a.png")
        self.assertEqual(image.length, 1)

    def test_link_requires_href(self):
        with self.assertRaises(ValidationError):
            InlineRun(kind=RunKind.LINK, text="here")

    def test_heading_level_bounds(self):
        with self.assertRaises(ValidationError):
            Block(node_id=0, block_type=BlockType.HEADING, level=7)
        with self.assertRaises(ValidationError):
            Block(node_id=0, block_type=BlockType.PARAGRAPH, level=2)


class TestDocumentEditing(unittest.TestCase):
    """Test that edits return new snapshots."""

    def test_empty_document(self):
        document = Document.empty()
        self.assertTrue(document.is_empty)
        self.assertEqual(document.plain_text(), "")

    def test_duplicate_node_ids_rejected(self):
        with self.assertRaises(ValidationError):
            Document(blocks=(Block(node_id=0), Block(node_id=0)), next_id=1)

    def test_insert_text_leaves_original_untouched(self):
        document = paragraph_doc("Hello")
        edited = document.insert_text(Position(node_id=0, offset=5), " world")

        self.assertEqual(document.plain_text(), "Hello")
        self.assertEqual(edited.plain_text(), "Hello world")
        self.assertEqual(len(edited.block(0).runs), 1)

    def test_insert_text_inherits_formatting(self):
        document = Document.from_blocks([
            (BlockType.PARAGRAPH, None, None, [InlineRun(text="bold", styles=["bold"])])
        ])
        edited = document.insert_text(Position(node_id=0, offset=4), "er")

        runs = edited.block(0).runs
        self.assertEqual(len(runs), 1)
        self.assertEqual(runs[0].text, "bolder")
        self.assertEqual(runs[0].styles, ("bold",))

    def test_split_and_merge(self):
        document = paragraph_doc("HelloWorld")
        split, cursor = document.split_block(Position(node_id=0, offset=5))

        self.assertEqual([block.text for block in split.blocks], ["Hello", "World"])
        self.assertEqual(cursor, Position(node_id=1, offset=0))
        self.assertEqual(split.next_id, 2)

        merged, cursor = split.merge_with_previous(1)
        self.assertEqual(merged.plain_text(), "HelloWorld")
        self.assertEqual(cursor, Position(node_id=0, offset=5))

    def test_node_ids_not_reused(self):
        document = paragraph_doc("a", "b")
        document = document.remove_block(1)
        document, node_id = document.insert_block()
        self.assertEqual(node_id, 2)

    def test_apply_style_splits_runs(self):
        document = paragraph_doc("abcdef")
        styled = document.apply_style(0, 2, 4, "bold")

        runs = styled.block(0).runs
        self.assertEqual([run.text for run in runs], ["ab", "cd", "ef"])
        self.assertEqual(runs[1].styles, ("bold",))

        unstyled = styled.apply_style(0, 2, 4, "bold", enabled=False)
        self.assertEqual(len(unstyled.block(0).runs), 1)

    def test_apply_link(self):
        document = paragraph_doc("see here")
        linked = document.apply_link(0, 4, 8, "http://example.com")
        runs = linked.block(0).runs
        self.assertEqual(runs[1].kind, RunKind.LINK)
        self.assertEqual(runs[1].href, "http://example.com")

    def test_delete_range_across_image(self):
        image = InlineRun(kind=RunKind.IMAGE, src="http://host/a.png")
        document = Document.from_blocks([
            (BlockType.PARAGRAPH, None, None, [InlineRun(text="ab"), image, InlineRun(text="cd")])
        ])
        edited = document.delete_range(0, 1, 4)
        self.assertEqual(edited.block(0).text, "ad")
        self.assertTrue(all(run.kind == RunKind.TEXT for run in edited.block(0).runs))

    def test_clamp_position(self):
        document = paragraph_doc("abc")
        self.assertEqual(document.clamp(Position(node_id=0, offset=10)).offset, 3)
        with self.assertRaises(KeyError):
            document.clamp(Position(node_id=5, offset=0))

    def test_set_block_type_and_alignment(self):
        document = paragraph_doc("Title")
        document = document.set_block_type(0, BlockType.HEADING, 2)
        document = document.set_alignment(0, "center")

        block = document.block(0)
        self.assertEqual(block.block_type, BlockType.HEADING)
        self.assertEqual(block.level, 2)
        self.assertEqual(block.align, "center")

        document = document.set_block_type(0, BlockType.PARAGRAPH, 2)
        self.assertIsNone(document.block(0).level)


if __name__ == "__main__":
    unittest.main()
