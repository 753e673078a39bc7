"""Tests for the content processor: link index, code shielding and the pipeline."""

import datetime

import pytest
from pathlib import Path

from vault_sync.core.models import ParsedDocument, PublishableDocument
from vault_sync.core.processor import (
    ContentProcessor,
    PublishedIndex,
    process_wikilinks,
    protect_code_blocks,
)


def make_doc(title="Test Doc", slug="test-doc", content="", frontmatter=None, file_path=None):
    return ParsedDocument(
        slug=slug,
        title=title,
        date=datetime.datetime(2024, 1, 15),
        modified=datetime.datetime(2024, 1, 15),
        content=content,
        frontmatter=frontmatter if frontmatter is not None else {"publish": True},
        file_path=file_path or Path(f"/vault/{title}.md"),
    )


@pytest.fixture
def index():
    return PublishedIndex.from_documents([
        make_doc(title="Other Post", slug="other-post", frontmatter={"publish": True, "aliases": ["OP", "Another"]}),
        make_doc(title="Single Alias", slug="single-alias", frontmatter={"publish": True, "aliases": "SA"}),
    ])


class TestPublishedIndex:
    """Tests for PublishedIndex."""

    def test_indexes_title_slug_and_aliases(self, index):
        for key in ("Other Post", "other-post", "OP", "Another", "SA"):
            assert key in index

    def test_lookup_is_exact(self, index):
        assert "other post" not in index
        assert index.get("Other post") is None

    def test_get_returns_document(self, index):
        assert index.get("OP").slug == "other-post"

    def test_later_document_wins_on_collision(self):
        first = make_doc(title="Same", slug="first")
        second = make_doc(title="Same", slug="second")
        index = PublishedIndex.from_documents([first, second])
        assert index.get("Same").slug == "second"

    def test_empty(self):
        assert len(PublishedIndex.from_documents([])) == 0


class TestProtectCodeBlocks:
    def test_fenced_block_replaced(self):
        shielded = protect_code_blocks("a\n```\n[[Link]]\n```\nb")
        assert "[[Link]]" not in shielded.content
        assert len(shielded.blocks) == 1

    def test_inline_code_replaced(self):
        shielded = protect_code_blocks("use `[[Link]]` here")
        assert "[[Link]]" not in shielded.content

    def test_restore_round_trips(self):
        content = "x `a` y\n```python\nprint('[[x]]')\n```\n`b`"
        shielded = protect_code_blocks(content)
        assert shielded.restore(shielded.content) == content


class TestProcessWikilinks:
    """Tests for process_wikilinks."""

    def test_link_to_published_document(self, index):
        doc = make_doc()
        content, warnings = process_wikilinks("See [[Other Post]].", index, doc)
        assert content == 'See <a href="/posts/other-post">Other Post</a>.'
        assert warnings == []

    def test_link_with_display_text(self, index):
        content, _ = process_wikilinks("[[Other Post|read this]]", index, make_doc())
        assert content == '<a href="/posts/other-post">read this</a>'

    def test_link_by_alias(self, index):
        content, _ = process_wikilinks("[[SA]]", index, make_doc())
        assert content == '<a href="/posts/single-alias">SA</a>'

    def test_unpublished_target_becomes_text(self, index):
        content, warnings = process_wikilinks("Go to [[Private Note|here]] now", index, make_doc(title="Mine"))
        assert content == "Go to here now"
        assert warnings == ['[Mine] Link target "Private Note" is not a published document.']

    def test_image_embed_not_treated_as_link(self, index):
        content, warnings = process_wikilinks("![[photo.png]]", index, make_doc())
        assert content == "![[photo.png]]"
        assert warnings == []

    def test_multiple_links(self, index):
        content, warnings = process_wikilinks("[[OP]] and [[Missing]]", index, make_doc())
        assert content == '<a href="/posts/other-post">OP</a> and Missing'
        assert len(warnings) == 1


class TestContentProcessor:
    """Tests for the full ContentProcessor pipeline."""

    def test_returns_publishable_document(self, index):
        doc = make_doc(content="Plain text")
        processed, warnings = ContentProcessor(index).process(doc)
        assert isinstance(processed, PublishableDocument)
        assert processed.processed_content == "Plain text"
        assert processed.content == "Plain text"
        assert processed.slug == doc.slug
        assert warnings == []

    def test_links_inside_code_are_untouched(self, index):
        content = "```\n[[Other Post]]\n> [!NOTE]\n```\n`[[Missing]]` and [[Other Post]]"
        processed, warnings = ContentProcessor(index).process(make_doc(content=content))
        assert "```\n[[Other Post]]\n> [!NOTE]\n```" in processed.processed_content
        assert "`[[Missing]]`" in processed.processed_content
        assert processed.processed_content.endswith('<a href="/posts/other-post">Other Post</a>')
        assert warnings == []

    def test_callouts_rendered(self, index):
        processed, _ = ContentProcessor(index).process(make_doc(content="> [!TIP] Hint\n> Body"))
        assert processed.processed_content.startswith('<div class="callout callout-tip">')

    def test_images_left_alone_without_source_path(self, index):
        processed, warnings = ContentProcessor(index).process(make_doc(content="![[pic.png]]"))
        assert processed.processed_content == "![[pic.png]]"
        assert warnings == []

    def test_images_rewritten_with_source_path(self, index, tmp_path):
        (tmp_path / "pic.png").write_bytes(b"png")
        doc = make_doc(content="![[pic.png]]", file_path=tmp_path / "Test Doc.md")
        processed, warnings = ContentProcessor(index, tmp_path).process(doc)
        assert processed.processed_content == "\n\n![pic.png](/assets/test-doc/pic.png)\n\n"
        assert warnings == []

    def test_missing_image_warns(self, index, tmp_path):
        doc = make_doc(content="![[gone.png]]", file_path=tmp_path / "Test Doc.md")
        processed, warnings = ContentProcessor(index, tmp_path).process(doc)
        assert "/assets/test-doc/gone.png" in processed.processed_content
        assert warnings == ['[Test Doc] Image "gone.png" not found.']

    def test_link_inside_callout(self, index):
        content = "> [!NOTE]\n> See [[Other Post]]"
        processed, _ = ContentProcessor(index).process(make_doc(content=content))
        assert '<a href="/posts/other-post">Other Post</a>' in processed.processed_content
        assert 'callout-note' in processed.processed_content
