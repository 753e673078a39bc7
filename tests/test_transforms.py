"""Tests for callout rendering and frontmatter generation."""

import datetime

import pytest
import yaml
from pathlib import Path

from vault_sync.core.models import PublishableDocument
from vault_sync.transforms.callouts import (
    extract_summary_from_callout,
    process_callouts,
    render_callout,
)
from vault_sync.transforms.frontmatter import (
    build_output,
    filter_excluded_tags,
    format_local_datetime,
    generate_frontmatter,
    generate_translated_frontmatter,
    parse_local_datetime,
    publish_date,
)

NOW = datetime.datetime(2024, 1, 15, 9, 5, 3)


def make_publishable(frontmatter=None, content="This is an English post about code.", title="My Post"):
    return PublishableDocument(
        slug="my-post",
        title=title,
        date=datetime.datetime(2024, 1, 10, 12, 0, 0),
        modified=datetime.datetime(2024, 1, 12),
        content=content,
        frontmatter=frontmatter if frontmatter is not None else {"publish": True},
        file_path=Path("/vault/My Post.md"),
        processed_content=content,
    )


def parse_block(block: str) -> dict:
    assert block.startswith("---\n") and block.endswith("\n---")
    return yaml.safe_load(block[4:-4])


class TestRenderCallout:
    def test_exact_html(self):
        html = render_callout("note", "Title", ["line 1", "line 2"])
        assert html == (
            '<div class="callout callout-note">\n'
            '<div class="callout-title">Title</div>\n'
            '<div class="callout-content">\n'
            '\n'
            'line 1\nline 2\n'
            '\n'
            '</div>\n'
            '</div>'
        )


class TestProcessCallouts:
    """Tests for process_callouts."""

    def test_note_callout(self):
        result = process_callouts("> [!NOTE]\n> This is a note")
        assert '<div class="callout callout-note">' in result
        assert '<div class="callout-title">NOTE</div>' in result
        assert "This is a note" in result

    def test_callout_with_title(self):
        result = process_callouts("> [!WARNING] Careful\n> Body text")
        assert result == render_callout("warning", "Careful", ["Body text"])

    def test_default_title_is_uppercased_type(self):
        result = process_callouts("> [!tip]\n> Body")
        assert '<div class="callout-title">TIP</div>' in result
        assert 'callout-tip' in result

    def test_callout_ends_at_non_quote_line(self):
        result = process_callouts("> [!NOTE]\n> Inside\nOutside")
        assert result.endswith("</div>\n</div>\nOutside")

    def test_adjacent_callouts(self):
        result = process_callouts("> [!NOTE]\n> One\n> [!TIP]\n> Two")
        assert result.count('<div class="callout ') == 2
        assert result.index('callout-note') < result.index('callout-tip')

    def test_plain_blockquote_untouched(self):
        content = "> Just a quote\n> continued"
        assert process_callouts(content) == content

    def test_surrounding_text_kept(self):
        result = process_callouts("Before\n> [!INFO]\n> Body\n\nAfter")
        assert result.startswith("Before\n<div")
        assert result.endswith("</div>\n\nAfter")

    def test_non_ascii_marker_is_plain_quote(self):
        content = "> [!노트]\n> body"
        assert process_callouts(content) == content

    def test_empty_body(self):
        result = process_callouts("> [!NOTE] Title only")
        assert '<div class="callout-content">\n\n\n\n</div>' in result


class TestExtractSummaryFromCallout:
    def test_joins_lines(self):
        content = "Intro\n> [!SUMMARY]\n> First line\n> second line\nRest"
        assert extract_summary_from_callout(content) == "First line second line"

    def test_case_insensitive(self):
        assert extract_summary_from_callout("> [!summary]\n> text") == "text"

    def test_stops_at_next_callout(self):
        content = "> [!SUMMARY]\n> text\n> [!NOTE]\n> other"
        assert extract_summary_from_callout(content) == "text"

    def test_uses_first_summary(self):
        content = "> [!SUMMARY]\n> one\n\n> [!SUMMARY]\n> two"
        assert extract_summary_from_callout(content) == "one"

    def test_no_summary(self):
        assert extract_summary_from_callout("> [!NOTE]\n> text") is None

    def test_empty_summary(self):
        assert extract_summary_from_callout("> [!SUMMARY]\n>\n") is None


class TestLocalTimestamps:
    def test_format_zero_padded(self):
        assert format_local_datetime(NOW) == "2024-01-15 09:05:03"

    def test_parse(self):
        assert parse_local_datetime("2024-01-15 09:05:03") == NOW

    def test_format_then_parse(self):
        assert parse_local_datetime(format_local_datetime(NOW)) == NOW

    @pytest.mark.parametrize("value", ["2024-01-15", "2024-01-15T09:05:03", "garbage", "2024-13-01 00:00:00"])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            parse_local_datetime(value)

    def test_publish_date_naive(self):
        assert publish_date(NOW) == datetime.date(2024, 1, 15)

    def test_publish_date_aware_converted_to_utc(self):
        kst = datetime.timezone(datetime.timedelta(hours=9))
        assert publish_date(datetime.datetime(2024, 1, 15, 3, 0, tzinfo=kst)) == datetime.date(2024, 1, 14)


class TestTagFilter:
    def test_filter_excluded_tags(self):
        assert filter_excluded_tags(["a", "private", "b"], ["private"]) == ["a", "b"]

    def test_filter_without_exclusions(self):
        assert filter_excluded_tags(["a"], None) == ["a"]


class TestGenerateFrontmatter:
    """Tests for generate_frontmatter."""

    def test_required_fields(self):
        block = generate_frontmatter(make_publishable(), now=NOW)
        lines = block.split("\n")
        assert lines[0] == "---"
        assert lines[1] == "title: My Post"
        assert lines[2] == "date: 2024-01-10"
        assert lines[3] == "lang: en"
        assert lines[4] == "publish: true"
        assert lines[5] == 'publish_sync_at: "2024-01-15 09:05:03"'
        assert lines[-1] == "---"

    def test_sync_timestamp_stays_a_string(self):
        data = parse_block(generate_frontmatter(make_publishable(), now=NOW))
        assert data["publish_sync_at"] == "2024-01-15 09:05:03"

    def test_lang_from_frontmatter(self):
        block = generate_frontmatter(make_publishable({"publish": True, "lang": "ja"}), now=NOW)
        assert "lang: ja" in block

    def test_lang_detected_from_content(self):
        block = generate_frontmatter(make_publishable(content="안녕하세요 반갑습니다"), now=NOW)
        assert "lang: ko" in block

    def test_tags_with_exclusions(self):
        doc = make_publishable({"publish": True, "tags": ["python", "private", "web"]})
        data = parse_block(generate_frontmatter(doc, exclude_tags=["private"], now=NOW))
        assert data["tags"] == ["python", "web"]

    def test_single_tag_string(self):
        data = parse_block(generate_frontmatter(make_publishable({"publish": True, "tags": "solo"}), now=NOW))
        assert data["tags"] == ["solo"]

    def test_all_tags_excluded_omits_key(self):
        doc = make_publishable({"publish": True, "tags": ["private"]})
        assert "tags:" not in generate_frontmatter(doc, exclude_tags=["private"], now=NOW)

    def test_manual_summary_wins(self):
        doc = make_publishable(
            {"publish": True, "summary": "Manual"},
            content="> [!SUMMARY]\n> From callout",
        )
        data = parse_block(generate_frontmatter(doc, now=NOW))
        assert data["summary"] == "Manual"

    def test_summary_from_callout(self):
        doc = make_publishable(content="> [!SUMMARY]\n> A \"quoted\" summary")
        block = generate_frontmatter(doc, now=NOW)
        assert 'summary: "A \\"quoted\\" summary"' in block
        assert parse_block(block)["summary"] == 'A "quoted" summary'

    def test_aliases(self):
        doc = make_publishable({"publish": True, "aliases": ["MP", "Post: one"]})
        data = parse_block(generate_frontmatter(doc, now=NOW))
        assert data["aliases"] == ["MP", "Post: one"]

    def test_title_with_colon_stays_valid_yaml(self):
        data = parse_block(generate_frontmatter(make_publishable(title="Python: Tips"), now=NOW))
        assert data["title"] == "Python: Tips"

    @pytest.mark.parametrize("title", ["- draft notes", "null", "true", "yes", "2024", "~", "[bracketed]", "#hash", "line one\nline two"])
    def test_yaml_significant_titles_round_trip(self, title):
        data = parse_block(generate_frontmatter(make_publishable(title=title), now=NOW))
        assert data["title"] == title

    def test_yaml_significant_tags_and_aliases_round_trip(self):
        doc = make_publishable({"publish": True, "tags": ["2024", "yes", "- x"], "aliases": ["null", "on", "3.14"]})
        data = parse_block(generate_frontmatter(doc, now=NOW))
        assert data["tags"] == ["2024", "yes", "- x"]
        assert data["aliases"] == ["null", "on", "3.14"]

    def test_multiline_summary_round_trips(self):
        doc = make_publishable({"publish": True, "summary": "line one\nline two"})
        data = parse_block(generate_frontmatter(doc, now=NOW))
        assert data["summary"] == "line one\nline two"

    def test_optional_fields_absent(self):
        block = generate_frontmatter(make_publishable(), now=NOW)
        for key in ("tags:", "summary:", "aliases:"):
            assert key not in block


class TestGenerateTranslatedFrontmatter:
    def test_replaces_title_and_summary(self):
        original = {
            "title": "원본",
            "date": datetime.date(2024, 1, 10),
            "lang": "ko",
            "publish": True,
            "publish_sync_at": "2024-01-15 09:05:03",
            "tags": ["a", "b"],
            "summary": "요약",
        }
        block = generate_translated_frontmatter(
            original, "en", "my-post",
            translated_title="Original",
            translated_summary="Summary",
            now=NOW,
        )
        data = parse_block(block)

        assert data["title"] == "Original"
        assert data["summary"] == "Summary"
        assert data["lang"] == "en"
        assert data["translated_from"] == "my-post"
        assert data["translate_sync_at"] == "2024-01-15 09:05:03"
        assert data["date"] == datetime.date(2024, 1, 10)
        assert data["tags"] == ["a", "b"]
        assert data["publish"] is True
        assert "publish_sync_at" not in data

    def test_description_used_without_summary(self):
        data = parse_block(generate_translated_frontmatter(
            {"title": "t", "description": "d"}, "ja", "s", translated_summary="D", now=NOW,
        ))
        assert data["description"] == "D"
        assert "summary" not in data

    def test_keeps_title_without_translation(self):
        data = parse_block(generate_translated_frontmatter({"title": "Keep"}, "ja", "s", now=NOW))
        assert data["title"] == "Keep"

    def test_multiline_values_round_trip(self):
        data = parse_block(generate_translated_frontmatter(
            {"title": "t", "summary": "원문"}, "en", "s",
            translated_title="- null",
            translated_summary="line one\nline two",
            now=NOW,
        ))
        assert data["title"] == "- null"
        assert data["summary"] == "line one\nline two"
        assert data["translate_sync_at"] == "2024-01-15 09:05:03"

    def test_none_values_dropped(self):
        data = parse_block(generate_translated_frontmatter({"title": "t", "summary": None}, "en", "s", now=NOW))
        assert "summary" not in data

    def test_does_not_modify_original(self):
        original = {"title": "t", "publish_sync_at": "x"}
        generate_translated_frontmatter(original, "en", "s", now=NOW)
        assert original == {"title": "t", "publish_sync_at": "x"}


def test_build_output():
    assert build_output("---\na: 1\n---", "Body") == "---\na: 1\n---\n\nBody"
