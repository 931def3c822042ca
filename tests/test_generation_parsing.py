"""
Tests for provider response parsing.
"""

from link_content.generation.parsing import (
    make_excerpt,
    parse_heading,
    parse_plain_text,
    parse_response,
    parse_structured,
)


class TestStructured:

    def test_json_inside_code_fence(self):
        text = '```json\n{"title": "Spring Menus", "body": "<p>Fresh ideas.</p>", "excerpt": "Fresh"}\n```'

        parsed = parse_structured(text)

        assert parsed.title == "Spring Menus"
        assert parsed.body == "<p>Fresh ideas.</p>"
        assert parsed.excerpt == "Fresh"

    def test_content_key_is_accepted_for_body(self):
        parsed = parse_structured('Here you go: {"title": "T1tle here", "content": "Body text"} Enjoy!')

        assert parsed.body == "Body text"
        assert parsed.excerpt is None

    def test_rejects_incomplete_objects(self):
        assert parse_structured('{"title": "Only a title"}') is None
        assert parse_structured('{"title": "", "body": "text"}') is None
        assert parse_structured("{not json}") is None
        assert parse_structured("no braces at all") is None


class TestHeading:

    def test_h1_with_document_wrapper(self):
        text = (
            "<!DOCTYPE html><html><head><title>ignored</title></head><body>"
            "<h1>Choosing a Venue</h1><p>Start with the guest list.</p></body></html>"
        )

        parsed = parse_heading(text)

        assert parsed.title == "Choosing a Venue"
        assert parsed.body == "<p>Start with the guest list.</p>"

    def test_markdown_heading(self):
        parsed = parse_heading("# Budget Planning Tips\n\nTrack every deposit.")

        assert parsed.title == "Budget Planning Tips"
        assert parsed.body == "Track every deposit."

    def test_leading_h2(self):
        parsed = parse_heading("<h2>Seasonal Flowers</h2><p>Peonies in May.</p>")

        assert parsed.title == "Seasonal Flowers"

    def test_no_heading(self):
        assert parse_heading("Just a sentence without headings.") is None


class TestPlainText:

    def test_first_meaningful_line_is_title(self):
        parsed = parse_plain_text("{\n**Title: Ten Quiet Venues**\nA list of calm places.\nMore text.")

        assert parsed.title == "Ten Quiet Venues"
        assert parsed.body == "A list of calm places.\nMore text."

    def test_short_lines_are_skipped_for_title(self):
        parsed = parse_plain_text("Hi\nA proper headline\nbody", fallback_title="Fallback")

        assert parsed.title == "A proper headline"
        assert parsed.body == "body"

    def test_fallback_title_and_body(self):
        parsed = parse_plain_text("ok", fallback_title="Wedding traditions")

        assert parsed.title == "Wedding traditions"
        assert parsed.body == "ok"


def test_parse_response_prefers_structured_output():
    text = '<h1>Heading title</h1>\n{"title": "Json Title", "body": "Json body"}'

    assert parse_response(text).title == "Json Title"


def test_parse_response_falls_through_to_plain_text():
    parsed = parse_response("Social title here\nShort post body with #hashtags")

    assert parsed.title == "Social title here"
    assert parsed.body == "Short post body with #hashtags"


def test_make_excerpt():
    assert make_excerpt("<p>Short <b>body</b></p>") == "Short body"
    assert make_excerpt("word " * 100, length=20).endswith("...")
