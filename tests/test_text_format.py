"""
Tests for the inline formatting parser and line tokenizer
"""

import pytest

from backend.app.layout_types import BulletStart, Indent, LineEnd, ParagraphBreak, Run, StyledRun
from backend.app.text_format import (
    bold_text,
    bullet_text,
    italic_text,
    parse_formatted_text,
    parse_inline,
    plain_tokens,
)


def runs_of(tokens):
    return [t.run for t in tokens if isinstance(t, Run)]


class TestParseInline:
    """Test emphasis toggles within one line"""

    def test_plain_text_is_one_run(self):
        assert parse_inline("just words") == [StyledRun("just words")]

    def test_bold_segment(self):
        """Bold markers toggle bold on and off"""
        assert parse_inline("Hello **world** again") == [
            StyledRun("Hello "),
            StyledRun("world", bold=True),
            StyledRun(" again"),
        ]

    def test_italic_segment(self):
        assert parse_inline("an *aside* here") == [
            StyledRun("an "),
            StyledRun("aside", italic=True),
            StyledRun(" here"),
        ]

    def test_triple_marker_is_bold_italic(self):
        """Three asterisks toggle both flags at once"""
        assert parse_inline("***both***") == [StyledRun("both", bold=True, italic=True)]

    def test_nested_emphasis(self):
        """Bold inside italic carries both flags"""
        assert parse_inline("a *b **c** d* e") == [
            StyledRun("a "),
            StyledRun("b ", italic=True),
            StyledRun("c", bold=True, italic=True),
            StyledRun(" d", italic=True),
            StyledRun(" e"),
        ]

    def test_unterminated_bold_is_literal(self):
        """An opener with no closer prints as-is"""
        assert parse_inline("**unterminated") == [StyledRun("**unterminated")]

    def test_unterminated_italic_after_closed_bold(self):
        assert parse_inline("**ok** and *open") == [
            StyledRun("ok", bold=True),
            StyledRun(" and *open"),
        ]

    def test_markers_never_leak_into_text(self):
        runs = parse_inline("**a** *b* ***c***")
        assert all("*" not in run.text for run in runs)

    def test_empty_line(self):
        assert parse_inline("") == []


class TestParseFormattedText:
    """Test line level tokenization"""

    def test_empty_source(self):
        assert parse_formatted_text("") == []
        assert parse_formatted_text(None) == []

    def test_single_line(self):
        assert parse_formatted_text("Hello") == [Run(StyledRun("Hello")), LineEnd()]

    def test_blank_line_is_paragraph_break(self):
        assert parse_formatted_text("a\n\nb") == [
            Run(StyledRun("a")),
            LineEnd(),
            ParagraphBreak(),
            Run(StyledRun("b")),
            LineEnd(),
        ]

    def test_crlf_line_endings(self):
        assert parse_formatted_text("a\r\nb") == [
            Run(StyledRun("a")),
            LineEnd(),
            Run(StyledRun("b")),
            LineEnd(),
        ]

    @pytest.mark.parametrize("line", ["\u2022 item", "- item", "* item", "\u2022item", "-item"])
    def test_main_bullets(self, line):
        """Bullet glyph, dash and star-space start a main bullet"""
        assert parse_formatted_text(line) == [BulletStart(Indent.MAIN), Run(StyledRun("item")), LineEnd()]

    def test_tab_indented_bullet_is_sub(self):
        assert parse_formatted_text("\t- nested") == [
            BulletStart(Indent.SUB),
            Run(StyledRun("nested")),
            LineEnd(),
        ]

    def test_space_indented_bullet_is_main(self):
        assert parse_formatted_text("    - item")[0] == BulletStart(Indent.MAIN)

    def test_numbered_line_is_plain(self):
        """Numbered list items keep their number and are not bullets"""
        assert parse_formatted_text("1. First step") == [Run(StyledRun("1. First step")), LineEnd()]

    @pytest.mark.parametrize("line", ["   1. Buy milk", "\t1. Buy milk", "12. Buy milk"])
    def test_indented_numbered_line_is_plain(self, line):
        """Leading whitespace never turns a numbered line into a bullet"""
        tokens = parse_formatted_text(line)
        assert not any(isinstance(t, BulletStart) for t in tokens)
        assert runs_of(tokens)[0].text.endswith("Buy milk")

    def test_single_star_starts_bullet(self):
        """A leading lone star is a bullet even without a following space"""
        assert parse_formatted_text("*note* this") == [
            BulletStart(Indent.MAIN),
            Run(StyledRun("note* this")),
            LineEnd(),
        ]

    def test_star_bullet_under_tab_is_sub(self):
        assert parse_formatted_text("\t*item")[0] == BulletStart(Indent.SUB)

    def test_leading_bold_is_not_bullet(self):
        assert parse_formatted_text("**Summary**") == [Run(StyledRun("Summary", bold=True)), LineEnd()]

    def test_empty_bullet_keeps_its_line(self):
        assert parse_formatted_text("-") == [BulletStart(Indent.MAIN), Run(StyledRun("")), LineEnd()]

    def test_bullet_with_emphasis(self):
        tokens = parse_formatted_text("\u2022 **Revenue**: up 12%")
        assert tokens[0] == BulletStart(Indent.MAIN)
        assert runs_of(tokens) == [StyledRun("Revenue", bold=True), StyledRun(": up 12%")]

    def test_emoji_normalized_before_parsing(self):
        tokens = parse_formatted_text("\u2705 Done")
        assert runs_of(tokens) == [StyledRun("[Check]  Done")]

    def test_indentation_does_not_leak(self):
        """Each bullet token belongs to exactly one line"""
        tokens = parse_formatted_text("- one\nplain\n\t- two")
        starts = [t for t in tokens if isinstance(t, BulletStart)]
        ends = [t for t in tokens if isinstance(t, LineEnd)]
        assert starts == [BulletStart(Indent.MAIN), BulletStart(Indent.SUB)]
        assert len(ends) == 3


class TestPlainTokens:
    """Test unstyled text tokenization"""

    def test_markers_are_kept(self):
        assert plain_tokens("**not bold**") == [Run(StyledRun("**not bold**")), LineEnd()]

    def test_blank_lines(self):
        assert plain_tokens("a\n\nb")[2] == ParagraphBreak()


class TestHelpers:
    """Test markup helper functions"""

    def test_bullet_text(self):
        assert bullet_text(["a", "b"]) == "\u2022 a\n\u2022 b"

    def test_bold_and_italic(self):
        assert parse_inline(bold_text("x")) == [StyledRun("x", bold=True)]
        assert parse_inline(italic_text("y")) == [StyledRun("y", italic=True)]
