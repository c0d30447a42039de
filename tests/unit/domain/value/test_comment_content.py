"""Unit tests for comment content validation."""

import pytest

from eventtalk.domain.error import ValidationError
from eventtalk.domain.service import parse_content
from eventtalk.domain.value import CONTENT_MAX_LENGTH, CommentContent


class TestParseContent:
    """Tests for parse_content."""

    @pytest.mark.parametrize("raw", ["", " ", "\n\t  "])
    def test_rejects_blank_content(self, raw):
        """Content that is empty after stripping is rejected."""
        with pytest.raises(ValidationError, match="Comment cannot be empty"):
            parse_content(raw)

    def test_rejects_content_over_limit(self):
        """2001 characters is one too many."""
        with pytest.raises(ValidationError, match="too long"):
            parse_content("a" * (CONTENT_MAX_LENGTH + 1))

    def test_accepts_single_character(self):
        assert parse_content("a").root == "a"

    def test_accepts_content_at_limit(self):
        content = parse_content("a" * CONTENT_MAX_LENGTH)

        assert len(content.root) == CONTENT_MAX_LENGTH

    def test_strips_surrounding_whitespace(self):
        """Padding does not count towards the limit and is not sent."""
        content = parse_content("  " + "a" * CONTENT_MAX_LENGTH + "  \n")

        assert content.root == "a" * CONTENT_MAX_LENGTH

    def test_error_message_has_no_pydantic_prefix(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_content(" ")

        assert str(exc_info.value) == "Comment cannot be empty"


class TestCommentContent:
    """Tests for the CommentContent value object."""

    def test_str_returns_stripped_text(self):
        assert str(CommentContent(" hello ")) == "hello"

    def test_equal_by_value(self):
        assert CommentContent("hello") == CommentContent("  hello")
