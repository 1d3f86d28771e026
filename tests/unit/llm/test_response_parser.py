"""Test completion response parsing and clean-up."""

from unittest.mock import MagicMock

import pytest

from jarvis.llm.response_parser import ChatCompletionParser, rate_speed, sanitize_text
from jarvis.models.llm import SpeedRating


@pytest.fixture
def chat_response():
    """Create mock chat completion response."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = "Tashkent is the capital."
    response.choices[0].finish_reason = "stop"
    response.usage.total_tokens = 30
    response.model = "llama-3.3-70b-versatile"
    return response


class TestChatCompletionParser:
    """Test ChatCompletionParser."""

    def test_should_parse_response(self, chat_response):
        """Test content, tokens and model extraction."""
        reply = ChatCompletionParser.parse(chat_response, "requested")

        assert reply.content == "Tashkent is the capital."
        assert reply.total_tokens == 30
        assert reply.finish_reason == "stop"
        assert reply.model == "llama-3.3-70b-versatile"

    def test_should_handle_missing_choices_and_usage(self):
        """Test empty response."""
        response = MagicMock()
        response.choices = []
        response.usage = None
        response.model = None

        reply = ChatCompletionParser.parse(response, "requested")

        assert reply.content == ""
        assert reply.total_tokens == 0
        assert reply.model == "requested"

    def test_should_treat_null_content_as_empty(self, chat_response):
        """Test None message content."""
        chat_response.choices[0].message.content = None

        assert ChatCompletionParser.parse(chat_response, "m").content == ""


class TestSanitizeText:
    """Test sanitize_text."""

    def test_should_remove_script_blocks(self):
        """Test script and style removal."""
        text = "Hello<script>alert('x')</script> Sir<style>p{}</style>"
        assert sanitize_text(text) == "Hello Sir"

    def test_should_strip_tags_and_escape_remaining_markup(self):
        """Test tags removed and stray characters escaped."""
        assert sanitize_text("<b>Bold</b> & 3 > 2") == "Bold &amp; 3 &gt; 2"

    def test_should_escape_quotes(self):
        """Test quote escaping."""
        assert sanitize_text("say \"hi\" 'there'") == "say &quot;hi&quot; &#x27;there&#x27;"

    def test_should_drop_control_characters(self):
        """Test control characters."""
        assert sanitize_text("a\x00b\x07c") == "abc"

    def test_should_collapse_whitespace_but_keep_line_breaks(self):
        """Test whitespace normalization."""
        text = "  first   line \t here\n\n\n\n second\tline  "
        assert sanitize_text(text) == "first line here\n\nsecond line"

    def test_should_normalize_carriage_returns(self):
        """Test CRLF handling."""
        assert sanitize_text("one\r\ntwo\rthree") == "one\ntwo\nthree"


class TestRateSpeed:
    """Test rate_speed."""

    @pytest.mark.parametrize(
        "tokens,elapsed_ms,expected",
        [
            (300, 1000, SpeedRating.ULTRA_FAST),
            (200, 1000, SpeedRating.VERY_FAST),
            (150, 1000, SpeedRating.VERY_FAST),
            (60, 1000, SpeedRating.FAST),
            (30, 1000, SpeedRating.MODERATE),
            (20, 1000, SpeedRating.SLOW),
            (5, 1000, SpeedRating.SLOW),
        ],
    )
    def test_should_rate_throughput(self, tokens, elapsed_ms, expected):
        """Test thresholds are strict lower bounds."""
        assert rate_speed(tokens, elapsed_ms) == expected

    def test_should_be_unknown_without_tokens(self):
        """Test zero tokens."""
        assert rate_speed(0, 1000) == SpeedRating.UNKNOWN

    def test_should_be_unknown_without_elapsed_time(self):
        """Test zero elapsed time."""
        assert rate_speed(100, 0) == SpeedRating.UNKNOWN
