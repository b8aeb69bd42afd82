"""Tests for HTML excerpt sanitization."""

import re

import pytest

from czytaj.sanitizer import MAX_EXCERPT_LENGTH, sanitize

EVENT_HANDLER_PATTERN = re.compile(r"on\w+\s*=", re.IGNORECASE)


class TestRemovesDangerousBlocks:
    """Tests for script, style and iframe removal."""

    def test_removes_script_and_body(self):
        """Test that script tags and their content are removed."""
        result = sanitize("Hello <script>alert('XSS')</script> World")

        assert "script" not in result
        assert "XSS" not in result
        assert result.startswith("Hello")
        assert result.endswith("World")

    @pytest.mark.parametrize(
        "html",
        [
            "<SCRIPT type='text/javascript'>steal()</SCRIPT>text",
            "<script>\nvar a = 1;\nsteal(a);\n</script>text",
            "<Script src='x.js'>steal()</sCrIpT >text",
        ],
    )
    def test_removes_script_variants(self, html: str):
        """Test case-insensitive and multi-line script removal."""
        result = sanitize(html)

        assert "script" not in result.lower()
        assert "steal" not in result
        assert result == "text"

    def test_removes_style_block(self):
        """Test that style blocks do not leak CSS as text."""
        result = sanitize("<style>body { color: red; }</style><p>Visible</p>")

        assert result == "Visible"

    def test_removes_iframe_block(self):
        """Test that iframes and their fallback content are removed."""
        result = sanitize('<iframe src="https://evil.test">fallback</iframe>Kept')

        assert result == "Kept"


class TestRemovesHandlersAndProtocols:
    """Tests for event handler and javascript: removal."""

    def test_removes_onclick(self):
        """Test that onclick attributes do not survive."""
        result = sanitize('<div onclick="alert(\'XSS\')">Click me</div>')

        assert "onclick" not in result
        assert result == "Click me"

    @pytest.mark.parametrize(
        "html",
        [
            '<img src="x.png" onerror="steal()">Caption',
            "<a href='#' onMouseOver='steal()'>Caption</a>",
            '<body onload = "steal()">Caption</body>',
        ],
    )
    def test_removes_any_event_handler(self, html: str):
        """Test that no on*= handler syntax remains."""
        result = sanitize(html)

        assert not EVENT_HANDLER_PATTERN.search(result)
        assert "steal" not in result
        assert result == "Caption"

    def test_removes_javascript_protocol(self):
        """Test that the javascript: token is stripped everywhere."""
        result = sanitize("Visit JavaScript:alert(1) now")

        assert "javascript:" not in result.lower()
        assert result == "Visit alert(1) now"


class TestTextOutput:
    """Tests for tag stripping, entity decoding and truncation."""

    def test_strips_tags_keeps_text(self):
        """Test that remaining markup is reduced to its text."""
        result = sanitize("<p>First <b>bold</b> paragraph</p>")

        assert result == "First bold paragraph"

    def test_decodes_entities(self):
        """Test that HTML entities are decoded."""
        result = sanitize("Tom &amp; Jerry&#39;s &quot;show&quot;")

        assert result == "Tom & Jerry's \"show\""

    def test_encoded_markup_does_not_come_back(self):
        """Test that entity-encoded tags are not revived as markup."""
        result = sanitize("Safe &lt;script&gt;steal()&lt;/script&gt; text")

        assert "<script" not in result.lower()
        assert "steal" not in result

    def test_trims_whitespace(self):
        """Test that surrounding whitespace is removed."""
        assert sanitize("  \n <p> padded </p>\t ") == "padded"

    def test_truncates_to_max_length(self):
        """Test that output is capped at MAX_EXCERPT_LENGTH characters."""
        result = sanitize("a" * 1200)

        assert len(result) == MAX_EXCERPT_LENGTH

    def test_truncates_by_characters_not_bytes(self):
        """Test that multi-byte characters are counted as one."""
        result = sanitize("ż" * 600)

        assert len(result) == MAX_EXCERPT_LENGTH
        assert result == "ż" * MAX_EXCERPT_LENGTH

    @pytest.mark.parametrize(
        "html",
        [
            "",
            "<",
            "<p",
            "<<>>",
            "<script>never closed",
            '<div onclick="unterminated>text',
            "&#xZZZZ; &bogus;",
        ],
    )
    def test_malformed_input_does_not_raise(self, html: str):
        """Test that malformed markup degrades instead of raising."""
        result = sanitize(html)

        assert isinstance(result, str)
        assert len(result) <= MAX_EXCERPT_LENGTH

    @pytest.mark.parametrize(
        "html, expected",
        [
            ("x <script src=a", "x"),
            ("Teaser text <script src=x", "Teaser text"),
            ("x &lt;script", "x"),
            ("Teaser &lt;script", "Teaser"),
            ("&lt;b onclick=alert(1)", ""),
            ("Read more <a href='https://example.com/po", "Read more"),
        ],
    )
    def test_unterminated_tag_is_removed(self, html: str, expected: str):
        """Test that a tag cut off before its closing > does not survive."""
        result = sanitize(html)

        assert result == expected
        assert "<" not in result
        assert not EVENT_HANDLER_PATTERN.search(result)

    def test_lone_less_than_is_kept(self):
        """Test that a comparison sign is not mistaken for a tag."""
        assert sanitize("1 &lt; 2 holds") == "1 < 2 holds"

    def test_handler_pattern_does_not_match_inside_words(self):
        """Test that ordinary words containing "on" are left intact."""
        assert sanitize("<p>Londoner='x' said</p>") == "Londoner='x' said"

    def test_none_returns_empty_string(self):
        """Test that a missing fragment yields an empty excerpt."""
        assert sanitize(None) == ""


class TestIdempotence:
    """Tests that sanitizing clean output changes nothing."""

    @pytest.mark.parametrize(
        "html",
        [
            "<p>Plain <em>text</em></p>",
            "<script>x()</script><style>p{}</style>Body",
            '<a href="javascript:go()" onclick="go()">Link</a>',
            "Fish &amp; chips",
            "ą" * 800,
        ],
    )
    def test_sanitize_is_idempotent(self, html: str):
        """Test that sanitize(sanitize(x)) == sanitize(x)."""
        once = sanitize(html)

        assert sanitize(once) == once
