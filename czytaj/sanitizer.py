"""Reduce feed-supplied HTML fragments to short plain-text excerpts.

The output is plain text meant for display as-is. It is a regex-based,
best-effort defense: it cannot handle every maliciously malformed or
obfuscated markup, so it must not be re-rendered as HTML.
"""

import html
import re

MAX_EXCERPT_LENGTH = 500

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_IFRAME_RE = re.compile(r"<iframe[^>]*>.*?</iframe\s*>", re.IGNORECASE | re.DOTALL)
_EVENT_HANDLER_RE = re.compile(
    r"""\s+on\w+\s*=\s*(?:"[^"]*"|'[^']*')""", re.IGNORECASE
)
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
# An unterminated tag at the end, e.g. from a truncated summary.
_DANGLING_TAG_RE = re.compile(r"<[a-zA-Z/!?][^>]*$")

# Order matters: containers go before tags are stripped so their bodies
# never survive as text.
_MARKUP_PATTERNS = (
    _SCRIPT_RE,
    _STYLE_RE,
    _IFRAME_RE,
    _EVENT_HANDLER_RE,
    _JS_PROTOCOL_RE,
    _TAG_RE,
    _DANGLING_TAG_RE,
)


def sanitize(content: str) -> str:
    """Strip dangerous markup from an HTML fragment and return plain text.

    Args:
        content: HTML fragment taken from a feed entry

    Returns:
        Trimmed plain text of at most MAX_EXCERPT_LENGTH characters
    """
    if not content:
        return ""

    text = _strip_markup(content)
    decoded = html.unescape(text)
    if decoded != text:
        # Entities such as &lt;script&gt; decode into live markup.
        decoded = _strip_markup(decoded)

    return decoded.strip()[:MAX_EXCERPT_LENGTH]


def _strip_markup(text: str) -> str:
    for pattern in _MARKUP_PATTERNS:
        text = pattern.sub("", text)
    return text
