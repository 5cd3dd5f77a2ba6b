"""Visible-text extraction from probe bodies using stdlib html.parser."""

import re
from html.parser import HTMLParser
from typing import List


_NON_WORD = re.compile(r"\W", re.ASCII)

# Elements whose content is never rendered as text
_SKIP_TAGS = {"script", "style", "template", "noscript"}


class _TextExtractor(HTMLParser):
    """Collect character data outside of non-rendered elements."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.chunks: List[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in _SKIP_TAGS:
            self._skip_depth += 1

    def handle_endtag(self, tag):
        if tag in _SKIP_TAGS and self._skip_depth:
            self._skip_depth -= 1

    def handle_data(self, data):
        if not self._skip_depth:
            self.chunks.append(data)


def extract_text(html: str) -> str:
    """Return the plain visible text of *html* (plain text passes through)."""
    parser = _TextExtractor()
    parser.feed(html or "")
    parser.close()
    return "".join(parser.chunks)


def normalize_text(text: str) -> str:
    """Trim, drop non-word characters and lower-case, e.g. ' Success! ' → 'success'."""
    return _NON_WORD.sub("", (text or "").strip()).lower()


def is_success_body(html: str) -> bool:
    return normalize_text(extract_text(html)) == "success"
