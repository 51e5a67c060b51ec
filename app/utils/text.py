import re
from typing import Optional

from bs4 import BeautifulSoup

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: Optional[str]) -> str:
    """Basic cleanup: trim, collapse whitespace, remove zero-width chars."""
    if not text:
        return ""
    text = text.replace("\u200b", "").strip()
    text = _WHITESPACE_RE.sub(" ", text)
    return text


def strip_tags(markup: Optional[str]) -> str:
    """Visible text of a markup fragment: tags and comments dropped, entities decoded."""
    if not markup:
        return ""
    return clean_text(BeautifulSoup(markup, "html.parser").get_text(" "))
