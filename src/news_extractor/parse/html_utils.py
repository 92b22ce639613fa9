from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup, Tag
from bs4.element import Comment, NavigableString

DEFAULT_SELECTOR = "div.detail__body-text"


def extract_region_text(html: str, selector: str = DEFAULT_SELECTOR) -> str:
    """
    Collects the article text inside every element matching ``selector``.

    Only direct children are considered: bare text nodes are kept as-is and
    ``<p>`` children contribute their full text. Scripts, captions and other
    nested widgets are left out. Whitespace is kept as found. Returns ""
    when nothing matches.
    """
    soup = BeautifulSoup(html, "html.parser")

    parts: List[str] = []
    for region in soup.select(selector):
        for node in region.children:
            if isinstance(node, Comment):
                continue
            if isinstance(node, NavigableString):
                parts.append(str(node))
            elif isinstance(node, Tag) and node.name == "p":
                parts.append(node.get_text())

    return "".join(parts)
