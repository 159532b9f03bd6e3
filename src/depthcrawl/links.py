"""
Hyperlink extraction from raw HTML text.
"""
from __future__ import annotations

import re
from typing import Set

# Only double-quoted href attributes are recognised
HTML_LINK_PATTERN = re.compile(r'href\s*=\s*"([^"]+)"', re.IGNORECASE)


def extract_links(html: str) -> Set[str]:
    """Return the distinct href values found in html, captured verbatim."""
    return set(HTML_LINK_PATTERN.findall(html))
