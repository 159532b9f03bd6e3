"""
URL normalization and filename encoding.
"""
from __future__ import annotations

import hashlib
import re
from typing import Optional
from urllib.parse import urlsplit

WWW_PREFIX = "www."
HTTPS_PREFIX = "https://"
PAGE_SUFFIX = ".html"

# Longest filename stem kept verbatim; longer keys get a digest suffix
MAX_STEM_LENGTH = 150

_SCHEME_RE = re.compile(r"^https?://")
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9-]")


def normalize_url(raw: str) -> Optional[str]:
    """
    Rewrite a raw link into an absolute https://www. URL.

    - Drops a leading "//" (protocol-relative links)
    - Keeps everything from the first "www." onward, or prepends "www."
    - Ensures the result starts with "https://"

    This is a textual rewrite, not a parse: a "www." that appears in a path
    or query string truncates the URL at that point.

    Returns None when the result has no usable host.
    """
    url = raw
    if url.startswith("//"):
        url = url[2:]

    index = url.find(WWW_PREFIX)
    if index != -1:
        url = url[index:]
    else:
        url = WWW_PREFIX + url

    if url.startswith("//"):
        url = "https:" + url
    if not url.startswith(HTTPS_PREFIX):
        url = HTTPS_PREFIX + url

    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return url


def encode_filename(url: str) -> str:
    """
    Derive a filesystem-safe page key from a normalized URL.

    The scheme is stripped and every character outside [A-Za-z0-9-]
    (including "/" and ".") becomes "_". Overlong stems are cut and
    suffixed with a short SHA-256 digest of the full URL.
    """
    stem = _UNSAFE_CHARS_RE.sub("_", _SCHEME_RE.sub("", url))
    if len(stem) > MAX_STEM_LENGTH:
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
        stem = f"{stem[:MAX_STEM_LENGTH]}_{digest}"
    return stem + PAGE_SUFFIX
