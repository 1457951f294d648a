"""HTML escaping for user-supplied values interpolated into templates"""

import html
import re
from typing import Optional
from urllib.parse import urlparse


SAFE_URL_SCHEMES = ("http", "https")

# Colours allowed in inline styles: hex, rgb()/rgba()/hsl()/hsla() with
# numeric arguments, or a bare colour keyword
_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})")
_FUNCTIONAL_COLOR = re.compile(r"(?:rgba?|hsla?)\(\s*[0-9.%,/\s+-]+\)", re.IGNORECASE)
_NAMED_COLOR = re.compile(r"[a-zA-Z]{3,30}")


def escape_html(text: Optional[str]) -> str:
    """Escape a text node so the browser shows exactly what was typed"""
    if not text:
        return ""
    return html.escape(str(text), quote=True)


def escape_attr(value: Optional[str]) -> str:
    """Escape a value placed inside a double- or single-quoted attribute"""
    return escape_html(value)


def safe_url(url: Optional[str], fallback: str = "#") -> str:
    """
    Return an attribute-escaped URL, or ``fallback`` when the URL is not http(s).

    Blocks javascript:, data: and other schemes that would execute in the
    embedding page.
    """
    if not url or not isinstance(url, str):
        return fallback
    url = url.strip()
    try:
        scheme = urlparse(url).scheme.lower()
    except ValueError:
        return fallback
    if scheme not in SAFE_URL_SCHEMES:
        return fallback
    return escape_attr(url)


def is_css_color(value: Optional[str]) -> bool:
    if not value or not isinstance(value, str):
        return False
    value = value.strip()
    return any(p.fullmatch(value) for p in (_HEX_COLOR, _FUNCTIONAL_COLOR, _NAMED_COLOR))


def safe_css_color(value: Optional[str], default: str) -> str:
    """The colour itself when it passes the whitelist, otherwise ``default``"""
    if is_css_color(value):
        return value.strip()
    return default


def text_to_html(text: Optional[str]) -> str:
    """Escape text, then turn newlines into line breaks"""
    return escape_html(text).replace("\r\n", "\n").replace("\n", "<br />")
