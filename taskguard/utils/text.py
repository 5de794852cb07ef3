import re

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
    "/": "&#x2F;",
}
_HTML_ESCAPE_RE = re.compile(r"[&<>\"'/]")


def escape_html(text: object) -> str:
    """Escape text for safe insertion into HTML.

    Unlike ``html.escape`` this also escapes the forward slash, so a stored
    value can never close a surrounding tag.

    Args:
        text: Value to escape; None becomes an empty string.

    Returns:
        str: Escaped text.
    """
    if text is None:
        return ""
    return _HTML_ESCAPE_RE.sub(lambda m: _HTML_ESCAPES[m.group(0)], str(text))
