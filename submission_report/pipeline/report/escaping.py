"""HTML escaping for user-sourced text embedded in the report.

Every dynamic string that reaches the document goes through one of these
helpers: ``escape_html`` for element content, ``escape_attribute`` for
attribute values (including ``href`` and ``src`` targets).

Examples
--------
>>> escape_html("<b>&'\\"")
'&lt;b&gt;&amp;&#39;&quot;'
>>> escape_attribute("`x`")
'&#96;x&#96;'
"""

from __future__ import annotations

_HTML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}
_HTML_TABLE = str.maketrans(_HTML_ENTITIES)
_ATTRIBUTE_TABLE = str.maketrans({**_HTML_ENTITIES, "`": "&#96;"})


def escape_html(value: object) -> str:
    """Replace ``& < > " '`` with their entities; non-strings are stringified."""
    return str(value).translate(_HTML_TABLE)


def escape_attribute(value: object) -> str:
    """``escape_html`` plus backticks, for attribute values."""
    return str(value).translate(_ATTRIBUTE_TABLE)


def format_multiline(text: str) -> str:
    """Escape ``text`` and turn newlines into ``<br />`` tags."""
    return escape_html(text).replace("\n", "<br />")


__all__ = ["escape_attribute", "escape_html", "format_multiline"]
