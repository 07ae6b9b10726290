"""
Escaping helpers

``html`` is handed to every render function as ``__e`` and escapes values
written through ``<%= %>``. ``literal`` makes text safe to embed inside a
double-quoted Python string literal in generated code.
"""

import re
from typing import Any


HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&#34;",
    "'": "&#39;",
}

LITERAL_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    '"': '\\"',
    "\x00": "\\x00",
}

_html_pattern = re.compile(r"""[&<>"']""")
_literal_pattern = re.compile(r'[\\\n\r"\x00]')


def html(value: Any) -> str:
    """
    Escape a value for HTML text or a quoted attribute value.

    None renders as the empty string; anything else goes through str().

    Example:
        >>> html('<a href="x">')
        '&lt;a href=&#34;x&#34;&gt;'
        >>> html(None)
        ''
    """
    if value is None:
        return ""
    return _html_pattern.sub(lambda match: HTML_ESCAPES[match.group(0)], str(value))


def literal(value: Any) -> str:
    """
    Escape text for use between double quotes in Python source.

    Example:
        >>> literal('say "hi"\\n')
        'say \\\\"hi\\\\"\\\\n'
    """
    if value is None:
        return ""
    return _literal_pattern.sub(lambda match: LITERAL_ESCAPES[match.group(0)], str(value))


def literal_quote(value: Any) -> str:
    """Return ``value`` as a double-quoted Python string literal"""
    return f'"{literal(value)}"'


# Embedded into standalone modules, which cannot import this package
HTML_STANDALONE_CODE = '''def _escape(value):
    if value is None:
        return ""
    return (str(value)
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace("\\"", "&#34;")
            .replace("'", "&#39;"))
'''
