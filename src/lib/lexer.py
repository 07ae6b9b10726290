"""
Pygments lexers for template sources

EjsLexer highlights directives and leaves everything else as ``Other``;
EjsHtmlLexer delegates that remaining text to the HTML lexer.

Token types:
- Comment.Preproc: Directive delimiters (<%, <%=, <%-, %>)
- Python tokens: Directive content
- Other: Markup (highlighted by HtmlLexer in EjsHtmlLexer)
"""

import re

from pygments.lexer import DelegatingLexer, RegexLexer, bygroups, using
from pygments.lexers.html import HtmlLexer
from pygments.lexers.python import PythonLexer
from pygments.token import Comment, Keyword, Other


class EjsLexer(RegexLexer):
    """
    Lexer for template directives

    Example:
        <li><%= item.name %></li>

    Tokens:
        <li>  → Other
        <%=   → Comment.Preproc
        item.name → Python tokens
        %>    → Comment.Preproc
    """

    name = 'EJS'
    aliases = ['ejs']
    filenames = []

    flags = re.DOTALL

    tokens = {
        'root': [
            # Literal "<%%" is text
            (r'<%%', Other),

            # Block terminator
            (r'(<%)(\s*end\s*)(%>)', bygroups(Comment.Preproc, Keyword, Comment.Preproc)),

            # Escaped and raw output directives
            (r'(<%[=-])(.*?)(%>)', bygroups(Comment.Preproc, using(PythonLexer), Comment.Preproc)),

            # Eval directives
            (r'(<%)(.*?)(%>)', bygroups(Comment.Preproc, using(PythonLexer), Comment.Preproc)),

            # Everything else is markup
            (r'[^<]+', Other),
            (r'<', Other),
        ],
    }


class EjsHtmlLexer(DelegatingLexer):
    """
    Lexer for HTML templates with directives

    Registered under the ``pygments.lexers`` entry point group.
    """

    name = 'HTML+EJS'
    aliases = ['html+ejs', 'ejshtml']
    filenames = ['*.ejs']
    mimetypes = ['text/html+ejs']

    def __init__(self, **options):
        super().__init__(HtmlLexer, EjsLexer, **options)


def get_lexer() -> EjsHtmlLexer:
    """
    Get the EjsHtmlLexer instance

    Returns:
        EjsHtmlLexer instance ready for use with Pygments
    """
    return EjsHtmlLexer()
