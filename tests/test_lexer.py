"""
Syntax highlighting lexer tests
"""

from pygments.token import Token

from ejshtml.lib.lexer import EjsHtmlLexer, EjsLexer, get_lexer


class TestEjsLexer:
    """Test directive tokenization"""

    def test_directive_delimiters(self):
        tokens = list(EjsHtmlLexer().get_tokens("<p><%= name %></p>"))
        assert (Token.Comment.Preproc, "<%=") in tokens
        assert (Token.Comment.Preproc, "%>") in tokens
        assert (Token.Name, "name") in tokens

    def test_markup_delegated_to_html(self):
        tokens = list(EjsHtmlLexer().get_tokens("<p><%= name %></p>"))
        assert (Token.Name.Tag, "p") in tokens

    def test_block_end(self):
        tokens = list(EjsLexer().get_tokens("<% if x: %>a<% end %>"))
        assert (Token.Keyword, " end ") in tokens
        assert (Token.Keyword, "if") in tokens

    def test_escaped_opener(self):
        """'<%%' is markup, not a directive"""
        tokens = list(EjsLexer().get_tokens("a <%% b"))
        assert all(token_type is Token.Other for token_type, _ in tokens)

    def test_get_lexer(self):
        lexer = get_lexer()
        assert isinstance(lexer, EjsHtmlLexer)
        assert "ejshtml" in lexer.aliases
