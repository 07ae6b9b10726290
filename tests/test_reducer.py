"""
Reducer tests - whitespace, attributes and instruction streams

Streams are compared through minify(), which writes directives back in
template form so expectations read like templates.
"""

import pytest

from ejshtml.lib.errors import CompileError
from ejshtml.lib.parser import parse
from ejshtml.lib.reducer import reduce, simpleValue_get
from ejshtml.models.tokens import (
    BuilderDirective,
    EscapedDirective,
    EvalDirective,
    RawDirective,
    SimpleAttribute,
)


def minify(source: str, **options) -> str:
    """Reduce ``source`` and render the stream back as template text"""
    parts = []
    for instruction in reduce(parse(source), **options):
        if isinstance(instruction, str):
            parts.append(instruction)
        elif isinstance(instruction, EvalDirective):
            parts.append(f"<%{instruction.content}%>")
        elif isinstance(instruction, EscapedDirective):
            parts.append(f"<%={instruction.content}%>")
        elif isinstance(instruction, RawDirective):
            parts.append(f"<%-{instruction.content}%>")
        else:
            parts.append("<builder>")
    return "".join(parts)


class TestTextAndDirectives:
    """Test text passthrough and directive tokens"""

    def test_empty(self):
        """Empty source reduces to an empty stream"""
        assert reduce(parse("")) == []

    def test_literal_text(self):
        """Plain text stays a single string"""
        assert reduce(parse("A literal text")) == ["A literal text"]
        assert reduce(parse("Multi\nline")) == ["Multi\nline"]

    def test_directives_pass_through(self):
        """Directive tokens are kept as they were parsed"""
        source = "<%eval%><%=escaped%><%-raw%>literal <%% text"
        tokens = parse(source)
        assert reduce(parse(source)) == tokens[:3] + ["literal <%% text"]

    def test_comments_removed(self):
        """Comments produce no output"""
        assert reduce(parse("<!--\n-- comment\n-->")) == []

    def test_doctype(self):
        """Doctypes are written back in canonical form"""
        assert reduce(parse("<!doctype html>")) == ["<!DOCTYPE html>"]


class TestElements:
    """Test element re-serialization"""

    def test_elements(self):
        """Close tags are normalized and '/>' on void elements dropped"""
        assert reduce(parse("<div><input><input/></div >")) == ["<div><input><input></div>"]

    def test_literal_attributes(self):
        """Quotes are dropped where safe, kept (as written) otherwise"""
        source = '<div a="no-quote" \n b=\'s<i>ngle\' c="d<o>uble" d="" checked="yes!" e></div>'
        assert reduce(parse(source)) == ["<div a=no-quote b='s<i>ngle' c=\"d<o>uble\" d checked e></div>"]

    def test_dynamic_attributes(self):
        """Escaped directives in values stay in the stream"""
        source = '<div attr="pre<%=code%>post"></div>'
        stream = reduce(parse(source))
        assert len(stream) == 3
        assert stream[0] == '<div attr="pre'
        assert isinstance(stream[1], EscapedDirective)
        assert stream[1].content == "code"
        assert stream[2] == 'post"></div>'

    def test_whitespace_between_attributes(self):
        """Attributes are separated by a single space"""
        assert minify("<a    b\n\t  \tc></a>") == "<a b c></a>"

    def test_class_collapse(self):
        """Class values have their whitespace collapsed"""
        assert minify('<a class="  a  b  "></a>') == '<a class="a b"></a>'
        assert minify('<a class=" <%= x %>   b "></a>') == '<a class=" <%= x %> b "></a>'

    def test_boolean_attributes(self):
        """Boolean attribute values are dropped"""
        assert minify('<a a="" checked=checked multiple></a>') == "<a a checked multiple></a>"

    def test_boolean_attribute_expression(self):
        """A boolean attribute with one directive becomes a conditional"""
        assert minify('<a checked="<%=checked%>"></a>') == "<a<%if (checked):%> checked<%end%>></a>"

    def test_boolean_attribute_positions(self):
        """The conditional directives carry the expression's positions"""
        stream = reduce(parse('<a checked="<%= on %>"></a>'))
        directive = parse('<a checked="<%= on %>"></a>')[0].attributes[0].parts[0]
        assert stream[1] == EvalDirective("if (on):", directive.start, directive.end)
        assert stream[3] == EvalDirective("end", directive.start, directive.end)

    def test_boolean_attribute_with_comment(self):
        """An expression with a comment ends its line before the colon"""
        stream = reduce(parse('<a checked="<%= on # flag %>"></a>'))
        assert stream[1].content == "if (on # flag\n):"


class TestWhitespace:
    """Test whitespace collapsing"""

    def test_collapse(self):
        """Runs of whitespace collapse to their first character"""
        assert minify("  no\n  need  for  spaces  ") == " no\nneed for spaces "

    def test_collapse_around_eval(self):
        """Eval directives do not interrupt collapsing"""
        assert minify("even  <%a%>  between  <%x%>  js  ta<%g%>s") == "even <%a%>between <%x%>js ta<%g%>s"

    def test_spaces_around_output(self):
        """Output directives keep one space on each side"""
        assert minify("before  <%= 2 %>  after") == "before <%= 2 %> after"
        assert minify("before  <%- 2 %>  after") == "before <%- 2 %> after"
        assert minify("before  <% 2 %>  after") == "before <% 2 %>after"

    @pytest.mark.parametrize("tag", ["pre", "textarea", "script", "style"])
    def test_preserving_elements(self, tag):
        """Whitespace inside pre, textarea, script and style is kept"""
        assert minify(f"<{tag}>  a\n\n  b </{tag}>") == f"<{tag}>  a\n\n  b </{tag}>"

    def test_around_pre(self):
        """Text around a preserving element is still collapsed"""
        assert minify("<div>  x  <pre> y </pre>  z  </div>") == "<div> x <pre> y </pre> z </div>"


class TestStreamInvariants:
    """Test properties that hold for every reduced stream"""

    SOURCE = (
        "<!DOCTYPE html>\n<ul class='list'>\n"
        "<% for item in items: %>\n  <li><%= item %></li>\n<% end %>\n"
        "</ul>\n<my-card title=\"x\">body</my-card>\n"
    )

    def test_no_adjacent_strings(self):
        """Adjacent static strings are always merged"""
        stream = reduce(parse(self.SOURCE))
        for previous, current in zip(stream, stream[1:]):
            assert not (isinstance(previous, str) and isinstance(current, str))

    def test_idempotent_on_static(self):
        """Reducing a reduced stream leaves it unchanged"""
        stream = reduce(parse("<p>  a  <b> b </b></p>"))
        assert reduce(stream) == stream

    def test_idempotent_on_mixed(self):
        """Directives and builders survive a second reduction"""
        stream = reduce(parse(self.SOURCE))
        assert reduce(stream) == stream

    def test_custom_element_is_builder(self):
        """Custom elements reduce to a builder instruction"""
        stream = reduce(parse("<my-tag></my-tag>"))
        assert len(stream) == 1
        assert isinstance(stream[0], BuilderDirective)
        assert not stream[0].is_string

    def test_placeholder_is_string_builder(self):
        """Placeholders reduce to a string-valued builder instruction"""
        stream = reduce(parse("<eh-placeholder>x</eh-placeholder>"))
        assert isinstance(stream[0], BuilderDirective)
        assert stream[0].is_string

    def test_content_outside_custom_element(self):
        """eh-content is only valid directly inside a custom element"""
        with pytest.raises(CompileError, match="eh-content"):
            reduce(parse("<div><eh-content>x</eh-content></div>"))


class TestSimpleValue:
    """Test static attribute serialization"""

    def test_unquoted(self):
        assert simpleValue_get(SimpleAttribute("id", False, "main", '"')) == "=main"

    def test_quoted(self):
        assert simpleValue_get(SimpleAttribute("title", False, "a b", "'")) == "='a b'"

    def test_unquoted_in_source_needs_quotes(self):
        """A value needing quotes gets double quotes when none were used"""
        assert simpleValue_get(SimpleAttribute("class", False, "  a   b ", "")) == '="a b"'

    def test_boolean(self):
        assert simpleValue_get(SimpleAttribute("checked", True, "checked", '"')) == ""
