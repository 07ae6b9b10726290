"""
Element and attribute parsing tests

Tests the element tree, attribute forms, raw-text elements and
structural errors.
"""

import pytest

from ejshtml.lib.errors import TemplateSyntaxError
from ejshtml.lib.parser import parse
from ejshtml.models.tokens import (
    DynamicAttribute,
    Element,
    EscapedDirective,
    RawDirective,
    SimpleAttribute,
    SourcePoint,
    Text,
)


def point_at(text: str) -> SourcePoint:
    lines = text.split("\n")
    return SourcePoint(len(text), len(lines), len(lines[-1]) + 1)


class TestElementTree:
    """Test nesting and element positions"""

    def test_nested_and_void_elements(self):
        """Void elements take no children; optional '/>' is accepted on them"""
        source = "<div><input><input/></div >"
        tokens = parse(source)

        assert len(tokens) == 1
        div = tokens[0]
        assert div.name == "div"
        assert not div.is_void
        assert [child.name for child in div.children] == ["input", "input"]
        assert all(child.is_void and child.children == [] for child in div.children)
        assert div.end == point_at(source)

    def test_element_positions(self):
        """Element start is after '<', end is after the close tag"""
        element = parse("<p>x</p>")[0]
        assert element.start == SourcePoint(1, 1, 2)
        assert element.end == SourcePoint(8, 1, 9)

    def test_void_element_end(self):
        """A void element ends after its open tag"""
        element = parse("<br>text")[0]
        assert element.end == SourcePoint(4, 1, 5)

    def test_names_are_lowercased(self):
        """Tag and attribute names are case-normalized"""
        element = parse("<DIV CLASS=a></div>")[0]
        assert element.name == "div"
        assert element.attributes[0].name == "class"

    def test_children_order(self):
        """Text, directives and elements keep source order"""
        element = parse("<ul>a<%= b %><li>c</li></ul>")[0]
        kinds = [type(child) for child in element.children]
        assert kinds == [Text, EscapedDirective, Element]


class TestAttributes:
    """Test static and dynamic attributes"""

    def test_literal_attributes(self):
        """Unquoted, quoted, empty, boolean and bare attributes"""
        source = '<div a="no-quote" \n b=\'s<i>ngle\' c="d<o>uble" d="" checked="yes!" e></div>'
        attributes = parse(source)[0].attributes
        assert attributes == [
            SimpleAttribute(name="a", is_boolean=False, value="no-quote", quote='"'),
            SimpleAttribute(name="b", is_boolean=False, value="s<i>ngle", quote="'"),
            SimpleAttribute(name="c", is_boolean=False, value="d<o>uble", quote='"'),
            SimpleAttribute(name="d", is_boolean=False, value="", quote='"'),
            SimpleAttribute(name="checked", is_boolean=True, value="yes!", quote='"'),
            SimpleAttribute(name="e", is_boolean=False, value="", quote=""),
        ]

    def test_unquoted_value(self):
        """Unquoted values may contain slashes"""
        attribute = parse("<a href=x/y>z</a>")[0].attributes[0]
        assert attribute == SimpleAttribute(name="href", value="x/y", quote="")

    def test_dynamic_attribute(self):
        """Escaped directives split a quoted value into parts"""
        source = '<div attr="pre<%=code%>post"></div>'
        attribute = parse(source)[0].attributes[0]
        assert attribute == DynamicAttribute(
            name="attr",
            is_boolean=False,
            quote='"',
            parts=[
                Text("pre", point_at('<div attr="'), point_at('<div attr="pre')),
                EscapedDirective("code", point_at('<div attr="pre<%='), point_at('<div attr="pre<%=code')),
                Text("post", point_at('<div attr="pre<%=code%>'), point_at('<div attr="pre<%=code%>post')),
            ],
        )

    def test_dynamic_boolean_attribute(self):
        """Boolean attributes are flagged on dynamic values too"""
        attribute = parse('<input checked="<%= on %>">')[0].attributes[0]
        assert isinstance(attribute, DynamicAttribute)
        assert attribute.is_boolean
        assert len(attribute.parts) == 1

    def test_escaped_opener_in_value_is_text(self):
        """'<%%' inside a value does not start a directive"""
        attribute = parse('<a class="a <%%> b"></a>')[0].attributes[0]
        assert attribute == SimpleAttribute(name="class", value="a <%%> b", quote='"')


class TestRawTextElements:
    """Test <script> and <style> content"""

    def test_markup_in_script_is_text(self):
        """Tags inside <script> are not parsed"""
        source = '<script>if (a < b) { x = "</div>" }</script>'
        script = parse(source)[0]
        assert script.children == [
            Text('if (a < b) { x = "</div>" }', point_at("<script>"), point_at(source[:-len("</script>")])),
        ]

    def test_directives_in_script(self):
        """Directives are still recognized inside <script>"""
        script = parse("<script>var a = <%- data %>;</SCRIPT >")[0]
        assert [type(child) for child in script.children] == [Text, RawDirective, Text]
        assert script.children[1].content == " data "

    def test_style(self):
        """Selectors with '>' stay text inside <style>"""
        style = parse("<style>p > a { color: red }</style>")[0]
        assert style.children[0].content == "p > a { color: red }"


class TestSyntaxErrors:
    """Test fail-fast structural errors"""

    @pytest.mark.parametrize(
        "source",
        [
            "<%= x",
            "<!-- x",
            "<!DOCTYPE html",
            "<div",
            "a < b",
            "</>",
            "<div <%= x %>></div>",
            "<div <% x %>></div>",
            '<div a="<%- x %>"></div>',
            '<div a="<% x %>"></div>',
            '<div a="x></div>',
            "<div a b a></div>",
            "<br></br>",
            "<div/>",
            "</div>",
            "<div></span>",
            "<div>",
            "<p><b></p></b>",
            "<script>var a;",
        ],
    )
    def test_malformed(self, source):
        """Malformed templates raise TemplateSyntaxError"""
        with pytest.raises(TemplateSyntaxError):
            parse(source)

    def test_is_a_syntax_error(self):
        """TemplateSyntaxError is a SyntaxError"""
        with pytest.raises(SyntaxError):
            parse("<div>")

    def test_error_snippet(self):
        """The error carries the position and a marked snippet"""
        source = "a\n<div>\n<%= x\nb"
        with pytest.raises(TemplateSyntaxError) as info:
            parse(source, filename="page.ejs")

        error = info.value
        assert error.message == "Unterminated directive"
        assert error.position.line == 3
        assert error.filename == "page.ejs"
        assert error.snippet == " 1    | a\n 2    | <div>\n 3 >> | <%= x\n 4    | b"
        assert str(error) == "Unterminated directive\n" + error.snippet

    def test_unclosed_points_at_element(self):
        """An unclosed element is reported where it was opened"""
        with pytest.raises(TemplateSyntaxError) as info:
            parse("x\n<section>\n<p>a</p>\n")
        assert info.value.position.line == 2
        assert "section" in info.value.message

    def test_repeated_attribute_case_insensitive(self):
        """Attribute repetition is checked after lowercasing"""
        with pytest.raises(TemplateSyntaxError, match="Repeated attribute"):
            parse("<a HREF=x href=y></a>")
