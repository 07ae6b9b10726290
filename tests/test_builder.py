"""
Code builder and source map tests
"""

import json

import pytest

from ejshtml.lib.builder import (
    CodeBuilder,
    PositionMapBuilder,
    builder_create,
    mappings_encode,
    vlq_encode,
)
from ejshtml.lib.compiler import compile_standalone
from ejshtml.models.options import Options
from ejshtml.models.tokens import SourcePoint


class TestCodeBuilder:
    """Test line handling and nested builders"""

    def test_lines_and_indentation(self):
        """New lines start at the current level"""
        builder = CodeBuilder()
        builder.add("if x:")
        builder.indent()
        builder.line_add()
        builder.add("y = 1")
        builder.dedent()
        builder.line_add()
        builder.add("z = 2")
        assert builder.code_get() == "if x:\n    y = 1\nz = 2"

    def test_nested_builder_reindented(self):
        """An embedded builder's lines are indented relative to the embed point"""
        inner = CodeBuilder()
        inner.add("def f():")
        inner.indent()
        inner.line_add()
        inner.add("return 1")

        outer = CodeBuilder()
        outer.add("if x:")
        outer.indent()
        outer.section_add(inner)
        assert outer.code_get() == "if x:\n    def f():\n        return 1"

    def test_plain_build_has_no_map(self):
        """Without position mapping there is no source map"""
        result = CodeBuilder().build("source")
        assert result.code == ""
        assert result.map is None
        assert result.map_with_source is None

    def test_builder_create(self):
        """The builder type follows the source_map option"""
        assert type(builder_create(Options.prepare(source_map=False))) is CodeBuilder
        assert isinstance(builder_create(Options.prepare(source_map=True)), PositionMapBuilder)


class TestVlq:
    """Test base64 VLQ encoding"""

    @pytest.mark.parametrize(
        "value, encoded",
        [(0, "A"), (1, "C"), (-1, "D"), (15, "e"), (16, "gB"), (-16, "hB"), (1000, "w+B")],
    )
    def test_encode(self, value, encoded):
        assert vlq_encode(value) == encoded

    def test_mappings_relative_fields(self):
        """Source positions are relative across lines"""
        assert mappings_encode([[(4, 1, 2), (5,)], [], [(0, 1, 0)]]) == "IACE,C;;AAAF"


class TestPositionMapBuilder:
    """Test source map generation"""

    def test_token_segments(self):
        """Tokens are mapped; the generated text after them maps nowhere"""
        builder = PositionMapBuilder("page.ejs")
        builder.add("x = ")
        builder.token_add("a", SourcePoint(5, 2, 3))
        builder.add(" + 1")
        result = builder.build("source")

        assert result.code == "x = a + 1"
        assert json.loads(result.map) == {
            "version": 3,
            "file": "page.ejs.py",
            "sources": ["page.ejs"],
            "names": [],
            "mappings": "IACE,C",
        }

    def test_multiline_token(self):
        """Each line of a multi-line token gets its own segment"""
        builder = PositionMapBuilder()
        builder.add("(")
        builder.token_add("a\nb", SourcePoint(0, 1, 1))
        builder.add(")")
        result = builder.build()
        assert result.code == "(a\nb)"
        assert json.loads(result.map)["mappings"] == "CAAA;AACA,C"

    def test_map_with_source(self):
        """The second map embeds the template text"""
        result = PositionMapBuilder().build("<p>hi</p>")
        assert "sourcesContent" not in json.loads(result.map)
        assert json.loads(result.map_with_source)["sourcesContent"] == ["<p>hi</p>"]

    def test_standalone_map(self):
        """Standalone compilation maps directive code back to the template"""
        result = compile_standalone("a\n<%= name %>", filename="page.ejs", source_map=True, vars=["name"])
        source_map = json.loads(result.map)
        assert source_map["file"] == "page.ejs.py"
        assert source_map["sources"] == ["page.ejs"]
        assert source_map["mappings"].count(";") == result.code.count("\n")

        # The line holding the expression carries a mapped segment
        lines = result.code.split("\n")
        expression_line = next(index for index, line in enumerate(lines) if "__e(name)" in line)
        assert source_map["mappings"].split(";")[expression_line] != ""
