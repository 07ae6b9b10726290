"""
Code builders

The code generator appends generated Python to a CodeBuilder. Builders are
line oriented: ``line_add()`` starts a new line at the current indentation
level, and a nested builder embedded with ``builder_add()`` is re-indented
relative to the point where it is embedded. This is what lets code for
custom element slots be generated on its own and spliced in later.

PositionMapBuilder additionally records where each token chunk came from
in the template, producing a version 3 source map on ``build()``.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..models.options import Options
from ..models.sourcemap import SourceMap
from ..models.tokens import SourcePoint


INDENT = "    "
BASE64_DIGITS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

# (generated column,) or (generated column, source line, source column)
Segment = Tuple[int, ...]


@dataclass
class BuildResult:
    """
    Output of a builder

    Attributes:
        code: Generated Python source
        map: Source map JSON, or None without position mapping
        map_with_source: Same map embedding the template text
    """
    code: str
    map: Optional[str] = None
    map_with_source: Optional[str] = None


class CodeWriter:
    """
    Flattens builder chunks into text while tracking the output position

    ``lines`` holds, per generated line, the mapping segments recorded for
    token chunks.
    """

    def __init__(self):
        self.parts: List[str] = []
        self.column = 0
        self.lines: List[List[Segment]] = [[]]
        self.mapped = False

    def write(self, text: str, point: Optional[SourcePoint] = None) -> None:
        for index, piece in enumerate(text.split("\n")):
            if index:
                self.lines.append([])
                self.column = 0
                self.mapped = False
            if piece:
                if point is not None:
                    column = point.column - 1 if index == 0 else 0
                    self.lines[-1].append((self.column, point.line - 1 + index, column))
                    self.mapped = True
                elif self.mapped:
                    # Generated code following a mapped chunk maps nowhere
                    self.lines[-1].append((self.column,))
                    self.mapped = False
            self.column += len(piece)
        self.parts.append(text)

    def text_get(self) -> str:
        return "".join(self.parts)


class CodeBuilder:
    """
    Append-only sink for generated code

    Attributes:
        chunks: Recorded text, token, line and nested builder chunks
        level: Current indentation level for new lines
        hoisted: Builders holding statements this builder's
                 expression depends on; the consumer must emit them at a
                 statement position before using the expression
    """

    def __init__(self, filename: str = "ejs"):
        self.filename = filename
        self.chunks: List[Tuple[Any, ...]] = []
        self.level = 0
        self.hoisted: List["CodeBuilder"] = []

    def add(self, text: str) -> None:
        """Append generated text"""
        self.chunks.append(("text", text))

    def token_add(self, text: str, point: SourcePoint) -> None:
        """Append text copied from the template, starting at ``point``"""
        self.chunks.append(("token", text, point))

    def line_add(self) -> None:
        """Start a new line at the current indentation level"""
        self.chunks.append(("line", self.level))

    def indent(self) -> None:
        self.level += 1

    def dedent(self) -> None:
        self.level -= 1

    def builder_add(self, builder: "CodeBuilder") -> None:
        """Embed another builder, re-indenting its lines to the current level"""
        self.chunks.append(("builder", builder, self.level))

    def section_add(self, builder: "CodeBuilder") -> None:
        """Embed another builder's statements on a new line"""
        self.line_add()
        self.builder_add(builder)

    def chunks_write(self, writer: CodeWriter, base: int = 0) -> None:
        for chunk in self.chunks:
            kind = chunk[0]
            if kind == "text":
                writer.write(chunk[1])
            elif kind == "token":
                writer.write(chunk[1], chunk[2])
            elif kind == "line":
                writer.write("\n" + INDENT * (base + chunk[1]))
            else:
                chunk[1].chunks_write(writer, base + chunk[2])

    def code_get(self) -> str:
        writer = CodeWriter()
        self.chunks_write(writer)
        return writer.text_get()

    def build(self, source: Optional[str] = None) -> BuildResult:
        return BuildResult(code=self.code_get())


class PositionMapBuilder(CodeBuilder):
    """
    CodeBuilder that also produces a source map

    Each line of a multi-line token is mapped on its own, so map consumers
    see one segment per generated line.
    """

    def build(self, source: Optional[str] = None) -> BuildResult:
        """
        Build code and source maps

        Args:
            source: Template source, embedded in ``map_with_source``
        """
        writer = CodeWriter()
        self.chunks_write(writer)
        source_map = SourceMap(
            file=f"{self.filename}.py",
            sources=[self.filename],
            mappings=mappings_encode(writer.lines),
        )
        with_source = source_map.model_copy(update={"sourcesContent": [source or ""]})
        return BuildResult(
            code=writer.text_get(),
            map=source_map.json_get(),
            map_with_source=with_source.json_get(),
        )


def vlq_encode(value: int) -> str:
    """
    Encode an integer as base64 VLQ

    Example:
        >>> vlq_encode(0), vlq_encode(-1), vlq_encode(16)
        ('A', 'D', 'gB')
    """
    value = ((-value) << 1) | 1 if value < 0 else value << 1
    encoded = ""
    while True:
        digit = value & 31
        value >>= 5
        if value:
            digit |= 32
        encoded += BASE64_DIGITS[digit]
        if not value:
            return encoded


def mappings_encode(lines: List[List[Segment]]) -> str:
    """
    Encode per-line segments into the source map ``mappings`` field

    Generated columns are relative within a line; source line and column
    are relative to the previous mapped segment across the whole map.
    """
    source_line = 0
    source_column = 0
    encoded_lines = []
    for segments in lines:
        column = 0
        encoded = []
        for segment in segments:
            fields = [segment[0] - column]
            column = segment[0]
            if len(segment) == 3:
                fields += [0, segment[1] - source_line, segment[2] - source_column]
                source_line, source_column = segment[1], segment[2]
            encoded.append("".join(vlq_encode(value) for value in fields))
        encoded_lines.append(",".join(encoded))
    return ";".join(encoded_lines)


def builder_create(options: Options) -> CodeBuilder:
    """Return the builder matching ``options.source_map``"""
    if options.source_map:
        return PositionMapBuilder(options.filename)
    return CodeBuilder(options.filename)
