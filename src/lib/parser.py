"""
Parser for EJS-flavoured HTML templates

Transforms template source into a tree of tokens with exact source positions.

Scanning is mode based:
1. Document mode: find the next doctype, comment, directive, close tag or
   open tag; literal runs in between become Text tokens
2. Open-tag mode: anchored matches read attributes up to ``>`` or ``/>``
3. Raw-text mode (inside <script> and <style>): only directives and the
   matching close tag are recognised

Structural errors are fatal and raise TemplateSyntaxError with a snippet of
the surrounding lines.

Example:
    >>> tokens = Parser("<p>Hi <%= name %></p>").parse()
    >>> tokens[0].name
    'p'
    >>> tokens[0].children[1].content
    ' name '
"""

import re
from typing import Dict, List, NoReturn, Optional, Type, Union

from ..models.elements import RAW_TEXT_ELEMENTS, booleanAttribute_is, rawText_is, void_is
from ..models.options import Options
from ..models.tokens import (
    Attribute,
    Comment,
    Doctype,
    DynamicAttribute,
    Element,
    EscapedDirective,
    EvalDirective,
    RawDirective,
    SimpleAttribute,
    SourcePoint,
    Text,
    Token,
    ValuePart,
)
from .cursor import SourceCursor
from .errors import TemplateSyntaxError
from .log import LOG
from .snippet import snippet_get


# Start of the next non-text construct; a bare '<' opens a tag unless it
# starts the literal '<%%'
NON_TEXT_START = re.compile(r"<(!DOCTYPE |!--|%=|%-|%(?!%)|/|(?!%%))", re.IGNORECASE)
DIRECTIVE_END = re.compile(r"%>")
TAG_END = re.compile(r">")
COMMENT_END = re.compile(r"-->")
CLOSE_TAG = re.compile(r"([a-z][^\s/>]*)\s*>", re.IGNORECASE)
TAG_NAME = re.compile(r"[a-z][^\s/>]*", re.IGNORECASE)
# Next attribute name, directive opener or tag terminator
OPEN_TAG_CONTENT = re.compile(r"""\s*(<%=|<%-|<%(?!%)|>|/>|[^\s/>"'<=]+)""")
# Unquoted value, or the opening quote of a quoted one
ATTRIBUTE_VALUE = re.compile(r"""\s*=\s*("|'|[^\s>"'<=`]+)""")
VALUE_PART_START = {
    '"': re.compile(r'<%=|<%-|<%(?!%)|"'),
    "'": re.compile(r"<%=|<%-|<%(?!%)|'"),
}
RAW_TEXT_START: Dict[str, re.Pattern] = {
    name: re.compile(rf"<(%=|%-|%(?!%)|/{name}\s*>)", re.IGNORECASE)
    for name in RAW_TEXT_ELEMENTS
}

DIRECTIVE_TYPES: Dict[str, Type[Union[EvalDirective, EscapedDirective, RawDirective]]] = {
    "%": EvalDirective,
    "%=": EscapedDirective,
    "%-": RawDirective,
}


class Parser:
    """
    Parser for template source

    Handles:
    - Directives (<% %>, <%= %>, <%- %>), comments and doctypes
    - Nested elements with static and dynamic attributes
    - Void elements and raw-text elements
    - Error reporting with line snippets
    """

    def __init__(self, source: str, options: Optional[Options] = None):
        """
        Initialize parser with source text

        Args:
            source: Template source
            options: Compile options (only ``filename`` is used, for errors)

        Attributes:
            cursor: SourceCursor tracking the scan position
            root: Top-level tokens parsed so far
            stack: Currently open (non-void) elements, innermost last
        """
        self.source = source
        self.options = Options.prepare(options)
        self.cursor = SourceCursor(source)
        self.root: List[Token] = []
        self.stack: List[Element] = []

    def parse(self) -> List[Token]:
        """
        Parse the whole source into a token tree

        Returns:
            Top-level tokens; elements own their children

        Raises:
            TemplateSyntaxError: On malformed markup
        """
        while not self.cursor.end_is():
            if self.stack and rawText_is(self.stack[-1].name):
                self.rawText_read(self.stack[-1])
            else:
                self.document_read()

        if self.stack:
            element = self.stack[-1]
            self.error_raise(f"Unclosed element <{element.name}>", element.start)

        LOG(f"Parsed {len(self.root)} top-level tokens from {self.options.filename}", level=3)
        return self.root

    def children_get(self) -> List[Token]:
        """List receiving new tokens: the innermost open element's children"""
        return self.stack[-1].children if self.stack else self.root

    def document_read(self) -> None:
        """Read one text run or construct in document mode"""
        match = self.cursor.pattern_search(NON_TEXT_START)
        if not match:
            self.text_read(len(self.source))
            return
        if match.start() != self.cursor.offset:
            self.text_read(match.start())
            return

        self.cursor.position_advanceTo(match.end())
        opener = match.group(1)
        if opener.upper() == "!DOCTYPE ":
            self.children_get().append(self.content_read(Doctype, TAG_END, "doctype"))
        elif opener == "!--":
            self.children_get().append(self.content_read(Comment, COMMENT_END, "comment"))
        elif opener in DIRECTIVE_TYPES:
            self.children_get().append(self.content_read(DIRECTIVE_TYPES[opener], DIRECTIVE_END, "directive"))
        elif opener == "/":
            self.closeTag_read()
        else:
            self.openTag_read()

    def rawText_read(self, element: Element) -> None:
        """Read one text run, directive or the close tag inside <script>/<style>"""
        match = self.cursor.pattern_search(RAW_TEXT_START[element.name])
        if not match:
            self.error_raise(f"Unclosed element <{element.name}>", element.start)
        if match.start() != self.cursor.offset:
            self.text_read(match.start())
            return

        self.cursor.position_advanceTo(match.end())
        opener = match.group(1)
        if opener in DIRECTIVE_TYPES:
            element.children.append(self.content_read(DIRECTIVE_TYPES[opener], DIRECTIVE_END, "directive"))
        else:
            self.stack.pop()
            element.end = self.cursor.point_get()

    def text_read(self, end: int) -> None:
        start = self.cursor.point_get()
        self.cursor.position_advanceTo(end)
        self.children_get().append(Text(self.source[start.offset:end], start, self.cursor.point_get()))

    def content_read(self, token_type: Type, end_pattern: re.Pattern, label: str):
        """
        Read a token whose content runs up to a known terminator

        The cursor must sit right after the opener. The token spans the
        content only; the cursor ends after the terminator.

        Args:
            token_type: Token class to build (directive, Comment, Doctype)
            end_pattern: Terminator pattern
            label: Name used in the error message

        Raises:
            TemplateSyntaxError: If the terminator is missing
        """
        match = self.cursor.pattern_search(end_pattern)
        if not match:
            self.error_raise(f"Unterminated {label}")
        start = self.cursor.point_get()
        self.cursor.position_advanceTo(match.start())
        token = token_type(self.source[start.offset:match.start()], start, self.cursor.point_get())
        self.cursor.position_advanceTo(match.end())
        return token

    def closeTag_read(self) -> None:
        """Read a close tag (cursor after '</') and close the matching element"""
        start = self.cursor.point_get()
        match = self.cursor.pattern_match(CLOSE_TAG)
        if not match:
            self.error_raise("Invalid close tag")
        name = match.group(1).lower()
        self.cursor.position_advanceTo(match.end())

        if void_is(name):
            self.error_raise(f"Void element <{name}> must not have a close tag", start)
        if not self.stack:
            self.error_raise(f"Unexpected close tag </{name}>", start)
        element = self.stack[-1]
        if element.name != name:
            self.error_raise(f"Mismatched close tag: expected </{element.name}>, found </{name}>", start)

        self.stack.pop()
        element.end = self.cursor.point_get()

    def openTag_read(self) -> None:
        """Read an open tag (cursor after '<') with its attributes"""
        start = self.cursor.point_get()
        match = self.cursor.pattern_match(TAG_NAME)
        if not match:
            self.error_raise("Invalid open tag")
        name = match.group(0).lower()
        self.cursor.position_advanceTo(match.end())

        attributes: List[Attribute] = []
        self_close = False
        while True:
            match = self.cursor.pattern_match(OPEN_TAG_CONTENT)
            if not match:
                self.error_raise("Invalid open tag")
            self.cursor.position_advanceTo(match.end())

            piece = match.group(1)
            if piece == "<%=":
                self.error_raise("Escaped directives are not allowed inside open tags")
            elif piece == "<%-":
                self.error_raise("Unescaped directives are not allowed inside open tags")
            elif piece == "<%":
                self.error_raise("Eval directives are not allowed inside open tags")
            elif piece == ">":
                break
            elif piece == "/>":
                self_close = True
                break
            else:
                attribute = self.attribute_read(piece.lower())
                if any(other.name == attribute.name for other in attributes):
                    self.error_raise(f"Repeated attribute {attribute.name!r} on <{name}>")
                attributes.append(attribute)

        element = Element(
            name=name,
            is_void=void_is(name),
            attributes=attributes,
            children=[],
            start=start,
            end=self.cursor.point_get(),
        )
        if self_close and not element.is_void:
            self.error_raise(f"Element <{name}> is not void and cannot be self-closed", start)

        self.children_get().append(element)
        if not element.is_void:
            self.stack.append(element)

    def attribute_read(self, name: str) -> Attribute:
        """
        Read the optional value of an attribute

        A quoted value without directives collapses to a SimpleAttribute.

        Args:
            name: Lower-cased attribute name already consumed
        """
        is_boolean = booleanAttribute_is(name)
        match = self.cursor.pattern_match(ATTRIBUTE_VALUE)
        if not match:
            return SimpleAttribute(name=name, is_boolean=is_boolean, value="", quote="")

        self.cursor.position_advanceTo(match.end())
        value = match.group(1)
        if value not in VALUE_PART_START:
            return SimpleAttribute(name=name, is_boolean=is_boolean, value=value, quote="")

        parts = self.valueParts_read(value)
        if not parts:
            return SimpleAttribute(name=name, is_boolean=is_boolean, value="", quote=value)
        if len(parts) == 1 and isinstance(parts[0], Text):
            return SimpleAttribute(name=name, is_boolean=is_boolean, value=parts[0].content, quote=value)
        return DynamicAttribute(name=name, is_boolean=is_boolean, quote=value, parts=parts)

    def valueParts_read(self, quote: str) -> List[ValuePart]:
        """Split a quoted value (cursor after the opening quote) into parts"""
        pattern = VALUE_PART_START[quote]
        parts: List[ValuePart] = []
        while True:
            match = self.cursor.pattern_search(pattern)
            if not match:
                self.error_raise("Unterminated quoted attribute value")

            if match.start() != self.cursor.offset:
                start = self.cursor.point_get()
                self.cursor.position_advanceTo(match.start())
                parts.append(Text(self.source[start.offset:match.start()], start, self.cursor.point_get()))

            self.cursor.position_advanceTo(match.end())
            piece = match.group(0)
            if piece == "<%-":
                self.error_raise("Unescaped directives are not allowed inside attribute values")
            elif piece == "<%":
                self.error_raise("Eval directives are not allowed inside attribute values")
            elif piece == "<%=":
                parts.append(self.content_read(EscapedDirective, DIRECTIVE_END, "directive"))
            else:
                return parts

    def error_raise(self, message: str, position: Optional[SourcePoint] = None) -> NoReturn:
        """
        Report parser error with source context

        Args:
            message: Human-readable error description
            position: Where the problem is; defaults to the cursor

        Raises:
            TemplateSyntaxError: Always

        Example output:
            Unterminated directive
             1    | <ul>
             2 >> | <li><%= item
             3    | </ul>
        """
        position = position or self.cursor.point_get()
        raise TemplateSyntaxError(
            message,
            position,
            snippet_get(self.source, position.line, position.line),
            self.options.filename,
        )


def parse(source: str, options: Optional[Options] = None, **overrides) -> List[Token]:
    """Parse template source into a token tree"""
    return Parser(source, Options.prepare(options, **overrides)).parse()
