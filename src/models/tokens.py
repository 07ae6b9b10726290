"""
Token models for the template pipeline

The parser produces a tree of these tokens; the reducer flattens the tree
into an instruction stream made of plain strings and directive tokens.

Every token carries an inclusive ``start`` and exclusive ``end`` SourcePoint.
For directives, comments and doctypes the span covers the content only
(between the opener and the terminator). For elements, ``start`` is the
point right after ``<`` and ``end`` the point after the closing ``>``.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Union


@dataclass(frozen=True)
class SourcePoint:
    """
    A position in the template source

    Attributes:
        offset: Zero-based character offset
        line: One-based line number
        column: One-based column number
    """
    offset: int = 0
    line: int = 1
    column: int = 1

    def advanced(self, text: str) -> "SourcePoint":
        """
        Return the point reached after scanning ``text`` from this one.

        Example:
            >>> SourcePoint().advanced("ab\\ncd")
            SourcePoint(offset=5, line=2, column=3)
        """
        newlines = text.count("\n")
        if newlines:
            column = len(text) - text.rfind("\n")
        else:
            column = self.column + len(text)
        return SourcePoint(self.offset + len(text), self.line + newlines, column)


class TokenKind(Enum):
    """Discriminator shared by all token types"""
    TEXT = "text"
    EVAL = "eval"            # <% statement %>
    ESCAPED = "escaped"      # <%= expression %>
    RAW = "raw"              # <%- expression %>
    COMMENT = "comment"
    DOCTYPE = "doctype"
    ELEMENT = "element"
    BUILDER = "builder"      # nested code produced by custom element expansion


@dataclass
class Text:
    content: str
    start: SourcePoint = field(default_factory=SourcePoint)
    end: SourcePoint = field(default_factory=SourcePoint)

    kind: ClassVar[TokenKind] = TokenKind.TEXT


@dataclass
class Directive:
    """
    Base for the three directive forms

    ``content`` is the raw text between the opener and ``%>``, untrimmed.
    """
    content: str
    start: SourcePoint = field(default_factory=SourcePoint)
    end: SourcePoint = field(default_factory=SourcePoint)

    kind: ClassVar[TokenKind]


@dataclass
class EvalDirective(Directive):
    kind: ClassVar[TokenKind] = TokenKind.EVAL


@dataclass
class EscapedDirective(Directive):
    kind: ClassVar[TokenKind] = TokenKind.ESCAPED


@dataclass
class RawDirective(Directive):
    kind: ClassVar[TokenKind] = TokenKind.RAW


@dataclass
class Comment:
    content: str
    start: SourcePoint = field(default_factory=SourcePoint)
    end: SourcePoint = field(default_factory=SourcePoint)

    kind: ClassVar[TokenKind] = TokenKind.COMMENT


@dataclass
class Doctype:
    content: str
    start: SourcePoint = field(default_factory=SourcePoint)
    end: SourcePoint = field(default_factory=SourcePoint)

    kind: ClassVar[TokenKind] = TokenKind.DOCTYPE


@dataclass
class SimpleAttribute:
    """
    A fully static attribute

    Attributes:
        name: Lower-cased attribute name
        is_boolean: Whether the name is a known HTML boolean attribute
        value: Literal value ('' when absent or empty)
        quote: Quote used in the source: '"', "'" or '' when unquoted/absent
    """
    name: str
    is_boolean: bool = False
    value: str = ""
    quote: str = ""


@dataclass
class DynamicAttribute:
    """
    A quoted attribute whose value embeds escaped directives

    ``parts`` alternates Text and EscapedDirective tokens in source order.
    """
    name: str
    is_boolean: bool = False
    quote: str = '"'
    parts: List[Union[Text, EscapedDirective]] = field(default_factory=list)


@dataclass
class Element:
    """
    An element with its attributes and children

    Void elements never have children and have no close tag.
    """
    name: str
    is_void: bool = False
    attributes: List[Union[SimpleAttribute, DynamicAttribute]] = field(default_factory=list)
    children: List["Token"] = field(default_factory=list)
    start: SourcePoint = field(default_factory=SourcePoint)
    end: SourcePoint = field(default_factory=SourcePoint)

    kind: ClassVar[TokenKind] = TokenKind.ELEMENT


@dataclass
class BuilderDirective:
    """
    Opaque instruction holding already generated code

    Produced by custom element and placeholder expansion. ``builder`` is a
    CodeBuilder holding a Python expression; ``is_string`` tells the code
    generator whether that expression is known to evaluate to a str.
    """
    builder: Any
    start: SourcePoint = field(default_factory=SourcePoint)
    end: SourcePoint = field(default_factory=SourcePoint)
    is_string: bool = False

    kind: ClassVar[TokenKind] = TokenKind.BUILDER


Token = Union[Text, EvalDirective, EscapedDirective, RawDirective, Comment, Doctype, Element]
Attribute = Union[SimpleAttribute, DynamicAttribute]
ValuePart = Union[Text, EscapedDirective]
Instruction = Union[str, EvalDirective, EscapedDirective, RawDirective, BuilderDirective]
