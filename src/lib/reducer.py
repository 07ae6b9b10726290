"""
Reducer

Flattens a parsed token tree into an instruction stream: plain strings for
static output interleaved with directive tokens. Along the way it

- collapses whitespace in text (except inside pre/textarea/script/style)
- drops comments and re-serializes doctypes and elements
- normalizes attributes (class whitespace, boolean values, quoting)
- rewrites ``<a checked="<%= x %>">`` into a conditional
- expands custom elements and placeholders into builder instructions

Adjacent strings in the stream are always merged.

Example:
    >>> from .parser import parse
    >>> reduce(parse('<p  class=" a  b ">  Hi  </p>'))
    ['<p class="a b"> Hi </p>']
"""

import re
from typing import List, Optional, Sequence, Union

from ..models.elements import (
    CONTENT_ELEMENT,
    PLACEHOLDER_ELEMENT,
    custom_is,
    whitespacePreserving_is,
)
from ..models.options import Options
from ..models.tokens import (
    BuilderDirective,
    Comment,
    Doctype,
    DynamicAttribute,
    Element,
    EscapedDirective,
    EvalDirective,
    Instruction,
    RawDirective,
    SimpleAttribute,
    Text,
    Token,
    ValuePart,
)
from .custom import customElement_expand, placeholder_expand
from .errors import CompileError
from .log import LOG


WHITESPACE_RUN = re.compile(r"(\s)\s+")
UNQUOTED_SAFE = re.compile(r"""^[^\s>"'<=`]*$""")


class Reducer:
    """
    Single-use reducer for one token tree

    Attributes:
        options: Compile options
        stream: Instruction stream built so far
        last_text_was_plain: The last static fragment was collapsible text
        last_plain_text_was_spaced: That text ended with whitespace, so the
                                    next plain text drops its leading spaces
    """

    def __init__(self, options: Options):
        self.options = options
        self.stream: List[Instruction] = []
        self.last_text_was_plain = False
        self.last_plain_text_was_spaced = False

    def reduce(self, tokens: Sequence[Union[Token, Instruction]]) -> List[Instruction]:
        """
        Reduce a token tree

        Plain strings and builder instructions in the input are taken as
        already reduced, so reducing a reduced stream leaves it unchanged.

        Raises:
            CompileError: On slot markers outside custom elements or
                          non-literal slot names
        """
        self.tokens_append(tokens, keep_whitespace=False)
        LOG(f"Reduced to {len(self.stream)} instructions", level=3)
        return self.stream

    def tokens_append(self, tokens, keep_whitespace: bool) -> None:
        for token in tokens:
            if isinstance(token, str):
                self.text_append(token, plain=False)
            elif isinstance(token, Text):
                self.text_append(token.content, plain=not keep_whitespace)
            elif isinstance(token, EvalDirective):
                self.stream.append(token)
            elif isinstance(token, (EscapedDirective, RawDirective, BuilderDirective)):
                self.instruction_append(token)
            elif isinstance(token, Comment):
                continue
            elif isinstance(token, Doctype):
                self.text_append(f"<!DOCTYPE {token.content}>", plain=False)
            elif isinstance(token, Element):
                self.element_append(token, keep_whitespace)
            else:
                raise CompileError(
                    f"Unexpected token {type(token).__name__} in template tree",
                    self.options.filename,
                )

    def element_append(self, element: Element, keep_whitespace: bool) -> None:
        if element.name == CONTENT_ELEMENT:
            raise CompileError(
                f"Unexpected <{CONTENT_ELEMENT}> outside a custom element",
                self.options.filename,
                element.start,
            )
        if element.name == PLACEHOLDER_ELEMENT:
            self.instruction_append(placeholder_expand(element, self.options))
            return
        if custom_is(element.name):
            self.instruction_append(customElement_expand(element, self.options))
            return

        self.text_append(f"<{element.name}", plain=False)
        self.attributes_append(element.attributes)
        self.text_append(">", plain=False)

        if not element.is_void:
            keep = keep_whitespace or whitespacePreserving_is(element.name)
            self.tokens_append(element.children, keep_whitespace=keep)
            self.text_append(f"</{element.name}>", plain=False)

    def instruction_append(self, instruction: Instruction) -> None:
        """Append an output-producing directive or builder instruction"""
        self.stream.append(instruction)
        self.last_text_was_plain = False

    def text_append(self, text: str, plain: bool) -> None:
        """
        Append static output, merging it into a preceding string

        Args:
            text: Output text
            plain: Text content subject to whitespace collapsing (as opposed
                   to markup or whitespace-preserving content)
        """
        if plain:
            if self.last_text_was_plain and self.last_plain_text_was_spaced:
                text = text.lstrip()
            text = WHITESPACE_RUN.sub(r"\1", text)
            self.last_plain_text_was_spaced = text[-1:].isspace()
        self.last_text_was_plain = plain

        if not text:
            return
        if self.stream and isinstance(self.stream[-1], str):
            self.stream[-1] += text
        else:
            self.stream.append(text)

    def attributes_append(self, attributes) -> None:
        for attribute in attributes:
            if isinstance(attribute, SimpleAttribute):
                self.text_append(f" {attribute.name}{simpleValue_get(attribute)}", plain=False)
                continue

            parts = attribute.parts
            if attribute.is_boolean and len(parts) == 1 and isinstance(parts[0], EscapedDirective):
                self.booleanAttribute_append(attribute, parts[0])
                continue

            self.text_append(f" {attribute.name}={attribute.quote}", plain=False)
            self.attributeParts_append(parts, collapse=attribute.name == "class")
            self.text_append(attribute.quote, plain=False)

    def booleanAttribute_append(self, attribute: DynamicAttribute, part: EscapedDirective) -> None:
        """
        Emit a boolean attribute only when its expression is truthy

        ``<a checked="<%= x %>">`` reduces as if it were
        ``<a<% if (x): %> checked<% end %>>``.
        """
        expression = part.content.strip()
        if "#" in expression:
            expression += "\n"
        self.stream.append(EvalDirective(f"if ({expression}):", part.start, part.end))
        self.text_append(f" {attribute.name}", plain=False)
        self.stream.append(EvalDirective("end", part.start, part.end))

    def attributeParts_append(self, parts: Sequence[ValuePart], collapse: bool) -> None:
        for part in parts:
            if isinstance(part, Text):
                text = re.sub(r"\s+", " ", part.content) if collapse else part.content
                self.text_append(text, plain=False)
            elif isinstance(part, EscapedDirective):
                self.instruction_append(part)
            else:
                raise CompileError(
                    f"Unexpected {type(part).__name__} inside an attribute value",
                    self.options.filename,
                    getattr(part, "start", None),
                )


def simpleValue_get(attribute: SimpleAttribute) -> str:
    """
    Serialized ``=value`` suffix of a static attribute ('' when omitted)

    Example:
        >>> simpleValue_get(SimpleAttribute("class", False, "  a   b ", '"'))
        '="a b"'
        >>> simpleValue_get(SimpleAttribute("checked", True, "checked", '"'))
        ''
    """
    value = attribute.value
    if attribute.name == "class":
        value = " ".join(value.split())
    elif value and attribute.is_boolean:
        value = ""

    if not value:
        return ""
    if UNQUOTED_SAFE.match(value):
        return f"={value}"
    quote = attribute.quote or '"'
    return f"={quote}{value}{quote}"


def reduce(tokens, options: Optional[Options] = None, **overrides) -> List[Instruction]:
    """Reduce a token tree into an instruction stream"""
    return Reducer(Options.prepare(options, **overrides)).reduce(tokens)
