"""
Custom element expansion

A custom element (a tag name containing '-') is not written out as markup.
It becomes a call to the ``render_custom`` callback given at render time:

    <my-tag user-name="<%= user %>" open>Hi</my-tag>

    render_custom("my-tag", {"userName": user, "open": True,
                             "__contents": {"": "Hi"}})

Children go to content slots: those inside ``<eh-content name="x">`` to
slot "x", everything else to the unnamed slot "". Inside the custom
element's own template, ``<eh-placeholder name="x">fallback</eh-placeholder>``
outputs the slot content, or the fallback when that content is blank.
"""

import re
from typing import Dict, List

from ..models.elements import CONTENT_ELEMENT
from ..models.options import Options
from ..models.tokens import (
    BuilderDirective,
    DynamicAttribute,
    Element,
    EscapedDirective,
    SimpleAttribute,
    Text,
    Token,
)
from .builder import CodeBuilder, builder_create
from .errors import CompileError
from .escape import literal_quote
from .generator import expressionContent_add, generate
from .log import LOG


def camelCase_make(name: str) -> str:
    """
    Turn a dashed attribute name into camel case

    Example:
        >>> camelCase_make("user-name")
        'userName'
    """
    return re.sub(r"-([a-z])", lambda match: match.group(1).upper(), name)


def nameAttribute_get(element: Element, options: Options) -> str:
    """
    Value of the ``name`` attribute of a slot marker or placeholder

    Returns:
        The literal value, or '' when the attribute is absent

    Raises:
        CompileError: If the value is not a literal
    """
    for attribute in element.attributes:
        if attribute.name == "name":
            if not isinstance(attribute, SimpleAttribute):
                raise CompileError(
                    f"name attribute of <{element.name}> must be a literal value",
                    options.filename,
                    element.start,
                )
            return attribute.value
    return ""


def contents_split(children: List[Token], options: Options) -> Dict[str, List[Token]]:
    """
    Group a custom element's children by content slot

    Slots appear in the order they are first seen.
    """
    contents: Dict[str, List[Token]] = {}
    for token in children:
        if isinstance(token, Element) and token.name == CONTENT_ELEMENT:
            contents.setdefault(nameAttribute_get(token, options), []).extend(token.children)
        else:
            contents.setdefault("", []).append(token)
    return contents


def value_add(builder: CodeBuilder, part: EscapedDirective, options: Options) -> None:
    """Append a directive's expression value, unconverted"""
    if options.compile_debug:
        builder.add(f"(__l.mark({part.start.line}, {part.end.line}) or (")
        expressionContent_add(builder, part)
        builder.add("))")
    else:
        builder.add("(")
        expressionContent_add(builder, part)
        builder.add(")")


def attributeValue_add(builder: CodeBuilder, element: Element, attribute, options: Options) -> None:
    """
    Append the value passed for one attribute

    - bare attribute (``<my-tag open>``): True
    - static value: the string
    - a single directive: its value, not converted to str
    - text mixed with directives: string concatenation
    """
    if isinstance(attribute, SimpleAttribute):
        if attribute.quote == "" and attribute.value == "":
            builder.add("True")
        else:
            builder.add(literal_quote(attribute.value))
        return

    parts = attribute.parts
    if len(parts) == 1 and isinstance(parts[0], EscapedDirective):
        value_add(builder, parts[0], options)
        return

    for index, part in enumerate(parts):
        if index:
            builder.add(" + ")
        if isinstance(part, Text):
            builder.add(literal_quote(part.content))
        elif isinstance(part, EscapedDirective):
            builder.add("__s(")
            value_add(builder, part, options)
            builder.add(")")
        else:
            raise CompileError(
                f"Only escaped directives are allowed in attribute values of <{element.name}>",
                options.filename,
                element.start,
            )


def customElement_expand(element: Element, options: Options) -> BuilderDirective:
    """
    Expand a custom element into a ``render_custom`` call

    Args:
        element: Element whose name contains '-'
        options: Compile options

    Returns:
        Builder instruction evaluating to the callback's result
    """
    from .reducer import reduce

    builder = builder_create(options)
    if options.compile_debug:
        builder.add(f"__l.invoke({element.start.line}, {element.end.line}, render_custom, ")
    else:
        builder.add("render_custom(")
    builder.add(f"{literal_quote(element.name)}, {{")

    for attribute in element.attributes:
        builder.add(f"{literal_quote(camelCase_make(attribute.name))}: ")
        attributeValue_add(builder, element, attribute, options)
        builder.add(", ")

    builder.add('"__contents": {')
    for index, (slot, tokens) in enumerate(contents_split(element.children, options).items()):
        content = generate(
            reduce(tokens, options),
            options,
            nested=True,
            name=f"__content_{element.start.offset}_{index}",
        )
        builder.add(f"{literal_quote(slot)}: ")
        builder.builder_add(content)
        builder.hoisted.extend(content.hoisted)
        builder.add(", ")
    builder.add("}})")

    LOG(f"Expanded custom element <{element.name}> at line {element.start.line}", level=3)
    return BuilderDirective(builder, element.start, element.end, is_string=False)


def placeholder_expand(element: Element, options: Options) -> BuilderDirective:
    """
    Expand a placeholder into slot content with a fallback

    The slot content supplied through ``locals["__contents"]`` is used
    unless it is missing, empty or only whitespace. Fallback statements only
    run when the fallback is used.
    """
    from .reducer import reduce

    key = literal_quote(nameAttribute_get(element, options))
    fallback = generate(
        reduce(element.children, options),
        options,
        nested=True,
        name=f"__fallback_{element.start.offset}",
    )

    filled = f'(__c.get({key}) or "").strip()'
    builder = builder_create(options)
    if fallback.hoisted:
        guard = builder_create(options)
        guard.line_add()
        guard.add(f"if not {filled}:")
        guard.indent()
        for statements in fallback.hoisted:
            guard.builder_add(statements)
        guard.dedent()
        builder.hoisted.append(guard)
    builder.add(f"(__c[{key}] if {filled} else ")
    builder.builder_add(fallback)
    builder.add(")")
    return BuilderDirective(builder, element.start, element.end, is_string=True)
