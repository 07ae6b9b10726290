"""
Code generator

Turns a reduced instruction stream into the Python source of a render
function:

    def __render(locals, render_custom, __e, __l, __s=str):
        locals = {} if locals is None else locals
        __c = locals.get("__contents") or {}
        return "Hi " + __e(name)

A stream without eval directives becomes a single expression. Otherwise
an accumulator ``__o`` is built by a sequence of statements, and eval
directives are spliced in as Python statements. Since Python blocks have
no braces, a directive ending in ``:`` opens a block and ``<% end %>``
closes it; ``else``/``elif``/``except``/``finally`` close the current block
and open the next.

Nested generation (custom element slots, placeholder fallbacks) yields an
expression. When the nested stream needs statements, they build their own
accumulator named after the slot. Those statements are listed in the
returned builder's ``hoisted`` and the enclosing code must emit them at a
statement position before the expression, which is just the accumulator
name. They run in the render function's own scope, like inline directives.

String conversion goes through ``__s``, bound to the builtin ``str`` when
the function is defined, so templates are free to use ``str`` as a name.
"""

import io
import re
import textwrap
import tokenize
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models.options import Options
from ..models.tokens import (
    BuilderDirective,
    Directive,
    EscapedDirective,
    EvalDirective,
    Instruction,
    RawDirective,
    SourcePoint,
)
from .builder import CodeBuilder, builder_create
from .errors import CompileError
from .escape import literal_quote
from .log import LOG


RENDER_FUNCTION = "__render"
RENDER_SIGNATURE = f"def {RENDER_FUNCTION}(locals, render_custom, __e, __l, __s=str):"
ACCUMULATOR = "__o"

CONTINUATION = re.compile(r"(else|elif|except|finally)\b")
BLOCK_END = re.compile(r"end\s*(#.*)?$")

# Lines of an eval directive, each with the point where it starts
StatementLines = List[Tuple[str, SourcePoint]]

# Tokens that carry no code
NON_CODE_TOKENS = (tokenize.COMMENT, tokenize.NL, tokenize.NEWLINE, tokenize.INDENT,
                   tokenize.DEDENT, tokenize.ENDMARKER)


@dataclass
class Block:
    """An open statement block and whether a statement was emitted inside it"""
    opener: Directive
    has_body: bool = False


def lineMarker_get(directive) -> str:
    """
    Statement recording a directive's line range in the line cursor

    Example:
        >>> lineMarker_get(EvalDirective("x", SourcePoint(0, 2, 1), SourcePoint(1, 2, 2)))
        '__l.start = __l.end = 2'
    """
    start, end = directive.start.line, directive.end.line
    if start == end:
        return f"__l.start = __l.end = {end}"
    return f"__l.start, __l.end = {start}, {end}"


def statementLines_get(directive: Directive) -> StatementLines:
    """
    Normalize the code of an eval directive into lines

    Blank leading and trailing lines are dropped, the common indentation is
    removed, the first line is left-stripped and every line right-stripped.
    Each line is returned with the source point of its first kept character.
    """
    raw_lines = directive.content.split("\n")
    kept = [index for index, line in enumerate(raw_lines) if line.strip()]
    if not kept:
        return []

    points = []
    point = directive.start
    for line in raw_lines:
        points.append(point)
        point = point.advanced(line + "\n")

    first, last = kept[0], kept[-1]
    selected = [line.rstrip() for line in raw_lines[first:last + 1]]
    dedented = textwrap.dedent("\n".join(selected)).split("\n")
    dedented[0] = dedented[0].lstrip()

    lines: StatementLines = []
    for index, text in enumerate(dedented):
        original = selected[index]
        skipped = (len(original) - len(original.lstrip())) - (len(text) - len(text.lstrip()))
        lines.append((text, points[first + index].advanced(original[:max(skipped, 0)])))
    return lines


def blockColon_find(code: str) -> Optional[int]:
    """
    Offset of the colon ending ``code`` when it opens a block

    Comments are ignored. Code that cannot be tokenized is reported as not
    opening a block; compiling it will report the actual problem.

    Example:
        >>> blockColon_find("elif x:  # why:")
        6
        >>> blockColon_find("total = items[1:]") is None
        True
    """
    last = None
    try:
        for token in tokenize.generate_tokens(io.StringIO(code).readline):
            if token.type not in NON_CODE_TOKENS:
                last = token
    except (tokenize.TokenError, SyntaxError):
        return None
    if last is None or last.type != tokenize.OP or last.string != ":":
        return None

    row, column = last.start
    lines = code.split("\n")
    return sum(len(line) + 1 for line in lines[:row - 1]) + column


def blockOpen_is(code: str) -> bool:
    """
    Check if Python code ends with a block-opening colon

    Example:
        >>> blockOpen_is("for item in items:  # each")
        True
        >>> blockOpen_is("total = items[1:]")
        False
    """
    return blockColon_find(code) is not None


def statement_is(line: str) -> bool:
    """Check if a code line is a statement rather than blank or a comment"""
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


class CodeGenerator:
    """
    Generator for one render function or nested expression

    Attributes:
        options: Compile options
        nested: Produce an expression for embedding instead of a function
        name: Accumulator used by nested statements
        output: Accumulator name, ``__o`` at the top level
        state: Output position: "very-first" before the accumulator exists,
               "first" at the start of a new output statement, "rest" while
               extending the current output expression
        blocks: Currently open statement blocks, innermost last
    """

    def __init__(self, options: Options, nested: bool = False, name: Optional[str] = None):
        self.options = options
        self.nested = nested
        self.name = name or "__nested"
        self.output = self.name if nested else ACCUMULATOR
        self.state = "very-first"
        self.blocks: List[Block] = []

    def generate(self, stream: Sequence[Instruction]) -> CodeBuilder:
        """
        Generate code for an instruction stream

        Returns:
            Builder holding a function definition (top level) or an
            expression (nested)

        Raises:
            CompileError: On unbalanced blocks or unknown instructions
        """
        if not stream or (len(stream) == 1 and isinstance(stream[0], str)):
            return self.static_build(stream[0] if stream else "")
        if any(isinstance(instruction, EvalDirective) for instruction in stream):
            LOG(f"Generating statements for {len(stream)} instructions", level=3)
            return self.statements_build(stream)
        LOG(f"Generating a single expression for {len(stream)} instructions", level=3)
        return self.expression_build(stream)

    def static_build(self, text: str) -> CodeBuilder:
        builder = builder_create(self.options)
        if not self.nested:
            builder.add(RENDER_SIGNATURE)
            builder.indent()
            builder.line_add()
            builder.add("return ")
        builder.add(literal_quote(text))
        return builder

    def header_add(self, builder: CodeBuilder) -> None:
        """Function signature, context defaults and var bindings"""
        builder.add(RENDER_SIGNATURE)
        builder.indent()
        builder.line_add()
        builder.add("locals = {} if locals is None else locals")
        builder.line_add()
        builder.add('__c = locals.get("__contents") or {}')
        for name in self.options.vars:
            builder.line_add()
            if self.options.strict_mode:
                builder.add(f'{name} = locals["{name}"]')
            else:
                builder.add(f'{name} = locals.get("{name}")')

    def expression_build(self, stream: Sequence[Instruction]) -> CodeBuilder:
        expression = builder_create(self.options)
        hoisted: List[CodeBuilder] = []
        for index, instruction in enumerate(stream):
            if index:
                expression.add(" + ")
            hoisted.extend(self.instruction_add(expression, instruction))

        if self.nested:
            if len(stream) > 1:
                wrapped = builder_create(self.options)
                wrapped.add("(")
                wrapped.builder_add(expression)
                wrapped.add(")")
                expression = wrapped
            expression.hoisted = hoisted
            return expression

        builder = builder_create(self.options)
        self.header_add(builder)
        for statements in hoisted:
            builder.builder_add(statements)
        builder.line_add()
        builder.add("return ")
        builder.builder_add(expression)
        return builder

    def statements_build(self, stream: Sequence[Instruction]) -> CodeBuilder:
        builder = builder_create(self.options)
        if not self.nested:
            self.header_add(builder)

        for instruction in stream:
            if isinstance(instruction, EvalDirective):
                self.statement_add(builder, instruction)
            else:
                self.output_add(builder, instruction)

        if self.blocks:
            opener = self.blocks[-1].opener
            raise CompileError(
                f"Block opened by {opener.content.strip()!r} is never closed with <% end %>",
                self.options.filename,
                opener.start,
            )

        if not self.nested:
            builder.line_add()
            builder.add(f"return {self.output}")
            return builder
        expression = builder_create(self.options)
        expression.add(self.output)
        expression.hoisted = [builder]
        return expression

    def line_start(self, builder: CodeBuilder, statement: bool = True) -> None:
        """Start a line; ``statement`` is False for comment-only lines"""
        builder.line_add()
        if statement and self.blocks:
            self.blocks[-1].has_body = True

    def statement_add(self, builder: CodeBuilder, directive: EvalDirective) -> None:
        """Emit an eval directive, opening or closing blocks as needed"""
        debug = self.options.compile_debug
        lines = statementLines_get(directive)

        if self.state == "very-first":
            self.line_start(builder)
            builder.add(f'{self.output} = ""')
        self.state = "first"
        if not lines:
            return

        first = lines[0][0]
        if len(lines) == 1 and BLOCK_END.match(first):
            if debug:
                self.marker_add(builder, directive)
            self.block_close(builder, directive)
            return

        continuation = CONTINUATION.match(first)
        if continuation:
            self.block_close(builder, directive)
            colon = None
            if len(lines) == 1 and continuation.group(1) == "elif":
                colon = blockColon_find(first)
            if debug and colon is not None:
                # Mark inside the condition: no statement fits between clauses
                text, point = lines[0]
                expression = text[continuation.end():colon]
                leading = len(expression) - len(expression.lstrip())
                self.line_start(builder)
                builder.add(f"elif (__l.mark({directive.start.line}, {directive.end.line}) or (")
                builder.token_add(expression.strip(), point.advanced(text[:continuation.end() + leading]))
                builder.add(")):")
                self.block_open(builder, directive)
                return
            self.lines_add(builder, lines)
            if blockOpen_is("\n".join(text for text, _ in lines)):
                self.block_open(builder, directive)
                if debug:
                    self.marker_add(builder, directive)
            return

        if debug:
            self.marker_add(builder, directive)
        self.lines_add(builder, lines)
        if blockOpen_is("\n".join(text for text, _ in lines)):
            self.block_open(builder, directive)

    def lines_add(self, builder: CodeBuilder, lines: StatementLines) -> None:
        for text, point in lines:
            self.line_start(builder, statement_is(text))
            builder.token_add(text, point)

    def marker_add(self, builder: CodeBuilder, directive) -> None:
        self.line_start(builder)
        builder.add(lineMarker_get(directive))

    def block_open(self, builder: CodeBuilder, directive: Directive) -> None:
        builder.indent()
        self.blocks.append(Block(directive))

    def block_close(self, builder: CodeBuilder, directive: Directive) -> None:
        if not self.blocks:
            keyword = re.split(r"[\s:#]", statementLines_get(directive)[0][0], maxsplit=1)[0]
            raise CompileError(
                f"Unexpected {keyword!r} without an open block",
                self.options.filename,
                directive.start,
            )
        block = self.blocks.pop()
        if not block.has_body:
            builder.line_add()
            builder.add("pass")
        builder.dedent()

    def output_add(self, builder: CodeBuilder, instruction: Instruction) -> None:
        """Emit an output-producing instruction in statement form"""
        if isinstance(instruction, BuilderDirective) and instruction.builder.hoisted:
            if self.state == "rest":
                self.state = "first"
            for statements in instruction.builder.hoisted:
                builder.builder_add(statements)

        if self.state == "very-first":
            self.line_start(builder)
            builder.add(f"{self.output} = ")
        elif self.state == "first":
            self.line_start(builder)
            builder.add(f"{self.output} += ")
        else:
            builder.add(" + ")
        self.instruction_add(builder, instruction)
        self.state = "rest"

    def instruction_add(self, builder: CodeBuilder, instruction: Instruction) -> List[CodeBuilder]:
        """
        Append the expression for one output instruction

        Returns:
            Statements the expression depends on
        """
        if isinstance(instruction, str):
            builder.add(literal_quote(instruction))
            return []

        if isinstance(instruction, BuilderDirective):
            if instruction.is_string:
                builder.builder_add(instruction.builder)
            else:
                builder.add("__s(")
                builder.builder_add(instruction.builder)
                builder.add(")")
            return instruction.builder.hoisted

        if isinstance(instruction, (EscapedDirective, RawDirective)):
            debug = self.options.compile_debug
            if debug:
                builder.add(f"(__l.mark({instruction.start.line}, {instruction.end.line}) or ")
            builder.add("__e(" if isinstance(instruction, EscapedDirective) else "__s(")
            expressionContent_add(builder, instruction)
            builder.add(")")
            if debug:
                builder.add(")")
            return []

        raise CompileError(
            f"Unexpected instruction {type(instruction).__name__} in output position",
            self.options.filename,
            getattr(instruction, "start", None),
        )


def expressionContent_add(builder: CodeBuilder, directive: Directive) -> None:
    """
    Append a directive's expression, trimmed, mapped to its source point

    A trailing comment would swallow the closing parenthesis, so content
    containing '#' is followed by a newline.
    """
    content = directive.content
    expression = content.strip()
    leading = len(content) - len(content.lstrip())
    builder.token_add(expression, directive.start.advanced(content[:leading]))
    if "#" in expression:
        builder.add("\n")


def generate(
    stream: Sequence[Instruction],
    options: Optional[Options] = None,
    nested: bool = False,
    name: Optional[str] = None,
) -> CodeBuilder:
    """Generate the code builder for a reduced instruction stream"""
    return CodeGenerator(Options.prepare(options), nested, name).generate(stream)
