"""
Template compiler

Runs the whole pipeline: parse, optional transformer, reduce, generate.
The generated code is then either evaluated into a RenderProcedure or
wrapped into a standalone Python module.

Example:
    >>> render_page = compile("Hi <b><%= name %></b>!", vars=["name"])
    >>> render_page({"name": "Gui"})
    'Hi <b>Gui</b>!'
"""

import builtins
import linecache
from typing import Any, Callable, Dict, Mapping, Optional

from ..models.options import Options
from .builder import BuildResult, CodeBuilder, builder_create
from .errors import RENDER_ERROR_STANDALONE_CODE, CompileError, RenderError
from .escape import HTML_STANDALONE_CODE, html, literal_quote
from .generator import RENDER_FUNCTION, generate
from .log import LOG
from .parser import parse
from .reducer import reduce
from .runtime import LINE_CURSOR_STANDALONE_CODE, LineCursor
from .snippet import SNIPPET_STANDALONE_CODE, snippet_get


CustomRender = Callable[[str, Dict[str, Any]], Any]


def template_generate(source: str, options: Options) -> CodeBuilder:
    """
    Parse, transform, reduce and generate the render function for a source

    Returns:
        Builder holding the ``__render`` function definition
    """
    tokens = parse(source, options)
    if options.transformer:
        transformed = options.transformer(tokens)
        if transformed is not None:
            tokens = transformed
    return generate(reduce(tokens, options), options)


def code_evaluate(code: str, options: Options) -> Callable[..., str]:
    """
    Compile generated code and return its render function

    The code is registered with linecache so that tracebacks through the
    render function show the generated lines.

    Raises:
        CompileError: If the generated code is not valid Python
    """
    filename = f"<template {options.filename}>"
    try:
        compiled = builtins.compile(code, filename, "exec")
    except SyntaxError as error:
        raise CompileError(
            f"{error.msg} at line {error.lineno} of the generated code",
            options.filename,
        ) from error
    linecache.cache[filename] = (len(code), None, code.splitlines(True), filename)

    namespace: Dict[str, Any] = {}
    exec(compiled, namespace)
    return namespace[RENDER_FUNCTION]


class RenderProcedure:
    """
    A compiled template

    Call it with the render context and an optional custom element callback:

        procedure(locals=None, render_custom=None) -> str

    Attributes:
        source: Template source
        options: Options it was compiled with
        code: Generated Python source of the render function
    """

    def __init__(self, source: str, options: Options, code: str, function: Callable[..., str]):
        self.source = source
        self.options = options
        self.code = code
        self.function = function

    def __call__(
        self,
        locals: Optional[Mapping[str, Any]] = None,
        render_custom: Optional[CustomRender] = None,
    ) -> str:
        """
        Render the template

        Raises:
            RenderError: When compiled with ``compile_debug`` and rendering
                         fails; the original error is the ``__cause__``
        """
        if not self.options.compile_debug:
            return self.function(locals, render_custom, html, None)

        cursor = LineCursor()
        try:
            return self.function(locals, render_custom, html, cursor)
        except Exception as error:
            raise RenderError(
                str(error),
                self.options.filename,
                (cursor.start, cursor.end),
                snippet_get(self.source, cursor.start, cursor.end),
            ) from error

    def __repr__(self) -> str:
        return f"RenderProcedure(filename={self.options.filename!r})"


def compile(source: str, options: Optional[Options] = None, **overrides: Any) -> RenderProcedure:
    """
    Compile a template into a render procedure

    Args:
        source: Template source
        options: Options instance or mapping
        **overrides: Option fields (compile_debug, filename, vars, ...)

    Raises:
        TemplateSyntaxError: On malformed markup
        CompileError: When the template cannot become valid Python
    """
    options = Options.prepare(options, **overrides)
    code = template_generate(source, options).code_get()
    LOG(f"Compiled {options.filename} into {len(code.splitlines())} lines of Python", level=2)
    return RenderProcedure(source, options, code, code_evaluate(code, options))


def compile_standalone(source: str, options: Optional[Options] = None, **overrides: Any) -> BuildResult:
    """
    Compile a template into the source of a self-contained Python module

    The module defines ``render(locals=None, render_custom=None)`` and does
    not import this package. With ``source_map`` the result also carries
    position maps for the whole module.

    Example:
        >>> namespace = {}
        >>> exec(compile_standalone("Hi <%= name %>", vars=["name"]).code, namespace)
        >>> namespace["render"]({"name": "Gui"})
        'Hi Gui'
    """
    options = Options.prepare(options, **overrides)
    function = template_generate(source, options)

    builder = builder_create(options)
    builder.add(f"# Render function compiled from {options.filename!r}\n\n")
    builder.add(HTML_STANDALONE_CODE)
    if options.compile_debug:
        builder.add("\n\n" + SNIPPET_STANDALONE_CODE)
        builder.add("\n\n" + LINE_CURSOR_STANDALONE_CODE)
        builder.add("\n\n" + RENDER_ERROR_STANDALONE_CODE)
        builder.add(f"\n\n_source = {literal_quote(source)}\n")
        builder.add(f"_filename = {literal_quote(options.filename)}\n")
    builder.add("\n\n")
    builder.builder_add(function)
    builder.add("\n\n\ndef render(locals=None, render_custom=None):\n")
    if options.compile_debug:
        builder.add(
            "    line = _LineCursor()\n"
            "    try:\n"
            f"        return {RENDER_FUNCTION}(locals, render_custom, _escape, line)\n"
            "    except Exception as error:\n"
            "        snippet = _snippet(_source, line.start, line.end)\n"
            "        raise RenderError(str(error), _filename, (line.start, line.end), snippet) from error\n"
        )
    else:
        builder.add(f"    return {RENDER_FUNCTION}(locals, render_custom, _escape, None)\n")

    result = builder.build(source)
    LOG(f"Compiled {options.filename} into a standalone module", level=2)
    return result


def render(
    source: str,
    locals: Optional[Mapping[str, Any]] = None,
    render_custom: Optional[CustomRender] = None,
    **overrides: Any,
) -> str:
    """Compile and render a template in one call"""
    return compile(source, **overrides)(locals, render_custom)
