"""
ejshtml - EJS-flavoured HTML template compiler

Compiles HTML templates with embedded Python directives into render functions.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .parser import Parser, parse
from .reducer import Reducer, reduce
from .generator import CodeGenerator, generate
from .builder import BuildResult, CodeBuilder, PositionMapBuilder, builder_create
from .compiler import RenderProcedure, compile, compile_standalone, render
from .engine import Engine, EngineError, render_file
from .errors import CompileError, RenderError, TemplateSyntaxError
from .runtime import LineCursor
from .snippet import snippet_get
from .log import LOG, state_connectToLogger
from . import escape

__all__ = [
    "Parser",
    "parse",
    "Reducer",
    "reduce",
    "CodeGenerator",
    "generate",
    "BuildResult",
    "CodeBuilder",
    "PositionMapBuilder",
    "builder_create",
    "RenderProcedure",
    "compile",
    "compile_standalone",
    "render",
    "Engine",
    "EngineError",
    "render_file",
    "CompileError",
    "RenderError",
    "TemplateSyntaxError",
    "LineCursor",
    "snippet_get",
    "escape",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
