"""
ejshtml - EJS-flavoured HTML template compiler

Turns HTML templates with embedded Python directives into render functions,
or into standalone Python modules.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .lib import (
    parse,
    reduce,
    generate,
    compile,
    compile_standalone,
    render,
    render_file,
    Engine,
    RenderProcedure,
    CompileError,
    RenderError,
    TemplateSyntaxError,
    escape,
    LOG,
    state_connectToLogger,
)
from .models import Options

__all__ = [
    "parse",
    "reduce",
    "generate",
    "compile",
    "compile_standalone",
    "render",
    "render_file",
    "Engine",
    "RenderProcedure",
    "CompileError",
    "RenderError",
    "TemplateSyntaxError",
    "escape",
    "Options",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
