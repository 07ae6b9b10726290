"""
Template error types

- TemplateSyntaxError: malformed template markup, raised while parsing
- CompileError: the template cannot be turned into valid Python
- RenderError: a debug-compiled render function raised while running
"""

from typing import Optional, Tuple

from ..models.tokens import SourcePoint


class TemplateSyntaxError(SyntaxError):
    """
    Malformed template source

    Attributes:
        message: Description of the problem
        position: SourcePoint where the problem was detected
        snippet: Surrounding source lines with the offending line marked
        filename: Template name given in the compile options
    """

    def __init__(
        self,
        message: str,
        position: SourcePoint,
        snippet: str = "",
        filename: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.snippet = snippet
        self.filename = filename
        self.lineno = position.line
        self.offset = position.column

    def __str__(self) -> str:
        if self.snippet:
            return f"{self.message}\n{self.snippet}"
        return self.message


class CompileError(Exception):
    """
    A template that parses but cannot be compiled

    Raised for misplaced slot markers, non-literal slot names, unbalanced
    ``<% end %>`` blocks and directive code that is not valid Python.
    """

    def __init__(
        self,
        message: str,
        filename: str = "ejs",
        position: Optional[SourcePoint] = None,
    ):
        self.message = message
        self.filename = filename
        self.position = position
        where = f"{filename}:{position.line}" if position else filename
        super().__init__(f"{message} (in {where}, while compiling template)")


class RenderError(Exception):
    """
    A failure inside a debug-compiled render function

    The original exception is chained as ``__cause__``.

    Attributes:
        message: str() of the original exception
        filename: Template name given in the compile options
        line_range: (start, end) lines of the last directive entered
        snippet: Source lines around ``line_range``
    """

    def __init__(
        self,
        message: str,
        filename: str,
        line_range: Tuple[int, int],
        snippet: str,
    ):
        self.message = message
        self.filename = filename
        self.line_range = line_range
        self.snippet = snippet
        super().__init__(f"{filename}:{line_range[0]}\n{snippet}\n\n{message}")


# Embedded into standalone modules, which cannot import this package
RENDER_ERROR_STANDALONE_CODE = '''class RenderError(Exception):
    def __init__(self, message, filename, line_range, snippet):
        self.message = message
        self.filename = filename
        self.line_range = line_range
        self.snippet = snippet
        super().__init__("%s:%d\\n%s\\n\\n%s" % (filename, line_range[0], snippet, message))
'''
