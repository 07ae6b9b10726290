"""
Render-time support objects

A debug-compiled render function receives a LineCursor as its ``__l``
argument and updates it before each directive runs. When the function
raises, the caller reads the cursor to tell which template lines failed.
"""

from typing import Any, Callable


class LineCursor:
    """
    The line range of the directive currently executing

    Attributes:
        start: First template line of the directive
        end: Last template line of the directive
    """

    __slots__ = ("start", "end")

    def __init__(self):
        self.start = 0
        self.end = 0

    def mark(self, start: int, end: int) -> None:
        """
        Record a range from inside an expression.

        Returns None so generated code can write ``(__l.mark(1, 1) or expr)``.
        """
        self.start = start
        self.end = end

    def invoke(self, start: int, end: int, function: Callable[..., Any], *args: Any) -> Any:
        """Record a range, then call ``function(*args)``"""
        self.start = start
        self.end = end
        return function(*args)

    def __repr__(self) -> str:
        return f"LineCursor(start={self.start}, end={self.end})"


# Embedded into standalone modules, which cannot import this package
LINE_CURSOR_STANDALONE_CODE = '''class _LineCursor:
    __slots__ = ("start", "end")

    def __init__(self):
        self.start = 0
        self.end = 0

    def mark(self, start, end):
        self.start = start
        self.end = end

    def invoke(self, start, end, function, *args):
        self.start = start
        self.end = end
        return function(*args)
'''
