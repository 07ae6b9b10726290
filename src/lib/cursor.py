"""
Source position tracking

SourceCursor walks forward over a template source, keeping the offset,
line and column in sync so that every token can be stamped with exact
SourcePoints.
"""

import re
from typing import Optional

from ..models.tokens import SourcePoint


class SourceCursor:
    """
    Forward-only cursor over a source string

    Attributes:
        source: Text being scanned
        offset: Zero-based character offset of the cursor
        line: One-based line of the cursor
        column: One-based column of the cursor
    """

    def __init__(self, source: str):
        self.source = source
        self.offset = 0
        self.line = 1
        self.column = 1

    def point_get(self) -> SourcePoint:
        return SourcePoint(self.offset, self.line, self.column)

    def end_is(self) -> bool:
        return self.offset >= len(self.source)

    def position_advanceTo(self, offset: int) -> None:
        """
        Move the cursor forward to ``offset``, counting lines on the way.

        Raises:
            ValueError: If ``offset`` lies before the current position
        """
        if offset < self.offset:
            raise ValueError(f"Cannot move cursor back from {self.offset} to {offset}")
        chunk = self.source[self.offset:offset]
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(chunk) - chunk.rfind("\n")
        else:
            self.column += len(chunk)
        self.offset = offset

    def pattern_search(self, pattern: re.Pattern) -> Optional[re.Match]:
        """Find the next match of ``pattern`` at or after the cursor"""
        return pattern.search(self.source, self.offset)

    def pattern_match(self, pattern: re.Pattern) -> Optional[re.Match]:
        """Match ``pattern`` anchored at the cursor"""
        return pattern.match(self.source, self.offset)
