"""
Source snippets for diagnostics

Shared by parse errors and render errors: the lines around a range, with
the lines of the range itself marked ``>>``.
"""


def snippet_get(source: str, line_start: int, line_end: int) -> str:
    """
    Extract the lines around a range of the source.

    Two lines of context are shown on each side.

    Args:
        source: Template source
        line_start: First line of the range (1-based)
        line_end: Last line of the range (1-based, inclusive)

    Returns:
        One text line per source line, formatted as `` N >> | text`` inside
        the range and `` N    | text`` outside it

    Example:
        >>> print(snippet_get("a\\nb\\nc", 2, 2))
         1    | a
         2 >> | b
         3    | c
    """
    lines = source.split("\n")
    first = max(1, line_start - 2) - 1
    last = min(len(lines), line_end + 2)
    rendered = []
    for number, text in enumerate(lines[first:last], start=first + 1):
        marker = ">>" if line_start <= number <= line_end else "  "
        rendered.append(f" {number} {marker} | {text}")
    return "\n".join(rendered)


# Embedded into standalone modules, which cannot import this package
SNIPPET_STANDALONE_CODE = '''def _snippet(source, line_start, line_end):
    lines = source.split("\\n")
    first = max(1, line_start - 2) - 1
    last = min(len(lines), line_end + 2)
    rendered = []
    for number, text in enumerate(lines[first:last], start=first + 1):
        marker = ">>" if line_start <= number <= line_end else "  "
        rendered.append(" %d %s | %s" % (number, marker, text))
    return "\\n".join(rendered)
'''
