"""Fenced code block detection on raw markdown text"""

import re


# A closing fence repeats the opening character at least as many times; an unclosed fence runs to the end.
FENCE_RE = re.compile(
    r'^[ \t]*(?P<fence>(?P<char>[`~])(?P=char){2,})[^\n]*(?:\n|\Z)'
    r'(?:.*?^[ \t]*(?P=fence)(?P=char)*[ \t]*$|.*\Z)',
    re.DOTALL | re.MULTILINE,
)


def fenced_ranges(markdown: str) -> list[tuple[int, int]]:
    """Return (start, end) character offsets of every fenced code block."""
    return [(m.start(), m.end()) for m in FENCE_RE.finditer(markdown)]


def in_ranges(offset: int, ranges: list[tuple[int, int]]) -> bool:
    return any(start <= offset < end for start, end in ranges)
