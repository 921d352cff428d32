from __future__ import annotations

from typing import List


def line_text(code: str, line: int) -> str:
    lines = code.splitlines()
    if line < 0 or line >= len(lines):
        return ""
    return lines[line]


def text_before_cursor(code: str, line: int, character: int) -> str:
    text = line_text(code, line)
    return text[: max(0, character)]


def lines_to_cursor(code: str, line: int, character: int) -> List[str]:
    """Return the document lines up to the cursor, the last one cut at the cursor."""
    lines = code.splitlines()
    if line < 0:
        return []
    if line >= len(lines):
        # cursor on a trailing empty line
        return lines + [""] * (line - len(lines) + 1)
    view = lines[: line + 1]
    view[line] = view[line][: max(0, character)]
    return view


def word_at_position(text: str, cursor: int) -> tuple[str, int, int]:
    cursor = max(0, min(cursor, len(text)))
    start = cursor
    while start > 0 and (text[start - 1].isalnum() or text[start - 1] == "_"):
        start -= 1
    end = cursor
    while end < len(text) and (text[end].isalnum() or text[end] == "_"):
        end += 1
    return text[start:end], start, end


def word_at(code: str, line: int, character: int) -> str:
    return word_at_position(line_text(code, line), character)[0]
