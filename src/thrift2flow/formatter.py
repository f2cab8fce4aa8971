"""Light-weight layout pass over generated Flow source.

Collapses runs of blank lines, strips trailing whitespace and re-indents
lines by bracket depth. Token content is never changed.
"""

from __future__ import annotations

from typing import List, Tuple

INDENT = "  "

_OPENERS = "{(["
_CLOSERS = "})]"


def format_flow(source: str) -> str:
    """Normalise the layout of a generated Flow document."""
    lines: List[str] = []
    pending_blank = False
    for raw in source.splitlines():
        stripped = raw.strip()
        if not stripped:
            pending_blank = bool(lines)
            continue
        if pending_blank:
            lines.append("")
            pending_blank = False
        lines.append(stripped)

    return "\n".join(_reindent(lines)) + "\n"


def _reindent(lines: List[str]) -> List[str]:
    result: List[str] = []
    depth = 0
    for line in lines:
        if not line:
            result.append("")
            continue
        if line.startswith("//"):
            result.append(INDENT * depth + line)
            continue

        opens, closes, leading = _scan_brackets(line)
        result.append(INDENT * max(depth - leading, 0) + line)
        depth = max(depth + opens - closes, 0)
    return result


def _scan_brackets(line: str) -> Tuple[int, int, int]:
    """Count (openers, closers, leading closers) outside string literals.

    Leading closers are those before any other token on the line; ``|`` of
    an exact object type (``|}``) does not end the leading run.
    """
    opens = closes = leading = 0
    in_leading = True
    quote = ""
    escaped = False

    for ch in line:
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = ""
            continue

        if ch in ("'", '"'):
            quote = ch
            in_leading = False
        elif ch in _OPENERS:
            opens += 1
            in_leading = False
        elif ch in _CLOSERS:
            closes += 1
            if in_leading:
                leading += 1
        elif ch not in "| ":
            in_leading = False

    return opens, closes, leading
