"""Turn a pull request body written in markdown into commit message text."""

from __future__ import annotations

import re

FENCE = "```"
SCRATCH_MARKER = "---"

_HEADING = re.compile(r"^(#+)\s+(\S.*)$")
_TRAILER = re.compile(r"^[A-Za-z][A-Za-z0-9-]*: \S")


def normalize_markdown(text: str) -> str:
    """Rewrite markdown as plain text suited to a commit message.

    Line by line:
    - ``# Title`` becomes ``Title`` underlined with ``=``; deeper
      headings are underlined with ``-``.
    - Fence lines are dropped and the fenced lines indented by four
      spaces.
    - Runs of blank lines collapse to one. Headings, and text after a
      closing fence, get a blank line before them unless one is
      already there.
    - A ``---`` line right after a blank line ends the message; it and
      everything below are reviewer notes.
    - Trailing blank lines are removed.
    """
    out: list[str] = []
    in_code = False
    force_blank = False
    previous_blank = False

    for raw in text.splitlines():
        line = raw.rstrip()

        if line == FENCE:
            in_code = not in_code
            if not in_code:
                force_blank = True
            previous_blank = False
            continue

        if in_code:
            out.append("    " + line if line else "")
            previous_blank = not line
            continue

        if line == SCRATCH_MARKER and previous_blank:
            break

        if not line:
            if out and out[-1]:
                out.append("")
            # A real blank line satisfies any pending forced one
            force_blank = False
            previous_blank = True
            continue

        previous_blank = False
        heading = _HEADING.match(line)
        if heading:
            title = heading.group(2).strip()
            if out and out[-1]:
                out.append("")
            underline = "=" if len(heading.group(1)) == 1 else "-"
            out.append(title)
            out.append(underline * len(title))
            force_blank = False
            continue

        if force_blank and out and out[-1]:
            out.append("")
        force_blank = False
        out.append(line)

    while out and not out[-1]:
        out.pop()
    return "\n".join(out)


def split_trailers(text: str) -> tuple[str, list[str]]:
    """Separate a trailing block of ``Key: value`` lines from text.

    Only the last paragraph is considered, and only when every line in
    it is a trailer.

    Returns:
        (text without the trailer block, trailer lines)
    """
    lines = text.splitlines()
    start = len(lines)
    while start > 0 and lines[start - 1].strip():
        start -= 1

    block = lines[start:]
    if not block or not all(_TRAILER.match(line) for line in block):
        return text, []

    rest = lines[:start]
    while rest and not rest[-1].strip():
        rest.pop()
    return "\n".join(rest), block
