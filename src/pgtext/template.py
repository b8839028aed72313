"""Query templating: textual ``?`` substitution.

This is plain string assembly, not a bound-parameter query. Arguments are
inserted verbatim, with no quoting or escaping, so callers are responsible
for anything that reaches the template from untrusted input.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from pgtext.errors import TemplateError

NOT_ENOUGH_ARGUMENTS = "Not enough arguments for format."

# Pre-compiled regex for placeholder scanning
_PLACEHOLDER_RE = re.compile(r"\?")


def _terminated(template: str) -> str:
    """Cut ``template`` at the first NUL, where scanning stops."""
    end = template.find("\0")
    return template if end == -1 else template[:end]


def placeholder_count(template: str) -> int:
    """Count the ``?`` placeholders that ``build`` would substitute."""
    return _terminated(template).count("?")


def build(template: str, args: Sequence[str]) -> str:
    """Replace each ``?`` in ``template`` with the next element of ``args``.

    Extra trailing arguments are ignored. A template without placeholders is
    returned as-is.

    Raises:
        TemplateError: ``template`` has more placeholders than ``args``.
    """
    text = _terminated(template)
    if "?" not in text:
        return text

    pieces: list[str] = []
    start = 0
    for arg_pos, match in enumerate(_PLACEHOLDER_RE.finditer(text)):
        if arg_pos == len(args):
            raise TemplateError(NOT_ENOUGH_ARGUMENTS)
        pieces.append(text[start : match.start()])
        pieces.append(args[arg_pos])
        start = match.end()
    pieces.append(text[start:])
    return "".join(pieces)
