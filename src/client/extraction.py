"""Isolate source code from a model response that may be markdown-fenced.

Grammar: an opening fence of three or more backticks, an optional language
tag (``[\\w-]+``), optional whitespace, the body, then a closing fence of three
or more backticks.

One pass, in fallback order:

1. the body of the first fenced block, if that body is non-empty;
2. otherwise the text with an opening fence removed from its very start and a
   closing fence removed from its very end;
3. trimmed.

Passes repeat until the text stops changing. Each pass yields a trimmed
substring of its input, so the loop terminates and extracting an extracted
value is a no-op.
"""

from __future__ import annotations

import re


_FENCED_BLOCK = re.compile(r"`{3,}(?:[\w-]+)?\s*\n?(?P<body>.*?)\s*`{3,}", re.DOTALL)
_OPENING_FENCE = re.compile(r"\A`{3,}(?:[\w-]+)?\s*\n?")
_CLOSING_FENCE = re.compile(r"\n?`{3,}\s*\Z")


def _extract_once(text: str) -> str:
    block = _FENCED_BLOCK.search(text)
    if block and block.group("body"):
        return block.group("body").strip()
    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


def extract_code(raw: str | None) -> str:
    """Return the source code contained in ``raw``.

    Unfenced input comes back trimmed; ``None`` and empty input give ``""``.
    """
    if not raw:
        return ""
    current = str(raw)
    while True:
        extracted = _extract_once(current)
        if extracted == current:
            return extracted
        current = extracted
