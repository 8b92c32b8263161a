"""JSON sanitizer: turns raw LLM output into parseable JSON text.

Handles:
  - Markdown fences (```json ... ```), leading or embedded in prose
  - Leading/trailing whitespace and BOM
  - Prose before/after the JSON object or array
  - // line comments and /* block */ comments outside strings
  - Trailing commas before } or ]

Best-effort textual repair only: it never raises and never touches string
contents. Text that is already valid JSON (after fence removal) is returned
unchanged. Parsing and schema checks live in the stage parser.
"""

from __future__ import annotations

import json
import re

_FENCE = "```"
_OPENING_FENCE_LINE = re.compile(r"^```[ \t]*[A-Za-z0-9_+.-]*[ \t]*\r?\n")
_OPENING_FENCE_TAG = re.compile(r"^```[ \t]*(?:jsonc?|json5|javascript|js)\b", re.IGNORECASE)
_FENCED_BLOCK = re.compile(r"```.*?```", re.DOTALL)


def sanitize_json(raw: str) -> str:
    """Extract a JSON document from raw LLM output.

    Repeats the cleanup pass until the text stops changing, so
    ``sanitize_json(sanitize_json(x)) == sanitize_json(x)``. Every pass only
    removes characters, which bounds the loop.
    """
    text = raw or ""
    while True:
        cleaned = _sanitize_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def _sanitize_once(raw: str) -> str:
    text = raw.strip().lstrip("\ufeff").strip()
    if _parses(text):
        return text

    # 1. First fenced block that holds a complete document
    block = _first_parsing_block(text)
    if block is not None:
        return block

    # 2. Strip fences wrapping the whole response
    fenced = text.startswith(_FENCE)
    text = _strip_outer_fences(text)
    if _parses(text):
        return text

    # 3. Fenced block surrounded by prose
    if not fenced:
        text = _extract_embedded_fence(text)
        if _parses(text):
            return text

    # 4. Drop prose before the first opener and after the last closer
    text = _slice_json_span(text)

    # 5. Comments and trailing commas the model hallucinated
    text = _strip_comments(text)
    text = _strip_trailing_commas(text)

    return text.strip()


def _parses(text: str) -> bool:
    if not text:
        return False
    try:
        json.loads(text)
    except (ValueError, RecursionError):
        return False
    return True


def _strip_outer_fences(text: str) -> str:
    while text.startswith(_FENCE):
        match = _OPENING_FENCE_LINE.match(text) or _OPENING_FENCE_TAG.match(text)
        text = text[match.end():] if match else text[len(_FENCE):]
        text = text.strip()
        if text.endswith(_FENCE):
            text = text[: -len(_FENCE)].strip()
    return text


def _first_parsing_block(text: str) -> str | None:
    for match in _FENCED_BLOCK.finditer(text):
        content = _strip_outer_fences(match.group(0))
        if _parses(content):
            return content
    return None


def _extract_embedded_fence(text: str) -> str:
    start = text.find(_FENCE)
    end = text.rfind(_FENCE)
    if start == -1 or end <= start:
        return text
    return _strip_outer_fences(text[start : end + len(_FENCE)])


def _slice_json_span(text: str) -> str:
    spans = []
    for opener, closer in (("{", "}"), ("[", "]")):
        start = text.find(opener)
        if start == -1:
            continue
        end = text.rfind(closer)
        spans.append((start, text[start:] if end < start else text[start : end + 1]))
    if not spans:
        return text
    spans.sort(key=lambda span: span[0])

    # A bracketed citation in prose ("see [1]") must not hide the real document
    repaired = [span for _, span in spans if _parses(_strip_trailing_commas(_strip_comments(span)))]
    if repaired:
        return max(repaired, key=len)
    return spans[0][1]


def _strip_comments(text: str) -> str:
    out: list[str] = []
    i, n = 0, len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue
        if text.startswith("//", i):
            newline = text.find("\n", i)
            if newline == -1:
                break
            i = newline
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            out.append(" ")
            if close == -1:
                break
            i = close + 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _strip_trailing_commas(text: str) -> str:
    out: list[str] = []
    i, n = 0, len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)
