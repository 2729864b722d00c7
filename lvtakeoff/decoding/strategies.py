"""Pure text -> value steps used to recover JSON from model output.

Candidate extraction narrows free text down to a few JSON-looking spans. The
``parse_*`` strategies each return the parsed object or array, or ``None``
when they cannot; the decoder tries them in order.
"""

import json
import re
from collections.abc import Iterator
from typing import Any

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)

_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RUN = re.compile(r"\s+")
_BARE_KEY = re.compile(r"([{,])\s*([A-Za-z_]\w*)\s*:")
_SINGLE_QUOTED_KEY = re.compile(r"([{,])\s*'([^'\"]*)'\s*:")
_SINGLE_QUOTED_VALUE = re.compile(r":\s*'([^'\"]*)'")

_SUMMARY_BLOCK = re.compile(r'"summary"\s*:\s*\{([^}]+)\}')
_COUNT_ENTRY = re.compile(r'"([^"]+)"\s*:\s*(\d+)')

MAX_FALLBACK_COUNT = 9999
MAX_BALANCED_SPANS = 8

DEFAULT_DEVICE_PATTERNS: tuple[str, ...] = (
    r"Data Outlet",
    r"Voice Outlet",
    r"WAP",
    r"Smoke Detector",
    r"Card Reader",
    r"Dome Camera",
    r"Horn.?Strobe",
    r"Pull Station",
    r"REX",
    r"Door Contact",
)

_STRUCTURAL_OPENERS = ("{", "[")


def strip_outer_fence(text: str) -> str:
    """Remove a fence opening the text and a fence closing it."""
    stripped = _LEADING_FENCE.sub("", text.strip())
    return _TRAILING_FENCE.sub("", stripped).strip()


def find_fenced_block(text: str) -> str | None:
    """Return the contents of the first fenced block anywhere in the text."""
    match = _FENCED_BLOCK.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def _next_opener(text: str, position: int) -> int | None:
    openers = (text.find("{", position), text.find("[", position))
    starts = [index for index in openers if index >= 0]
    return min(starts) if starts else None


def _balanced_end(text: str, start: int) -> int:
    """Index just past the structure opening at ``start``, or ``len(text)``."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return index + 1
    return len(text)


def slice_balanced(text: str) -> str | None:
    """Slice the first top-level object or array out of the text.

    Braces inside double-quoted strings are ignored, honouring backslash
    escapes. When the structure never closes, the span runs to the end of
    the text. Returns None when no ``{`` or ``[`` occurs at all.
    """
    start = _next_opener(text, 0)
    if start is None:
        return None
    return text[start:_balanced_end(text, start)]


def iter_balanced_spans(text: str, limit: int = MAX_BALANCED_SPANS) -> Iterator[str]:
    """Yield consecutive top-level objects or arrays, left to right."""
    position = 0
    for _ in range(limit):
        start = _next_opener(text, position)
        if start is None:
            return
        position = _balanced_end(text, start)
        yield text[start:position]


def extract_candidate(text: str) -> str:
    """Narrow raw model output down to the most likely JSON span."""
    candidate = strip_outer_fence(text)
    if not candidate.startswith(_STRUCTURAL_OPENERS):
        block = find_fenced_block(text)
        if block is not None:
            candidate = block
    sliced = slice_balanced(candidate)
    return sliced if sliced is not None else candidate


def candidate_spans(text: str) -> list[str]:
    """Return distinct JSON candidates, most likely first.

    The fenced or leading span comes first. The top-level spans of the
    whole text follow, for fences whose contents hold a literal fence and
    for prose that brackets something ahead of the real object.
    """
    candidates = [extract_candidate(text)]
    for span in iter_balanced_spans(strip_outer_fence(text)):
        if span not in candidates:
            candidates.append(span)
    return candidates


def conservative_repair(text: str) -> str:
    text = _TRAILING_COMMA.sub(r"\1", text)
    text = text.replace("\r\n", "\n").replace("\t", " ")
    return text.strip()


def aggressive_repair(text: str) -> str:
    text = _CONTROL_CHARS.sub(" ", text)
    text = _WHITESPACE_RUN.sub(" ", text)
    text = _TRAILING_COMMA.sub(r"\1", text)
    text = _SINGLE_QUOTED_KEY.sub(r'\1"\2":', text)
    text = _BARE_KEY.sub(r'\1"\2":', text)
    text = _SINGLE_QUOTED_VALUE.sub(r':"\1"', text)
    return text.strip()


def _load_structured(text: str) -> dict[str, Any] | list[Any] | None:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if isinstance(value, (dict, list)):
        return value
    return None


def parse_direct(candidate: str) -> dict[str, Any] | list[Any] | None:
    return _load_structured(candidate)


def parse_conservative(candidate: str) -> dict[str, Any] | list[Any] | None:
    return _load_structured(conservative_repair(candidate))


def parse_aggressive(candidate: str) -> dict[str, Any] | list[Any] | None:
    return _load_structured(aggressive_repair(conservative_repair(candidate)))


def extract_device_counts(
    text: str,
    device_patterns: tuple[str, ...] = DEFAULT_DEVICE_PATTERNS,
) -> dict[str, int]:
    """Pull ``"<Device>": <int>`` pairs out of text that would not parse.

    Reads every entry of a ``"summary": {...}`` block, then any known device
    name anywhere in the text. Counts outside 1..9999 are ignored.
    """
    counts: dict[str, int] = {}

    summary = _SUMMARY_BLOCK.search(text)
    if summary is not None:
        for name, raw_value in _COUNT_ENTRY.findall(summary.group(1)):
            _record_count(counts, name, raw_value)

    if device_patterns:
        device_entry = re.compile(
            r'"(' + "|".join(device_patterns) + r')"\s*:\s*(\d+)',
            re.IGNORECASE,
        )
        for name, raw_value in device_entry.findall(text):
            _record_count(counts, name, raw_value)
    return counts


def _record_count(counts: dict[str, int], name: str, raw_value: str) -> None:
    value = int(raw_value)
    if 0 < value <= MAX_FALLBACK_COUNT:
        counts[name.strip()] = value
