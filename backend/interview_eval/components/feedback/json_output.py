"""Parse JSON objects out of free-form model output.

Models wrap JSON in prose or code fences often enough that a plain
``json.loads`` is not sufficient. Parsing returns a tagged result instead of
raising so callers can decide whether to retry.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Union

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)```")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*?\}")
_GREEDY_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class Parsed:
    data: Dict[str, Any]


@dataclass(frozen=True)
class ParseFailure:
    reason: str
    raw: str = field(default="", repr=False)


ParseResult = Union[Parsed, ParseFailure]


def _load_object(text: str) -> Dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def _has_fields(text: str, required: Sequence[str]) -> bool:
    return all(f'"{name}"' in text for name in required)


def extract_json_object(raw: str, required: Sequence[str] = ()) -> ParseResult:
    """Find a JSON object in ``raw``.

    Tried in order: the trimmed body itself, the first fenced code block, then
    the first ``{...}`` span that mentions every required field name.
    """
    text = (raw or "").strip()
    if not text:
        return ParseFailure("empty response", raw or "")

    if text.startswith("{") and text.endswith("}"):
        data = _load_object(text)
        if data is not None:
            return Parsed(data)

    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        data = _load_object(fenced.group(1).strip())
        if data is not None:
            return Parsed(data)

    # Flat objects first; nested payloads (competency scores) need the greedy span.
    for pattern in (_OBJECT_SPAN, _GREEDY_OBJECT_SPAN):
        for match in pattern.finditer(text):
            span = match.group()
            if required and not _has_fields(span, required):
                continue
            data = _load_object(span)
            if data is not None:
                return Parsed(data)

    return ParseFailure("no JSON object found", raw)


def require_text_fields(data: Dict[str, Any], names: Sequence[str]) -> ParseResult:
    """Check that every field in ``names`` is a non-empty string."""
    cleaned: Dict[str, Any] = dict(data)
    for name in names:
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            return ParseFailure(f"missing or empty field: {name}", json.dumps(data, ensure_ascii=False))
        cleaned[name] = value.strip()
    return Parsed(cleaned)
