"""
Tolerant parsers for free-text LLM responses
"""
import json
import re
from typing import Any, List

from domain.entities import RecommendedBoard


_ARRAY_RE = re.compile(r"\[[\s\S]*?\]")
_NUMBERING_RE = re.compile(r"^\d+[.)]\s*")
_BULLET_RE = re.compile(r"^[-•*]\s*")
_QUOTES_RE = re.compile(r"^[\"']|[\"']$")


def _as_string_list(values: List[Any]) -> List[str]:
    return [str(v).strip() for v in values if str(v).strip()]


def parse_keywords_response(raw_text: str) -> List[str]:
    """
    Extract keywords from an LLM answer.

    Accepts a JSON array, a JSON array embedded in prose, comma-separated
    text, a numbered/bulleted list, or a short whitespace-separated line.
    """
    if not raw_text or not isinstance(raw_text, str):
        return []

    trimmed = raw_text.strip()

    try:
        parsed = json.loads(trimmed)
        if isinstance(parsed, list):
            return _as_string_list(parsed)
    except json.JSONDecodeError:
        pass

    match = _ARRAY_RE.search(trimmed)
    if match:
        try:
            parsed = json.loads(match.group(0))
            if isinstance(parsed, list):
                return _as_string_list(parsed)
        except json.JSONDecodeError:
            pass

    if "," in trimmed:
        keywords = [_QUOTES_RE.sub("", k.strip()) for k in trimmed.split(",")]
        return [k for k in keywords if 0 < len(k) < 50]

    if "\n" in trimmed:
        keywords = []
        for line in trimmed.split("\n"):
            line = _NUMBERING_RE.sub("", line.strip())
            line = _BULLET_RE.sub("", line).strip()
            if 0 < len(line) < 50:
                keywords.append(line)
        return keywords

    words = trimmed.split()
    if len(words) <= 15 and all(len(w) < 30 for w in words):
        return words

    return []


def _valid_boards(items: List[Any]) -> List[RecommendedBoard]:
    boards = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name, url, reason = item.get("name"), item.get("url"), item.get("reason")
        if not all(isinstance(v, str) for v in (name, url, reason)):
            continue
        name, url, reason = name.strip(), url.strip(), reason.strip()
        if name and url and reason:
            boards.append(RecommendedBoard(name=name, url=url, reason=reason))
    return boards


def parse_boards_response(raw_text: str) -> List[RecommendedBoard]:
    """Extract a JSON array of {name, url, reason} objects, dropping invalid items"""
    if not raw_text or not isinstance(raw_text, str):
        return []

    trimmed = raw_text.strip()

    try:
        parsed = json.loads(trimmed)
        if isinstance(parsed, list):
            return _valid_boards(parsed)
    except json.JSONDecodeError:
        pass

    # Non-greedy matches stop at the first "]", so also try a greedy span
    candidates = _ARRAY_RE.findall(trimmed)
    greedy = re.search(r"\[[\s\S]*\]", trimmed)
    if greedy:
        candidates.append(greedy.group(0))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, list):
            boards = _valid_boards(parsed)
            if boards:
                return boards

    return []
