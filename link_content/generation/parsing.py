"""
Provider response parsing.

Providers answer either with a JSON object or with freeform text/HTML.
Three independent parsers are tried in order:

1. ``parse_structured``: the outermost ``{...}`` object, code fences removed,
   must carry ``title`` and ``body``.
2. ``parse_heading``: document wrapper tags removed, a ``<h1>``, a leading
   ``<h2>`` or a markdown ``#`` heading becomes the title, the rest the body.
3. ``parse_plain_text``: first non-trivial line is the title, the rest the body.
"""

import json
import re
from typing import Callable, List, NamedTuple, Optional

from .metrics import strip_tags

CODE_FENCE_RE = re.compile(r"```[a-zA-Z]*")
DOCTYPE_RE = re.compile(r"<!DOCTYPE[^>]*>", re.IGNORECASE)
HEAD_RE = re.compile(r"<head\b[^>]*>.*?</head>", re.IGNORECASE | re.DOTALL)
WRAPPER_TAG_RE = re.compile(r"</?(?:html|body)\b[^>]*>", re.IGNORECASE)
STRAY_META_RE = re.compile(r"^\s*(?:<title\b[^>]*>.*?</title>|<meta\b[^>]*>)\s*$", re.IGNORECASE | re.MULTILINE)
TAG_ONLY_LINE_RE = re.compile(r"^\s*</?[a-zA-Z][^>]*>\s*$")
H1_RE = re.compile(r"<h1\b[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)
LEADING_H2_RE = re.compile(r"^\s*<h2\b[^>]*>(.*?)</h2>", re.IGNORECASE | re.DOTALL)
MARKDOWN_H1_RE = re.compile(r"^#[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)
LEADING_MARKDOWN_HEADING_RE = re.compile(r"\A\s*#{2,3}[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)
JSON_KEY_LINE_RE = re.compile(r'^"[^"]+"\s*:')
JSON_PUNCTUATION = {"{", "}", "[", "]", "},", "],"}

EXCERPT_LENGTH = 150
MIN_TITLE_LENGTH = 5


class ParsedContent(NamedTuple):
    """Title, body and optional excerpt recovered from a response."""

    title: str
    body: str
    excerpt: Optional[str] = None


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_RE.sub("", text or "").strip()


def strip_document_wrapper(text: str) -> str:
    """Remove doctype, head, html and body tags and stray title/meta lines."""
    text = DOCTYPE_RE.sub("", text)
    text = HEAD_RE.sub("", text)
    text = WRAPPER_TAG_RE.sub("", text)
    text = STRAY_META_RE.sub("", text)
    return text.strip()


def clean_title(line: str) -> str:
    title = strip_tags(line).strip()
    title = title.lstrip("#").strip()
    title = title.replace("**", "").strip()
    title = re.sub(r"^title\s*:\s*", "", title, flags=re.IGNORECASE)
    return title.strip().strip('"\'').strip()


def make_excerpt(body: str, length: int = EXCERPT_LENGTH) -> str:
    text = " ".join(strip_tags(body).replace("#", "").replace("*", "").split())
    if len(text) <= length:
        return text
    return text[:length] + "..."


def parse_structured(text: str) -> Optional[ParsedContent]:
    """Parse an embedded JSON object with ``title`` and ``body`` fields."""
    cleaned = strip_code_fences(text)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        return None

    try:
        data = json.loads(cleaned[start:end + 1])
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    title = data.get("title")
    body = data.get("body", data.get("content"))
    if not isinstance(title, str) or not isinstance(body, str):
        return None
    if not title.strip() or not body.strip():
        return None

    excerpt = data.get("excerpt")
    return ParsedContent(
        title=title.strip(),
        body=body.strip(),
        excerpt=excerpt.strip() if isinstance(excerpt, str) and excerpt.strip() else None,
    )


def parse_heading(text: str) -> Optional[ParsedContent]:
    """Take a heading tag or markdown heading as the title."""
    cleaned = strip_document_wrapper(strip_code_fences(text))
    if not cleaned:
        return None

    for pattern in (H1_RE, LEADING_H2_RE, MARKDOWN_H1_RE, LEADING_MARKDOWN_HEADING_RE):
        match = pattern.search(cleaned)
        if match is None:
            continue
        title = clean_title(match.group(1))
        body = (cleaned[:match.start()] + cleaned[match.end():]).strip()
        if title and body:
            return ParsedContent(title=title, body=body)
    return None


def _is_json_artifact(line: str) -> bool:
    return line in JSON_PUNCTUATION or bool(JSON_KEY_LINE_RE.match(line))


def parse_plain_text(text: str, fallback_title: str = "Untitled") -> ParsedContent:
    """First non-trivial line is the title; never fails on non-empty text."""
    cleaned = strip_code_fences(text)
    title = None
    body_lines: List[str] = []

    for raw_line in cleaned.splitlines():
        line = raw_line.strip()
        if _is_json_artifact(line):
            continue
        if title is None:
            candidate = clean_title(line)
            if len(candidate) > MIN_TITLE_LENGTH and not TAG_ONLY_LINE_RE.match(line):
                title = candidate
            continue
        body_lines.append(raw_line.rstrip())

    body = "\n".join(body_lines).strip()
    if not body:
        body = cleaned
    return ParsedContent(title=title or fallback_title, body=body)


PARSERS: List[Callable[[str], Optional[ParsedContent]]] = [parse_structured, parse_heading]


def parse_response(text: str, fallback_title: str = "Untitled") -> ParsedContent:
    """
    Parse provider output into title and body.

    Args:
        text: Non-empty provider output
        fallback_title: Title used when the text has no usable first line

    Returns:
        ParsedContent from the first parser that succeeds
    """
    for parser in PARSERS:
        parsed = parser(text)
        if parsed is not None:
            return parsed
    return parse_plain_text(text, fallback_title)
