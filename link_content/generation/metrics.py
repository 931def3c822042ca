"""
Quality metrics for generated content.

SEO, readability and engagement heuristics computed on every piece of
generated content. All scores are integers between 0 and 100.
"""

import html
import re
from typing import Dict, List

TAG_RE = re.compile(r"<[^>]+>")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")
HEADING_RE = re.compile(r"<h[1-6][\s>]|^#{1,6}\s", re.IGNORECASE | re.MULTILINE)
LIST_RE = re.compile(r"<(?:ul|ol|li)[\s>]|^\s*(?:[-*•]|\d+[.)])\s+\S", re.IGNORECASE | re.MULTILINE)

CTA_WORDS = ("discover", "learn", "explore", "find out", "get started", "try", "join")
EMOTIONAL_WORDS = ("amazing", "incredible", "powerful", "essential", "important")

DEFAULT_READABILITY = 75
READABILITY_FLOOR = 30
READABILITY_CEILING = 90


def strip_tags(text: str) -> str:
    """Plain text of HTML or markdown content."""
    return html.unescape(TAG_RE.sub(" ", text or ""))


def count_words(text: str) -> int:
    return len(strip_tags(text).split())


def count_syllables(word: str) -> int:
    """Approximate English syllable count from vowel groups."""
    letters = "".join(ch for ch in word.lower() if ch.isalpha())
    if not letters:
        return 0
    ascii_word = re.sub(r"[^a-z]", "", letters)
    if len(ascii_word) <= 3:
        return 1

    count = len(VOWEL_GROUP_RE.findall(ascii_word))
    if ascii_word.endswith("e") and not ascii_word.endswith(("le", "ee")):
        count -= 1
    if ascii_word.endswith("ed") and not ascii_word.endswith(("ted", "ded")):
        count -= 1
    return max(1, count)


def seo_score(title: str, body: str, keywords: List[str]) -> int:
    """Keyword coverage, title length band, content length band and headings."""
    text = f"{title} {strip_tags(body)}".lower()
    score = 50

    for keyword in keywords:
        if keyword and keyword.strip().lower() in text:
            score += 10

    title_length = len((title or "").strip())
    if 30 <= title_length <= 60:
        score += 10
    elif 10 <= title_length <= 80:
        score += 5

    words = count_words(body)
    if words >= 300:
        score += 10
    if words >= 1000:
        score += 5

    if HEADING_RE.search(body or ""):
        score += 10

    return min(score, 100)


def readability_score(body: str) -> int:
    """Flesch Reading Ease over tag-stripped text, clamped to 30-90."""
    text = strip_tags(body)
    words = text.split()
    sentences = [s for s in SENTENCE_SPLIT_RE.split(text) if s.strip()]
    if not words or not sentences:
        return DEFAULT_READABILITY

    syllables = sum(count_syllables(word) for word in words)
    flesch = (
        206.835
        - 1.015 * (len(words) / len(sentences))
        - 84.6 * (syllables / len(words))
    )
    return int(round(max(READABILITY_FLOOR, min(READABILITY_CEILING, flesch))))


def engagement_score(body: str) -> int:
    """Questions, calls to action, emotional vocabulary and list structure."""
    text = strip_tags(body).lower()
    score = 50

    if "?" in text:
        score += 10
    score += 5 * sum(1 for word in CTA_WORDS if word in text)
    score += 3 * sum(1 for word in EMOTIONAL_WORDS if word in text)
    if LIST_RE.search(body or ""):
        score += 10

    return min(score, 100)


def compute_metrics(title: str, body: str, keywords: List[str]) -> Dict[str, int]:
    return {
        "word_count": count_words(body),
        "seo_score": seo_score(title, body, keywords),
        "readability_score": readability_score(body),
        "engagement_score": engagement_score(body),
    }
