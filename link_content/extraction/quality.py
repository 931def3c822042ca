"""
Quality scoring for extracted content.

Additive 0-100 heuristic: title length, word count, paragraph structure,
domain reputation and language confidence.
"""

import math

WORDS_PER_MINUTE = 200


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def count_paragraphs(text: str) -> int:
    """Count non-empty blocks separated by blank lines."""
    if not text:
        return 0
    return len([block for block in text.split('\n\n') if block.strip()])


def estimate_read_time(word_count: int) -> int:
    """Minutes to read at an average pace, at least one."""
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def title_points(title: str) -> int:
    length = len((title or '').strip())
    if length > 10:
        return 20
    if length > 5:
        return 10
    return 0


def word_count_points(word_count: int) -> int:
    if word_count > 1000:
        return 40
    if word_count > 500:
        return 30
    if word_count > 200:
        return 20
    if word_count > 50:
        return 10
    return 0


def structure_points(paragraphs: int) -> int:
    if paragraphs > 5:
        return 20
    if paragraphs > 2:
        return 15
    if paragraphs > 0:
        return 10
    return 0


def domain_points(domain: str) -> int:
    domain = (domain or '').lower()
    if '.edu' in domain or '.gov' in domain:
        return 10
    if '.org' in domain:
        return 8
    if '.com' in domain:
        return 5
    return 0


def language_points(language: str, target_language: str = 'vi') -> int:
    if language in ('en', target_language):
        return 10
    if language and language != 'unknown':
        return 5
    return 0


def score_content(title: str, body: str, domain: str, language: str, target_language: str = 'vi') -> int:
    """
    Score extracted content.

    Args:
        title: Extracted title
        body: Extracted body text
        domain: Page hostname
        language: Detected language code
        target_language: Locale treated as fully confident

    Returns:
        Quality score between 0 and 100
    """
    score = (
        title_points(title)
        + word_count_points(count_words(body))
        + structure_points(count_paragraphs(body))
        + domain_points(domain)
        + language_points(language, target_language)
    )
    return min(score, 100)
