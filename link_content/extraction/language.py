"""
Language detection for extracted pages.

A cheap two-tier heuristic: lexical and diacritic evidence for one target
locale, then page hints (domain, ``<html lang>``, meta tags).
"""

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

WORD_RE = re.compile(r"\w+", re.UNICODE)


@dataclass(frozen=True)
class LocaleProfile:
    """Lexical fingerprint of a target locale."""

    code: str
    common_words: FrozenSet[str]
    diacritics: str
    domain_hints: Tuple[str, ...] = ()
    min_word_hits: int = 5
    min_diacritics: int = 10
    _diacritic_re: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, '_diacritic_re', re.compile(f"[{re.escape(self.diacritics)}]"))

    def word_hits(self, text: str) -> int:
        """Number of distinct common words present in ``text``."""
        tokens = set(WORD_RE.findall(text.lower()))
        return len(self.common_words & tokens)

    def diacritic_count(self, text: str) -> int:
        return len(self._diacritic_re.findall(text.lower()))

    def matches_text(self, text: str) -> bool:
        return self.word_hits(text) >= self.min_word_hits or self.diacritic_count(text) >= self.min_diacritics

    def matches_domain(self, domain: str) -> bool:
        domain = (domain or '').lower()
        return any(hint in domain for hint in self.domain_hints)


VIETNAMESE = LocaleProfile(
    code='vi',
    common_words=frozenset([
        'việt', 'nam', 'của', 'và', 'cho', 'với', 'trong', 'một', 'có', 'là',
        'được', 'để', 'này', 'đó', 'những', 'các', 'không', 'từ', 'tại', 'về',
        'theo', 'như', 'sẽ', 'đã', 'đang', 'khi', 'nếu', 'thì', 'còn', 'cũng',
        'đều', 'chỉ', 'giữa', 'sau', 'trước', 'ngoài', 'bên', 'dưới', 'trên', 'giờ',
        'ngày', 'tháng', 'năm', 'đám', 'cưới', 'lễ', 'nghi', 'truyền', 'thống',
    ]),
    diacritics='àáạảãâầấậẩẫăằắặẳẵèéẹẻẽêềếệểễìíịỉĩòóọỏõôồốộổỗơờớợởỡùúụủũưừứựửữỳýỵỷỹđ',
    domain_hints=('.vn', 'vietnam'),
)

LOCALE_PROFILES = {
    VIETNAMESE.code: VIETNAMESE,
}


def normalize_language_tag(tag: Optional[str]) -> str:
    """Reduce 'en-US' style tags to the primary subtag."""
    if not tag:
        return ''
    return tag.strip().split('-')[0].split('_')[0].lower()


def detect_language(
    text: str,
    domain: str = '',
    html_lang: Optional[str] = None,
    meta_language: Optional[str] = None,
    profile: LocaleProfile = VIETNAMESE
) -> str:
    """
    Detect the language of page text.

    Args:
        text: Title and body text
        domain: Page hostname
        html_lang: Value of the ``<html lang>`` attribute
        meta_language: ``content-language`` or ``language`` meta value
        profile: Target locale fingerprint

    Returns:
        A primary language subtag, ``en`` when nothing points elsewhere
    """
    if text and profile.matches_text(text):
        return profile.code

    if profile.matches_domain(domain):
        return profile.code

    lang = normalize_language_tag(html_lang)
    if lang and lang != 'en':
        return lang

    lang = normalize_language_tag(meta_language)
    if lang and lang != 'en':
        return lang

    return 'en'


def get_profile(code: str) -> LocaleProfile:
    """Locale profile for a language code, Vietnamese when unknown."""
    return LOCALE_PROFILES.get(normalize_language_tag(code), VIETNAMESE)
