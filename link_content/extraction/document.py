"""
Offline article parsing.

Runs readability-lxml over a page's HTML and recovers the article title,
paragraph text, meta fields and candidate images with BeautifulSoup.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from readability import Document

from .images import collect_image_sources

BLOCK_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'p', 'li', 'blockquote', 'pre']
EXCERPT_LENGTH = 200


@dataclass
class ParsedPage:
    """Article fields recovered from one HTML document."""

    url: str
    title: str
    body: str
    excerpt: str
    description: str = ''
    author: Optional[str] = None
    publish_date: Optional[str] = None
    html_lang: Optional[str] = None
    meta_language: Optional[str] = None
    domain: str = ''
    image_sources: List[str] = field(default_factory=list)


def hostname(url: str) -> str:
    return urlparse(url).hostname or ''


def _meta(soup: BeautifulSoup, *selectors: str) -> Optional[str]:
    for selector in selectors:
        tag = soup.select_one(selector)
        if tag and tag.get('content'):
            return tag['content'].strip()
    return None


def html_to_text(fragment: str) -> str:
    """Plain text of an HTML fragment, one paragraph per block element."""
    soup = BeautifulSoup(fragment, 'lxml')
    blocks = []
    for element in soup.find_all(BLOCK_TAGS):
        # nested blocks are emitted by their innermost element
        if element.find(BLOCK_TAGS):
            continue
        text = ' '.join(element.get_text(' ', strip=True).split())
        if text:
            blocks.append(text)
    if not blocks:
        return soup.get_text('\n\n', strip=True)
    return '\n\n'.join(blocks)


def make_excerpt(body: str, length: int = EXCERPT_LENGTH) -> str:
    flat = ' '.join(body.split())
    if len(flat) <= length:
        return flat
    return flat[:length] + '...'


def parse_article(html: str, url: str) -> ParsedPage:
    """
    Parse an HTML document into article fields.

    Args:
        html: Raw or rendered page HTML
        url: Page URL, used for the domain

    Returns:
        ParsedPage with readability's view of the article
    """
    soup = BeautifulSoup(html, 'lxml')
    doc = Document(html, url=url)

    title = (doc.short_title() or '').strip()
    if not title:
        title = _meta(soup, 'meta[property="og:title"]') or ''

    body = html_to_text(doc.summary(html_partial=True))

    description = _meta(
        soup,
        'meta[name="description"]',
        'meta[property="og:description"]',
        'meta[name="twitter:description"]'
    ) or ''
    author = _meta(soup, 'meta[name="author"]', 'meta[property="article:author"]')
    publish_date = _meta(
        soup,
        'meta[property="article:published_time"]',
        'meta[name="pubdate"]',
        'meta[name="date"]'
    )
    if not publish_date:
        time_tag = soup.find('time', attrs={'datetime': True})
        publish_date = time_tag['datetime'] if time_tag else None

    html_tag = soup.find('html')
    html_lang = html_tag.get('lang') if html_tag else None
    meta_language = _meta(soup, 'meta[http-equiv="content-language"]', 'meta[name="language"]')

    return ParsedPage(
        url=url,
        title=title,
        body=body,
        excerpt=description or make_excerpt(body),
        description=description,
        author=author,
        publish_date=publish_date,
        html_lang=html_lang,
        meta_language=meta_language,
        domain=hostname(url),
        image_sources=collect_image_sources(soup),
    )
