"""
Content image selection.

Drops navigation, advertising, avatar and social-button images and keeps a
small set of absolute image URLs that plausibly illustrate the article.
"""

from typing import Iterable, List
from urllib.parse import urljoin

from bs4 import BeautifulSoup

CONTENT_IMAGE_SELECTOR = 'article img, main img, .post-content img'

EXCLUDED_IMAGE_PATTERNS = (
    'icon', 'logo', 'avatar', 'pixel', 'tracking', '1x1', 'ads', 'banner',
    'button', 'arrow', 'social-share', 'facebook', 'twitter', 'instagram',
    'youtube', 'header', 'footer', 'nav', 'menu',
)

# Portraits of staff rarely illustrate the article itself.
PERSON_IMAGE_PATTERNS = ('team', 'staff', 'author', 'profile')

MIN_IMAGE_URL_LENGTH = 50
MAX_IMAGES = 8
PERSON_ONLY_LIMIT = 5

LAZY_SOURCE_ATTRIBUTES = ('src', 'data-src', 'data-lazy-src', 'data-original')


def resolve_image_url(src: str, base_url: str) -> str:
    src = (src or '').strip()
    if not src or src.startswith('data:'):
        return ''
    if src.startswith('//'):
        return 'https:' + src
    return urljoin(base_url, src)


def is_content_image(url: str) -> bool:
    lowered = url.lower()
    if len(url) <= MIN_IMAGE_URL_LENGTH:
        return False
    return not any(pattern in lowered for pattern in EXCLUDED_IMAGE_PATTERNS)


def filter_image_urls(urls: Iterable[str], base_url: str, limit: int = MAX_IMAGES) -> List[str]:
    """
    Resolve, de-duplicate and filter candidate image URLs.

    Args:
        urls: Raw ``src`` values in page order
        base_url: Page URL used to resolve relative sources
        limit: Maximum number of images returned

    Returns:
        Absolute URLs of likely content images
    """
    seen = set()
    candidates = []
    for raw in urls:
        url = resolve_image_url(raw, base_url)
        if not url or url in seen:
            continue
        seen.add(url)
        if is_content_image(url):
            candidates.append(url)

    if len(candidates) <= limit:
        return candidates

    without_people = [
        url for url in candidates
        if not any(pattern in url.lower() for pattern in PERSON_IMAGE_PATTERNS)
    ]
    if without_people:
        return without_people[:limit]
    return candidates[:min(limit, PERSON_ONLY_LIMIT)]


def collect_image_sources(soup: BeautifulSoup) -> List[str]:
    """Raw image sources from the content area, falling back to the whole page."""
    images = soup.select(CONTENT_IMAGE_SELECTOR) or soup.find_all('img')
    sources = []
    for img in images:
        for attribute in LAZY_SOURCE_ATTRIBUTES:
            value = img.get(attribute)
            if value and not value.startswith('data:'):
                sources.append(value)
                break
    return sources
