"""
Extraction strategies.

Each strategy turns a URL into ExtractedContent or raises ExtractionError;
the engine tries them in order.
"""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

import aiohttp
from playwright.async_api import async_playwright

from ..core.models.errors import ExtractionError
from ..core.models.extraction import (
    ExtractedContent,
    ExtractedMetadata,
    ExtractionOptions,
    ExtractionStrategyName,
)
from .document import ParsedPage, parse_article
from .images import CONTENT_IMAGE_SELECTOR, filter_image_urls
from .language import detect_language, get_profile
from .quality import count_words, estimate_read_time, score_content


logger = logging.getLogger(__name__)

USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
]

BROWSER_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
    '--disable-accelerated-2d-canvas',
    '--no-first-run',
    '--no-zygote',
    '--disable-gpu',
]

INTERSTITIAL_TITLES = ('one moment', 'checking your browser', 'just a moment', 'attention required')


def random_user_agent() -> str:
    return random.choice(USER_AGENTS)


def request_headers() -> dict:
    return {
        'User-Agent': random_user_agent(),
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9,vi;q=0.8',
        'Connection': 'keep-alive',
        'Upgrade-Insecure-Requests': '1',
    }


def is_interstitial(title: str) -> bool:
    lowered = (title or '').lower()
    return any(marker in lowered for marker in INTERSTITIAL_TITLES)


def build_extracted_content(
    page: ParsedPage,
    strategy: ExtractionStrategyName,
    options: ExtractionOptions,
    image_sources: Optional[List[str]] = None
) -> ExtractedContent:
    """Score a parsed page and wrap it as ExtractedContent."""
    language = detect_language(
        f"{page.title} {page.body}",
        domain=page.domain,
        html_lang=page.html_lang,
        meta_language=page.meta_language,
        profile=get_profile(options.target_language),
    )
    word_count = count_words(page.body)
    images = filter_image_urls(
        image_sources if image_sources is not None else page.image_sources,
        page.url,
        limit=options.max_images,
    )

    return ExtractedContent(
        source_url=page.url,
        title=page.title or f"Content from {page.domain}",
        body=page.body,
        excerpt=page.excerpt,
        metadata=ExtractedMetadata(
            description=page.description,
            author=page.author,
            publish_date=page.publish_date,
            images=images,
            language=language,
            domain=page.domain,
            word_count=word_count,
            read_time=estimate_read_time(word_count),
            strategy=strategy,
        ),
        quality_score=score_content(page.title, page.body, page.domain, language, options.target_language),
        extracted_at=datetime.utcnow(),
    )


class ExtractionStrategy(ABC):
    """One technique for pulling article content out of a URL."""

    name: ExtractionStrategyName

    @abstractmethod
    async def extract(self, url: str, options: ExtractionOptions) -> ExtractedContent:
        """Extract content or raise ExtractionError."""

    async def close(self):
        """Release any held resources."""

    def health(self) -> dict:
        return {"strategy": self.name.value, "status": "ready"}


class RenderedPageStrategy(ExtractionStrategy):
    """
    Headless-browser extraction.

    A single chromium instance is launched on first use and shared by every
    extraction; each extraction gets its own browser context.
    """

    name = ExtractionStrategyName.RENDERED

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright = None
        self._browser = None
        self._launch_lock = asyncio.Lock()

    async def _get_browser(self):
        async with self._launch_lock:
            if self._browser is None or not self._browser.is_connected():
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless,
                    args=BROWSER_ARGS,
                )
                logger.info("Headless browser launched for page rendering")
            return self._browser

    async def extract(self, url: str, options: ExtractionOptions) -> ExtractedContent:
        try:
            browser = await self._get_browser()
            context = await browser.new_context(
                user_agent=random_user_agent(),
                viewport={'width': 1920, 'height': 1080},
                ignore_https_errors=True,
            )
        except Exception as e:
            raise ExtractionError(f"Browser unavailable: {str(e)}", url, self.name.value) from e

        try:
            page = await context.new_page()
            await page.goto(url, wait_until='networkidle', timeout=options.timeout_ms)
            await page.wait_for_timeout(options.settle_ms)

            title = await page.title()
            if is_interstitial(title):
                logger.info(f"Anti-bot interstitial on {url}, waiting {options.interstitial_wait_ms}ms")
                await page.wait_for_timeout(options.interstitial_wait_ms)

            html = await page.content()
            image_sources = await page.eval_on_selector_all(
                CONTENT_IMAGE_SELECTOR,
                'els => els.map(el => el.currentSrc || el.src).filter(Boolean)'
            )
            final_url = page.url or url
        except Exception as e:
            raise ExtractionError(f"Page rendering failed: {str(e)}", url, self.name.value) from e
        finally:
            await context.close()

        try:
            parsed = parse_article(html, final_url)
        except Exception as e:
            raise ExtractionError(f"Readability failed on rendered page: {str(e)}", url, self.name.value) from e

        return build_extracted_content(parsed, self.name, options, image_sources=image_sources or None)

    async def close(self):
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    def health(self) -> dict:
        return {
            "strategy": self.name.value,
            "status": "ready",
            "browser_launched": self._browser is not None,
        }


class StaticFetchStrategy(ExtractionStrategy):
    """Plain HTTP GET followed by offline readability extraction."""

    name = ExtractionStrategyName.STATIC

    async def fetch(self, url: str, options: ExtractionOptions) -> str:
        timeout = aiohttp.ClientTimeout(total=options.static_timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout, headers=request_headers()) as session:
                async with session.get(url, allow_redirects=True) as response:
                    if response.status >= 400:
                        raise ExtractionError(f"HTTP {response.status} fetching page", url, self.name.value)
                    content_type = response.headers.get('Content-Type', '').lower()
                    if content_type and 'html' not in content_type and 'xml' not in content_type:
                        raise ExtractionError(f"Non-HTML content type: {content_type}", url, self.name.value)
                    return await response.text(errors='replace')
        except asyncio.TimeoutError as e:
            raise ExtractionError(f"Timed out after {options.static_timeout}s", url, self.name.value) from e
        except aiohttp.ClientError as e:
            raise ExtractionError(f"Request failed: {str(e)}", url, self.name.value) from e

    async def extract(self, url: str, options: ExtractionOptions) -> ExtractedContent:
        html = await self.fetch(url, options)
        try:
            parsed = parse_article(html, url)
        except Exception as e:
            raise ExtractionError(f"Readability failed: {str(e)}", url, self.name.value) from e
        return build_extracted_content(parsed, self.name, options)
