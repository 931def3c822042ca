"""
Content extraction engine.

Runs the extraction strategies in order and always returns something the
workflow can act on: the first usable result, or a low-quality placeholder.
"""

import logging
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

from ..core.models.errors import ExtractionError
from ..core.models.extraction import (
    ExtractedContent,
    ExtractedMetadata,
    ExtractionOptions,
    ExtractionStrategyName,
)
from .strategies import ExtractionStrategy, RenderedPageStrategy, StaticFetchStrategy


logger = logging.getLogger(__name__)

FALLBACK_QUALITY_SCORE = 10


def build_fallback_content(url: str, reason: Optional[str] = None) -> ExtractedContent:
    """Placeholder result naming the domain, used when every strategy failed."""
    domain = urlparse(url).hostname or url
    body = (
        f"Content could not be extracted from {url}. "
        "This may be due to the site's structure or anti-scraping measures."
    )
    if reason:
        body += f"\n\nLast error: {reason}"
    return ExtractedContent(
        source_url=url,
        title=f"Content from {domain}",
        body=body,
        excerpt="Content extraction failed",
        metadata=ExtractedMetadata(
            description="Content extraction failed",
            language="unknown",
            domain=domain,
            word_count=len(body.split()),
            read_time=1,
            strategy=ExtractionStrategyName.FALLBACK,
        ),
        quality_score=FALLBACK_QUALITY_SCORE,
        extracted_at=datetime.utcnow(),
    )


class ContentExtractor:
    """
    Layered content extractor.

    Strategies are tried in order (rendered page, then static fetch by
    default); a result is accepted once its body is longer than
    ``min_body_length`` characters. ``extract`` never raises.
    """

    def __init__(
        self,
        strategies: Optional[List[ExtractionStrategy]] = None,
        options: Optional[ExtractionOptions] = None
    ):
        self.options = options or ExtractionOptions()
        if strategies is None:
            strategies = [StaticFetchStrategy()]
            if self.options.use_browser:
                strategies.insert(0, RenderedPageStrategy())
        self.strategies = strategies

        logger.info(
            "ContentExtractor initialized with strategies: "
            + ", ".join(strategy.name.value for strategy in self.strategies)
        )

    @classmethod
    def from_config(cls, config) -> 'ContentExtractor':
        return cls(options=ExtractionOptions(
            use_browser=config.EXTRACTION_USE_BROWSER,
            timeout_ms=config.EXTRACTION_TIMEOUT_MS,
            settle_ms=config.EXTRACTION_SETTLE_MS,
            static_timeout=config.STATIC_FETCH_TIMEOUT,
            target_language=config.TARGET_LANGUAGE,
        ))

    def is_usable(self, content: ExtractedContent, options: ExtractionOptions) -> bool:
        return len(content.body.strip()) > options.min_body_length

    async def extract(self, url: str, options: Optional[ExtractionOptions] = None) -> ExtractedContent:
        """
        Extract article content from a URL.

        Args:
            url: Page URL
            options: Per-call options, defaults to the engine's options

        Returns:
            ExtractedContent from the first usable strategy, or a placeholder
        """
        options = options or self.options
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            logger.warning(f"Not an http(s) URL, skipping extraction: {url}")
            return build_fallback_content(url, "Unsupported URL")

        last_error = None
        for strategy in self.strategies:
            try:
                content = await strategy.extract(url, options)
            except ExtractionError as e:
                last_error = e.message
                logger.warning(f"{strategy.name.value} extraction failed for {url}: {e.message}")
                continue
            except Exception as e:
                last_error = str(e)
                logger.error(f"Unexpected {strategy.name.value} extraction error for {url}: {str(e)}", exc_info=True)
                continue

            if self.is_usable(content, options):
                logger.info(
                    f"Extracted {content.metadata.word_count} words from {url} "
                    f"via {strategy.name.value} (quality {content.quality_score})"
                )
                return content

            last_error = f"{strategy.name.value} result too short ({len(content.body.strip())} chars)"
            logger.info(f"Rejected {strategy.name.value} result for {url}: {last_error}")

        logger.warning(f"All extraction strategies failed for {url}, returning placeholder")
        return build_fallback_content(url, last_error)

    async def close(self):
        for strategy in self.strategies:
            try:
                await strategy.close()
            except Exception as e:
                logger.warning(f"Error closing {strategy.name.value} strategy: {str(e)}")

    async def health_check(self) -> dict:
        return {
            "status": "healthy" if self.strategies else "degraded",
            "strategies": [strategy.health() for strategy in self.strategies],
            "use_browser": self.options.use_browser,
        }
