"""
Gallery image enrichment for generated content.

Blog posts get ``<figure>`` blocks in place of the ``[INSERT_IMAGE]``
placeholders (or spread between paragraphs when there are none) plus a
featured image and gallery; social posts only get a featured image.
"""

import html
import logging
import re
from typing import List, Optional

from ..core.models.generation import ContentType, GalleryImage, GeneratedContent, ImageSettings
from ..integrations.collaborators import ImageGallery
from .prompts import IMAGE_PLACEHOLDER


logger = logging.getLogger(__name__)

PLACEHOLDER_LINE_RE = re.compile(r"(?:<p>\s*)?" + re.escape(IMAGE_PLACEHOLDER) + r"(?:\s*</p>)?")
PARAGRAPH_END_RE = re.compile(r"</p>", re.IGNORECASE)


def render_figure(image: GalleryImage) -> str:
    caption = ""
    if image.caption:
        caption = f'<figcaption class="wp-element-caption">{html.escape(image.caption)}</figcaption>'
    return (
        '<figure class="wp-block-image size-large">'
        f'<img src="{html.escape(image.url, quote=True)}" alt="{html.escape(image.alt_text, quote=True)}" '
        'class="wp-image-auto" />'
        f'{caption}</figure>'
    )


def strip_placeholders(body: str) -> str:
    return PLACEHOLDER_LINE_RE.sub("", body)


def _split_paragraphs(body: str) -> List[str]:
    if PARAGRAPH_END_RE.search(body):
        parts = PARAGRAPH_END_RE.split(body)
        return [part + "</p>" for part in parts[:-1]] + ([parts[-1]] if parts[-1].strip() else [])
    return [part for part in body.split("\n\n")]


def insert_images(body: str, images: List[GalleryImage]) -> str:
    """
    Place images into a body.

    Args:
        body: Generated HTML or text body
        images: Images in display order

    Returns:
        Body with figures at the placeholders, or evenly spaced between paragraphs
    """
    if not images:
        return strip_placeholders(body)

    if IMAGE_PLACEHOLDER in body:
        queue = list(images)

        def replace(match):
            return render_figure(queue.pop(0)) if queue else ""

        return PLACEHOLDER_LINE_RE.sub(replace, body)

    paragraphs = _split_paragraphs(body)
    if len(paragraphs) < 2:
        return body + "\n" + "\n".join(render_figure(image) for image in images)

    count = min(len(images), len(paragraphs) - 1)
    positions = {
        max(1, round((index + 1) * len(paragraphs) / (count + 1))): images[index]
        for index in range(count)
    }
    joiner = "\n" if PARAGRAPH_END_RE.search(body) else "\n\n"
    output = []
    for index, paragraph in enumerate(paragraphs):
        if index in positions:
            output.append(render_figure(positions[index]))
        output.append(paragraph)
    return joiner.join(output)


class ImageEnricher:
    """Adds gallery images to generated content."""

    def __init__(self, gallery: Optional[ImageGallery] = None):
        self.gallery = gallery

    async def enrich(
        self,
        content: GeneratedContent,
        settings: Optional[ImageSettings],
        topic: str
    ) -> GeneratedContent:
        """
        Return content with images, or with leftover placeholders removed.

        Gallery failures are logged and the content is returned without images.
        """
        is_blog = content.content_type == ContentType.BLOG_POST
        plain = content.model_copy(update={"body": strip_placeholders(content.body)})

        if self.gallery is None or settings is None or not settings.include_images:
            return plain

        purpose = "blog" if is_blog else "social"
        try:
            images = await self.gallery.images_for_topic(
                topic,
                purpose,
                settings.image_limit(),
                {
                    "image_selection": settings.image_selection.value,
                    "image_category": settings.image_category,
                    "specific_folder": settings.specific_folder,
                    "ensure_consistency": settings.ensure_consistency,
                },
            )
        except Exception as e:
            logger.warning(f"Image gallery lookup failed for '{topic}': {str(e)}")
            return plain

        if not images:
            return plain

        if is_blog:
            metadata = content.metadata.model_copy(update={
                "featured_image": images[0],
                "gallery_images": list(images),
            })
            body = insert_images(content.body, images)
        else:
            metadata = content.metadata.model_copy(update={"featured_image": images[0]})
            body = plain.body

        logger.info(f"Added {len(images)} gallery images to {purpose} content '{content.title}'")
        return content.model_copy(update={"body": body, "metadata": metadata})
