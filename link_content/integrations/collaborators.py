"""
External collaborator interfaces.

The image gallery and the publishing target are owned by other services;
the workflow only depends on these two narrow interfaces.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..core.models.generation import GalleryImage, GeneratedContent
from ..core.models.workflow import PublishResult


class ImageGallery(ABC):
    """Looks up images suitable for a topic."""

    @abstractmethod
    async def images_for_topic(
        self,
        topic: str,
        purpose: str,
        limit: int,
        options: Optional[Dict[str, Any]] = None
    ) -> List[GalleryImage]:
        """
        Find images for a topic.

        Args:
            topic: Content topic
            purpose: 'blog' or 'social'
            limit: Maximum number of images
            options: Lookup options such as category and consistency

        Returns:
            Images in display order
        """


class Publisher(ABC):
    """Publishes approved content to an external target such as a CMS."""

    @abstractmethod
    async def publish(self, content: GeneratedContent, settings: Dict[str, Any]) -> PublishResult:
        """Publish one piece of content."""
