"""
Image-processing collaborator interface.
"""

from typing import Protocol, runtime_checkable


class ImageProcessingError(Exception):
    """Raised when uploaded bytes cannot be decoded as an image."""


@runtime_checkable
class IImageProcessor(Protocol):
    """Protocol for avatar normalization."""

    def process_avatar(self, data: bytes) -> bytes:
        """
        Resize an uploaded image to the avatar square and re-encode it as PNG.

        Args:
            data: Raw uploaded bytes

        Returns:
            PNG bytes

        Raises:
            ImageProcessingError: If the bytes are not a readable image
        """
        ...
