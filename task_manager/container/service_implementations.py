"""
Concrete implementations of collaborator interfaces.
"""

import io
from typing import Any, Dict, Optional
import httpx
from PIL import Image, ImageOps, UnidentifiedImageError
import structlog

from ..core.config import Settings
from ..interfaces.image_interface import IImageProcessor, ImageProcessingError
from ..interfaces.notification_interface import INotificationService

logger = structlog.get_logger()

WELCOME_SUBJECT = "Thank you for joining in!"
CANCELLATION_SUBJECT = "Account Deleted - We're Sorry To See You Go!"


class PostmarkNotificationService(INotificationService):
    """Sends account emails through the Postmark HTTP API."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.NOTIFICATION_TIMEOUT_SECONDS),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5)
        )

    @property
    def enabled(self) -> bool:
        return bool(self.settings.POSTMARK_API_KEY)

    async def send_welcome_email(self, email: str, name: str) -> bool:
        return await self._send(
            email,
            WELCOME_SUBJECT,
            text_body=f"Welcome to the app, {name}! Let me know how you get along with the app."
        )

    async def send_cancellation_email(self, email: str, name: str) -> bool:
        return await self._send(
            email,
            CANCELLATION_SUBJECT,
            text_body=(
                f"Dear {name}, we're sorry to see you leave, and we'd love to hear why "
                "you're leaving. If you ever want to come back, we'll be here to welcome you."
            ),
            html_body=(
                f"Dear {name},<br>We're sorry to see you leave, and we'd love to hear why "
                "you're leaving.<br>If you ever want to come back, we'll be here to welcome "
                "you.<br>Take care,<br><strong>Task App Team</strong>"
            )
        )

    async def _send(
        self,
        to: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None
    ) -> bool:
        """
        Post one message to Postmark.

        Returns:
            True if Postmark accepted the message, False if it was skipped
            or rejected
        """
        if not self.enabled:
            logger.info("Notification skipped, no Postmark API key configured", subject=subject)
            return False

        payload: Dict[str, Any] = {
            "From": self.settings.EMAILS_FROM_EMAIL,
            "To": to,
            "Subject": subject,
            "TextBody": text_body,
            "MessageStream": self.settings.POSTMARK_MESSAGE_STREAM
        }
        if html_body:
            payload["HtmlBody"] = html_body

        try:
            response = await self.http_client.post(
                self.settings.POSTMARK_API_URL,
                json=payload,
                headers={
                    "Accept": "application/json",
                    "X-Postmark-Server-Token": self.settings.POSTMARK_API_KEY
                }
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Postmark rejected message",
                subject=subject,
                status_code=e.response.status_code,
                error=e.response.text
            )
            return False
        except httpx.HTTPError as e:
            logger.error("Postmark request failed", subject=subject, error=str(e))
            return False

        logger.info("Notification sent", subject=subject)
        return True

    async def cleanup(self) -> None:
        await self.http_client.aclose()
        logger.info("Notification service cleanup completed")


class PillowImageProcessor(IImageProcessor):
    """Pillow-based avatar normalization."""

    def __init__(self, settings: Settings):
        self.size = settings.AVATAR_SIZE

    def process_avatar(self, data: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(data)) as image:
                image = ImageOps.exif_transpose(image)
                if image.mode not in ("RGB", "RGBA"):
                    image = image.convert("RGBA")
                # Cover fit: scale then center-crop to the exact square
                avatar = ImageOps.fit(image, (self.size, self.size), method=Image.Resampling.LANCZOS)

                output = io.BytesIO()
                avatar.save(output, format="PNG")
                return output.getvalue()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.warning("Avatar image could not be processed", error=str(e))
            raise ImageProcessingError("Uploaded file is not a valid image") from e
