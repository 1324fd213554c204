"""Fetch an element's file so the LLM can read it directly."""
import base64
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from spark.app.config import get_settings
from spark.thinking.models import ContentBlocks

logger = logging.getLogger("spark.thinking.attachments")

IMAGE_MEDIA_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")


@dataclass(frozen=True)
class Attachment:
    url: str
    type: str  # "image" or "file"
    file_type: Optional[str] = None
    filename: Optional[str] = None


def fetch_attachment(attachment: Attachment) -> Optional[ContentBlocks]:
    """Download an attachment and turn it into content blocks.

    Returns None when the file is too large, of an unsupported kind, or
    cannot be fetched; callers fall back to a text-only prompt.
    """
    settings = get_settings()
    try:
        response = httpx.get(attachment.url, timeout=30, follow_redirects=True)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error("Failed to fetch attachment %s: %s", attachment.filename or attachment.url, e)
        return None

    data = response.content
    size = len(data)

    if attachment.type == "image":
        if size > settings.max_image_bytes:
            logger.info("Image too large for AI: %d bytes", size)
            return None
        media_type = attachment.file_type if attachment.file_type in IMAGE_MEDIA_TYPES else "image/jpeg"
        return [{
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": media_type,
                "data": base64.b64encode(data).decode("ascii"),
            },
        }]

    if attachment.type == "file" and attachment.file_type == "application/pdf":
        if size > settings.max_pdf_bytes:
            logger.info("PDF too large for AI: %d bytes", size)
            return None
        return [{
            "type": "document",
            "source": {
                "type": "base64",
                "media_type": "application/pdf",
                "data": base64.b64encode(data).decode("ascii"),
            },
        }]

    if attachment.file_type and attachment.file_type.startswith("text/"):
        if size > settings.max_pdf_bytes:
            return None
        text = data.decode("utf-8", errors="replace")
        return [{
            "type": "text",
            "text": f"[File: {attachment.filename or 'document'}]\n{text}",
        }]

    logger.info("Unsupported attachment type: %s", attachment.file_type)
    return None
