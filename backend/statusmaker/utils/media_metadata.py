"""
Type-dependent metadata for uploaded assets.
"""

import io
import json
import logging
from typing import Any, Dict

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


def _image_metadata(content: bytes) -> Dict[str, Any]:
    try:
        with Image.open(io.BytesIO(content)) as img:
            return {
                "width": img.width,
                "height": img.height,
                "format": Image.MIME.get(img.format, img.format),
            }
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not read image dimensions: {type(e).__name__}")
        return {}


def _lottie_metadata(content: bytes) -> Dict[str, Any]:
    # Lottie documents carry w/h, frame rate (fr) and in/out frames (ip/op)
    try:
        doc = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        logger.warning("Lottie file is not valid JSON")
        return {}
    if not isinstance(doc, dict):
        return {}

    metadata = {
        "width": doc.get("w", 0),
        "height": doc.get("h", 0),
        "frame_rate": doc.get("fr", 0),
    }
    try:
        frames = float(doc.get("op", 0)) - float(doc.get("ip", 0))
        fr = float(metadata["frame_rate"])
        metadata["duration"] = round(frames / fr, 3) if fr > 0 else 0
    except (TypeError, ValueError):
        metadata["duration"] = 0
    return metadata


def extract_metadata(content: bytes, file_type: str) -> Dict[str, Any]:
    """
    Extract metadata for an uploaded asset.

    Images and lottie documents are inspected; video and audio get
    zero placeholders until a probing tool is wired in.

    Args:
        content: File bytes
        file_type: image | video | audio | lottie

    Returns:
        Metadata dict (may be empty)
    """
    if file_type == "image":
        return _image_metadata(content)
    if file_type == "lottie":
        return _lottie_metadata(content)
    if file_type == "video":
        return {"duration": 0, "width": 0, "height": 0}
    if file_type == "audio":
        return {"duration": 0, "bitrate": 0}
    return {}
