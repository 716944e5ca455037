"""
Customization engine for template layouts.

Turns a template's stored layout plus a per-request map of layer overrides
into a new layout, and wraps that layout in a preview handle the external
renderer can resolve.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, Mapping

from statusmaker.core.config import settings
from statusmaker.core.exceptions import ValidationError
from statusmaker.models.layout import TemplateLayout
from statusmaker.models.template import Template

logger = logging.getLogger(__name__)


def apply_customizations(
    layout: Mapping[str, Any],
    customizations: Mapping[str, Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Apply per-layer patches to a layout and return the patched copy.

    Each object is addressed by its positional key "{type}_{index}". Only
    the fields whitelisted for the object's type are overwritten; unknown
    layer types, unknown fields and keys that match no object are ignored.
    The input layout is never modified.

    Args:
        layout: Layout document ({version, objects, background})
        customizations: Mapping of layer key -> partial field patch

    Returns:
        New layout document

    Example:
        >>> apply_customizations(
        ...     {"version": "1.0", "objects": [{"type": "text", "content": "{{name}}"}]},
        ...     {"text_0": {"content": "Sarah & John"}},
        ... )["objects"][0]["content"]
        'Sarah & John'
    """
    parsed = TemplateLayout.parse(layout)
    customizations = customizations or {}

    patched_objects = []
    for obj in parsed.objects:
        patch = customizations.get(obj.key)
        if isinstance(patch, Mapping):
            obj = obj.patched(patch)
        patched_objects.append(obj)

    return parsed.with_objects(patched_objects).to_dict()


def encode_preview_token(layout: Mapping[str, Any]) -> str:
    """Encode a layout as a URL-safe token (compact JSON, base64)"""
    payload = json.dumps(layout, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_preview_token(token: str) -> Dict[str, Any]:
    """
    Decode a preview token back into its layout.

    Raises:
        ValidationError: If the token is not a valid encoded layout
    """
    padded = token + "=" * (-len(token) % 4)
    try:
        payload = base64.urlsafe_b64decode(padded.encode("ascii"))
        layout = json.loads(payload.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ValidationError(f"Invalid preview token: {e}", field="token")

    if not isinstance(layout, dict):
        raise ValidationError("Invalid preview token: payload is not a layout", field="token")
    return layout


def build_preview_url(layout: Mapping[str, Any]) -> str:
    return f"{settings.PREVIEW_URL_PREFIX.rstrip('/')}/{encode_preview_token(layout)}"


class CustomizationService:
    """Preview operations over templates. Never writes to the database."""

    def preview(self, template: Template, customizations: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Customize a template's layout for preview.

        Returns:
            {"layout": patched layout, "preview_url": opaque renderer handle}
        """
        layout = apply_customizations(template.layout, customizations)
        logger.debug(
            f"Preview for template {template.id} ({template.slug}) "
            f"with {len(customizations or {})} customization(s)"
        )
        return {
            "layout": layout,
            "preview_url": build_preview_url(layout),
        }
