"""
Pydantic request bodies for the admin and public APIs.

Structural checks live here; uniqueness and slug generation are left to the
services because they need the database.
"""

import re
from numbers import Number
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from statusmaker.models.export_job import ExportFormat, ExportQuality, ExportStatus
from statusmaker.models.template import TEMPLATE_CATEGORIES, TemplateStatus

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
TEXT_ALIGNMENTS = ("left", "center", "right")


def _check_hex_color(value: Optional[str]) -> Optional[str]:
    if value is not None and not HEX_COLOR.match(value):
        raise ValueError("color must be a hex value like #FF8800")
    return value


def validate_layout(layout: Dict[str, Any]) -> Dict[str, Any]:
    """Require {version: str, objects: [{type: str, ...}, ...]}"""
    if not isinstance(layout.get("version"), str):
        raise ValueError("layout.version is required and must be a string")

    objects = layout.get("objects")
    if not isinstance(objects, list):
        raise ValueError("layout.objects is required and must be a list")

    for i, obj in enumerate(objects):
        if not isinstance(obj, dict):
            raise ValueError(f"layout.objects[{i}] must be an object")
        if not isinstance(obj.get("type"), str):
            raise ValueError(f"layout.objects[{i}].type is required and must be a string")

    background = layout.get("background")
    if background is not None and not isinstance(background, dict):
        raise ValueError("layout.background must be an object")
    return layout


# ====================
# Categories
# ====================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    color: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    is_active: bool = True
    sort_order: int = Field(0, ge=0)

    @field_validator("color")
    @classmethod
    def color_format(cls, v):
        return _check_hex_color(v)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    color: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator("color")
    @classmethod
    def color_format(cls, v):
        return _check_hex_color(v)


class BulkToggleRequest(BaseModel):
    ids: List[int]
    is_active: bool

    @field_validator("ids")
    @classmethod
    def ids_not_empty(cls, v):
        if not v:
            raise ValueError("ids must contain at least one category id")
        return v


# ====================
# Templates
# ====================

def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in TEMPLATE_CATEGORIES:
        raise ValueError(f"category must be one of: {', '.join(TEMPLATE_CATEGORIES)}")
    return value


def _check_tags(value: Optional[List[str]]) -> Optional[List[str]]:
    for tag in value or []:
        if len(tag) > 50:
            raise ValueError("tags must be at most 50 characters each")
    return value


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    layout: Dict[str, Any]
    category: str = "general"
    tags: List[str] = Field(default_factory=list)
    status: TemplateStatus = TemplateStatus.DRAFT
    is_default: bool = False

    @field_validator("layout")
    @classmethod
    def layout_shape(cls, v):
        return validate_layout(v)

    @field_validator("category")
    @classmethod
    def category_in_set(cls, v):
        return _check_category(v)

    @field_validator("tags")
    @classmethod
    def tag_length(cls, v):
        return _check_tags(v)


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    layout: Optional[Dict[str, Any]] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[TemplateStatus] = None
    is_default: Optional[bool] = None

    @field_validator("layout")
    @classmethod
    def layout_shape(cls, v):
        return validate_layout(v) if v is not None else v

    @field_validator("category")
    @classmethod
    def category_in_set(cls, v):
        return _check_category(v)

    @field_validator("tags")
    @classmethod
    def tag_length(cls, v):
        return _check_tags(v)


class AttachAssetRequest(BaseModel):
    asset_id: int
    layer_name: str = Field(..., min_length=1, max_length=255)
    layer_config: Optional[Dict[str, Any]] = None
    sort_order: int = Field(0, ge=0)


# ====================
# Customization / export
# ====================

def _check_patch(key: str, patch: Dict[str, Any]) -> None:
    def fail(message: str):
        raise ValueError(f"customizations.{key}.{message}")

    if "content" in patch and patch["content"] is not None:
        if not isinstance(patch["content"], str) or len(patch["content"]) > 500:
            fail("content must be a string of at most 500 characters")

    if "fontSize" in patch and patch["fontSize"] is not None:
        size = patch["fontSize"]
        if isinstance(size, bool) or not isinstance(size, Number) or not 8 <= size <= 200:
            fail("fontSize must be a number between 8 and 200")

    if "color" in patch and patch["color"] is not None:
        if not isinstance(patch["color"], str) or not HEX_COLOR.match(patch["color"]):
            fail("color must be a hex value like #FF8800")

    if "fontFamily" in patch and patch["fontFamily"] is not None:
        if not isinstance(patch["fontFamily"], str) or len(patch["fontFamily"]) > 100:
            fail("fontFamily must be a string of at most 100 characters")

    if "textAlign" in patch and patch["textAlign"] is not None:
        if patch["textAlign"] not in TEXT_ALIGNMENTS:
            fail(f"textAlign must be one of: {', '.join(TEXT_ALIGNMENTS)}")

    if "src" in patch and patch["src"] is not None:
        if not isinstance(patch["src"], str) or len(patch["src"]) > 500:
            fail("src must be a string of at most 500 characters")

    for name in ("size", "position"):
        if name in patch and patch[name] is not None and not isinstance(patch[name], dict):
            fail(f"{name} must be an object")


class CustomizationRequest(BaseModel):
    customizations: Dict[str, Dict[str, Any]]

    @field_validator("customizations")
    @classmethod
    def patch_values(cls, v):
        for key, patch in v.items():
            _check_patch(key, patch)
        return v


class ExportRequest(CustomizationRequest):
    format: ExportFormat
    quality: ExportQuality


class RendererUpdate(BaseModel):
    """Progress report from the external renderer"""
    status: ExportStatus
    progress: Optional[int] = Field(None, ge=0, le=100)
    download_url: Optional[str] = None
    error_message: Optional[str] = None


# ====================
# Assets
# ====================

class AssetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    is_public: Optional[bool] = None

