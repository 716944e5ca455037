"""
Public catalogue: active categories and published templates.

No authentication. Drafts and archived templates are never exposed here.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from statusmaker.core.database import get_db
from statusmaker.services.category_service import CategoryService
from statusmaker.services.template_service import TemplateService

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/categories")
def list_public_categories(db: Session = Depends(get_db)):
    return {"categories": CategoryService(db).list_public()}


@router.get("/templates")
def list_public_templates(
    category: Optional[str] = None,
    search: Optional[str] = None,
    tag: Optional[str] = None,
    db: Session = Depends(get_db)
):
    templates = TemplateService(db).list_published(category=category, search=search, tag=tag)
    return {
        "templates": [t.to_dict(include_layout=False) for t in templates],
        "total": len(templates),
    }


@router.get("/templates/{slug}")
def get_public_template(slug: str, db: Session = Depends(get_db)):
    """Published template with its layout and attached public assets"""
    template = TemplateService(db).get_published(slug)
    return template.to_dict(include_assets=True, public_assets_only=True)
