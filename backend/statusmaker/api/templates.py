"""
Template Management API (admin)

CRUD, status cycling, duplication, thumbnails, asset attachments and
draft previews. All endpoints require the manage_templates permission.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from statusmaker.core.auth import require_permission
from statusmaker.core.database import get_db
from statusmaker.models.admin import AdminContext, AdminPermission
from statusmaker.models.request_schemas import (
    AttachAssetRequest,
    CustomizationRequest,
    TemplateCreate,
    TemplateUpdate,
)
from statusmaker.services.customization_service import CustomizationService
from statusmaker.services.template_service import TemplateService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/templates", tags=["admin-templates"])

require_manage_templates = require_permission(AdminPermission.MANAGE_TEMPLATES)


@router.get("")
def list_templates(
    status_filter: Optional[str] = Query(None, alias="status", description="draft | published | archived"),
    category: Optional[str] = None,
    search: Optional[str] = Query(None, description="Match template name"),
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    """List templates, newest first (layouts omitted)"""
    templates = TemplateService(db).list_templates(status=status_filter, category=category, search=search)
    return {
        "templates": [t.to_dict(include_layout=False) for t in templates],
        "total": len(templates),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_template(
    data: TemplateCreate,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    template = TemplateService(db).create(data, admin)
    return template.to_dict()


@router.get("/{template_id}")
def get_template(
    template_id: int,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    template = TemplateService(db).get(template_id)
    return template.to_dict(include_assets=True)


@router.put("/{template_id}")
def update_template(
    template_id: int,
    data: TemplateUpdate,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    """Update fields; version goes up only when the layout content changes"""
    template = TemplateService(db).update(template_id, data, admin)
    return template.to_dict()


@router.delete("/{template_id}")
def delete_template(
    template_id: int,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    TemplateService(db).delete(template_id, admin)
    return {"success": True, "message": f"Template {template_id} deleted"}


@router.post("/{template_id}/toggle-status")
def toggle_template_status(
    template_id: int,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    """Cycle draft -> published -> archived -> draft"""
    template = TemplateService(db).toggle_status(template_id, admin)
    return template.to_dict(include_layout=False)


@router.post("/{template_id}/duplicate", status_code=status.HTTP_201_CREATED)
def duplicate_template(
    template_id: int,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    template = TemplateService(db).duplicate(template_id, admin)
    return template.to_dict(include_assets=True)


@router.post("/{template_id}/thumbnail")
def upload_thumbnail(
    template_id: int,
    file: UploadFile = File(...),
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    """Replace the template thumbnail (image, MAX_THUMBNAIL_SIZE_MB)"""
    template = TemplateService(db).set_thumbnail(template_id, file, admin)
    return template.to_dict(include_layout=False)


@router.post("/{template_id}/preview")
def preview_template(
    template_id: int,
    data: CustomizationRequest,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    """Preview any template, drafts included. Nothing is saved."""
    template = TemplateService(db).get(template_id)
    return CustomizationService().preview(template, data.customizations)


# ==================== Asset attachments ====================

@router.get("/{template_id}/assets")
def list_template_assets(
    template_id: int,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    links = TemplateService(db).list_assets(template_id)
    return {"assets": [link.to_dict(include_asset=True) for link in links]}


@router.post("/{template_id}/assets", status_code=status.HTTP_201_CREATED)
def attach_asset(
    template_id: int,
    data: AttachAssetRequest,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    """Bind an asset to a named layer of the template"""
    link = TemplateService(db).attach_asset(template_id, data, admin)
    return link.to_dict(include_asset=True)


@router.delete("/{template_id}/assets/{link_id}")
def detach_asset(
    template_id: int,
    link_id: int,
    admin: AdminContext = Depends(require_manage_templates),
    db: Session = Depends(get_db)
):
    TemplateService(db).detach_asset(template_id, link_id, admin)
    return {"success": True, "message": f"Asset link {link_id} removed"}
