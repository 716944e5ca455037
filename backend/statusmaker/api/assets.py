"""
Asset Library API (admin)

Upload, list, inspect, update, replace, download and delete media assets.
All endpoints require the manage_assets permission.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from statusmaker.core.auth import require_permission
from statusmaker.core.database import get_db
from statusmaker.models.admin import AdminContext, AdminPermission
from statusmaker.models.request_schemas import AssetUpdate
from statusmaker.services.asset_service import AssetService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/assets", tags=["admin-assets"])

require_manage_assets = require_permission(AdminPermission.MANAGE_ASSETS)


@router.get("")
def list_assets(
    file_type: Optional[str] = Query(None, description="image | video | audio | lottie"),
    is_public: Optional[bool] = None,
    search: Optional[str] = None,
    order: str = Query("desc", description="asc | desc by upload time"),
    admin: AdminContext = Depends(require_manage_assets),
    db: Session = Depends(get_db)
):
    assets = AssetService(db).list_assets(
        file_type=file_type, is_public=is_public, search=search, order=order
    )
    return {"assets": [a.to_dict() for a in assets], "total": len(assets)}


@router.post("", status_code=status.HTTP_201_CREATED)
def upload_asset(
    file: UploadFile = File(...),
    file_type: str = Form(...),
    name: Optional[str] = Form(None),
    is_public: bool = Form(True),
    admin: AdminContext = Depends(require_manage_assets),
    db: Session = Depends(get_db)
):
    """
    Upload a media file

    Metadata (dimensions, duration...) is extracted according to file_type.
    """
    asset = AssetService(db).upload(file, file_type, admin, name=name, is_public=is_public)
    return asset.to_dict()


@router.get("/{asset_id}")
def get_asset(
    asset_id: int,
    admin: AdminContext = Depends(require_manage_assets),
    db: Session = Depends(get_db)
):
    """Asset details including the templates using it"""
    return AssetService(db).get(asset_id).to_dict(include_templates=True)


@router.put("/{asset_id}")
def update_asset(
    asset_id: int,
    data: AssetUpdate,
    admin: AdminContext = Depends(require_manage_assets),
    db: Session = Depends(get_db)
):
    return AssetService(db).update(asset_id, data, admin).to_dict()


@router.post("/{asset_id}/replace")
def replace_asset_file(
    asset_id: int,
    file: UploadFile = File(...),
    admin: AdminContext = Depends(require_manage_assets),
    db: Session = Depends(get_db)
):
    """Swap the stored file; template attachments are kept"""
    return AssetService(db).replace_file(asset_id, file, admin).to_dict()


@router.get("/{asset_id}/download")
def download_asset(
    asset_id: int,
    admin: AdminContext = Depends(require_manage_assets),
    db: Session = Depends(get_db)
):
    service = AssetService(db)
    asset = service.get(asset_id)
    path = service.download_path(asset_id)
    return FileResponse(path, media_type=asset.mime_type, filename=asset.original_name)


@router.delete("/{asset_id}")
def delete_asset(
    asset_id: int,
    admin: AdminContext = Depends(require_manage_assets),
    db: Session = Depends(get_db)
):
    AssetService(db).delete(asset_id, admin)
    return {"success": True, "message": f"Asset {asset_id} deleted"}
