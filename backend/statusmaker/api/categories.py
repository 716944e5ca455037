"""
Category Management API (admin)

All endpoints require the manage_categories permission.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from statusmaker.core.auth import require_permission
from statusmaker.core.database import get_db
from statusmaker.models.admin import AdminContext, AdminPermission
from statusmaker.models.request_schemas import BulkToggleRequest, CategoryCreate, CategoryUpdate
from statusmaker.services.category_service import CategoryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/categories", tags=["admin-categories"])

require_manage_categories = require_permission(AdminPermission.MANAGE_CATEGORIES)


@router.get("")
def list_categories(
    search: Optional[str] = Query(None, description="Match name or description"),
    is_active: Optional[bool] = None,
    sort_by: str = Query("sort_order", description="name | sort_order | created_at"),
    sort_dir: str = Query("asc", description="asc | desc"),
    admin: AdminContext = Depends(require_manage_categories),
    db: Session = Depends(get_db)
):
    """List categories with their template counts"""
    categories = CategoryService(db).list_categories(
        search=search, is_active=is_active, sort_by=sort_by, sort_dir=sort_dir
    )
    return {"categories": categories, "total": len(categories)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    data: CategoryCreate,
    admin: AdminContext = Depends(require_manage_categories),
    db: Session = Depends(get_db)
):
    service = CategoryService(db)
    category = service.create(data, admin)
    return category.to_dict(templates_count=0)


@router.post("/bulk-toggle")
def bulk_toggle_categories(
    data: BulkToggleRequest,
    admin: AdminContext = Depends(require_manage_categories),
    db: Session = Depends(get_db)
):
    """Set is_active on several categories at once"""
    updated = CategoryService(db).bulk_toggle(data.ids, data.is_active, admin)
    return {"updated": updated, "is_active": data.is_active}


@router.get("/{category_id}")
def get_category(
    category_id: int,
    admin: AdminContext = Depends(require_manage_categories),
    db: Session = Depends(get_db)
):
    service = CategoryService(db)
    category = service.get(category_id)
    return category.to_dict(templates_count=service.templates_count(category))


@router.put("/{category_id}")
def update_category(
    category_id: int,
    data: CategoryUpdate,
    admin: AdminContext = Depends(require_manage_categories),
    db: Session = Depends(get_db)
):
    service = CategoryService(db)
    category = service.update(category_id, data, admin)
    return category.to_dict(templates_count=service.templates_count(category))


@router.post("/{category_id}/toggle")
def toggle_category(
    category_id: int,
    admin: AdminContext = Depends(require_manage_categories),
    db: Session = Depends(get_db)
):
    """Flip is_active"""
    category = CategoryService(db).toggle(category_id, admin)
    return category.to_dict()


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    admin: AdminContext = Depends(require_manage_categories),
    db: Session = Depends(get_db)
):
    """Delete a category. Refused while templates still use it."""
    CategoryService(db).delete(category_id, admin)
    return {"success": True, "message": f"Category {category_id} deleted"}
