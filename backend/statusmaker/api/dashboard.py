from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from statusmaker.core.auth import require_permission
from statusmaker.core.database import get_db
from statusmaker.models.admin import AdminContext, AdminPermission
from statusmaker.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/admin/dashboard", tags=["admin-dashboard"])


@router.get("")
def get_dashboard(
    admin: AdminContext = Depends(require_permission(AdminPermission.VIEW_ANALYTICS)),
    db: Session = Depends(get_db)
):
    """Counts, recent templates and the busiest categories"""
    return DashboardService(db).summary()
