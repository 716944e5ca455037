# Export all models for easy imports
# NOTE: Import admin BEFORE template to resolve the Template.creator relationship
from statusmaker.models.admin import Admin, AdminContext, AdminPermission, AdminRole
from statusmaker.models.asset import Asset, AssetType, TemplateAsset
from statusmaker.models.category import Category
from statusmaker.models.export_job import ExportFormat, ExportJob, ExportQuality, ExportStatus
from statusmaker.models.template import TEMPLATE_CATEGORIES, Template, TemplateStatus

__all__ = [
    "Admin",
    "AdminContext",
    "AdminPermission",
    "AdminRole",
    "Asset",
    "AssetType",
    "TemplateAsset",
    "Category",
    "ExportJob",
    "ExportFormat",
    "ExportQuality",
    "ExportStatus",
    "Template",
    "TemplateStatus",
    "TEMPLATE_CATEGORIES",
]
