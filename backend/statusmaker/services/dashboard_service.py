"""Admin dashboard aggregates"""

from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from statusmaker.models.asset import Asset
from statusmaker.models.category import Category
from statusmaker.models.export_job import ExportJob
from statusmaker.models.template import Template, TemplateStatus


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def summary(self, recent_limit: int = 5, top_limit: int = 5) -> Dict[str, Any]:
        by_status = dict(
            self.db.query(Template.status, func.count(Template.id))
            .group_by(Template.status)
            .all()
        )

        recent = (
            self.db.query(Template)
            .order_by(Template.created_at.desc(), Template.id.desc())
            .limit(recent_limit)
            .all()
        )

        # Templates reference categories by slug
        template_count = func.count(Template.id).label("templates_count")
        top_categories = (
            self.db.query(Category, template_count)
            .outerjoin(Template, Template.category == Category.slug)
            .group_by(Category.id)
            .order_by(template_count.desc(), Category.sort_order, Category.name)
            .limit(top_limit)
            .all()
        )

        return {
            "total_templates": sum(by_status.values()),
            "total_categories": self.db.query(func.count(Category.id)).scalar() or 0,
            "templates_by_status": {
                s.value: by_status.get(s.value, 0) for s in TemplateStatus
            },
            "total_assets": self.db.query(func.count(Asset.id)).scalar() or 0,
            "total_exports": self.db.query(func.count(ExportJob.id)).scalar() or 0,
            "recent_templates": [t.to_dict(include_layout=False) for t in recent],
            "top_categories": [
                category.to_dict(templates_count=count) for category, count in top_categories
            ],
        }
