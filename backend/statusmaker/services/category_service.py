"""
Category management for the admin API and the public catalogue.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from statusmaker.core.database import commit_or_rollback
from statusmaker.core.exceptions import NotFoundError, ValidationError
from statusmaker.data.categories import DEFAULT_CATEGORIES
from statusmaker.models.admin import AdminContext
from statusmaker.models.category import Category
from statusmaker.models.request_schemas import CategoryCreate, CategoryUpdate
from statusmaker.models.template import Template, TemplateStatus
from statusmaker.utils.slugs import unique_slug

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "name": Category.name,
    "sort_order": Category.sort_order,
    "created_at": Category.created_at,
}


class CategoryService:
    """CRUD over categories. Templates are linked by slug, not by foreign key."""

    def __init__(self, db: Session):
        self.db = db

    # ==================== Queries ====================

    def get(self, category_id: int) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    def templates_count(self, category: Category, published_only: bool = False) -> int:
        query = self.db.query(func.count(Template.id)).filter(Template.category == category.slug)
        if published_only:
            query = query.filter(Template.status == TemplateStatus.PUBLISHED.value)
        return query.scalar() or 0

    def _counts_by_slug(self, published_only: bool = False) -> Dict[str, int]:
        query = self.db.query(Template.category, func.count(Template.id))
        if published_only:
            query = query.filter(Template.status == TemplateStatus.PUBLISHED.value)
        return dict(query.group_by(Template.category).all())

    def list_categories(
        self,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort_by: str = "sort_order",
        sort_dir: str = "asc",
    ) -> List[Dict[str, Any]]:
        """
        List categories with their template counts.

        Args:
            search: Substring matched against name and description
            is_active: Filter on active flag
            sort_by: name | sort_order | created_at
            sort_dir: asc | desc
        """
        if sort_by not in SORT_FIELDS:
            raise ValidationError(
                f"sort_by must be one of: {', '.join(SORT_FIELDS)}", field="sort_by"
            )
        if sort_dir not in ("asc", "desc"):
            raise ValidationError("sort_dir must be 'asc' or 'desc'", field="sort_dir")

        query = self.db.query(Category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Category.name.ilike(pattern), Category.description.ilike(pattern)))
        if is_active is not None:
            query = query.filter(Category.is_active == is_active)

        column = SORT_FIELDS[sort_by]
        query = query.order_by(column.desc() if sort_dir == "desc" else column.asc(), Category.id)

        counts = self._counts_by_slug()
        return [c.to_dict(templates_count=counts.get(c.slug, 0)) for c in query.all()]

    def list_public(self) -> List[Dict[str, Any]]:
        """Active categories by sort_order, counting published templates only"""
        categories = (
            self.db.query(Category)
            .filter(Category.is_active == True)
            .order_by(Category.sort_order, Category.name)
            .all()
        )
        counts = self._counts_by_slug(published_only=True)
        return [c.to_dict(templates_count=counts.get(c.slug, 0)) for c in categories]

    # ==================== Mutations ====================

    def _ensure_name_free(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Category.id).filter(Category.name == name)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first():
            raise ValidationError(f"A category named '{name}' already exists", field="name")

    def create(self, data: CategoryCreate, admin: AdminContext) -> Category:
        self._ensure_name_free(data.name)

        slug = unique_slug(self.db, Category, data.slug or data.name, fallback="category")
        category = Category(
            name=data.name,
            slug=slug,
            description=data.description,
            color=data.color,
            icon=data.icon,
            is_active=data.is_active,
            sort_order=data.sort_order,
        )
        self.db.add(category)
        commit_or_rollback(self.db, "A category with this name or slug already exists")
        self.db.refresh(category)

        logger.info(f"Admin {admin.id} created category {category.id} ({category.slug})")
        return category

    def update(self, category_id: int, data: CategoryUpdate, admin: AdminContext) -> Category:
        """Update fields. The slug is kept even when the name changes."""
        category = self.get(category_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("name") and changes["name"] != category.name:
            self._ensure_name_free(changes["name"], exclude_id=category.id)

        for field_name, value in changes.items():
            if value is None and field_name in ("name", "is_active", "sort_order"):
                continue
            setattr(category, field_name, value)

        commit_or_rollback(self.db, "A category with this name already exists")
        self.db.refresh(category)

        logger.info(f"Admin {admin.id} updated category {category.id}: {sorted(changes)}")
        return category

    def delete(self, category_id: int, admin: AdminContext) -> None:
        """
        Delete a category.

        Raises:
            ValidationError: If templates are still filed under it
        """
        category = self.get(category_id)
        count = self.templates_count(category)
        if count > 0:
            raise ValidationError(
                f"Cannot delete category '{category.name}': {count} template(s) still use it",
                field="category",
            )

        self.db.delete(category)
        commit_or_rollback(self.db)
        logger.info(f"Admin {admin.id} deleted category {category_id}")

    def toggle(self, category_id: int, admin: AdminContext) -> Category:
        category = self.get(category_id)
        category.is_active = not category.is_active
        commit_or_rollback(self.db)
        self.db.refresh(category)

        logger.info(f"Admin {admin.id} set category {category.id} active={category.is_active}")
        return category

    def bulk_toggle(self, ids: List[int], is_active: bool, admin: AdminContext) -> int:
        """
        Set is_active on many categories in one commit.

        Returns:
            Number of categories updated
        """
        if not ids:
            raise ValidationError("No categories selected", field="ids")

        updated = (
            self.db.query(Category)
            .filter(Category.id.in_(ids))
            .update({Category.is_active: is_active}, synchronize_session=False)
        )
        commit_or_rollback(self.db)

        logger.info(f"Admin {admin.id} bulk-set {updated} categories active={is_active}")
        return updated


def seed_default_categories(db: Session) -> List[Category]:
    """Create the default categories that do not exist yet (matched by slug)"""
    seeded = []

    for category_data in DEFAULT_CATEGORIES:
        existing = db.query(Category).filter(Category.slug == category_data["slug"]).first()
        if existing:
            logger.debug(f"Category '{category_data['slug']}' already exists, skipping")
            seeded.append(existing)
            continue

        category = Category(is_active=True, **category_data)
        db.add(category)
        seeded.append(category)
        logger.info(f"Created category: {category.name}")

    commit_or_rollback(db)
    for category in seeded:
        db.refresh(category)
    return seeded
