"""
Template management: CRUD, status cycling, duplication, thumbnails and
asset attachments.

Slug generation and version bumps are plain functions called here before
save, never ORM event hooks.
"""

import json
import logging
from typing import Any, List, Mapping, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from statusmaker.core.config import settings
from statusmaker.core.database import commit_or_rollback
from statusmaker.core.exceptions import FileUploadError, NotFoundError, ValidationError
from statusmaker.models.admin import AdminContext
from statusmaker.models.asset import Asset, TemplateAsset
from statusmaker.models.request_schemas import AttachAssetRequest, TemplateCreate, TemplateUpdate
from statusmaker.models.template import Template, TemplateStatus
from statusmaker.services.storage_service import THUMBNAIL_FOLDER, StorageService
from statusmaker.utils.slugs import unique_slug

logger = logging.getLogger(__name__)


def canonical_json(document: Any) -> str:
    return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def layout_changed(current: Mapping[str, Any], submitted: Mapping[str, Any]) -> bool:
    """Compare layouts by content, ignoring key order"""
    return canonical_json(current) != canonical_json(submitted)


def next_version(template: Template, submitted_layout: Optional[Mapping[str, Any]]) -> int:
    """Version after an update: +1 exactly when the layout content changes"""
    current = template.version or 1
    if submitted_layout is None:
        return current
    return current + 1 if layout_changed(template.layout, submitted_layout) else current


def template_slug(db: Session, name: str, exclude_id: Optional[int] = None) -> str:
    return unique_slug(db, Template, name, fallback="template", exclude_id=exclude_id)


class TemplateService:
    """CRUD and lifecycle operations on templates"""

    def __init__(self, db: Session, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage or StorageService()

    # ==================== Queries ====================

    def get(self, template_id: int) -> Template:
        template = self.db.query(Template).filter(Template.id == template_id).first()
        if not template:
            raise NotFoundError("Template", template_id)
        return template

    def get_published(self, slug: str) -> Template:
        """Published template by slug; drafts and archived templates are not found"""
        template = self.db.query(Template).filter(
            Template.slug == slug,
            Template.status == TemplateStatus.PUBLISHED.value
        ).first()
        if not template:
            raise NotFoundError("Template", slug)
        return template

    def list_templates(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Template]:
        """Admin listing, newest first"""
        query = self.db.query(Template)
        if status:
            query = query.filter(Template.status == status)
        if category:
            query = query.filter(Template.category == category)
        if search:
            query = query.filter(Template.name.ilike(f"%{search}%"))
        return query.order_by(Template.created_at.desc(), Template.id.desc()).all()

    def list_published(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[Template]:
        """Public catalogue. Default templates come first."""
        query = self.db.query(Template).filter(Template.status == TemplateStatus.PUBLISHED.value)
        if category:
            query = query.filter(Template.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(Template.name.ilike(pattern) | Template.description.ilike(pattern))

        templates = query.order_by(
            Template.is_default.desc(), Template.created_at.desc(), Template.id.desc()
        ).all()

        # JSON containment differs per database, so tags are matched here
        if tag:
            templates = [t for t in templates if tag in (t.tags or [])]
        return templates

    # ==================== Mutations ====================

    def _ensure_name_free(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Template.id).filter(Template.name == name)
        if exclude_id is not None:
            query = query.filter(Template.id != exclude_id)
        if query.first():
            raise ValidationError(f"A template named '{name}' already exists", field="name")

    def create(self, data: TemplateCreate, admin: AdminContext) -> Template:
        self._ensure_name_free(data.name)

        template = Template(
            name=data.name,
            slug=template_slug(self.db, data.name),
            description=data.description,
            layout=data.layout,
            category=data.category,
            tags=list(data.tags),
            created_by=admin.id,
            version=1,
            status=data.status.value,
            is_default=data.is_default,
        )
        self.db.add(template)
        commit_or_rollback(self.db, "A template with this name or slug already exists")
        self.db.refresh(template)

        logger.info(f"Admin {admin.id} created template {template.id} ({template.slug})")
        return template

    def update(self, template_id: int, data: TemplateUpdate, admin: AdminContext) -> Template:
        """
        Update a template.

        The slug is kept when the name changes. `version` goes up by one
        only if the submitted layout differs from the stored one.
        """
        template = self.get(template_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("name") and changes["name"] != template.name:
            self._ensure_name_free(changes["name"], exclude_id=template.id)

        template.version = next_version(template, changes.get("layout"))

        for field_name, value in changes.items():
            if value is None and field_name != "description":
                continue
            if field_name == "status":
                value = TemplateStatus(value).value
            setattr(template, field_name, value)

        commit_or_rollback(self.db, "A template with this name already exists")
        self.db.refresh(template)

        logger.info(
            f"Admin {admin.id} updated template {template.id}: {sorted(changes)} "
            f"(version {template.version})"
        )
        return template

    def toggle_status(self, template_id: int, admin: AdminContext) -> Template:
        """Advance draft -> published -> archived -> draft"""
        template = self.get(template_id)
        previous = template.status
        template.status = TemplateStatus(template.status).next().value
        commit_or_rollback(self.db)
        self.db.refresh(template)

        logger.info(f"Admin {admin.id} moved template {template.id} {previous} -> {template.status}")
        return template

    def delete(self, template_id: int, admin: AdminContext) -> None:
        """Delete a template and its asset links; the thumbnail is removed afterwards"""
        template = self.get(template_id)
        thumbnail = template.thumbnail_url

        self.db.delete(template)
        commit_or_rollback(self.db)
        logger.info(f"Admin {admin.id} deleted template {template_id}")

        # Best effort; a leftover file does not undo the delete
        if thumbnail:
            self.storage.delete(thumbnail)

    def duplicate(self, template_id: int, admin: AdminContext) -> Template:
        """
        Copy a template as a new draft owned by `admin`.

        The copy is named "{name} (Copy)", then "(Copy 2)", "(Copy 3)"...
        until the name is free, and gets its own slug and version 1.
        """
        source = self.get(template_id)

        name = f"{source.name} (Copy)"
        n = 2
        while self.db.query(Template.id).filter(Template.name == name).first():
            name = f"{source.name} (Copy {n})"
            n += 1

        copy = Template(
            name=name,
            slug=template_slug(self.db, name),
            description=source.description,
            layout=json.loads(canonical_json(source.layout)),
            thumbnail_url=None,
            category=source.category,
            tags=list(source.tags or []),
            created_by=admin.id,
            version=1,
            status=TemplateStatus.DRAFT.value,
            is_default=False,
        )
        for link in source.template_assets:
            copy.template_assets.append(TemplateAsset(
                asset_id=link.asset_id,
                layer_name=link.layer_name,
                layer_config=link.layer_config,
                sort_order=link.sort_order,
            ))

        self.db.add(copy)
        commit_or_rollback(self.db, "A template with this name or slug already exists")
        self.db.refresh(copy)

        logger.info(f"Admin {admin.id} duplicated template {source.id} as {copy.id} ({copy.slug})")
        return copy

    def set_thumbnail(self, template_id: int, file: UploadFile, admin: AdminContext) -> Template:
        """Store a new thumbnail image and drop the previous file"""
        template = self.get(template_id)

        if not (file.content_type or "").startswith("image/"):
            raise FileUploadError("Thumbnail must be an image")

        content = self.storage.read_upload(file, settings.MAX_THUMBNAIL_SIZE_MB)
        new_path = self.storage.save(content, file.filename, THUMBNAIL_FOLDER)

        previous = template.thumbnail_url
        template.thumbnail_url = new_path
        try:
            commit_or_rollback(self.db)
        except Exception:
            self.storage.delete(new_path)
            raise
        self.db.refresh(template)

        if previous and previous != new_path:
            self.storage.delete(previous)

        logger.info(f"Admin {admin.id} set thumbnail for template {template.id}: {new_path}")
        return template

    # ==================== Asset attachments ====================

    def list_assets(self, template_id: int) -> List[TemplateAsset]:
        return self.get(template_id).template_assets

    def attach_asset(self, template_id: int, data: AttachAssetRequest, admin: AdminContext) -> TemplateAsset:
        template = self.get(template_id)
        asset = self.db.query(Asset).filter(Asset.id == data.asset_id).first()
        if not asset:
            raise NotFoundError("Asset", data.asset_id)

        existing = self.db.query(TemplateAsset.id).filter(
            TemplateAsset.template_id == template.id,
            TemplateAsset.asset_id == asset.id,
            TemplateAsset.layer_name == data.layer_name,
        ).first()
        if existing:
            raise ValidationError(
                f"Asset {asset.id} is already attached to layer '{data.layer_name}'",
                field="layer_name",
            )

        link = TemplateAsset(
            template_id=template.id,
            asset_id=asset.id,
            layer_name=data.layer_name,
            layer_config=data.layer_config,
            sort_order=data.sort_order,
        )
        self.db.add(link)
        commit_or_rollback(self.db, "This asset is already attached to that layer")
        self.db.refresh(link)

        logger.info(
            f"Admin {admin.id} attached asset {asset.id} to template {template.id} "
            f"layer '{data.layer_name}'"
        )
        return link

    def detach_asset(self, template_id: int, link_id: int, admin: AdminContext) -> None:
        link = self.db.query(TemplateAsset).filter(
            TemplateAsset.id == link_id,
            TemplateAsset.template_id == template_id,
        ).first()
        if not link:
            raise NotFoundError("TemplateAsset", link_id)

        self.db.delete(link)
        commit_or_rollback(self.db)
        logger.info(f"Admin {admin.id} detached link {link_id} from template {template_id}")
