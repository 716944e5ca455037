import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from statusmaker.core.database import Base

# Category slugs a template may be filed under
TEMPLATE_CATEGORIES = (
    "birthday",
    "wedding",
    "festival",
    "quotes",
    "anniversary",
    "graduation",
    "holiday",
    "business",
    "social",
    "general",
)


class TemplateStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

    def next(self) -> "TemplateStatus":
        """draft -> published -> archived -> draft"""
        order = [TemplateStatus.DRAFT, TemplateStatus.PUBLISHED, TemplateStatus.ARCHIVED]
        return order[(order.index(self) + 1) % len(order)]


class Template(Base):
    """
    Video status template.

    `layout` holds the editor document ({version, objects, background}) that
    the customization engine patches per request. `version` counts layout
    revisions and is bumped by TemplateService, never by ORM hooks.
    """
    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)

    layout = Column(JSON, nullable=False)
    thumbnail_url = Column(String, nullable=True)

    category = Column(String(50), nullable=False, default="general")
    tags = Column(JSON, nullable=False, default=list)

    created_by = Column(Integer, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(Integer, nullable=False, default=1)
    status = Column(String(20), nullable=False, default=TemplateStatus.DRAFT.value)
    is_default = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    creator = relationship("Admin", back_populates="templates")
    template_assets = relationship(
        "TemplateAsset",
        back_populates="template",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TemplateAsset.sort_order",
    )
    export_jobs = relationship("ExportJob", back_populates="template", passive_deletes=True)

    __table_args__ = (
        Index("ix_templates_status_category", "status", "category"),
    )

    def __repr__(self):
        return f"<Template(name='{self.name}', slug='{self.slug}', status='{self.status}', version={self.version})>"

    def to_dict(
        self,
        include_layout: bool = True,
        include_assets: bool = False,
        public_assets_only: bool = False,
    ) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "thumbnail_url": self.thumbnail_url,
            "category": self.category,
            "tags": list(self.tags or []),
            "created_by": self.created_by,
            "version": self.version,
            "status": self.status,
            "is_default": self.is_default,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_layout:
            data["layout"] = self.layout
        if include_assets:
            links = self.template_assets
            if public_assets_only:
                # Private assets stay out of unauthenticated responses
                links = [ta for ta in links if ta.asset is not None and ta.asset.is_public]
            data["assets"] = [ta.to_dict(include_asset=True) for ta in links]
        return data
