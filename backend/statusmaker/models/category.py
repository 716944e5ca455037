from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from statusmaker.core.database import Base


class Category(Base):
    """
    Template category shown in the public catalogue.

    Templates reference a category by slug (Template.category), so there is
    no foreign key between the two tables. Deleting a category that still
    has templates is refused by CategoryService.
    """
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=True)  # "#RRGGBB"
    icon = Column(String(100), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Category(name='{self.name}', slug='{self.slug}')>"

    def to_dict(self, templates_count: int = None) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "color": self.color,
            "icon": self.icon,
            "is_active": self.is_active,
            "sort_order": self.sort_order,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if templates_count is not None:
            data["templates_count"] = templates_count
        return data
