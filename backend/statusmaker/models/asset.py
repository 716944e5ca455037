import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from statusmaker.core.database import Base


class AssetType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    LOTTIE = "lottie"


def human_file_size(num_bytes: int) -> str:
    """Format a byte count as B/KB/MB/GB with two decimals (e.g. '1.5 MB')"""
    size = float(num_bytes or 0)
    units = ["B", "KB", "MB", "GB"]
    i = 0
    while size > 1024 and i < len(units) - 1:
        size /= 1024
        i += 1
    return f"{round(size, 2):g} {units[i]}"


class Asset(Base):
    """
    Media file in the asset library (image, video, audio or lottie).

    Assets live independently of templates; TemplateAsset rows bind them to
    named layers of a template.
    """
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    file_path = Column(String, nullable=False)
    file_type = Column(String(20), nullable=False, index=True)
    mime_type = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False)  # bytes

    # Type-dependent: width/height for images, duration/bitrate for audio...
    # Note: Can't use 'metadata' as attribute name (reserved by SQLAlchemy)
    asset_metadata = Column("metadata", JSON, nullable=True)

    is_public = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    template_assets = relationship(
        "TemplateAsset",
        back_populates="asset",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Asset(id={self.id}, name='{self.name}', type='{self.file_type}')>"

    @property
    def file_size_human(self) -> str:
        return human_file_size(self.file_size)

    def to_dict(self, include_templates: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "original_name": self.original_name,
            "file_path": self.file_path,
            "file_type": self.file_type,
            "mime_type": self.mime_type,
            "file_size": self.file_size,
            "file_size_human": self.file_size_human,
            "metadata": self.asset_metadata or {},
            "is_public": self.is_public,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_templates:
            data["templates"] = [
                {
                    "id": ta.template.id,
                    "name": ta.template.name,
                    "slug": ta.template.slug,
                    "layer_name": ta.layer_name,
                }
                for ta in self.template_assets
            ]
        return data


class TemplateAsset(Base):
    """Binds an asset to a named layer of a template"""
    __tablename__ = "template_assets"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(Integer, ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    layer_name = Column(String(255), nullable=False)
    layer_config = Column(JSON, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    template = relationship("Template", back_populates="template_assets")
    asset = relationship("Asset", back_populates="template_assets")

    __table_args__ = (
        UniqueConstraint("template_id", "asset_id", "layer_name", name="uix_template_asset_layer"),
    )

    def to_dict(self, include_asset: bool = False) -> dict:
        data = {
            "id": self.id,
            "template_id": self.template_id,
            "asset_id": self.asset_id,
            "layer_name": self.layer_name,
            "layer_config": self.layer_config,
            "sort_order": self.sort_order,
        }
        if include_asset and self.asset is not None:
            data["asset"] = self.asset.to_dict()
        return data
