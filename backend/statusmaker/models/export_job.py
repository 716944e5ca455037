"""Export job model for tracking renders handed to the external renderer"""

import enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from statusmaker.core.database import Base


class ExportStatus(str, enum.Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExportStatus.COMPLETED, ExportStatus.FAILED)


class ExportFormat(str, enum.Enum):
    MP4 = "mp4"
    WEBM = "webm"


class ExportQuality(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    ULTRA = "ultra"


class ExportJob(Base):
    """
    One row per export request.

    The customized layout is frozen into `layout_snapshot` when the job is
    queued, so later edits to the template never leak into a render that is
    already in flight.
    """
    __tablename__ = "export_jobs"

    id = Column(Integer, primary_key=True, index=True)

    # Public handle returned to clients, e.g. "export_3f2a..."
    job_id = Column(String(64), nullable=False, unique=True, index=True)

    # Kept nullable so deleting a template does not erase render history
    template_id = Column(Integer, ForeignKey("templates.id", ondelete="SET NULL"), nullable=True, index=True)

    status = Column(String(20), nullable=False, default=ExportStatus.QUEUED.value, index=True)
    progress = Column(Integer, nullable=False, default=0)  # 0-100

    format = Column(String(10), nullable=False)
    quality = Column(String(10), nullable=False)

    layout_snapshot = Column(JSON, nullable=False)
    customizations = Column(JSON, nullable=True)

    download_url = Column(String, nullable=True)
    error_message = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
    completed_at = Column(DateTime, nullable=True)

    template = relationship("Template", back_populates="export_jobs")

    def __repr__(self):
        return f"<ExportJob(job_id={self.job_id}, status={self.status}, progress={self.progress})>"

    def to_status_dict(self) -> dict:
        """Shape returned by the status poll endpoint"""
        return {
            "job_id": self.job_id,
            "status": self.status,
            "progress": self.progress,
            "download_url": self.download_url,
        }

    def to_dict(self) -> dict:
        """Full record, including what the renderer needs to do its work"""
        return {
            **self.to_status_dict(),
            "template_id": self.template_id,
            "format": self.format,
            "quality": self.quality,
            "layout": self.layout_snapshot,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
