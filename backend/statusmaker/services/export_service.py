"""
Export jobs: materialize a customized layout for the external renderer.

Nothing is rendered here. An export request writes one ExportJob row with a
frozen layout snapshot and returns immediately; the renderer reports back
through `apply_renderer_update`.
"""

import logging
import secrets
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy.orm import Session

from statusmaker.core.config import settings
from statusmaker.core.database import commit_or_rollback
from statusmaker.core.exceptions import NotFoundError, ValidationError
from statusmaker.models.export_job import ExportFormat, ExportJob, ExportQuality, ExportStatus
from statusmaker.models.request_schemas import RendererUpdate
from statusmaker.models.template import Template
from statusmaker.services.customization_service import apply_customizations

logger = logging.getLogger(__name__)

# Statuses a job may move to from each non-terminal status
ALLOWED_TRANSITIONS = {
    ExportStatus.QUEUED: {ExportStatus.PROCESSING, ExportStatus.COMPLETED, ExportStatus.FAILED},
    ExportStatus.PROCESSING: {ExportStatus.PROCESSING, ExportStatus.COMPLETED, ExportStatus.FAILED},
}


def new_job_id() -> str:
    return f"export_{secrets.token_hex(16)}"


def default_download_url(job: ExportJob) -> str:
    return f"{settings.EXPORT_URL_PREFIX.rstrip('/')}/{job.job_id}.{job.format}"


class ExportService:
    """Creates export jobs and tracks them through the renderer lifecycle"""

    def __init__(self, db: Session):
        self.db = db

    def enqueue(
        self,
        template: Template,
        customizations: Mapping[str, Mapping[str, Any]],
        format: ExportFormat,
        quality: ExportQuality,
    ) -> ExportJob:
        """
        Queue an export of `template` with `customizations` applied.

        The patched layout is stored on the job, so later template edits
        never change what gets rendered.
        """
        layout = apply_customizations(template.layout, customizations)

        job = ExportJob(
            job_id=new_job_id(),
            template_id=template.id,
            status=ExportStatus.QUEUED.value,
            progress=0,
            format=ExportFormat(format).value,
            quality=ExportQuality(quality).value,
            layout_snapshot=layout,
            customizations=dict(customizations or {}),
        )
        self.db.add(job)
        commit_or_rollback(self.db)
        self.db.refresh(job)

        logger.info(
            f"Queued export {job.job_id} for template {template.id} ({job.format}/{job.quality})"
        )
        return job

    def get(self, job_id: str) -> ExportJob:
        job = self.db.query(ExportJob).filter(ExportJob.job_id == job_id).first()
        if not job:
            raise NotFoundError("Export job", job_id)
        return job

    def apply_renderer_update(self, job_id: str, update: RendererUpdate) -> ExportJob:
        """
        Record a status report from the renderer.

        Raises:
            ValidationError: If the job is already completed/failed or the
                transition is not allowed
        """
        job = self.get(job_id)
        current = ExportStatus(job.status)
        target = ExportStatus(update.status)

        if current.is_terminal:
            raise ValidationError(
                f"Export {job.job_id} is already {current.value}", field="status"
            )
        if target not in ALLOWED_TRANSITIONS[current]:
            raise ValidationError(
                f"Cannot move export {job.job_id} from {current.value} to {target.value}",
                field="status",
            )

        job.status = target.value
        if target == ExportStatus.PROCESSING:
            if update.progress is not None:
                job.progress = update.progress
        elif target == ExportStatus.COMPLETED:
            job.progress = 100
            job.download_url = update.download_url or default_download_url(job)
            job.error_message = None
            job.completed_at = datetime.utcnow()
        elif target == ExportStatus.FAILED:
            if update.progress is not None:
                job.progress = update.progress
            job.error_message = update.error_message or "Rendering failed"
            job.completed_at = datetime.utcnow()

        commit_or_rollback(self.db)
        self.db.refresh(job)

        log = logger.warning if target == ExportStatus.FAILED else logger.info
        log(f"Export {job.job_id}: {current.value} -> {job.status} ({job.progress}%)")
        return job
