"""
Template Editor API (public)

End users customize published templates here:

- POST /api/templates/{slug}/preview   patched layout + preview handle
- POST /api/templates/{slug}/export    queue a render, returns a job handle
- GET  /api/export/status/{job_id}     poll a render

The external renderer uses the remaining two endpoints:

- GET   /api/preview/{token}           resolve a preview handle to its layout
- PATCH /api/export/jobs/{job_id}      report progress (X-Renderer-Token)
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from statusmaker.core.config import settings
from statusmaker.core.database import get_db
from statusmaker.models.request_schemas import CustomizationRequest, ExportRequest, RendererUpdate
from statusmaker.services.customization_service import CustomizationService, decode_preview_token
from statusmaker.services.export_service import ExportService
from statusmaker.services.template_service import TemplateService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["editor"])


def verify_renderer_token(x_renderer_token: Optional[str] = Header(None)) -> None:
    """Admit the external renderer; the endpoint is off when no token is configured"""
    expected = settings.RENDERER_CALLBACK_TOKEN
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Renderer callbacks are disabled"
        )
    if not x_renderer_token or not hmac.compare_digest(x_renderer_token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid renderer token"
        )


@router.post("/templates/{slug}/preview")
def preview_template(slug: str, data: CustomizationRequest, db: Session = Depends(get_db)):
    """
    Apply customizations to a published template

    Nothing is persisted. The returned preview_url can be handed to the
    renderer, which resolves it through GET /api/preview/{token}.
    """
    template = TemplateService(db).get_published(slug)
    return CustomizationService().preview(template, data.customizations)


@router.post("/templates/{slug}/export", status_code=status.HTTP_202_ACCEPTED)
def export_template(slug: str, data: ExportRequest, db: Session = Depends(get_db)):
    """
    Queue a video export of a customized published template

    Returns immediately with a job handle; poll /api/export/status/{job_id}.
    """
    template = TemplateService(db).get_published(slug)
    job = ExportService(db).enqueue(template, data.customizations, data.format, data.quality)
    return {
        "job_id": job.job_id,
        "status": job.status,
        "download_url": job.download_url,
    }


@router.get("/export/status/{job_id}")
def get_export_status(job_id: str, db: Session = Depends(get_db)):
    return ExportService(db).get(job_id).to_status_dict()


@router.get("/preview/{token}")
def resolve_preview(token: str):
    """Decode a preview handle back into the layout it encodes"""
    return {"layout": decode_preview_token(token)}


@router.patch("/export/jobs/{job_id}", dependencies=[Depends(verify_renderer_token)])
def update_export_job(job_id: str, data: RendererUpdate, db: Session = Depends(get_db)):
    """Renderer progress report: queued -> processing -> completed | failed"""
    job = ExportService(db).apply_renderer_update(job_id, data)
    return job.to_dict()
