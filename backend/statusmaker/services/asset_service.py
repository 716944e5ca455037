"""
Asset library: upload, metadata, replacement and removal of media files.
"""

import logging
import mimetypes
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from statusmaker.core.config import settings
from statusmaker.core.database import commit_or_rollback
from statusmaker.core.exceptions import NotFoundError, ValidationError
from statusmaker.models.admin import AdminContext
from statusmaker.models.asset import Asset, AssetType
from statusmaker.models.request_schemas import AssetUpdate
from statusmaker.services.storage_service import ASSET_FOLDER, StorageService
from statusmaker.utils.media_metadata import extract_metadata

logger = logging.getLogger(__name__)


def _mime_type(file: UploadFile) -> str:
    if file.content_type and file.content_type != "application/octet-stream":
        return file.content_type
    guessed, _ = mimetypes.guess_type(file.filename or "")
    return guessed or "application/octet-stream"


def _asset_type(value: str) -> AssetType:
    try:
        return AssetType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in AssetType)
        raise ValidationError(f"file_type must be one of: {allowed}", field="file_type")


class AssetService:
    """CRUD over the asset library; files go through StorageService"""

    def __init__(self, db: Session, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage or StorageService()

    def get(self, asset_id: int) -> Asset:
        asset = self.db.query(Asset).filter(Asset.id == asset_id).first()
        if not asset:
            raise NotFoundError("Asset", asset_id)
        return asset

    def list_assets(
        self,
        file_type: Optional[str] = None,
        is_public: Optional[bool] = None,
        search: Optional[str] = None,
        order: str = "desc",
    ) -> List[Asset]:
        if order not in ("asc", "desc"):
            raise ValidationError("order must be 'asc' or 'desc'", field="order")

        query = self.db.query(Asset)
        if file_type:
            query = query.filter(Asset.file_type == _asset_type(file_type).value)
        if is_public is not None:
            query = query.filter(Asset.is_public == is_public)
        if search:
            pattern = f"%{search}%"
            query = query.filter(Asset.name.ilike(pattern) | Asset.original_name.ilike(pattern))

        if order == "asc":
            query = query.order_by(Asset.created_at.asc(), Asset.id.asc())
        else:
            query = query.order_by(Asset.created_at.desc(), Asset.id.desc())
        return query.all()

    def upload(
        self,
        file: UploadFile,
        file_type: str,
        admin: AdminContext,
        name: Optional[str] = None,
        is_public: bool = True,
    ) -> Asset:
        """
        Store an uploaded file and record it in the library.

        Args:
            file: Multipart upload
            file_type: image | video | audio | lottie
            admin: Acting admin
            name: Display name (defaults to the original filename)
            is_public: Whether the asset is visible to end users
        """
        asset_type = _asset_type(file_type)
        content = self.storage.read_upload(file, settings.MAX_UPLOAD_SIZE_MB)
        path = self.storage.save(content, file.filename, f"{ASSET_FOLDER}/{asset_type.value}")

        asset = Asset(
            name=name or file.filename,
            original_name=file.filename,
            file_path=path,
            file_type=asset_type.value,
            mime_type=_mime_type(file),
            file_size=len(content),
            asset_metadata=extract_metadata(content, asset_type.value),
            is_public=is_public,
        )
        self.db.add(asset)
        try:
            commit_or_rollback(self.db)
        except Exception:
            self.storage.delete(path)
            raise
        self.db.refresh(asset)

        logger.info(
            f"Admin {admin.id} uploaded asset {asset.id}: {asset.original_name} "
            f"({asset.file_type}, {asset.file_size_human})"
        )
        return asset

    def update(self, asset_id: int, data: AssetUpdate, admin: AdminContext) -> Asset:
        asset = self.get(asset_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field_name, value in changes.items():
            setattr(asset, field_name, value)

        commit_or_rollback(self.db)
        self.db.refresh(asset)

        logger.info(f"Admin {admin.id} updated asset {asset.id}: {sorted(changes)}")
        return asset

    def replace_file(self, asset_id: int, file: UploadFile, admin: AdminContext) -> Asset:
        """Swap the stored file, keeping the record and its template links"""
        asset = self.get(asset_id)
        content = self.storage.read_upload(file, settings.MAX_UPLOAD_SIZE_MB)
        new_path = self.storage.save(content, file.filename, f"{ASSET_FOLDER}/{asset.file_type}")

        previous = asset.file_path
        asset.file_path = new_path
        asset.original_name = file.filename
        asset.mime_type = _mime_type(file)
        asset.file_size = len(content)
        asset.asset_metadata = extract_metadata(content, asset.file_type)
        try:
            commit_or_rollback(self.db)
        except Exception:
            self.storage.delete(new_path)
            raise
        self.db.refresh(asset)

        if previous and previous != new_path:
            self.storage.delete(previous)

        logger.info(f"Admin {admin.id} replaced file of asset {asset.id}: {previous} → {new_path}")
        return asset

    def delete(self, asset_id: int, admin: AdminContext) -> None:
        """Delete the record (template links cascade), then the file"""
        asset = self.get(asset_id)
        path = asset.file_path

        self.db.delete(asset)
        commit_or_rollback(self.db)
        logger.info(f"Admin {admin.id} deleted asset {asset_id}")

        self.storage.delete(path)

    def download_path(self, asset_id: int) -> str:
        """
        Absolute path of the stored file.

        Raises:
            NotFoundError: If the record exists but the file is gone
        """
        asset = self.get(asset_id)
        if not self.storage.exists(asset.file_path):
            logger.warning(f"Asset {asset.id} file missing on disk: {asset.file_path}")
            raise NotFoundError("Asset file", asset.file_path)
        return self.storage.absolute_path(asset.file_path)
