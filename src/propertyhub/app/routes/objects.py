"""Media upload and retrieval routes backed by local object storage."""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import FileResponse

from propertyhub.app.config import Settings, get_settings
from propertyhub.app.routes.auth import require_auth
from propertyhub.domain.errors import ValidationError
from propertyhub.domain.schemas import (
    PropertyImageRequest,
    PropertyImageResponse,
    UploadedFilesResponse,
    UploadURLResponse,
)
from propertyhub.services.object_storage import ObjectStorageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["objects"])


def get_object_storage(settings: Settings = Depends(get_settings)) -> ObjectStorageService:
    return ObjectStorageService(
        settings.uploads_dir,
        public_base_url=settings.public_base_url,
        max_bytes=settings.max_upload_mb * 1024 * 1024,
        signing_key=settings.upload_signing_key,
        url_ttl=settings.upload_url_ttl_seconds,
    )


@router.post("/api/objects/upload", response_model=UploadURLResponse)
async def get_upload_url(storage: ObjectStorageService = Depends(get_object_storage)):
    return UploadURLResponse(upload_url=storage.get_upload_url())


@router.put("/api/objects/uploads/{object_id}", response_model=PropertyImageResponse)
async def put_object(
    object_id: str,
    request: Request,
    expires: int | None = None,
    signature: str | None = None,
    storage: ObjectStorageService = Depends(get_object_storage),
):
    """Receive the bytes for a URL issued by ``/api/objects/upload``. Single use."""
    data = await request.body()
    object_path = storage.save_object(object_id, data, expires=expires, signature=signature)
    return PropertyImageResponse(object_path=object_path)


@router.get("/objects/{object_path:path}")
async def get_object(object_path: str, storage: ObjectStorageService = Depends(get_object_storage)):
    return FileResponse(storage.get_object_file(f"/objects/{object_path}"))


@router.put("/api/property-images", response_model=PropertyImageResponse)
async def set_property_image(
    data: PropertyImageRequest,
    storage: ObjectStorageService = Depends(get_object_storage),
):
    """Turn an upload URL into the object path stored on a listing."""
    return PropertyImageResponse(object_path=storage.normalize_object_path(data.image_url))


@router.post("/api/upload", response_model=UploadedFilesResponse)
async def upload_images(
    images: list[UploadFile] = File(...),
    _user_id: str = Depends(require_auth),
    storage: ObjectStorageService = Depends(get_object_storage),
    settings: Settings = Depends(get_settings),
):
    if not images:
        raise ValidationError("No files uploaded")
    if len(images) > settings.max_upload_files:
        raise ValidationError(f"At most {settings.max_upload_files} files per upload")

    urls: list[str] = []
    for upload in images:
        content = await upload.read()
        urls.append(storage.save_image(upload.filename, upload.content_type, content))
    logger.info("Stored %d uploaded images", len(urls))
    return UploadedFilesResponse(urls=urls)
