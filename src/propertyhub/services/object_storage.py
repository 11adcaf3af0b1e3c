"""Local object storage for listing media.

Binary objects live on disk under ``uploads_dir``; listings only keep the
path string. Two flows are supported:

- presigned-style: ``POST /api/objects/upload`` hands out a signed upload URL
  valid for one object and a limited time, the client PUTs the bytes there
  once, and the object is then served from ``/objects/uploads/<id>``;
- direct multipart: ``POST /api/upload`` stores images and returns
  ``/uploads/<name>`` URLs.
"""

import hashlib
import hmac
import logging
import re
import secrets
import time
import uuid
from pathlib import Path
from urllib.parse import urlencode, urlparse

from propertyhub.domain.errors import ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
_ALLOWED_IMAGE_TYPES = re.compile(r"jpeg|jpg|png|gif|webp")
_OBJECT_ID = re.compile(r"^[0-9a-f]{32}$")

UPLOAD_URL_PREFIX = "/api/objects/uploads/"
OBJECT_PATH_PREFIX = "/objects/uploads/"
UPLOAD_URL_TTL_SECONDS = 900


class ObjectNotFoundError(NotFoundError):
    default_detail = "Object not found"


class InvalidUploadError(ValidationError):
    """Upload rejected: bad id, wrong file type, too large or already stored."""


class UploadNotAllowedError(ForbiddenError):
    """Upload URL missing, tampered with or expired."""

    default_detail = "Upload URL is invalid or expired"


def is_allowed_image(filename: str | None, content_type: str | None) -> bool:
    ext = Path(filename or "").suffix.lower()
    return ext in ALLOWED_IMAGE_EXTENSIONS and bool(_ALLOWED_IMAGE_TYPES.search(content_type or ""))


class ObjectStorageService:
    def __init__(
        self,
        root_dir: str | Path,
        public_base_url: str = "",
        max_bytes: int | None = None,
        signing_key: str = "",
        url_ttl: int = UPLOAD_URL_TTL_SECONDS,
    ):
        self.root = Path(root_dir).resolve()
        self.objects_dir = self.root / "objects"
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes
        self.signing_key = signing_key
        self.url_ttl = url_ttl

    def sign(self, object_id: str, expires: int) -> str:
        return hmac.new(
            self.signing_key.encode(),
            f"{object_id}:{expires}".encode(),
            hashlib.sha256,
        ).hexdigest()

    def get_upload_url(self) -> str:
        """Issue a fresh signed URL the client can PUT one object to."""
        object_id = uuid.uuid4().hex
        expires = int(time.time()) + self.url_ttl
        query = urlencode({"expires": expires, "signature": self.sign(object_id, expires)})
        return f"{self.public_base_url}{UPLOAD_URL_PREFIX}{object_id}?{query}"

    def verify_upload(self, object_id: str, expires: int | None, signature: str | None) -> None:
        if not self.signing_key or expires is None or not signature:
            raise UploadNotAllowedError()
        if not hmac.compare_digest(signature, self.sign(object_id, expires)):
            raise UploadNotAllowedError()
        if expires < time.time():
            raise UploadNotAllowedError()

    def _check_size(self, data: bytes) -> None:
        if self.max_bytes is not None and len(data) > self.max_bytes:
            raise InvalidUploadError("File too large")

    def save_object(
        self,
        object_id: str,
        data: bytes,
        expires: int | None = None,
        signature: str | None = None,
    ) -> str:
        """Store bytes for an issued upload URL; returns the object path.

        Each object is written once: a second PUT to the same id is rejected.
        """
        if not _OBJECT_ID.match(object_id):
            raise InvalidUploadError("Invalid object id")
        self.verify_upload(object_id, expires, signature)
        self._check_size(data)
        self.objects_dir.mkdir(parents=True, exist_ok=True)
        try:
            with (self.objects_dir / object_id).open("xb") as f:
                f.write(data)
        except FileExistsError:
            logger.warning("Rejected overwrite of object %s", object_id)
            raise InvalidUploadError("Object already exists")
        logger.info("Stored object %s (%d bytes)", object_id, len(data))
        return f"{OBJECT_PATH_PREFIX}{object_id}"

    def save_image(self, filename: str | None, content_type: str | None, data: bytes) -> str:
        """Store a directly uploaded image; returns its public ``/uploads`` URL."""
        if not is_allowed_image(filename, content_type):
            raise InvalidUploadError("Only image files are allowed!")
        self._check_size(data)
        self.root.mkdir(parents=True, exist_ok=True)
        ext = Path(filename or "").suffix.lower()
        unique_name = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
        (self.root / unique_name).write_bytes(data)
        return f"/uploads/{unique_name}"

    def normalize_object_path(self, raw_path: str) -> str:
        """Map an upload URL (absolute or relative) to its ``/objects/...`` path.

        Anything that is not one of our upload URLs is returned unchanged.
        """
        path = urlparse(raw_path).path
        if path.startswith(UPLOAD_URL_PREFIX):
            return OBJECT_PATH_PREFIX + path[len(UPLOAD_URL_PREFIX):]
        if path.startswith(OBJECT_PATH_PREFIX):
            return path
        return raw_path

    def get_object_file(self, object_path: str) -> Path:
        if not object_path.startswith(OBJECT_PATH_PREFIX):
            raise ObjectNotFoundError()
        object_id = object_path[len(OBJECT_PATH_PREFIX):]
        if not _OBJECT_ID.match(object_id):
            raise ObjectNotFoundError()
        file_path = self.objects_dir / object_id
        if not file_path.is_file():
            raise ObjectNotFoundError()
        return file_path
