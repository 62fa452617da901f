"""
Image storage for property, developer and blog uploads.
Routes depend on the `ObjectStorage` interface; the local implementation writes
under the upload directory, which the application serves at /uploads.
"""

from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
import io
import logging
import uuid

import aiofiles
from fastapi import UploadFile
from PIL import Image

from propertyhub.config import settings
from propertyhub.utils.exceptions import FileUploadError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
EXPECTED_FORMATS = {
    "image/jpeg": {"jpeg", "jpg"},
    "image/png": {"png"},
    "image/webp": {"webp"},
}


class ObjectStorage(ABC):
    """Stores uploaded files and hands back their public URL."""

    @abstractmethod
    async def upload(self, folder: str, file: UploadFile) -> str:
        """Validate and store a file; return its public URL."""

    @abstractmethod
    async def delete(self, url: str) -> bool:
        """Remove a previously uploaded file. Returns False when the URL is not ours."""

    async def upload_many(self, folder: str, files: List[UploadFile]) -> List[str]:
        """
        Upload every file, or none of them.

        If one upload fails, the files already stored by this call are deleted
        before the error propagates.
        """
        urls: List[str] = []
        try:
            for file in files:
                urls.append(await self.upload(folder, file))
        except Exception:
            await self.delete_many(urls)
            raise
        return urls

    async def delete_many(self, urls: List[str]) -> None:
        for url in urls:
            try:
                await self.delete(url)
            except OSError as e:
                logger.warning(f"Failed to delete uploaded file {url}: {e}")


class LocalObjectStorage(ObjectStorage):
    """
    Files on local disk, one sub-directory per folder.
    """

    def __init__(
        self,
        root: Path,
        base_url: str,
        max_file_size: int = settings.max_file_size,
        allowed_types: Optional[List[str]] = None
    ):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.max_file_size = max_file_size
        self.allowed_types = allowed_types or list(settings.allowed_file_types)
        self.root.mkdir(parents=True, exist_ok=True)

    async def validate_image(self, file: UploadFile) -> bytes:
        """
        Validate an uploaded image and return its content.

        Args:
            file: Uploaded file object

        Returns:
            The file bytes

        Raises:
            FileUploadError: If type, extension, size or content is not acceptable
        """
        if file.content_type not in self.allowed_types:
            raise FileUploadError(
                f"File type '{file.content_type}' not allowed. Allowed types: {', '.join(self.allowed_types)}"
            )

        if not file.filename:
            raise FileUploadError("Filename is required")

        file_ext = Path(file.filename).suffix.lower()
        if file_ext not in ALLOWED_EXTENSIONS:
            raise FileUploadError(
                f"File extension '{file_ext}' not allowed. Allowed extensions: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )

        await file.seek(0)
        content = await file.read()
        await file.seek(0)

        if len(content) > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise FileUploadError(f"File size exceeds maximum allowed size of {max_mb:.1f}MB")

        # Verify the bytes decode as the declared image type
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                pil_format = (img.format or "").lower()
        except Exception as e:
            raise FileUploadError(f"Invalid image file: {str(e)}")

        if pil_format not in EXPECTED_FORMATS.get(file.content_type, {pil_format}):
            raise FileUploadError(f"File content doesn't match declared type {file.content_type}")

        return content

    async def upload(self, folder: str, file: UploadFile) -> str:
        content = await self.validate_image(file)

        relative = Path(folder) / f"{uuid.uuid4().hex}{Path(file.filename).suffix.lower()}"
        file_path = self.root / relative
        file_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            if file_path.exists():
                file_path.unlink()
            raise FileUploadError(f"Failed to save image file: {str(e)}")

        url = f"{self.base_url}/{relative.as_posix()}"
        logger.debug(f"Stored upload {file.filename} as {url}")
        return url

    async def delete(self, url: str) -> bool:
        prefix = f"{self.base_url}/"
        if not url or not url.startswith(prefix):
            return False

        file_path = (self.root / url[len(prefix):]).resolve()
        if self.root.resolve() not in file_path.parents:
            logger.warning(f"Refusing to delete file outside upload directory: {url}")
            return False

        if file_path.exists():
            file_path.unlink()
            logger.debug(f"Deleted upload {url}")
            return True
        return False


@lru_cache()
def get_object_storage() -> ObjectStorage:
    """
    Dependency returning the configured object storage.
    """
    return LocalObjectStorage(
        root=Path(settings.upload_dir),
        base_url=f"{settings.public_base_url.rstrip('/')}/uploads",
    )
