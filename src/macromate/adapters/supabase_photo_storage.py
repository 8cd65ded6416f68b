"""Supabase Storage bucket for meal photos."""

import logging
from dataclasses import dataclass

from supabase import Client, StorageException

from macromate.errors import PersistenceError, PhotoNotFoundError
from macromate.services.meals import PhotoStorage

_logger = logging.getLogger(__name__)


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Stores meal photos as public objects in a storage bucket."""

    client: Client
    bucket: str

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Upload bytes to `path` and return the public URL."""
        bucket = self.client.storage.from_(self.bucket)
        try:
            bucket.upload(
                path,
                content,
                file_options={"content-type": content_type, "upsert": "true"},
            )
        except StorageException as exc:
            _logger.error("Photo upload to %s failed: %s", path, exc)
            raise PersistenceError(
                "Could not upload the photo. Please try again.",
                operation="upload_photo",
            ) from exc
        return bucket.get_public_url(path)

    def delete(self, path: str) -> None:
        """Remove the object at `path`."""
        removed = self.client.storage.from_(self.bucket).remove([path])
        if not removed:
            raise PhotoNotFoundError(f"No stored photo at {path}.")
