"""Supabase Storage bucket for recipe images."""

import logging
from dataclasses import dataclass

from supabase import Client, StorageException

from recipe_catalog.errors import StorageError
from recipe_catalog.services.recipes import ImageStorage

logger = logging.getLogger(__name__)


@dataclass
class SupabaseImageStorage(ImageStorage):
    """Uploads images to a public storage bucket."""

    client: Client
    bucket: str

    def upload(self, path: str, content: bytes, content_type: str | None) -> str:
        """Upload (or overwrite) an image and return its public URL."""
        bucket = self.client.storage.from_(self.bucket)
        try:
            bucket.upload(
                path,
                content,
                file_options={
                    "content-type": content_type or "image/jpeg",
                    "upsert": "true",
                },
            )
        except StorageException as exc:
            logger.exception("Image upload failed for %s", path)
            raise StorageError("Failed to upload image") from exc
        return bucket.get_public_url(path)
