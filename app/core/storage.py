"""Object storage for uploaded resource files (Supabase Storage bucket)."""

import logging
from typing import Any, Dict

from starlette.concurrency import run_in_threadpool
from supabase import Client

from app.core.config import settings
from app.core.exceptions import StorageError
from app.core.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)


class ResourceStorage:
    def __init__(self, client: Client, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    def _bucket(self) -> Any:
        return self._client.storage.from_(self.bucket)

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Store `data` at `path`. Never overwrites: an existing object at `path` is an error."""
        try:
            await run_in_threadpool(
                self._bucket().upload,
                path=path,
                file=data,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except Exception as e:
            logger.error("Upload to %s/%s failed: %s", self.bucket, path, e)
            raise StorageError(f"File upload failed: {e}") from e

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        try:
            data: Dict[str, Any] = await run_in_threadpool(self._bucket().create_signed_url, path, expires_in)
        except Exception as e:
            logger.error("Signing %s/%s failed: %s", self.bucket, path, e)
            raise StorageError(f"Failed to generate signed URL: {e}") from e
        # storage3 has returned both spellings across releases
        url = (data or {}).get("signedURL") or (data or {}).get("signedUrl")
        if not url:
            raise StorageError("Failed to generate signed URL: empty response from storage")
        return url

    async def remove(self, path: str) -> None:
        try:
            await run_in_threadpool(self._bucket().remove, [path])
        except Exception as e:
            raise StorageError(f"Failed to remove {path}: {e}") from e


def get_resource_storage() -> ResourceStorage:
    return ResourceStorage(get_supabase_client(), settings.storage_bucket)
