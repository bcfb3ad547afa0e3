"""Supabase Storage client for visitor photographs"""
import logging
from typing import Optional

from domain.errors import ValidationError
from .client import SupabaseAPIError, SupabaseClient

logger = logging.getLogger(__name__)


class SupabaseStorageClient(SupabaseClient):
    service = "storage/v1"

    def public_url(self, path: str, bucket: Optional[str] = None) -> str:
        bucket = bucket or self.settings.photo_bucket
        return f"{self.base_url}/{self.service}/object/public/{bucket}/{path}"

    async def upload(
        self,
        data: bytes,
        path: str,
        content_type: str = "application/octet-stream",
        bucket: Optional[str] = None,
        upsert: bool = True,
    ) -> str:
        """Upload ``data`` to ``bucket/path`` and return its public URL"""
        bucket = bucket or self.settings.photo_bucket
        try:
            await self._request(
                "POST",
                f"object/{bucket}/{path}",
                admin=True,
                content=data,
                headers={
                    "Content-Type": content_type,
                    "x-upsert": "true" if upsert else "false",
                },
            )
        except SupabaseAPIError as e:
            raise ValidationError("Error al subir la foto") from e

        logger.info(f"Photo uploaded to {bucket}/{path}")
        return self.public_url(path, bucket)
