"""
File uploads (Supabase Storage).

Uploads go straight to the Storage REST API with the service key. The
returned URL is the bucket's public object URL. With Supabase unconfigured
nothing is sent and a mock public URL comes back instead.
"""

import logging
import os
import re
import time
import uuid

import httpx
from fastapi import UploadFile

from lumina.errors import StorageUploadError, UploadLimitError

logger = logging.getLogger(__name__)

SUPABASE_URL = os.getenv("SUPABASE_URL", "").rstrip("/")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY") or ""
SUPABASE_BUCKET = os.getenv("SUPABASE_BUCKET", "lumina-uploads")
MOCK_STORAGE_URL = "https://mock-storage.supabase.co"

MAX_IMAGES = 5


def safe_filename(filename: str | None) -> str:
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", filename or "").strip("._")
    return name or "upload"


def object_path(folder: str, filename: str | None) -> str:
    """Storage key: <folder>/<epoch-ms>-<8 hex>-<filename>. Uploads upsert,
    so keys must stay unique even for same-named files in one millisecond."""
    return f"{folder}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_filename(filename)}"


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=60.0)


def public_url(path: str, base_url: str | None = None) -> str:
    return f"{base_url or SUPABASE_URL}/storage/v1/object/public/{SUPABASE_BUCKET}/{path}"


async def upload_file(data: bytes, path: str, content_type: str | None = None) -> str:
    """Store the bytes at path in the bucket and return the public URL."""
    if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
        logger.info("Supabase not configured, mock upload of %d bytes to %s", len(data), path)
        return public_url(path, MOCK_STORAGE_URL)

    headers = {
        "Authorization": f"Bearer {SUPABASE_SERVICE_KEY}",
        "apikey": SUPABASE_SERVICE_KEY,
        "Content-Type": content_type or "application/octet-stream",
        "x-upsert": "true",
    }
    url = f"{SUPABASE_URL}/storage/v1/object/{SUPABASE_BUCKET}/{path}"

    try:
        async with _client() as client:
            resp = await client.post(url, content=data, headers=headers)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Upload of %s failed: %s", path, e)
        raise StorageUploadError("Failed to upload file") from e

    return public_url(path)


async def upload_images(files: list[UploadFile], folder: str) -> list[str]:
    """Upload request files under folder and return their public URLs."""
    if len(files) > MAX_IMAGES:
        raise UploadLimitError(f"At most {MAX_IMAGES} images per upload")

    urls = []
    for file in files:
        data = await file.read()
        urls.append(await upload_file(data, object_path(folder, file.filename), file.content_type))
    return urls
