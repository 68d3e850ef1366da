"""Listing image storage.

Images go to Supabase storage when ``SUPABASE_URL`` is configured and to
``MEDIA_ROOT`` on the local filesystem otherwise.
"""
import asyncio
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from httpx import AsyncClient, HTTPError
from structlog import get_logger

from pakproperty.config import settings
from pakproperty.errors import PropertyError, ValidationError

logger = get_logger()

@dataclass
class IncomingImage:
    filename: str
    content: bytes
    content_type: str
    caption: str = ""

def validate_images(images: list[IncomingImage]):
    if len(images) > settings.MAX_IMAGES:
        raise ValidationError(f"A property can have at most {settings.MAX_IMAGES} images per upload")
    for image in images:
        if not (image.content_type or "").startswith("image/"):
            raise ValidationError("Only image files are allowed")
        if len(image.content) > settings.MAX_IMAGE_SIZE:
            raise ValidationError(f"Image {image.filename} exceeds the {settings.MAX_IMAGE_SIZE // (1024 * 1024)}MB limit")

def _object_name(image: IncomingImage) -> str:
    suffix = PurePosixPath(image.filename or "").suffix.lower()
    if not suffix:
        suffix = mimetypes.guess_extension(image.content_type) or ""
    return f"properties/{uuid.uuid4().hex}{suffix}"

async def store_images(images: list[IncomingImage], start_order: int = 0, first_is_primary: bool = True) -> list[dict]:
    """Persist uploaded images and return their stored references."""
    refs = []
    for index, image in enumerate(images):
        url = await _store(image)
        refs.append({
            "url": url,
            "caption": image.caption,
            "isPrimary": first_is_primary and index == 0,
            "order": start_order + index,
        })
    logger.info("Stored property images", count=len(refs))
    return refs

async def _store(image: IncomingImage) -> str:
    name = _object_name(image)
    if settings.SUPABASE_URL:
        return await _upload_supabase(name, image)
    path = Path(settings.MEDIA_ROOT) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(path.write_bytes, image.content)
    return f"{settings.MEDIA_URL.rstrip('/')}/{name}"

async def _upload_supabase(name: str, image: IncomingImage) -> str:
    base = settings.SUPABASE_URL.rstrip("/")
    try:
        async with AsyncClient(timeout=20.0) as client:
            response = await client.post(
                f"{base}/storage/v1/object/{settings.SUPABASE_BUCKET}/{name}",
                content=image.content,
                headers={
                    "Authorization": f"Bearer {settings.SUPABASE_KEY}",
                    "apikey": settings.SUPABASE_KEY or "",
                    "Content-Type": image.content_type,
                    "x-upsert": "true",
                },
            )
    except HTTPError as e:
        logger.error("Image upload failed", name=name, error=str(e))
        raise PropertyError("Error uploading images") from e
    if not 200 <= response.status_code < 300:
        logger.error("Image upload rejected", name=name, status_code=response.status_code, body_text=response.text)
        raise PropertyError("Error uploading images")
    return f"{base}/storage/v1/object/public/{settings.SUPABASE_BUCKET}/{name}"

async def delete_images(urls: list[str]):
    """Remove stored images; failures are logged, never raised."""
    if not urls:
        return
    if settings.SUPABASE_URL:
        await _delete_supabase(urls)
        return
    prefix = settings.MEDIA_URL.rstrip("/") + "/"
    for url in urls:
        if not url.startswith(prefix):
            continue
        path = Path(settings.MEDIA_ROOT) / url[len(prefix):]
        try:
            await asyncio.to_thread(path.unlink, True)
        except OSError as e:
            logger.error("Image delete failed", url=url, error=str(e))

async def _delete_supabase(urls: list[str]):
    base = settings.SUPABASE_URL.rstrip("/")
    public_prefix = f"{base}/storage/v1/object/public/{settings.SUPABASE_BUCKET}/"
    names = [u[len(public_prefix):] for u in urls if u.startswith(public_prefix)]
    if not names:
        return
    try:
        async with AsyncClient(timeout=20.0) as client:
            response = await client.request(
                "DELETE",
                f"{base}/storage/v1/object/{settings.SUPABASE_BUCKET}",
                json={"prefixes": names},
                headers={"Authorization": f"Bearer {settings.SUPABASE_KEY}", "apikey": settings.SUPABASE_KEY or ""},
            )
        if response.status_code >= 400:
            logger.error("Image delete rejected", status_code=response.status_code, body_text=response.text)
    except HTTPError as e:
        logger.error("Image delete failed", names=names, error=str(e))
