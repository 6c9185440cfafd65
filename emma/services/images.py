import json
import time
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

from fastapi import HTTPException, UploadFile
from loguru import logger
from sqlmodel import SQLModel
from starlette.concurrency import run_in_threadpool

MAX_PHOTO_BYTES = 5 * 1024 * 1024
MAX_IMAGE_BYTES = 10 * 1024 * 1024


class Positioning(SQLModel):
    x: float = 50  # percent
    y: float = 50  # percent
    zoom: float = 100  # percent


class UploadedImage(SQLModel):
    url: str
    filename: str
    size: int
    type: str
    positioning: Positioning


def parse_positioning(raw: Optional[str]) -> Positioning:
    if not raw:
        return Positioning()
    try:
        return Positioning.model_validate(json.loads(raw))
    except ValueError as e:
        logger.warning("Ignoring unreadable positioning data: {}", e)
        return Positioning()


def _format_percent(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def with_positioning(url: str, positioning: Positioning) -> str:
    parts = urlsplit(url)
    query = urlencode(
        {
            "x": _format_percent(positioning.x),
            "y": _format_percent(positioning.y),
            "zoom": _format_percent(positioning.zoom),
        }
    )
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def object_path_from_url(url: Optional[str], bucket_name: str) -> Optional[str]:
    """Recover the object path inside the bucket from a stored public URL."""
    if not url:
        return None
    path = urlsplit(url).path
    marker = f"/{bucket_name}/"
    if marker not in path:
        return None
    return path.split(marker, 1)[1]


async def read_image(upload: UploadFile, max_bytes: int = MAX_PHOTO_BYTES) -> bytes:
    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image")
    content = await upload.read()
    if not content:
        raise HTTPException(status_code=400, detail="No file provided")
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400, detail=f"File size must be less than {max_bytes // (1024 * 1024)}MB"
        )
    return content


async def store_image(
    bucket,
    prefix: str,
    upload: UploadFile,
    positioning: Positioning,
    max_bytes: int = MAX_PHOTO_BYTES,
) -> UploadedImage:
    """Upload ``upload`` under ``prefix`` and return its positioned public URL.

    Replaced objects are removed by the caller once the new URL is saved.
    """
    content = await read_image(upload, max_bytes)

    name = upload.filename or ""
    extension = name.rsplit(".", 1)[1] if "." in name else "jpg"
    filename = f"{prefix}-{int(time.time() * 1000)}.{extension}"
    await run_in_threadpool(
        bucket.upload,
        filename,
        content,
        {"content-type": upload.content_type},
    )
    public_url = await run_in_threadpool(bucket.get_public_url, filename)
    logger.info("Stored image {} ({} bytes)", filename, len(content))

    return UploadedImage(
        url=with_positioning(public_url, positioning),
        filename=filename,
        size=len(content),
        type=upload.content_type,
        positioning=positioning,
    )


async def remove_image(bucket, url: Optional[str]) -> None:
    path = object_path_from_url(url, bucket.id)
    if not path:
        return
    try:
        await run_in_threadpool(bucket.remove, [path])
    except Exception as e:
        logger.warning("Could not remove image {}: {}", path, e)
        return
    logger.info("Removed image {}", path)
