from __future__ import annotations

from urllib.parse import quote

from flask import current_app

DEFAULT_BUCKET = "item-images"


def public_object_url(path: str, bucket: str | None = None, *, base: str | None = None) -> str:
    """Public fetch URL for a stored object: ``{base}/{bucket}/{path}``.

    ``base`` defaults to ``STORAGE_PUBLIC_URL_BASE``; bucket falls back to ``STORAGE_BUCKET``.
    """
    if base is None:
        base = current_app.config.get("STORAGE_PUBLIC_URL_BASE")
    if not base:
        raise RuntimeError("STORAGE_PUBLIC_URL_BASE is not configured")
    if not bucket:
        bucket = current_app.config.get("STORAGE_BUCKET") or DEFAULT_BUCKET
    key = quote(path.lstrip("/"), safe="/")
    return f"{base.rstrip('/')}/{bucket}/{key}"


def image_public_url(image) -> str:
    """Public URL for an ``ItemImage`` row."""
    return public_object_url(image.path, image.bucket_id)
