from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

import requests
from flask import current_app, has_app_context

from ...models.app_setting import AppSetting

VISION_URL = "https://vision.googleapis.com/v1/images:annotate"

FEATURES = [
    {"type": "WEB_DETECTION", "maxResults": 20},
    {"type": "LABEL_DETECTION", "maxResults": 20},
    {"type": "IMAGE_PROPERTIES", "maxResults": 10},
]


class VisionAPIError(RuntimeError):
    """The annotate call failed or returned an error payload."""


@dataclass(frozen=True)
class EntityScore:
    description: str
    score: float = 0.0


@dataclass(frozen=True)
class DominantColor:
    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0
    score: float = 0.0
    pixel_fraction: float = 0.0


@dataclass(frozen=True)
class ImageAnnotation:
    web_entities: List[EntityScore] = field(default_factory=list)
    labels: List[EntityScore] = field(default_factory=list)
    dominant_colors: List[DominantColor] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.web_entities or self.labels or self.dominant_colors)

    @classmethod
    def from_response(cls, payload: dict[str, Any] | None) -> "ImageAnnotation":
        """Build an annotation from one element of the ``responses`` array.

        Entities without a description are dropped; missing colour channels count as 0.
        """
        payload = payload or {}
        web = payload.get("webDetection") or {}
        entities = [
            EntityScore(str(e["description"]), float(e.get("score") or 0.0))
            for e in web.get("webEntities") or []
            if e.get("description")
        ]
        labels = [
            EntityScore(str(l["description"]), float(l.get("score") or 0.0))
            for l in payload.get("labelAnnotations") or []
            if l.get("description")
        ]
        props = payload.get("imagePropertiesAnnotation") or {}
        colors = []
        for c in (props.get("dominantColors") or {}).get("colors") or []:
            rgb = c.get("color") or {}
            colors.append(
                DominantColor(
                    red=float(rgb.get("red") or 0),
                    green=float(rgb.get("green") or 0),
                    blue=float(rgb.get("blue") or 0),
                    score=float(c.get("score") or 0.0),
                    pixel_fraction=float(c.get("pixelFraction") or 0.0),
                )
            )
        return cls(web_entities=entities, labels=labels, dominant_colors=colors)


def resolve_api_key(api_key: str | None = None) -> str | None:
    """Resolve credentials: explicit arg > app config > app settings."""
    if api_key:
        return api_key
    if has_app_context():
        api_key = current_app.config.get("VISION_API_KEY")
        if not api_key:
            api_key = AppSetting.get("matching.vision.api_key")
    return api_key or None


class VisionClient:
    """Thin wrapper over the Cloud Vision ``images:annotate`` REST endpoint."""

    def __init__(self, api_key: str, *, url: str = VISION_URL, timeout: float = 15.0, session: Optional[requests.Session] = None):
        if not api_key:
            raise VisionAPIError("Vision API key is not configured")
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self.session = session or requests

    def annotate(self, image_url: str) -> ImageAnnotation:
        body = {
            "requests": [
                {
                    "image": {"source": {"imageUri": image_url}},
                    "features": FEATURES,
                }
            ]
        }
        try:
            resp = self.session.post(self.url, params={"key": self.api_key}, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise VisionAPIError(f"Vision API request failed: {e}") from e
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:  # Surface Google error details to caller
            try:
                err = resp.json().get("error") or {}
                details = f"Vision API error ({err.get('status')} code={err.get('code')}): {err.get('message') or e}"
            except Exception:
                details = f"Vision API error: HTTP {resp.status_code}: {resp.text[:500]}"
            raise VisionAPIError(details) from e

        try:
            responses = resp.json().get("responses") or [{}]
            first = responses[0] or {}
            # Per-image failures come back with HTTP 200 and an inline error
            err = first.get("error")
            if not err:
                return ImageAnnotation.from_response(first)
        except (ValueError, AttributeError, TypeError, KeyError, IndexError) as e:
            raise VisionAPIError(f"Vision API returned an unreadable response: {e}") from e
        raise VisionAPIError(f"Vision API error (code={err.get('code')}): {err.get('message')}")


def build_client(api_key: str | None = None) -> VisionClient | None:
    """Return a configured client, or None when no API key is available."""
    key = resolve_api_key(api_key)
    if not key:
        return None
    if has_app_context():
        cfg = current_app.config
        return VisionClient(
            key,
            url=cfg.get("VISION_API_URL", VISION_URL),
            timeout=float(cfg.get("VISION_TIMEOUT", 15.0)),
        )
    return VisionClient(key)
