"""Shared fixtures: app on in-memory SQLite plus item factories."""
from datetime import date

import pytest

from lostfound import create_app
from lostfound.extensions import db
from lostfound.integrations.vision.client import DominantColor, EntityScore, ImageAnnotation, VisionAPIError
from lostfound.models.item import Item, ItemImage
from lostfound.models.user import User


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    u = User(email="owner@campus.test", full_name="Sam Owner")
    db.session.add(u)
    db.session.commit()
    return u


def _make_item(kind, images=("photo.jpg",), **fields):
    defaults = {
        "category": "electronics",
        "description": "",
        "status": "active",
    }
    defaults.update(fields)
    item = Item(type=kind, **defaults)
    for pos, path in enumerate(images):
        item.images.append(ItemImage(path=f"{kind}/{path}", bucket_id="item-images", mime_type="image/jpeg", size=1024, position=pos))
    db.session.add(item)
    db.session.commit()
    return item


@pytest.fixture
def make_lost(app):
    def factory(images=("photo.jpg",), **fields):
        return _make_item("lost", images, **fields)
    return factory


@pytest.fixture
def make_found(app):
    def factory(images=("photo.jpg",), **fields):
        return _make_item("found", images, **fields)
    return factory


@pytest.fixture
def phone_fields():
    return {
        "category": "electronics",
        "brand": "Apple",
        "model": "iPhone 13",
        "color": "Black",
        "occurred_on": date(2024, 3, 10),
        "location": "Library L3",
    }


def annotation(entities=(), labels=(), colors=()):
    return ImageAnnotation(
        web_entities=[EntityScore(e, 0.9) for e in entities],
        labels=[EntityScore(l, 0.9) for l in labels],
        dominant_colors=[DominantColor(*rgb) for rgb in colors],
    )


class FakeVisionClient:
    """Returns canned annotations keyed by URL suffix and records every call."""

    def __init__(self, by_suffix=None, fail_suffixes=()):
        self.by_suffix = dict(by_suffix or {})
        self.fail_suffixes = tuple(fail_suffixes)
        self.calls = []

    def annotate(self, url):
        self.calls.append(url)
        for suffix in self.fail_suffixes:
            if url.endswith(suffix):
                raise VisionAPIError(f"boom for {url}")
        for suffix, ann in self.by_suffix.items():
            if url.endswith(suffix):
                return ann
        return ImageAnnotation()
