"""Pytest configuration and shared fixtures for unit tests."""

from typing import List, Optional
from unittest.mock import Mock

import pytest
from prometheus_client import CollectorRegistry

from pagination import IterableWithMarker


def glance_payload(images, next_marker=None, base="https://glance.example.com/v1/images/detail"):
    """Build a Glance v1 list response body."""
    links = []
    if next_marker is not None:
        links.append({"rel": "next", "href": f"{base}?limit=2&marker={next_marker}"})
    return {"images": images, "images_links": links}


def image_json(image_id, status="active", **extra):
    data = {
        "id": image_id,
        "name": f"image-{image_id}",
        "status": status,
        "container_format": "bare",
        "disk_format": "qcow2",
        "size": 1024,
        "links": [
            {"rel": "self", "href": f"https://glance.example.com/v1/images/{image_id}"}
        ],
    }
    data.update(extra)
    return data


class RecordingFetch:
    """Fetch callable that replays pages keyed by marker and records calls."""

    def __init__(self, pages):
        # marker -> IterableWithMarker
        self.pages = pages
        self.markers: List[Optional[str]] = []

    def __call__(self, marker):
        self.markers.append(marker)
        return self.pages[marker]

    @property
    def count(self):
        return len(self.markers)


@pytest.fixture
def two_page_fetch():
    """page1 = [a, b] -> X, page2 = [c] -> end."""
    return RecordingFetch({
        None: IterableWithMarker(items=("a", "b"), next_marker="X"),
        "X": IterableWithMarker(items=("c",), next_marker=None),
    })


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def http_session():
    """Mock requests.Session with a real headers dict."""
    session = Mock()
    session.headers = {}
    return session


def json_response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response
