"""Shared pytest fixtures."""

import io

import pytest
from PIL import Image

from document_contract.provider.local import LocalDocumentsProvider
from document_contract.resolver import ContentResolver

AUTHORITY = "com.example.documents"


def encode_image(width: int, height: int, format: str = "PNG") -> bytes:
    """Encode a solid-color image of the given size."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    return encode_image


@pytest.fixture
def storage(tmp_path):
    """A small directory tree served by the local provider."""
    root = tmp_path / "storage"
    root.mkdir()
    (root / "photos").mkdir()
    (root / "photos" / "beach.png").write_bytes(encode_image(800, 600))
    (root / "notes.txt").write_text("hello")
    return root


@pytest.fixture
def provider(storage):
    return LocalDocumentsProvider(AUTHORITY, storage)


@pytest.fixture
def resolver(provider):
    resolver = ContentResolver()
    resolver.register(AUTHORITY, provider)
    yield resolver
    resolver.close_all()
