"""Addressing, calls and thumbnails for provider-owned documents."""

from .operations import create_document, delete_document
from .resolver import ContentResolver
from .thumbnails import get_document_thumbnail

__all__ = [
    "ContentResolver",
    "create_document",
    "delete_document",
    "get_document_thumbnail",
]
