"""Typed asset streams, thumbnail sizing and cooperative cancellation."""

import threading
from dataclasses import dataclass
from typing import BinaryIO, NamedTuple, Optional

from ..errors import OperationCanceled

# Option key carrying the requested (width, height) of a thumbnail
EXTRA_THUMBNAIL_SIZE = "thumbnail_size"

UNKNOWN_LENGTH = -1


class Size(NamedTuple):
    """Width and height in pixels."""

    width: int
    height: int


class CancellationSignal:
    """Cooperative cancellation flag shared between a caller and a worker."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_canceled(self) -> bool:
        return self._event.is_set()

    def throw_if_canceled(self) -> None:
        """Raise OperationCanceled if cancel() has been called."""
        if self._event.is_set():
            raise OperationCanceled("Operation was canceled")


@dataclass
class TypedAsset:
    """
    An open stream over some content of a document.

    The content of interest may be a region of a larger file: it starts at
    ``start_offset`` and spans ``declared_length`` bytes, or runs to the end
    of the stream when the length is UNKNOWN_LENGTH.
    """

    fileobj: BinaryIO
    start_offset: int = 0
    declared_length: int = UNKNOWN_LENGTH
    mime_type: Optional[str] = None

    def close(self) -> None:
        self.fileobj.close()

    def __enter__(self) -> "TypedAsset":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def mime_matches(mime_filter: str, mime_type: Optional[str]) -> bool:
    """
    Check a MIME type against a filter such as ``image/*`` or ``*/*``.

    Args:
        mime_filter: Filter with optional wildcard subtype
        mime_type: Concrete MIME type, may be None

    Returns:
        True if the type satisfies the filter
    """
    if not mime_type:
        return False
    if mime_filter in ("*/*", "*"):
        return True
    filter_type, _, filter_subtype = mime_filter.lower().partition("/")
    actual_type, _, actual_subtype = mime_type.lower().partition("/")
    if filter_type != actual_type:
        return False
    return filter_subtype in ("*", actual_subtype)
