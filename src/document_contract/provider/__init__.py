"""Provider implementations and transports."""

from .base import DocumentsProvider, ProviderTransport
from .http import HttpProviderTransport
from .local import LocalDocumentsProvider

__all__ = [
    "DocumentsProvider",
    "HttpProviderTransport",
    "LocalDocumentsProvider",
    "ProviderTransport",
]
