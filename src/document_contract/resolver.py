"""Registry routing resource URIs to the transport of their authority."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import settings
from .contract.assets import CancellationSignal, TypedAsset
from .contract.columns import QueryResult
from .contract.uris import UriLike, ResourceUri, as_resource_uri
from .errors import OperationCanceled, ProviderCallFailed
from .provider.base import ProviderTransport
from .provider.http import HttpProviderTransport
from .provider.local import LocalDocumentsProvider


logger = logging.getLogger(__name__)


class ContentResolver:
    """
    Registry of provider transports keyed by authority.

    Every request is routed by the authority of its URI. Whatever goes wrong
    on the way (unknown authority, transport failure, provider error) is
    raised as ProviderCallFailed with the original error as its cause.
    Cancellation is raised as OperationCanceled.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._transports: Dict[str, ProviderTransport] = {}

    def register(self, authority: str, transport: ProviderTransport) -> None:
        """
        Register the transport serving an authority.

        Args:
            authority: Provider authority (e.g., 'com.example.documents')
            transport: ProviderTransport instance
        """
        self._transports[authority] = transport

    def get(self, authority: str) -> Optional[ProviderTransport]:
        """
        Get a registered transport by authority.

        Returns:
            ProviderTransport instance or None if not found
        """
        return self._transports.get(authority)

    def get_authorities(self) -> list[str]:
        """Get list of registered authorities."""
        return list(self._transports.keys())

    def close_all(self) -> None:
        """Close all registered transports."""
        for transport in self._transports.values():
            transport.close()
        self._transports.clear()

    def __len__(self) -> int:
        """Return number of registered transports."""
        return len(self._transports)

    def call(self, uri: UriLike, method: str, extras: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send a named call to the provider owning a URI.

        Args:
            uri: Resource URI the call is addressed to
            method: Method name
            extras: Input map

        Returns:
            Output map returned by the provider

        Raises:
            ProviderCallFailed: If the call could not be completed
        """
        uri = as_resource_uri(uri)
        transport = self._transport_for(uri)
        try:
            return transport.call(uri, method, dict(extras))
        except Exception as e:
            raise ProviderCallFailed(f"{method} failed for {uri}: {e}") from e

    def query(self, uri: UriLike) -> QueryResult:
        """Query the provider owning a URI."""
        uri = as_resource_uri(uri)
        transport = self._transport_for(uri)
        try:
            return transport.query(uri)
        except Exception as e:
            raise ProviderCallFailed(f"Query failed for {uri}: {e}") from e

    def open_typed_asset(
        self,
        uri: UriLike,
        mime_filter: str,
        options: Dict[str, Any],
        signal: Optional[CancellationSignal] = None,
    ) -> TypedAsset:
        """
        Open a typed asset stream for a document.

        Raises:
            OperationCanceled: If the signal fires before or during the request
            ProviderCallFailed: If the asset could not be opened
        """
        uri = as_resource_uri(uri)
        if signal is not None:
            signal.throw_if_canceled()

        transport = self._transport_for(uri)
        try:
            return transport.open_typed_asset(uri, mime_filter, dict(options), signal)
        except OperationCanceled:
            raise
        except Exception as e:
            raise ProviderCallFailed(f"Failed to open {uri} as {mime_filter}: {e}") from e

    def _transport_for(self, uri: ResourceUri) -> ProviderTransport:
        transport = self._transports.get(uri.authority)
        if transport is None:
            raise ProviderCallFailed(f"Unknown authority: {uri.authority}")
        return transport


def create_resolver(include_remote: bool = True) -> ContentResolver:
    """
    Register every configured provider with a new resolver.

    Args:
        include_remote: Also register the authorities reached over HTTP

    Returns:
        ContentResolver ready for use
    """
    resolver = ContentResolver()

    if settings.is_local_provider_configured():
        logger.info(f"Registering local provider for {settings.local_root_dir}...")
        resolver.register(
            settings.local_authority,
            LocalDocumentsProvider(
                authority=settings.local_authority,
                root_dir=Path(settings.local_root_dir),
                title=settings.local_root_title,
            ),
        )

    if include_remote:
        for authority in settings.get_remote_authorities():
            logger.info(f"Registering remote provider {authority}...")
            resolver.register(
                authority,
                HttpProviderTransport(
                    api_base=settings.provider_api_base,
                    timeout=settings.provider_timeout,
                ),
            )

    return resolver
