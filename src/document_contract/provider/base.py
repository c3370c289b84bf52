"""Base protocol and provider class for document providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError

from ..contract.assets import (
    EXTRA_THUMBNAIL_SIZE,
    CancellationSignal,
    Size,
    TypedAsset,
    mime_matches,
)
from ..contract.calls import (
    METHOD_CREATE_DOCUMENT,
    METHOD_DELETE_DOCUMENT,
    CreateDocumentRequest,
    CreateDocumentResponse,
    DeleteDocumentRequest,
    DeleteDocumentResponse,
)
from ..contract.columns import (
    DirectoryExtras,
    DocumentDescriptor,
    QueryResult,
    RootDescriptor,
)
from ..contract.uris import (
    PARAM_QUERY,
    ResourceKind,
    ResourceUri,
    get_document_id,
)
from ..errors import DocumentNotFound, ProviderError, UnsupportedOperation


class ProviderTransport(Protocol):
    """Protocol for reaching the provider behind an authority."""

    def call(
        self, uri: ResourceUri, method: str, extras: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Invoke a named method, return the provider's output map."""
        ...

    def query(self, uri: ResourceUri) -> QueryResult:
        """Query roots or documents addressed by a URI."""
        ...

    def open_typed_asset(
        self,
        uri: ResourceUri,
        mime_filter: str,
        options: Dict[str, Any],
        signal: Optional[CancellationSignal] = None,
    ) -> TypedAsset:
        """Open a stream of the document's content matching a MIME filter."""
        ...

    def close(self) -> None:
        """Close transport resources."""
        ...


class DocumentsProvider(ABC):
    """
    Base class for providers serving documents under one authority.

    Subclasses implement the per-operation hooks; this class dispatches
    incoming calls, queries and opens to them and validates their inputs.
    It satisfies ProviderTransport, so a provider can be registered with a
    ContentResolver directly for in-process use.
    """

    def __init__(self, authority: str):
        self.authority = authority

    # Dispatch

    def call(
        self, uri: ResourceUri, method: str, extras: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Dispatch a named call to the matching hook.

        Args:
            uri: Document URI the call is addressed to
            method: Method name
            extras: Input map

        Returns:
            Output map of the method

        Raises:
            ProviderError: If the call is invalid or the hook fails
        """
        self._check_authority(uri)

        if method == METHOD_CREATE_DOCUMENT:
            create = self._validate(CreateDocumentRequest, extras)
            self._check_document_id(uri, create.document_id)
            document_id = self.create_document(
                create.document_id, create.mime_type, create.display_name
            )
            return CreateDocumentResponse(document_id=document_id).to_extras()

        if method == METHOD_DELETE_DOCUMENT:
            delete = self._validate(DeleteDocumentRequest, extras)
            self._check_document_id(uri, delete.document_id)
            self.delete_document(delete.document_id)
            return DeleteDocumentResponse().to_extras()

        raise UnsupportedOperation(f"Method not supported: {method}")

    def query(self, uri: ResourceUri) -> QueryResult:
        """Dispatch a query to the hook matching the URI's kind."""
        self._check_authority(uri)
        kind = uri.kind
        segments = uri.segments

        if kind == ResourceKind.ROOTS:
            return QueryResult(rows=[root.to_row() for root in self.query_roots()])

        if kind == ResourceKind.ROOT:
            rows = [root.to_row() for root in self.query_roots() if root.root_id == segments[1]]
            if not rows:
                raise DocumentNotFound(f"No such root: {segments[1]}")
            return QueryResult(rows=rows)

        if kind == ResourceKind.RECENT_DOCUMENTS:
            documents = self.query_recent_documents(segments[1])
            return QueryResult(rows=[doc.to_row() for doc in documents])

        if kind == ResourceKind.DOCUMENT:
            return QueryResult(rows=[self.query_document(segments[1]).to_row()])

        if kind == ResourceKind.CHILD_DOCUMENTS:
            documents = self.query_child_documents(segments[1])
            return QueryResult(
                rows=[doc.to_row() for doc in documents],
                extras=self.get_directory_extras(segments[1]).to_extras(),
            )

        if kind == ResourceKind.SEARCH_DOCUMENTS:
            documents = self.query_search_documents(
                segments[1], uri.get_query_parameter(PARAM_QUERY) or ""
            )
            return QueryResult(rows=[doc.to_row() for doc in documents])

        raise UnsupportedOperation(f"Unsupported URI: {uri}")

    def open_typed_asset(
        self,
        uri: ResourceUri,
        mime_filter: str,
        options: Dict[str, Any],
        signal: Optional[CancellationSignal] = None,
    ) -> TypedAsset:
        """
        Open a document as content matching a MIME filter.

        A request carrying a thumbnail size is routed to the thumbnail hook;
        otherwise the document itself is opened when its type matches.
        """
        self._check_authority(uri)
        document_id = get_document_id(uri)
        if signal is not None:
            signal.throw_if_canceled()

        size = options.get(EXTRA_THUMBNAIL_SIZE)
        if size is not None and mime_filter.startswith("image/"):
            width, height = size
            return self.open_document_thumbnail(document_id, Size(int(width), int(height)), signal)

        document = self.query_document(document_id)
        if not mime_matches(mime_filter, document.mime_type):
            raise UnsupportedOperation(
                f"Document {document_id} of type {document.mime_type} does not match {mime_filter}"
            )
        return self.open_document(document_id, signal)

    def close(self) -> None:
        """Release provider resources."""

    # Hooks

    @abstractmethod
    def query_roots(self) -> List[RootDescriptor]:
        """List the roots of this provider."""

    @abstractmethod
    def query_document(self, document_id: str) -> DocumentDescriptor:
        """Describe a single document."""

    @abstractmethod
    def query_child_documents(self, parent_document_id: str) -> List[DocumentDescriptor]:
        """List the children of a directory."""

    @abstractmethod
    def open_document(
        self, document_id: str, signal: Optional[CancellationSignal] = None
    ) -> TypedAsset:
        """Open the content of a document for reading."""

    def query_recent_documents(self, root_id: str) -> List[DocumentDescriptor]:
        raise UnsupportedOperation("Recent documents not supported")

    def query_search_documents(
        self, parent_document_id: str, query: str
    ) -> List[DocumentDescriptor]:
        raise UnsupportedOperation("Search not supported")

    def get_directory_extras(self, parent_document_id: str) -> DirectoryExtras:
        return DirectoryExtras()

    def create_document(
        self, parent_document_id: str, mime_type: str, display_name: str
    ) -> str:
        raise UnsupportedOperation("Create not supported")

    def delete_document(self, document_id: str) -> None:
        raise UnsupportedOperation("Delete not supported")

    def open_document_thumbnail(
        self, document_id: str, size: Size, signal: Optional[CancellationSignal] = None
    ) -> TypedAsset:
        raise UnsupportedOperation("Thumbnails not supported")

    # Helpers

    def _check_authority(self, uri: ResourceUri) -> None:
        if uri.authority != self.authority:
            raise ProviderError(
                f"URI authority {uri.authority} does not belong to provider {self.authority}"
            )

    @staticmethod
    def _check_document_id(uri: ResourceUri, document_id: str) -> None:
        if get_document_id(uri) != document_id:
            raise ProviderError(f"Document ID {document_id} does not match {uri}")

    @staticmethod
    def _validate(model, extras: Dict[str, Any]):
        try:
            return model.model_validate(extras)
        except ValidationError as e:
            raise ProviderError(f"Invalid {model.method} input: {e}") from e
