"""Wire vocabulary shared by clients and providers."""

from .assets import (
    EXTRA_THUMBNAIL_SIZE,
    UNKNOWN_LENGTH,
    CancellationSignal,
    Size,
    TypedAsset,
    mime_matches,
)
from .calls import (
    METHOD_CREATE_DOCUMENT,
    METHOD_DELETE_DOCUMENT,
    CreateDocumentRequest,
    CreateDocumentResponse,
    DeleteDocumentRequest,
    DeleteDocumentResponse,
)
from .columns import (
    MIME_TYPE_DIR,
    DirectoryExtras,
    DocumentDescriptor,
    DocumentFlag,
    QueryResult,
    RootDescriptor,
    RootFlag,
    RootType,
)
from .uris import (
    ResourceKind,
    ResourceUri,
    as_resource_uri,
    build_child_documents_uri,
    build_document_uri,
    build_recent_documents_uri,
    build_root_uri,
    build_roots_uri,
    build_search_documents_uri,
    get_document_id,
    get_root_id,
    get_search_documents_query,
)

__all__ = [
    "EXTRA_THUMBNAIL_SIZE",
    "METHOD_CREATE_DOCUMENT",
    "METHOD_DELETE_DOCUMENT",
    "MIME_TYPE_DIR",
    "UNKNOWN_LENGTH",
    "CancellationSignal",
    "CreateDocumentRequest",
    "CreateDocumentResponse",
    "DeleteDocumentRequest",
    "DeleteDocumentResponse",
    "DirectoryExtras",
    "DocumentDescriptor",
    "DocumentFlag",
    "QueryResult",
    "ResourceKind",
    "ResourceUri",
    "RootDescriptor",
    "RootFlag",
    "RootType",
    "Size",
    "TypedAsset",
    "as_resource_uri",
    "build_child_documents_uri",
    "build_document_uri",
    "build_recent_documents_uri",
    "build_root_uri",
    "build_roots_uri",
    "build_search_documents_uri",
    "get_document_id",
    "get_root_id",
    "get_search_documents_query",
    "mime_matches",
]
