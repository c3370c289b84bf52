"""Create and delete documents through their owning provider."""

import logging
from typing import Optional, Type, TypeVar

from pydantic import ValidationError

from .contract.calls import (
    CallRequest,
    CallResponse,
    CreateDocumentRequest,
    CreateDocumentResponse,
    DeleteDocumentRequest,
    DeleteDocumentResponse,
)
from .contract.uris import ResourceUri, UriLike, as_resource_uri, build_document_uri, get_document_id
from .errors import ProviderCallFailed
from .resolver import ContentResolver


logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=CallResponse)


def execute_call(
    resolver: ContentResolver,
    uri: ResourceUri,
    request: CallRequest,
    response_type: Type[ResponseT],
) -> ResponseT:
    """
    Send a typed request and validate the provider's answer.

    Raises:
        ProviderCallFailed: If the call fails or the answer does not validate
    """
    output = resolver.call(uri, request.method, request.to_extras())
    try:
        return response_type.model_validate(output or {})
    except ValidationError as e:
        raise ProviderCallFailed(
            f"Invalid {request.method} response from {uri.authority}: {e}"
        ) from e


def create_document(
    resolver: ContentResolver,
    parent_document_uri: UriLike,
    mime_type: str,
    display_name: str,
) -> Optional[ResourceUri]:
    """
    Create a new document under a directory.

    Args:
        resolver: Resolver routing the call to the parent's provider
        parent_document_uri: URI of the parent directory document
        mime_type: MIME type of the new document
        display_name: Display name of the new document

    Returns:
        URI of the new document, or None if the provider failed

    Raises:
        MalformedResourceURI: If parent_document_uri is not a document URI
    """
    parent_document_uri = as_resource_uri(parent_document_uri)
    parent_document_id = get_document_id(parent_document_uri)

    try:
        request = CreateDocumentRequest(
            document_id=parent_document_id,
            mime_type=mime_type,
            display_name=display_name,
        )
        response = execute_call(resolver, parent_document_uri, request, CreateDocumentResponse)
    except (ValidationError, ProviderCallFailed) as e:
        logger.warning(f"Failed to create document: {e}")
        return None

    return build_document_uri(parent_document_uri.authority, response.document_id)


def delete_document(resolver: ContentResolver, document_uri: UriLike) -> bool:
    """
    Delete a document.

    Returns:
        True if the provider reported success

    Raises:
        MalformedResourceURI: If document_uri is not a document URI
    """
    document_uri = as_resource_uri(document_uri)
    request = DeleteDocumentRequest(document_id=get_document_id(document_uri))

    try:
        execute_call(resolver, document_uri, request, DeleteDocumentResponse)
    except ProviderCallFailed as e:
        logger.warning(f"Failed to delete document: {e}")
        return False
    return True
