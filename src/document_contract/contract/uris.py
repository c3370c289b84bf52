"""Builders and parsers for provider resource URIs.

Every document and root is addressed by a URI whose authority names the
owning provider and whose path has a fixed shape:

    content://com.example/root
    content://com.example/root/sdcard
    content://com.example/root/sdcard/recent
    content://com.example/document/12
    content://com.example/document/12/children
    content://com.example/document/12/search?query=pony

Root and document IDs are opaque to everyone but the provider that issued
them. Nothing here looks inside an ID; each one always occupies exactly one
path segment.
"""

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit

from ..config import settings
from ..errors import MalformedResourceURI

PATH_ROOT = "root"
PATH_RECENT = "recent"
PATH_DOCUMENT = "document"
PATH_CHILDREN = "children"
PATH_SEARCH = "search"

PARAM_QUERY = "query"


class ResourceKind(str, enum.Enum):
    """Shapes a resource URI can take."""

    ROOTS = "roots"
    ROOT = "root"
    RECENT_DOCUMENTS = "recent_documents"
    DOCUMENT = "document"
    CHILD_DOCUMENTS = "child_documents"
    SEARCH_DOCUMENTS = "search_documents"


@dataclass(frozen=True)
class ResourceUri:
    """A provider-scoped resource identifier."""

    authority: str
    segments: Tuple[str, ...] = ()
    query: Tuple[Tuple[str, str], ...] = ()
    scheme: str = field(default_factory=lambda: settings.uri_scheme)

    @classmethod
    def parse(cls, value: str) -> "ResourceUri":
        """
        Parse the string form of a resource URI.

        Args:
            value: URI string, e.g. ``content://com.example/document/12``

        Returns:
            ResourceUri with decoded path segments and query pairs

        Raises:
            MalformedResourceURI: If the string has no scheme or authority
        """
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise MalformedResourceURI(f"Not a resource URI: {value}")

        return cls(
            authority=parts.netloc,
            segments=tuple(unquote(s) for s in parts.path.split("/") if s),
            query=tuple(parse_qsl(parts.query, keep_blank_values=True)),
            scheme=parts.scheme,
        )

    @property
    def kind(self) -> Optional[ResourceKind]:
        """Resource kind implied by the path, or None for unknown shapes."""
        segments = self.segments
        if not segments:
            return None

        marker = segments[0]
        if marker == PATH_ROOT:
            if len(segments) == 1:
                return ResourceKind.ROOTS
            if len(segments) == 2:
                return ResourceKind.ROOT
            if len(segments) == 3 and segments[2] == PATH_RECENT:
                return ResourceKind.RECENT_DOCUMENTS
        elif marker == PATH_DOCUMENT:
            if len(segments) == 2:
                return ResourceKind.DOCUMENT
            if len(segments) == 3 and segments[2] == PATH_CHILDREN:
                return ResourceKind.CHILD_DOCUMENTS
            if len(segments) == 3 and segments[2] == PATH_SEARCH:
                return ResourceKind.SEARCH_DOCUMENTS
        return None

    def get_query_parameter(self, name: str) -> Optional[str]:
        """Return the first value of a query parameter, or None."""
        for key, value in self.query:
            if key == name:
                return value
        return None

    def __str__(self) -> str:
        path = "".join("/" + quote(segment, safe="") for segment in self.segments)
        uri = f"{self.scheme}://{self.authority}{path}"
        if self.query:
            uri += "?" + urlencode(self.query, quote_via=quote)
        return uri


UriLike = Union[ResourceUri, str]


def as_resource_uri(uri: UriLike) -> ResourceUri:
    """Accept either a ResourceUri or its string form."""
    if isinstance(uri, ResourceUri):
        return uri
    return ResourceUri.parse(uri)


def _build(authority: str, *segments: str, query: Tuple[Tuple[str, str], ...] = ()) -> ResourceUri:
    if not authority:
        raise ValueError("authority must not be empty")
    for segment in segments:
        if not segment:
            raise ValueError(f"Empty path segment for authority {authority}")
    return ResourceUri(
        authority=authority,
        segments=segments,
        query=query,
        scheme=settings.uri_scheme,
    )


def build_roots_uri(authority: str) -> ResourceUri:
    """Build a URI listing all roots of a provider."""
    return _build(authority, PATH_ROOT)


def build_root_uri(authority: str, root_id: str) -> ResourceUri:
    """Build a URI addressing a single root."""
    return _build(authority, PATH_ROOT, root_id)


def build_recent_documents_uri(authority: str, root_id: str) -> ResourceUri:
    """Build a URI listing recently modified documents under a root."""
    return _build(authority, PATH_ROOT, root_id, PATH_RECENT)


def build_document_uri(authority: str, document_id: str) -> ResourceUri:
    """Build a URI addressing a single document."""
    return _build(authority, PATH_DOCUMENT, document_id)


def build_child_documents_uri(authority: str, parent_document_id: str) -> ResourceUri:
    """Build a URI listing the children of a directory document."""
    return _build(authority, PATH_DOCUMENT, parent_document_id, PATH_CHILDREN)


def build_search_documents_uri(
    authority: str, parent_document_id: str, query: str
) -> ResourceUri:
    """
    Build a URI searching the documents below a directory.

    Args:
        authority: Provider authority
        parent_document_id: Directory to search in
        query: Literal search string, encoded by the URI layer

    Returns:
        Search URI carrying the query as its only parameter
    """
    return _build(
        authority,
        PATH_DOCUMENT,
        parent_document_id,
        PATH_SEARCH,
        query=((PARAM_QUERY, query),),
    )


def get_root_id(root_uri: UriLike) -> str:
    """
    Extract the root ID from a root URI.

    Raises:
        MalformedResourceURI: If the URI does not start with ``root/{rootId}``
    """
    segments = as_resource_uri(root_uri).segments
    if len(segments) < 2 or segments[0] != PATH_ROOT:
        raise MalformedResourceURI(f"Not a root: {root_uri}")
    return segments[1]


def get_document_id(document_uri: UriLike) -> str:
    """
    Extract the document ID from a document URI.

    Raises:
        MalformedResourceURI: If the URI does not start with ``document/{documentId}``
    """
    segments = as_resource_uri(document_uri).segments
    if len(segments) < 2 or segments[0] != PATH_DOCUMENT:
        raise MalformedResourceURI(f"Not a document: {document_uri}")
    return segments[1]


def get_search_documents_query(search_documents_uri: UriLike) -> Optional[str]:
    """Extract the search string, or None when the URI carries none."""
    return as_resource_uri(search_documents_uri).get_query_parameter(PARAM_QUERY)
