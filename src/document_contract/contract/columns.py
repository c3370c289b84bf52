"""Column names, flags and descriptor rows exchanged with providers."""

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

# Document columns
COLUMN_DOCUMENT_ID = "document_id"
COLUMN_MIME_TYPE = "mime_type"
COLUMN_DISPLAY_NAME = "_display_name"
COLUMN_SUMMARY = "summary"
COLUMN_LAST_MODIFIED = "last_modified"
COLUMN_ICON = "icon"
COLUMN_FLAGS = "flags"
COLUMN_SIZE = "_size"

# Root columns
COLUMN_ROOT_ID = "root_id"
COLUMN_ROOT_TYPE = "root_type"
COLUMN_TITLE = "title"
COLUMN_AVAILABLE_BYTES = "available_bytes"
COLUMN_MIME_TYPES = "mime_types"

MIME_TYPE_DIR = "vnd.android.document/directory"

# Out-of-band extras a provider may attach to a directory query result
EXTRA_LOADING = "loading"
EXTRA_INFO = "info"
EXTRA_ERROR = "error"


class DocumentFlag(enum.IntFlag):
    """Capabilities of a single document."""

    SUPPORTS_THUMBNAIL = 1
    SUPPORTS_WRITE = 1 << 1
    SUPPORTS_DELETE = 1 << 2
    DIR_SUPPORTS_CREATE = 1 << 3
    DIR_SUPPORTS_SEARCH = 1 << 4
    DIR_PREFERS_GRID = 1 << 5


DIR_ONLY_FLAGS = (
    DocumentFlag.DIR_SUPPORTS_CREATE
    | DocumentFlag.DIR_SUPPORTS_SEARCH
    | DocumentFlag.DIR_PREFERS_GRID
)


class RootType(enum.IntEnum):
    """What kind of entry point a root is."""

    SERVICE = 1
    SHORTCUT = 2
    DEVICE = 3


class RootFlag(enum.IntFlag):
    """Capabilities of a root."""

    SUPPORTS_CREATE = 1
    LOCAL_ONLY = 1 << 1
    ADVANCED = 1 << 2
    SUPPORTS_RECENTS = 1 << 3


@dataclass(frozen=True)
class DocumentDescriptor:
    """A single document row."""

    document_id: str
    mime_type: str
    display_name: str
    flags: int = 0
    summary: Optional[str] = None
    last_modified: Optional[int] = None  # milliseconds since the epoch
    icon: Optional[str] = None
    size: Optional[int] = None

    def __post_init__(self):
        if not self.is_directory and self.flags & DIR_ONLY_FLAGS:
            raise ValueError(
                f"Directory flags set on non-directory document {self.document_id}"
            )

    @property
    def is_directory(self) -> bool:
        return self.mime_type == MIME_TYPE_DIR

    def to_row(self) -> Dict[str, Any]:
        return {
            COLUMN_DOCUMENT_ID: self.document_id,
            COLUMN_MIME_TYPE: self.mime_type,
            COLUMN_DISPLAY_NAME: self.display_name,
            COLUMN_SUMMARY: self.summary,
            COLUMN_LAST_MODIFIED: self.last_modified,
            COLUMN_ICON: self.icon,
            COLUMN_FLAGS: int(self.flags),
            COLUMN_SIZE: self.size,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "DocumentDescriptor":
        return cls(
            document_id=row[COLUMN_DOCUMENT_ID],
            mime_type=row[COLUMN_MIME_TYPE],
            display_name=row[COLUMN_DISPLAY_NAME],
            flags=int(row.get(COLUMN_FLAGS) or 0),
            summary=row.get(COLUMN_SUMMARY),
            last_modified=row.get(COLUMN_LAST_MODIFIED),
            icon=row.get(COLUMN_ICON),
            size=row.get(COLUMN_SIZE),
        )


@dataclass(frozen=True)
class RootDescriptor:
    """A single root row."""

    root_id: str
    root_type: RootType
    title: str
    document_id: str
    flags: int = 0
    icon: Optional[str] = None
    summary: Optional[str] = None
    available_bytes: Optional[int] = None
    mime_types: Optional[str] = None  # newline separated

    def to_row(self) -> Dict[str, Any]:
        return {
            COLUMN_ROOT_ID: self.root_id,
            COLUMN_ROOT_TYPE: int(self.root_type),
            COLUMN_FLAGS: int(self.flags),
            COLUMN_ICON: self.icon,
            COLUMN_TITLE: self.title,
            COLUMN_SUMMARY: self.summary,
            COLUMN_DOCUMENT_ID: self.document_id,
            COLUMN_AVAILABLE_BYTES: self.available_bytes,
            COLUMN_MIME_TYPES: self.mime_types,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RootDescriptor":
        return cls(
            root_id=row[COLUMN_ROOT_ID],
            root_type=RootType(row[COLUMN_ROOT_TYPE]),
            title=row[COLUMN_TITLE],
            document_id=row[COLUMN_DOCUMENT_ID],
            flags=int(row.get(COLUMN_FLAGS) or 0),
            icon=row.get(COLUMN_ICON),
            summary=row.get(COLUMN_SUMMARY),
            available_bytes=row.get(COLUMN_AVAILABLE_BYTES),
            mime_types=row.get(COLUMN_MIME_TYPES),
        )


@dataclass(frozen=True)
class DirectoryExtras:
    """Status a provider reports alongside a directory listing."""

    loading: bool = False
    info: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_extras(cls, extras: Dict[str, Any]) -> "DirectoryExtras":
        return cls(
            loading=bool(extras.get(EXTRA_LOADING, False)),
            info=extras.get(EXTRA_INFO),
            error=extras.get(EXTRA_ERROR),
        )

    def to_extras(self) -> Dict[str, Any]:
        extras: Dict[str, Any] = {}
        if self.loading:
            extras[EXTRA_LOADING] = True
        if self.info is not None:
            extras[EXTRA_INFO] = self.info
        if self.error is not None:
            extras[EXTRA_ERROR] = self.error
        return extras


@dataclass
class QueryResult:
    """Rows returned by a provider query, plus out-of-band extras."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def status(self) -> DirectoryExtras:
        return DirectoryExtras.from_extras(self.extras)

    def documents(self) -> List[DocumentDescriptor]:
        return [DocumentDescriptor.from_row(row) for row in self.rows]

    def roots(self) -> List[RootDescriptor]:
        return [RootDescriptor.from_row(row) for row in self.rows]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
