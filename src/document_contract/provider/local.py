"""Documents provider backed by a local directory."""

import logging
import mimetypes
import shutil
from pathlib import Path
from typing import Iterator, List, Optional

from ..contract.assets import CancellationSignal, Size, TypedAsset
from ..contract.columns import (
    MIME_TYPE_DIR,
    DocumentDescriptor,
    DocumentFlag,
    RootDescriptor,
    RootFlag,
    RootType,
)
from ..errors import DocumentNotFound, ProviderError, UnsupportedOperation
from .base import DocumentsProvider


logger = logging.getLogger(__name__)

DEFAULT_ROOT_ID = "local"
MAX_RESULTS = 64


class LocalDocumentsProvider(DocumentsProvider):
    """
    Expose one directory tree as a single device root.

    Document IDs have the form ``{root_id}:{relative/posix/path}``; the root
    directory itself is ``{root_id}:``.
    """

    def __init__(
        self,
        authority: str,
        root_dir: Path,
        root_id: str = DEFAULT_ROOT_ID,
        title: str = "Local storage",
    ):
        """
        Initialize local provider.

        Args:
            authority: Authority this provider answers for
            root_dir: Directory to expose
            root_id: ID of the single root
            title: Human-readable root title
        """
        super().__init__(authority)
        self.root_dir = Path(root_dir).resolve()
        self.root_id = root_id
        self.title = title
        if not self.root_dir.is_dir():
            raise ValueError(f"Not a directory: {self.root_dir}")

    # Queries

    def query_roots(self) -> List[RootDescriptor]:
        return [
            RootDescriptor(
                root_id=self.root_id,
                root_type=RootType.DEVICE,
                title=self.title,
                document_id=self._document_id(self.root_dir),
                flags=RootFlag.SUPPORTS_CREATE | RootFlag.LOCAL_ONLY | RootFlag.SUPPORTS_RECENTS,
                available_bytes=shutil.disk_usage(self.root_dir).free,
            )
        ]

    def query_document(self, document_id: str) -> DocumentDescriptor:
        return self._describe(self._resolve(document_id))

    def query_child_documents(self, parent_document_id: str) -> List[DocumentDescriptor]:
        parent = self._resolve_directory(parent_document_id)
        return [self._describe(child) for child in sorted(parent.iterdir())]

    def query_recent_documents(self, root_id: str) -> List[DocumentDescriptor]:
        if root_id != self.root_id:
            raise DocumentNotFound(f"No such root: {root_id}")

        files = [path for path in self._walk(self.root_dir) if path.is_file()]
        files.sort(key=lambda p: p.stat().st_mtime, reverse=True)
        return [self._describe(path) for path in files[:MAX_RESULTS]]

    def query_search_documents(
        self, parent_document_id: str, query: str
    ) -> List[DocumentDescriptor]:
        parent = self._resolve_directory(parent_document_id)
        needle = query.lower()

        results = []
        for path in self._walk(parent):
            if needle in path.name.lower():
                results.append(self._describe(path))
                if len(results) >= MAX_RESULTS:
                    break
        return results

    # Mutations

    def create_document(
        self, parent_document_id: str, mime_type: str, display_name: str
    ) -> str:
        parent = self._resolve_directory(parent_document_id)
        if not display_name or "/" in display_name or display_name in (".", ".."):
            raise ProviderError(f"Invalid display name: {display_name!r}")

        name = display_name
        if mime_type != MIME_TYPE_DIR and not Path(name).suffix:
            extension = mimetypes.guess_extension(mime_type)
            if extension:
                name += extension

        target = self._unique_path(parent, name)
        if mime_type == MIME_TYPE_DIR:
            target.mkdir()
        else:
            target.touch(exist_ok=False)

        logger.info(f"Created {target.relative_to(self.root_dir)} ({mime_type})")
        return self._document_id(target)

    def delete_document(self, document_id: str) -> None:
        path = self._resolve(document_id)
        if path == self.root_dir:
            raise ProviderError("Cannot delete the root directory")

        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
        logger.info(f"Deleted {document_id}")

    # Content

    def open_document(
        self, document_id: str, signal: Optional[CancellationSignal] = None
    ) -> TypedAsset:
        path = self._resolve(document_id)
        if path.is_dir():
            raise UnsupportedOperation(f"Cannot open directory {document_id}")
        if signal is not None:
            signal.throw_if_canceled()

        declared_length = path.stat().st_size
        return TypedAsset(
            fileobj=path.open("rb"),
            start_offset=0,
            declared_length=declared_length,
            mime_type=self._mime_type(path),
        )

    def open_document_thumbnail(
        self, document_id: str, size: Size, signal: Optional[CancellationSignal] = None
    ) -> TypedAsset:
        path = self._resolve(document_id)
        if not self._mime_type(path).startswith("image/"):
            raise UnsupportedOperation(f"No thumbnail for {document_id}")
        # Images are their own thumbnails; the caller scales them down.
        return self.open_document(document_id, signal)

    # Helpers

    def _document_id(self, path: Path) -> str:
        relative = path.relative_to(self.root_dir).as_posix()
        if relative == ".":
            relative = ""
        return f"{self.root_id}:{relative}"

    def _resolve(self, document_id: str) -> Path:
        root_id, sep, relative = document_id.partition(":")
        if not sep or root_id != self.root_id:
            raise DocumentNotFound(f"No such document: {document_id}")

        path = (self.root_dir / relative).resolve()
        if path != self.root_dir and self.root_dir not in path.parents:
            raise DocumentNotFound(f"No such document: {document_id}")
        if not path.exists():
            raise DocumentNotFound(f"No such document: {document_id}")
        return path

    def _resolve_directory(self, document_id: str) -> Path:
        path = self._resolve(document_id)
        if not path.is_dir():
            raise UnsupportedOperation(f"Not a directory: {document_id}")
        return path

    @staticmethod
    def _mime_type(path: Path) -> str:
        if path.is_dir():
            return MIME_TYPE_DIR
        return mimetypes.guess_type(path.name)[0] or "application/octet-stream"

    def _describe(self, path: Path) -> DocumentDescriptor:
        stat = path.stat()
        mime_type = self._mime_type(path)

        flags = DocumentFlag.SUPPORTS_WRITE
        if path != self.root_dir:
            flags |= DocumentFlag.SUPPORTS_DELETE
        if mime_type == MIME_TYPE_DIR:
            flags |= DocumentFlag.DIR_SUPPORTS_CREATE | DocumentFlag.DIR_SUPPORTS_SEARCH
        elif mime_type.startswith("image/"):
            flags |= DocumentFlag.SUPPORTS_THUMBNAIL

        return DocumentDescriptor(
            document_id=self._document_id(path),
            mime_type=mime_type,
            display_name=path.name if path != self.root_dir else self.title,
            flags=int(flags),
            last_modified=int(stat.st_mtime * 1000),
            size=None if path.is_dir() else stat.st_size,
        )

    @staticmethod
    def _walk(directory: Path) -> Iterator[Path]:
        for path in sorted(directory.rglob("*")):
            yield path

    @staticmethod
    def _unique_path(parent: Path, name: str) -> Path:
        target = parent / name
        if not target.exists():
            return target

        stem, suffix = Path(name).stem, Path(name).suffix
        counter = 1
        while True:
            target = parent / f"{stem} ({counter}){suffix}"
            if not target.exists():
                return target
            counter += 1
