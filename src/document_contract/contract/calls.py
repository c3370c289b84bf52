"""Typed requests and responses for provider calls.

A call is a named method plus a flat key/value map in each direction. The
models here are the only place those maps are built or read, so both the
client and the provider side validate at the boundary.
"""

from typing import Any, ClassVar, Dict

from pydantic import BaseModel, ConfigDict, Field

METHOD_CREATE_DOCUMENT = "createDocument"
METHOD_DELETE_DOCUMENT = "deleteDocument"


class CallRequest(BaseModel):
    """Base class for call inputs."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    method: ClassVar[str]

    def to_extras(self) -> Dict[str, Any]:
        return self.model_dump()


class CallResponse(BaseModel):
    """Base class for call outputs."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    def to_extras(self) -> Dict[str, Any]:
        return self.model_dump()


class CreateDocumentRequest(CallRequest):
    method: ClassVar[str] = METHOD_CREATE_DOCUMENT

    document_id: str = Field(min_length=1, description="Parent directory")
    mime_type: str
    display_name: str


class CreateDocumentResponse(CallResponse):
    document_id: str = Field(min_length=1, description="Newly created document")


class DeleteDocumentRequest(CallRequest):
    method: ClassVar[str] = METHOD_DELETE_DOCUMENT

    document_id: str = Field(min_length=1)


class DeleteDocumentResponse(CallResponse):
    pass


