"""Exception types shared across the document contract."""


class DocumentContractError(Exception):
    """Base class for every error raised by this package."""


class MalformedResourceURI(DocumentContractError, ValueError):
    """A URI does not have the path shape the caller asked for."""


class ProviderCallFailed(DocumentContractError):
    """A provider or its transport failed to answer a request."""


class ThumbnailUnavailable(DocumentContractError):
    """A thumbnail could not be read or decoded."""


class UnsupportedVariantKind(DocumentContractError):
    """A named variant carries a type tag or value we cannot convert."""


class TemplateRejected(DocumentContractError):
    """An action template cannot be turned into a generic action."""


class OperationCanceled(DocumentContractError):
    """A cancellation signal fired while an operation was in flight."""


class ProviderError(DocumentContractError):
    """Raised by a provider implementation while serving a request."""

    status_code = 500


class DocumentNotFound(ProviderError):
    """The addressed document or root does not exist."""

    status_code = 404


class UnsupportedOperation(ProviderError):
    """The provider does not implement the requested method or URI kind."""

    status_code = 400
