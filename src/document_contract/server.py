"""Provider host exposing registered providers over HTTP."""

import logging
from typing import Iterator

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.routing import Route

from .contract.assets import EXTRA_THUMBNAIL_SIZE, TypedAsset
from .contract.uris import ResourceUri
from .errors import MalformedResourceURI, ProviderError
from .provider.base import ProviderTransport
from .provider.http import HEADER_DECLARED_LENGTH, HEADER_START_OFFSET
from .resolver import ContentResolver


logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


def _lookup(request: Request) -> ProviderTransport:
    resolver: ContentResolver = request.app.state.resolver
    authority = request.path_params["authority"]
    transport = resolver.get(authority)
    if transport is None:
        raise LookupError(f"Unknown authority: {authority}")
    return transport


def _parse_uri(request: Request, value: str) -> ResourceUri:
    uri = ResourceUri.parse(value)
    if uri.authority != request.path_params["authority"]:
        raise MalformedResourceURI(f"URI {value} is not addressed to this authority")
    return uri


async def _handle(request: Request, handler) -> Response:
    try:
        transport = _lookup(request)
        return await handler(transport)
    except LookupError as e:
        return _error(str(e), 404)
    except MalformedResourceURI as e:
        return _error(str(e), 400)
    except ProviderError as e:
        logger.warning(f"Provider error on {request.url.path}: {e}")
        return _error(str(e), e.status_code)
    except (OSError, ValueError) as e:
        logger.error(f"Provider failure on {request.url.path}: {e!r}")
        return _error(f"Provider failure: {e}", 500)


async def call_endpoint(request: Request) -> Response:
    """Invoke a provider method: ``{uri, method, extras}`` in, ``{extras}`` out."""
    try:
        body = await request.json()
    except ValueError:
        return _error("Request body must be JSON", 400)
    if not isinstance(body, dict) or "uri" not in body or "method" not in body:
        return _error("Request body needs 'uri' and 'method'", 400)

    async def handler(transport: ProviderTransport) -> Response:
        uri = _parse_uri(request, body["uri"])
        extras = await run_in_threadpool(
            transport.call, uri, body["method"], body.get("extras") or {}
        )
        return JSONResponse(content={"extras": extras})

    return await _handle(request, handler)


async def query_endpoint(request: Request) -> Response:
    """Query roots or documents: ``?uri=`` in, ``{rows, extras}`` out."""
    value = request.query_params.get("uri")
    if not value:
        return _error("Missing 'uri' parameter", 400)

    async def handler(transport: ProviderTransport) -> Response:
        uri = _parse_uri(request, value)
        result = await run_in_threadpool(transport.query, uri)
        return JSONResponse(content=result.to_dict())

    return await _handle(request, handler)


def _iter_asset(asset: TypedAsset) -> Iterator[bytes]:
    try:
        asset.fileobj.seek(0)
        while True:
            chunk = asset.fileobj.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        asset.close()


async def open_endpoint(request: Request) -> Response:
    """Stream a typed asset, with its region in the offset and length headers."""
    params = request.query_params
    value = params.get("uri")
    if not value:
        return _error("Missing 'uri' parameter", 400)

    options = {}
    if "width" in params and "height" in params:
        try:
            options[EXTRA_THUMBNAIL_SIZE] = (int(params["width"]), int(params["height"]))
        except ValueError:
            return _error("Thumbnail width and height must be integers", 400)

    async def handler(transport: ProviderTransport) -> Response:
        uri = _parse_uri(request, value)
        asset = await run_in_threadpool(
            transport.open_typed_asset, uri, params.get("mime", "*/*"), options
        )
        return StreamingResponse(
            _iter_asset(asset),
            media_type=asset.mime_type or "application/octet-stream",
            headers={
                HEADER_START_OFFSET: str(asset.start_offset),
                HEADER_DECLARED_LENGTH: str(asset.declared_length),
            },
        )

    return await _handle(request, handler)


async def providers_endpoint(request: Request) -> JSONResponse:
    """List the authorities served by this host."""
    resolver: ContentResolver = request.app.state.resolver
    return JSONResponse(content={"authorities": resolver.get_authorities()})


async def health_endpoint(request: Request) -> JSONResponse:
    return JSONResponse(content={"status": "ok"})


def create_app(resolver: ContentResolver, lifespan=None) -> Starlette:
    """
    Create the provider host application.

    Args:
        resolver: Registry holding the providers to serve
        lifespan: Optional lifespan context manager

    Returns:
        Starlette application
    """
    app = Starlette(
        debug=False,
        lifespan=lifespan,
        routes=[
            Route("/health", health_endpoint, methods=["GET"]),
            Route("/providers", providers_endpoint, methods=["GET"]),
            Route("/providers/{authority}/call", call_endpoint, methods=["POST"]),
            Route("/providers/{authority}/query", query_endpoint, methods=["GET"]),
            Route("/providers/{authority}/open", open_endpoint, methods=["GET"]),
        ],
    )
    app.state.resolver = resolver
    return app
