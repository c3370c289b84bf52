"""Fetch and downsample document thumbnails.

Providers are asked for a thumbnail of roughly the requested size, but
nothing obliges them to honor it. The image is therefore decoded in two
passes: first only the header, to learn its real dimensions, then the pixels
with an integer sample size derived from those dimensions.
"""

import io
import logging
from typing import BinaryIO, Optional, Tuple

from PIL import Image

from .config import settings
from .contract.assets import EXTRA_THUMBNAIL_SIZE, CancellationSignal, Size, TypedAsset
from .contract.uris import UriLike, as_resource_uri
from .errors import OperationCanceled, ProviderCallFailed, ThumbnailUnavailable
from .resolver import ContentResolver


logger = logging.getLogger(__name__)

MIME_FILTER_IMAGES = "image/*"

DECODE_ERRORS = (OSError, ValueError, EOFError, Image.DecompressionBombError)


def get_document_thumbnail(
    resolver: ContentResolver,
    document_uri: UriLike,
    size: Tuple[int, int],
    signal: Optional[CancellationSignal] = None,
) -> Optional[Image.Image]:
    """
    Load a thumbnail for a document, scaled down to about the given size.

    Args:
        resolver: Resolver routing the request to the document's provider
        document_uri: URI of the document
        size: Requested (width, height) in pixels
        signal: Optional cancellation signal

    Returns:
        Decoded image, or None if the size is not positive or the request
        was canceled or failed

    Raises:
        MalformedResourceURI: If document_uri is not a valid resource URI
    """
    document_uri = as_resource_uri(document_uri)
    target = Size(*size)
    if target.width <= 0 or target.height <= 0:
        logger.warning(f"Invalid thumbnail size {target} for {document_uri}")
        return None

    if signal is not None and signal.is_canceled:
        logger.debug(f"Thumbnail request for {document_uri} canceled before start")
        return None

    options = {EXTRA_THUMBNAIL_SIZE: (target.width, target.height)}
    try:
        asset = resolver.open_typed_asset(document_uri, MIME_FILTER_IMAGES, options, signal)
    except OperationCanceled:
        logger.debug(f"Thumbnail request for {document_uri} canceled")
        return None
    except ProviderCallFailed as e:
        logger.warning(f"Failed to load thumbnail for {document_uri}: {e}")
        return None

    with asset:
        try:
            return decode_thumbnail(asset, target, signal)
        except OperationCanceled:
            logger.debug(f"Thumbnail decode for {document_uri} canceled")
            return None
        except ThumbnailUnavailable as e:
            logger.warning(f"Failed to load thumbnail for {document_uri}: {e}")
            return None
        except DECODE_ERRORS as e:
            logger.warning(f"Failed to load thumbnail for {document_uri}: {e!r}")
            return None


def decode_thumbnail(
    asset: TypedAsset,
    target: Size,
    signal: Optional[CancellationSignal] = None,
) -> Image.Image:
    """
    Decode an asset, preferring its embedded region when one is declared.

    Raises:
        ThumbnailUnavailable: If the image reports no usable dimensions
        OperationCanceled: If the signal fires between passes
    """
    region = read_region(asset, settings.thumbnail_region_limit)

    if signal is not None:
        signal.throw_if_canceled()
    bounds = probe_bounds(_open_source(asset, region))
    if bounds[0] <= 0 or bounds[1] <= 0:
        raise ThumbnailUnavailable(f"Image reports empty bounds {bounds}")

    sample_size = compute_sample_size(bounds, target)
    logger.debug(f"Decoding with sample size {sample_size}")

    if signal is not None:
        signal.throw_if_canceled()
    return decode_sampled(_open_source(asset, region), sample_size)


def read_region(asset: TypedAsset, limit: int) -> Optional[bytes]:
    """
    Read the asset's declared region when it is small and offset.

    Thumbnails embedded in a larger file (such as an EXIF preview) are
    declared as a region. Reading just those bytes avoids handing the whole
    file to the decoder.

    Returns:
        The region bytes, or None if there is no region or the read came up
        short
    """
    if asset.start_offset <= 0 or not 0 <= asset.declared_length <= limit:
        return None

    asset.fileobj.seek(asset.start_offset)
    region = asset.fileobj.read(asset.declared_length)
    if len(region) != asset.declared_length:
        logger.debug(
            f"Short read of thumbnail region ({len(region)} of "
            f"{asset.declared_length} bytes), decoding full asset"
        )
        return None
    return region


def probe_bounds(source: BinaryIO) -> Tuple[int, int]:
    """Read only the image header and return its (width, height)."""
    with Image.open(source) as probe:
        return probe.size


def compute_sample_size(bounds: Tuple[int, int], target: Size) -> int:
    """
    Pick the integer downsample factor for decoding.

    The smaller of the two per-axis ratios is used so neither dimension ends
    up below the target; a ratio under one is clamped to one.
    """
    width, height = bounds
    sample_size = min(width // target.width, height // target.height)
    return max(1, sample_size)


def decode_sampled(source: BinaryIO, sample_size: int) -> Image.Image:
    """
    Decode an image, dividing both dimensions by sample_size.

    JPEG sources are scaled by the decoder itself where possible; whatever
    factor remains is applied with an integer box reduction.
    """
    with Image.open(source) as image:
        width, height = image.size
        if sample_size > 1:
            image.draft(None, (max(1, width // sample_size), max(1, height // sample_size)))
        image.load()

        decoded = image
        if decoded.mode in ("1", "P"):
            decoded = decoded.convert("RGBA" if "transparency" in decoded.info else "RGB")

        applied = max(1, round(width / decoded.width))
        remaining = sample_size // applied
        if remaining > 1:
            return decoded.reduce(remaining)
        return decoded.copy()


def _open_source(asset: TypedAsset, region: Optional[bytes]) -> BinaryIO:
    if region is not None:
        return io.BytesIO(region)
    # Pillow always decodes from the start of the stream it is given.
    asset.fileobj.seek(0)
    return asset.fileobj
