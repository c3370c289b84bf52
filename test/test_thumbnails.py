"""Tests for thumbnail retrieval and downsampling."""

import io
from unittest.mock import MagicMock

import pytest

from conftest import AUTHORITY, encode_image
from document_contract.contract.assets import CancellationSignal, Size, TypedAsset
from document_contract.contract.uris import build_document_uri
from document_contract.errors import OperationCanceled
from document_contract.resolver import ContentResolver
from document_contract.thumbnails import compute_sample_size, get_document_thumbnail

DOCUMENT = build_document_uri(AUTHORITY, "doc")


@pytest.fixture
def transport():
    return MagicMock()


@pytest.fixture
def mocked_resolver(transport):
    resolver = ContentResolver()
    resolver.register(AUTHORITY, transport)
    return resolver


class TestSampleSize:
    def test_divides_by_smaller_ratio(self):
        assert compute_sample_size((800, 600), Size(200, 150)) == 4

    def test_uses_integer_division(self):
        assert compute_sample_size((900, 700), Size(200, 150)) == 4

    def test_smaller_than_target_clamps_to_one(self):
        assert compute_sample_size((100, 80), Size(200, 150)) == 1

    def test_one_axis_below_target_clamps_to_one(self):
        assert compute_sample_size((800, 100), Size(200, 150)) == 1


class TestGetDocumentThumbnail:
    def test_local_image_is_downsampled(self, resolver):
        uri = build_document_uri(AUTHORITY, "local:photos/beach.png")

        image = get_document_thumbnail(resolver, uri, (200, 150))

        assert image is not None
        assert image.size == (200, 150)

    def test_requests_image_with_size_option(self, mocked_resolver, transport):
        transport.open_typed_asset.return_value = TypedAsset(io.BytesIO(encode_image(40, 30)))

        get_document_thumbnail(mocked_resolver, DOCUMENT, (20, 15))

        _, mime_filter, options, _ = transport.open_typed_asset.call_args.args
        assert mime_filter == "image/*"
        assert options == {"thumbnail_size": (20, 15)}

    def test_undersized_image_is_kept(self, mocked_resolver, transport):
        transport.open_typed_asset.return_value = TypedAsset(io.BytesIO(encode_image(50, 40)))

        image = get_document_thumbnail(mocked_resolver, DOCUMENT, (200, 150))

        assert image.size == (50, 40)

    def test_non_power_of_two_sample(self, mocked_resolver, transport):
        transport.open_typed_asset.return_value = TypedAsset(io.BytesIO(encode_image(600, 450)))

        image = get_document_thumbnail(mocked_resolver, DOCUMENT, (200, 150))

        assert image.size == (200, 150)

    def test_jpeg_is_scaled_while_decoding(self, mocked_resolver, transport):
        data = encode_image(1600, 1200, format="JPEG")
        transport.open_typed_asset.return_value = TypedAsset(io.BytesIO(data))

        image = get_document_thumbnail(mocked_resolver, DOCUMENT, (200, 150))

        assert image.size == (200, 150)

    def test_embedded_region_is_decoded(self, mocked_resolver, transport):
        thumbnail = encode_image(64, 48)
        data = b"\x00" * 128 + thumbnail + b"\x00" * 64
        transport.open_typed_asset.return_value = TypedAsset(
            io.BytesIO(data), start_offset=128, declared_length=len(thumbnail)
        )

        image = get_document_thumbnail(mocked_resolver, DOCUMENT, (32, 24))

        assert image is not None
        assert image.size == (32, 24)

    def test_short_region_read_falls_back_to_full_asset(self, mocked_resolver, transport):
        data = encode_image(800, 600)
        transport.open_typed_asset.return_value = TypedAsset(
            io.BytesIO(data), start_offset=len(data) - 10, declared_length=100
        )

        image = get_document_thumbnail(mocked_resolver, DOCUMENT, (200, 150))

        assert image is not None
        assert image.size == (200, 150)

    def test_large_region_decodes_full_asset(self, mocked_resolver, transport):
        data = encode_image(400, 300)
        transport.open_typed_asset.return_value = TypedAsset(
            io.BytesIO(data), start_offset=16, declared_length=128 * 1024
        )

        image = get_document_thumbnail(mocked_resolver, DOCUMENT, (200, 150))

        assert image.size == (200, 150)

    def test_asset_is_closed_after_decode(self, mocked_resolver, transport):
        stream = io.BytesIO(encode_image(40, 30))
        transport.open_typed_asset.return_value = TypedAsset(stream)

        get_document_thumbnail(mocked_resolver, DOCUMENT, (20, 15))

        assert stream.closed

    def test_corrupt_image_returns_none_and_closes(self, mocked_resolver, transport):
        stream = io.BytesIO(b"definitely not an image")
        transport.open_typed_asset.return_value = TypedAsset(stream)

        assert get_document_thumbnail(mocked_resolver, DOCUMENT, (20, 15)) is None
        assert stream.closed

    def test_truncated_image_returns_none(self, mocked_resolver, transport):
        data = encode_image(800, 600, format="JPEG")
        transport.open_typed_asset.return_value = TypedAsset(io.BytesIO(data[: len(data) // 3]))

        assert get_document_thumbnail(mocked_resolver, DOCUMENT, (200, 150)) is None

    def test_provider_failure_returns_none(self, mocked_resolver, transport):
        transport.open_typed_asset.side_effect = FileNotFoundError("gone")

        assert get_document_thumbnail(mocked_resolver, DOCUMENT, (20, 15)) is None

    def test_non_image_document_returns_none(self, resolver):
        uri = build_document_uri(AUTHORITY, "local:notes.txt")

        assert get_document_thumbnail(resolver, uri, (20, 15)) is None

    def test_canceled_before_request(self, mocked_resolver, transport):
        signal = CancellationSignal()
        signal.cancel()

        assert get_document_thumbnail(mocked_resolver, DOCUMENT, (20, 15), signal) is None
        transport.open_typed_asset.assert_not_called()

    def test_canceled_during_request(self, mocked_resolver, transport):
        transport.open_typed_asset.side_effect = OperationCanceled("canceled")

        assert get_document_thumbnail(mocked_resolver, DOCUMENT, (20, 15), CancellationSignal()) is None

    def test_canceled_after_open_closes_asset(self, mocked_resolver, transport):
        signal = CancellationSignal()
        stream = io.BytesIO(encode_image(40, 30))

        def open_and_cancel(*args):
            signal.cancel()
            return TypedAsset(stream)

        transport.open_typed_asset.side_effect = open_and_cancel

        assert get_document_thumbnail(mocked_resolver, DOCUMENT, (20, 15), signal) is None
        assert stream.closed

    def test_invalid_size_returns_none(self, mocked_resolver, transport):
        assert get_document_thumbnail(mocked_resolver, DOCUMENT, (0, 150)) is None
        transport.open_typed_asset.assert_not_called()
