import httpx
import pytest

from mediahost.core.exceptions import (
    DeletionFailedError,
    InvalidInputError,
    MissingUrlError,
    UploadFailedError,
)
from mediahost.engines.cloudinary.schemas import Asset, DeletionResult
from tests.conftest import SECURE_URL


@pytest.mark.asyncio
@pytest.mark.parametrize("file_data", [b"", None])
async def test_upload_rejects_empty_buffer_before_network(service, media_host, file_data):
    result = await service.upload(file_data)

    assert not result.ok
    assert isinstance(result.error, InvalidInputError)
    assert result.error.code == 400
    assert result.error.operation == "upload"
    assert media_host.requests == []


@pytest.mark.asyncio
async def test_upload_returns_asset_with_secure_url(service, media_host, image_bytes):
    result = await service.upload(image_bytes)

    assert result.ok
    asset = result.unwrap()
    assert isinstance(asset, Asset)
    assert asset.secure_url == SECURE_URL
    assert asset.secure_url.startswith("https://")
    assert asset.public_id == "blog-images/abc123"
    assert asset.folder == "blog-images"
    assert asset.size_bytes == 48213

    assert len(media_host.uploads) == 1
    request = media_host.uploads[0]
    assert request.url.path == "/v1_1/demo/image/upload"
    body = request.content
    assert b"w_1200,h_630,c_limit,q_auto/f_webp" in body
    assert b'name="folder"' in body
    assert b"blog-images" in body
    assert b'name="signature"' in body
    assert b'name="api_key"' in body


@pytest.mark.asyncio
async def test_upload_uses_requested_folder(service, media_host, image_bytes):
    media_host.upload_response = {
        "public_id": "ad-media/xyz",
        "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/ad-media/xyz.webp",
    }

    asset = (await service.upload(image_bytes, folder="ad-media")).unwrap()

    assert asset.folder == "ad-media"
    assert b"ad-media" in media_host.uploads[0].content


@pytest.mark.asyncio
async def test_upload_host_error_becomes_upload_failed(service, media_host, image_bytes):
    media_host.status_code = 400
    media_host.error_message = "Invalid image file"

    result = await service.upload(image_bytes)

    assert isinstance(result.error, UploadFailedError)
    assert "Invalid image file" in result.error.message
    assert result.error.details["http_status"] == 400
    assert len(media_host.uploads) == 1


@pytest.mark.asyncio
async def test_upload_missing_credentials_surface_as_host_error(service, media_host, image_bytes):
    media_host.status_code = 401
    media_host.error_message = "Must supply api_key"

    result = await service.upload(image_bytes)

    assert isinstance(result.error, UploadFailedError)
    assert "Must supply api_key" in result.error.message


@pytest.mark.asyncio
async def test_upload_explains_size_limit_errors(service, media_host, image_bytes):
    media_host.status_code = 400
    media_host.error_message = "File size too large. Got 30000000. Maximum is 10485760."

    result = await service.upload(image_bytes)

    assert isinstance(result.error, UploadFailedError)
    assert "exceeds media host limits" in result.error.message


@pytest.mark.asyncio
async def test_upload_transport_error_becomes_upload_failed(service, media_host, image_bytes):
    media_host.raise_error = httpx.ConnectError("connection refused")

    result = await service.upload(image_bytes)

    assert isinstance(result.error, UploadFailedError)
    assert "connection refused" in result.error.message
    assert isinstance(result.error.__cause__.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_upload_without_secure_url_is_missing_url(service, media_host, image_bytes):
    media_host.upload_response = {"public_id": "blog-images/abc123"}

    result = await service.upload(image_bytes)

    assert isinstance(result.error, MissingUrlError)
    assert result.error.target_id == "blog-images/abc123"


@pytest.mark.asyncio
async def test_unwrap_raises_carried_error(service):
    result = await service.upload(b"")

    with pytest.raises(InvalidInputError):
        result.unwrap()


@pytest.mark.asyncio
async def test_delete_passes_acknowledgement_through(service, media_host):
    result = await service.delete("blog-images/abc123")

    deletion = result.unwrap()
    assert isinstance(deletion, DeletionResult)
    assert deletion.result == "ok"
    assert deletion.deleted
    form = media_host.form(media_host.destroys[0])
    assert form["public_id"] == "blog-images/abc123"
    assert "signature" in form
    assert "timestamp" in form


@pytest.mark.asyncio
async def test_delete_unknown_id_returns_host_not_found(service, media_host):
    media_host.destroy_response = {"result": "not found"}

    result = await service.delete("blog-images/does-not-exist")

    assert result.ok
    assert result.value.result == "not found"
    assert result.value.raw == {"result": "not found"}
    assert not result.value.deleted


@pytest.mark.asyncio
async def test_delete_host_error_becomes_deletion_failed(service, media_host):
    media_host.status_code = 500
    media_host.error_message = "Internal error"

    result = await service.delete("blog-images/abc123")

    assert isinstance(result.error, DeletionFailedError)
    assert result.error.target_id == "blog-images/abc123"
    assert result.error.operation == "delete"
    assert result.error.details["http_status"] == 500


@pytest.mark.asyncio
async def test_delete_by_url_extracts_public_id(service, media_host):
    result = await service.delete_by_url(SECURE_URL)

    assert result.ok
    assert media_host.form(media_host.destroys[0])["public_id"] == "blog-images/abc123"


@pytest.mark.asyncio
async def test_delete_by_url_foreign_url_is_noop(service, media_host):
    result = await service.delete_by_url("https://example.com/images/banner.png")

    assert result.ok
    assert result.value is None
    assert media_host.requests == []


@pytest.mark.asyncio
async def test_generate_placeholder_uploads_with_derived_public_id(service, media_host):
    placeholder_url = "https://res.cloudinary.com/demo/image/upload/v2/ad-defaults/default-ad-my-campaign-.png"
    media_host.upload_response = {
        "public_id": "ad-defaults/default-ad-my-campaign-",
        "secure_url": placeholder_url,
        "format": "png",
    }

    result = await service.generate_placeholder("My Campaign!")

    assert result.unwrap() == placeholder_url
    body = media_host.uploads[0].content
    assert b"default-ad-my-campaign-" in body
    assert b'name="format"' in body
    assert b"ad-defaults" in body
    assert b"\x89PNG" in body


@pytest.mark.asyncio
async def test_generate_placeholder_failure_is_upload_failed(service, media_host):
    media_host.status_code = 420
    media_host.error_message = "Rate Limit Exceeded"

    result = await service.generate_placeholder("Spring Sale")

    assert isinstance(result.error, UploadFailedError)
    assert result.error.operation == "upload"


@pytest.mark.asyncio
@pytest.mark.parametrize("title", ["", "   ", None])
async def test_generate_placeholder_requires_title(service, media_host, title):
    result = await service.generate_placeholder(title)

    assert isinstance(result.error, InvalidInputError)
    assert media_host.requests == []


@pytest.mark.asyncio
async def test_upload_malformed_host_response_is_upload_failed(service, media_host, image_bytes):
    media_host.upload_response = {
        "public_id": "blog-images/abc123",
        "secure_url": SECURE_URL,
        "width": "auto",
    }

    result = await service.upload(image_bytes)

    assert isinstance(result.error, UploadFailedError)
    assert result.error.details["folder"] == "blog-images"
    assert "malformed" in result.error.message


@pytest.mark.asyncio
async def test_upload_non_object_host_response_is_upload_failed(service, media_host, image_bytes):
    media_host.upload_response = ["unexpected"]

    result = await service.upload(image_bytes)

    assert isinstance(result.error, UploadFailedError)
    assert "Unexpected media host response" in result.error.message
    assert result.error.details["http_status"] == 200


@pytest.mark.asyncio
async def test_upload_video_skips_image_transformation(service, media_host, image_bytes):
    media_host.upload_response = {
        "public_id": "blog-images/clip",
        "secure_url": "https://res.cloudinary.com/demo/video/upload/v3/blog-images/clip.mp4",
        "resource_type": "video",
    }

    asset = (await service.upload(image_bytes, resource_type="video")).unwrap()

    assert asset.resource_type == "video"
    request = media_host.uploads[0]
    assert request.url.path == "/v1_1/demo/video/upload"
    assert b'name="transformation"' not in request.content


@pytest.mark.asyncio
async def test_upload_rejects_unknown_resource_type(service, media_host, image_bytes):
    result = await service.upload(image_bytes, resource_type="gif")

    assert isinstance(result.error, InvalidInputError)
    assert result.error.details["resource_type"] == "gif"
    assert media_host.requests == []


@pytest.mark.asyncio
async def test_delete_rejects_auto_resource_type(service, media_host):
    result = await service.delete("blog-images/abc123", resource_type="auto")

    assert isinstance(result.error, InvalidInputError)
    assert media_host.requests == []


@pytest.mark.asyncio
async def test_delete_by_url_uses_resource_type_from_url(service, media_host):
    result = await service.delete_by_url(
        "https://res.cloudinary.com/demo/video/upload/v3/ad-media/clip.mp4"
    )

    assert result.ok
    request = media_host.destroys[0]
    assert request.url.path == "/v1_1/demo/video/destroy"
    assert media_host.form(request)["public_id"] == "ad-media/clip"
