"""Tests for the Cloudinary storage wrapper."""

from unittest.mock import AsyncMock, patch

import pytest
from cloudinary.exceptions import Error as CloudinaryError

from portfolio_site.services import cloudinary_service
from portfolio_site.services.cloudinary_service import (
    delete_media_by_url,
    extract_public_id_from_url,
    upload_media,
)


class TestExtractPublicId:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://res.cloudinary.com/demo/image/upload/v1712/portfolio/dawn.webp", ("portfolio/dawn", "image")),
            ("https://res.cloudinary.com/demo/image/upload/portfolio/dawn.webp", ("portfolio/dawn", "image")),
            ("https://res.cloudinary.com/demo/video/upload/v17/portfolio/reel.mp4", ("portfolio/reel", "video")),
            ("https://res.cloudinary.com/demo/image/upload/v1/portfolio/2024/murals/wall.v2.jpg",
             ("portfolio/2024/murals/wall.v2", "image")),
            ("https://res.cloudinary.com/demo/image/upload/v1/cover", ("cover", "image")),
        ],
    )
    def test_delivery_urls(self, url, expected):
        assert extract_public_id_from_url(url) == expected

    def test_foreign_url_is_rejected(self):
        with pytest.raises(ValueError):
            extract_public_id_from_url("https://cdn.example.com/images/dawn.webp")


class TestUpload:
    @pytest.mark.asyncio
    async def test_image_upload_returns_secure_url(self):
        uploaded = {"secure_url": "https://res.cloudinary.com/x.webp", "public_id": "portfolio/x", "format": "webp"}
        with patch.object(cloudinary_service.cloudinary.uploader, "upload", return_value=uploaded) as upload:
            result = await upload_media(b"bytes")

        assert result["url"] == "https://res.cloudinary.com/x.webp"
        assert result["resource_type"] == "image"
        options = upload.call_args.kwargs
        assert options["resource_type"] == "image"
        assert options["folder"] == "portfolio"
        assert options["quality"] == "auto"

    @pytest.mark.asyncio
    async def test_video_upload_has_no_image_transformations(self):
        uploaded = {"secure_url": "u", "public_id": "p", "resource_type": "video"}
        with patch.object(cloudinary_service.cloudinary.uploader, "upload", return_value=uploaded) as upload:
            await upload_media(b"bytes", media_type="video", folder="reels")

        options = upload.call_args.kwargs
        assert options["resource_type"] == "video"
        assert options["folder"] == "reels"
        assert "transformation" not in options

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self):
        uploaded = {"secure_url": "u", "public_id": "p"}
        with patch.object(
            cloudinary_service.cloudinary.uploader, "upload", side_effect=[CloudinaryError("timeout"), uploaded]
        ) as upload, patch("portfolio_site.services.cloudinary_service.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await upload_media(b"bytes")

        assert result["url"] == "u"
        assert upload.call_count == 2
        sleep.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        with patch.object(
            cloudinary_service.cloudinary.uploader, "upload", side_effect=CloudinaryError("down")
        ) as upload, patch("portfolio_site.services.cloudinary_service.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(CloudinaryError):
                await upload_media(b"bytes", max_retries=3)

        assert upload.call_count == 3

    @pytest.mark.asyncio
    async def test_unknown_media_type(self):
        with pytest.raises(ValueError):
            await upload_media(b"bytes", media_type="audio")


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_by_url_uses_resource_type(self):
        with patch.object(
            cloudinary_service.cloudinary.uploader, "destroy", return_value={"result": "ok"}
        ) as destroy:
            result = await delete_media_by_url("https://res.cloudinary.com/demo/video/upload/v3/portfolio/reel.mp4")

        assert result == {"result": "ok"}
        assert destroy.call_args.args == ("portfolio/reel",)
        assert destroy.call_args.kwargs["resource_type"] == "video"

    @pytest.mark.asyncio
    async def test_foreign_url_is_skipped(self):
        with patch.object(cloudinary_service.cloudinary.uploader, "destroy") as destroy:
            result = await delete_media_by_url("https://cdn.example.com/dawn.webp")

        assert result is None
        destroy.assert_not_called()
