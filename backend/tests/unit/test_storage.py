"""
Unit tests for the storage backends.
"""
import io
import re
import uuid

import httpx
import pytest

from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import StorageError
from vidlinkgen.services.storage import (
    LocalStorageService,
    SupabaseStorageService,
    build_object_key,
)


class TestObjectKeys:
    def test_key_layout(self):
        owner = uuid.uuid4()
        key = build_object_key(owner, "holiday.mp4")

        assert re.fullmatch(rf"{owner}/\d{{13}}-holiday\.mp4", key)

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("../../etc/passwd", "passwd"),
            ("C:/Users/me/My Clip (final).mp4", "My_Clip_final_.mp4"),
            ("", "video"),
            ("...", "video"),
        ],
    )
    def test_filename_sanitized(self, filename, expected):
        key = build_object_key(uuid.uuid4(), filename)
        assert key.rsplit("/", 1)[1].split("-", 1)[1] == expected
        assert key.count("/") == 1


class TestLocalStorage:
    @pytest.fixture
    def local(self, tmp_path):
        return LocalStorageService(base_path=str(tmp_path), bucket="videos", public_base_url="https://vid.test/")

    def test_put_reports_progress(self, local, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "storage_chunk_size", 256)
        progress = []

        key = local.put_object("owner/1-clip.mp4", io.BytesIO(b"x" * 1024), on_progress=progress.append)

        assert key == "owner/1-clip.mp4"
        assert (tmp_path / "videos" / "owner" / "1-clip.mp4").read_bytes() == b"x" * 1024
        assert progress == [25, 50, 75, 100, 100]
        assert local.object_exists(key)

    def test_public_url(self, local):
        assert local.get_public_url("owner/1-my clip.mp4") == "https://vid.test/media/videos/owner/1-my%20clip.mp4"

    def test_delete(self, local):
        local.put_object("owner/1-clip.mp4", io.BytesIO(b"data"))

        assert local.delete_object("owner/1-clip.mp4") is True
        assert local.delete_object("owner/1-clip.mp4") is False
        assert not local.object_exists("owner/1-clip.mp4")

    @pytest.mark.parametrize("key", ["../escape.mp4", "owner/../../escape.mp4"])
    def test_keys_cannot_escape_bucket(self, local, key):
        with pytest.raises(StorageError):
            local.put_object(key, io.BytesIO(b"data"))


class TestSupabaseStorage:
    def _service(self, handler):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return SupabaseStorageService(
            base_url="https://proj.supabase.test",
            service_key="service-key",
            bucket="videos",
            http_client=client,
        )

    def test_put_object(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["upsert"] = request.headers["x-upsert"]
            seen["auth"] = request.headers["authorization"]
            seen["body"] = request.read()
            return httpx.Response(200, json={"Key": "videos/owner/1-clip.mp4"})

        progress = []
        key = self._service(handler).put_object(
            "owner/1-clip.mp4", io.BytesIO(b"payload"), on_progress=progress.append
        )

        assert key == "owner/1-clip.mp4"
        assert seen == {
            "method": "POST",
            "url": "https://proj.supabase.test/storage/v1/object/videos/owner/1-clip.mp4",
            "upsert": "false",
            "auth": "Bearer service-key",
            "body": b"payload",
        }
        assert progress[-1] == 100

    def test_put_object_failure(self):
        service = self._service(lambda request: httpx.Response(409, text="Duplicate"))

        with pytest.raises(StorageError, match="Duplicate"):
            service.put_object("owner/1-clip.mp4", io.BytesIO(b"payload"))

    def test_network_error_becomes_storage_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StorageError):
            self._service(handler).put_object("owner/1-clip.mp4", io.BytesIO(b"payload"))

    def test_public_url(self):
        service = self._service(lambda request: httpx.Response(200))
        assert (
            service.get_public_url("owner/1-clip.mp4")
            == "https://proj.supabase.test/storage/v1/object/public/videos/owner/1-clip.mp4"
        )

    @pytest.mark.parametrize("status_code,expected", [(200, True), (404, False), (400, False)])
    def test_delete(self, status_code, expected):
        service = self._service(lambda request: httpx.Response(status_code))
        assert service.delete_object("owner/1-clip.mp4") is expected

    def test_delete_server_error(self):
        service = self._service(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(StorageError):
            service.delete_object("owner/1-clip.mp4")

    def test_object_exists(self):
        def handler(request):
            assert request.method == "HEAD"
            return httpx.Response(200 if request.url.path.endswith("here.mp4") else 404)

        service = self._service(handler)
        assert service.object_exists("owner/here.mp4") is True
        assert service.object_exists("owner/gone.mp4") is False

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            SupabaseStorageService(base_url="", service_key="k", bucket="videos")
