import hashlib
import io
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException, UploadFile
from sqlalchemy.exc import OperationalError
from starlette.datastructures import Headers

from core.config import settings
from core.exceptions import BackendError, NotFoundError, ValidationFailedError
from services.storage_service import StorageService

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def upload_file(content=PNG, filename="cover.png", content_type="image/png"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestStorageService:
    @pytest.mark.anyio
    async def test_upload_and_read(self, db, storage_dir):
        service = StorageService(db)
        asset = await service.upload("cause_images", upload_file(), owner="admin")

        assert asset.full_path.startswith("/cause_images/")
        assert asset.full_path.endswith(".png")
        assert asset.download_url == f"/api/v1/files{asset.full_path}"
        assert asset.sha256 == hashlib.sha256(PNG).hexdigest()
        assert asset.size == len(PNG)
        assert (storage_dir / "cause_images" / asset.stored_filename).read_bytes() == PNG

        fetched, content = await service.read_asset("cause_images", asset.stored_filename)
        assert fetched.id == asset.id
        assert content == PNG

    @pytest.mark.anyio
    async def test_failed_commit_removes_written_file(self, db, storage_dir):
        service = StorageService(db)
        failure = OperationalError("INSERT INTO assets", {}, Exception("database is locked"))

        with patch.object(db, "commit", AsyncMock(side_effect=failure)):
            with pytest.raises(BackendError):
                await service.upload("cause_images", upload_file(), owner="admin")

        assert list((storage_dir / "cause_images").iterdir()) == []
        assert await service.count_assets() == 0

    @pytest.mark.anyio
    async def test_unknown_collection(self, db):
        with pytest.raises(NotFoundError):
            await StorageService(db).upload("secrets", upload_file())

    @pytest.mark.anyio
    async def test_type_not_allowed(self, db):
        with pytest.raises(HTTPException) as exc_info:
            await StorageService(db).upload(
                "waqf_documents", upload_file(b"MZ", "tool.exe", "application/x-msdownload")
            )
        assert exc_info.value.status_code == 415

    @pytest.mark.anyio
    async def test_too_large(self, db, monkeypatch):
        monkeypatch.setattr(settings, "MAX_FILE_SIZE", 8)
        with pytest.raises(HTTPException) as exc_info:
            await StorageService(db).upload("cause_images", upload_file())
        assert exc_info.value.status_code == 413

    @pytest.mark.anyio
    async def test_empty_file(self, db):
        with pytest.raises(ValidationFailedError):
            await StorageService(db).upload("cause_images", upload_file(b""))

    @pytest.mark.anyio
    async def test_list_count_delete(self, db, storage_dir):
        service = StorageService(db)
        first = await service.upload("cause_images", upload_file())
        await service.upload("waqf_documents", upload_file(b"deed", "deed.txt", "text/plain"))

        assert await service.count_assets() == 2
        assert [a.id for a in await service.list_assets("cause_images")] == [first.id]

        await service.delete_asset("cause_images", first.stored_filename)
        assert not (storage_dir / "cause_images" / first.stored_filename).exists()
        with pytest.raises(NotFoundError):
            await service.get_asset("cause_images", first.stored_filename)
