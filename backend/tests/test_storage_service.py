"""
Tests para el almacenamiento local por buckets.
"""
import os
import re

import pytest
from contable.core.config import get_bucket_path
from contable.services.storage_service import (
    StorageBuckets,
    StorageError,
    upload_file,
    delete_file,
    get_file_url,
    list_user_files,
    verify_buckets
)

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 16


class TestStorage:

    def test_verify_buckets(self):
        result = verify_buckets()

        assert result["success"] is True
        assert set(result["buckets"]) == set(StorageBuckets.ALL)

    def test_upload_default_path(self):
        result = upload_file(PNG, StorageBuckets.LOGOS, 7, "logo.PNG", "image/png")

        # <user_id>/<timestamp>_<uuid>.<ext>
        assert re.fullmatch(r"7/\d+_[0-9a-f]{8}\.png", result.path)
        assert result.url == f"/storage/logos/{result.path}"
        assert os.path.isfile(os.path.join(get_bucket_path(StorageBuckets.LOGOS), result.path))

    def test_upload_custom_path_and_list(self):
        upload_file(b"%PDF-1.4", StorageBuckets.RECEIPTS, 8, content_type="application/pdf",
                    custom_path="8/recibo.pdf")

        assert list_user_files(StorageBuckets.RECEIPTS, 8) == ["recibo.pdf"]
        assert list_user_files(StorageBuckets.RECEIPTS, 999) == []

    def test_rejects_content_type(self):
        with pytest.raises(StorageError):
            upload_file(b"%PDF-1.4", StorageBuckets.LOGOS, 7, "logo.pdf", "application/pdf")

    def test_rejects_large_file(self):
        # Logos: máximo 2MB
        content = b"0" * (2 * 1024 * 1024 + 1)
        with pytest.raises(StorageError):
            upload_file(content, StorageBuckets.LOGOS, 7, "logo.png", "image/png")

    def test_rejects_path_traversal(self):
        with pytest.raises(StorageError):
            upload_file(PNG, StorageBuckets.LOGOS, 7, content_type="image/png",
                        custom_path="../../fuera.png")

    def test_unknown_bucket(self):
        with pytest.raises(StorageError):
            upload_file(PNG, "backups", 7, "a.png", "image/png")

    def test_delete(self):
        result = upload_file(PNG, StorageBuckets.PROFILES, 9, "foto.png", "image/png")

        assert delete_file(StorageBuckets.PROFILES, result.path)
        assert not delete_file(StorageBuckets.PROFILES, result.path)
        assert not delete_file(StorageBuckets.PROFILES, None)

    def test_file_url(self):
        assert get_file_url(StorageBuckets.RECEIPTS, "1/a.pdf") == "/storage/receipts/1/a.pdf"
        assert get_file_url(StorageBuckets.RECEIPTS, None) is None
