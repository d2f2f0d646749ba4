import base64
import io
import logging
from unittest.mock import patch

import pytest

from imagehost.core.infrastructure.filesystem.local_content_store import LocalContentStore
from imagehost.core.models.upload import UploadItem
from imagehost.core.utils.config import UploadSettings
from imagehost.handlers.upload_image import service as upload_service_module
from imagehost.handlers.upload_image.service import UploadService


def item(content: bytes, *, filename: str = "photo.png", mime_type: str = "image/png", declared: int | None = None) -> UploadItem:
    return UploadItem(
        filename=filename,
        mime_type=mime_type,
        stream=io.BytesIO(content),
        declared_size=len(content) if declared is None else declared,
    )


@pytest.fixture
def service(upload_settings, metadata_repo, users_repo, content_store) -> UploadService:
    return UploadService(
        settings=upload_settings,
        metadata=metadata_repo,
        users=users_repo,
        content_store=content_store,
    )


class TestUpload:
    def test_created_image_records_dimensions(self, service, metadata_repo, sample_png_bytes) -> None:
        result = service.upload_batch(user_id="alice", items=[item(sample_png_bytes)])

        assert len(result.created) == 1
        view = result.created[0]
        assert (view.width, view.height) == (4, 3)
        assert view.file_size == len(sample_png_bytes)
        assert view.is_public is True

        stored = metadata_repo.fetch_asset(image_id=view.image_id)
        assert stored is not None
        assert stored.user_id == "alice"
        assert view.image_id not in stored.storage_path

    def test_unreadable_image_still_stored_without_dimensions(self, service) -> None:
        result = service.upload_batch(user_id="alice", items=[item(b"not really a png")])

        assert (result.created[0].width, result.created[0].height) == (0, 0)

    def test_mime_type_parameters_are_ignored(self, service, sample_png_bytes) -> None:
        result = service.upload_batch(
            user_id="alice",
            items=[item(sample_png_bytes, mime_type="Image/PNG; charset=binary")],
        )

        assert result.created[0].mime_type == "image/png"

    def test_batch_summary_log_fields(self, service, sample_png_bytes) -> None:
        reserved = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

        with patch.object(upload_service_module.logger, "info") as log_info:
            service.upload_batch(user_id="alice", items=[item(sample_png_bytes), item(b"")])

        (summary,) = [c for c in log_info.call_args_list if c.args[0] == "Upload batch processed"]
        extra = summary.kwargs["extra"]
        assert extra == {"user_id": "alice", "created_count": 1, "deduped_count": 0, "failed_count": 1}
        assert not reserved & set(extra)


class TestDeduplication:
    def test_same_bytes_same_owner_returns_existing(
        self, service, metadata_repo, stored_files, sample_png_bytes
    ) -> None:
        first = service.upload_batch(user_id="alice", items=[item(sample_png_bytes)])
        used_after_first, _ = metadata_repo.sum_user_file_sizes(user_id="alice")

        second = service.upload_batch(
            user_id="alice",
            items=[item(sample_png_bytes, filename="renamed.png")],
        )

        assert second.created == []
        assert second.deduped[0].image_id == first.created[0].image_id
        assert len(stored_files()) == 1
        assert metadata_repo.sum_user_file_sizes(user_id="alice")[0] == used_after_first

    def test_duplicate_within_one_batch(self, service, stored_files, sample_png_bytes) -> None:
        result = service.upload_batch(
            user_id="alice",
            items=[item(sample_png_bytes), item(sample_png_bytes)],
        )

        assert len(result.created) == 1
        assert len(result.deduped) == 1
        assert len(stored_files()) == 1

    def test_owners_do_not_share_content(self, service, metadata_repo, stored_files, sample_png_bytes) -> None:
        alice = service.upload_batch(user_id="alice", items=[item(sample_png_bytes)])
        bob = service.upload_batch(user_id="bob", items=[item(sample_png_bytes)])

        assert len(bob.created) == 1
        assert bob.created[0].image_id != alice.created[0].image_id
        assert len(stored_files()) == 2
        assert metadata_repo.sum_user_file_sizes(user_id="bob") == (len(sample_png_bytes), 1)

    def test_deleted_image_does_not_dedupe(self, service, metadata_repo, sample_png_bytes) -> None:
        first = service.upload_batch(user_id="alice", items=[item(sample_png_bytes)])
        metadata_repo.tombstone_asset(image_id=first.created[0].image_id, deleted_at="2024-02-01T00:00:00+00:00")

        again = service.upload_batch(user_id="alice", items=[item(sample_png_bytes)])

        assert len(again.created) == 1
        assert again.created[0].image_id != first.created[0].image_id


class TestQuota:
    def test_upload_that_exactly_fills_quota_is_accepted(self, service, put_user, make_asset) -> None:
        put_user("alice", storage_quota=1000)
        make_asset(content=b"x" * 900)

        result = service.upload_batch(user_id="alice", items=[item(b"y" * 100)])

        assert len(result.created) == 1

    def test_upload_over_quota_is_rejected_with_numbers(
        self, service, put_user, make_asset, stored_files
    ) -> None:
        put_user("alice", storage_quota=1000)
        make_asset(content=b"x" * 900)
        blobs_before = len(stored_files())

        result = service.upload_batch(user_id="alice", items=[item(b"y" * 101)])

        assert result.created == []
        failure = result.errors[0]
        assert failure.error == "QUOTA_EXCEEDED"
        assert failure.details == {"used": 900, "quota": 1000, "remaining": 100, "attempted": 101}
        assert len(stored_files()) == blobs_before

    def test_unlimited_quota(self, service, put_user, make_asset) -> None:
        put_user("alice", storage_quota=0)
        make_asset(content=b"x" * 5000)

        result = service.upload_batch(user_id="alice", items=[item(b"y" * 4000)])

        assert len(result.created) == 1

    def test_dedup_hit_ignores_full_quota(self, service, put_user, sample_png_bytes) -> None:
        put_user("alice", storage_quota=len(sample_png_bytes))
        service.upload_batch(user_id="alice", items=[item(sample_png_bytes)])

        again = service.upload_batch(user_id="alice", items=[item(sample_png_bytes)])

        assert len(again.deduped) == 1
        assert again.errors == []


class TestValidation:
    def test_partial_batch(self, storage_root, metadata_repo, users_repo, content_store, sample_png_bytes, sample_jpeg_bytes) -> None:
        limit = max(len(sample_png_bytes), len(sample_jpeg_bytes)) + 10
        service = UploadService(
            settings=UploadSettings(storage_root=storage_root, max_upload_size=limit),
            metadata=metadata_repo,
            users=users_repo,
            content_store=content_store,
        )

        result = service.upload_batch(
            user_id="alice",
            items=[
                item(sample_png_bytes),
                item(b"z" * (limit + 1), filename="huge.png"),
                item(sample_jpeg_bytes, filename="photo.jpg", mime_type="image/jpeg"),
            ],
        )

        assert [v.original_name for v in result.created] == ["photo.png", "photo.jpg"]
        assert [(f.filename, f.error) for f in result.errors] == [("huge.png", "FILE_SIZE_EXCEEDED")]

    def test_stream_longer_than_limit_is_rejected(self, storage_root, metadata_repo, users_repo, content_store, stored_files) -> None:
        service = UploadService(
            settings=UploadSettings(storage_root=storage_root, max_upload_size=100),
            metadata=metadata_repo,
            users=users_repo,
            content_store=content_store,
        )

        result = service.upload_batch(user_id="alice", items=[item(b"z" * 500, declared=10)])

        assert result.errors[0].error == "FILE_SIZE_EXCEEDED"
        assert stored_files() == []

    @pytest.mark.parametrize(
        "upload,code",
        [
            (item(b""), "EMPTY_FILE"),
            (item(b"12345", declared=6), "SIZE_MISMATCH"),
            (item(b"BM....", filename="x.bmp", mime_type="image/bmp"), "UNSUPPORTED_MIME_TYPE"),
            (item(b"12345", filename="   "), "INVALID_FILENAME"),
            (item(b"12345", filename="n" * 256), "INVALID_FILENAME"),
            (UploadItem(filename="x.png", mime_type="image/png", encoded="not base64!"), "INVALID_FILE_ENCODING"),
        ],
    )
    def test_rejected_items(self, service, stored_files, upload, code) -> None:
        result = service.upload_batch(user_id="alice", items=[upload])

        assert result.errors[0].error == code
        assert stored_files() == []

    def test_encoded_content_without_declared_size(self, service, sample_png_bytes) -> None:
        encoded = base64.b64encode(sample_png_bytes).decode("ascii")
        upload = UploadItem(filename="cat.png", mime_type="image/png", encoded=encoded)

        result = service.upload_batch(user_id="alice", items=[upload])

        assert result.created[0].file_size == len(sample_png_bytes)


class TestFailures:
    def test_metadata_failure_removes_blob(self, service, metadata_repo, stored_files, sample_png_bytes) -> None:
        with patch.object(service.metadata, "create_asset", side_effect=RuntimeError("table unavailable")):
            result = service.upload_batch(user_id="alice", items=[item(sample_png_bytes)])

        assert result.errors[0].error == "METADATA_CREATE_FAILED"
        assert stored_files() == []
        assert metadata_repo.list_user_assets(user_id="alice") == []

    def test_unusable_storage_root(self, tmp_path, metadata_repo, users_repo, sample_png_bytes) -> None:
        occupied = tmp_path / "occupied"
        occupied.write_text("not a directory")
        service = UploadService(
            settings=UploadSettings(storage_root=occupied),
            metadata=metadata_repo,
            users=users_repo,
            content_store=LocalContentStore(occupied),
        )

        result = service.upload_batch(
            user_id="alice",
            items=[item(sample_png_bytes), item(b"second image")],
        )

        assert [f.error for f in result.errors] == ["STORAGE_WRITE_FAILED", "STORAGE_WRITE_FAILED"]
        assert metadata_repo.list_user_assets(user_id="alice") == []


class TestIndexLag:
    """The owner's GSIs may not list items written a moment ago."""

    def test_quota_counts_items_committed_earlier_in_batch(
        self, service, metadata_repo, put_user, stored_files
    ) -> None:
        put_user("alice", storage_quota=150)

        with patch.object(metadata_repo, "user_file_sizes", return_value={}):
            result = service.upload_batch(
                user_id="alice",
                items=[item(b"a" * 100, filename="a.png"), item(b"b" * 100, filename="b.png")],
            )

        assert [v.original_name for v in result.created] == ["a.png"]
        assert result.errors[0].error == "QUOTA_EXCEEDED"
        assert result.errors[0].details["used"] == 100
        assert len(stored_files()) == 1

    def test_duplicate_in_batch_found_before_index_catches_up(
        self, service, metadata_repo, stored_files, sample_png_bytes
    ) -> None:
        with patch.object(metadata_repo, "find_by_hash", return_value=None):
            result = service.upload_batch(
                user_id="alice",
                items=[item(sample_png_bytes), item(sample_png_bytes, filename="again.png")],
            )

        assert len(result.created) == 1
        assert result.deduped[0].image_id == result.created[0].image_id
        assert len(stored_files()) == 1

    def test_index_and_batch_are_not_double_counted(
        self, service, put_user, make_asset
    ) -> None:
        put_user("alice", storage_quota=300)
        make_asset(content=b"x" * 100)

        result = service.upload_batch(
            user_id="alice",
            items=[item(b"a" * 100, filename="a.png"), item(b"b" * 100, filename="b.png")],
        )

        assert len(result.created) == 2
        assert result.errors == []
