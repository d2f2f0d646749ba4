"""Tests for the DynamoDB metadata repository."""

from collections.abc import Callable
from typing import Any

import pytest
from botocore.exceptions import ClientError

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from imagehost.core.models.errors import (
    DynamoDBError,
    MetadataOperationFailedError,
    NotFoundError,
)
from imagehost.core.models.image import Asset


class DummyAdapter:
    """Minimal DynamoDBAdapter stub."""

    put_item: Callable[..., Any]
    get_item: Callable[..., dict[str, Any]]
    update_item: Callable[..., dict[str, Any]]
    query: Callable[..., dict[str, Any]]
    scan: Callable[..., dict[str, Any]]

    def __init__(self) -> None:
        self.put_item = lambda **_: None
        self.get_item = lambda **_: {}
        self.update_item = lambda **_: {}
        self.query = lambda **_: {"Items": []}
        self.scan = lambda **_: {"Items": []}

    def batch_get_items(self, **_: Any) -> list[dict[str, Any]]:
        return []


def client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code}}, operation)


def raising(exc: Exception) -> Callable[..., Any]:
    def _raise(**_: Any) -> Any:
        raise exc

    return _raise


def build_asset(**overrides: Any) -> Asset:
    fields: dict[str, Any] = {
        "image_id": "6f1c9a4e-8a55-4a3f-9a4e-2d7b1c0e5f11",
        "user_id": "alice",
        "file_hash": "abc",
        "storage_path": "2024/01/01/x.png",
        "original_name": "x.png",
        "file_size": 10,
        "mime_type": "image/png",
        "created_at": "2024-01-01T00:00:00+00:00",
    }
    fields.update(overrides)
    return Asset(**fields)


class TestDynamoDBMetadataErrors:
    def test_create_asset_duplicate_id_raises_metadata_error(self) -> None:
        adapter = DummyAdapter()
        adapter.put_item = raising(client_error("ConditionalCheckFailedException", "PutItem"))

        with pytest.raises(MetadataOperationFailedError, match="already in use"):
            DynamoDBMetadata(adapter).create_asset(asset=build_asset())

    def test_create_asset_client_error_is_translated(self) -> None:
        adapter = DummyAdapter()
        adapter.put_item = raising(client_error("ProvisionedThroughputExceededException"))

        with pytest.raises(DynamoDBError):
            DynamoDBMetadata(adapter).create_asset(asset=build_asset())

    def test_create_asset_omits_unset_attributes(self) -> None:
        captured: dict[str, Any] = {}
        adapter = DummyAdapter()
        adapter.put_item = lambda **kw: captured.update(kw)

        DynamoDBMetadata(adapter).create_asset(asset=build_asset())

        assert "deleted_at" not in captured["item"]
        assert "description" not in captured["item"]
        assert captured["condition_expression"] == "attribute_not_exists(image_id)"

    def test_fetch_asset_not_found(self) -> None:
        assert DynamoDBMetadata(DummyAdapter()).fetch_asset(image_id="missing") is None

    def test_fetch_asset_unexpected_exception(self) -> None:
        adapter = DummyAdapter()
        adapter.get_item = raising(RuntimeError("boom"))

        with pytest.raises(DynamoDBError):
            DynamoDBMetadata(adapter).fetch_asset(image_id="x")

    def test_update_condition_failure_maps_to_not_found(self) -> None:
        adapter = DummyAdapter()
        adapter.update_item = raising(client_error("ConditionalCheckFailedException", "UpdateItem"))

        with pytest.raises(NotFoundError):
            DynamoDBMetadata(adapter).update_asset(
                image_id="x", changes={"description": "d"}, updated_at="now"
            )

    def test_update_builds_set_and_remove_clauses(self) -> None:
        captured: dict[str, Any] = {}
        adapter = DummyAdapter()

        def update_item(**kw: Any) -> dict[str, Any]:
            captured.update(kw)
            return {"Attributes": build_asset().to_item()}

        adapter.update_item = update_item

        DynamoDBMetadata(adapter).update_asset(
            image_id="x",
            changes={"description": None, "is_public": False},
            updated_at="2024-02-01T00:00:00+00:00",
        )

        expression = captured["UpdateExpression"]
        assert expression.startswith("SET #updated_at = :updated_at")
        assert " REMOVE " in expression
        assert captured["ConditionExpression"] == (
            "attribute_exists(image_id) AND attribute_not_exists(deleted_at)"
        )
        assert False in captured["ExpressionAttributeValues"].values()

    def test_find_by_hash_query_error_fails_closed(self) -> None:
        adapter = DummyAdapter()
        adapter.query = raising(client_error("InternalServerError", "Query"))

        with pytest.raises(DynamoDBError):
            DynamoDBMetadata(adapter).find_by_hash(user_id="alice", file_hash="abc")

    def test_query_follows_pagination(self) -> None:
        pages = iter(
            [
                {"Items": [build_asset(image_id="a").to_item()], "LastEvaluatedKey": {"k": 1}},
                {"Items": [build_asset(image_id="b").to_item()]},
            ]
        )
        adapter = DummyAdapter()
        adapter.query = lambda **_: next(pages)

        assets = DynamoDBMetadata(adapter).list_user_assets(user_id="alice")

        assert [a.image_id for a in assets] == ["a", "b"]


class TestDynamoDBMetadataIntegration:
    def test_create_and_fetch_round_trip(self, metadata_repo) -> None:
        asset = build_asset(tags=["cat"], width=4, height=3)
        metadata_repo.create_asset(asset=asset)

        fetched = metadata_repo.fetch_asset(image_id=asset.image_id)

        assert fetched.model_dump() == asset.model_dump()
        assert isinstance(fetched.file_size, int)

    def test_tombstone_hides_asset_from_owner_queries(self, metadata_repo) -> None:
        asset = build_asset()
        metadata_repo.create_asset(asset=asset)

        metadata_repo.tombstone_asset(image_id=asset.image_id, deleted_at="2024-02-01T00:00:00+00:00")

        assert metadata_repo.fetch_asset(image_id=asset.image_id).is_tombstoned
        assert metadata_repo.find_by_hash(user_id="alice", file_hash="abc") is None
        assert metadata_repo.list_user_assets(user_id="alice") == []
        assert metadata_repo.sum_user_file_sizes(user_id="alice") == (0, 0)

    def test_tombstone_twice_raises_not_found(self, metadata_repo) -> None:
        asset = build_asset()
        metadata_repo.create_asset(asset=asset)
        metadata_repo.tombstone_asset(image_id=asset.image_id, deleted_at="t1")

        with pytest.raises(NotFoundError):
            metadata_repo.tombstone_asset(image_id=asset.image_id, deleted_at="t2")

    def test_update_missing_asset_raises_not_found(self, metadata_repo) -> None:
        with pytest.raises(NotFoundError):
            metadata_repo.update_asset(
                image_id="6f1c9a4e-0000-4a3f-9a4e-2d7b1c0e5f11",
                changes={"description": "x"},
                updated_at="now",
            )

    def test_sum_user_file_sizes_is_scoped_to_owner(self, metadata_repo) -> None:
        metadata_repo.create_asset(asset=build_asset(image_id="a", file_size=100))
        metadata_repo.create_asset(asset=build_asset(image_id="b", file_size=250, file_hash="def"))
        metadata_repo.create_asset(asset=build_asset(image_id="c", user_id="bob", file_size=999))

        assert metadata_repo.sum_user_file_sizes(user_id="alice") == (350, 2)
        assert metadata_repo.sum_user_file_sizes(user_id="bob") == (999, 1)
        assert metadata_repo.user_file_sizes(user_id="alice") == {"a": 100, "b": 250}

    def test_list_public_assets_skips_private_and_deleted(self, metadata_repo) -> None:
        metadata_repo.create_asset(asset=build_asset(image_id="pub-a"))
        metadata_repo.create_asset(asset=build_asset(image_id="pub-b", user_id="bob"))
        metadata_repo.create_asset(asset=build_asset(image_id="private", is_public=False))
        metadata_repo.create_asset(asset=build_asset(image_id="gone"))
        metadata_repo.tombstone_asset(image_id="gone", deleted_at="2024-02-01T00:00:00+00:00")

        everyone = metadata_repo.list_public_assets()
        bob_only = metadata_repo.list_public_assets(user_id="bob")

        assert sorted(a.image_id for a in everyone) == ["pub-a", "pub-b"]
        assert [a.image_id for a in bob_only] == ["pub-b"]

    def test_list_public_assets_follows_scan_pages(self) -> None:
        adapter = DummyAdapter()
        pages = iter(
            [
                {"Items": [build_asset(image_id="one").to_item()], "LastEvaluatedKey": {"image_id": "one"}},
                {"Items": [build_asset(image_id="two").to_item()]},
            ]
        )
        adapter.scan = lambda **_: next(pages)

        assets = DynamoDBMetadata(adapter).list_public_assets()

        assert [a.image_id for a in assets] == ["one", "two"]
