"""
Pytest configuration and fixtures for image hosting tests.
Provides AWS mocking, DynamoDB tables, a temporary content store and
sample image bytes.
"""

import io
import os
import uuid
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import boto3
import pytest
from moto import mock_aws
from PIL import Image

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("IMAGE_METADATA_TABLE_NAME", "test-image-metadata")
os.environ.setdefault("IMAGE_STATS_TABLE_NAME", "test-image-stats")
os.environ.setdefault("USER_PROFILE_TABLE_NAME", "test-user-profiles")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "ImageHostTests")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.pop("AWS_ENDPOINT_URL", None)

from imagehost.core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata  # noqa: E402
from imagehost.core.infrastructure.aws.dynamodb_stats import DynamoDBAssetStats  # noqa: E402
from imagehost.core.infrastructure.aws.dynamodb_users import DynamoDBUsers  # noqa: E402
from imagehost.core.infrastructure.filesystem.local_content_store import (  # noqa: E402
    LocalContentStore,
)
from imagehost.core.models.image import Asset  # noqa: E402
from imagehost.core.utils.config import UploadSettings  # noqa: E402


def _create_tables(dynamodb_resource) -> None:
    dynamodb_resource.create_table(
        TableName=os.environ["IMAGE_METADATA_TABLE_NAME"],
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "image_id", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "image_id", "AttributeType": "S"},
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "created_at", "AttributeType": "S"},
            {"AttributeName": "file_hash", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "user-created-index",
                "KeySchema": [
                    {"AttributeName": "user_id", "KeyType": "HASH"},
                    {"AttributeName": "created_at", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
            {
                "IndexName": "user-filehash-index",
                "KeySchema": [
                    {"AttributeName": "user_id", "KeyType": "HASH"},
                    {"AttributeName": "file_hash", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
    )

    dynamodb_resource.create_table(
        TableName=os.environ["IMAGE_STATS_TABLE_NAME"],
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "image_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "image_id", "AttributeType": "S"}],
    )

    dynamodb_resource.create_table(
        TableName=os.environ["USER_PROFILE_TABLE_NAME"],
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "user_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "user_id", "AttributeType": "S"}],
    )


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def dynamodb_resource(aws_mock):
    return boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def dynamodb_tables(dynamodb_resource):
    """Create the metadata, stats and user tables inside the moto mock."""
    _create_tables(dynamodb_resource)
    return SimpleNamespace(
        images=dynamodb_resource.Table(os.environ["IMAGE_METADATA_TABLE_NAME"]),
        stats=dynamodb_resource.Table(os.environ["IMAGE_STATS_TABLE_NAME"]),
        users=dynamodb_resource.Table(os.environ["USER_PROFILE_TABLE_NAME"]),
    )


@pytest.fixture
def metadata_repo(dynamodb_tables) -> DynamoDBMetadata:
    return DynamoDBMetadata()


@pytest.fixture
def stats_repo(dynamodb_tables) -> DynamoDBAssetStats:
    return DynamoDBAssetStats()


@pytest.fixture
def users_repo(dynamodb_tables) -> DynamoDBUsers:
    return DynamoDBUsers()


@pytest.fixture
def storage_root(tmp_path, monkeypatch):
    """Content store root, also exported for services built from the environment."""
    root = tmp_path / "blobs"
    monkeypatch.setenv("IMAGE_STORAGE_ROOT", str(root))
    return root


@pytest.fixture
def content_store(storage_root) -> LocalContentStore:
    return LocalContentStore(storage_root)


@pytest.fixture
def upload_settings(storage_root) -> UploadSettings:
    return UploadSettings(storage_root=storage_root)


@pytest.fixture
def put_user(dynamodb_tables) -> Callable[..., dict[str, Any]]:
    """
    Helper to insert a user profile.

    Usage:
        put_user("alice", storage_quota=1000)
    """

    def _put(user_id: str, **fields: Any) -> dict[str, Any]:
        item = {"user_id": user_id, **fields}
        dynamodb_tables.users.put_item(Item=item)
        return item

    return _put


@pytest.fixture
def make_asset(metadata_repo, content_store) -> Callable[..., Asset]:
    """
    Helper to store a blob and its metadata record directly.

    Usage:
        asset = make_asset(user_id="alice", content=b"...", is_public=False)
    """
    counter = iter(range(1, 10_000))

    def _make(
        *,
        user_id: str = "alice",
        content: bytes = b"stored-image-bytes",
        original_name: str = "photo.png",
        mime_type: str = "image/png",
        **fields: Any,
    ) -> Asset:
        n = next(counter)
        storage_path = content_store.put(io.BytesIO(content), "png")
        asset = Asset(
            image_id=str(uuid.uuid4()),
            user_id=user_id,
            file_hash=f"hash-{n}",
            storage_path=storage_path,
            original_name=original_name,
            file_size=len(content),
            mime_type=mime_type,
            created_at=f"2024-01-{n:02d}T10:00:00+00:00",
            **fields,
        )
        metadata_repo.create_asset(asset=asset)
        return asset

    return _make


@pytest.fixture
def lambda_context():
    return SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )


@pytest.fixture
def api_event() -> Callable[..., dict[str, Any]]:
    """
    Build an API Gateway proxy event, optionally authenticated.

    Usage:
        event = api_event(user_id="alice", path_params={"image_id": "..."})
    """

    def _event(
        *,
        user_id: str | None = None,
        role: str | None = None,
        method: str = "GET",
        body: str | None = None,
        path_params: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        authorizer: dict[str, Any] = {}
        if user_id:
            authorizer["principalId"] = user_id
        if role:
            authorizer["role"] = role

        return {
            "httpMethod": method,
            "path": "/v1/images",
            "body": body,
            "pathParameters": path_params,
            "queryStringParameters": query,
            "headers": headers or {"Host": "img.example.com", "X-Forwarded-Proto": "https"},
            "requestContext": {"authorizer": authorizer} if authorizer else {},
        }

    return _event


def _encode(fmt: str, size: tuple[int, int], color: tuple[int, int, int]) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def sample_png_bytes() -> bytes:
    """A real 4x3 PNG."""
    return _encode("PNG", (4, 3), (200, 30, 30))


@pytest.fixture
def sample_jpeg_bytes() -> bytes:
    """A real 2x5 JPEG."""
    return _encode("JPEG", (2, 5), (10, 120, 240))


@pytest.fixture
def stored_files(storage_root) -> Callable[[], list[Any]]:
    """List blob files currently under the content store root."""

    def _files() -> list[Any]:
        if not storage_root.is_dir():
            return []
        return sorted(p for p in storage_root.rglob("*") if p.is_file())

    return _files
