"""Thin DynamoDB adapter wrapping boto3 table operations."""

import os
from typing import Any, Protocol, cast

import boto3

from imagehost.core.utils.constants import (
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
)


class DynamoDBTable(Protocol):
    """Minimal DynamoDB Table protocol."""

    name: str

    def put_item(self, *, Item: dict[str, Any], **kwargs: Any) -> dict[str, Any]: ...
    def get_item(self, *, Key: dict[str, Any], **kwargs: Any) -> dict[str, Any]: ...
    def update_item(self, *, Key: dict[str, Any], **kwargs: Any) -> dict[str, Any]: ...
    def query(self, **kwargs: Any) -> dict[str, Any]: ...
    def scan(self, **kwargs: Any) -> dict[str, Any]: ...


class DynamoDBAdapterProtocol(Protocol):
    """What repositories need from an adapter; lets tests pass stubs."""

    def put_item(
        self, *, item: dict[str, Any], condition_expression: str | None = None
    ) -> dict[str, Any]: ...
    def get_item(self, *, key: dict[str, Any]) -> dict[str, Any]: ...
    def update_item(self, *, key: dict[str, Any], **kwargs: Any) -> dict[str, Any]: ...
    def query(self, **kwargs: Any) -> dict[str, Any]: ...
    def scan(self, **kwargs: Any) -> dict[str, Any]: ...
    def batch_get_items(self, *, keys: list[dict[str, Any]]) -> list[dict[str, Any]]: ...


class DynamoDBAdapter:
    """Low-level DynamoDB operations for one table (mechanical, no error handling).

    This adapter:
    - Wraps a boto3 DynamoDB resource bound to a single table
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors

    One adapter is constructed per table at service start and injected into
    the repository that owns that table.
    """

    def __init__(self, *, table_env_var: str, table_name: str | None = None) -> None:
        """Initialize a DynamoDB table from an explicit name or the environment."""
        table_name = table_name or os.getenv(table_env_var)
        if not table_name:
            raise RuntimeError(f"{table_env_var} environment variable is not set")

        self._dynamodb = boto3.resource(
            "dynamodb",
            endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
            region_name=os.getenv(ENV_AWS_REGION),
        )

        self.table: DynamoDBTable = cast(
            DynamoDBTable,
            self._dynamodb.Table(table_name),
        )
        self.table_name = table_name

    def put_item(
        self,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]:
        """Insert item into DynamoDB.

        Raises boto3 exceptions - caught by domain implementation.
        """
        kwargs: dict[str, Any] = {"Item": item}

        if condition_expression:
            kwargs["ConditionExpression"] = condition_expression

        return self.table.put_item(**kwargs)

    def get_item(self, *, key: dict[str, Any]) -> dict[str, Any]:
        """Retrieve item by key with a strongly consistent read.

        Raises boto3 exceptions - caught by domain implementation.
        """
        return self.table.get_item(Key=key, ConsistentRead=True)

    def update_item(self, *, key: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        """Apply an update expression to an item.

        Raises boto3 exceptions - caught by domain implementation.
        """
        return self.table.update_item(Key=key, **kwargs)

    def query(self, **kwargs: Any) -> dict[str, Any]:
        """Execute DynamoDB query.

        Raises boto3 exceptions - caught by domain implementation.
        """
        return self.table.query(**kwargs)

    def scan(self, **kwargs: Any) -> dict[str, Any]:
        """Execute DynamoDB scan.

        Raises boto3 exceptions - caught by domain implementation.
        """
        return self.table.scan(**kwargs)

    def batch_get_items(self, *, keys: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Fetch up to 100 items by key, retrying unprocessed keys.

        Raises boto3 exceptions - caught by domain implementation.
        """
        items: list[dict[str, Any]] = []
        request: dict[str, Any] = {self.table_name: {"Keys": keys}}

        while request:
            response = self._dynamodb.batch_get_item(RequestItems=request)
            items.extend(response.get("Responses", {}).get(self.table_name, []))
            request = response.get("UnprocessedKeys") or {}

        return items
