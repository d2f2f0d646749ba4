import json

import pytest

from imagehost.handlers.delete_image.handler import handler


@pytest.fixture(autouse=True)
def _tables(dynamodb_tables, storage_root):
    return dynamodb_tables


def delete(api_event, lambda_context, image_id: str, **kwargs):
    event = api_event(method="DELETE", path_params={"image_id": image_id}, **kwargs)
    return handler(event, lambda_context)


def test_owner_deletes_image(api_event, lambda_context, make_asset, stored_files) -> None:
    asset = make_asset()

    resp = delete(api_event, lambda_context, asset.image_id, user_id="alice")
    body = json.loads(resp["body"])

    assert resp["statusCode"] == 200
    assert body["image_id"] == asset.image_id
    assert body["deleted_at"]
    assert stored_files() == []


def test_other_user_is_forbidden(api_event, lambda_context, make_asset) -> None:
    asset = make_asset()

    assert delete(api_event, lambda_context, asset.image_id, user_id="bob")["statusCode"] == 403


def test_admin_can_delete(api_event, lambda_context, make_asset) -> None:
    asset = make_asset()

    resp = delete(api_event, lambda_context, asset.image_id, user_id="moderator", role="admin")

    assert resp["statusCode"] == 200


def test_deleted_image_is_gone(api_event, lambda_context, make_asset) -> None:
    asset = make_asset()
    delete(api_event, lambda_context, asset.image_id, user_id="alice")

    assert delete(api_event, lambda_context, asset.image_id, user_id="alice")["statusCode"] == 404


def test_requires_authentication(api_event, lambda_context, make_asset) -> None:
    asset = make_asset()

    assert delete(api_event, lambda_context, asset.image_id)["statusCode"] == 401


def test_missing_id_is_unprocessable(api_event, lambda_context) -> None:
    assert delete(api_event, lambda_context, "", user_id="alice")["statusCode"] == 422
