import json

import pytest

from imagehost.handlers.image_links.handler import handler


@pytest.fixture(autouse=True)
def _tables(dynamodb_tables, storage_root):
    return dynamodb_tables


def links(api_event, lambda_context, image_id: str, user_id: str = "alice", headers=None):
    event = api_event(user_id=user_id, path_params={"image_id": image_id}, headers=headers)
    return handler(event, lambda_context)


def test_links_use_request_host(api_event, lambda_context, make_asset) -> None:
    asset = make_asset(original_name="cat.png")

    resp = links(api_event, lambda_context, asset.image_id)
    body = json.loads(resp["body"])
    url = f"https://img.example.com/i/{asset.image_id}"

    assert resp["statusCode"] == 200
    assert body["url"] == url
    assert body["bbcode"] == f"[img]{url}[/img]"
    assert body["markdown"] == f"![cat.png]({url})"
    assert asset.storage_path not in resp["body"]


def test_links_prefer_custom_domain(api_event, lambda_context, make_asset, put_user) -> None:
    put_user("alice", custom_domain="cdn.example.org/")
    asset = make_asset()

    body = json.loads(links(api_event, lambda_context, asset.image_id)["body"])

    assert body["url"] == f"https://cdn.example.org/i/{asset.image_id}"


def test_forwarded_scheme(api_event, lambda_context, make_asset) -> None:
    asset = make_asset()

    body = json.loads(
        links(
            api_event,
            lambda_context,
            asset.image_id,
            headers={"host": "localhost:8080", "x-forwarded-proto": "http"},
        )["body"]
    )

    assert body["url"].startswith("http://localhost:8080/i/")


def test_other_owner_is_forbidden(api_event, lambda_context, make_asset) -> None:
    asset = make_asset()

    assert links(api_event, lambda_context, asset.image_id, user_id="bob")["statusCode"] == 403


def test_missing_host_is_unprocessable(api_event, lambda_context, make_asset) -> None:
    asset = make_asset()

    resp = links(api_event, lambda_context, asset.image_id, headers={"accept": "*/*"})

    assert resp["statusCode"] == 422
