"""Embed-link rendering for public image identifiers."""

import html
from collections.abc import Mapping

from imagehost.core.models.errors import ValidationError
from imagehost.core.models.image import Asset, ImageLinks
from imagehost.core.models.user import UserProfile
from imagehost.core.utils.constants import (
    DEFAULT_URL_SCHEME,
    ERROR_CODE_INVALID_LINK_INPUT,
    PUBLIC_IMAGE_PATH,
)


def format_links(asset: Asset, base_url: str) -> ImageLinks:
    """Render the public URL of an image in every supported embed format.

    The URL is built from the public id only; the storage path never
    appears in any output.

    Raises:
        ValidationError: If the image id or base URL is empty
    """
    if not asset.image_id or not asset.image_id.strip():
        raise ValidationError(
            message="Image identifier is required to build links",
            error_code=ERROR_CODE_INVALID_LINK_INPUT,
        )

    if not base_url or not base_url.strip():
        raise ValidationError(
            message="Base URL is required to build links",
            error_code=ERROR_CODE_INVALID_LINK_INPUT,
            details={"image_id": asset.image_id},
        )

    url = f"{base_url.strip().rstrip('/')}{PUBLIC_IMAGE_PATH}{asset.image_id}"
    label = _markdown_label(asset.original_name)

    return ImageLinks(
        url=url,
        html=f'<img src="{html.escape(url)}" alt="{html.escape(asset.original_name)}" />',
        markdown=f"![{label}]({url})",
        bbcode=f"[img]{url}[/img]",
        markdown_with_link=f"[![{label}]({url})]({url})",
    )


def resolve_base_url(profile: UserProfile, headers: Mapping[str, str] | None) -> str:
    """Pick the owner's custom domain, else scheme and host of the request."""
    if profile.custom_domain and profile.custom_domain.strip():
        domain = profile.custom_domain.strip().rstrip("/")
        if "://" not in domain:
            domain = f"{DEFAULT_URL_SCHEME}://{domain}"
        return domain

    lowered = {k.lower(): v for k, v in (headers or {}).items()}
    host = lowered.get("host")
    if not host:
        raise ValidationError(
            message="Unable to determine the public host for links",
            error_code=ERROR_CODE_INVALID_LINK_INPUT,
        )

    scheme = lowered.get("x-forwarded-proto", DEFAULT_URL_SCHEME).split(",")[0].strip()
    return f"{scheme}://{host}"


def _markdown_label(name: str) -> str:
    return name.replace("[", r"\[").replace("]", r"\]")
