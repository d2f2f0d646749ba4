"""Keyword search over image metadata."""

from imagehost.core.models.image import Asset


class KeywordFilter:
    """Filter images by a case-insensitive keyword.

    An image matches when the keyword appears in its original file name,
    its description or any of its tags.
    """

    @staticmethod
    def matches(asset: Asset, keyword: str) -> bool:
        needle = keyword.lower()

        if needle in asset.original_name.lower():
            return True

        if asset.description and needle in asset.description.lower():
            return True

        return any(needle in tag.lower() for tag in asset.tags)

    @classmethod
    def apply(cls, items: list[Asset], keyword: str | None) -> list[Asset]:
        """Return the items matching ``keyword``; a blank keyword keeps everything."""
        if not keyword or not keyword.strip():
            return items

        keyword = keyword.strip()
        return [item for item in items if cls.matches(item, keyword)]

    @staticmethod
    def matches_tag(asset: Asset, needle: str | None) -> bool:
        """True when ``needle`` appears in one of the tags; a blank needle matches all."""
        if not needle or not needle.strip():
            return True

        needle = needle.strip().lower()
        return any(needle in tag.lower() for tag in asset.tags)
