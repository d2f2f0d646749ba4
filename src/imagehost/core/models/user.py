"""Owner profile and storage usage models."""

from pydantic import BaseModel, Field, StrictStr

from imagehost.core.utils.constants import (
    ALLOWED_EXTENSIONS,
    DEFAULT_COMPRESS_QUALITY,
    DEFAULT_LINK_FORMAT,
    DEFAULT_STORAGE_QUOTA,
    DEFAULT_WATERMARK_POSITION,
    MAX_FILE_SIZE,
    ROLE_ADMIN,
    ROLE_USER,
)


class UserProfile(BaseModel):
    """Quota owner and upload preferences.

    The upload policy fields (size, types, compression, watermark) are stored
    for the owner's clients; the upload pipeline itself enforces only the
    service-wide limits.
    """

    user_id: StrictStr
    role: str = ROLE_USER
    storage_quota: int = Field(DEFAULT_STORAGE_QUOTA, ge=0, description="Bytes, 0 is unlimited")
    used_storage: int = Field(0, ge=0, description="Cached usage, refreshed by reconcile")
    custom_domain: str | None = None
    default_link_format: str = DEFAULT_LINK_FORMAT

    max_image_size: int = MAX_FILE_SIZE
    allowed_image_types: list[str] = Field(default_factory=lambda: sorted(ALLOWED_EXTENSIONS))
    compress_image: bool = False
    compress_quality: int = Field(DEFAULT_COMPRESS_QUALITY, ge=1, le=100)
    enable_watermark: bool = False
    watermark_text: str | None = None
    watermark_position: str = DEFAULT_WATERMARK_POSITION

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def has_unlimited_quota(self) -> bool:
        return self.storage_quota == 0


class UserSettings(BaseModel):
    """The owner-editable part of a profile, as returned to the owner."""

    custom_domain: str | None = None
    default_link_format: str = DEFAULT_LINK_FORMAT
    max_image_size: int = MAX_FILE_SIZE
    allowed_image_types: list[str] = Field(default_factory=lambda: sorted(ALLOWED_EXTENSIONS))
    compress_image: bool = False
    compress_quality: int = DEFAULT_COMPRESS_QUALITY
    enable_watermark: bool = False
    watermark_text: str | None = None
    watermark_position: str = DEFAULT_WATERMARK_POSITION

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserSettings":
        return cls.model_validate(profile.model_dump(include=set(cls.model_fields)))


class QuotaStatus(BaseModel):
    """Storage usage summary for an owner."""

    used: int
    quota: int
    remaining: int = Field(..., description="Bytes left, -1 when the quota is unlimited")
    percent: float


class UsageStats(QuotaStatus):
    """Quota status plus per-owner image statistics."""

    image_count: int
    total_views: int
