"""Pydantic model for upload configuration."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from partstream.config_manager.helpers import parse_bytes
from partstream.const import (
    DEFAULT_CONCURRENT_PARTS,
    DEFAULT_PART_SIZE,
    DEFAULT_PART_TIMEOUT_SECONDS,
    DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS,
    MIN_PART_SIZE,
)


class UploadConfig(BaseModel):
    """Configuration options for a single streaming upload.

    Attributes:
        max_part_size: flush threshold in bytes; every part except the last
            has exactly this size.
        concurrent_parts: maximum number of part uploads in flight.
        upload_options: extra arguments passed verbatim when the transaction
            is opened (ContentType, ACL, StorageClass, ...).
        endpoint_url: S3-compatible endpoint, None for AWS.
        region_name: region used when building the S3 client.
        presigned_url_expiry: lifetime of presigned part URLs, in seconds.
        part_timeout: total timeout of one presigned part PUT, in seconds.
    """

    max_part_size: int = DEFAULT_PART_SIZE
    concurrent_parts: int = Field(default=DEFAULT_CONCURRENT_PARTS, ge=1)
    upload_options: dict[str, Any] = Field(default_factory=dict)
    endpoint_url: str | None = None
    region_name: str | None = None
    presigned_url_expiry: int = Field(
        default=DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS, gt=0
    )
    part_timeout: float = Field(default=DEFAULT_PART_TIMEOUT_SECONDS, gt=0)

    @field_validator("max_part_size", mode="before")
    @classmethod
    def _parse_part_size(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_bytes(value)
        return value

    @field_validator("max_part_size")
    @classmethod
    def _check_part_size(cls, value: int) -> int:
        if value < MIN_PART_SIZE:
            raise ValueError(
                f"max_part_size must be at least {MIN_PART_SIZE} bytes, got {value}"
            )
        return value
