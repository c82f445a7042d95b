from __future__ import annotations

from typing import Any

import aiohttp
import boto3
from botocore.config import Config as BotoConfig

from partstream.config_manager.upload_config import UploadConfig

from .chunk_transport import ChunkTransport
from .presigned_chunk_transport import PresignedS3ChunkTransport
from .s3_chunk_transport import S3ChunkTransport


def make_s3_client(config: UploadConfig) -> Any:
    """
    Build a boto3 S3 client whose connection pool fits the part concurrency.
    """
    return boto3.client(
        "s3",
        endpoint_url=config.endpoint_url,
        region_name=config.region_name,
        config=BotoConfig(max_pool_connections=max(10, config.concurrent_parts)),
    )


def make_chunk_transport(
    config: UploadConfig,
    session: aiohttp.ClientSession | None = None,
    client: Any = None,
) -> ChunkTransport:
    """
    Choose the transport: part bodies go through aiohttp when a session is
    given, through the boto3 client otherwise.
    """
    if client is None:
        client = make_s3_client(config)

    if session is not None:
        return PresignedS3ChunkTransport(
            session,
            client=client,
            expires_in=config.presigned_url_expiry,
            timeout_seconds=config.part_timeout,
        )

    return S3ChunkTransport(client=client)
