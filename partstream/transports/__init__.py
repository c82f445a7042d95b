"""Remote multipart transports."""

from .chunk_transport import ChunkTransport
from .presigned_chunk_transport import PresignedS3ChunkTransport
from .s3_chunk_transport import S3ChunkTransport
from .transport_factory import make_chunk_transport, make_s3_client

__all__ = [
    "ChunkTransport",
    "PresignedS3ChunkTransport",
    "S3ChunkTransport",
    "make_chunk_transport",
    "make_s3_client",
]
