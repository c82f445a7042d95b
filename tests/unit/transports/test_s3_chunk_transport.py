from unittest.mock import MagicMock

import pytest

from partstream.models import Destination, TransactionHandle
from partstream.transports.s3_chunk_transport import S3ChunkTransport

DESTINATION = Destination(bucket="media", key="raw/video.mp4")
HANDLE = TransactionHandle(destination=DESTINATION, upload_id="mpu-123")


@pytest.fixture
def s3_client() -> MagicMock:
    client = MagicMock()
    client.create_multipart_upload.return_value = {"UploadId": "mpu-123"}
    client.upload_part.return_value = {"ETag": '"part-etag"'}
    client.complete_multipart_upload.return_value = {
        "Location": "https://media.s3.amazonaws.com/raw/video.mp4",
        "ETag": '"final-etag-2"',
    }
    return client


@pytest.mark.asyncio
async def test_initiate_passes_upload_options(s3_client: MagicMock) -> None:
    transport = S3ChunkTransport(client=s3_client)

    handle = await transport.initiate_transaction(
        DESTINATION, {"ContentType": "video/mp4", "ServerSideEncryption": "AES256"}
    )

    assert handle == HANDLE
    s3_client.create_multipart_upload.assert_called_once_with(
        Bucket="media",
        Key="raw/video.mp4",
        ContentType="video/mp4",
        ServerSideEncryption="AES256",
    )


@pytest.mark.asyncio
async def test_upload_chunk_sends_part_number(s3_client: MagicMock) -> None:
    transport = S3ChunkTransport(client=s3_client)

    receipt = await transport.upload_chunk(HANDLE, 3, b"abcdef")

    assert receipt.completion_tag == '"part-etag"'
    assert receipt.bytes_accepted is None
    s3_client.upload_part.assert_called_once_with(
        Bucket="media",
        Key="raw/video.mp4",
        UploadId="mpu-123",
        PartNumber=3,
        Body=b"abcdef",
        ContentLength=6,
    )


@pytest.mark.asyncio
async def test_upload_chunk_propagates_client_errors(s3_client: MagicMock) -> None:
    s3_client.upload_part.side_effect = ConnectionError("endpoint unreachable")
    transport = S3ChunkTransport(client=s3_client)

    with pytest.raises(ConnectionError):
        await transport.upload_chunk(HANDLE, 1, b"x")


@pytest.mark.asyncio
async def test_complete_lists_parts_in_given_order(s3_client: MagicMock) -> None:
    transport = S3ChunkTransport(client=s3_client)

    result = await transport.complete_transaction(HANDLE, [(1, '"a"'), (2, '"b"')])

    s3_client.complete_multipart_upload.assert_called_once_with(
        Bucket="media",
        Key="raw/video.mp4",
        UploadId="mpu-123",
        MultipartUpload={
            "Parts": [
                {"PartNumber": 1, "ETag": '"a"'},
                {"PartNumber": 2, "ETag": '"b"'},
            ]
        },
    )
    assert result.location == "https://media.s3.amazonaws.com/raw/video.mp4"
    assert result.completion_tag == '"final-etag-2"'
    assert result.destination == DESTINATION


@pytest.mark.asyncio
async def test_complete_falls_back_to_s3_uri(s3_client: MagicMock) -> None:
    s3_client.complete_multipart_upload.return_value = {"ETag": '"e"'}
    transport = S3ChunkTransport(client=s3_client)

    result = await transport.complete_transaction(HANDLE, [(1, '"a"')])

    assert result.location == "s3://media/raw/video.mp4"


@pytest.mark.asyncio
async def test_abort_uses_upload_id(s3_client: MagicMock) -> None:
    transport = S3ChunkTransport(client=s3_client)

    await transport.abort_transaction(HANDLE)

    s3_client.abort_multipart_upload.assert_called_once_with(
        Bucket="media", Key="raw/video.mp4", UploadId="mpu-123"
    )
