import asyncio
import logging

import botocore.exceptions
import pyarrow as pa

from logpuller.core.types.aws_types import S3BucketName, S3ObjectKey
from logpuller.core.types.puller_types import LogSourceName
from logpuller.core.utils import uuid
from logpuller.exceptions import ArchiveException
from logpuller.runtime.types import Archived, Failed, NoNewData, PullOutcome

ARCHIVE_EXTENSION = "json.zst"
ARCHIVE_CONTENT_ENCODING = "application/zstd"
_COMPRESSION = "zstd"


def compress(data: bytes) -> bytes:
    sink = pa.BufferOutputStream()
    stream = pa.CompressedOutputStream(sink, _COMPRESSION)
    stream.write(data)
    # Closing the compressed stream flushes the final zstd frame and closes
    # the sink as well.
    stream.close()
    return sink.getvalue().to_pybytes()


def decompress(data: bytes) -> bytes:
    stream = pa.CompressedInputStream(pa.BufferReader(data), _COMPRESSION)
    try:
        return stream.read()
    finally:
        stream.close()


def archive_key(log_source_name: LogSourceName) -> S3ObjectKey:
    return f"{log_source_name}/{uuid()}.{ARCHIVE_EXTENSION}"


class ArchiveWriter:
    def __init__(self, s3_client, bucket_name: S3BucketName) -> None:
        self.s3_client = s3_client
        self.bucket_name = bucket_name

    def _put_object(self, key: S3ObjectKey, body: bytes):
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=body,
            ContentEncoding=ARCHIVE_CONTENT_ENCODING,
        )

    def _compress_and_put(self, key: S3ObjectKey, data: bytes):
        self._put_object(key, compress(data))

    async def archive(self, data: bytes, log_source_name: LogSourceName) -> PullOutcome:
        if not data:
            logging.info("No new data for log_source: %s", log_source_name)
            return NoNewData()
        logging.info("Uploading data for %s", log_source_name)
        key = archive_key(log_source_name)
        logging.info("Writing to s3://%s/%s", self.bucket_name, key)
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, self._compress_and_put, key, data)
        except pa.ArrowException as e:
            logging.error("Error compressing data for %s: %s", key, e)
            return Failed(ArchiveException(log_source_name, key, e))
        except (
            botocore.exceptions.BotoCoreError,
            botocore.exceptions.ClientError,
        ) as e:
            logging.error("Error putting %s to S3: %s", key, e)
            return Failed(ArchiveException(log_source_name, key, e))
        return Archived(byte_count=len(data), key=key)
