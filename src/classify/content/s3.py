"""
S3 Content Storage
One JSON object per record at <prefix><id>.json in an S3-compatible bucket.

S3 has no secondary index, so list() and find_by_hash() scan every object under
the prefix and fetch each one. The scan is consistent per object but not across
the whole listing: objects added or removed mid-scan may or may not appear.
"""

import asyncio
import logging
from typing import List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StorageConfig
from ..errors import StorageError
from .models import Content
from .storage import ContentStorage, canonical_id, decode_content

logger = logging.getLogger(__name__)

OBJECT_SUFFIX = ".json"
_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _MISSING_CODES


def normalize_prefix(prefix: Optional[str]) -> str:
    """Empty stays empty; anything else ends with exactly one slash"""
    if not prefix or prefix.endswith("/"):
        return prefix or ""
    return f"{prefix}/"


class S3ContentStorage(ContentStorage):
    """Content store backed by an S3 bucket"""

    backend = "s3"

    def __init__(self, client, bucket: str, prefix: str = "", timeout: Optional[float] = None):
        super().__init__(timeout=timeout)
        self.client = client
        self.bucket = bucket
        self.prefix = normalize_prefix(prefix)

    @classmethod
    async def connect(cls, config: StorageConfig) -> "S3ContentStorage":
        """
        Build a client from configuration and verify the bucket is reachable.

        A named AWS profile wins over explicit keys; with neither, boto3's default
        credential chain applies.

        Raises:
            StorageError: If the bucket cannot be accessed
        """
        if config.s3_profile:
            session = boto3.session.Session(profile_name=config.s3_profile, region_name=config.s3_region)
        else:
            session = boto3.session.Session(
                aws_access_key_id=config.s3_access_key,
                aws_secret_access_key=config.s3_secret_key,
                region_name=config.s3_region,
            )

        client = session.client(
            "s3",
            endpoint_url=config.s3_endpoint_url,
            config=BotoConfig(
                connect_timeout=config.timeout_seconds,
                read_timeout=config.timeout_seconds,
                retries={"max_attempts": 0},
            ),
        )

        try:
            await asyncio.to_thread(client.head_bucket, Bucket=config.s3_bucket)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to access S3 bucket '{config.s3_bucket}': {e}", cls.backend, "connect")

        logger.info(f"[S3] Connected to bucket {config.s3_bucket} (prefix: '{normalize_prefix(config.s3_prefix)}')")
        return cls(client, config.s3_bucket, config.s3_prefix, timeout=config.timeout_seconds)

    def _object_key(self, content_id: str) -> str:
        return f"{self.prefix}{content_id}{OBJECT_SUFFIX}"

    def _id_from_key(self, key: str) -> Optional[str]:
        if not key.startswith(self.prefix) or not key.endswith(OBJECT_SUFFIX):
            return None
        content_id = key[len(self.prefix):-len(OBJECT_SUFFIX)]
        # Nested "folders" and foreign objects under the prefix are not records
        if canonical_id(content_id) != content_id:
            return None
        return content_id

    # =============================================
    # Blocking helpers, run in a worker thread
    # =============================================
    def _put(self, key: str, body: bytes) -> None:
        self.client.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType="application/json")

    def _fetch(self, key: str) -> Optional[bytes]:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                return None
            raise
        return response["Body"].read()

    def _list_keys(self) -> List[str]:
        keys = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=self.prefix):
            for obj in page.get("Contents", []):
                keys.append(obj["Key"])
        return keys

    def _remove(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                return False
            raise
        self.client.delete_object(Bucket=self.bucket, Key=key)
        return True

    # =============================================
    # ContentStorage implementation
    # =============================================
    async def _store(self, content: Content) -> None:
        key = self._object_key(str(content.id))
        body = content.model_dump_json(indent=2).encode("utf-8")
        await asyncio.to_thread(self._put, key, body)
        logger.debug(f"[S3] Stored content {content.id} at s3://{self.bucket}/{key}")

    async def _get(self, content_id: str) -> Optional[Content]:
        key = self._object_key(content_id)
        raw = await asyncio.to_thread(self._fetch, key)
        if raw is None:
            return None
        return decode_content(raw, f"s3://{self.bucket}/{key}")

    async def _list(self) -> List[Content]:
        keys = await asyncio.to_thread(self._list_keys)
        ids = [content_id for content_id in map(self._id_from_key, keys) if content_id]
        results = await asyncio.gather(*(self._get(content_id) for content_id in ids))
        return [content for content in results if content is not None]

    async def _delete(self, content_id: str) -> bool:
        removed = await asyncio.to_thread(self._remove, self._object_key(content_id))
        if removed:
            logger.debug(f"[S3] Deleted content {content_id}")
        return removed
