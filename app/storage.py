"""Attachment storage on an S3-compatible bucket: store bytes, get back a URL."""

import logging
import time
import uuid

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from app import config

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


def get_s3_client():
    return boto3.client(
        "s3",
        endpoint_url=config.STORAGE_ENDPOINT_URL,
        aws_access_key_id=config.STORAGE_ACCESS_KEY_ID,
        aws_secret_access_key=config.STORAGE_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def object_key(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    return f"bookings/{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}.{ext}"


def public_url(key: str) -> str:
    if config.STORAGE_PUBLIC_URL:
        return f"{config.STORAGE_PUBLIC_URL.rstrip('/')}/{key}"
    return f"{config.STORAGE_ENDPOINT_URL}/{config.STORAGE_BUCKET_NAME}/{key}"


class AttachmentStorage:
    def __init__(self, client=None):
        self.client = client or get_s3_client()

    def put(self, filename: str, content: bytes, content_type: str) -> str:
        key = object_key(filename)
        try:
            self.client.put_object(
                Bucket=config.STORAGE_BUCKET_NAME,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to upload %s: %s", key, e)
            raise StorageError("Failed to upload file") from e
        logger.info("Uploaded attachment %s (%d bytes)", key, len(content))
        return public_url(key)


def get_storage() -> AttachmentStorage:
    return AttachmentStorage()
