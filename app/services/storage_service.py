"""Cloudflare R2 storage for rendered videos."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings
from app.core.errors import NotFoundError, UploadError
from app.core.logging import get_logger

logger = get_logger(__name__)

FINAL_OUTPUT_NAME = "final_output.mp4"


@dataclass(frozen=True)
class UploadResult:
    key: str
    url: str
    presigned_url: str


def video_key(video_id: str, filename: str = FINAL_OUTPUT_NAME) -> str:
    return f"videos/{video_id}/{filename}"


class R2StorageService:
    """
    Upload and presigned access for videos in an R2 bucket.

    R2 speaks the S3 API, so this is a boto3 S3 client pointed at the
    account endpoint with the ``auto`` region.
    """

    def __init__(self, settings: Settings, client=None) -> None:
        self.bucket_name = settings.r2_bucket_name
        self.endpoint_url = f"https://{settings.r2_account_id}.r2.cloudflarestorage.com"
        self.default_expiry = settings.presign_expiry_seconds
        if client is None:
            client = boto3.client(
                service_name="s3",
                region_name="auto",
                endpoint_url=self.endpoint_url,
                aws_access_key_id=settings.r2_access_key_id or None,
                aws_secret_access_key=settings.r2_secret_access_key or None,
            )
        self._client = client

    def public_url(self, key: str) -> str:
        return f"{self.endpoint_url}/{self.bucket_name}/{key}"

    def presigned_url(self, key: str, expiration: int | None = None) -> str:
        try:
            url: str = self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expiration or self.default_expiry,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UploadError(f"Could not sign URL for {key}: {exc}") from exc
        return url

    def upload_file(self, file_path: Path, key: str, content_type: str = "video/mp4") -> str:
        try:
            self._client.upload_file(
                str(file_path),
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (BotoCoreError, ClientError) as exc:
            logger.bind(key=key, error=str(exc)).error("r2_upload_failed")
            raise UploadError(f"Upload of {file_path.name} failed: {exc}") from exc
        url = self.public_url(key)
        logger.bind(key=key, url=url).info("file_uploaded_to_r2")
        return url

    def upload_video(self, video_path: Path, video_id: str) -> UploadResult:
        key = video_key(video_id, video_path.name)
        url = self.upload_file(video_path, key)
        return UploadResult(key=key, url=url, presigned_url=self.presigned_url(key))

    def presigned_url_for_video(self, video_id: str, expiry_seconds: int | None = None) -> dict:
        if not video_id:
            raise NotFoundError("Video ID is required")
        expires_in = expiry_seconds or self.default_expiry
        return {
            "videoId": video_id,
            "presignedUrl": self.presigned_url(video_key(video_id), expires_in),
            "expiresIn": expires_in,
        }
