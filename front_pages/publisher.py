"""Artifact publishing to S3: upload the screenshot, then grant the owner ACL."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Any, Dict, Iterable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import PublishError
from .models import Artifact, Site
from .utils import iso_timestamp

logger = logging.getLogger("front_pages")

OWNER_ACL = "bucket-owner-full-control"


def artifact_filename(shortcode: str, moment: Optional[dt.datetime] = None) -> str:
    """Build the object key ``{shortcode}-{ISO timestamp}.png``."""
    return f"{shortcode}-{iso_timestamp(moment)}.png"


def artifact_url(bucket: str, region: str, filename: str) -> str:
    """Virtual-hosted style URL of an object in ``bucket``."""
    return f"https://{bucket}.s3.{region}.amazonaws.com/{filename}"


class ArtifactPublisher:
    """Uploads screenshots to one bucket with the owner-full-control ACL."""

    def __init__(self, bucket: str, region: str, client: Any = None) -> None:
        self.bucket = bucket
        self.region = region
        self.client = client or boto3.client("s3", region_name=region or None)

    def _put(self, filename: str, artifact: Artifact) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=filename,
                Body=artifact.data,
                ContentEncoding="base64",
                ContentType=artifact.content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise PublishError(f"Uploading {filename} to S3 failed: {exc}") from exc

    def _grant_owner(self, filename: str) -> None:
        try:
            self.client.put_object_acl(Bucket=self.bucket, Key=filename, ACL=OWNER_ACL)
        except (BotoCoreError, ClientError) as exc:
            raise PublishError(
                f"Uploaded {filename} but setting its ACL failed: {exc}"
            ) from exc

    def publish_sync(
        self, artifact: Artifact, site: Site, moment: Optional[dt.datetime] = None
    ) -> str:
        filename = artifact_filename(site.shortcode, moment)
        self._put(filename, artifact)
        self._grant_owner(filename)
        logger.info(
            "Screenshot URL: %s", artifact_url(self.bucket, self.region, filename)
        )
        return filename

    async def publish(self, artifact: Artifact, site: Site) -> str:
        """Upload ``artifact`` and return its key; both remote calls must succeed."""
        return await asyncio.to_thread(self.publish_sync, artifact, site)

    def fix_acls(self, filenames: Iterable[str]) -> Dict[str, Optional[str]]:
        """Re-apply the owner ACL to existing objects.

        Returns a mapping of key to error message (``None`` on success); one
        failure does not stop the remaining keys.
        """
        results: Dict[str, Optional[str]] = {}
        for filename in filenames:
            try:
                self._grant_owner(filename)
            except PublishError as exc:
                logger.error("Setting ACL on screenshot failed. Error: %s", exc)
                results[filename] = str(exc)
                continue
            logger.info("Successfully set ACL on screenshot %s", filename)
            results[filename] = None
        return results
