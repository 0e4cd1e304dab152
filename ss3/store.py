from __future__ import annotations
"""Object store requests, independent of how the results are used."""
import logging
from typing import Any, BinaryIO, Callable, Optional

import boto3
from botocore.client import Config

from .errors import PROVIDER_ERRORS, ProviderError

LOGGER = logging.getLogger(__name__)

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def create_client(
    *,
    access_key: str,
    secret_key: str,
    region: str | None = None,
    endpoint_url: str | None = None,
    client_factory: Callable[..., object] | None = None,
):
    """Build an S3 client signing requests with SigV4."""

    factory = client_factory or boto3.client
    config = Config(signature_version="s3v4")
    return factory(
        "s3",
        endpoint_url=endpoint_url,
        region_name=region,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        config=config,
    )


class ObjectStore:
    """Thin wrapper over an S3 client mapping every failure to :class:`ProviderError`."""

    def __init__(self, client):
        self._client = client

    @property
    def client(self):
        return self._client

    @property
    def region(self) -> str | None:
        meta = getattr(self._client, "meta", None)
        return getattr(meta, "region_name", None)

    def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        *,
        delimiter: str | None = None,
        continuation_token: str | None = None,
        max_keys: int | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        if delimiter:
            params["Delimiter"] = delimiter
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        if max_keys:
            params["MaxKeys"] = max_keys
        LOGGER.debug("list_objects_v2 bucket=%s prefix=%r delimiter=%r", bucket, prefix, delimiter)
        return self._call("list_objects_v2", **params)

    def get_object(self, bucket: str, key: str):
        """Return the streaming body of an object."""

        response = self._call("get_object", Bucket=bucket, Key=key)
        return response["Body"]

    def put_object(self, bucket: str, key: str, body: BinaryIO, content_type: str) -> None:
        self._call("put_object", Bucket=bucket, Key=key, Body=body, ContentType=content_type)

    def head_object(self, bucket: str, key: str) -> bool:
        """Return whether ``key`` exists."""

        try:
            self._client.head_object(Bucket=bucket, Key=key)
        except PROVIDER_ERRORS as exc:
            error = ProviderError.from_boto(exc)
            status = _http_status(exc)
            if error.code in NOT_FOUND_CODES or status == 404:
                return False
            raise error from exc
        return True

    def delete_object(self, bucket: str, key: str) -> None:
        self._call("delete_object", Bucket=bucket, Key=key)

    def create_bucket(self, bucket: str, region: str | None = None) -> Optional[str]:
        params: dict[str, Any] = {"Bucket": bucket}
        # us-east-1 rejects an explicit location constraint.
        if region and region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        response = self._call("create_bucket", **params)
        return response.get("Location")

    def delete_bucket(self, bucket: str) -> None:
        self._call("delete_bucket", Bucket=bucket)

    def list_buckets(self) -> list[str]:
        response = self._call("list_buckets")
        return [bucket["Name"] for bucket in response.get("Buckets", []) if bucket.get("Name")]

    def _call(self, operation: str, **params):
        try:
            return getattr(self._client, operation)(**params)
        except PROVIDER_ERRORS as exc:
            raise ProviderError.from_boto(exc) from exc


def _http_status(exc: Exception) -> int:
    response = getattr(exc, "response", None) or {}
    return int(response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0) or 0)
