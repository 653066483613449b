"""
Attachment blob storage: a local directory for self-hosted installs, or any
S3-compatible bucket.
"""
from __future__ import annotations

import io
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Mapping


class StorageError(RuntimeError):
    pass


class Storage:
    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        raise NotImplementedError

    def open(self, key: str) -> BinaryIO:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        """Remove an object; missing objects are ignored."""
        raise NotImplementedError


@dataclass(frozen=True)
class LocalStorage(Storage):
    root: Path

    def _path(self, key: str) -> Path:
        root = self.root.resolve()
        p = (root / key.lstrip("/").replace("\\", "/")).resolve()
        if root not in p.parents:
            raise StorageError(f"Storage key escapes storage root: {key!r}")
        return p

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)

    def open(self, key: str) -> BinaryIO:
        try:
            return self._path(key).open("rb")
        except FileNotFoundError as e:
            raise StorageError(f"Storage object not found: {key}") from e

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


@dataclass(frozen=True)
class S3Storage(Storage):
    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str

    @property
    def endpoint_url(self) -> str | None:
        if not self.endpoint:
            return None
        if self.endpoint.startswith(("http://", "https://")):
            return self.endpoint
        return f"https://{self.endpoint}"

    def _client(self):
        try:
            import boto3  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise StorageError("boto3 required for S3 storage. Install boto3.") from e
        return boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        extra: dict[str, object] = {"ACL": "private"}
        if content_type:
            extra["ContentType"] = content_type
        self._client().put_object(Bucket=self.bucket, Key=key, Body=data, **extra)

    def open(self, key: str) -> BinaryIO:
        from botocore.exceptions import ClientError  # type: ignore

        try:
            obj = self._client().get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            raise StorageError(f"Storage object not found: {key}") from e
        # Buffered so send_file can seek and report a length.
        return io.BytesIO(obj["Body"].read())

    def delete(self, key: str) -> None:
        self._client().delete_object(Bucket=self.bucket, Key=key)


def storage_from_config(config: Mapping) -> Storage:
    backend = (config.get("STORAGE_BACKEND") or "local").strip().lower()
    if backend == "s3":
        return S3Storage(
            endpoint=(config.get("S3_ENDPOINT") or "").strip(),
            region=(config.get("S3_REGION") or "").strip(),
            bucket=(config.get("S3_BUCKET") or "").strip(),
            access_key_id=(config.get("S3_ACCESS_KEY_ID") or "").strip(),
            secret_access_key=(config.get("S3_SECRET_ACCESS_KEY") or "").strip(),
        )
    if backend != "local":
        raise StorageError(f"Unknown STORAGE_BACKEND {backend!r} (expected 'local' or 's3').")
    root = (config.get("STORAGE_LOCAL_ROOT") or "").strip()
    return LocalStorage(root=Path(root) if root else Path(os.getcwd()) / "storage")
