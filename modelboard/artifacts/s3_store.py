"""
S3ArtifactStore — object-store implementation of ArtifactStore.

Same layout as LocalArtifactStore, as object keys under ``prefix``. The
``version.json`` object is written last and marks a version as complete;
listings only report versions that have it.
"""

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from modelboard.artifacts.schemas import ArtifactMetadata, VersionInfo, coerce_metadata
from modelboard.artifacts.versioning import (
    SLOT_NAME_PATTERN,
    Clock,
    check_slot_name,
    decode_metadata,
    decode_version_info,
    encode_metadata,
    encode_version_info,
    new_version,
    resolve_version,
    utcnow,
)
from modelboard.common.exceptions import NotFound, StorageUnavailable

logger = logging.getLogger(__name__)

PAYLOAD_KEY = "payload.bin"
METADATA_KEY = "metadata.json"
VERSION_KEY = "version.json"

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class S3ArtifactStore:
    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        client: Any = None,
        region: str = "us-east-1",
        clock: Clock = utcnow,
    ):
        self.bucket = bucket
        self.prefix = prefix if not prefix or prefix.endswith("/") else f"{prefix}/"
        self._s3 = client if client is not None else boto3.client("s3", region_name=region)
        self._clock = clock

    def _location(self, key: str = "") -> str:
        return f"s3://{self.bucket}/{self.prefix}{key}"

    def _slot_prefix(self, slot_name: str) -> str:
        return f"{self.prefix}{check_slot_name(slot_name)}/"

    def _list(self, prefix: str, delimiter: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        token = None
        while True:
            kwargs = {"Bucket": self.bucket, "Prefix": prefix, "MaxKeys": 1000}
            if delimiter:
                kwargs["Delimiter"] = delimiter
            if token:
                kwargs["ContinuationToken"] = token
            try:
                resp = self._s3.list_objects_v2(**kwargs)
            except (BotoCoreError, ClientError) as e:
                raise StorageUnavailable(self._location(), str(e)) from e

            yield resp

            if not resp.get("IsTruncated"):
                break
            token = resp.get("NextContinuationToken")

    def _get(self, slot_name: str, version: str, key: str) -> bytes:
        try:
            obj = self._s3.get_object(Bucket=self.bucket, Key=key)
            return obj["Body"].read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                raise NotFound(slot_name, version) from e
            raise StorageUnavailable(self._location(key), str(e)) from e
        except BotoCoreError as e:
            raise StorageUnavailable(self._location(key), str(e)) from e

    def _put(self, key: str, body: bytes) -> None:
        self._s3.put_object(Bucket=self.bucket, Key=key, Body=body)

    def write(
        self,
        slot_name: str,
        payload: bytes,
        metadata: Union[ArtifactMetadata, Mapping[str, Any]],
    ) -> str:
        meta_json = encode_metadata(coerce_metadata(metadata))
        slot_prefix = self._slot_prefix(slot_name)

        try:
            latest = self.list_versions(slot_name)[-1]
        except NotFound:
            latest = None
        info = new_version(payload, latest, self._clock)

        version_prefix = f"{slot_prefix}{info.version}/"
        try:
            self._put(version_prefix + PAYLOAD_KEY, payload)
            self._put(version_prefix + METADATA_KEY, meta_json.encode("utf-8"))
            self._put(version_prefix + VERSION_KEY, encode_version_info(info).encode("utf-8"))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to write {slot_name}/{info.version}: {e}")
            raise StorageUnavailable(self._location(version_prefix), str(e)) from e

        logger.info(
            f"Wrote {slot_name}/{info.version} ({info.size} bytes) to "
            f"{self._location(version_prefix)}"
        )
        return info.version

    def _version_prefix(self, slot_name: str, version_id: Optional[str]) -> Tuple[str, str]:
        version = resolve_version(slot_name, self.list_versions(slot_name), version_id)
        return version, f"{self._slot_prefix(slot_name)}{version}/"

    def read(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> Tuple[bytes, ArtifactMetadata]:
        version, version_prefix = self._version_prefix(slot_name, version_id)
        payload = self._get(slot_name, version, version_prefix + PAYLOAD_KEY)
        raw_meta = self._get(slot_name, version, version_prefix + METADATA_KEY)
        return payload, decode_metadata(raw_meta.decode("utf-8"))

    def read_metadata(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> ArtifactMetadata:
        version, version_prefix = self._version_prefix(slot_name, version_id)
        raw_meta = self._get(slot_name, version, version_prefix + METADATA_KEY)
        return decode_metadata(raw_meta.decode("utf-8"))

    def version_info(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> VersionInfo:
        version, version_prefix = self._version_prefix(slot_name, version_id)
        raw = self._get(slot_name, version, version_prefix + VERSION_KEY)
        return decode_version_info(raw.decode("utf-8"))

    def list_versions(self, slot_name: str) -> List[str]:
        slot_prefix = self._slot_prefix(slot_name)
        versions = set()
        for resp in self._list(slot_prefix):
            for obj in resp.get("Contents", []):
                rest = obj["Key"][len(slot_prefix):]
                version, _, name = rest.partition("/")
                if name == VERSION_KEY:
                    versions.add(version)
        if not versions:
            raise NotFound(slot_name)
        return sorted(versions)

    def list_slots(self) -> List[str]:
        slots = []
        for resp in self._list(self.prefix, delimiter="/"):
            for common in resp.get("CommonPrefixes", []):
                name = common["Prefix"][len(self.prefix):].rstrip("/")
                # a failed write can leave a prefix with no completed version
                if SLOT_NAME_PATTERN.match(name) and self.exists(name):
                    slots.append(name)
        return sorted(slots)

    def exists(self, slot_name: str, version_id: Optional[str] = None) -> bool:
        try:
            versions = self.list_versions(slot_name)
        except NotFound:
            return False
        return version_id is None or version_id in versions
