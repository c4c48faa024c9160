"""
Version stamping shared by every board backend.

Version ids look like ``20240101T120000123456Z-3f9a1``: a UTC timestamp with
microseconds followed by the first five hex digits of the payload's sha256.
Within a slot ids sort lexicographically in creation order.
"""

import hashlib
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from pydantic_core import PydanticSerializationError

from modelboard.artifacts.schemas import ArtifactMetadata, VersionInfo
from modelboard.common.exceptions import InvalidMetadata, NotFound

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%fZ"
HASH_LENGTH = 5
SLOT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def content_hash(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


def parse_version_timestamp(version_id: str) -> datetime:
    stamp = version_id.split("-", 1)[0]
    return datetime.strptime(stamp, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def check_slot_name(slot_name: str) -> str:
    """Slot names become directory names and object keys."""
    if not isinstance(slot_name, str) or not SLOT_NAME_PATTERN.match(slot_name):
        raise ValueError(f"Invalid slot name: {slot_name!r}")
    return slot_name


def new_version(
    payload: bytes, latest: Optional[str] = None, clock: Clock = utcnow
) -> VersionInfo:
    """Stamp a new version, strictly later than ``latest``."""
    created_at = clock().astimezone(timezone.utc)
    if latest is not None:
        floor = parse_version_timestamp(latest)
        if created_at <= floor:
            created_at = floor + timedelta(microseconds=1)

    digest = content_hash(payload)
    version = f"{created_at.strftime(TIMESTAMP_FORMAT)}-{digest[:HASH_LENGTH]}"
    return VersionInfo(
        version=version,
        created_at=created_at,
        content_hash=digest,
        size=len(payload),
    )


def resolve_version(
    slot_name: str, versions: List[str], version_id: Optional[str]
) -> str:
    """Pick ``version_id`` out of a slot's history, or the latest one."""
    if not versions:
        raise NotFound(slot_name)
    if version_id is None:
        return versions[-1]
    if version_id not in versions:
        raise NotFound(slot_name, version_id)
    return version_id


def encode_metadata(metadata: ArtifactMetadata) -> str:
    try:
        return metadata.model_dump_json(indent=2)
    except PydanticSerializationError as e:
        raise InvalidMetadata(f"metadata is not JSON serializable: {e}") from e


def decode_metadata(raw: str) -> ArtifactMetadata:
    return ArtifactMetadata.model_validate_json(raw)


def encode_version_info(info: VersionInfo) -> str:
    return info.model_dump_json(indent=2)


def decode_version_info(raw: str) -> VersionInfo:
    return VersionInfo.model_validate_json(raw)
