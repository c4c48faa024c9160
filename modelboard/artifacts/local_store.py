"""
LocalArtifactStore — filesystem-backed implementation of ArtifactStore.

Layout::

    <base_dir>/<slot>/<version>/payload.bin
                               /metadata.json
                               /version.json

A version directory is written under a hidden temporary name and renamed into
place once complete, so readers never see a partial version.
"""

import logging
import shutil
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

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

PAYLOAD_FILE = "payload.bin"
METADATA_FILE = "metadata.json"
VERSION_FILE = "version.json"


class LocalArtifactStore:
    def __init__(self, base_dir: str, clock: Clock = utcnow):
        self.base_dir = Path(base_dir)
        self._clock = clock
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(str(self.base_dir), str(e)) from e

    def _slot_dir(self, slot_name: str) -> Path:
        return self.base_dir / check_slot_name(slot_name)

    def write(
        self,
        slot_name: str,
        payload: bytes,
        metadata: Union[ArtifactMetadata, Mapping[str, Any]],
    ) -> str:
        meta = coerce_metadata(metadata)
        meta_json = encode_metadata(meta)
        slot_dir = self._slot_dir(slot_name)

        try:
            latest = self.list_versions(slot_name)[-1]
        except NotFound:
            latest = None
        info = new_version(payload, latest, self._clock)

        version_dir = slot_dir / info.version
        tmp_dir = slot_dir / f".{info.version}.tmp"
        try:
            tmp_dir.mkdir(parents=True, exist_ok=False)
            (tmp_dir / PAYLOAD_FILE).write_bytes(payload)
            (tmp_dir / METADATA_FILE).write_text(meta_json)
            (tmp_dir / VERSION_FILE).write_text(encode_version_info(info))
            tmp_dir.rename(version_dir)
        except OSError as e:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            logger.error(f"Failed to write {slot_name}/{info.version}: {e}")
            raise StorageUnavailable(str(slot_dir), str(e)) from e

        logger.info(f"Wrote {slot_name}/{info.version} ({info.size} bytes) to {version_dir}")
        return info.version

    def _version_dir(self, slot_name: str, version_id: Optional[str]) -> Path:
        version = resolve_version(slot_name, self.list_versions(slot_name), version_id)
        return self._slot_dir(slot_name) / version

    def read(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> Tuple[bytes, ArtifactMetadata]:
        version_dir = self._version_dir(slot_name, version_id)
        try:
            payload = (version_dir / PAYLOAD_FILE).read_bytes()
            metadata = decode_metadata((version_dir / METADATA_FILE).read_text())
        except OSError as e:
            raise StorageUnavailable(str(version_dir), str(e)) from e
        return payload, metadata

    def read_metadata(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> ArtifactMetadata:
        version_dir = self._version_dir(slot_name, version_id)
        try:
            return decode_metadata((version_dir / METADATA_FILE).read_text())
        except OSError as e:
            raise StorageUnavailable(str(version_dir), str(e)) from e

    def version_info(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> VersionInfo:
        version_dir = self._version_dir(slot_name, version_id)
        try:
            return decode_version_info((version_dir / VERSION_FILE).read_text())
        except OSError as e:
            raise StorageUnavailable(str(version_dir), str(e)) from e

    def list_versions(self, slot_name: str) -> List[str]:
        slot_dir = self._slot_dir(slot_name)
        if not slot_dir.is_dir():
            raise NotFound(slot_name)
        try:
            versions = sorted(
                d.name
                for d in slot_dir.iterdir()
                if d.is_dir() and not d.name.startswith(".")
            )
        except OSError as e:
            raise StorageUnavailable(str(slot_dir), str(e)) from e
        if not versions:
            raise NotFound(slot_name)
        return versions

    def list_slots(self) -> List[str]:
        try:
            return sorted(
                d.name
                for d in self.base_dir.iterdir()
                if SLOT_NAME_PATTERN.match(d.name) and self.exists(d.name)
            )
        except OSError as e:
            raise StorageUnavailable(str(self.base_dir), str(e)) from e

    def exists(self, slot_name: str, version_id: Optional[str] = None) -> bool:
        try:
            versions = self.list_versions(slot_name)
        except NotFound:
            return False
        return version_id is None or version_id in versions
