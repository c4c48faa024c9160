"""
MemoryArtifactStore — process-local board for tests and throwaway work.

Stores the encoded metadata rather than the model object so that reads go
through the same serialization as the persistent backends.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from modelboard.artifacts.schemas import ArtifactMetadata, VersionInfo, coerce_metadata
from modelboard.artifacts.versioning import (
    Clock,
    check_slot_name,
    decode_metadata,
    encode_metadata,
    new_version,
    resolve_version,
    utcnow,
)
from modelboard.common.exceptions import NotFound

logger = logging.getLogger(__name__)


class MemoryArtifactStore:
    def __init__(self, clock: Clock = utcnow):
        self._clock = clock
        # slot -> version id -> (payload, metadata json, version info)
        self._slots: Dict[str, "OrderedDict[str, Tuple[bytes, str, VersionInfo]]"] = {}

    def write(
        self,
        slot_name: str,
        payload: bytes,
        metadata: Union[ArtifactMetadata, Mapping[str, Any]],
    ) -> str:
        check_slot_name(slot_name)
        meta_json = encode_metadata(coerce_metadata(metadata))
        history = self._slots.setdefault(slot_name, OrderedDict())
        latest = next(reversed(history)) if history else None

        info = new_version(bytes(payload), latest, self._clock)
        history[info.version] = (bytes(payload), meta_json, info)

        logger.info(f"Wrote {slot_name}/{info.version} ({info.size} bytes) to memory")
        return info.version

    def _entry(self, slot_name: str, version_id: Optional[str]):
        version = resolve_version(slot_name, self.list_versions(slot_name), version_id)
        return self._slots[slot_name][version]

    def read(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> Tuple[bytes, ArtifactMetadata]:
        payload, meta_json, _ = self._entry(slot_name, version_id)
        return payload, decode_metadata(meta_json)

    def read_metadata(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> ArtifactMetadata:
        return decode_metadata(self._entry(slot_name, version_id)[1])

    def version_info(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> VersionInfo:
        return self._entry(slot_name, version_id)[2]

    def list_versions(self, slot_name: str) -> List[str]:
        history = self._slots.get(slot_name)
        if not history:
            raise NotFound(slot_name)
        return list(history)

    def list_slots(self) -> List[str]:
        return sorted(name for name, history in self._slots.items() if history)

    def exists(self, slot_name: str, version_id: Optional[str] = None) -> bool:
        history = self._slots.get(slot_name)
        if not history:
            return False
        return version_id is None or version_id in history
