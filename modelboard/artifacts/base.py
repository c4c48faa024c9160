"""
ArtifactStore protocol — abstraction for a versioned artifact board.

A board holds named slots; each slot is an ordered history of immutable
(payload, metadata) versions. Backends: LocalArtifactStore (filesystem),
MemoryArtifactStore, S3ArtifactStore, SqlArtifactStore.
"""

from typing import Any, List, Mapping, Optional, Protocol, Tuple, Union, runtime_checkable

from modelboard.artifacts.schemas import ArtifactMetadata, VersionInfo


@runtime_checkable
class ArtifactStore(Protocol):
    def write(
        self,
        slot_name: str,
        payload: bytes,
        metadata: Union[ArtifactMetadata, Mapping[str, Any]],
    ) -> str:
        """Create a new version under slot_name. Returns the version id."""
        ...

    def read(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> Tuple[bytes, ArtifactMetadata]:
        """Read a version (latest when version_id is None)."""
        ...

    def read_metadata(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> ArtifactMetadata:
        """Read only the metadata of a version."""
        ...

    def list_versions(self, slot_name: str) -> List[str]:
        """List version ids of a slot in creation order."""
        ...

    def version_info(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> VersionInfo:
        """Get the version record (id, creation time, hash, size)."""
        ...

    def list_slots(self) -> List[str]:
        """List all slot names on the board."""
        ...

    def exists(self, slot_name: str, version_id: Optional[str] = None) -> bool:
        """Check if a slot (or one of its versions) exists."""
        ...
