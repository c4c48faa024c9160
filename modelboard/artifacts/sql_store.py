"""
SqlArtifactStore — SQLAlchemy-backed implementation of ArtifactStore.

One row per version in ``artifact_versions``; payload and metadata live in
the same row, so they are always committed together.
"""

import json
import logging
from datetime import timezone
from typing import Any, List, Mapping, Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker

from modelboard.artifacts.schemas import ArtifactMetadata, VersionInfo, coerce_metadata
from modelboard.artifacts.versioning import (
    Clock,
    check_slot_name,
    encode_metadata,
    new_version,
    resolve_version,
    utcnow,
)
from modelboard.common.exceptions import NotFound, StorageUnavailable
from modelboard.db.models import ArtifactVersion
from modelboard.db.session import Base

logger = logging.getLogger(__name__)


class SqlArtifactStore:
    def __init__(self, engine: Engine, clock: Clock = utcnow, create_tables: bool = True):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self._clock = clock
        if create_tables:
            try:
                Base.metadata.create_all(engine)
            except OperationalError as e:
                raise StorageUnavailable(self._location(), str(e)) from e

    def _location(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)

    def write(
        self,
        slot_name: str,
        payload: bytes,
        metadata: Union[ArtifactMetadata, Mapping[str, Any]],
    ) -> str:
        check_slot_name(slot_name)
        meta_doc = json.loads(encode_metadata(coerce_metadata(metadata)))

        try:
            latest = self.list_versions(slot_name)[-1]
        except NotFound:
            latest = None
        info = new_version(payload, latest, self._clock)

        row = ArtifactVersion(
            slot_name=slot_name,
            version=info.version,
            payload=payload,
            meta=meta_doc,
            content_hash=info.content_hash,
            size=info.size,
            created_at=info.created_at,
        )
        try:
            with self._session_factory() as session:
                session.add(row)
                session.commit()
        except IntegrityError:
            # Duplicate version id: another writer got to this slot first
            logger.error(f"Version {info.version} of {slot_name} already exists")
            raise
        except OperationalError as e:
            logger.error(f"Failed to write {slot_name}/{info.version}: {e}")
            raise StorageUnavailable(self._location(), str(e)) from e

        logger.info(f"Wrote {slot_name}/{info.version} ({info.size} bytes) to {self._location()}")
        return info.version

    def _row(self, slot_name: str, version_id: Optional[str]) -> ArtifactVersion:
        version = resolve_version(slot_name, self.list_versions(slot_name), version_id)
        try:
            with self._session_factory() as session:
                return session.execute(
                    select(ArtifactVersion).where(
                        ArtifactVersion.slot_name == slot_name,
                        ArtifactVersion.version == version,
                    )
                ).scalar_one()
        except OperationalError as e:
            raise StorageUnavailable(self._location(), str(e)) from e

    def read(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> Tuple[bytes, ArtifactMetadata]:
        row = self._row(slot_name, version_id)
        return bytes(row.payload), ArtifactMetadata.model_validate(row.meta)

    def read_metadata(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> ArtifactMetadata:
        version = resolve_version(slot_name, self.list_versions(slot_name), version_id)
        try:
            with self._session_factory() as session:
                meta = session.execute(
                    select(ArtifactVersion.meta).where(
                        ArtifactVersion.slot_name == slot_name,
                        ArtifactVersion.version == version,
                    )
                ).scalar_one()
        except OperationalError as e:
            raise StorageUnavailable(self._location(), str(e)) from e
        return ArtifactMetadata.model_validate(meta)

    def version_info(
        self, slot_name: str, version_id: Optional[str] = None
    ) -> VersionInfo:
        row = self._row(slot_name, version_id)
        created_at = row.created_at
        if created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return VersionInfo(
            version=row.version,
            created_at=created_at,
            content_hash=row.content_hash,
            size=row.size,
        )

    def list_versions(self, slot_name: str) -> List[str]:
        check_slot_name(slot_name)
        try:
            with self._session_factory() as session:
                versions = list(
                    session.execute(
                        select(ArtifactVersion.version)
                        .where(ArtifactVersion.slot_name == slot_name)
                        .order_by(ArtifactVersion.id)
                    ).scalars()
                )
        except OperationalError as e:
            raise StorageUnavailable(self._location(), str(e)) from e
        if not versions:
            raise NotFound(slot_name)
        return versions

    def list_slots(self) -> List[str]:
        try:
            with self._session_factory() as session:
                return list(
                    session.execute(
                        select(ArtifactVersion.slot_name)
                        .distinct()
                        .order_by(ArtifactVersion.slot_name)
                    ).scalars()
                )
        except OperationalError as e:
            raise StorageUnavailable(self._location(), str(e)) from e

    def exists(self, slot_name: str, version_id: Optional[str] = None) -> bool:
        try:
            versions = self.list_versions(slot_name)
        except NotFound:
            return False
        return version_id is None or version_id in versions
