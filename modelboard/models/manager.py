"""
ModelManager — writes and reads VersionedModels through an ArtifactStore.

Models are pickled; metadata travels with them as the version's metadata.
The store is passed in explicitly, there is no process-wide current board.
"""

import logging
import pickle
from typing import List, Optional

from modelboard.artifacts.base import ArtifactStore
from modelboard.artifacts.schemas import ArtifactMetadata, VersionInfo
from modelboard.models.wrapper import VersionedModel

logger = logging.getLogger(__name__)


class ModelManager:
    def __init__(self, store: ArtifactStore):
        self.store = store

    def write(self, vmodel: VersionedModel) -> str:
        payload = pickle.dumps(vmodel.model, protocol=pickle.HIGHEST_PROTOCOL)
        version = self.store.write(vmodel.name, payload, vmodel.to_metadata())
        logger.info(f"Saved model {vmodel.name} as version {version}")
        return version

    def read(self, name: str, version_id: Optional[str] = None) -> VersionedModel:
        payload, meta = self.store.read(name, version_id)
        model = pickle.loads(payload)
        logger.info(f"Loaded model {name} ({version_id or 'latest'})")
        return VersionedModel.from_metadata(model, name, meta)

    def list_versions(self, name: str) -> List[str]:
        return self.store.list_versions(name)

    def get_metadata(self, name: str, version_id: Optional[str] = None) -> ArtifactMetadata:
        return self.store.read_metadata(name, version_id)

    def get_version_info(self, name: str, version_id: Optional[str] = None) -> VersionInfo:
        return self.store.version_info(name, version_id)
