import logging

from modelboard.artifacts.base import ArtifactStore
from modelboard.config import Settings

logger = logging.getLogger(__name__)


def get_store(config: Settings) -> ArtifactStore:
    """Build the board named by BOARD_TYPE. Callers own the returned handle."""
    board_type = config.BOARD_TYPE.lower()

    if board_type == "local":
        from modelboard.artifacts.local_store import LocalArtifactStore

        store = LocalArtifactStore(config.BOARD_PATH)
    elif board_type == "memory":
        from modelboard.artifacts.memory_store import MemoryArtifactStore

        store = MemoryArtifactStore()
    elif board_type == "s3":
        from modelboard.artifacts.s3_store import S3ArtifactStore

        if not config.S3_BUCKET:
            raise ValueError("S3_BUCKET must be set when BOARD_TYPE is 's3'")
        store = S3ArtifactStore(
            bucket=config.S3_BUCKET, prefix=config.S3_PREFIX, region=config.S3_REGION
        )
    elif board_type == "sql":
        from modelboard.artifacts.sql_store import SqlArtifactStore
        from modelboard.db.session import make_engine

        store = SqlArtifactStore(make_engine(config.DATABASE_URL))
    else:
        raise ValueError(f"Unknown BOARD_TYPE: {config.BOARD_TYPE}")

    logger.info(f"Using {board_type} board")
    return store
