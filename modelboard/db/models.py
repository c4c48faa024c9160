"""
SQLAlchemy ORM models for the SQL-backed board.
"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    DateTime,
    Index,
    Integer,
    LargeBinary,
    String,
    UniqueConstraint,
)

from modelboard.db.session import Base


class ArtifactVersion(Base):
    __tablename__ = "artifact_versions"

    # Autoincrement id doubles as the creation order of a slot's history
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    slot_name = Column(String(255), nullable=False)
    version = Column(String(64), nullable=False)
    payload = Column(LargeBinary, nullable=False)
    meta = Column("metadata", JSON, nullable=False)
    content_hash = Column(String(64), nullable=False)
    size = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("slot_name", "version", name="uq_artifact_versions_slot_version"),
        Index("ix_artifact_versions_slot_id", "slot_name", "id"),
    )
