from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from modelboard.common.exceptions import InvalidMetadata
from modelboard.prediction.prototype import Prototype


class ArtifactMetadata(BaseModel):
    """Metadata versioned together with an artifact payload."""

    description: str
    required_packages: List[str]
    # Required key, but None is allowed for artifacts without tabular input
    prototype: Optional[Prototype]
    user: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class VersionInfo(BaseModel):
    version: str
    created_at: datetime
    content_hash: str
    size: int


def coerce_metadata(
    metadata: Union[ArtifactMetadata, Mapping[str, Any]]
) -> ArtifactMetadata:
    if isinstance(metadata, ArtifactMetadata):
        return metadata
    if not isinstance(metadata, Mapping):
        raise InvalidMetadata(f"expected a mapping, got {type(metadata).__name__}")
    try:
        return ArtifactMetadata.model_validate(dict(metadata))
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors()]
        raise InvalidMetadata(f"bad or missing fields {fields}") from e
