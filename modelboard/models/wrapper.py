"""
VersionedModel — a trained model bundled with the metadata a board stores
next to it: dependency list, input prototype, description and user fields.
"""

import logging
from dataclasses import dataclass, field
from importlib import metadata as importlib_metadata
from typing import Any, Dict, List, Optional, Union

from modelboard.artifacts.schemas import ArtifactMetadata
from modelboard.prediction.prototype import Prototype, PrototypeData, as_frame

logger = logging.getLogger(__name__)

# Import names whose distribution name differs, for environments where
# packages_distributions() cannot resolve them.
_KNOWN_DISTRIBUTIONS = {
    "sklearn": "scikit-learn",
    "xgboost": "xgboost",
    "lightgbm": "lightgbm",
    "statsmodels": "statsmodels",
    "torch": "torch",
}

_NO_DEPENDENCY_MODULES = {"builtins", "__main__"}


def resolve_required_packages(model: Any) -> List[str]:
    """Pin the distribution that provides ``model``'s class."""
    module = type(model).__module__.split(".")[0]
    if module in _NO_DEPENDENCY_MODULES:
        return []

    dists = importlib_metadata.packages_distributions().get(module)
    dist = dists[0] if dists else _KNOWN_DISTRIBUTIONS.get(module, module)
    try:
        return [f"{dist}=={importlib_metadata.version(dist)}"]
    except importlib_metadata.PackageNotFoundError:
        logger.warning(f"Could not resolve installed version of {dist}")
        return [dist]


@dataclass
class VersionedModel:
    model: Any
    name: str
    description: str
    required_packages: List[str] = field(default_factory=list)
    prototype: Optional[Prototype] = None
    user: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_model(
        cls,
        model: Any,
        name: str,
        prototype_data: Union[Prototype, PrototypeData, None] = None,
        description: Optional[str] = None,
        required_packages: Optional[List[str]] = None,
        user: Optional[Dict[str, Any]] = None,
    ) -> "VersionedModel":
        if prototype_data is None or isinstance(prototype_data, Prototype):
            prototype = prototype_data
        else:
            prototype = Prototype.from_frame(as_frame(prototype_data))

        return cls(
            model=model,
            name=name,
            description=description or f"A {type(model).__name__} model",
            required_packages=(
                list(required_packages)
                if required_packages is not None
                else resolve_required_packages(model)
            ),
            prototype=prototype,
            user=dict(user or {}),
        )

    @classmethod
    def from_metadata(cls, model: Any, name: str, meta: ArtifactMetadata) -> "VersionedModel":
        return cls(
            model=model,
            name=name,
            description=meta.description,
            required_packages=list(meta.required_packages),
            prototype=meta.prototype,
            user=dict(meta.user),
        )

    def to_metadata(self) -> ArtifactMetadata:
        return ArtifactMetadata(
            description=self.description,
            required_packages=self.required_packages,
            prototype=self.prototype,
            user=self.user,
        )

    def predict(self, data: PrototypeData) -> Any:
        """Check ``data`` against the prototype, then call ``model.predict``."""
        if self.prototype is not None:
            data = self.prototype.check(data)
        else:
            data = as_frame(data)
        return self.model.predict(data)
