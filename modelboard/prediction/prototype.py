"""
Prototype — the recorded input schema of a model.

Captured from training data when a model is written to a board and used later
to check the shape and typing of new prediction requests.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence, Union

import pandas as pd
from pandas.api.types import pandas_dtype
from pydantic import BaseModel

from modelboard.common.exceptions import PrototypeMismatch

logger = logging.getLogger(__name__)

PrototypeData = Union[pd.DataFrame, Mapping[str, Any], Sequence[Mapping[str, Any]]]

_KIND_GROUPS = {
    "i": "numeric",
    "u": "numeric",
    "f": "numeric",
    "c": "numeric",
    "b": "bool",
    "M": "datetime",
    "m": "timedelta",
}


def _dtype_group(dtype: Any) -> str:
    return _KIND_GROUPS.get(pandas_dtype(dtype).kind, "text")


def as_frame(data: PrototypeData) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        return data.copy()
    if isinstance(data, Mapping):
        return pd.DataFrame([dict(data)])
    return pd.DataFrame([dict(row) for row in data])


class ColumnSpec(BaseModel):
    name: str
    dtype: str

    model_config = {"frozen": True}


class Prototype(BaseModel):
    columns: List[ColumnSpec]

    model_config = {"frozen": True}

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Prototype":
        return cls(
            columns=[
                ColumnSpec(name=str(name), dtype=str(dtype))
                for name, dtype in df.dtypes.items()
            ]
        )

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    def dtypes(self) -> Dict[str, str]:
        return {c.name: c.dtype for c in self.columns}

    def check(self, data: PrototypeData) -> pd.DataFrame:
        """Validate ``data`` against this prototype.

        Returns a new DataFrame with columns in prototype order. The input is
        never modified. Raises PrototypeMismatch listing every problem found.
        """
        frame = as_frame(data)
        frame.columns = frame.columns.map(str)
        problems = []

        missing = [name for name in self.names if name not in frame.columns]
        if missing:
            problems.append(f"missing columns {missing}")

        unexpected = [c for c in frame.columns if c not in self.names]
        if unexpected:
            problems.append(f"unexpected columns {unexpected}")

        for col in self.columns:
            if col.name not in frame.columns:
                continue
            expected = _dtype_group(col.dtype)
            actual = _dtype_group(frame[col.name].dtype)
            if expected == actual:
                continue
            if expected == "datetime" and actual == "text":
                try:
                    frame[col.name] = pd.to_datetime(frame[col.name])
                    continue
                except (ValueError, TypeError):
                    pass
            problems.append(
                f"column {col.name!r} expected {col.dtype}, got {frame[col.name].dtype}"
            )

        if problems:
            logger.warning(f"Prototype check failed: {problems}")
            raise PrototypeMismatch(problems)

        return frame[self.names]
