"""
Persisted metrics — a metrics table stored as a versioned board artifact.

Each call to write_metrics reads the latest table in the slot, merges the new
rows into it and writes the result as a new version; earlier versions stay
readable.
"""

import json
import logging
from importlib import metadata as importlib_metadata
from typing import Optional

import pandas as pd

from modelboard.artifacts.base import ArtifactStore
from modelboard.artifacts.schemas import ArtifactMetadata
from modelboard.common.exceptions import NotFound
from modelboard.monitoring.compute import METRICS_COLUMNS, empty_metrics
from modelboard.monitoring.merge import merge_metrics

logger = logging.getLogger(__name__)


def _encode(table: pd.DataFrame) -> bytes:
    records = [
        {
            "index": pd.Timestamp(row["index"]).isoformat(),
            "n": int(row["n"]),
            "metric": str(row["metric"]),
            "estimate": None if pd.isna(row["estimate"]) else float(row["estimate"]),
        }
        for row in table.to_dict(orient="records")
    ]
    return json.dumps(records).encode("utf-8")


def _decode(payload: bytes) -> pd.DataFrame:
    records = json.loads(payload.decode("utf-8"))
    if not records:
        return empty_metrics()
    table = pd.DataFrame(records, columns=METRICS_COLUMNS)
    table["index"] = pd.to_datetime(table["index"])
    table["n"] = table["n"].astype("int64")
    table["estimate"] = table["estimate"].astype("float64")
    return table


def _metrics_metadata(slot_name: str, table: pd.DataFrame, description: Optional[str]) -> ArtifactMetadata:
    try:
        packages = [f"pandas=={importlib_metadata.version('pandas')}"]
    except importlib_metadata.PackageNotFoundError:
        packages = ["pandas"]

    first = table["index"].min().isoformat() if not table.empty else None
    last = table["index"].max().isoformat() if not table.empty else None
    return ArtifactMetadata(
        description=description or f"Model metrics for {slot_name}",
        required_packages=packages,
        prototype=None,
        user={
            "kind": "metrics",
            "rows": len(table),
            "metrics": sorted(table["metric"].unique().tolist()),
            "first_bucket": first,
            "last_bucket": last,
        },
    )


def read_metrics(
    store: ArtifactStore, slot_name: str, version_id: Optional[str] = None
) -> pd.DataFrame:
    payload, _ = store.read(slot_name, version_id)
    return _decode(payload)


def write_metrics(
    store: ArtifactStore,
    slot_name: str,
    new_metrics: pd.DataFrame,
    overwrite: bool = False,
    description: Optional[str] = None,
) -> str:
    """Merge ``new_metrics`` into the slot's latest table and write a new version.

    Raises ConflictingMetrics when buckets overlap and ``overwrite`` is False;
    nothing is written in that case.
    """
    try:
        existing = read_metrics(store, slot_name)
    except NotFound:
        existing = empty_metrics()
        logger.info(f"No metrics in {slot_name} yet; starting a new table")

    merged = merge_metrics(existing, new_metrics, overwrite=overwrite)
    version = store.write(
        slot_name, _encode(merged), _metrics_metadata(slot_name, merged, description)
    )
    logger.info(f"Wrote {len(merged)} metric rows to {slot_name} as version {version}")
    return version
