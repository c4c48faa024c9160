import logging
from typing import Optional

import pandas as pd

from modelboard.common.exceptions import ConflictingMetrics
from modelboard.monitoring.compute import METRICS_COLUMNS, empty_metrics

logger = logging.getLogger(__name__)

# A bucket key identifies one metric in one time bucket
BUCKET_KEY = ["index", "metric"]


def _normalize(table: Optional[pd.DataFrame]) -> pd.DataFrame:
    if table is None or table.empty:
        return empty_metrics()
    missing = [c for c in METRICS_COLUMNS if c not in table.columns]
    if missing:
        raise ValueError(f"Metrics table is missing columns {missing}")
    table = table[METRICS_COLUMNS].copy()
    table["index"] = pd.to_datetime(table["index"])
    return table


def merge_metrics(
    existing: Optional[pd.DataFrame],
    new: pd.DataFrame,
    overwrite: bool = False,
) -> pd.DataFrame:
    """Merge newly computed metrics into an existing metrics table.

    Rows sharing a bucket key (bucket start + metric name) collide. Without
    ``overwrite`` a collision raises ConflictingMetrics; with it, the rows from
    ``new`` replace the old ones. All other rows from both tables are kept and
    the result is ordered by bucket start.
    """
    old = _normalize(existing)
    incoming = _normalize(new).drop_duplicates(subset=BUCKET_KEY, keep="last")

    keyed = old.merge(
        incoming[BUCKET_KEY], on=BUCKET_KEY, how="left", indicator=True
    )
    colliding = keyed["_merge"] == "both"

    if colliding.any():
        buckets = sorted(keyed.loc[colliding, "index"].drop_duplicates())
        if not overwrite:
            logger.warning(f"Refusing to merge metrics overlapping {len(buckets)} buckets")
            raise ConflictingMetrics([b.date().isoformat() for b in buckets])
        logger.info(f"Overwriting metrics for {len(buckets)} buckets")

    kept = old.loc[~colliding.to_numpy()]
    if kept.empty:
        merged = incoming
    elif incoming.empty:
        merged = kept
    else:
        merged = pd.concat([kept, incoming], ignore_index=True)

    return merged.sort_values("index", kind="stable").reset_index(drop=True)
