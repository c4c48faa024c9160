"""
Time-bucketed model metrics.

Bucket policy is calendar aligned and fixed:

- ``day``: calendar days, 00:00 to 24:00.
- ``week``: ISO weeks, Monday 00:00 through Sunday 24:00.
- ``month``: calendar months.

Timezone-aware times are converted to UTC before bucketing; every bucket is
labelled by its (naive UTC) start.
"""

import logging
from typing import Callable, List, Mapping, Sequence, Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)

METRICS_COLUMNS = ["index", "n", "metric", "estimate"]

PERIODS = {
    "day": "D",
    "week": "W-SUN",  # weeks ending Sunday, i.e. starting Monday
    "month": "M",
}

MetricFn = Callable[..., float]
MetricFns = Union[Mapping[str, MetricFn], Sequence[MetricFn], MetricFn]


def empty_metrics() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "index": pd.Series(dtype="datetime64[ns]"),
            "n": pd.Series(dtype="int64"),
            "metric": pd.Series(dtype="object"),
            "estimate": pd.Series(dtype="float64"),
        }
    )


def _named_metric_fns(metric_fns: MetricFns) -> List[Tuple[str, MetricFn]]:
    if callable(metric_fns):
        metric_fns = [metric_fns]
    if isinstance(metric_fns, Mapping):
        named = list(metric_fns.items())
    else:
        named = [(fn.__name__, fn) for fn in metric_fns]
    if not named:
        raise ValueError("At least one metric function is required")
    return named


def _check_period(period: str) -> None:
    if period not in PERIODS:
        raise ValueError(f"Unknown period {period!r}; expected one of {sorted(PERIODS)}")


def bucket_starts(times: pd.Series, period: str) -> pd.Series:
    """Map each time to the start of its bucket."""
    _check_period(period)
    times = pd.to_datetime(times)
    if times.dt.tz is not None:
        times = times.dt.tz_convert("UTC").dt.tz_localize(None)
    return times.dt.to_period(PERIODS[period]).dt.start_time


def compute_metrics(
    observations: pd.DataFrame,
    time_field: str,
    period: str,
    metric_fns: MetricFns,
    truth_field: str,
    estimate_field: str,
) -> pd.DataFrame:
    """Aggregate observations into one row per (bucket, metric).

    Each metric function is called as ``fn(truth, estimate)`` on the rows of
    one bucket. The result has columns ``index`` (bucket start), ``n`` (rows
    in the bucket), ``metric`` and ``estimate``, sorted by bucket.
    """
    _check_period(period)
    named = _named_metric_fns(metric_fns)

    if observations.empty:
        return empty_metrics()

    missing = [
        c for c in (time_field, truth_field, estimate_field) if c not in observations.columns
    ]
    if missing:
        raise ValueError(f"Observations are missing columns {missing}")

    frame = observations[[truth_field, estimate_field]].copy()
    frame["_bucket"] = bucket_starts(observations[time_field], period)

    undated = int(frame["_bucket"].isna().sum())
    if undated:
        logger.warning(f"Dropping {undated} observations with no {time_field}")
        frame = frame[frame["_bucket"].notna()]
        if frame.empty:
            return empty_metrics()

    rows = []
    for bucket, group in frame.groupby("_bucket", sort=True):
        for name, fn in named:
            rows.append(
                {
                    "index": bucket,
                    "n": len(group),
                    "metric": name,
                    "estimate": float(fn(group[truth_field], group[estimate_field])),
                }
            )

    logger.info(
        f"Computed {len(named)} metrics over {frame['_bucket'].nunique()} {period} buckets "
        f"from {len(frame)} observations"
    )
    result = pd.DataFrame(rows, columns=METRICS_COLUMNS)
    result["index"] = pd.to_datetime(result["index"])
    return result
