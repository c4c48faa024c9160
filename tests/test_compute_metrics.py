import pandas as pd
import pytest
from sklearn.metrics import mean_absolute_error

from modelboard.monitoring.compute import METRICS_COLUMNS, bucket_starts, compute_metrics
from modelboard.monitoring.metric_sets import CLASSIFICATION_METRICS, REGRESSION_METRICS


def _daily(start: str, days: int) -> pd.DataFrame:
    dates = pd.date_range(start, periods=days, freq="D")
    truth = [float(i) for i in range(days)]
    return pd.DataFrame(
        {"date": dates, "mpg": truth, "predicted": [t + 1.0 for t in truth]}
    )


def test_two_weeks_of_daily_rows_give_two_weekly_buckets():
    # 2024-01-01 is a Monday; 14 days run through Sunday 2024-01-14
    observations = _daily("2024-01-01", 14)

    table = compute_metrics(
        observations, "date", "week", REGRESSION_METRICS, "mpg", "predicted"
    )

    assert list(table.columns) == METRICS_COLUMNS
    for metric in REGRESSION_METRICS:
        assert (table["metric"] == metric).sum() == 2
    assert sorted(table["index"].unique()) == [
        pd.Timestamp("2024-01-01"),
        pd.Timestamp("2024-01-08"),
    ]
    assert set(table["n"]) == {7}


def test_metric_values_per_bucket():
    observations = _daily("2024-01-01", 14)

    table = compute_metrics(
        observations, "date", "week", {"mae": mean_absolute_error}, "mpg", "predicted"
    )

    assert table["estimate"].tolist() == [1.0, 1.0]


def test_empty_observations_give_empty_table():
    observations = _daily("2024-01-01", 0)

    table = compute_metrics(
        observations, "date", "week", REGRESSION_METRICS, "mpg", "predicted"
    )

    assert table.empty
    assert list(table.columns) == METRICS_COLUMNS


def test_weeks_run_monday_to_sunday():
    times = pd.Series(pd.to_datetime(["2024-01-07 23:59", "2024-01-08 00:00"]))

    starts = bucket_starts(times, "week")

    assert starts.tolist() == [pd.Timestamp("2024-01-01"), pd.Timestamp("2024-01-08")]


def test_month_and_day_buckets():
    times = pd.Series(pd.to_datetime(["2024-01-31 18:00", "2024-02-01 06:00"]))

    assert bucket_starts(times, "month").tolist() == [
        pd.Timestamp("2024-01-01"),
        pd.Timestamp("2024-02-01"),
    ]
    assert bucket_starts(times, "day").tolist() == [
        pd.Timestamp("2024-01-31"),
        pd.Timestamp("2024-02-01"),
    ]


def test_timezone_aware_times_bucket_in_utc():
    # Sunday evening in New York is already Monday in UTC
    times = pd.Series(pd.to_datetime(["2024-01-07 23:30"]).tz_localize("America/New_York"))

    assert bucket_starts(times, "week").tolist() == [pd.Timestamp("2024-01-08")]


def test_metric_functions_as_sequence_use_function_names():
    observations = pd.DataFrame(
        {
            "date": pd.to_datetime(["2024-01-02", "2024-01-03"]),
            "label": ["a", "b"],
            "pred": ["a", "a"],
        }
    )

    table = compute_metrics(
        observations,
        "date",
        "week",
        list(CLASSIFICATION_METRICS.values()),
        "label",
        "pred",
    )

    assert table["metric"].tolist() == ["accuracy_score", "balanced_accuracy_score"]
    assert table.loc[table["metric"] == "accuracy_score", "estimate"].item() == 0.5


def test_string_times_are_parsed():
    observations = pd.DataFrame(
        {"date": ["2024-01-02", "2024-02-02"], "y": [1.0, 2.0], "yhat": [1.0, 2.5]}
    )

    table = compute_metrics(
        observations, "date", "month", {"mae": mean_absolute_error}, "y", "yhat"
    )

    assert table["estimate"].tolist() == [0.0, 0.5]


def test_unknown_period():
    with pytest.raises(ValueError, match="period"):
        compute_metrics(_daily("2024-01-01", 3), "date", "fortnight", REGRESSION_METRICS, "mpg", "predicted")


def test_missing_columns():
    with pytest.raises(ValueError, match="missing columns"):
        compute_metrics(_daily("2024-01-01", 3), "date", "week", REGRESSION_METRICS, "mpg", "estimate")


def test_deterministic():
    observations = _daily("2024-01-03", 30)

    first = compute_metrics(observations, "date", "week", REGRESSION_METRICS, "mpg", "predicted")
    second = compute_metrics(observations, "date", "week", REGRESSION_METRICS, "mpg", "predicted")

    pd.testing.assert_frame_equal(first, second)


def test_rows_without_time_are_dropped_with_warning(caplog):
    observations = _daily("2024-01-01", 7)
    observations.loc[[0, 3], "date"] = pd.NaT

    with caplog.at_level("WARNING", logger="modelboard.monitoring.compute"):
        table = compute_metrics(
            observations, "date", "week", {"mae": mean_absolute_error}, "mpg", "predicted"
        )

    assert table["n"].tolist() == [5]
    assert "Dropping 2 observations" in caplog.text


def test_all_rows_without_time_give_empty_table():
    observations = _daily("2024-01-01", 2)
    observations["date"] = pd.NaT

    table = compute_metrics(
        observations, "date", "week", {"mae": mean_absolute_error}, "mpg", "predicted"
    )

    assert table.empty
    assert list(table.columns) == METRICS_COLUMNS
