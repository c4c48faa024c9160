import pandas as pd
import pytest

from modelboard.common.exceptions import PrototypeMismatch
from modelboard.prediction.prototype import Prototype


@pytest.fixture
def prototype(cars):
    return Prototype.from_frame(cars[["cyl", "disp", "hp"]])


def test_from_frame_keeps_column_order_and_dtypes(prototype):
    assert prototype.names == ["cyl", "disp", "hp"]
    assert prototype.dtypes() == {"cyl": "float64", "disp": "float64", "hp": "float64"}


def test_prototype_is_immutable(prototype):
    with pytest.raises(Exception):
        prototype.columns = []


def test_check_reorders_to_prototype_order(prototype):
    data = pd.DataFrame({"hp": [110.0], "cyl": [6.0], "disp": [160.0]})

    checked = prototype.check(data)

    assert list(checked.columns) == ["cyl", "disp", "hp"]
    assert list(data.columns) == ["hp", "cyl", "disp"]


def test_check_accepts_records_and_single_mapping(prototype):
    records = [{"cyl": 6, "disp": 160.0, "hp": 110}, {"cyl": 4, "disp": 108.0, "hp": 93}]

    assert len(prototype.check(records)) == 2
    assert len(prototype.check({"cyl": 6, "disp": 160.0, "hp": 110})) == 1


def test_integer_data_matches_float_columns(prototype):
    data = pd.DataFrame({"cyl": [6], "disp": [160], "hp": [110]})

    assert prototype.check(data)["cyl"].tolist() == [6]


def test_missing_and_unexpected_columns(prototype):
    data = pd.DataFrame({"cyl": [6.0], "hp": [110.0], "wt": [2.6]})

    with pytest.raises(PrototypeMismatch) as exc:
        prototype.check(data)

    problems = " ".join(exc.value.problems)
    assert "missing columns ['disp']" in problems
    assert "unexpected columns ['wt']" in problems


def test_wrong_dtype_kind(prototype):
    data = pd.DataFrame({"cyl": ["six"], "disp": [160.0], "hp": [110.0]})

    with pytest.raises(PrototypeMismatch, match="cyl"):
        prototype.check(data)


def test_datetime_columns_accept_iso_strings():
    prototype = Prototype.from_frame(
        pd.DataFrame({"when": pd.to_datetime(["2024-01-01"]), "value": [1.0]})
    )

    checked = prototype.check([{"when": "2024-02-01T10:00:00", "value": 2.5}])

    assert checked["when"].iloc[0] == pd.Timestamp("2024-02-01T10:00:00")


def test_datetime_columns_reject_garbage():
    prototype = Prototype.from_frame(
        pd.DataFrame({"when": pd.to_datetime(["2024-01-01"]), "value": [1.0]})
    )

    with pytest.raises(PrototypeMismatch):
        prototype.check([{"when": "not a date", "value": 2.5}])


def test_check_is_pure(prototype):
    data = pd.DataFrame({"hp": [110.0], "cyl": [6.0], "disp": [160.0]})
    before = data.copy()

    prototype.check(data)
    prototype.check(data)

    pd.testing.assert_frame_equal(data, before)


def test_non_string_column_labels_match_own_prototype():
    data = pd.DataFrame([[1.0, 2.0], [3.0, 4.0]])

    checked = Prototype.from_frame(data).check(data)

    assert list(checked.columns) == ["0", "1"]
    assert list(data.columns) == [0, 1]
