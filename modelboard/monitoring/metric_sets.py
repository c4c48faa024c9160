"""Ready-made metric function sets for compute_metrics."""

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    mean_absolute_error,
    mean_squared_error,
    r2_score,
)


def rmse(y_true, y_pred) -> float:
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


REGRESSION_METRICS = {
    "mae": mean_absolute_error,
    "rmse": rmse,
    "r2": r2_score,
}

CLASSIFICATION_METRICS = {
    "accuracy": accuracy_score,
    "balanced_accuracy": balanced_accuracy_score,
}
