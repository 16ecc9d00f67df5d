# evaluation.py
import numpy as np
from typing import Callable, Dict, Optional

from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from ._types import PredictorProtocol
from .regression_forest import RegressionForest
from .sampling import RandomStateLike, get_uniform_samples
from .space import check_space


# -------------------------------
# Prediction Stability
# -------------------------------
def prediction_stability(forest: RegressionForest, X: np.ndarray) -> Dict[int, float]:
    """
    Measure how consistent the members of a forest are on the same inputs.

    Parameters
    ----------
    forest : RegressionForest
        Fitted forest with at least two trees.
    X : np.ndarray
        Input matrix.

    Returns
    -------
    scores : dict[int, float]
        RMSE of each tree's predictions vs the ensemble mean, keyed by tree
        index (lower = more stable).
    """
    if len(forest) < 2:
        raise ValueError("Need at least 2 trees to assess stability.")

    preds = forest.predict_members(X)  # (K, n)
    mean_pred = preds.mean(axis=0)
    scores = {}
    for k in range(preds.shape[0]):
        err = mean_pred - preds[k]
        scores[k] = float(np.sqrt(np.mean(np.square(err))))
    return scores


# -------------------------------
# Accuracy / Performance
# -------------------------------
def accuracy(model: PredictorProtocol, X: np.ndarray, y: np.ndarray) -> Dict[str, float]:
    """
    Error metrics of a fitted tree, forest or estimator.

    Returns
    -------
    metrics : dict
        ``{'mae': ..., 'rmse': ..., 'r2': ...}``
    """
    y = np.asarray(y, dtype=float)
    y_pred = model.predict(X)
    return {
        "mae": float(mean_absolute_error(y, y_pred)),
        "rmse": float(np.sqrt(mean_squared_error(y, y_pred))),
        "r2": float(r2_score(y, y_pred)),
    }


def oracle_accuracy(
    model: PredictorProtocol,
    eval_func: Callable[[np.ndarray], float],
    space,
    n_samples: int = 1000,
    random_state: RandomStateLike = None,
    X: Optional[np.ndarray] = None,
) -> Dict[str, float]:
    """
    Error metrics against an oracle on uniform test points drawn in ``space``.

    ``X`` may be passed to reuse fixed test points.
    """
    if X is None:
        rng = np.random.default_rng(random_state)
        X = get_uniform_samples(check_space(space), n_samples, rng)
    y = np.array([eval_func(x) for x in X], dtype=float)
    return accuracy(model, X, y)
