"""Unit tests for the scikit-learn estimators."""

import numpy as np
import pytest
from sklearn.base import clone
from sklearn.exceptions import NotFittedError
from sklearn.model_selection import cross_val_score

from regression_forests import BlackBoxForestRegressor, ExtraTreesRegressor
from regression_forests.training_set import TrainingSet


def _friedman_like(n=200, seed=0):
    rng = np.random.default_rng(seed)
    X = rng.uniform(size=(n, 3))
    y = np.sin(3 * X[:, 0]) + X[:, 1] ** 2 + 0.1 * rng.normal(size=n)
    return X, y


def sphere(x):
    return float(np.sum(np.square(x)))


# -------------------------------
# ExtraTreesRegressor
# -------------------------------
def test_extra_trees_fits_training_data():
    X, y = _friedman_like()
    model = ExtraTreesRegressor(n_estimators=5, n_min=1, random_state=0).fit(X, y)
    assert model.n_features_in_ == 3
    assert model.fit_time_sec_ >= 0.0
    assert len(model.forest_) == 5
    assert model.score(X, y) > 0.99


def test_extra_trees_predict_shape_and_determinism():
    X, y = _friedman_like()
    a = ExtraTreesRegressor(n_estimators=4, n_min=5, random_state=3).fit(X, y)
    b = ExtraTreesRegressor(n_estimators=4, n_min=5, random_state=3).fit(X, y)
    assert a.predict(X[:7]).shape == (7,)
    assert np.array_equal(a.predict(X), b.predict(X))


def test_extra_trees_pwl_leaves():
    X = np.linspace(0.0, 1.0, 40).reshape(-1, 1)
    y = 3.0 * X.ravel() - 1.0
    model = ExtraTreesRegressor(n_estimators=2, n_min=10, approximation="PWL", random_state=0)
    model.fit(X, y)
    assert np.allclose(model.predict([[0.25], [0.75]]), [-0.25, 1.25], atol=1e-6)


def test_extra_trees_not_fitted():
    with pytest.raises(NotFittedError):
        ExtraTreesRegressor().predict(np.zeros((2, 2)))


def test_extra_trees_feature_mismatch():
    X, y = _friedman_like(n=50)
    model = ExtraTreesRegressor(n_estimators=2, random_state=0).fit(X, y)
    with pytest.raises(ValueError, match="features"):
        model.predict(np.zeros((3, 2)))


def test_extra_trees_bad_parameters():
    X, y = _friedman_like(n=50)
    with pytest.raises(ValueError):
        ExtraTreesRegressor(k=4).fit(X, y)
    with pytest.raises(ValueError):
        ExtraTreesRegressor(approximation="spline").fit(X, y)


def test_extra_trees_sklearn_integration():
    X, y = _friedman_like(n=120)
    model = ExtraTreesRegressor(n_estimators=3, n_min=3, random_state=0)
    params = clone(model).get_params()
    assert params["n_min"] == 3 and params["approximation"] == "PWC"
    scores = cross_val_score(model, X, y, cv=3)
    assert scores.shape == (3,)
    assert np.all(np.isfinite(scores))


def test_count_leaves():
    X, y = _friedman_like(n=60)
    model = ExtraTreesRegressor(n_estimators=2, n_min=1, random_state=0).fit(X, y)
    assert model.count_leaves() == 120


# -------------------------------
# BlackBoxForestRegressor
# -------------------------------
def test_blackbox_fits_oracle():
    space = [[-1.0, 1.0], [-1.0, 1.0]]
    model = BlackBoxForestRegressor(
        eval_func=sphere, space=space, n_estimators=3, k=2, max_leafs=100, n_min=2,
        min_density=50.0, random_state=0,
    ).fit()
    assert model.n_features_in_ == 2
    assert model.n_oracle_calls_ >= 600
    assert model.training_set_ is None
    X = np.random.default_rng(1).uniform(-1, 1, size=(300, 2))
    y = np.array([sphere(x) for x in X])
    assert model.score(X, y) > 0.7


def test_blackbox_respects_leaf_budget():
    model = BlackBoxForestRegressor(
        eval_func=sphere, space=[[0.0, 1.0]], n_estimators=2, max_leafs=7, random_state=0
    ).fit()
    assert [t.count_leaves() for t in model.forest_] == [7, 7]
    assert model.count_leaves() == 14


def test_blackbox_shared_samples():
    model = BlackBoxForestRegressor(
        eval_func=sphere, space=[[0.0, 1.0]], n_estimators=3, max_leafs=5,
        share_samples=True, random_state=0,
    ).fit()
    assert isinstance(model.training_set_, TrainingSet)
    assert len(model.training_set_) == model.n_oracle_calls_


def test_blackbox_seeded_with_data():
    X = np.linspace(0.0, 1.0, 10).reshape(-1, 1)
    y = X.ravel() ** 2
    model = BlackBoxForestRegressor(
        eval_func=sphere, space=[[0.0, 1.0]], max_leafs=1, random_state=0
    ).fit(X, y)
    assert model.n_oracle_calls_ == 0
    assert model.predict([[0.5]])[0] == pytest.approx(np.mean(y))


def test_blackbox_oracle_threads():
    model = BlackBoxForestRegressor(
        eval_func=sphere, space=[[0.0, 1.0]], max_leafs=4, min_density=30.0,
        oracle_n_jobs=2, random_state=0,
    ).fit()
    assert model.n_oracle_calls_ >= 30


def test_blackbox_requires_space_and_oracle():
    with pytest.raises(ValueError, match="space"):
        BlackBoxForestRegressor(eval_func=sphere).fit()
    with pytest.raises(ValueError, match="eval_func"):
        BlackBoxForestRegressor(space=[[0.0, 1.0]]).fit()


def test_blackbox_rejects_mismatched_data():
    model = BlackBoxForestRegressor(eval_func=sphere, space=[[0.0, 1.0]])
    with pytest.raises(ValueError):
        model.fit(np.zeros((4, 2)), np.zeros(4))
    with pytest.raises(ValueError, match="y must be provided"):
        model.fit(np.zeros((4, 1)))


def test_blackbox_not_fitted():
    with pytest.raises(NotFittedError):
        BlackBoxForestRegressor(eval_func=sphere, space=[[0.0, 1.0]]).predict([[0.5]])
