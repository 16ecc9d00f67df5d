"""
benchmark_growers.py
--------------------
Benchmark the active best-first grower against extremely randomized trees
fitted on uniform samples, for the same number of oracle evaluations:
  - BB2_FOREST: BlackBoxForestRegressor sampling the oracle on demand
  - EXTRA_TREES(UNIFORM): ExtraTreesRegressor on the same budget of uniform samples
  - CART(UNIFORM): sklearn DecisionTreeRegressor on those samples, as a baseline

Outputs CSVs with accuracy, size, budget and stability metrics.
"""

import os, time
import numpy as np
import pandas as pd

from sklearn.tree import DecisionTreeRegressor

from regression_forests import (
    BlackBoxForestRegressor,
    ExtraTreesRegressor,
    oracle_accuracy,
    prediction_stability,
)


# -------- Oracles --------
def f_ripple(x):
    r = np.sqrt(np.sum(np.square(x)))
    return float(np.sin(4.0 * r) / (1.0 + r))


def f_step(x):
    return 1.0 if x[0] + 0.5 * x[1] > 0.3 else -1.0


def f_peak(x):
    # narrow bump in a mostly flat landscape
    return float(np.exp(-20.0 * np.sum(np.square(x - 0.7))))


def f_additive(x):
    return float(np.sin(np.pi * x[0]) + 0.5 * x[1] ** 2 - 0.3 * x[2])


ORACLES = {
    "ripple": (f_ripple, np.array([[-2.0, 2.0], [-2.0, 2.0]])),
    "step": (f_step, np.array([[-1.0, 1.0], [-1.0, 1.0]])),
    "peak": (f_peak, np.array([[0.0, 1.0], [0.0, 1.0], [0.0, 1.0]])),
    "additive": (f_additive, np.array([[-1.0, 1.0], [-1.0, 1.0], [-1.0, 1.0]])),
}


def sklearn_leaf_count(model: DecisionTreeRegressor) -> int:
    t = model.tree_
    return int(np.sum(t.children_left == -1))


# --------- Runner ---------
def run_benchmark(
    select=None, out_dir="./bench_out", n_trees=10, max_leafs=200, n_test=2000, rs=0
):
    if select is None:
        select = list(ORACLES.keys())
    os.makedirs(out_dir, exist_ok=True)
    rows, stab_rows = [], []

    for name in select:
        oracle, space = ORACLES[name]
        dim = space.shape[0]
        rng = np.random.default_rng(rs)
        X_test = rng.uniform(space[:, 0], space[:, 1], size=(n_test, dim))

        t0 = time.time()
        active = BlackBoxForestRegressor(
            eval_func=oracle,
            space=space,
            n_estimators=n_trees,
            k=dim,
            n_min=2,
            max_leafs=max_leafs,
            min_density=5.0,
            random_state=rs,
        ).fit()
        t_active = time.time() - t0
        budget = active.n_oracle_calls_

        # same budget of uniform samples for the offline learners
        X_uni = rng.uniform(space[:, 0], space[:, 1], size=(budget, dim))
        y_uni = np.array([oracle(x) for x in X_uni])

        t0 = time.time()
        extra = ExtraTreesRegressor(n_estimators=n_trees, n_min=2, random_state=rs).fit(X_uni, y_uni)
        t_extra = time.time() - t0

        t0 = time.time()
        cart = DecisionTreeRegressor(max_leaf_nodes=max_leafs, random_state=rs).fit(X_uni, y_uni)
        t_cart = time.time() - t0

        for model_name, model, leaves, fit_time in [
            ("BB2_FOREST", active, active.count_leaves(), t_active),
            ("EXTRA_TREES(UNIFORM)", extra, extra.count_leaves(), t_extra),
            ("CART(UNIFORM)", cart, sklearn_leaf_count(cart), t_cart),
        ]:
            perf = oracle_accuracy(model, oracle, space, X=X_test)
            rows.append(
                {
                    "Oracle": name,
                    "Model": model_name,
                    "Samples": int(budget),
                    "RMSE": perf["rmse"],
                    "MAE": perf["mae"],
                    "R2": perf["r2"],
                    "Leaves": int(leaves),
                    "FitSec": fit_time,
                }
            )

        for model_name, forest in [("BB2_FOREST", active.forest_), ("EXTRA_TREES(UNIFORM)", extra.forest_)]:
            per_tree = np.array(list(prediction_stability(forest, X_test).values()))
            stab_rows.append(
                {
                    "Oracle": name,
                    "Model": model_name,
                    "mean_tree_rmse_to_mean": float(per_tree.mean()),
                    "max_tree_rmse_to_mean": float(per_tree.max()),
                }
            )

    results = pd.DataFrame(rows)
    stability = pd.DataFrame(stab_rows)
    results.to_csv(os.path.join(out_dir, "growers_results.csv"), index=False)
    stability.to_csv(os.path.join(out_dir, "growers_stability.csv"), index=False)
    return results, stability


if __name__ == "__main__":
    out_dir = "./bench_out"
    res, stab = run_benchmark(out_dir=out_dir)
    print(res.to_string(index=False))
    print("Wrote:", os.path.join(out_dir, "growers_results.csv"))
    print("Wrote:", os.path.join(out_dir, "growers_stability.csv"))
