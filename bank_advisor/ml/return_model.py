"""
Return-model backends.

The estimator only depends on the ``ReturnModel`` protocol — any object with
``name``, ``fit(features, labels)`` and ``predict(features)`` can back it.

Backends
--------
MLPReturnModel (default, ``backend = "mlp"``)
    scikit-learn ``MLPRegressor``: 4 → 10 → 10 → 1, ReLU hidden layers,
    identity output, Adam, squared loss. Trained full-batch in table order
    (``shuffle=False``) for exactly ``epochs`` passes with a fixed
    ``random_state``; the same input order always yields the same weights.

LightGBMReturnModel (``backend = "lightgbm"``)
    Gradient-boosted trees, one boosting round per epoch, ``seed`` fixed and
    ``deterministic=True``. Leaf/bin minimums are 1 so the handful of banks
    in a typical run can still be split.

Heavy libraries are imported inside ``fit()`` / ``predict()`` so importing
this module stays cheap.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, Protocol, Sequence, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ReturnModel(Protocol):
    """Anything that can learn a feature matrix → return mapping."""

    name: str

    def fit(self, features: Sequence[Sequence[float]], labels: Sequence[float]) -> None:
        ...

    def predict(self, features: Sequence[Sequence[float]]) -> list[float]:
        ...


class MLPReturnModel:
    """Small feed-forward regressor backed by scikit-learn."""

    name = "mlp"

    def __init__(
        self,
        hidden_layers: Sequence[int] = (10, 10),
        learning_rate: float = 0.001,
        epochs: int = 500,
        seed: int = 12345,
    ) -> None:
        self.hidden_layers = tuple(hidden_layers)
        self.learning_rate = learning_rate
        self.epochs = epochs
        self.seed = seed
        self._regressor: Any = None

    @property
    def is_fitted(self) -> bool:
        return self._regressor is not None

    def fit(self, features: Sequence[Sequence[float]], labels: Sequence[float]) -> None:
        import numpy as np
        from sklearn.exceptions import ConvergenceWarning
        from sklearn.neural_network import MLPRegressor

        X = np.asarray(features, dtype=np.float64)
        y = np.asarray(labels, dtype=np.float64)
        if X.ndim != 2 or X.shape[0] == 0:
            raise ValueError(f"Expected a non-empty 2-D feature matrix, got shape {X.shape}.")

        regressor = MLPRegressor(
            hidden_layer_sizes=self.hidden_layers,
            activation="relu",
            solver="adam",
            alpha=0.0,
            batch_size=X.shape[0],
            learning_rate_init=self.learning_rate,
            max_iter=self.epochs,
            shuffle=False,
            random_state=self.seed,
            tol=0.0,
            n_iter_no_change=self.epochs,
        )
        # max_iter is the epoch budget, not a convergence target.
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            regressor.fit(X, y)

        self._regressor = regressor
        logger.debug(
            "MLP fitted: %d epoch(s), final loss=%.6f", regressor.n_iter_, regressor.loss_
        )

    def predict(self, features: Sequence[Sequence[float]]) -> list[float]:
        if self._regressor is None:
            raise RuntimeError("MLPReturnModel.predict() called before fit().")

        import numpy as np

        X = np.asarray(features, dtype=np.float64)
        return [float(p) for p in np.ravel(self._regressor.predict(X))]


class LightGBMReturnModel:
    """Gradient-boosted tree regressor backed by LightGBM."""

    name = "lightgbm"

    def __init__(
        self,
        epochs: int = 500,
        seed: int = 12345,
        learning_rate: float = 0.05,
        num_leaves: int = 31,
    ) -> None:
        self.epochs = epochs
        self.seed = seed
        self._params: dict[str, Any] = {
            "objective":        "regression",
            "metric":           "l2",
            "learning_rate":    learning_rate,
            "num_leaves":       num_leaves,
            "min_data_in_leaf": 1,
            "min_data_in_bin":  1,
            "seed":             seed,
            "deterministic":    True,
            "force_row_wise":   True,
            "num_threads":      1,
            "verbose":          -1,
        }
        self._booster: Any = None

    @property
    def is_fitted(self) -> bool:
        return self._booster is not None

    def fit(self, features: Sequence[Sequence[float]], labels: Sequence[float]) -> None:
        import lightgbm as lgb
        import numpy as np

        from bank_advisor.ml.features import FEATURE_COLS

        X = np.asarray(features, dtype=np.float64)
        y = np.asarray(labels, dtype=np.float64)
        if X.ndim != 2 or X.shape[0] == 0:
            raise ValueError(f"Expected a non-empty 2-D feature matrix, got shape {X.shape}.")

        dtrain = lgb.Dataset(
            X,
            label=y,
            feature_name=FEATURE_COLS,
            params={"min_data_in_bin": 1, "verbose": -1},
            free_raw_data=False,
        )
        self._booster = lgb.train(
            self._params,
            dtrain,
            num_boost_round=self.epochs,
            callbacks=[lgb.log_evaluation(period=-1)],
        )

    def predict(self, features: Sequence[Sequence[float]]) -> list[float]:
        if self._booster is None:
            raise RuntimeError("LightGBMReturnModel.predict() called before fit().")

        import numpy as np

        X = np.asarray(features, dtype=np.float64)
        return [float(p) for p in self._booster.predict(X)]


def build_return_model(
    backend: str,
    hidden_layers: Sequence[int] = (10, 10),
    learning_rate: float = 0.001,
    epochs: int = 500,
    seed: int = 12345,
) -> ReturnModel:
    """Construct an unfitted backend by name.

    ``learning_rate`` applies to the MLP only; LightGBM keeps its own
    shrinkage default since 0.001 barely moves a boosted ensemble.

    Raises:
        ValueError: Unknown backend name.
    """
    if backend == "mlp":
        return MLPReturnModel(
            hidden_layers=hidden_layers,
            learning_rate=learning_rate,
            epochs=epochs,
            seed=seed,
        )
    if backend == "lightgbm":
        return LightGBMReturnModel(epochs=epochs, seed=seed)
    raise ValueError(f"Unknown return-model backend '{backend}'.")
