"""
Return estimator — one predicted annualized return per bank record.

State machine
-------------
    Untrained ──train() succeeds──▶ Trained
    Untrained ──train() fails / empty input──▶ Untrained

There is no path back from Trained: a second ``train()`` call on a trained
estimator is logged and ignored.

Prediction
----------
Trained   : run the return model on the 4-feature vector. Any inference
            error, or a non-finite output, falls through to the heuristic.
Untrained : heuristic return::

                deposit_rate * multiplier + perturbation

            ``multiplier`` defaults to 1.3. ``perturbation`` is drawn from an
            injected callable and clamped to [-half_width, +half_width]
            (default ±1.0 percentage point). Pass ``perturbation=lambda: 0.0``
            to make the heuristic fully deterministic.

Nothing in this module raises to the caller: training failures, prediction
failures and model-store failures are all logged and absorbed.
"""

from __future__ import annotations

import logging
import math
import random
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from bank_advisor.ml.features import all_finite, build_feature_matrix, build_labels, feature_vector
from bank_advisor.ml.model_store import JoblibModelStore, ModelStore, NullModelStore
from bank_advisor.ml.return_model import MLPReturnModel, ReturnModel, build_return_model
from bank_advisor.models.bank import BankRecord, ReturnSource

if TYPE_CHECKING:
    from bank_advisor.config import ModelConfig

logger = logging.getLogger(__name__)

Perturbation = Callable[[], float]

DEFAULT_MULTIPLIER = 1.3
DEFAULT_HALF_WIDTH = 1.0


@dataclass(frozen=True)
class ReturnEstimate:
    """A predicted return together with the path that produced it."""

    value:  float
    source: ReturnSource


def uniform_perturbation(
    rng: Optional[random.Random] = None,
    half_width: float = DEFAULT_HALF_WIDTH,
) -> Perturbation:
    """Build a perturbation source drawing uniformly from [-half_width, +half_width].

    Args:
        rng: Random generator to draw from. A fresh unseeded ``random.Random``
             is used when omitted; pass a seeded one for reproducible runs.
        half_width: Bound of the perturbation in percentage points.
    """
    generator = rng if rng is not None else random.Random()
    return lambda: generator.uniform(-half_width, half_width)


class ReturnEstimator:
    """Trainable return predictor with a heuristic fallback.

    Args:
        model:        Unfitted ``ReturnModel`` backend (default: MLP).
        model_store:  Where fitted models are saved (default: nowhere).
        perturbation: Heuristic noise source (default: unseeded uniform ±half_width).
        multiplier:   Heuristic deposit-rate multiplier.
        half_width:   Heuristic perturbation bound.
    """

    def __init__(
        self,
        model: Optional[ReturnModel] = None,
        model_store: Optional[ModelStore] = None,
        perturbation: Optional[Perturbation] = None,
        multiplier: float = DEFAULT_MULTIPLIER,
        half_width: float = DEFAULT_HALF_WIDTH,
    ) -> None:
        self._model: ReturnModel = model if model is not None else MLPReturnModel()
        self._store: ModelStore = model_store if model_store is not None else NullModelStore()
        self._perturbation = perturbation or uniform_perturbation(half_width=half_width)
        self._multiplier = multiplier
        self._half_width = half_width
        self._trained = False

    @classmethod
    def from_config(
        cls,
        config: "ModelConfig",
        perturbation: Optional[Perturbation] = None,
    ) -> "ReturnEstimator":
        """Build an estimator from the ``[model]`` config section."""
        model = build_return_model(
            config.backend,
            hidden_layers=config.hidden_layers,
            learning_rate=config.learning_rate,
            epochs=config.epochs,
            seed=config.seed,
        )
        store: ModelStore
        if config.persist:
            store = JoblibModelStore(Path(config.artifact_path))
        else:
            store = NullModelStore()

        if perturbation is None:
            rng = (
                random.Random(config.perturbation_seed)
                if config.perturbation_seed is not None
                else None
            )
            perturbation = uniform_perturbation(rng, config.perturbation_half_width)

        return cls(
            model=model,
            model_store=store,
            perturbation=perturbation,
            multiplier=config.heuristic_multiplier,
            half_width=config.perturbation_half_width,
        )

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def is_trained(self) -> bool:
        """True once a fit has succeeded."""
        return self._trained

    @property
    def backend(self) -> str:
        return getattr(self._model, "name", type(self._model).__name__)

    # ── Training ──────────────────────────────────────────────────────────────

    def train(self, records: Sequence[BankRecord]) -> None:
        """Fit the return model on ``records`` in the order given.

        Empty input, an already-trained estimator and fitting errors all leave
        the call as a logged no-op.
        """
        if self._trained:
            logger.info(
                "Return model already trained; ignoring retrain request.",
                extra={"backend": self.backend},
            )
            return

        if not records:
            logger.info("No records to train on; predictions will use the heuristic.")
            return

        logger.info(
            "Training return model (backend=%s) on %d record(s)", self.backend, len(records),
            extra={"backend": self.backend, "records": len(records)},
        )
        try:
            features = build_feature_matrix(records)
            labels = build_labels(records)
            if not all_finite(features, labels):
                raise ValueError("training data contains NaN or infinite values")
            self._model.fit(features, labels)
        except Exception as exc:
            logger.warning(
                "Return model training failed; using heuristic: %s", exc,
                extra={"backend": self.backend, "records": len(records)},
            )
            self._trained = False
            return

        self._trained = True
        logger.info(
            "Return model trained on %d record(s)", len(records),
            extra={"backend": self.backend, "records": len(records)},
        )
        self._persist(len(records))

    def _persist(self, training_rows: int) -> None:
        try:
            self._store.save(self._model, training_rows)
        except Exception as exc:
            logger.error(
                "Failed to persist return model: %s", exc, extra={"backend": self.backend}
            )

    # ── Prediction ────────────────────────────────────────────────────────────

    def predict_return(self, record: BankRecord) -> float:
        """Predicted annualized return in percent. Always finite, never raises."""
        return self.estimate(record).value

    def estimate(self, record: BankRecord) -> ReturnEstimate:
        """Predicted return plus whether the model or the heuristic produced it."""
        if self._trained:
            try:
                value = self._model.predict([feature_vector(record)])[0]
            except Exception as exc:
                logger.warning(
                    "Prediction failed for %s; using heuristic: %s", record.bank_name, exc,
                    extra={"bank": record.bank_name, "backend": self.backend},
                )
            else:
                if math.isfinite(value):
                    return ReturnEstimate(value=float(value), source="model")
                logger.warning(
                    "Non-finite prediction for %s; using heuristic.", record.bank_name,
                    extra={"bank": record.bank_name, "backend": self.backend},
                )

        return ReturnEstimate(value=self.heuristic_return(record), source="heuristic")

    def heuristic_return(self, record: BankRecord) -> float:
        """``deposit_rate * multiplier`` plus a bounded perturbation.

        The base saturates at ``sys.float_info.max`` so the result stays
        finite for any valid record.
        """
        base = record.deposit_rate * self._multiplier
        if not math.isfinite(base):
            logger.warning(
                "Heuristic return overflowed for %s; capping at float max.",
                record.bank_name,
                extra={"bank": record.bank_name, "source": "heuristic"},
            )
            base = sys.float_info.max
        try:
            noise = float(self._perturbation())
        except Exception as exc:
            logger.warning("Perturbation source failed; using 0: %s", exc)
            noise = 0.0
        if not math.isfinite(noise):
            noise = 0.0
        noise = max(-self._half_width, min(self._half_width, noise))
        return min(base + noise, sys.float_info.max)
