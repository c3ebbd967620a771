"""
Model store — best-effort persistence of the fitted return model.

The estimator talks to a ``ModelStore`` port so its training and prediction
logic can be exercised without any file on disk (``NullModelStore``).

``JoblibModelStore`` writes a single artifact at a fixed path::

    {
        "model":          <fitted ReturnModel>,
        "backend":        "mlp",
        "feature_cols":   ["deposit_rate", "loan_rate", "prior_return", "term_years"],
        "training_rows":  8,
        "trained_at":     "2026-10-19",
        "model_version":  "v0.3.0",
    }

Both directions raise ``ModelStoreError`` on failure; callers that must not
fail (the estimator) catch and log it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional, Protocol

from bank_advisor.exceptions import ModelStoreError
from bank_advisor.ml.features import FEATURE_COLS

logger = logging.getLogger(__name__)

MODEL_VERSION = "v0.3.0"


@dataclass(frozen=True)
class StoredModel:
    """A model artifact as read back from the store."""

    model:         Any
    backend:       str
    feature_cols:  list[str]
    training_rows: int
    trained_at:    str
    model_version: str


class ModelStore(Protocol):
    """Persistence port for fitted return models."""

    def save(self, model: Any, training_rows: int) -> None:
        ...

    def load(self) -> Optional[StoredModel]:
        ...


class NullModelStore:
    """Store that keeps nothing. Used when persistence is disabled."""

    def save(self, model: Any, training_rows: int) -> None:
        return None

    def load(self) -> Optional[StoredModel]:
        return None


class JoblibModelStore:
    """Joblib artifact at a fixed path.

    Attributes:
        path: Artifact location; parent directories are created on save.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def save(self, model: Any, training_rows: int) -> None:
        """Serialize ``model`` plus provenance metadata.

        Raises:
            ModelStoreError: The artifact could not be written.
        """
        import joblib

        state = {
            "model":         model,
            "backend":       getattr(model, "name", type(model).__name__),
            "feature_cols":  list(FEATURE_COLS),
            "training_rows": training_rows,
            "trained_at":    date.today().isoformat(),
            "model_version": MODEL_VERSION,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            joblib.dump(state, self.path)
        except Exception as exc:
            raise ModelStoreError(f"Could not save model to {self.path}: {exc}") from exc
        logger.info("Model artifact saved: %s", self.path)

    def load(self) -> Optional[StoredModel]:
        """Read the artifact back.

        Returns:
            ``StoredModel``, or ``None`` when no artifact exists yet.

        Raises:
            ModelStoreError: The file exists but cannot be read.
        """
        import joblib

        if not self.path.exists():
            return None
        try:
            state = joblib.load(self.path)
            stored = StoredModel(
                model=state["model"],
                backend=state.get("backend", "unknown"),
                feature_cols=list(state.get("feature_cols", [])),
                training_rows=int(state.get("training_rows", 0)),
                trained_at=str(state.get("trained_at", "")),
                model_version=str(state.get("model_version", "")),
            )
        except Exception as exc:
            raise ModelStoreError(f"Could not load model from {self.path}: {exc}") from exc
        logger.info(
            "Model artifact loaded: %s (backend=%s, trained=%s)",
            self.path, stored.backend, stored.trained_at,
        )
        return stored
