"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``BANK_ADVISOR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI and the advice pipeline receive an ``AppConfig`` instance; library
modules take the individual values they need as constructor arguments.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

VALID_BACKENDS: frozenset[str] = frozenset({"mlp", "lightgbm"})

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Filesystem paths for the rate history and report outputs."""

    model_config = ConfigDict(frozen=True)

    history_file: str = "data/bank_data.csv"
    recommendations_file: str = "data/outputs/recommendations.txt"


class ModelConfig(BaseModel):
    """Return-model hyperparameters, artifact path and heuristic settings."""

    model_config = ConfigDict(frozen=True)

    backend: str = "mlp"
    artifact_path: str = "models/rate_predictor.joblib"
    epochs: int = 500
    learning_rate: float = 0.001
    hidden_layers: list[int] = [10, 10]
    seed: int = 12345
    persist: bool = True
    heuristic_multiplier: float = 1.3
    perturbation_half_width: float = 1.0
    perturbation_seed: Optional[int] = None

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_BACKENDS:
            raise ValueError(f"Model backend must be one of {sorted(VALID_BACKENDS)}, got '{v}'.")
        return v

    @field_validator("epochs")
    @classmethod
    def validate_epochs(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"epochs must be > 0, got {v}.")
        return v

    @field_validator("hidden_layers")
    @classmethod
    def validate_hidden_layers(cls, v: list[int]) -> list[int]:
        if not v or any(n <= 0 for n in v):
            raise ValueError(f"hidden_layers must be a non-empty list of positive ints, got {v}.")
        return v

    @field_validator("perturbation_half_width")
    @classmethod
    def validate_half_width(cls, v: float) -> float:
        if v < 0:
            raise ValueError("perturbation_half_width must be non-negative.")
        return v


class RecommendConfig(BaseModel):
    """Ranking and report settings."""

    model_config = ConfigDict(frozen=True)

    top_n: int = 5
    fallback_top_n: int = 3
    currency: str = "RUB"

    @field_validator("top_n", "fallback_top_n")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Recommendation list sizes must be > 0, got {v}.")
        return v


class ScraperConfig(BaseModel):
    """Bank homepages to scan and HTTP client settings."""

    model_config = ConfigDict(frozen=True)

    sources: list[str] = [
        "https://www.sberbank.ru/",
        "https://www.vtb.ru/",
        "https://www.tinkoff.ru/",
        "https://www.alfabank.ru/",
        "https://www.gazprombank.ru/",
        "https://www.raiffeisen.ru/",
        "https://www.open.ru/",
        "https://www.mkb.ru/",
    ]
    timeout_s: float = 20.0
    delay_s: float = 2.0
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    verify_ssl: bool = True


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/bank_advisor.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    model: ModelConfig = ModelConfig()
    recommend: RecommendConfig = RecommendConfig()
    scraper: ScraperConfig = ScraperConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply BANK_ADVISOR_* env vars to the raw config dict.

    Supported overrides:
      BANK_ADVISOR_HISTORY_FILE   → raw["data"]["history_file"]
      BANK_ADVISOR_MODEL_BACKEND  → raw["model"]["backend"]
      BANK_ADVISOR_LOG_LEVEL      → raw["logging"]["level"]
      BANK_ADVISOR_DEBUG          → raw["debug"]
    """
    if history_file := os.environ.get("BANK_ADVISOR_HISTORY_FILE"):
        raw.setdefault("data", {})["history_file"] = history_file

    if backend := os.environ.get("BANK_ADVISOR_MODEL_BACKEND"):
        raw.setdefault("model", {})["backend"] = backend

    if log_level := os.environ.get("BANK_ADVISOR_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("BANK_ADVISOR_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        model=ModelConfig(**raw.get("model", {})),
        recommend=RecommendConfig(**raw.get("recommend", {})),
        scraper=ScraperConfig(**raw.get("scraper", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
