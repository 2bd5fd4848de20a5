from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from .model_configs import ModelConfig, is_supervised
from .types import MeasureName


# -----------------------------
# Composites (fitted state is a learning network)
# -----------------------------

class PipelineConfig(ModelConfig):
    """Linear chain of transformers, optionally ending in a supervised model.

    Notes:
      - `names` is optional; step names are derived from the algo tags otherwise.
      - Only the final step may be supervised.
    """

    algo: Literal["pipeline"] = "pipeline"

    family: ClassVar[str] = "composite"
    is_composite: ClassVar[bool] = True

    steps: List[ModelConfig] = Field(min_length=1)
    names: Optional[List[str]] = None

    @model_validator(mode="after")
    def _check_steps(self) -> "PipelineConfig":
        for step in self.steps[:-1]:
            if is_supervised(step):
                raise ValueError(f"Only the final pipeline step may be supervised (got {step.algo!r}).")
        if self.names is not None and len(self.names) != len(self.steps):
            raise ValueError("Pipeline 'names' must have one entry per step.")
        return self

    def task_kind(self) -> str:
        return self.steps[-1].task_kind()

    def step_names(self) -> List[str]:
        if self.names is not None:
            return list(self.names)
        seen: Dict[str, int] = {}
        out: List[str] = []
        for step in self.steps:
            n = seen.get(step.algo, 0) + 1
            seen[step.algo] = n
            out.append(step.algo if n == 1 else f"{step.algo}_{n}")
        return out


class StackConfig(ModelConfig):
    """Stacked ensemble.

    Each base model is trained on k-1 folds and predicts the held-out fold; the
    out-of-fold predictions train the metalearner. Base models are finally
    retrained on all rows for the prediction path.
    """

    algo: Literal["stack"] = "stack"

    family: ClassVar[str] = "composite"
    is_composite: ClassVar[bool] = True

    metalearner: ModelConfig
    models: Dict[str, ModelConfig] = Field(min_length=1)
    n_folds: int = Field(default=3, ge=2)
    seed: Optional[int] = 0

    @field_validator("models")
    @classmethod
    def _members_supervised(cls, v: Dict[str, ModelConfig]) -> Dict[str, ModelConfig]:
        for name, member in v.items():
            if not is_supervised(member):
                raise ValueError(f"Stack member {name!r} must be supervised (got {member.algo!r}).")
        return v

    def task_kind(self) -> str:
        return self.metalearner.task_kind()


# -----------------------------
# Wrappers (fitted state wraps other fitted state)
# -----------------------------

class TunedModelConfig(ModelConfig):
    """Grid search over top-level hyperparameters of `model`.

    The fitted state is a machine for the best configuration, retrained on all rows.
    """

    algo: Literal["tuned_model"] = "tuned_model"

    family: ClassVar[str] = "wrapper"

    model: ModelConfig
    param_grid: Dict[str, List[Any]] = Field(min_length=1)
    n_folds: int = Field(default=3, ge=2)
    measure: MeasureName = "rmse"
    seed: Optional[int] = 0

    @model_validator(mode="after")
    def _check_grid(self) -> "TunedModelConfig":
        fields = type(self.model).model_fields
        unknown = [k for k in self.param_grid if k not in fields or k == "algo"]
        if unknown:
            raise ValueError(f"param_grid names unknown hyperparameters of {self.model.algo!r}: {unknown}")
        return self

    def task_kind(self) -> str:
        return self.model.task_kind()


class EnsembleModelConfig(ModelConfig):
    """Bagged ensemble of `n` copies of an atomic model."""

    algo: Literal["ensemble"] = "ensemble"

    family: ClassVar[str] = "wrapper"

    model: ModelConfig
    n: int = Field(default=10, ge=1)
    bagging_fraction: float = Field(default=0.8, gt=0.0, le=1.0)
    seed: Optional[int] = 0

    def task_kind(self) -> str:
        return self.model.task_kind()


__all__ = [
    "PipelineConfig",
    "StackConfig",
    "TunedModelConfig",
    "EnsembleModelConfig",
]
