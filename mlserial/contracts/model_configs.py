from __future__ import annotations

from typing import ClassVar, Literal, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field


class ModelMeta(TypedDict):
    task: str
    family: str
    composite: bool


class ModelConfig(BaseModel):
    """Base class of every model handle.

    A model handle only describes an algorithm and its hyperparameters. It is
    immutable; learned state lives on the machine that binds the handle to data.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    algo: str

    task: ClassVar[str] = "regression"
    family: ClassVar[str] = "other"
    is_composite: ClassVar[bool] = False

    def task_kind(self) -> str:
        """Return the task this handle solves; wrappers defer to what they wrap."""
        return type(self).task


def get_model_meta(model_cfg: ModelConfig) -> ModelMeta:
    cls = model_cfg.__class__
    return {
        "task": model_cfg.task_kind(),
        "family": getattr(cls, "family", "other"),
        "composite": bool(getattr(cls, "is_composite", False)),
    }


def is_supervised(model_cfg: ModelConfig) -> bool:
    return model_cfg.task_kind() in ("regression", "classification")


# -----------------------------
# Trees
# -----------------------------

class DecisionTreeRegressorConfig(ModelConfig):
    algo: Literal["tree_regressor"] = "tree_regressor"

    task: ClassVar[str] = "regression"
    family: ClassVar[str] = "trees"

    criterion: Literal["squared_error", "friedman_mse", "absolute_error", "poisson"] = "squared_error"
    max_depth: Optional[int] = Field(default=None, ge=1)
    min_samples_split: int = Field(default=2, ge=2)
    min_samples_leaf: int = Field(default=1, ge=1)
    random_state: Optional[int] = 0


class DecisionTreeClassifierConfig(ModelConfig):
    algo: Literal["tree_classifier"] = "tree_classifier"

    task: ClassVar[str] = "classification"
    family: ClassVar[str] = "trees"

    criterion: Literal["gini", "entropy", "log_loss"] = "gini"
    max_depth: Optional[int] = Field(default=None, ge=1)
    min_samples_split: int = Field(default=2, ge=2)
    min_samples_leaf: int = Field(default=1, ge=1)
    random_state: Optional[int] = 0


# -----------------------------
# Linear / neighbors
# -----------------------------

class RidgeRegressorConfig(ModelConfig):
    algo: Literal["ridge"] = "ridge"

    task: ClassVar[str] = "regression"
    family: ClassVar[str] = "linear"

    alpha: float = Field(default=1.0, ge=0.0)
    fit_intercept: bool = True


class KNNRegressorConfig(ModelConfig):
    algo: Literal["knn_regressor"] = "knn_regressor"

    task: ClassVar[str] = "regression"
    family: ClassVar[str] = "neighbors"

    n_neighbors: int = Field(default=5, ge=1)
    weights: Literal["uniform", "distance"] = "uniform"
    p: Union[int, float] = 2


# -----------------------------
# Transformers
# -----------------------------

class StandardScalerConfig(ModelConfig):
    algo: Literal["standard_scaler"] = "standard_scaler"

    task: ClassVar[str] = "transformer"
    family: ClassVar[str] = "preprocessing"

    with_mean: bool = True
    with_std: bool = True


class PCAConfig(ModelConfig):
    algo: Literal["pca"] = "pca"

    task: ClassVar[str] = "transformer"
    family: ClassVar[str] = "decomposition"

    n_components: Optional[int] = Field(default=None, ge=1)
    whiten: bool = False
    random_state: Optional[int] = 0


# -----------------------------
# Native (opaque fitted state)
# -----------------------------

class XGBoostRegressorConfig(ModelConfig):
    """Gradient boosted trees trained by the xgboost C library.

    The fitted state is an ``xgboost.Booster`` handle, persisted through a side
    file rather than inside the envelope.
    """

    algo: Literal["xgboost_regressor"] = "xgboost_regressor"

    task: ClassVar[str] = "regression"
    family: ClassVar[str] = "native"

    n_estimators: int = Field(default=50, ge=1)
    learning_rate: float = Field(default=0.3, gt=0.0)
    max_depth: int = Field(default=3, ge=1)
    subsample: float = Field(default=1.0, gt=0.0, le=1.0)
    reg_lambda: float = Field(default=1.0, ge=0.0)
    reg_alpha: float = Field(default=0.0, ge=0.0)
    random_state: int = 0
    n_jobs: int = 1


__all__ = [
    "ModelMeta",
    "ModelConfig",
    "get_model_meta",
    "is_supervised",
    "DecisionTreeRegressorConfig",
    "DecisionTreeClassifierConfig",
    "RidgeRegressorConfig",
    "KNNRegressorConfig",
    "StandardScalerConfig",
    "PCAConfig",
    "XGBoostRegressorConfig",
]
