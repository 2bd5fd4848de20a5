"""Model handle and option contracts.

Pydantic models and Literal-based choice types. Keep imports explicit in most
of the codebase:

    from mlserial.contracts.model_configs import DecisionTreeRegressorConfig

The names re-exported here are a convenience namespace for callers.
"""

from .model_configs import (
    DecisionTreeClassifierConfig,
    DecisionTreeRegressorConfig,
    KNNRegressorConfig,
    ModelConfig,
    PCAConfig,
    RidgeRegressorConfig,
    StandardScalerConfig,
    XGBoostRegressorConfig,
    get_model_meta,
    is_supervised,
)
from .composite_configs import (
    EnsembleModelConfig,
    PipelineConfig,
    StackConfig,
    TunedModelConfig,
)
from .save_options import SaveOptions
from .types import CompressionName, EnvelopeFormat, MeasureName, OperationName

__all__ = [
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
    "PipelineConfig",
    "StackConfig",
    "TunedModelConfig",
    "EnsembleModelConfig",
    "SaveOptions",
    "CompressionName",
    "EnvelopeFormat",
    "MeasureName",
    "OperationName",
]
