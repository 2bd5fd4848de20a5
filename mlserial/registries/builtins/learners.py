"""Built-in learner registrations."""

from __future__ import annotations

from sklearn.decomposition import PCA
from sklearn.linear_model import Ridge
from sklearn.neighbors import KNeighborsRegressor
from sklearn.preprocessing import StandardScaler
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from mlserial.registries.learners import register_learner

from mlserial.contracts.composite_configs import (
    EnsembleModelConfig,
    PipelineConfig,
    StackConfig,
    TunedModelConfig,
)
from mlserial.contracts.model_configs import (
    DecisionTreeClassifierConfig,
    DecisionTreeRegressorConfig,
    KNNRegressorConfig,
    PCAConfig,
    RidgeRegressorConfig,
    StandardScalerConfig,
    XGBoostRegressorConfig,
)

from mlserial.components.learners.ensembles import EnsembleLearner
from mlserial.components.learners.pipeline import PipelineLearner
from mlserial.components.learners.sklearn import SklearnLearner
from mlserial.components.learners.stack import StackLearner
from mlserial.components.learners.tuning import TunedModelLearner
from mlserial.components.learners.xgboost import XGBoostRegressorLearner


# sklearn-backed handles: the fitted estimator is the fitresult
register_learner(DecisionTreeRegressorConfig)(SklearnLearner(DecisionTreeRegressor))
register_learner(DecisionTreeClassifierConfig)(SklearnLearner(DecisionTreeClassifier))
register_learner(RidgeRegressorConfig)(SklearnLearner(Ridge))
register_learner(KNNRegressorConfig)(SklearnLearner(KNeighborsRegressor))
register_learner(StandardScalerConfig)(SklearnLearner(StandardScaler))
register_learner(PCAConfig)(SklearnLearner(PCA))

# native
register_learner(XGBoostRegressorConfig)(XGBoostRegressorLearner())

# composites
register_learner(PipelineConfig)(PipelineLearner())
register_learner(StackConfig)(StackLearner())

# wrappers
register_learner(TunedModelConfig)(TunedModelLearner())
register_learner(EnsembleModelConfig)(EnsembleLearner())
