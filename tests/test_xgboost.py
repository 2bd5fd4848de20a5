"""
Opaque native fitted state: xgboost boosters persisted through side files.
"""

import io

import numpy as np
import pytest

xgb = pytest.importorskip("xgboost")

from mlserial import machine, save, serializable  # noqa: E402
from mlserial.contracts import (  # noqa: E402
    DecisionTreeRegressorConfig,
    EnsembleModelConfig,
    KNNRegressorConfig,
    RidgeRegressorConfig,
    StackConfig,
    XGBoostRegressorConfig,
)
from mlserial.errors import SideFileNotFoundError  # noqa: E402
from mlserial.io.sidefiles import EmbeddedNative, SideFileRef  # noqa: E402


def _stack_model():
    return StackConfig(
        metalearner=RidgeRegressorConfig(),
        models={
            "tree": DecisionTreeRegressorConfig(max_depth=3),
            "knn": KNNRegressorConfig(n_neighbors=3),
            "xgb": XGBoostRegressorConfig(n_estimators=10),
        },
        n_folds=3,
    )


def _members(fitresult, algo):
    return [m for m in fitresult.machines() if m.model.algo == algo]


class TestXGBoostMachine:

    def test_side_file_roundtrip(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(XGBoostRegressorConfig(n_estimators=10), X, y).fit(verbosity=0)
        save("boost.joblib", mach, verbosity=0)

        side_files = list(workdir.glob("boost.*.xgboost.ubj"))
        assert len(side_files) == 1

        loaded = machine("boost.joblib")
        assert isinstance(loaded.fitresult, xgb.Booster)
        np.testing.assert_allclose(loaded.predict(X), mach.predict(X), rtol=1e-6)

    def test_snapshot_holds_side_file_reference(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(XGBoostRegressorConfig(n_estimators=5), X, y).fit(verbosity=0)
        snap = serializable("boost.joblib", mach)
        assert isinstance(snap.fitresult, SideFileRef)
        assert snap.fitresult.tag == "xgboost"
        assert snap.fitresult.name.startswith("boost.")

    def test_embedded_booster_writes_no_side_file(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(XGBoostRegressorConfig(n_estimators=5), X, y).fit(verbosity=0)
        snap = serializable("boost.joblib", mach, xgboost_embed=True)
        assert isinstance(snap.fitresult, EmbeddedNative)

        buf = io.BytesIO()
        save(buf, mach, xgboost_embed=True, verbosity=0)
        assert not list(workdir.glob("*.ubj"))
        buf.seek(0)
        np.testing.assert_allclose(machine(buf).predict(X), mach.predict(X), rtol=1e-6)

    def test_anonymous_stream_warns_and_writes_to_working_directory(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(XGBoostRegressorConfig(n_estimators=5), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        with pytest.warns(UserWarning, match="xgboost_embed"):
            save(buf, mach, verbosity=0)
        assert len(list(workdir.glob("*.xgboost.ubj"))) == 1
        buf.seek(0)
        np.testing.assert_allclose(machine(buf).predict(X), mach.predict(X), rtol=1e-6)

    def test_moved_envelope_finds_side_file_next_to_it(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(XGBoostRegressorConfig(n_estimators=5), X, y).fit(verbosity=0)
        save("boost.joblib", mach, verbosity=0)

        moved = workdir / "moved"
        moved.mkdir()
        for p in list(workdir.glob("boost*")):
            p.rename(moved / p.name)

        loaded = machine(str(moved / "boost.joblib"))
        np.testing.assert_allclose(loaded.predict(X), mach.predict(X), rtol=1e-6)

    def test_missing_side_file(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(XGBoostRegressorConfig(n_estimators=5), X, y).fit(verbosity=0)
        save("boost.joblib", mach, verbosity=0)
        for p in workdir.glob("*.ubj"):
            p.unlink()
        with pytest.raises(SideFileNotFoundError):
            machine("boost.joblib")


class TestXGBoostInComposites:

    def test_stack_member_is_side_file_reference(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(_stack_model(), X, y).fit(verbosity=0)
        snap = serializable("stack.joblib", mach)

        xgb_members = _members(snap.fitresult, "xgboost_regressor")
        assert len(xgb_members) == 3 + 1
        assert all(isinstance(m.fitresult, SideFileRef) for m in xgb_members)
        for algo in ("tree_regressor", "knn_regressor", "ridge"):
            for m in _members(snap.fitresult, algo):
                assert not isinstance(m.fitresult, (SideFileRef, EmbeddedNative))
                assert hasattr(m.fitresult, "predict")

        # distinct side file per booster
        names = {m.fitresult.name for m in xgb_members}
        assert len(names) == len(xgb_members)

    def test_stack_roundtrip(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(_stack_model(), X, y).fit(verbosity=0)
        save("stack.joblib", mach, verbosity=0)
        loaded = machine("stack.joblib")
        assert all(isinstance(m.fitresult, xgb.Booster) for m in _members(loaded.fitresult, "xgboost_regressor"))
        np.testing.assert_allclose(loaded.predict(X), mach.predict(X), rtol=1e-6)

    def test_ensemble_of_boosters(self, regression_data, workdir):
        X, y = regression_data
        model = EnsembleModelConfig(model=XGBoostRegressorConfig(n_estimators=5), n=3)
        mach = machine(model, X, y).fit(verbosity=0)
        snap = serializable("bag.joblib", mach)
        assert all(isinstance(fr, SideFileRef) for fr in snap.fitresult.ensemble)

        save("bag.joblib", mach, verbosity=0)
        loaded = machine("bag.joblib")
        np.testing.assert_allclose(loaded.predict(X), mach.predict(X), rtol=1e-6)
