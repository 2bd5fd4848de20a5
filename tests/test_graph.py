"""
Network rewrite of composite fitresults: sharing, pruning, nested data removal.
"""

import numpy as np
import pytest

from mlserial import machine, serializable
from mlserial.contracts import (
    DecisionTreeRegressorConfig,
    KNNRegressorConfig,
    PipelineConfig,
    RidgeRegressorConfig,
    StackConfig,
    StandardScalerConfig,
    TunedModelConfig,
)
from mlserial.io.graph import rewrite_composite
from mlserial.io.restore import restore
from mlserial.network import CompositeFitresult, Machine, Source, node, reachable_nodes, source
from mlserial.network.machines import SNAPSHOT_STATE
from mlserial.network.operations import fit_network, predict, transform


def _stack_model():
    return StackConfig(
        metalearner=RidgeRegressorConfig(),
        models={
            "tree": DecisionTreeRegressorConfig(max_depth=3),
            "pipe": PipelineConfig(steps=[StandardScalerConfig(), KNNRegressorConfig(n_neighbors=3)]),
        },
        n_folds=3,
    )


class TestGraphRewrite:

    def test_machine_count_is_preserved(self, regression_data):
        X, y = regression_data
        mach = machine(_stack_model(), X, y).fit(verbosity=0)
        snap = serializable(None, mach)
        assert len(snap.fitresult.machines()) == len(mach.fitresult.machines())

    def test_pipeline_machine_count_is_preserved(self, regression_data):
        X, y = regression_data
        model = PipelineConfig(steps=[StandardScalerConfig(), RidgeRegressorConfig()])
        mach = machine(model, X, y).fit(verbosity=0)
        snap = serializable(None, mach)
        assert len(snap.fitresult.machines()) == len(mach.fitresult.machines()) == 2

    def test_sources_are_fresh_and_empty(self, regression_data):
        X, y = regression_data
        mach = machine(_stack_model(), X, y).fit(verbosity=0)
        snap = serializable(None, mach)
        old_sources = {id(n) for n in mach.fitresult.nodes() if isinstance(n, Source)}
        new_sources = [n for n in snap.fitresult.nodes() if isinstance(n, Source)]
        assert new_sources
        assert all(n.is_empty for n in new_sources)
        assert not old_sources & {id(n) for n in new_sources}

    def test_nested_composites_hold_no_data(self, regression_data):
        X, y = regression_data
        mach = machine(_stack_model(), X, y).fit(verbosity=0)
        snap = serializable(None, mach)
        checked = 0
        for m in snap.fitresult.machines():
            assert m.data == ()
            assert m.resampled_data == ()
            assert m.state == SNAPSHOT_STATE
            if isinstance(m.fitresult, CompositeFitresult):
                for inner in m.fitresult.machines():
                    assert inner.data == ()
                    assert inner.resampled_data == ()
                    checked += 1
                    assert all(n.is_empty for n in m.fitresult.nodes() if isinstance(n, Source))
        # the pipeline member: 3 fold machines + 1 full machine, 2 steps each
        assert checked == 4 * 2

    def test_original_is_not_mutated(self, regression_data):
        X, y = regression_data
        mach = machine(_stack_model(), X, y).fit(verbosity=0)
        before = [m.data for m in mach.fitresult.machines()]
        serializable(None, mach)
        after = [m.data for m in mach.fitresult.machines()]
        assert all(a is b for a, b in zip(before, after))
        assert all(m.state >= 1 for m in mach.fitresult.machines())

    def test_report_additions_are_carried(self, regression_data):
        X, y = regression_data
        mach = machine(_stack_model(), X, y).fit(verbosity=0)
        snap = serializable(None, mach)
        assert snap.fitresult.report_additions == mach.fitresult.report_additions
        assert set(snap.fitresult.report_nodes()) == {"cv_report"}

    def test_stack_roundtrip_predictions(self, regression_data):
        X, y = regression_data
        mach = machine(_stack_model(), X, y).fit(verbosity=0)
        snap = restore(serializable(None, mach))
        np.testing.assert_allclose(snap.predict(X[:7]), mach.predict(X[:7]))

    def test_tuned_pipeline_inner_network_is_rewritten(self, regression_data):
        X, y = regression_data
        model = TunedModelConfig(
            model=PipelineConfig(steps=[StandardScalerConfig(), RidgeRegressorConfig()]),
            param_grid={"names": [None, ["scale", "fit"]]},
        )
        mach = machine(model, X, y).fit(verbosity=0)
        snap = serializable(None, mach)
        for m in snap.fitresult.fitresult.machines():
            assert m.data == ()
        restore(snap)
        np.testing.assert_allclose(snap.predict(X), mach.predict(X))


class TestSharingAndPruning:

    @pytest.fixture
    def shared_network(self, regression_data):
        """One scaler machine feeding two downstream machines."""
        X, y = regression_data
        Xs, ys = source(X), source(y)
        scaler = Machine(StandardScalerConfig(), Xs)
        W = transform(scaler, Xs)
        ridge = Machine(RidgeRegressorConfig(), W, ys)
        tree = Machine(DecisionTreeRegressorConfig(max_depth=2), W, ys)
        yhat = predict(ridge, W)
        diag = node(np.mean, predict(tree, W))
        unused = predict(Machine(KNNRegressorConfig(), Xs, ys), Xs)
        fit_network(yhat, diag, unused)
        fitresult = CompositeFitresult({"predict": yhat, "report": {"mean_tree_prediction": diag}})
        return fitresult, scaler, unused

    def test_shared_machine_is_translated_once(self, shared_network):
        fitresult, _, _ = shared_network
        new = rewrite_composite(fitresult, None)
        scalers = [m for m in new.machines() if m.model.algo == "standard_scaler"]
        assert len(scalers) == 1
        assert len(new.machines()) == len(fitresult.machines()) == 3
        # both downstream machines read the same translated transform node
        ridge = next(m for m in new.machines() if m.model.algo == "ridge")
        tree = next(m for m in new.machines() if m.model.algo == "tree_regressor")
        assert ridge.args[0] is tree.args[0]
        assert ridge.args[0].machine is scalers[0]

    def test_equal_but_distinct_machines_stay_distinct(self, regression_data):
        X, y = regression_data
        Xs, ys = source(X), source(y)
        a = Machine(RidgeRegressorConfig(), Xs, ys)
        b = Machine(RidgeRegressorConfig(), Xs, ys)
        out = node(lambda u, v: u + v, predict(a, Xs), predict(b, Xs))
        fit_network(out)
        new = rewrite_composite(CompositeFitresult({"predict": out}), None)
        assert len(new.machines()) == 2

    def test_unreachable_nodes_are_pruned(self, shared_network):
        fitresult, _, unused = shared_network
        new = rewrite_composite(fitresult, None)
        assert "knn_regressor" not in {m.model.algo for m in new.machines()}
        assert len(reachable_nodes(*new.output_nodes())) == len(fitresult.nodes())
