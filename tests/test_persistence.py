"""
Saving to and loading from paths and streams.
"""

import gzip
import io

import numpy as np
import pytest

from mlserial import machine, predict, save
from mlserial.contracts import (
    DecisionTreeClassifierConfig,
    DecisionTreeRegressorConfig,
    PipelineConfig,
    RidgeRegressorConfig,
    SaveOptions,
    StackConfig,
    StandardScalerConfig,
)
from mlserial.errors import (
    InvalidArgumentError,
    MachineLoadError,
    UntrainedMachineError,
)
from mlserial.io.envelope import MAGIC_KEY, decode_envelope, encode_envelope


@pytest.fixture
def six_rows():
    X = np.array([[0.0, 1.0], [1.0, 0.5], [2.0, 2.5], [3.0, 1.5], [4.0, 3.0], [5.0, 0.0]])
    y = np.array([0.1, 0.9, 2.2, 2.8, 4.1, 5.3])
    return X, y


class TestRoundTrip:

    def test_tree_buffer_roundtrip_matches_exactly(self, six_rows):
        X, y = six_rows
        mach = machine(DecisionTreeRegressorConfig(), X, y).fit(verbosity=0)
        Xnew = np.array([[0.5, 0.5], [2.5, 2.0], [4.5, 1.0]])
        before = predict(mach, Xnew)

        buf = io.BytesIO()
        save(buf, mach, compression="none", verbosity=0)
        buf.seek(0)
        loaded = machine(buf)

        np.testing.assert_array_equal(predict(loaded, Xnew), before)
        assert loaded.state == 1
        assert loaded.model == mach.model

    def test_buffer_and_file_roundtrips_agree(self, regression_data, workdir):
        X, y = regression_data
        model = PipelineConfig(steps=[StandardScalerConfig(), RidgeRegressorConfig()])
        mach = machine(model, X, y).fit(verbosity=0)

        buf = io.BytesIO()
        save(buf, mach, verbosity=0)
        buf.seek(0)
        from_buffer = machine(buf)

        save("pipe.joblib", mach, verbosity=0)
        from_file = machine("pipe.joblib")

        assert from_buffer.model == from_file.model == mach.model
        assert from_buffer.report == from_file.report == mach.report
        np.testing.assert_array_equal(from_buffer.predict(X), from_file.predict(X))
        np.testing.assert_allclose(from_file.predict(X), mach.predict(X))

    @pytest.mark.parametrize("fmt", ["joblib", "msgpack"])
    @pytest.mark.parametrize("compression", ["none", "gzip"])
    def test_formats_and_compression(self, regression_data, fmt, compression):
        X, y = regression_data
        mach = machine(DecisionTreeRegressorConfig(max_depth=4), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        result = save(buf, mach, format=fmt, compression=compression, verbosity=0)
        assert result.size == len(buf.getvalue())
        assert (buf.getvalue()[:2] == b"\x1f\x8b") == (compression == "gzip")
        buf.seek(0)
        np.testing.assert_array_equal(machine(buf).predict(X), mach.predict(X))

    def test_msgpack_envelope_top_level_keys(self, regression_data):
        import msgpack

        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        save(buf, mach, format="msgpack", verbosity=0)
        package = msgpack.unpackb(buf.getvalue(), raw=False)
        assert {"model", "fitresult", "report", MAGIC_KEY} <= set(package)
        assert all(isinstance(package[k], bytes) for k in ("model", "fitresult", "report"))

    def test_format_default_from_environment(self, regression_data, monkeypatch):
        monkeypatch.setenv("MLSERIAL_FORMAT", "msgpack")
        monkeypatch.setenv("MLSERIAL_COMPRESSION", "gzip")
        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        save(buf, mach, verbosity=0)
        import msgpack

        package = msgpack.unpackb(gzip.decompress(buf.getvalue()), raw=False)
        assert package["format"] == "msgpack"

    def test_invalid_options_are_rejected(self):
        with pytest.raises(ValueError):
            SaveOptions(format="bson")
        with pytest.raises(ValueError):
            SaveOptions(compresslevel=11)

    def test_save_logs_when_verbose(self, regression_data, caplog):
        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y).fit(verbosity=0)
        with caplog.at_level("INFO", logger="mlserial"):
            save(io.BytesIO(), mach, verbosity=1)
        assert any("Saved" in r.getMessage() for r in caplog.records)

    def test_save_result_hash(self, regression_data):
        import hashlib

        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        result = save(buf, mach, verbosity=0)
        assert result.sha256 == hashlib.sha256(buf.getvalue()).hexdigest()


class TestLoadErrors:

    def test_untrained_machine_writes_nothing(self, regression_data, workdir):
        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y)
        with pytest.raises(UntrainedMachineError):
            save("untrained.joblib", mach, verbosity=0)
        assert not (workdir / "untrained.joblib").exists()
        buf = io.BytesIO()
        with pytest.raises(UntrainedMachineError):
            save(buf, mach, verbosity=0)
        assert buf.getvalue() == b""

    def test_unbound_loaded_machine_cannot_predict_implicitly(self, regression_data):
        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        save(buf, mach, verbosity=0)
        buf.seek(0)
        loaded = machine(buf)
        with pytest.raises(InvalidArgumentError):
            loaded.predict()

    def test_unbound_loaded_composite_cannot_predict_implicitly(self, regression_data):
        X, y = regression_data
        model = StackConfig(
            metalearner=RidgeRegressorConfig(),
            models={"a": RidgeRegressorConfig(alpha=0.1), "b": DecisionTreeRegressorConfig(max_depth=2)},
        )
        mach = machine(model, X, y).fit(verbosity=0)
        buf = io.BytesIO()
        save(buf, mach, verbosity=0)
        buf.seek(0)
        loaded = machine(buf)
        with pytest.raises(InvalidArgumentError):
            loaded.predict()
        with pytest.raises(InvalidArgumentError):
            loaded.fitresult.operation("predict")()

    def test_corrupt_envelope(self):
        with pytest.raises(MachineLoadError):
            machine(io.BytesIO(b"definitely not a machine"))
        with pytest.raises(MachineLoadError):
            decode_envelope(b"")

    def test_foreign_joblib_payload(self):
        import joblib

        buf = io.BytesIO()
        joblib.dump({"model": 1, "fitresult": 2, "report": 3}, buf)
        with pytest.raises(MachineLoadError):
            decode_envelope(buf.getvalue())

    def test_wrong_schema_version(self, regression_data, monkeypatch):
        import mlserial.io.envelope as envelope

        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y).fit(verbosity=0)
        monkeypatch.setattr(envelope, "SCHEMA_VERSION", "0")
        payload = encode_envelope(mach.model, mach.fitresult, mach.report, SaveOptions()).content_bytes
        monkeypatch.undo()
        with pytest.raises(MachineLoadError):
            decode_envelope(payload)

    def test_non_model_handle_is_rejected(self):
        payload = encode_envelope("not a model", None, None, SaveOptions(format="joblib")).content_bytes
        with pytest.raises(MachineLoadError):
            machine(io.BytesIO(payload))

    def test_missing_file(self, workdir):
        with pytest.raises(FileNotFoundError):
            machine("nowhere.joblib")


class TestRebinding:

    def test_rebound_machine_predicts_on_bound_data(self, regression_data):
        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        save(buf, mach, verbosity=0)
        buf.seek(0)
        loaded = machine(buf, X[:10])
        np.testing.assert_allclose(loaded.predict(), mach.predict(X[:10]))

    def test_rebinding_validates_data(self, regression_data):
        X, y = regression_data
        mach = machine(RidgeRegressorConfig(), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        save(buf, mach, verbosity=0)

        buf.seek(0)
        with pytest.raises(InvalidArgumentError):
            machine(buf, X[:, :2], y)
        buf.seek(0)
        with pytest.raises(InvalidArgumentError):
            machine(buf, X, y[:5])
        buf.seek(0)
        with pytest.raises(InvalidArgumentError):
            machine(buf, X, y, X)

    def test_refit_overwrites_restored_parameters(self, classification_data):
        X, y = classification_data
        mach = machine(DecisionTreeClassifierConfig(max_depth=1), X, y).fit(verbosity=0)
        buf = io.BytesIO()
        save(buf, mach, verbosity=0)
        buf.seek(0)

        y_flipped = 1 - y
        loaded = machine(buf, X, y_flipped)
        restored = loaded.fitresult
        loaded.fit(verbosity=0)
        assert loaded.fitresult is not restored
        assert loaded.state == 2
        fresh = machine(DecisionTreeClassifierConfig(max_depth=1), X, y_flipped).fit(verbosity=0)
        np.testing.assert_array_equal(loaded.predict(X), fresh.predict(X))
