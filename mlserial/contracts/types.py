from __future__ import annotations

from typing import Literal

# Envelope encodings: joblib is the native Python object encoding, msgpack the
# cross-language binary one.
EnvelopeFormat = Literal["joblib", "msgpack"]

CompressionName = Literal["none", "gzip"]

MeasureName = Literal["rmse", "mae", "accuracy"]

OperationName = Literal["predict", "predict_proba", "transform"]
