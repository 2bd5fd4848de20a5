"""Machine envelope serialization utilities.

An envelope is a dict package with the structure:

{
  "__mlserial_machine__": true,
  "schema_version": "1",
  "format": "joblib" | "msgpack",
  "model": <model handle>,
  "fitresult": <persistable fitresult>,
  "report": <sanitized report>,
}

``joblib`` envelopes dump the package directly. ``msgpack`` envelopes are a
msgpack map with the same keys whose ``model`` / ``fitresult`` / ``report``
values are joblib-pickled byte strings. Either may be gzip-compressed; the
codec and the compression are detected on load.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Tuple, Union
import gzip
import hashlib

import joblib
import msgpack

from mlserial.contracts.save_options import SaveOptions
from mlserial.errors import MachineLoadError

SCHEMA_VERSION = "1"
MAGIC_KEY = "__mlserial_machine__"

PAYLOAD_KEYS = ("model", "fitresult", "report")

_GZIP_MAGIC = b"\x1f\x8b"
_PICKLE_PROTO = 0x80


@dataclass
class SaveResult:
    content_bytes: bytes
    size: int
    sha256: str


def _hash_bytes(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()


def _pickle_bytes(obj: Any) -> bytes:
    buf = BytesIO()
    joblib.dump(obj, buf)
    return buf.getvalue()


def _unpickle_bytes(b: bytes) -> Any:
    return joblib.load(BytesIO(b))


def _joblib_compress_arg(options: SaveOptions) -> Any:
    if options.compression == "gzip":
        return ("gzip", options.compresslevel)
    return 0


def encode_envelope(model: Any, fitresult: Any, report: Any, options: SaveOptions) -> SaveResult:
    """Serialize a snapshot's model, fitresult and report to envelope bytes."""

    if options.format == "msgpack":
        package: Dict[str, Any] = {
            MAGIC_KEY: True,
            "schema_version": SCHEMA_VERSION,
            "format": "msgpack",
            "model": _pickle_bytes(model),
            "fitresult": _pickle_bytes(fitresult),
            "report": _pickle_bytes(report),
        }
        data = msgpack.packb(package, use_bin_type=True)
        if options.compression == "gzip":
            data = gzip.compress(data, compresslevel=options.compresslevel)
    else:
        package = {
            MAGIC_KEY: True,
            "schema_version": SCHEMA_VERSION,
            "format": "joblib",
            "model": model,
            "fitresult": fitresult,
            "report": report,
        }
        buf = BytesIO()
        joblib.dump(package, buf, compress=_joblib_compress_arg(options))
        data = buf.getvalue()

    return SaveResult(content_bytes=data, size=len(data), sha256=_hash_bytes(data))


def _looks_like_msgpack_map(b: bytes) -> bool:
    first = b[0]
    # fixmap (0x81..0x8f; 0x80 is the pickle PROTO opcode), map16, map32
    return (0x81 <= first <= 0x8F) or first in (0xDE, 0xDF)


def _validate_package(package: Any) -> Dict[str, Any]:
    if not isinstance(package, dict) or not package.get(MAGIC_KEY):
        raise MachineLoadError("Not a valid mlserial machine envelope")

    if str(package.get("schema_version")) != SCHEMA_VERSION:
        raise MachineLoadError(
            f"Incompatible schema_version: {package.get('schema_version')}, expected {SCHEMA_VERSION}"
        )

    missing = [k for k in PAYLOAD_KEYS if k not in package]
    if missing:
        raise MachineLoadError(f"Corrupt envelope: missing {missing}")
    return package


def decode_envelope(payload: Union[bytes, BytesIO]) -> Tuple[Any, Any, Any]:
    """Deserialize envelope bytes and validate; returns ``(model, fitresult, report)``."""

    data = payload.getvalue() if isinstance(payload, BytesIO) else bytes(payload)
    if not data:
        raise MachineLoadError("Empty machine envelope")

    if data[:2] == _GZIP_MAGIC:
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError) as e:
            raise MachineLoadError("Corrupt gzip-compressed machine envelope") from e
        if not data:
            raise MachineLoadError("Empty machine envelope")

    if data[0] == _PICKLE_PROTO:
        try:
            package = joblib.load(BytesIO(data))
        except Exception as e:
            raise MachineLoadError("Corrupt joblib machine envelope") from e
        package = _validate_package(package)
        return package["model"], package["fitresult"], package["report"]

    if _looks_like_msgpack_map(data):
        try:
            package = msgpack.unpackb(data, raw=False)
        except Exception as e:
            raise MachineLoadError("Corrupt msgpack machine envelope") from e
        package = _validate_package(package)
        try:
            return tuple(_unpickle_bytes(package[k]) for k in PAYLOAD_KEYS)  # type: ignore[return-value]
        except Exception as e:
            raise MachineLoadError("Corrupt msgpack machine envelope payload") from e

    raise MachineLoadError("Unrecognized machine envelope encoding")


__all__ = [
    "SCHEMA_VERSION",
    "MAGIC_KEY",
    "SaveResult",
    "encode_envelope",
    "decode_envelope",
]
