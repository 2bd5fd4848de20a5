from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .types import CompressionName, EnvelopeFormat


def default_format() -> str:
    return os.getenv("MLSERIAL_FORMAT", "joblib")


def default_compression() -> str:
    return os.getenv("MLSERIAL_COMPRESSION", "none")


class SaveOptions(BaseModel):
    """Envelope codec options.

    Defaults are read from ``MLSERIAL_FORMAT`` / ``MLSERIAL_COMPRESSION`` and
    validated like explicit values.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    format: EnvelopeFormat = Field(default_factory=default_format)
    compression: CompressionName = Field(default_factory=default_compression)
    compresslevel: int = Field(default=3, ge=1, le=9)

    @classmethod
    def resolve(
        cls,
        *,
        format: Optional[str] = None,
        compression: Optional[str] = None,
        compresslevel: Optional[int] = None,
    ) -> "SaveOptions":
        """Build options from keyword arguments, leaving unset ones at their defaults."""
        given: dict[str, Any] = {
            "format": format,
            "compression": compression,
            "compresslevel": compresslevel,
        }
        return cls(**{k: v for k, v in given.items() if v is not None})
