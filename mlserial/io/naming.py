from __future__ import annotations

import os
import uuid
from typing import Any, Optional


def filename_stem(destination: Any) -> Optional[str]:
    """Naming stem for side files derived from a save/load destination.

    - path (``str`` / ``os.PathLike``): the path without its extension
    - file object opened on a named file: its name without extension
    - anything else (in-memory buffers, ``None``): ``None``
    """
    if destination is None:
        return None
    if isinstance(destination, (str, os.PathLike)):
        return os.path.splitext(os.fspath(destination))[0]
    name = getattr(destination, "name", None)
    if isinstance(name, str) and name and not name.startswith("<"):
        return os.path.splitext(name)[0]
    return None


def ensure_stem(stem: Optional[str]) -> str:
    """Return ``stem``, or a random token in the working directory when there is none."""
    return stem if stem is not None else uuid.uuid4().hex


__all__ = ["filename_stem", "ensure_stem"]
