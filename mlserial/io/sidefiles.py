"""Markers for opaque native state persisted outside the envelope."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mlserial.errors import SideFileNotFoundError
from mlserial.io.naming import ensure_stem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SideFileRef:
    """Reference to a side file holding native fitted state.

    ``path`` is where the file was written; ``tag`` names the library that
    wrote it (e.g. ``"xgboost"``).
    """

    path: str
    tag: str

    @property
    def name(self) -> str:
        return Path(self.path).name

    def resolve(self, stem: Optional[str] = None) -> Path:
        """Locate the side file.

        Looks next to the load source first (so an envelope moved together with
        its side files still restores), then at the recorded path.
        """
        candidates = []
        if stem is not None:
            candidates.append(Path(stem).parent / self.name)
        candidates.append(Path(self.path))
        for p in candidates:
            if p.exists():
                return p
        raise SideFileNotFoundError(
            f"Side file for {self.tag} state not found (looked in: {', '.join(str(c) for c in candidates)})."
        )


@dataclass(frozen=True)
class EmbeddedNative:
    """Native state embedded as raw bytes instead of a side file."""

    raw: bytes
    tag: str


def side_file_path(stem: Optional[str], tag: str, ext: str) -> Path:
    """``<stem>.<token>.<tag>.<ext>``; the token keeps several members of one save apart."""
    token = uuid.uuid4().hex[:8]
    path = Path(f"{ensure_stem(stem)}.{token}.{tag}.{ext.lstrip('.')}")
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    logger.debug("Allocated side file %s", path)
    return path


__all__ = ["SideFileRef", "EmbeddedNative", "side_file_path"]
