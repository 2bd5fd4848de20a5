from __future__ import annotations

import logging
import warnings
from typing import Any, Optional

from mlserial.contracts.model_configs import ModelConfig
from mlserial.io.sidefiles import EmbeddedNative, SideFileRef, side_file_path

from .vendor import import_xgboost

logger = logging.getLogger(__name__)


class XGBoostHooks:
    """Save/restore hooks for ``xgboost.Booster`` fitresults.

    By default the booster goes to ``<stem>.<token>.xgboost.ubj`` and the
    envelope keeps a :class:`SideFileRef`. With ``xgboost_embed=True`` the raw
    UBJSON bytes are embedded instead and no side file is written.
    """

    tag = "xgboost"
    ext = "ubj"

    def save(
        self,
        model: ModelConfig,
        fitresult: Any,
        stem: Optional[str],
        *,
        xgboost_embed: bool = False,
        **kwargs: Any,
    ) -> Any:
        if xgboost_embed:
            return EmbeddedNative(raw=bytes(fitresult.save_raw(raw_format="ubj")), tag=self.tag)
        path = side_file_path(stem, self.tag, self.ext)
        if stem is None:
            warnings.warn(
                f"xgboost: destination has no file name; booster written to {path} in the working "
                "directory. Pass xgboost_embed=True to keep it inside the envelope.",
                UserWarning,
            )
        fitresult.save_model(str(path))
        logger.debug("Wrote %s side file %s", self.tag, path)
        return SideFileRef(path=str(path.resolve()), tag=self.tag)

    def restore(self, model: ModelConfig, persisted: Any, stem: Optional[str] = None) -> Any:
        if isinstance(persisted, SideFileRef):
            xgb = import_xgboost()
            booster = xgb.Booster()
            booster.load_model(str(persisted.resolve(stem)))
            return booster
        if isinstance(persisted, EmbeddedNative):
            xgb = import_xgboost()
            booster = xgb.Booster()
            booster.load_model(bytearray(persisted.raw))
            return booster
        # Not produced by save(): a live booster, e.g. from a plain pickle.
        return persisted
