from __future__ import annotations
import hashlib
import numpy as np
from numpy.random import Generator

class RngManager:
    """
    Deterministic seed source for resampling inside learners.
    Named child seeds are order-independent, so adding a fold or a member does
    not shift the randomness of the others:
      child_seed("stack/folds")       -> stable int seed
      child_generator("ensemble/3")   -> np.random.Generator seeded from that int
    """
    def __init__(self, seed: int | None):
        self._root = 0 if seed is None else int(seed) & 0xFFFFFFFF

    def _mix(self, name: str) -> int:
        h = hashlib.sha256(f"{self._root}:{name}".encode("utf-8")).digest()
        # 32 bits: sklearn and xgboost both accept uint32 seeds
        return int.from_bytes(h[:4], "little", signed=False)

    def child_seed(self, name: str) -> int:
        return self._mix(name)

    def child_generator(self, name: str) -> Generator:
        return np.random.default_rng(self._mix(name))

    def member_generators(self, n: int, base_name: str = "member") -> list[Generator]:
        return [self.child_generator(f"{base_name}_{i}") for i in range(n)]
