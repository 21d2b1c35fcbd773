from __future__ import annotations
import numpy as np
from .base import BaseSplitUtils as U


class RandomHoldout:
	"""Seeded random holdout; the test side gets round(n * test_size) rows."""

	@staticmethod
	def split(n: int, test_size: float = 0.2, seed: int = 0) -> tuple[np.ndarray, np.ndarray]:
		frac = U.check_fraction(test_size)
		n = int(n)
		order = U.shuffle_rows(np.arange(n, dtype=np.int64), U.rng(int(seed)))
		k = int(round(n * frac))
		return np.sort(order[k:]), np.sort(order[:k])
