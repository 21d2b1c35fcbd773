from __future__ import annotations
import numpy as np
from .base import BaseSplitUtils as U


class KFold:
	"""Seeded, unstratified k-fold over n rows (used for numeric classes)."""

	@staticmethod
	def splits(n: int, k: int = 10, seed: int = 0) -> list[tuple[np.ndarray, np.ndarray]]:
		n = int(n)
		k = U.check_folds(n, k)
		order = U.shuffle_rows(np.arange(n, dtype=np.int64), U.rng(int(seed)))
		return U.folds_from_order(order, k)
