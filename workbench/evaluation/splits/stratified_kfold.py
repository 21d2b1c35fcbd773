from __future__ import annotations
import numpy as np
from .base import BaseSplitUtils as U


class StratifiedKFold:
	"""
	Seeded stratified k-fold: each class bin is shuffled, bins are laid end to
	end in label order (missing class first) and dealt round-robin, so every
	fold receives floor or ceil of each class's share.
	"""

	@staticmethod
	def splits(y, k: int = 10, seed: int = 0) -> list[tuple[np.ndarray, np.ndarray]]:
		ya = U.class_codes(y)
		k = U.check_folds(ya.shape[0], k)
		order = StratifiedKFold._stratified_order(ya, seed)
		return U.folds_from_order(order, k)

	@staticmethod
	def _stratified_order(ya: np.ndarray, seed: int) -> np.ndarray:
		r = U.rng(int(seed))
		labels, bins = U.class_bins(ya)
		parts: list[np.ndarray] = []
		for i in range(labels.shape[0]):
			lb = int(labels[i])
			parts.append(U.shuffle_rows(bins[lb], r))
		if len(parts) == 0:
			return np.zeros(0, dtype=np.int64)
		return np.concatenate(parts, axis=0).astype(np.int64, copy=False)
